from django.db import models
from folio.core.models import User


class Video(models.Model):
    """Video on the Watch page (project walkthroughs, product demos)"""
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    video_url = models.URLField(max_length=500)
    thumbnail_url = models.URLField(max_length=500, blank=True)
    duration = models.PositiveIntegerField(null=True, blank=True, help_text="Length in seconds")
    uploaded_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='videos')
    designer = models.ForeignKey('parties.DesignerProfile', on_delete=models.SET_NULL, null=True, blank=True, related_name='videos')
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='videos')
    tags = models.JSONField(default=list, blank=True)
    views = models.PositiveIntegerField(default=0)
    is_published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'videos'
        ordering = ['-created_at']
