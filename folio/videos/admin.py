from django.contrib import admin
from .models import Video


@admin.register(Video)
class VideoAdmin(admin.ModelAdmin):
    list_display = ['title', 'designer', 'uploaded_by', 'views', 'is_published', 'created_at']
    list_filter = ['is_published']
    search_fields = ['title', 'description']
    readonly_fields = ['views', 'created_at', 'updated_at']
