from django.db import models
from folio.core.models import User


class DesignerProfile(models.Model):
    """Public designer profile; admins can create one before the designer has an account"""
    ONBOARDING_STEPS = [
        ('profile', 'Profile'),
        ('projects', 'Projects'),
        ('team', 'Team'),
        ('done', 'Done'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, null=True, blank=True, related_name='designer_profile')
    display_name = models.CharField(max_length=200)
    bio = models.TextField(blank=True)
    profile_image = models.URLField(blank=True)
    logo = models.URLField(blank=True)
    studio = models.CharField(max_length=200, blank=True)
    city = models.CharField(max_length=100, blank=True)
    region = models.CharField(max_length=100, blank=True)
    website = models.URLField(blank=True)
    specialties = models.JSONField(default=list, blank=True)
    team = models.JSONField(default=list, blank=True)
    contact_info = models.JSONField(default=dict, blank=True)
    followers = models.PositiveIntegerField(default=0)
    views = models.PositiveIntegerField(default=0)
    onboarding_step = models.CharField(max_length=20, choices=ONBOARDING_STEPS, default='profile')
    onboarding_complete = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.display_name

    class Meta:
        db_table = 'designer_profiles'
        ordering = ['display_name']


class VendorProfile(models.Model):
    """Vendor (brand/showroom) profile"""
    user = models.OneToOneField(User, on_delete=models.CASCADE, null=True, blank=True, related_name='vendor_profile')
    company_name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    logo = models.URLField(blank=True)
    website = models.URLField(blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)
    followers = models.PositiveIntegerField(default=0)
    views = models.PositiveIntegerField(default=0)
    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name

    class Meta:
        db_table = 'vendor_profiles'
        ordering = ['company_name']
