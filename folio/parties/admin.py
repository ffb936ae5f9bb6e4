from django.contrib import admin
from .models import DesignerProfile, VendorProfile


@admin.register(DesignerProfile)
class DesignerProfileAdmin(admin.ModelAdmin):
    list_display = ['display_name', 'user', 'studio', 'city', 'followers', 'views', 'onboarding_complete']
    list_filter = ['onboarding_complete', 'onboarding_step', 'city']
    search_fields = ['display_name', 'studio', 'user__username', 'user__email']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(VendorProfile)
class VendorProfileAdmin(admin.ModelAdmin):
    list_display = ['company_name', 'user', 'contact_email', 'is_verified', 'followers', 'views']
    list_filter = ['is_verified']
    search_fields = ['company_name', 'contact_email', 'user__username']
    readonly_fields = ['created_at', 'updated_at']
