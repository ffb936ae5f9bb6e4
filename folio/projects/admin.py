from django.contrib import admin
from .models import Project, ProjectParticipant, Room, Selection, ProjectImage, ImageTag, Quote


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ['name', 'room_type', 'paint_color_name', 'paint_color_hex', 'sort_order']


class ProjectParticipantInline(admin.TabularInline):
    model = ProjectParticipant
    extra = 0
    fields = ['user', 'vendor', 'side', 'role']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['title', 'designer', 'owner', 'status', 'stage', 'project_type', 'budget_band', 'updated_at']
    list_filter = ['status', 'stage', 'project_type', 'client_type', 'budget_band']
    search_fields = ['title', 'client_name', 'city', 'designer__username']
    inlines = [RoomInline, ProjectParticipantInline]


@admin.register(Selection)
class SelectionAdmin(admin.ModelAdmin):
    list_display = ['product_name', 'project', 'room', 'slot_key', 'source', 'capture_step', 'created_at']
    list_filter = ['source', 'capture_step', 'phase_of_use']
    search_fields = ['product_name', 'vendor_name', 'project__title']
    readonly_fields = ['created_at', 'updated_at']


class ImageTagInline(admin.TabularInline):
    model = ImageTag
    extra = 0
    fields = ['product', 'x', 'y', 'created_by']


@admin.register(ProjectImage)
class ProjectImageAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'room_label', 'width', 'height', 'created_at']
    search_fields = ['name', 'project__title']
    inlines = [ImageTagInline]


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ['project', 'vendor', 'version', 'status', 'total_cents', 'currency', 'created_at']
    list_filter = ['status', 'currency']
    search_fields = ['project__title', 'vendor__company_name', 'terms_short']
    readonly_fields = ['created_at', 'updated_at']
