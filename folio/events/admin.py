from django.contrib import admin
from .models import Event, EventProduct, EventRSVP


class EventProductInline(admin.TabularInline):
    model = EventProduct
    extra = 0
    raw_id_fields = ['product']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'start_date', 'location', 'status', 'is_public', 'is_approved', 'weight',
                    'sponsorship_tier', 'view_count']
    list_filter = ['status', 'is_approved', 'is_public', 'weight', 'sponsorship_tier', 'is_featured']
    search_fields = ['title', 'slug', 'location', 'host_name']
    prepopulated_fields = {'slug': ('title',)}
    readonly_fields = ['view_count', 'impression_count', 'click_count', 'save_count', 'booking_count',
                       'created_at', 'updated_at']
    inlines = [EventProductInline]
    actions = ['approve_events']

    @admin.action(description='Approve selected events')
    def approve_events(self, request, queryset):
        updated = queryset.update(is_approved=True)
        self.message_user(request, f'{updated} events approved')


@admin.register(EventRSVP)
class EventRSVPAdmin(admin.ModelAdmin):
    list_display = ['event', 'user', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['event__title', 'user__username']
