from django.contrib import admin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'parent', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'vendor', 'category', 'price', 'status', 'tagged_by', 'is_active', 'updated_at']
    list_filter = ['status', 'is_active', 'category']
    search_fields = ['name', 'brand', 'vendor__company_name']
    readonly_fields = ['view_count', 'scan_count', 'like_count', 'save_count', 'created_at', 'updated_at']
    actions = ['approve_products', 'reject_products']

    @admin.action(description='Approve selected products')
    def approve_products(self, request, queryset):
        updated = queryset.update(status='approved', rejection_reason='')
        self.message_user(request, f'{updated} products approved')

    @admin.action(description='Reject selected products')
    def reject_products(self, request, queryset):
        updated = queryset.update(status='rejected')
        self.message_user(request, f'{updated} products rejected')
