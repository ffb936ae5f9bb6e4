from django.db import models
from decimal import Decimal
from folio.core.models import User


class Category(models.Model):
    """Product categories; the slug doubles as the room-template category key"""
    name = models.CharField(max_length=200, db_index=True)
    slug = models.SlugField(max_length=100, unique=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """Vendor product; designer-tagged products wait for admin approval"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    vendor = models.ForeignKey('parties.VendorProfile', on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    brand = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    product_url = models.URLField(max_length=500, blank=True)
    tags = models.JSONField(default=list, blank=True)
    width_in = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    depth_in = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    height_in = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    rejection_reason = models.TextField(blank=True)
    tagged_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='tagged_products')
    view_count = models.PositiveIntegerField(default=0)
    scan_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    save_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def dimensions(self):
        """Dimensions in the shape tile sizing expects, or None when unknown"""
        if self.width_in is None and self.depth_in is None and self.height_in is None:
            return None
        return {
            'widthIn': float(self.width_in or Decimal('0')),
            'depthIn': float(self.depth_in or Decimal('0')),
            'heightIn': float(self.height_in or Decimal('0')),
        }

    @property
    def engagement_total(self):
        return self.scan_count + self.like_count + self.save_count

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['status', 'is_active'], name='product_status_idx'),
            models.Index(fields=['-updated_at'], name='product_updated_idx'),
        ]
