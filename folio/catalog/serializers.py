from rest_framework import serializers
from django.utils.text import slugify
from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(required=False)

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'parent', 'description', 'is_active', 'created_at', 'updated_at']

    def validate(self, attrs):
        if not attrs.get('slug') and attrs.get('name'):
            attrs['slug'] = slugify(attrs['name'])
        return attrs


class ProductListSerializer(serializers.ModelSerializer):
    """Compact product representation for lists, boards and search"""
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)
    category_slug = serializers.CharField(source='category.slug', read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'brand', 'vendor', 'vendor_name', 'category', 'category_slug', 'price',
                  'image_url', 'tags', 'status', 'like_count', 'save_count', 'updated_at']


class ProductSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True)
    category_slug = serializers.CharField(source='category.slug', read_only=True)
    tagged_by_username = serializers.CharField(source='tagged_by.username', read_only=True)
    dimensions = serializers.ReadOnlyField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'vendor', 'vendor_name', 'category', 'category_name', 'category_slug', 'brand',
            'description', 'price', 'image_url', 'product_url', 'tags', 'width_in', 'depth_in', 'height_in',
            'dimensions', 'status', 'rejection_reason', 'tagged_by', 'tagged_by_username', 'view_count',
            'scan_count', 'like_count', 'save_count', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['status', 'rejection_reason', 'tagged_by', 'view_count', 'scan_count',
                            'like_count', 'save_count', 'created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Product name is required')
        return value.strip()

    def validate_tags(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Tags must be a list of strings')
        return [str(tag).strip() for tag in value if str(tag).strip()]

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate(self, attrs):
        for field in ('width_in', 'depth_in', 'height_in'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'Dimensions cannot be negative'})
        return attrs


class ProductRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ProductEngageSerializer(serializers.Serializer):
    ACTION_FIELDS = {
        'view': 'view_count',
        'scan': 'scan_count',
        'like': 'like_count',
        'save': 'save_count',
    }

    action = serializers.ChoiceField(choices=list(ACTION_FIELDS.keys()))
