from rest_framework import serializers
from .models import DesignerProfile, VendorProfile


class DesignerProfileSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)

    class Meta:
        model = DesignerProfile
        fields = [
            'id', 'user', 'username', 'display_name', 'bio', 'profile_image', 'logo', 'studio',
            'city', 'region', 'website', 'specialties', 'team', 'contact_info', 'followers', 'views',
            'onboarding_step', 'onboarding_complete', 'created_at', 'updated_at'
        ]
        read_only_fields = ['followers', 'views', 'created_at', 'updated_at']

    def validate_display_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Designer name is required')
        return value.strip()

    def validate_specialties(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Specialties must be a list')
        return value


class DesignerOnboardingSerializer(serializers.ModelSerializer):
    """Fields a designer fills in while onboarding"""

    class Meta:
        model = DesignerProfile
        fields = ['display_name', 'bio', 'profile_image', 'logo', 'studio', 'city', 'region', 'website',
                  'specialties', 'team', 'contact_info', 'onboarding_step', 'onboarding_complete']

    def validate(self, attrs):
        if attrs.get('onboarding_step') == 'done':
            attrs['onboarding_complete'] = True
        return attrs


class VendorProfileSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = VendorProfile
        fields = [
            'id', 'user', 'username', 'company_name', 'description', 'logo', 'website',
            'contact_email', 'contact_phone', 'followers', 'views', 'is_verified', 'product_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['followers', 'views', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        annotated = getattr(obj, 'product_count', None)
        if annotated is not None:
            return annotated
        return obj.products.count()

    def validate_company_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Company name is required')
        return value.strip()
