from rest_framework import serializers
from django.utils.text import slugify
from folio.catalog.models import Product
from .models import Event, EventRSVP
from .ranking import compute_priority_score, suggest_size_token

RANKING_FIELDS = ('base_score', 'is_featured', 'is_boosted', 'sponsorship_tier')


def unique_event_slug(title, exclude_pk=None):
    base = slugify(title)[:200] or 'event'
    slug = base
    counter = 2
    queryset = Event.objects.all()
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)
    while queryset.filter(slug=slug).exists():
        slug = f'{base}-{counter}'
        counter += 1
    return slug


class EventListSerializer(serializers.ModelSerializer):
    """Compact event for the listing, feed and search"""
    rsvp_count = serializers.SerializerMethodField()
    is_sponsored = serializers.ReadOnlyField()
    priority_score = serializers.SerializerMethodField()
    size_token = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = ['id', 'title', 'slug', 'start_date', 'end_date', 'location', 'cover_image', 'host_type',
                  'host_name', 'event_types', 'weight', 'sponsorship_tier', 'is_sponsored', 'is_featured',
                  'is_virtual', 'is_public', 'is_approved', 'status', 'view_count', 'rsvp_count',
                  'priority_score', 'size_token']

    def get_rsvp_count(self, obj):
        if getattr(obj, 'rsvp_count', None) is not None:
            return obj.rsvp_count
        return obj.rsvps.count()

    def get_priority_score(self, obj):
        return round(compute_priority_score(obj), 2)

    def get_size_token(self, obj):
        return suggest_size_token(obj.weight, obj.sponsorship_tier, compute_priority_score(obj))


class EventSerializer(serializers.ModelSerializer):
    rsvp_count = serializers.SerializerMethodField()
    is_sponsored = serializers.ReadOnlyField()
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)
    product_ids = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(status='approved'), many=True, write_only=True, required=False
    )
    featured_products = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            'id', 'title', 'slug', 'description', 'start_date', 'end_date', 'location', 'cover_image',
            'host_type', 'host_name', 'created_by', 'created_by_username', 'featured_designer', 'max_attendees',
            'is_public', 'is_approved', 'status', 'event_types', 'weight', 'sponsorship_tier', 'is_sponsored',
            'base_score', 'is_featured', 'is_boosted', 'is_virtual', 'includes_food', 'view_count',
            'impression_count', 'click_count', 'save_count', 'booking_count', 'rsvp_count', 'product_ids',
            'featured_products', 'created_at', 'updated_at'
        ]
        read_only_fields = ['slug', 'created_by', 'is_approved', 'view_count', 'impression_count', 'click_count',
                            'save_count', 'booking_count', 'created_at', 'updated_at']

    def get_rsvp_count(self, obj):
        if getattr(obj, 'rsvp_count', None) is not None:
            return obj.rsvp_count
        return obj.rsvps.count()

    def get_featured_products(self, obj):
        from folio.catalog.serializers import ProductListSerializer
        return ProductListSerializer(obj.products.all(), many=True).data

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError('Event title is required')
        return value.strip()

    def validate_event_types(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('event_types must be a list')
        normalized = [str(item).strip().upper() for item in value if str(item).strip()]
        unknown = [item for item in normalized if item not in Event.EVENT_TYPES]
        if unknown:
            raise serializers.ValidationError(f"Unknown event types: {', '.join(unknown)}")
        return normalized

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start and end and end < start:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        if not self.context.get('can_rank'):
            # Ranking inputs are set by admins only
            for name in RANKING_FIELDS:
                attrs.pop(name, None)
        return attrs

    def create(self, validated_data):
        products = validated_data.pop('product_ids', [])
        validated_data['slug'] = unique_event_slug(validated_data['title'])
        event = Event.objects.create(**validated_data)
        event.products.set(products)
        return event

    def update(self, instance, validated_data):
        products = validated_data.pop('product_ids', None)
        event = super().update(instance, validated_data)
        if products is not None:
            event.products.set(products)
        return event


class EventRSVPSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, value):
        value = str(value or '').strip().upper()
        if value not in dict(EventRSVP.STATUS_CHOICES):
            raise serializers.ValidationError('Bad status')
        return value


class EventApproveSerializer(serializers.Serializer):
    approved = serializers.BooleanField(required=False, default=True)


class ConciergeParseSerializer(serializers.Serializer):
    input = serializers.CharField(max_length=5000, trim_whitespace=True,
                                  error_messages={'blank': 'Invalid input. Please provide a text description of your event.'})
