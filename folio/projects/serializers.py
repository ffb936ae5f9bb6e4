import json

from rest_framework import serializers
from folio.core.serializers import UserSummarySerializer
from folio.parties.models import VendorProfile
from .models import Project, ProjectParticipant, Room, Selection, ProjectImage, ImageTag, Quote
from .room_templates import ROOM_TYPES
from .tile_sizing import compute_tile_size


class ProjectListSerializer(serializers.ModelSerializer):
    designer_name = serializers.CharField(source='designer.display_name', read_only=True)
    room_count = serializers.SerializerMethodField()
    selection_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'title', 'designer', 'designer_name', 'owner', 'status', 'stage', 'project_type',
                  'client_type', 'budget_band', 'city', 'region_state', 'cover_image', 'room_count',
                  'selection_count', 'created_at', 'updated_at']

    def get_room_count(self, obj):
        if hasattr(obj, 'room_count'):
            return obj.room_count
        return obj.rooms.count()

    def get_selection_count(self, obj):
        if hasattr(obj, 'selection_count'):
            return obj.selection_count
        return obj.selections.count()


class ProjectSerializer(serializers.ModelSerializer):
    designer_detail = UserSummarySerializer(source='designer', read_only=True)
    owner_detail = UserSummarySerializer(source='owner', read_only=True)
    rooms = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'title', 'description', 'designer', 'designer_detail', 'owner', 'owner_detail',
                  'status', 'stage', 'project_type', 'client_type', 'budget_band', 'client_name', 'city',
                  'region_state', 'cover_image', 'rooms', 'created_at', 'updated_at']
        read_only_fields = ['designer', 'created_at', 'updated_at']

    def get_rooms(self, obj):
        return RoomSerializer(obj.rooms.all(), many=True).data

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError('Project title is required')
        return value.strip()


class ProjectParticipantSerializer(serializers.ModelSerializer):
    user_detail = UserSummarySerializer(source='user', read_only=True)
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)

    class Meta:
        model = ProjectParticipant
        fields = ['id', 'project', 'user', 'user_detail', 'vendor', 'vendor_name', 'side', 'role',
                  'created_at', 'updated_at']
        read_only_fields = ['project', 'created_at', 'updated_at']

    def validate(self, attrs):
        side = attrs.get('side', getattr(self.instance, 'side', 'DESIGNER'))
        vendor = attrs.get('vendor', getattr(self.instance, 'vendor', None))
        if side == 'VENDOR' and vendor is None:
            raise serializers.ValidationError({'vendor': 'Vendor-side participants need a vendor'})
        return attrs


class RoomSerializer(serializers.ModelSerializer):
    selection_count = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = ['id', 'project', 'name', 'room_type', 'paint_color_name', 'paint_color_hex', 'sort_order',
                  'selection_count', 'created_at', 'updated_at']
        read_only_fields = ['project', 'created_at', 'updated_at']

    def get_selection_count(self, obj):
        return obj.selections.count()

    def validate_room_type(self, value):
        if value in (None, ''):
            return None
        value = value.upper()
        if value not in ROOM_TYPES:
            raise serializers.ValidationError(f"Unknown room type '{value}'")
        return value

    def validate_paint_color_hex(self, value):
        if value and (len(value) != 7 or not value.startswith('#')):
            raise serializers.ValidationError('Color must look like #RRGGBB')
        return value


class SelectionSerializer(serializers.ModelSerializer):
    room_name = serializers.CharField(source='room.name', read_only=True)
    tile_size = serializers.SerializerMethodField()

    class Meta:
        model = Selection
        fields = [
            'id', 'project', 'room', 'room_name', 'product', 'vendor', 'created_by', 'photo', 'product_name',
            'vendor_name', 'color_finish', 'notes', 'phase_of_use', 'gps_location', 'source', 'quantity',
            'unit_price', 'product_url', 'spec_sheet_url', 'spec_sheet_name', 'category', 'tags', 'slot_key',
            'ui_meta', 'capture_step', 'tile_size', 'created_at', 'updated_at'
        ]
        read_only_fields = ['project', 'created_by', 'slot_key', 'capture_step', 'created_at', 'updated_at']

    def get_tile_size(self, obj):
        return compute_tile_size(obj)

    def validate_tags(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Tags must be a list of strings')
        return [str(tag).strip() for tag in value if str(tag).strip()]

    def validate_ui_meta(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('ui_meta must be an object')
        # slotKey mirrors slot_key, which only changes through the slot endpoint
        value = dict(value)
        value.pop('slotKey', None)
        if self.instance is not None and self.instance.slot_key:
            value['slotKey'] = self.instance.slot_key
        return value

    def validate_unit_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value

    def validate(self, attrs):
        room = attrs.get('room')
        project = self.context.get('project') or getattr(self.instance, 'project', None)
        if room is not None and project is not None and room.project_id != project.id:
            raise serializers.ValidationError({'room': 'Room does not belong to this project'})
        return attrs


class SlotSerializer(serializers.Serializer):
    slot_key = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    reassign = serializers.BooleanField(required=False, default=False)


class SizeSerializer(serializers.Serializer):
    SIZE_CHOICES = ['L', 'M', 'S', 'large', 'medium', 'small', 'auto']

    size = serializers.ChoiceField(choices=SIZE_CHOICES)


class CaptureSerializer(serializers.Serializer):
    project = serializers.PrimaryKeyRelatedField(queryset=Project.objects.all())
    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all(), required=False, allow_null=True)
    selection = serializers.PrimaryKeyRelatedField(queryset=Selection.objects.all(), required=False, allow_null=True)
    photo = serializers.URLField(required=False, allow_blank=True, max_length=500)
    gps_location = serializers.JSONField(required=False, allow_null=True)
    source = serializers.ChoiceField(choices=['camera', 'upload'], required=False, default='camera')


class SpecifySerializer(serializers.Serializer):
    product_name = serializers.CharField(max_length=200)
    vendor_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    vendor = serializers.PrimaryKeyRelatedField(queryset=VendorProfile.objects.all(),
                                                required=False, allow_null=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    quantity = serializers.IntegerField(required=False, min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True)
    phase_of_use = serializers.CharField(max_length=50, required=False, allow_blank=True)
    color_finish = serializers.CharField(max_length=200, required=False, allow_blank=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    product_url = serializers.URLField(required=False, allow_blank=True, max_length=500)


class AssignSerializer(serializers.Serializer):
    room = serializers.PrimaryKeyRelatedField(queryset=Room.objects.all())
    slot_key = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    reassign = serializers.BooleanField(required=False, default=False)


class ImageTagSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = ImageTag
        fields = ['id', 'image', 'product', 'product_name', 'x', 'y', 'created_by', 'created_at']
        read_only_fields = ['image', 'created_by', 'created_at']

    def validate_x(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('x must be between 0 and 100')
        return value

    def validate_y(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('y must be between 0 and 100')
        return value


class ProjectImageSerializer(serializers.ModelSerializer):
    # storage-relative (/media/...) when uploads go to local storage
    url = serializers.CharField(max_length=500)
    tags = ImageTagSerializer(many=True, read_only=True)

    class Meta:
        model = ProjectImage
        fields = ['id', 'project', 'url', 'name', 'room_label', 'width', 'height', 'uploaded_by', 'tags',
                  'created_at', 'updated_at']
        read_only_fields = ['project', 'uploaded_by', 'created_at', 'updated_at']


class QuoteSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.company_name', read_only=True)
    payload = serializers.JSONField(required=False, allow_null=True)

    class Meta:
        model = Quote
        fields = ['id', 'project', 'vendor', 'vendor_name', 'created_by', 'room', 'selection', 'file_url',
                  'file_name', 'total_cents', 'currency', 'lead_time_days', 'terms_short', 'version',
                  'supersedes', 'status', 'expires_at', 'payload', 'created_at', 'updated_at']
        read_only_fields = ['project', 'vendor', 'created_by', 'file_url', 'file_name', 'version', 'status',
                            'created_at', 'updated_at']

    def validate_currency(self, value):
        value = (value or '').strip().upper()
        if len(value) != 3 or not value.isalpha():
            raise serializers.ValidationError('Currency must be a 3-letter code')
        return value

    def validate_payload(self, value):
        # multipart forms send the structured quote as a JSON string
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                raise serializers.ValidationError('payload must be valid JSON')
        return value

    def validate(self, attrs):
        project = self.context.get('project')
        for name in ('room', 'selection', 'supersedes'):
            related = attrs.get(name)
            if related is not None and project is not None and related.project_id != project.id:
                raise serializers.ValidationError({name: f'{name.capitalize()} does not belong to this project'})
        supersedes = attrs.get('supersedes')
        vendor_id = self.context.get('vendor_id')
        if supersedes is not None and vendor_id is not None and supersedes.vendor_id != vendor_id:
            raise serializers.ValidationError({'supersedes': 'Only your own quotes can be revised'})
        return attrs


class QuoteStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Quote.STATUS_CHOICES)
