from rest_framework import serializers
from .models import Video


class VideoSerializer(serializers.ModelSerializer):
    uploaded_by_username = serializers.CharField(source='uploaded_by.username', read_only=True)
    designer_name = serializers.CharField(source='designer.display_name', read_only=True)
    video_url = serializers.CharField(max_length=500)
    thumbnail_url = serializers.CharField(max_length=500, required=False, allow_blank=True)

    class Meta:
        model = Video
        fields = ['id', 'title', 'description', 'video_url', 'thumbnail_url', 'duration', 'uploaded_by',
                  'uploaded_by_username', 'designer', 'designer_name', 'project', 'tags', 'views',
                  'is_published', 'created_at', 'updated_at']
        read_only_fields = ['uploaded_by', 'views', 'created_at', 'updated_at']

    def validate_tags(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Tags must be a list of strings')
        return [str(tag).strip() for tag in value if str(tag).strip()]
