from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, F
from django.shortcuts import get_object_or_404
from folio.core.roles import get_user_role, ROLE_ADMIN, ROLE_DESIGNER, ROLE_VENDOR
from folio.core.storage import upload_file, StorageError
from folio.core.utils import create_audit_log
from .models import Video
from .serializers import VideoSerializer

UPLOAD_ROLES = (ROLE_ADMIN, ROLE_DESIGNER, ROLE_VENDOR)


def can_manage_video(user, video):
    return get_user_role(user) == ROLE_ADMIN or (video.uploaded_by_id is not None and video.uploaded_by_id == user.id)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def video_list_create(request):
    """List published videos (plus your own) or add one by URL"""
    if request.method == 'GET':
        videos = Video.objects.select_related('uploaded_by', 'designer')
        if get_user_role(request.user) != ROLE_ADMIN:
            videos = videos.filter(Q(is_published=True) | Q(uploaded_by=request.user))
        search = request.query_params.get('search', '').strip()
        if search:
            videos = videos.filter(Q(title__icontains=search) | Q(description__icontains=search))
        designer = request.query_params.get('designer')
        if designer:
            videos = videos.filter(designer_id=designer)
        serializer = VideoSerializer(videos, many=True)
        return Response(serializer.data)
    else:
        if get_user_role(request.user) not in UPLOAD_ROLES:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = VideoSerializer(data=request.data)
        if serializer.is_valid():
            video = serializer.save(uploaded_by=request.user)
            create_audit_log(request=request, action='create', model_name='Video', object_id=video.id,
                             object_name=video.title)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def video_detail(request, pk):
    """Retrieve (counts a view), update or delete a video"""
    video = get_object_or_404(Video.objects.select_related('uploaded_by', 'designer'), pk=pk)

    if request.method == 'GET':
        if not video.is_published and not can_manage_video(request.user, video):
            return Response({'error': 'Video not found'}, status=status.HTTP_404_NOT_FOUND)
        Video.objects.filter(pk=video.pk).update(views=F('views') + 1)
        video.views += 1
        return Response(VideoSerializer(video).data)

    if not can_manage_video(request.user, video):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = VideoSerializer(video, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Video', object_id=video.id,
                         object_name=video.title)
        video.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def video_upload(request):
    """Upload a video file ('file', optional 'thumbnail') and create the video"""
    if get_user_role(request.user) not in UPLOAD_ROLES:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    uploaded_file = request.FILES.get('file')
    if uploaded_file is None:
        return Response({'error': 'No file provided'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        stored = upload_file(uploaded_file, folder='videos')
        thumbnail = request.FILES.get('thumbnail')
        thumbnail_url = upload_file(thumbnail, folder='videos')['url'] if thumbnail is not None else ''
    except StorageError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    data = {key: request.data.get(key) for key in ('title', 'description', 'duration', 'designer', 'project')
            if request.data.get(key) not in (None, '')}
    data.setdefault('title', stored['name'])
    data['video_url'] = stored['url']
    if thumbnail_url:
        data['thumbnail_url'] = thumbnail_url

    serializer = VideoSerializer(data=data)
    if serializer.is_valid():
        video = serializer.save(uploaded_by=request.user)
        create_audit_log(request=request, action='upload', model_name='Video', object_id=video.id,
                         object_name=video.title, object_reference=stored['blob_name'])
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
