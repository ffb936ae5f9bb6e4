from django.urls import path
from .views import video_list_create, video_detail, video_upload

urlpatterns = [
    path('videos/', video_list_create, name='video-list-create'),
    path('videos/upload/', video_upload, name='video-upload'),
    path('videos/<int:pk>/', video_detail, name='video-detail'),
]
