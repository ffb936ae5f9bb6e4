from django.urls import path
from .views import (
    project_list_create, project_detail, project_participants, project_participant_detail,
    room_list_create, room_detail, room_selections, room_board,
    project_selections, project_images, project_image_detail, image_tags, project_export,
    project_quotes, quote_status,
    selection_detail, selection_slot, selection_size,
    selection_capture, selection_specify, selection_assign, selection_back,
    room_templates
)

urlpatterns = [
    # Project endpoints
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/<int:pk>/', project_detail, name='project-detail'),
    path('projects/<int:pk>/participants/', project_participants, name='project-participants'),
    path('projects/<int:pk>/participants/<int:participant_id>/', project_participant_detail,
         name='project-participant-detail'),

    # Room endpoints
    path('projects/<int:pk>/rooms/', room_list_create, name='room-list-create'),
    path('projects/<int:pk>/rooms/<int:room_id>/', room_detail, name='room-detail'),
    path('projects/<int:pk>/rooms/<int:room_id>/selections/', room_selections, name='room-selections'),
    path('projects/<int:pk>/rooms/<int:room_id>/board/', room_board, name='room-board'),

    path('projects/<int:pk>/selections/', project_selections, name='project-selections'),
    path('projects/<int:pk>/images/', project_images, name='project-images'),
    path('projects/<int:pk>/images/<int:image_id>/', project_image_detail, name='project-image-detail'),
    path('projects/<int:pk>/images/<int:image_id>/tags/', image_tags, name='image-tags'),
    path('projects/<int:pk>/export/', project_export, name='project-export'),
    path('projects/<int:pk>/quotes/', project_quotes, name='project-quotes'),
    path('projects/<int:pk>/quotes/<int:quote_id>/status/', quote_status, name='quote-status'),

    # Selection endpoints (capture must come before <pk>)
    path('selections/capture/', selection_capture, name='selection-capture'),
    path('selections/<int:pk>/', selection_detail, name='selection-detail'),
    path('selections/<int:pk>/slot/', selection_slot, name='selection-slot'),
    path('selections/<int:pk>/size/', selection_size, name='selection-size'),
    path('selections/<int:pk>/specify/', selection_specify, name='selection-specify'),
    path('selections/<int:pk>/assign/', selection_assign, name='selection-assign'),
    path('selections/<int:pk>/back/', selection_back, name='selection-back'),

    path('room-templates/', room_templates, name='room-templates'),
]
