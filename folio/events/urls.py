from django.urls import path
from .views import (
    event_list_create, event_detail, event_rsvp, event_approve, pending_events,
    events_feed, trending_events, concierge_parse
)

urlpatterns = [
    # Event endpoints
    path('events/', event_list_create, name='event-list-create'),
    path('events/feed/', events_feed, name='events-feed'),
    path('events/pending/', pending_events, name='events-pending'),
    path('events/trending/', trending_events, name='events-trending'),
    path('events/<int:pk>/', event_detail, name='event-detail'),
    path('events/<int:pk>/rsvp/', event_rsvp, name='event-rsvp'),
    path('events/<int:pk>/approve/', event_approve, name='event-approve'),

    path('event-concierge/parse/', concierge_parse, name='event-concierge-parse'),
]
