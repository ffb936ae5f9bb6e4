"""
Who sees which events.

Admins see everything; vendors see public events plus their own; everyone
else only sees approved public events. Unless asked otherwise, only
upcoming published events are listed.
"""
from django.db.models import Q, Count
from django.utils import timezone

from folio.core.roles import get_user_role, ROLE_ADMIN, ROLE_VENDOR
from .models import Event


def visible_events_for(role, user_id=None, upcoming_only=True, include_drafts=False, now=None):
    """Event queryset for a role (and user id, for vendors' own events)"""
    queryset = Event.objects.select_related('created_by', 'featured_designer').annotate(
        rsvp_count=Count('rsvps', distinct=True)
    )

    if upcoming_only:
        queryset = queryset.filter(start_date__gte=now or timezone.now())

    if not (role == ROLE_ADMIN and include_drafts):
        queryset = queryset.filter(status='published')

    if role == ROLE_ADMIN:
        return queryset
    if role == ROLE_VENDOR:
        if user_id is None:
            return queryset.filter(is_public=True)
        return queryset.filter(Q(is_public=True) | Q(created_by_id=user_id))
    return queryset.filter(is_approved=True, is_public=True)


def visible_events(user, upcoming_only=True, include_drafts=False, now=None):
    user_id = user.id if user is not None and user.is_authenticated else None
    return visible_events_for(get_user_role(user), user_id, upcoming_only=upcoming_only,
                              include_drafts=include_drafts, now=now)


def can_view_event(user, event):
    """Single-event counterpart of visible_events (ignoring dates)"""
    role = get_user_role(user)
    if role == ROLE_ADMIN or (event.created_by_id and event.created_by_id == user.id):
        return True
    if event.status != 'published':
        return False
    if role == ROLE_VENDOR:
        return event.is_public
    return event.is_public and event.is_approved


def can_edit_event(user, event):
    role = get_user_role(user)
    if role == ROLE_ADMIN:
        return True
    return role == ROLE_VENDOR and event.created_by_id is not None and event.created_by_id == user.id


def can_delete_event(user, event):
    if get_user_role(user) == ROLE_ADMIN:
        return True
    return event.created_by_id is not None and event.created_by_id == user.id
