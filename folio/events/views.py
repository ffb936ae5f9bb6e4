import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.paginator import Paginator
from django.db.models import Q, F, Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from folio.core.cache_utils import cached_query, EVENTS_FEED_CACHE_TTL, EVENTS_FEED_PREFIX
from folio.core.mosaic import estimate_cols
from folio.core.permissions import IsAdminRole
from folio.core.roles import get_user_role, role_capabilities, ROLE_ADMIN, ROLE_VENDOR
from folio.core.utils import create_audit_log
from .concierge import parse_event_input, ConciergeError
from .feed import build_feed
from .models import Event, EventRSVP
from .ranking import compute_priority_score, trending_score, event_trending_factors
from .serializers import (
    EventListSerializer, EventSerializer, EventRSVPSerializer, EventApproveSerializer, ConciergeParseSerializer
)
from .visibility import visible_events, visible_events_for, can_view_event, can_edit_event, can_delete_event

logger = logging.getLogger(__name__)


def rsvp_counts(event):
    by_status = dict(
        EventRSVP.objects.filter(event=event).values_list('status').annotate(total=Count('id'))
    )
    return {
        'attending': by_status.get('ATTENDING', 0),
        'interested': by_status.get('INTERESTED', 0),
        'send_to_team': by_status.get('SEND_TO_TEAM', 0),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def event_list_create(request):
    """List visible events by priority or create an event (admin/vendor)"""
    user = request.user
    role = get_user_role(user)

    if request.method == 'GET':
        if request.query_params.get('mine') == 'true':
            queryset = Event.objects.filter(created_by=user).annotate(rsvp_count=Count('rsvps', distinct=True))
        else:
            queryset = visible_events(
                user,
                upcoming_only=request.query_params.get('upcoming', 'true') != 'false',
                include_drafts=request.query_params.get('include_drafts') == 'true',
            )

        event_type = request.query_params.get('type')
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search) | Q(location__icontains=search) | Q(host_name__icontains=search)
            )

        events = list(queryset.order_by('start_date'))
        if event_type:
            # JSON list membership, done in Python to stay database-agnostic
            event_type = event_type.upper()
            events = [event for event in events if event_type in (event.event_types or [])]

        if request.query_params.get('sort', 'priority') == 'priority':
            now = timezone.now()
            events.sort(key=lambda event: -compute_priority_score(event, now))

        try:
            page = int(request.query_params.get('page', 1))
            limit = max(1, min(int(request.query_params.get('limit', 50)), 200))
        except ValueError:
            return Response({'error': 'page and limit must be integers'}, status=status.HTTP_400_BAD_REQUEST)

        paginator = Paginator(events, limit)
        page_obj = paginator.get_page(page)
        serializer = EventListSerializer(page_obj, many=True, context={'request': request})
        return Response({
            'results': serializer.data,
            'count': paginator.count,
            'next': page_obj.next_page_number() if page_obj.has_next() else None,
            'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
            'page': page_obj.number,
            'page_size': limit,
            'total_pages': paginator.num_pages,
        })
    else:  # POST
        if not role_capabilities(role)['can_create_event']:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

        serializer = EventSerializer(data=request.data, context={'can_rank': role == ROLE_ADMIN})
        if serializer.is_valid():
            extra = {'created_by': user, 'is_approved': role == ROLE_ADMIN}
            if role == ROLE_VENDOR and not serializer.validated_data.get('host_name'):
                vendor_profile = getattr(user, 'vendor_profile', None)
                if vendor_profile is not None:
                    extra['host_name'] = vendor_profile.company_name
            event = serializer.save(**extra)
            create_audit_log(request=request, action='create', model_name='Event', object_id=event.id,
                             object_name=event.title, object_reference=event.slug,
                             changes={'is_approved': event.is_approved})
            logger.info(f"Event {event.id} created by {user.username} (approved={event.is_approved})")
            return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def event_detail(request, pk):
    """Retrieve (counts a view), update or delete an event"""
    event = get_object_or_404(Event.objects.select_related('created_by', 'featured_designer'), pk=pk)

    if request.method == 'GET':
        if not can_view_event(request.user, event):
            return Response({'error': 'Event not found'}, status=status.HTTP_404_NOT_FOUND)
        Event.objects.filter(pk=event.pk).update(view_count=F('view_count') + 1)
        event.view_count += 1
        data = EventSerializer(event).data
        data['rsvp_counts'] = rsvp_counts(event)
        my_rsvp = EventRSVP.objects.filter(event=event, user=request.user).first()
        data['my_rsvp'] = my_rsvp.status if my_rsvp else None
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        if not can_edit_event(request.user, event):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = EventSerializer(event, data=request.data, partial=request.method == 'PATCH',
                                     context={'can_rank': get_user_role(request.user) == ROLE_ADMIN})
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Event', object_id=event.id,
                             object_name=event.title, object_reference=event.slug, changes=dict(request.data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not can_delete_event(request.user, event):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request=request, action='delete', model_name='Event', object_id=event.id,
                         object_name=event.title, object_reference=event.slug)
        event.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def event_rsvp(request, pk):
    """RSVP counts; POST/PATCH sets the caller's RSVP status, DELETE withdraws it"""
    event = get_object_or_404(Event, pk=pk)
    if not can_view_event(request.user, event):
        return Response({'error': 'Event not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response({'ok': True, 'counts': rsvp_counts(event)})

    if request.method == 'DELETE':
        EventRSVP.objects.filter(event=event, user=request.user).delete()
        return Response({'ok': True, 'counts': rsvp_counts(event)})

    serializer = EventRSVPSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    rsvp_status = serializer.validated_data['status']
    if rsvp_status == 'ATTENDING' and event.max_attendees:
        attending = EventRSVP.objects.filter(event=event, status='ATTENDING').exclude(user=request.user).count()
        if attending >= event.max_attendees:
            return Response({'error': 'Event is full'}, status=status.HTTP_400_BAD_REQUEST)

    rsvp, created = EventRSVP.objects.update_or_create(
        event=event, user=request.user, defaults={'status': rsvp_status}
    )
    create_audit_log(request=request, action='rsvp', model_name='EventRSVP', object_id=rsvp.id,
                     object_name=event.title, object_reference=event.slug, changes={'status': rsvp_status})
    return Response({'ok': True, 'status': rsvp.status, 'counts': rsvp_counts(event)},
                    status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def event_approve(request, pk):
    """Approve (or with approved=false, withdraw approval of) an event"""
    event = get_object_or_404(Event, pk=pk)
    serializer = EventApproveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    approved = serializer.validated_data['approved']
    old_value = event.is_approved
    event.is_approved = approved
    event.save(update_fields=['is_approved', 'updated_at'])
    create_audit_log(request=request, action='approve' if approved else 'reject', model_name='Event',
                     object_id=event.id, object_name=event.title, object_reference=event.slug,
                     changes={'is_approved': {'old': old_value, 'new': approved}})
    logger.info(f"Event {event.id} approval set to {approved} by {request.user.username}")
    return Response(EventSerializer(event).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pending_events(request):
    """Events waiting for admin approval"""
    queryset = Event.objects.filter(is_approved=False).exclude(status='cancelled').select_related(
        'created_by').annotate(rsvp_count=Count('rsvps', distinct=True)).order_by('start_date')
    serializer = EventListSerializer(queryset, many=True)
    return Response({'events': serializer.data, 'total': len(serializer.data)})


@cached_query(cache_ttl=EVENTS_FEED_CACHE_TTL, key_prefix=EVENTS_FEED_PREFIX)
def get_events_feed(role, user_id, cols):
    events = visible_events_for(role, user_id).order_by('start_date')
    serialized = EventListSerializer(events, many=True).data
    return build_feed(serialized, cols)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def events_feed(request):
    """Mosaic feed of visible upcoming events with tile sizes and spans"""
    cols = request.query_params.get('cols')
    try:
        cols = max(1, int(cols)) if cols else estimate_cols(request.query_params.get('width', 1280))
    except ValueError:
        return Response({'error': 'cols must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    role = get_user_role(request.user)
    # Only vendors see user-specific events; everyone else shares the role cache entry
    user_id = request.user.id if role == ROLE_VENDOR else None
    items = get_events_feed(role, user_id, cols)
    return Response({'cols': cols, 'items': items, 'count': len(items)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def trending_events(request):
    """Visible upcoming events ranked by trending score"""
    try:
        limit = max(1, min(int(request.query_params.get('limit', 10)), 100))
    except ValueError:
        return Response({'error': 'limit must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    now = timezone.now()
    scored = []
    for event in visible_events(request.user).prefetch_related('products'):
        score = trending_score(event_trending_factors(event, now))
        if score > 0:
            scored.append((score, event))
    scored.sort(key=lambda item: (-item[0], item[1].start_date))

    results = []
    for score, event in scored[:limit]:
        data = EventListSerializer(event).data
        data['trending_score'] = score
        results.append(data)
    return Response(results)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def concierge_parse(request):
    """Draft event fields from a free-text description"""
    serializer = ConciergeParseSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid input. Please provide a text description of your event.'},
                        status=status.HTTP_400_BAD_REQUEST)
    try:
        result = parse_event_input(serializer.validated_data['input'])
    except ConciergeError as e:
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    return Response(result)
