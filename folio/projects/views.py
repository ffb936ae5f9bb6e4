import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.serializers import ValidationError
from django.core.paginator import Paginator
from django.db import transaction
from django.db.models import Count
from django.shortcuts import get_object_or_404
from folio.core.cache_utils import cached_query, ROOM_TEMPLATES_CACHE_TTL
from folio.core.mosaic import estimate_cols
from folio.core.roles import get_user_role, role_capabilities
from folio.core.storage import upload_file, StorageError
from folio.core.utils import create_audit_log
from . import capture
from .access import (
    ProjectAccessDenied, accessible_projects, assert_project_view, assert_project_edit,
    assert_selection_view, assert_selection_edit, visible_selections,
    can_attach_quote, visible_quotes, assert_quote_status_change, DESIGNER_QUOTE_STATUSES
)
from .board import build_room_board, assign_slot, set_display_size, SlotConflict, UnknownSlot
from .export import build_export_response
from .models import Project, ProjectParticipant, Room, Selection, ProjectImage, ImageTag, Quote
from .payloads import normalize_create_payload
from .room_templates import ROOM_TYPES, serialize_template
from .serializers import (
    ProjectListSerializer, ProjectSerializer, ProjectParticipantSerializer, RoomSerializer,
    SelectionSerializer, SlotSerializer, SizeSerializer, CaptureSerializer, SpecifySerializer,
    AssignSerializer, ProjectImageSerializer, ImageTagSerializer, QuoteSerializer, QuoteStatusSerializer
)
from .sorting import sort_projects, normalize_sort, SORT_OPTIONS

logger = logging.getLogger(__name__)


def denied(exc):
    return Response({'error': str(exc)}, status=status.HTTP_403_FORBIDDEN)


def paginate(request, queryset, serializer_class, default_limit=50):
    """Paginated response payload, or None when page/limit are not integers"""
    try:
        page = int(request.query_params.get('page', 1))
        limit = max(1, min(int(request.query_params.get('limit', default_limit)), 200))
    except ValueError:
        return None

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    serializer = serializer_class(page_obj, many=True)
    return {
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    }


def grid_cols(request):
    """Column count from ?cols, else from the viewport ?width, else 6"""
    cols = request.query_params.get('cols')
    if cols:
        try:
            return max(1, int(cols))
        except ValueError:
            pass
    width = request.query_params.get('width')
    if width:
        return estimate_cols(width)
    return 6


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_list_create(request):
    """List accessible projects (sorted) or create a project"""
    if request.method == 'GET':
        queryset = accessible_projects(request.user).annotate(
            room_count=Count('rooms', distinct=True),
            selection_count=Count('selections', distinct=True),
        )
        project_status = request.query_params.get('status')
        if project_status:
            queryset = queryset.filter(status=project_status)
        stage = request.query_params.get('stage')
        if stage:
            queryset = queryset.filter(stage=stage)

        sort = normalize_sort(request.query_params.get('sort'))
        queryset = sort_projects(queryset, sort)

        data = paginate(request, queryset, ProjectListSerializer)
        if data is None:
            return Response({'error': 'page and limit must be integers'}, status=status.HTTP_400_BAD_REQUEST)
        data['sort'] = sort
        data['sort_options'] = SORT_OPTIONS
        return Response(data)
    else:  # POST
        if not role_capabilities(get_user_role(request.user))['can_create_project']:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        try:
            fields = normalize_create_payload(request.data)
        except ValidationError as e:
            return Response(e.detail, status=status.HTTP_400_BAD_REQUEST)

        client_name = request.data.get('client_name') or ''
        project = Project.objects.create(designer=request.user, client_name=client_name, **fields)
        create_audit_log(request=request, action='create', model_name='Project', object_id=project.id,
                         object_name=project.title, changes=fields)
        logger.info(f"Project {project.id} created by {request.user.username}")
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_detail(request, pk):
    """Retrieve, update or delete a project"""
    project = get_object_or_404(Project.objects.select_related('designer', 'owner'), pk=pk)

    try:
        if request.method == 'GET':
            access = assert_project_view(request.user, project)
        else:
            access = assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        data = ProjectSerializer(project).data
        data['access'] = {'role': access.role, 'side': access.side}
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        # Ownership decides OWNER access, so only owners may hand it on
        if 'owner' in request.data and access.role != 'OWNER':
            return Response({'error': 'Permission denied: only the owner can change ownership'},
                            status=status.HTTP_403_FORBIDDEN)
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Project', object_id=project.id,
                             object_name=project.title, changes=dict(request.data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if access.role != 'OWNER':
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request=request, action='delete', model_name='Project', object_id=project.id,
                         object_name=project.title)
        project.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_participants(request, pk):
    """List participants or add one (owners only)"""
    project = get_object_or_404(Project, pk=pk)

    try:
        access = assert_project_view(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        participants = project.participants.select_related('user', 'vendor')
        serializer = ProjectParticipantSerializer(participants, many=True)
        return Response(serializer.data)
    else:
        if access.role != 'OWNER':
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = ProjectParticipantSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.validated_data['user']
            if ProjectParticipant.objects.filter(project=project, user=user).exists():
                return Response({'error': 'User is already a participant'}, status=status.HTTP_400_BAD_REQUEST)
            participant = serializer.save(project=project)
            create_audit_log(request=request, action='create', model_name='ProjectParticipant',
                             object_id=participant.id, object_name=project.title,
                             object_reference=f'{participant.side}/{participant.role}')
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_participant_detail(request, pk, participant_id):
    """Change a participant's role/side or remove them (owners only)"""
    project = get_object_or_404(Project, pk=pk)
    participant = get_object_or_404(ProjectParticipant, pk=participant_id, project=project)

    try:
        access = assert_project_view(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)
    if access.role != 'OWNER':
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'PATCH':
        serializer = ProjectParticipantSerializer(participant, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='ProjectParticipant',
                         object_id=participant.id, object_name=project.title)
        participant.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Room views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def room_list_create(request, pk):
    """List the rooms of a project or add one"""
    project = get_object_or_404(Project, pk=pk)

    try:
        if request.method == 'GET':
            assert_project_view(request.user, project)
        else:
            assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        serializer = RoomSerializer(project.rooms.all(), many=True)
        return Response(serializer.data)
    else:
        serializer = RoomSerializer(data=request.data)
        if serializer.is_valid():
            room = serializer.save(project=project)
            create_audit_log(request=request, action='create', model_name='Room', object_id=room.id,
                             object_name=room.name, object_reference=room.room_type)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def room_detail(request, pk, room_id):
    """Retrieve, update or delete a room"""
    project = get_object_or_404(Project, pk=pk)
    room = get_object_or_404(Room, pk=room_id, project=project)

    try:
        if request.method == 'GET':
            assert_project_view(request.user, project)
        else:
            assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        serializer = RoomSerializer(room)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RoomSerializer(room, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Room', object_id=room.id,
                         object_name=room.name)
        room.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


def _create_selection(request, project, room=None):
    serializer = SelectionSerializer(data=request.data, context={'project': project})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    extra = {'project': project, 'created_by': request.user}
    if room is not None:
        extra['room'] = room
    selection = serializer.save(**extra)

    slot_key = request.data.get('slot_key')
    if slot_key and selection.room_id:
        try:
            assign_slot(selection, slot_key, reassign=bool(request.data.get('reassign')))
        except (SlotConflict, UnknownSlot) as e:
            selection.delete()
            code = status.HTTP_409_CONFLICT if isinstance(e, SlotConflict) else status.HTTP_400_BAD_REQUEST
            return Response({'error': str(e)}, status=code)

    create_audit_log(request=request, action='create', model_name='Selection', object_id=selection.id,
                     object_name=selection.product_name, object_reference=selection.slot_key)
    return Response(SelectionSerializer(selection).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def room_selections(request, pk, room_id):
    """Selections placed in a room, or add one to it"""
    project = get_object_or_404(Project, pk=pk)
    room = get_object_or_404(Room, pk=room_id, project=project)

    try:
        if request.method == 'GET':
            access = assert_project_view(request.user, project)
        else:
            access = assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        selections = visible_selections(access, room.selections.select_related('room', 'product__category'))
        serializer = SelectionSerializer(selections, many=True)
        return Response(serializer.data)
    return _create_selection(request, project, room=room)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def room_board(request, pk, room_id):
    """Tiles for a room: selections first, then placeholders for unfilled slots"""
    project = get_object_or_404(Project, pk=pk)
    room = get_object_or_404(Room, pk=room_id, project=project)

    try:
        access = assert_project_view(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    selections = list(visible_selections(access, room.selections.select_related('product__category')))
    board = build_room_board(room, selections, cols=grid_cols(request))
    by_id = {selection.id: selection for selection in selections}
    for item in board['items']:
        if item['kind'] == 'selection':
            item['selection'] = SelectionSerializer(by_id[item['selection_id']]).data
    return Response(board)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_selections(request, pk):
    """Every selection of a project, or add one"""
    project = get_object_or_404(Project, pk=pk)

    try:
        if request.method == 'GET':
            access = assert_project_view(request.user, project)
        else:
            access = assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        selections = visible_selections(access, project.selections.select_related('room', 'product__category'))
        room = request.query_params.get('room')
        if room == 'none':
            selections = selections.filter(room__isnull=True)
        elif room:
            selections = selections.filter(room_id=room)
        phase = request.query_params.get('phase_of_use')
        if phase:
            selections = selections.filter(phase_of_use=phase)
        serializer = SelectionSerializer(selections, many=True)
        return Response(serializer.data)
    return _create_selection(request, project)


# Project images and product tags
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def project_images(request, pk):
    """List project images, or add one from an upload ('file') or a URL"""
    project = get_object_or_404(Project, pk=pk)

    try:
        if request.method == 'GET':
            assert_project_view(request.user, project)
        else:
            assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        images = project.images.prefetch_related('tags__product')
        serializer = ProjectImageSerializer(images, many=True)
        return Response(serializer.data)

    data = {key: request.data.get(key) for key in ('url', 'name', 'room_label', 'width', 'height')
            if request.data.get(key) not in (None, '')}
    uploaded_file = request.FILES.get('file')
    if uploaded_file is not None:
        try:
            stored = upload_file(uploaded_file, folder='projects')
        except StorageError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        data['url'] = stored['url']
        data.setdefault('name', stored['name'])
        if 'width' in stored:
            data['width'] = stored['width']
            data['height'] = stored['height']

    serializer = ProjectImageSerializer(data=data)
    if serializer.is_valid():
        image = serializer.save(project=project, uploaded_by=request.user)
        create_audit_log(request=request, action='upload', model_name='ProjectImage', object_id=image.id,
                         object_name=image.name, object_reference=project.title)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_image_detail(request, pk, image_id):
    project = get_object_or_404(Project, pk=pk)
    image = get_object_or_404(ProjectImage.objects.prefetch_related('tags__product'), pk=image_id, project=project)

    try:
        if request.method == 'GET':
            assert_project_view(request.user, project)
        else:
            assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        return Response(ProjectImageSerializer(image).data)
    elif request.method == 'PATCH':
        serializer = ProjectImageSerializer(image, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        image.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def image_tags(request, pk, image_id):
    """Product pins on an image; DELETE takes ?tag=<id>"""
    project = get_object_or_404(Project, pk=pk)
    image = get_object_or_404(ProjectImage, pk=image_id, project=project)

    try:
        if request.method == 'GET':
            assert_project_view(request.user, project)
        else:
            assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        serializer = ImageTagSerializer(image.tags.select_related('product'), many=True)
        return Response(serializer.data)
    elif request.method == 'POST':
        if not role_capabilities(get_user_role(request.user))['can_tag_images']:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = ImageTagSerializer(data=request.data)
        if serializer.is_valid():
            tag = serializer.save(image=image, created_by=request.user)
            create_audit_log(request=request, action='create', model_name='ImageTag', object_id=tag.id,
                             object_name=tag.product.name, object_reference=f'image:{image.id}')
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        tag = get_object_or_404(ImageTag, pk=request.query_params.get('tag'), image=image)
        tag.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_export(request, pk):
    """Spec sheet CSV: one row per selection, grouped by room"""
    project = get_object_or_404(Project, pk=pk)

    try:
        access = assert_project_view(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    selections = visible_selections(access, project.selections.all())
    grouped = []
    for room in project.rooms.all():
        grouped.append((room, [selection for selection in selections if selection.room_id == room.id]))
    unplaced = [selection for selection in selections if selection.room_id is None]
    if unplaced:
        grouped.append((None, unplaced))

    create_audit_log(request=request, action='export', model_name='Project', object_id=project.id,
                     object_name=project.title)
    return build_export_response(project, grouped)


def quote_chains(quotes):
    """Group quotes by version chain: newest chain first, newest version first"""
    chains = {}
    for quote in quotes:
        chains.setdefault(quote.chain_id, []).append(quote)
    ordered = []
    for chain in chains.values():
        chain.sort(key=lambda quote: (-quote.version, -quote.id))
        ordered.append(chain)
    ordered.sort(key=lambda chain: max(quote.created_at for quote in chain), reverse=True)
    return [QuoteSerializer(chain, many=True).data for chain in ordered]


# Quote views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def project_quotes(request, pk):
    """List quote chains or attach a quote (vendor-side participants, optional 'file')"""
    project = get_object_or_404(Project, pk=pk)

    try:
        access = assert_project_view(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        quotes = visible_quotes(access, project.quotes.select_related('vendor', 'supersedes'))
        return Response({'quotes': quote_chains(quotes)})

    if not can_attach_quote(access):
        return Response({'error': 'Permission denied: only vendors on this project can attach quotes'},
                        status=status.HTTP_403_FORBIDDEN)

    serializer = QuoteSerializer(data=request.data, context={'project': project, 'vendor_id': access.vendor_id})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    extra = {'project': project, 'vendor_id': access.vendor_id, 'created_by': request.user}
    uploaded_file = request.FILES.get('file')
    if uploaded_file is not None:
        try:
            stored = upload_file(uploaded_file, folder='quotes')
        except StorageError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        extra['file_url'] = stored['url']
        extra['file_name'] = stored['name']

    supersedes = serializer.validated_data.get('supersedes')
    extra['version'] = supersedes.version + 1 if supersedes is not None else 1
    quote = serializer.save(**extra)
    create_audit_log(request=request, action='create', model_name='Quote', object_id=quote.id,
                     object_name=project.title, object_reference=f'v{quote.version}',
                     changes={'total_cents': quote.total_cents, 'has_file': bool(quote.file_url)})
    logger.info(f"Quote {quote.id} v{quote.version} attached to project {project.id} by vendor {access.vendor_id}")
    return Response(QuoteSerializer(quote).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def quote_status(request, pk, quote_id):
    """Move a quote between statuses (vendor: draft/sent/expired, designer side: accepted/rejected)"""
    project = get_object_or_404(Project, pk=pk)
    quote = get_object_or_404(Quote, pk=quote_id, project=project)

    serializer = QuoteStatusSerializer(data={'status': str(request.data.get('status') or '').strip().upper()})
    if not serializer.is_valid():
        return Response({'error': 'Invalid status'}, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data['status']

    try:
        access = assert_project_view(request.user, project)
        if not visible_quotes(access, Quote.objects.filter(pk=quote.pk)).exists():
            return Response({'error': 'Quote not found'}, status=status.HTTP_404_NOT_FOUND)
        assert_quote_status_change(access, quote, new_status)
    except ProjectAccessDenied as e:
        return denied(e)

    if new_status in DESIGNER_QUOTE_STATUSES and quote.status != 'SENT':
        return Response({'error': f'Only sent quotes can be {new_status.lower()}'},
                        status=status.HTTP_400_BAD_REQUEST)

    old_status = quote.status
    quote.status = new_status
    quote.save(update_fields=['status', 'updated_at'])
    create_audit_log(request=request, action='update', model_name='Quote', object_id=quote.id,
                     object_name=project.title, object_reference=f'v{quote.version}',
                     changes={'status': {'old': old_status, 'new': new_status}})
    return Response(QuoteSerializer(quote).data)


# Selection views
@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def selection_detail(request, pk):
    """Retrieve, update or delete a selection"""
    selection = get_object_or_404(Selection.objects.select_related('project', 'room', 'product__category'), pk=pk)

    try:
        if request.method == 'GET':
            assert_selection_view(request.user, selection)
        else:
            assert_selection_edit(request.user, selection)
    except ProjectAccessDenied as e:
        return denied(e)

    if request.method == 'GET':
        return Response(SelectionSerializer(selection).data)
    elif request.method in ('PUT', 'PATCH'):
        old_room_id = selection.room_id
        serializer = SelectionSerializer(selection, data=request.data, partial=request.method == 'PATCH',
                                         context={'project': selection.project})
        if serializer.is_valid():
            selection = serializer.save()
            if selection.room_id != old_room_id and selection.slot_key:
                # The slot belonged to the old room
                assign_slot(selection, None)
            if selection.room_id != old_room_id:
                create_audit_log(request=request, action='assign', model_name='Selection',
                                 object_id=selection.id, object_name=selection.product_name,
                                 changes={'room': {'old': old_room_id, 'new': selection.room_id}})
            return Response(SelectionSerializer(selection).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Selection', object_id=selection.id,
                         object_name=selection.product_name)
        selection.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def selection_slot(request, pk):
    """Set or clear the template slot (role) of a selection"""
    selection = get_object_or_404(Selection.objects.select_related('project', 'room'), pk=pk)

    try:
        assert_selection_edit(request.user, selection)
    except ProjectAccessDenied as e:
        return denied(e)

    serializer = SlotSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_slot = selection.slot_key
    try:
        with transaction.atomic():
            cleared = assign_slot(selection, serializer.validated_data['slot_key'],
                                  reassign=serializer.validated_data['reassign'])
    except SlotConflict as e:
        return Response({
            'error': str(e),
            'slot_key': e.slot_key,
            'conflict': SelectionSerializer(e.holder).data,
        }, status=status.HTTP_409_CONFLICT)
    except UnknownSlot as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    changes = {'slot_key': {'old': old_slot, 'new': selection.slot_key}}
    if cleared is not None:
        changes['cleared_selection'] = cleared.id
    create_audit_log(request=request, action='slot_change', model_name='Selection', object_id=selection.id,
                     object_name=selection.product_name, object_reference=selection.slot_key, changes=changes)
    return Response(SelectionSerializer(selection).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def selection_size(request, pk):
    """Override the tile size of a selection; 'auto' returns to the computed size"""
    selection = get_object_or_404(Selection.objects.select_related('project'), pk=pk)

    try:
        assert_selection_edit(request.user, selection)
    except ProjectAccessDenied as e:
        return denied(e)

    serializer = SizeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    set_display_size(selection, serializer.validated_data['size'])
    return Response(SelectionSerializer(selection).data)


# Capture wizard
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def selection_capture(request):
    """
    Start (or retake) a capture: photo from an upload ('file') or 'photo' URL,
    optional gps_location and room.
    """
    serializer = CaptureSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    project = data['project']

    try:
        assert_project_edit(request.user, project)
    except ProjectAccessDenied as e:
        return denied(e)

    photo = data.get('photo') or ''
    source = data.get('source', 'camera')
    uploaded_file = request.FILES.get('file')
    if uploaded_file is not None:
        try:
            photo = upload_file(uploaded_file, folder='selections')['url']
        except StorageError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if not photo:
        return Response({'error': 'A photo file or URL is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        existing = data.get('selection')
        if existing is not None:
            if existing.project_id != project.id:
                return Response({'error': 'Selection does not belong to this project'},
                                status=status.HTTP_400_BAD_REQUEST)
            selection = capture.retake(existing, photo, gps_location=data.get('gps_location'))
            code = status.HTTP_200_OK
        else:
            selection = capture.start_capture(project, request.user, photo, gps_location=data.get('gps_location'),
                                              room=data.get('room'), source=source)
            code = status.HTTP_201_CREATED
    except capture.CaptureStepError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SelectionSerializer(selection).data, status=code)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def selection_specify(request, pk):
    selection = get_object_or_404(Selection.objects.select_related('project', 'room'), pk=pk)

    try:
        assert_selection_edit(request.user, selection)
    except ProjectAccessDenied as e:
        return denied(e)

    serializer = SpecifySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        selection = capture.specify(selection, serializer.validated_data)
    except capture.CaptureStepError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(SelectionSerializer(selection).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def selection_assign(request, pk):
    selection = get_object_or_404(Selection.objects.select_related('project', 'room'), pk=pk)

    try:
        assert_selection_edit(request.user, selection)
    except ProjectAccessDenied as e:
        return denied(e)

    serializer = AssignSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        with transaction.atomic():
            selection = capture.assign(selection, data['room'], slot_key=data.get('slot_key'),
                                       reassign=data['reassign'])
    except capture.CaptureStepError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except SlotConflict as e:
        return Response({'error': str(e), 'slot_key': e.slot_key}, status=status.HTTP_409_CONFLICT)
    except UnknownSlot as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='assign', model_name='Selection', object_id=selection.id,
                     object_name=selection.product_name, object_reference=selection.slot_key,
                     changes={'room': selection.room_id})
    return Response(SelectionSerializer(selection).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def selection_back(request, pk):
    selection = get_object_or_404(Selection.objects.select_related('project'), pk=pk)

    try:
        assert_selection_edit(request.user, selection)
    except ProjectAccessDenied as e:
        return denied(e)

    try:
        selection = capture.go_back(selection)
    except capture.CaptureStepError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(SelectionSerializer(selection).data)


@cached_query(cache_ttl=ROOM_TEMPLATES_CACHE_TTL, key_prefix='room_templates')
def get_room_templates(room_type=None):
    if room_type:
        return serialize_template(room_type)
    return [serialize_template(value) for value in ROOM_TYPES]


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def room_templates(request):
    """Slot templates for every room type, or ?type=KITCHEN for one"""
    room_type = (request.query_params.get('type') or '').strip().upper() or None
    if room_type and room_type not in ROOM_TYPES:
        return Response({'error': f"Unknown room type '{room_type}'"}, status=status.HTTP_404_NOT_FOUND)
    return Response(get_room_templates(room_type))
