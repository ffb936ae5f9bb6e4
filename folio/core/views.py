import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from .models import Setting, AuditLog
from .navigation import build_navigation
from .permissions import IsAdminRole
from .roles import get_user_role, role_capabilities, SWITCHABLE_ROLES, ROLE_ADMIN, ROLE_GROUPS
from .serializers import (
    UserSerializer, UserCreateSerializer, RegisterSerializer, RoleSwitchSerializer,
    SettingSerializer, AuditLogSerializer
)
from .storage import upload_file, StorageError
from .utils import create_audit_log

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = get_user_role(user)
        token['groups'] = list(user.groups.values_list('name', flat=True))
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def build_user_payload(user, pathname=None):
    """User data with resolved role, capability flags and navigation"""
    user_data = UserSerializer(user).data
    role = get_user_role(user)
    user_data['groups'] = list(user.groups.values_list('name', flat=True))
    user_data['effective_role'] = role
    user_data.update(role_capabilities(role))
    user_data['navigation'] = build_navigation(role, pathname)
    return user_data


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = RegisterSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                         object_name=user.username, user=user, changes={'role': user.role})
        return Response({
            'user': build_user_payload(user),
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role capabilities and navigation"""
    return Response(build_user_payload(request.user, request.query_params.get('path')))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def switch_role(request):
    """Switch the active role from the role selector"""
    serializer = RoleSwitchSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    new_role = serializer.validated_data['role']
    can_be_admin = user.is_superuser or user.is_staff or user.groups.filter(name=ROLE_GROUPS[ROLE_ADMIN]).exists()
    if new_role not in SWITCHABLE_ROLES and not can_be_admin:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    old_role = user.role
    user.role = new_role
    if 'active_profile_id' in serializer.validated_data:
        user.active_profile_id = serializer.validated_data['active_profile_id']
    user.save(update_fields=['role', 'active_profile_id', 'updated_at'])
    create_audit_log(request=request, action='role_switch', model_name='User', object_id=user.id,
                     object_name=user.username, changes={'role': {'old': old_role, 'new': new_role}})
    logger.info(f"User {user.username} switched role {old_role} -> {new_role}")
    return Response(build_user_payload(user))


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        search = request.query_params.get('search', '').strip()
        if search:
            users = users.filter(
                Q(username__icontains=search) | Q(email__icontains=search) |
                Q(first_name__icontains=search) | Q(last_name__icontains=search)
            )
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request=request, action='create', model_name='User', object_id=user.id,
                             object_name=user.username)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='User', object_id=user.id,
                             object_name=user.username, changes=dict(request.data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='User', object_id=user.id,
                         object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs; non-admins only see their own"""
    queryset = AuditLog.objects.select_related('user')

    if get_user_role(request.user) != ROLE_ADMIN:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if get_user_role(request.user) != ROLE_ADMIN and audit_log.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([AllowAny])
def navigation(request):
    """Navigation for the current user, or for a guest when signed out"""
    role = get_user_role(request.user)
    return Response(build_navigation(role, request.query_params.get('path')))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Global search across products, projects, events, people and videos"""
    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'products': [],
            'categories': [],
            'projects': [],
            'events': [],
            'designers': [],
            'vendors': [],
            'videos': [],
        })

    from folio.catalog.models import Category
    from folio.catalog.filters import ProductFilter
    from folio.catalog.models import Product
    from folio.catalog.serializers import ProductListSerializer, CategorySerializer
    from folio.parties.models import DesignerProfile, VendorProfile
    from folio.parties.serializers import DesignerProfileSerializer, VendorProfileSerializer
    from folio.projects.access import accessible_projects
    from folio.projects.serializers import ProjectListSerializer
    from folio.events.visibility import visible_events
    from folio.events.serializers import EventListSerializer
    from folio.videos.models import Video
    from folio.videos.serializers import VideoSerializer

    user = request.user
    role = get_user_role(user)
    results = {}

    products_queryset = Product.objects.select_related('vendor', 'category')
    if role != ROLE_ADMIN:
        products_queryset = products_queryset.filter(status='approved', is_active=True)
    products = ProductFilter({'search': query}, queryset=products_queryset).qs[:20]
    results['products'] = ProductListSerializer(products, many=True).data

    categories = Category.objects.filter(Q(name__icontains=query) | Q(slug__icontains=query))[:20]
    results['categories'] = CategorySerializer(categories, many=True).data

    projects = accessible_projects(user).filter(
        Q(title__icontains=query) | Q(client_name__icontains=query) | Q(city__icontains=query)
    )[:20]
    results['projects'] = ProjectListSerializer(projects, many=True).data

    events = visible_events(user, upcoming_only=False).filter(
        Q(title__icontains=query) | Q(location__icontains=query) | Q(host_name__icontains=query)
    )[:20]
    results['events'] = EventListSerializer(events, many=True, context={'request': request}).data

    designers = DesignerProfile.objects.filter(
        Q(display_name__icontains=query) | Q(studio__icontains=query) | Q(city__icontains=query)
    )[:20]
    results['designers'] = DesignerProfileSerializer(designers, many=True).data

    vendors = VendorProfile.objects.filter(
        Q(company_name__icontains=query) | Q(description__icontains=query)
    )[:20]
    results['vendors'] = VendorProfileSerializer(vendors, many=True).data

    videos = Video.objects.filter(is_published=True).filter(
        Q(title__icontains=query) | Q(description__icontains=query)
    )[:20]
    results['videos'] = VideoSerializer(videos, many=True).data

    return Response(results)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload(request):
    """Store an uploaded file and return its URL"""
    uploaded_file = request.FILES.get('file')
    if uploaded_file is None:
        return Response({'error': 'No file provided'}, status=status.HTTP_400_BAD_REQUEST)

    folder = request.data.get('folder', 'uploads')
    try:
        result = upload_file(uploaded_file, folder=folder)
    except StorageError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='upload', model_name='Upload', object_id=result['blob_name'],
                     object_name=result['name'], object_reference=folder)
    return Response(result, status=status.HTTP_201_CREATED)
