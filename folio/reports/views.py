import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count
from django.utils import timezone
from datetime import datetime, timedelta

from folio.core.cache_utils import cached_query, DASHBOARD_CACHE_TTL, DASHBOARD_PREFIX, VENDOR_ANALYTICS_PREFIX
from folio.core.models import User, AuditLog
from folio.core.permissions import IsAdminRole
from folio.core.roles import get_user_role, ROLE_ADMIN, ROLE_VENDOR
from folio.catalog.models import Product
from folio.events.models import Event, EventRSVP
from folio.events.ranking import trending_score, product_trending_factors
from folio.parties.models import DesignerProfile, VendorProfile
from folio.projects.models import Project, Selection
from folio.videos.models import Video

logger = logging.getLogger(__name__)


def parse_period(request, default_days=30):
    """(date_from, date_to) from ?date_from/?date_to (YYYY-MM-DD); last 30 days by default"""
    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)

    if not date_from:
        date_from = (timezone.now() - timedelta(days=default_days)).date()
    else:
        date_from = datetime.strptime(date_from, '%Y-%m-%d').date()

    if not date_to:
        date_to = timezone.now().date()
    else:
        date_to = datetime.strptime(date_to, '%Y-%m-%d').date()
    return date_from, date_to


def _counts_by(queryset, field):
    return {row[field]: row['count'] for row in queryset.values(field).annotate(count=Count('id')).order_by(field)}


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix=DASHBOARD_PREFIX)
def get_dashboard_summary(date_from, date_to):
    now = timezone.now()
    in_period = {'created_at__date__gte': date_from, 'created_at__date__lte': date_to}

    products = Product.objects.all()
    events = Event.objects.all()

    recent_logs = AuditLog.objects.select_related('user')[:10]

    return {
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'users': {
            'total': User.objects.count(),
            'by_role': _counts_by(User.objects.all(), 'role'),
            'new': User.objects.filter(**in_period).count(),
        },
        'designers': DesignerProfile.objects.count(),
        'vendors': {
            'total': VendorProfile.objects.count(),
            'verified': VendorProfile.objects.filter(is_verified=True).count(),
        },
        'products': {
            'total': products.count(),
            'by_status': _counts_by(products, 'status'),
            'pending': products.filter(status='pending').count(),
            'new': products.filter(**in_period).count(),
        },
        'projects': {
            'total': Project.objects.count(),
            'by_stage': _counts_by(Project.objects.all(), 'stage'),
            'new': Project.objects.filter(**in_period).count(),
        },
        'selections': {
            'total': Selection.objects.count(),
            'unassigned': Selection.objects.filter(room__isnull=True).count(),
            'new': Selection.objects.filter(**in_period).count(),
        },
        'events': {
            'total': events.count(),
            'upcoming': events.filter(start_date__gte=now, status='published').count(),
            'pending_approval': events.filter(is_approved=False).exclude(status='cancelled').count(),
            'rsvps': EventRSVP.objects.count(),
        },
        'videos': {
            'total': Video.objects.count(),
            'views': Video.objects.aggregate(total=Sum('views'))['total'] or 0,
        },
        'recent_activity': [
            {
                'id': log.id,
                'action': log.action,
                'model_name': log.model_name,
                'object_name': log.object_name,
                'user': log.user.username if log.user else None,
                'created_at': log.created_at.isoformat(),
            }
            for log in recent_logs
        ],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def dashboard(request):
    """Admin dashboard summary"""
    try:
        date_from, date_to = parse_period(request)
    except ValueError:
        return Response({'error': 'Dates must be YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(get_dashboard_summary(date_from, date_to))


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix=VENDOR_ANALYTICS_PREFIX)
def get_vendor_analytics(vendor_id, top_limit=5):
    """Engagement for one vendor's products (vendor_id None = every vendor)"""
    now = timezone.now()
    products = Product.objects.select_related('category')
    if vendor_id is not None:
        products = products.filter(vendor_id=vendor_id)

    totals = products.aggregate(
        views=Sum('view_count'),
        scans=Sum('scan_count'),
        likes=Sum('like_count'),
        saves=Sum('save_count'),
    )

    approved = products.filter(status='approved', is_active=True)
    scored = sorted(
        ((trending_score(product_trending_factors(product, now)), product) for product in approved),
        key=lambda item: (-item[0], item[1].id),
    )

    selections = Selection.objects.all()
    events = Event.objects.all()
    if vendor_id is not None:
        selections = selections.filter(product__vendor_id=vendor_id)
        vendor = VendorProfile.objects.filter(pk=vendor_id).first()
        events = events.filter(created_by_id=vendor.user_id) if vendor and vendor.user_id else events.none()

    return {
        'vendor_id': vendor_id,
        'products': {
            'total': products.count(),
            'by_status': _counts_by(products, 'status'),
        },
        'engagement': {key: value or 0 for key, value in totals.items()},
        'selections': selections.count(),
        'projects_reached': selections.values('project_id').distinct().count(),
        'events': {
            'total': events.count(),
            'rsvps': EventRSVP.objects.filter(event__in=events).count(),
        },
        'top_products': [
            {
                'id': product.id,
                'name': product.name,
                'category': product.category.slug if product.category_id else None,
                'trending_score': score,
                'views': product.view_count,
                'saves': product.save_count,
            }
            for score, product in scored[:top_limit]
        ],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def vendor_analytics(request):
    """Product engagement for the calling vendor; admins may pass ?vendor=<id>"""
    role = get_user_role(request.user)
    if role == ROLE_ADMIN:
        vendor_id = request.query_params.get('vendor')
        try:
            vendor_id = int(vendor_id) if vendor_id else None
        except ValueError:
            return Response({'error': 'vendor must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    elif role == ROLE_VENDOR:
        vendor_profile = getattr(request.user, 'vendor_profile', None)
        if vendor_profile is None:
            return Response({'error': 'No vendor profile for this user'}, status=status.HTTP_404_NOT_FOUND)
        vendor_id = vendor_profile.id
    else:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    return Response(get_vendor_analytics(vendor_id))
