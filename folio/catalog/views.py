import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.paginator import Paginator
from django.db.models import Q, F
from django.shortcuts import get_object_or_404
from django.utils import timezone
from folio.core.cache_utils import cached_query, TRENDING_PRODUCTS_CACHE_TTL, TRENDING_PRODUCTS_PREFIX
from folio.core.permissions import IsAdminRole
from folio.core.roles import get_user_role, ROLE_ADMIN, ROLE_VENDOR, ROLE_DESIGNER
from folio.core.utils import create_audit_log
from folio.events.ranking import trending_score, product_trending_factors
from .filters import ProductFilter
from .models import Category, Product
from .serializers import (
    CategorySerializer, ProductListSerializer, ProductSerializer,
    ProductRejectSerializer, ProductEngageSerializer
)

logger = logging.getLogger(__name__)

PENDING_SORT_FIELDS = {
    'taggedAt': 'created_at',
    'created_at': 'created_at',
    'name': 'name',
    'price': 'price',
    'brand': 'brand',
}


def can_edit_product(user, product):
    """Admins edit anything; vendors their own products; designers what they tagged while pending"""
    role = get_user_role(user)
    if role == ROLE_ADMIN:
        return True
    if role == ROLE_VENDOR and product.vendor_id:
        return product.vendor.user_id == user.id
    if product.status == 'pending' and product.tagged_by_id == user.id:
        return True
    return False


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List all categories or create a new category (admin)"""
    if request.method == 'GET':
        categories = Category.objects.all()
        if request.query_params.get('active') == 'true':
            categories = categories.filter(is_active=True)
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:
        if get_user_role(request.user) != ROLE_ADMIN:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            if Category.objects.filter(slug=serializer.validated_data['slug']).exists():
                return Response({'error': f"Category with slug '{serializer.validated_data['slug']}' already exists"},
                                status=status.HTTP_409_CONFLICT)
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk)

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)

    if get_user_role(request.user) != ROLE_ADMIN:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            slug = serializer.validated_data.get('slug')
            if slug and Category.objects.filter(slug=slug).exclude(pk=category.pk).exists():
                return Response({'error': f"Category with slug '{slug}' already exists"},
                                status=status.HTTP_409_CONFLICT)
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products or create a new product"""
    user = request.user
    role = get_user_role(user)

    if request.method == 'GET':
        queryset = Product.objects.select_related('vendor', 'category')

        # Only admins browse every status; vendors also see their own pending/rejected products
        if role != ROLE_ADMIN:
            visible = Q(status='approved', is_active=True)
            if role == ROLE_VENDOR:
                visible |= Q(vendor__user=user)
            visible |= Q(tagged_by=user)
            queryset = queryset.filter(visible)

        if request.query_params.get('mine') == 'true':
            queryset = queryset.filter(Q(vendor__user=user) | Q(tagged_by=user))

        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('-updated_at', '-created_at')

        try:
            page = int(request.query_params.get('page', 1))
            limit = max(1, min(int(request.query_params.get('limit', 50)), 200))
        except ValueError:
            return Response({'error': 'page and limit must be integers'}, status=status.HTTP_400_BAD_REQUEST)

        paginator = Paginator(queryset, limit)
        page_obj = paginator.get_page(page)

        serializer = ProductListSerializer(page_obj, many=True)
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
        if role not in (ROLE_ADMIN, ROLE_VENDOR, ROLE_DESIGNER):
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

        serializer = ProductSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        extra = {}
        if role == ROLE_ADMIN:
            extra['status'] = 'approved'
        elif role == ROLE_VENDOR:
            vendor_profile = getattr(user, 'vendor_profile', None)
            if vendor_profile is None:
                return Response({'error': 'Create a vendor profile before adding products'},
                                status=status.HTTP_400_BAD_REQUEST)
            extra['vendor'] = vendor_profile
            extra['status'] = 'pending'
        else:
            # Designer tagging a product found in the wild; admin approves it later
            extra['tagged_by'] = user
            extra['status'] = 'pending'

        product = serializer.save(**extra)
        create_audit_log(
            request=request,
            action='create',
            model_name='Product',
            object_id=product.id,
            object_name=product.name,
            object_reference=product.status,
            changes={'name': product.name, 'status': product.status}
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.select_related('vendor', 'category', 'tagged_by'), pk=pk)

    if request.method == 'GET':
        if product.status != 'approved' and not can_edit_product(request.user, product):
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        serializer = ProductSerializer(product)
        return Response(serializer.data)

    if not can_edit_product(request.user, product):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Product', object_id=product.id,
                             object_name=product.name, changes=dict(request.data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Product', object_id=product.id,
                         object_name=product.name)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pending_products(request):
    """Products waiting for approval, with vendor/designer/search filters"""
    queryset = Product.objects.filter(status='pending').select_related('vendor', 'category', 'tagged_by')

    vendor = request.query_params.get('vendor')
    if vendor:
        queryset = queryset.filter(Q(brand__icontains=vendor) | Q(vendor__company_name__icontains=vendor))

    designer = request.query_params.get('designer')
    if designer:
        queryset = queryset.filter(
            Q(tagged_by__username__icontains=designer) |
            Q(tagged_by__first_name__icontains=designer) |
            Q(tagged_by__last_name__icontains=designer)
        )

    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(brand__icontains=search) | Q(tagged_by__username__icontains=search)
        )

    sort_field = PENDING_SORT_FIELDS.get(request.query_params.get('sortBy', 'taggedAt'), 'created_at')
    if request.query_params.get('sortOrder', 'desc') == 'desc':
        sort_field = f'-{sort_field}'
    queryset = queryset.order_by(sort_field, '-id')

    serializer = ProductSerializer(queryset, many=True)
    return Response({
        'products': serializer.data,
        'total': len(serializer.data),
        'total_pending': Product.objects.filter(status='pending').count(),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_approve(request, pk):
    """Approve a pending product"""
    product = get_object_or_404(Product, pk=pk)
    old_status = product.status
    product.status = 'approved'
    product.rejection_reason = ''
    product.save(update_fields=['status', 'rejection_reason', 'updated_at'])
    create_audit_log(request=request, action='approve', model_name='Product', object_id=product.id,
                     object_name=product.name, changes={'status': {'old': old_status, 'new': 'approved'}})
    logger.info(f"Product {product.id} approved by {request.user.username}")
    return Response(ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_reject(request, pk):
    """Reject a pending product with an optional reason"""
    product = get_object_or_404(Product, pk=pk)
    serializer = ProductRejectSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    old_status = product.status
    product.status = 'rejected'
    product.rejection_reason = serializer.validated_data['reason']
    product.save(update_fields=['status', 'rejection_reason', 'updated_at'])
    create_audit_log(request=request, action='reject', model_name='Product', object_id=product.id,
                     object_name=product.name,
                     changes={'status': {'old': old_status, 'new': 'rejected'}, 'reason': product.rejection_reason})
    logger.info(f"Product {product.id} rejected by {request.user.username}")
    return Response(ProductSerializer(product).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_engage(request, pk):
    """Record a view, scan, like or save on a product"""
    product = get_object_or_404(Product, pk=pk, status='approved')
    serializer = ProductEngageSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    field = ProductEngageSerializer.ACTION_FIELDS[serializer.validated_data['action']]
    Product.objects.filter(pk=product.pk).update(**{field: F(field) + 1})
    product.refresh_from_db(fields=[field])
    return Response({'id': product.id, field: getattr(product, field)})


@cached_query(cache_ttl=TRENDING_PRODUCTS_CACHE_TTL, key_prefix=TRENDING_PRODUCTS_PREFIX)
def get_trending_products(limit, category=None):
    now = timezone.now()
    queryset = Product.objects.filter(status='approved', is_active=True).select_related('vendor', 'category')
    if category:
        queryset = queryset.filter(category__slug=category)

    scored = []
    for product in queryset:
        score = trending_score(product_trending_factors(product, now))
        if score > 0:
            scored.append((score, product))
    scored.sort(key=lambda item: (-item[0], -item[1].id))

    results = []
    for score, product in scored[:limit]:
        data = ProductListSerializer(product).data
        data['trending_score'] = score
        results.append(data)
    return results


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def trending_products(request):
    """Approved products ranked by trending score"""
    try:
        limit = max(1, min(int(request.query_params.get('limit', 10)), 100))
    except ValueError:
        return Response({'error': 'limit must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(get_trending_products(limit, category=request.query_params.get('category') or None))
