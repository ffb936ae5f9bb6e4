from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Count, F
from django.shortcuts import get_object_or_404
from folio.core.roles import get_user_role, ROLE_ADMIN
from folio.core.utils import create_audit_log
from .models import DesignerProfile, VendorProfile
from .serializers import DesignerProfileSerializer, DesignerOnboardingSerializer, VendorProfileSerializer

ADMIN_ONLY_VENDOR_FIELDS = ('is_verified', 'user')


def can_manage_profile(user, profile):
    """Admins manage every profile; owners manage their own"""
    if get_user_role(user) == ROLE_ADMIN:
        return True
    return profile.user_id is not None and profile.user_id == user.id


# Designer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def designer_list_create(request):
    """List designers or create a designer profile (admin)"""
    if request.method == 'GET':
        designers = DesignerProfile.objects.select_related('user')
        search = request.query_params.get('search', '').strip()
        if search:
            designers = designers.filter(
                Q(display_name__icontains=search) | Q(studio__icontains=search) | Q(city__icontains=search)
            )
        city = request.query_params.get('city')
        if city:
            designers = designers.filter(city__iexact=city)
        serializer = DesignerProfileSerializer(designers, many=True)
        return Response(serializer.data)
    else:
        if get_user_role(request.user) != ROLE_ADMIN:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = DesignerProfileSerializer(data=request.data)
        if serializer.is_valid():
            designer = serializer.save()
            create_audit_log(request=request, action='create', model_name='DesignerProfile',
                             object_id=designer.id, object_name=designer.display_name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def designer_detail(request, pk):
    """Retrieve, update or delete a designer profile"""
    designer = get_object_or_404(DesignerProfile.objects.select_related('user'), pk=pk)

    if request.method == 'GET':
        # Public profile views
        DesignerProfile.objects.filter(pk=designer.pk).update(views=F('views') + 1)
        designer.views += 1
        serializer = DesignerProfileSerializer(designer)
        return Response(serializer.data)

    if not can_manage_profile(request.user, designer):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        if get_user_role(request.user) != ROLE_ADMIN:
            data.pop('user', None)
        serializer = DesignerProfileSerializer(designer, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='DesignerProfile',
                             object_id=designer.id, object_name=designer.display_name,
                             changes=dict(data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if get_user_role(request.user) != ROLE_ADMIN:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request=request, action='delete', model_name='DesignerProfile',
                         object_id=designer.id, object_name=designer.display_name)
        designer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def designer_onboarding(request, pk):
    """Onboarding data (profile plus projects with images) and step updates"""
    designer = get_object_or_404(DesignerProfile.objects.select_related('user'), pk=pk)

    if request.method == 'GET':
        from folio.projects.models import Project

        projects = []
        if designer.user_id:
            queryset = Project.objects.filter(designer_id=designer.user_id).prefetch_related('images').order_by('-created_at')
            for project in queryset:
                projects.append({
                    'id': project.id,
                    'title': project.title,
                    'description': project.description,
                    'images': [{'id': image.id, 'url': image.url} for image in project.images.all()],
                })
        data = DesignerProfileSerializer(designer).data
        data['projects'] = projects
        return Response(data)

    if not can_manage_profile(request.user, designer):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = DesignerOnboardingSerializer(designer, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(DesignerProfileSerializer(designer).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Vendor views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def vendor_list_create(request):
    """List vendors or create a vendor profile (admin)"""
    if request.method == 'GET':
        vendors = VendorProfile.objects.select_related('user').annotate(product_count=Count('products'))
        search = request.query_params.get('search', '').strip()
        if search:
            vendors = vendors.filter(Q(company_name__icontains=search) | Q(description__icontains=search))
        verified = request.query_params.get('is_verified')
        if verified is not None:
            vendors = vendors.filter(is_verified=verified.lower() == 'true')
        serializer = VendorProfileSerializer(vendors, many=True)
        return Response(serializer.data)
    else:
        if get_user_role(request.user) != ROLE_ADMIN:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        serializer = VendorProfileSerializer(data=request.data)
        if serializer.is_valid():
            vendor = serializer.save()
            create_audit_log(request=request, action='create', model_name='VendorProfile',
                             object_id=vendor.id, object_name=vendor.company_name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def vendor_detail(request, pk):
    """Retrieve, update or delete a vendor profile"""
    vendor = get_object_or_404(VendorProfile.objects.select_related('user'), pk=pk)

    if request.method == 'GET':
        VendorProfile.objects.filter(pk=vendor.pk).update(views=F('views') + 1)
        vendor.views += 1
        serializer = VendorProfileSerializer(vendor)
        return Response(serializer.data)

    if not can_manage_profile(request.user, vendor):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    is_admin = get_user_role(request.user) == ROLE_ADMIN

    if request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        if not is_admin:
            for field in ADMIN_ONLY_VENDOR_FIELDS:
                data.pop(field, None)
        serializer = VendorProfileSerializer(vendor, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='VendorProfile',
                             object_id=vendor.id, object_name=vendor.company_name, changes=dict(data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not is_admin:
            return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request=request, action='delete', model_name='VendorProfile',
                         object_id=vendor.id, object_name=vendor.company_name)
        vendor.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
