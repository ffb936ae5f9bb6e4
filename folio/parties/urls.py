from django.urls import path
from .views import (
    designer_list_create, designer_detail, designer_onboarding,
    vendor_list_create, vendor_detail
)

urlpatterns = [
    path('designers/', designer_list_create, name='designer-list-create'),
    path('designers/<int:pk>/', designer_detail, name='designer-detail'),
    path('designers/<int:pk>/onboarding/', designer_onboarding, name='designer-onboarding'),
    path('vendors/', vendor_list_create, name='vendor-list-create'),
    path('vendors/<int:pk>/', vendor_detail, name='vendor-detail'),
]
