from django.urls import path
from .views import (
    category_list_create, category_detail,
    product_list_create, product_detail, pending_products,
    product_approve, product_reject, product_engage, trending_products
)

urlpatterns = [
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),
    path('products/', product_list_create, name='product-list-create'),
    path('products/pending/', pending_products, name='product-pending'),
    path('products/trending/', trending_products, name='product-trending'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/approve/', product_approve, name='product-approve'),
    path('products/<int:pk>/reject/', product_reject, name='product-reject'),
    path('products/<int:pk>/engage/', product_engage, name='product-engage'),
]
