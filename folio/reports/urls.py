from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard, name='reports-dashboard'),
    path('reports/vendor-analytics/', views.vendor_analytics, name='reports-vendor-analytics'),
]
