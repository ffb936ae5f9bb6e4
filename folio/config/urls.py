"""
URL configuration for the folio project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Folio Admin Panel"
admin.site.site_title = "Folio Admin Portal"
admin.site.index_title = "Designers, vendors, products and events"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('folio.core.urls')),
    path('api/v1/', include('folio.parties.urls')),
    path('api/v1/', include('folio.catalog.urls')),
    path('api/v1/', include('folio.projects.urls')),
    path('api/v1/', include('folio.events.urls')),
    path('api/v1/', include('folio.videos.urls')),
    path('api/v1/', include('folio.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
