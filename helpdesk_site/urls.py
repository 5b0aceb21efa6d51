"""
helpdesk_site/urls.py
=====================
Root URL configuration. Uploaded attachments are never served from
MEDIA_URL directly; they go through the access-checked views in helpdesk.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("django-admin/", admin.site.urls),
    path("", include("helpdesk.urls")),
]
