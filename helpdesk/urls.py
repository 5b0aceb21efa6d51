"""
helpdesk/urls.py
================
URL patterns for the help desk app.
"""

from django.urls import path
from . import views

urlpatterns = [
    # ── Authentication
    path("",         views.index,       name="index"),
    path("login/",   views.login_view,  name="login"),
    path("signup/",  views.signup,      name="signup"),
    path("logout/",  views.logout_view, name="logout"),

    # ── User-facing (login required)
    path("dashboard/",                  views.dashboard,     name="dashboard"),
    path("tickets/new/",                views.ticket_create, name="ticket_create"),
    path("tickets/<str:ticket_id>/",    views.ticket_detail, name="ticket_detail"),

    # ── Admin console
    path("admin/",                      views.admin_console, name="admin_console"),

    # ── Exports (CSV / XLSX / PDF)
    path("admin/export/csv/",           views.export_csv,    name="export_csv"),
    path("admin/export/xlsx/",          views.export_xlsx,   name="export_xlsx"),
    path("admin/export/pdf/",           views.export_pdf,    name="export_pdf"),

    # ── Knowledge base
    path("kb/",                         views.knowledge_base, name="knowledge_base"),
    path("kb/new/",                     views.article_edit,   name="article_create"),
    path("kb/<int:article_id>/edit/",   views.article_edit,   name="article_edit"),
    path("kb/<int:article_id>/delete/", views.article_delete, name="article_delete"),

    # ── Theme & attachments
    path("theme/",                          views.set_theme,          name="set_theme"),
    path("attachments/<uuid:file_id>/",         views.attachment_view,    name="attachment_view"),
    path("attachments/<uuid:file_id>/preview/", views.attachment_preview, name="attachment_preview"),
]
