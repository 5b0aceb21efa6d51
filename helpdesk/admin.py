"""
helpdesk/admin.py
=================
Registers the help desk models with Django's built-in admin interface,
providing a fallback management UI out of the box.
"""

from django.contrib import admin
from .models import Article, Attachment, GlobalSetting, Message, Profile, Ticket


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display  = ["display_name", "user", "verified", "theme_pref", "created_at"]
    list_filter   = ["verified", "theme_pref"]
    search_fields = ["display_name", "user__email"]
    actions       = ["approve"]

    @admin.action(description="Approve selected accounts")
    def approve(self, request, queryset):
        queryset.update(verified=True)


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ["sender", "content", "created_at"]
    readonly_fields = ["created_at"]


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display    = ["ticket_id", "title", "owner", "priority", "status", "created_at"]
    list_filter     = ["status", "priority"]
    search_fields   = ["ticket_id", "title", "description", "owner__email"]
    readonly_fields = ["ticket_id", "created_at", "updated_at"]
    filter_horizontal = ["attachments"]
    inlines         = [MessageInline]

    fieldsets = [
        ("Ticket Identity", {"fields": ["ticket_id", "owner", "status", "priority"]}),
        ("Issue Details",   {"fields": ["title", "description", "attachments"]}),
        ("Timestamps",      {"fields": ["created_at", "updated_at"]}),
    ]


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display  = ["name", "content_type", "size", "uploaded_by", "created_at"]
    search_fields = ["name"]


@admin.register(GlobalSetting)
class GlobalSettingAdmin(admin.ModelAdmin):
    list_display = ["key", "value"]


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display  = ["title", "category", "published", "updated_at"]
    list_filter   = ["published", "category"]
    search_fields = ["title", "content", "category"]
