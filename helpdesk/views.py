"""
helpdesk/views.py
=================
Django views for the help desk.

  - login / signup / logout — PIN logins for users, e-mail logins for admins
  - dashboard, ticket creation and the ticket conversation thread
  - admin console — ticket triage, account approval, security settings
  - exports — CSV, XLSX or PDF of the ticket queue
  - knowledge base — article search for everyone, editing for admins
  - theme switch and access-checked attachment downloads
"""

import csv
import io
import logging
from functools import wraps

from django.contrib import messages
from django.db import DatabaseError
from django.http import FileResponse, Http404, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from . import conf
from .auth import auth_service, is_admin
from .exceptions import HelpdeskError
from .forms import (
    AdminLoginForm,
    ArticleForm,
    MessageForm,
    ProfileCreateForm,
    SignUpForm,
    ThemeForm,
    TicketCreateForm,
    UserLoginForm,
)
from .models import Article, Attachment, Profile, Ticket, TicketPriority, TicketStatus
from .services import db, filter_articles, storage_service

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# AUTH HELPERS
# ---------------------------------------------------------------------------

def login_required(view_fn):
    """Redirect unauthenticated requests to the login page."""
    @wraps(view_fn)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect("login")
        return view_fn(request, *args, **kwargs)
    return wrapper


def admin_required(view_fn):
    """Send anonymous visitors to login and regular users to their dashboard."""
    @wraps(view_fn)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect("login")
        if not is_admin(request.user):
            return redirect("dashboard")
        return view_fn(request, *args, **kwargs)
    return wrapper


def _home_for(user) -> str:
    return "admin_console" if is_admin(user) else "dashboard"


def _is_verified(request) -> bool:
    if is_admin(request.user):
        return True
    profile = db.get_profile_by_user_id(request.user.pk)
    return bool(profile and profile.verified)


def _get_visible_ticket(request, ticket_id) -> Ticket:
    """The ticket, if the current user may see it; 404 otherwise."""
    try:
        ticket = db.get_ticket(ticket_id)
    except Ticket.DoesNotExist:
        raise Http404("Ticket not found")
    if not is_admin(request.user) and ticket.owner_id != request.user.pk:
        raise Http404("Ticket not found")
    return ticket


# ---------------------------------------------------------------------------
# LOGIN / SIGN-UP / LOGOUT
# ---------------------------------------------------------------------------

def index(request):
    return redirect("login")


def login_view(request):
    """
    GET  — show the login page in user mode (profile + PIN) or admin mode.
    POST — forward the credentials to the auth service.
    """
    if request.user.is_authenticated:
        return redirect(_home_for(request.user))

    mode = request.GET.get("mode") or request.POST.get("mode") or "user"
    if mode not in ("user", "admin"):
        mode = "user"

    require_pin = db.is_setting_enabled(conf.REQUIRE_PIN_KEY, default=True)
    profiles = db.get_profiles() if mode == "user" else []
    error = ""

    if mode == "user":
        form = UserLoginForm(request.POST or None, require_pin=require_pin)
    else:
        form = AdminLoginForm(request.POST or None)

    if request.method == "POST":
        if form.is_valid():
            try:
                if mode == "user":
                    profile_id = form.cleaned_data["profile"]
                    profile = next((p for p in profiles if str(p.pk) == profile_id), None)
                    if profile is None:
                        raise HelpdeskError("User not found")
                    user = auth_service.login_user(
                        request, profile.display_name, form.cleaned_data["pin"],
                        require_pin=require_pin,
                    )
                else:
                    user = auth_service.login_admin(
                        request, form.cleaned_data["email"], form.cleaned_data["password"],
                    )
                return redirect(_home_for(user))
            except HelpdeskError as exc:
                error = str(exc)
            except DatabaseError:
                logger.exception("Login failed in %s mode", mode)
                error = "Login failed. Please check your credentials."
        else:
            errors = form.non_field_errors()
            error = errors[0] if errors else "Login failed. Please check your credentials."

    return render(request, "helpdesk/login.html", {
        "form":        form,
        "mode":        mode,
        "profiles":    profiles,
        "require_pin": require_pin,
        "error":       error,
    })


def signup(request):
    """Register the account, log in with it, then create the profile."""
    if request.user.is_authenticated:
        return redirect(_home_for(request.user))

    form = SignUpForm(request.POST or None)
    error = ""

    if request.method == "POST" and form.is_valid():
        name = form.cleaned_data["name"]
        pin  = form.cleaned_data["pin"]
        try:
            auth_service.register_user(name, pin)
            user = auth_service.login_user(request, name, pin)
            db.create_profile(user, name)
            return redirect("dashboard")
        except HelpdeskError as exc:
            error = str(exc)
        except DatabaseError:
            logger.exception("Sign-up failed for %s", name)
            error = "Failed to sign up"

    return render(request, "helpdesk/signup.html", {"form": form, "error": error})


@require_POST
def logout_view(request):
    auth_service.logout(request)
    return redirect("login")


# ---------------------------------------------------------------------------
# DASHBOARD & TICKETS
# ---------------------------------------------------------------------------

@login_required
def dashboard(request):
    admin = is_admin(request.user)
    try:
        tickets = db.get_tickets(None if admin else request.user.pk)
    except DatabaseError:
        messages.error(request, "Failed to load tickets.")
        tickets = []

    return render(request, "helpdesk/dashboard.html", {
        "tickets":  tickets,
        "verified": _is_verified(request),
    })


@login_required
def ticket_create(request):
    """
    GET  — show the new-ticket form.
    POST — upload each attached file, then create the ticket.
    """
    if not _is_verified(request):
        messages.error(request, "Your account is pending approval. You cannot create tickets yet.")
        return redirect("dashboard")

    form = TicketCreateForm(request.POST or None)

    if request.method == "POST" and form.is_valid():
        try:
            attachment_ids = storage_service.upload_files(
                request.FILES.getlist("files"), uploaded_by=request.user,
            )
            ticket = db.create_ticket(
                request.user,
                form.cleaned_data["title"],
                form.cleaned_data["description"],
                form.cleaned_data["priority"],
                attachment_ids,
            )
            messages.success(request, f"Ticket {ticket.ticket_id} created.")
            return redirect("ticket_detail", ticket_id=ticket.ticket_id)
        except HelpdeskError as exc:
            messages.error(request, str(exc))
        except (DatabaseError, OSError):
            messages.error(request, "Failed to create ticket")

    return render(request, "helpdesk/ticket_form.html", {
        "form":              form,
        "priority_choices":  TicketPriority.choices,
    })


@login_required
def ticket_detail(request, ticket_id):
    """
    GET  — ticket card and conversation thread.
    POST — action=message to reply (with optional files),
           action=status (admins) to resolve or close.
    """
    ticket = _get_visible_ticket(request, ticket_id)
    admin = is_admin(request.user)

    if request.method == "POST":
        action = request.POST.get("action", "message")

        if action == "status":
            new_status = request.POST.get("status", "")
            if not admin:
                raise Http404("Ticket not found")
            if new_status in TicketStatus.values:
                try:
                    db.update_ticket_status(ticket.ticket_id, new_status)
                    messages.success(request, f"Ticket marked as {TicketStatus(new_status).label}.")
                except DatabaseError:
                    messages.error(request, "Failed to update status")

        elif action == "message":
            form = MessageForm(request.POST)
            files = request.FILES.getlist("files")
            content = form.cleaned_data["content"] if form.is_valid() else ""
            if content.strip() or files:
                try:
                    attachment_ids = storage_service.upload_files(files, uploaded_by=request.user)
                    db.create_message(ticket.ticket_id, request.user, content, attachment_ids)
                except HelpdeskError as exc:
                    messages.error(request, f"Failed to send message: {exc}")
                except (DatabaseError, OSError):
                    messages.error(request, "Failed to send message")

        return redirect("ticket_detail", ticket_id=ticket.ticket_id)

    try:
        thread = db.get_messages(ticket.ticket_id)
    except DatabaseError:
        messages.error(request, "Failed to load ticket data")
        thread = []

    return render(request, "helpdesk/ticket_detail.html", {
        "ticket":       ticket,
        "thread":       thread,
        "message_form": MessageForm(),
        "is_admin":     admin,
    })


# ---------------------------------------------------------------------------
# ADMIN CONSOLE
# ---------------------------------------------------------------------------

ADMIN_TABS = ("tickets", "users", "settings")


def _filtered_tickets(request):
    """All tickets, narrowed by ?status= and ?priority= when given."""
    tickets = db.get_tickets(None)
    status_filter   = request.GET.get("status", "")
    priority_filter = request.GET.get("priority", "")
    if status_filter:
        tickets = [t for t in tickets if t.status == status_filter]
    if priority_filter:
        tickets = [t for t in tickets if t.priority == priority_filter]
    return tickets


def _admin_tab_url(tab: str) -> str:
    return f"{reverse('admin_console')}?tab={tab}"


@admin_required
def admin_console(request):
    if request.method == "POST":
        return _admin_action(request)

    tab = request.GET.get("tab", "tickets")
    if tab not in ADMIN_TABS:
        tab = "tickets"

    context = {
        "tab":             tab,
        "status_filter":   request.GET.get("status", ""),
        "priority_filter": request.GET.get("priority", ""),
        "status_choices":   [("", "All Statuses")] + list(TicketStatus.choices),
        "priority_choices": [("", "All Priorities")] + list(TicketPriority.choices),
        "profile_form":    ProfileCreateForm(),
    }
    try:
        if tab == "tickets":
            context["tickets"] = _filtered_tickets(request)
        elif tab == "users":
            context["profiles"] = db.get_profiles()
        else:
            context["pin_enabled"] = db.is_setting_enabled(conf.REQUIRE_PIN_KEY, default=True)
    except DatabaseError:
        messages.error(request, "Failed to load admin data")

    return render(request, "helpdesk/admin_console.html", context)


def _admin_action(request):
    action = request.POST.get("action", "")

    try:
        if action == "close_ticket":
            # The queue's "delete" keeps the record and closes it.
            db.update_ticket_status(request.POST.get("ticket_id", ""), TicketStatus.CLOSED)
            messages.success(request, "Ticket closed.")
            return redirect(_admin_tab_url("tickets"))

        if action == "verify_user":
            try:
                profile = db.verify_user(request.POST.get("profile_id", ""))
            except ValueError:
                raise Http404("Record not found")
            messages.success(request, f"{profile.display_name} approved.")
            return redirect(_admin_tab_url("users"))

        if action == "create_profile":
            form = ProfileCreateForm(request.POST)
            if form.is_valid():
                db.create_profile(None, form.cleaned_data["display_name"])
                messages.info(
                    request,
                    "Local profile created. The user still needs a login account "
                    "before they can sign in.",
                )
            else:
                messages.error(request, "Failed to create user profile")
            return redirect(_admin_tab_url("users"))

        if action == "toggle_pin":
            enabled = db.is_setting_enabled(conf.REQUIRE_PIN_KEY, default=True)
            db.update_global_setting(conf.REQUIRE_PIN_KEY, not enabled)
            messages.success(
                request, "PIN login is now required." if not enabled else "PIN login is now optional.",
            )
            return redirect(_admin_tab_url("settings"))

    except (Ticket.DoesNotExist, Profile.DoesNotExist):
        raise Http404("Record not found")
    except DatabaseError:
        messages.error(request, "The change could not be saved.")
        return redirect("admin_console")

    return redirect("admin_console")


# ---------------------------------------------------------------------------
# EXPORT REPORTS
# ---------------------------------------------------------------------------

EXPORT_COLUMNS = [
    ("ticket_id",   "Ticket ID"),
    ("created_at",  "Created"),
    ("owner",       "Filed By"),
    ("title",       "Title"),
    ("priority",    "Priority"),
    ("status",      "Status"),
    ("messages",    "Messages"),
    ("attachments", "Attachments"),
    ("updated_at",  "Last Update"),
]


def _ticket_row(ticket):
    return [
        ticket.ticket_id,
        timezone.localtime(ticket.created_at).strftime("%Y-%m-%d %H:%M"),
        ticket.owner_name,
        ticket.title,
        ticket.get_priority_display(),
        ticket.get_status_display(),
        ticket.messages.count(),
        ticket.attachments.count(),
        timezone.localtime(ticket.updated_at).strftime("%Y-%m-%d %H:%M"),
    ]


@admin_required
def export_csv(request):
    tickets = _filtered_tickets(request)
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = 'attachment; filename="helpdesk_tickets.csv"'

    writer = csv.writer(response)
    writer.writerow([col[1] for col in EXPORT_COLUMNS])
    for ticket in tickets:
        writer.writerow(_ticket_row(ticket))

    return response


@admin_required
def export_xlsx(request):
    from openpyxl import Workbook
    from openpyxl.styles import Font
    from openpyxl.utils import get_column_letter

    tickets = _filtered_tickets(request)

    wb = Workbook()
    ws = wb.active
    ws.title = "Tickets"

    ws.append([label for _, label in EXPORT_COLUMNS])
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for ticket in tickets:
        ws.append(_ticket_row(ticket))

    col_widths = [12, 17, 22, 44, 10, 13, 10, 12, 17]
    for i, w in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = w
    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)

    response = HttpResponse(
        output.getvalue(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    response["Content-Disposition"] = 'attachment; filename="helpdesk_tickets.xlsx"'
    return response


@admin_required
def export_pdf(request):
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    tickets = _filtered_tickets(request)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(letter))
    styles = getSampleStyleSheet()

    table_data = [["ID", "Created", "Filed By", "Title", "Priority", "Status", "Msgs"]]
    for ticket in tickets:
        row = _ticket_row(ticket)
        table_data.append([row[0], row[1], row[2][:24], ticket.title[:60], row[4], row[5], row[6]])

    tbl = Table(table_data, repeatRows=1)
    tbl.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0),  "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID",     (0, 0), (-1, -1), 0.4, colors.grey),
    ]))

    doc.build([
        Paragraph("Help Desk Tickets", styles["Heading1"]),
        Paragraph(
            f"Generated {timezone.localtime().strftime('%Y-%m-%d %H:%M')}, {len(tickets)} tickets",
            styles["Normal"],
        ),
        tbl,
    ])

    response = HttpResponse(buffer.getvalue(), content_type="application/pdf")
    response["Content-Disposition"] = 'attachment; filename="helpdesk_tickets.pdf"'
    return response


# ---------------------------------------------------------------------------
# KNOWLEDGE BASE
# ---------------------------------------------------------------------------

@login_required
def knowledge_base(request):
    term = request.GET.get("q", "").strip()
    try:
        articles = db.get_articles(published_only=not is_admin(request.user))
    except DatabaseError:
        messages.error(request, "Failed to load articles")
        articles = []

    return render(request, "helpdesk/knowledge_base.html", {
        "articles": filter_articles(articles, term) if term else articles,
        "q":        term,
    })


@admin_required
def article_edit(request, article_id=None):
    """Create (no article_id) or edit an article."""
    article = None
    if article_id is not None:
        try:
            article = db.get_article(article_id)
        except Article.DoesNotExist:
            raise Http404("Article not found")

    form = ArticleForm(request.POST or None, instance=article)

    if request.method == "POST" and form.is_valid():
        data = form.cleaned_data
        try:
            if article is None:
                db.create_article(data["title"], data["content"], data["category"],
                                  published=data["published"])
            else:
                db.update_article(article.pk, **data)
            return redirect("knowledge_base")
        except DatabaseError:
            messages.error(request, "Failed to save article")

    return render(request, "helpdesk/article_form.html", {"form": form, "article": article})


@admin_required
@require_POST
def article_delete(request, article_id):
    try:
        db.delete_article(article_id)
    except DatabaseError:
        messages.error(request, "Failed to delete article")
    return redirect("knowledge_base")


# ---------------------------------------------------------------------------
# THEME
# ---------------------------------------------------------------------------

@require_POST
def set_theme(request):
    """Remember the theme in the session and, for users, on their profile."""
    form = ThemeForm(request.POST)
    if form.is_valid():
        theme = form.cleaned_data["theme"]
        request.session["theme"] = theme
        if request.user.is_authenticated and not is_admin(request.user):
            profile = db.get_profile_by_user_id(request.user.pk)
            if profile is not None:
                try:
                    db.update_profile_theme(profile.pk, theme)
                except DatabaseError:
                    messages.error(request, "Theme could not be saved to your profile.")

    next_url = request.POST.get("next", "")
    if url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect("login")


# ---------------------------------------------------------------------------
# ATTACHMENTS
# ---------------------------------------------------------------------------

def _get_visible_attachment(request, file_id) -> Attachment:
    try:
        attachment = Attachment.objects.get(pk=file_id)
    except (Attachment.DoesNotExist, ValueError):
        raise Http404("File not found")

    if is_admin(request.user) or attachment.uploaded_by_id == request.user.pk:
        return attachment
    owns_ticket = (
        attachment.tickets.filter(owner_id=request.user.pk).exists()
        or attachment.messages.filter(ticket__owner_id=request.user.pk).exists()
    )
    if not owns_ticket:
        raise Http404("File not found")
    return attachment


def _stream(attachment: Attachment) -> FileResponse:
    return FileResponse(
        attachment.file.open("rb"),
        content_type=attachment.content_type or "application/octet-stream",
        filename=attachment.name,
    )


@login_required
def attachment_view(request, file_id):
    return _stream(_get_visible_attachment(request, file_id))


@login_required
def attachment_preview(request, file_id):
    attachment = _get_visible_attachment(request, file_id)
    if not attachment.is_image:
        raise Http404("No preview available")
    return _stream(attachment)
