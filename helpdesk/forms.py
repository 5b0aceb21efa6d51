"""
helpdesk/forms.py
=================
Django forms for login, sign-up, tickets, messages, admin actions and
knowledge-base articles.

File inputs are rendered directly in the templates and read from
request.FILES.getlist("files"); none of these forms own them.
"""

from django import forms

from . import conf
from .models import Article, Profile, ThemePreference, Ticket, TicketPriority


class UserLoginForm(forms.Form):
    """
    Profile picker + PIN. Error messages are the ones the login page shows
    verbatim, so they stay user-facing.
    """
    profile = forms.CharField(required=False)
    pin     = forms.CharField(
        required=False,
        widget=forms.PasswordInput(attrs={
            "maxlength": "4", "inputmode": "numeric",
            "placeholder": "Enter 4-digit PIN", "autocomplete": "off",
        }),
    )

    def __init__(self, *args, require_pin=True, **kwargs):
        self.require_pin = require_pin
        super().__init__(*args, **kwargs)

    def clean_pin(self):
        # Browsers may send spaces or separators; keep digits only.
        return "".join(ch for ch in self.cleaned_data.get("pin", "") if ch.isdigit())

    def clean(self):
        cleaned = super().clean()
        profile = cleaned.get("profile", "")
        pin = cleaned.get("pin", "")
        if not profile or (self.require_pin and len(pin) < conf.pin_length()):
            raise forms.ValidationError("Please select a user and enter a 4-digit PIN")
        return cleaned


class AdminLoginForm(forms.Form):
    email    = forms.EmailField(widget=forms.EmailInput(attrs={"placeholder": "admin@example.com"}))
    password = forms.CharField(widget=forms.PasswordInput)


class SignUpForm(forms.Form):
    name = forms.CharField(
        max_length=120,
        widget=forms.TextInput(attrs={"placeholder": "Enter your name"}),
    )
    pin  = forms.CharField(
        widget=forms.PasswordInput(attrs={"maxlength": "4", "inputmode": "numeric", "placeholder": "••••"}),
    )

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Name is required.")
        return name

    def clean_pin(self):
        pin = self.cleaned_data["pin"]
        if len(pin) != conf.pin_length() or not pin.isdigit():
            raise forms.ValidationError("PIN must be exactly 4 digits")
        return pin


class TicketCreateForm(forms.ModelForm):
    priority = forms.ChoiceField(
        choices=TicketPriority.choices,
        initial=TicketPriority.MEDIUM,
        widget=forms.RadioSelect,
    )

    class Meta:
        model = Ticket
        fields = ["title", "description", "priority"]
        widgets = {
            "title":       forms.TextInput(attrs={"placeholder": "Brief summary of the issue"}),
            "description": forms.Textarea(attrs={
                "placeholder": "Detailed explanation... (Markdown supported)", "rows": 5,
            }),
        }


class MessageForm(forms.Form):
    content = forms.CharField(
        required=False,
        widget=forms.TextInput(attrs={"placeholder": "Type your message...", "autocomplete": "off"}),
    )


class ProfileCreateForm(forms.ModelForm):
    class Meta:
        model = Profile
        fields = ["display_name"]
        widgets = {
            "display_name": forms.TextInput(attrs={"placeholder": "e.g. John Doe"}),
        }


class ArticleForm(forms.ModelForm):
    class Meta:
        model = Article
        fields = ["title", "category", "content", "published"]
        widgets = {
            "category": forms.TextInput(attrs={"placeholder": "e.g. Billing, Technical, General"}),
            "content":  forms.Textarea(attrs={"rows": 8}),
        }


class ThemeForm(forms.Form):
    theme = forms.ChoiceField(choices=ThemePreference.choices)
