from django import forms
from django.contrib.auth import authenticate
from django.contrib.auth.forms import UserCreationForm
from django.contrib.auth.models import User
from django.utils.translation import gettext_lazy as _

from .models import SiteConfig


class EmailLoginForm(forms.Form):
    """Sign in with the account email and password"""

    email = forms.EmailField()
    password = forms.CharField(strip=False, widget=forms.PasswordInput)

    def __init__(self, request=None, *args, **kwargs):
        self.request = request
        self.user_cache = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        email = cleaned_data.get('email')
        password = cleaned_data.get('password')
        if email and password:
            account = User.objects.filter(email__iexact=email).order_by('pk').first()
            if account is not None:
                self.user_cache = authenticate(
                    self.request, username=account.get_username(), password=password
                )
            if self.user_cache is None:
                raise forms.ValidationError(_("Invalid email or password"), code='invalid_login')
        return cleaned_data

    def get_user(self):
        return self.user_cache


class SignUpForm(UserCreationForm):
    """Staff sign-up; the full name is split into first and last name"""

    full_name = forms.CharField(max_length=150)
    email = forms.EmailField()

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('username', 'full_name', 'email')

    def clean_email(self):
        email = self.cleaned_data['email'].lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError(_("An account with this email already exists"))
        return email

    def save(self, commit=True):
        user = super().save(commit=False)
        first, _sep, last = self.cleaned_data['full_name'].strip().partition(' ')
        user.first_name = first
        user.last_name = last.strip()
        user.email = self.cleaned_data['email']
        if commit:
            user.save()
        return user


def _split_lines(value):
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = (value or '').replace(',', '\n').splitlines()
    return [item.strip() for item in items if item.strip()]


class SiteSettingsForm(forms.Form):
    """School settings; list values accept one entry per line or comma separated"""

    school_name = forms.CharField(max_length=200, required=False)
    currency_symbol = forms.CharField(max_length=5, required=False)
    classes = forms.CharField(required=False, widget=forms.Textarea)
    sections = forms.CharField(required=False, widget=forms.Textarea)
    subjects = forms.CharField(required=False, widget=forms.Textarea)
    departments = forms.CharField(required=False, widget=forms.Textarea)
    designations = forms.CharField(required=False, widget=forms.Textarea)
    logo = forms.ImageField(required=False)

    LIST_FIELDS = ('classes', 'sections', 'subjects', 'departments', 'designations')

    def clean(self):
        cleaned_data = super().clean()
        for name in self.LIST_FIELDS:
            if name in self.data:
                cleaned_data[name] = _split_lines(cleaned_data.get(name))
            else:
                cleaned_data[name] = None
        return cleaned_data
