import datetime

from django import forms
from django.utils.translation import gettext_lazy as _

from .models import AdmissionEnquiry, StudentRegistration
from .workflow import coerce_enquiry_status


def validate_dob(dob):
    if dob and dob > datetime.date.today():
        raise forms.ValidationError(_("Date of birth cannot be in the future"))
    return dob


class EnquiryForm(forms.ModelForm):
    """Enquiry capture; free-text statuses from older screens are mapped onto the enum"""

    response_status = forms.CharField(max_length=100, required=False)

    class Meta:
        model = AdmissionEnquiry
        fields = [
            'full_name', 'gender', 'dob', 'class_applying_for', 'no_of_child',
            'previous_school', 'father_name', 'mother_name', 'mobile_no', 'email',
            'address', 'assigned_to', 'reference', 'enquiry_date', 'next_follow_up',
            'response_status', 'internal_notes',
        ]
        widgets = {
            'dob': forms.DateInput(attrs={'type': 'date'}),
            'enquiry_date': forms.DateInput(attrs={'type': 'date'}),
            'next_follow_up': forms.DateInput(attrs={'type': 'date'}),
            'address': forms.Textarea(attrs={'rows': 3}),
            'internal_notes': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['no_of_child'].required = False
        self.fields['enquiry_date'].required = False

    def clean_dob(self):
        return validate_dob(self.cleaned_data.get('dob'))

    def clean_mobile_no(self):
        mobile = (self.cleaned_data.get('mobile_no') or '').strip()
        if not (mobile.isdigit() and len(mobile) == 10):
            raise forms.ValidationError(_("Mobile number must be exactly 10 digits"))
        return mobile

    def clean_no_of_child(self):
        return self.cleaned_data.get('no_of_child') or 1

    def clean_enquiry_date(self):
        return self.cleaned_data.get('enquiry_date') or datetime.date.today()

    def clean_response_status(self):
        if not self.cleaned_data.get('response_status') and self.instance.pk:
            return self.instance.response_status
        return coerce_enquiry_status(self.cleaned_data.get('response_status'))


class RegistrationForm(forms.ModelForm):
    class Meta:
        model = StudentRegistration
        fields = [
            'full_name', 'gender', 'dob', 'email', 'phone', 'address',
            'father_name', 'mother_name', 'class_enrolled', 'previous_school',
            'admission_date',
        ]
        widgets = {
            'dob': forms.DateInput(attrs={'type': 'date'}),
            'admission_date': forms.DateInput(attrs={'type': 'date'}),
            'address': forms.Textarea(attrs={'rows': 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['admission_date'].required = False

    def clean_dob(self):
        return validate_dob(self.cleaned_data.get('dob'))

    def clean_phone(self):
        phone = (self.cleaned_data.get('phone') or '').strip()
        if not (phone.isdigit() and len(phone) == 10):
            raise forms.ValidationError(_("Phone number must be exactly 10 digits"))
        return phone

    def clean_admission_date(self):
        return self.cleaned_data.get('admission_date') or datetime.date.today()


class BulkReviewForm(forms.Form):
    registration_ids = forms.CharField(help_text=_("Comma separated registration ids"))
    decision = forms.ChoiceField(choices=[('approved', _('Approve')), ('rejected', _('Reject'))])

    def clean_registration_ids(self):
        raw = self.cleaned_data['registration_ids']
        try:
            ids = [int(part) for part in raw.split(',') if part.strip()]
        except ValueError:
            raise forms.ValidationError(_("Registration ids must be numbers"))
        if not ids:
            raise forms.ValidationError(_("Select at least one registration"))
        return ids
