from django import forms
from django.utils.translation import gettext_lazy as _

from apps.corecode.models import SiteConfig
from .models import Employee, EmployeeDocument, SalaryConfig, SalaryFrequency, StaffLevel


class EmployeeForm(forms.ModelForm):
    class Meta:
        model = Employee
        fields = [
            'full_name', 'designation', 'department', 'level',
            'phone', 'email', 'address', 'dob', 'gender', 'blood_group',
            'qualification', 'experience_details', 'total_experience', 'joining_date',
            'status',
            'bank_name', 'bank_account_no', 'bank_ifsc_code', 'bank_branch_name',
            'account_holder_name', 'upi_id',
            'salary_amount', 'salary_frequency',
        ]
        widgets = {
            'dob': forms.DateInput(attrs={'type': 'date'}),
            'joining_date': forms.DateInput(attrs={'type': 'date'}),
            'address': forms.Textarea(attrs={'rows': 3}),
        }

    DEFAULTS = {
        'level': StaffLevel.SENIOR,
        'salary_frequency': SalaryFrequency.MONTHLY,
        'status': Employee.Status.ACTIVE,
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in self.DEFAULTS:
            self.fields[name].required = False

    def clean(self):
        cleaned_data = super().clean()
        for name, default in self.DEFAULTS.items():
            if not cleaned_data.get(name):
                cleaned_data[name] = default
        return cleaned_data

    def clean_salary_amount(self):
        amount = self.cleaned_data.get('salary_amount')
        if amount is not None and amount < 0:
            raise forms.ValidationError(_("Salary cannot be negative"))
        return amount


class SalaryConfigForm(forms.ModelForm):
    class Meta:
        model = SalaryConfig
        fields = ['department', 'level', 'amount', 'frequency', 'position']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('level', 'frequency', 'position'):
            self.fields[name].required = False

    def clean_level(self):
        return self.cleaned_data.get('level') or StaffLevel.SENIOR

    def clean_frequency(self):
        return self.cleaned_data.get('frequency') or SalaryFrequency.MONTHLY

    def clean_position(self):
        position = self.cleaned_data.get('position')
        return 0 if position is None else position

    def clean_department(self):
        department = self.cleaned_data['department'].strip()
        known = SiteConfig.get_value(SiteConfig.DEPARTMENTS) or []
        if known and department not in known:
            raise forms.ValidationError(
                _("Unknown department. Choose one of: %(departments)s") % {'departments': ', '.join(known)}
            )
        return department


class EmployeeDocumentForm(forms.ModelForm):
    class Meta:
        model = EmployeeDocument
        fields = ['document_type', 'file']
