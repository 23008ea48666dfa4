from decimal import Decimal

from django import forms
from django.utils.translation import gettext_lazy as _

from apps.staffs.models import Employee
from apps.students.models import Student
from .models import Discount, Expense, FeeStructure, PaymentMode


class FeeStructureForm(forms.ModelForm):
    class Meta:
        model = FeeStructure
        fields = ['name', 'class_name', 'amount', 'frequency', 'due_date_day', 'description']
        widgets = {
            'description': forms.Textarea(attrs={'rows': 3}),
        }

    def clean_due_date_day(self):
        day = self.cleaned_data.get('due_date_day')
        if day is not None and day > 28:
            raise forms.ValidationError(_("Due day must be between 1 and 28"))
        return day


class DiscountForm(forms.ModelForm):
    class Meta:
        model = Discount
        fields = ['name', 'category', 'type', 'value', 'description']

    def clean(self):
        cleaned_data = super().clean()
        if (cleaned_data.get('type') == Discount.Type.PERCENTAGE
                and cleaned_data.get('value') is not None
                and cleaned_data['value'] > Decimal('100')):
            self.add_error('value', _("A percentage cannot exceed 100"))
        return cleaned_data


class FeeCollectionForm(forms.Form):
    """Fee collection; amount falls back to the fee structure's amount"""

    student = forms.ModelChoiceField(queryset=Student.objects.none())
    fee_structure = forms.ModelChoiceField(queryset=FeeStructure.objects.all(), required=False)
    discount = forms.ModelChoiceField(
        queryset=Discount.objects.filter(category=Discount.Category.STUDENT), required=False
    )
    amount = forms.DecimalField(max_digits=12, decimal_places=2, required=False)
    payment_mode = forms.ChoiceField(choices=PaymentMode.choices, initial=PaymentMode.CASH, required=False)
    payment_date = forms.DateField(required=False, widget=forms.DateInput(attrs={'type': 'date'}))
    transaction_ref = forms.CharField(max_length=100, required=False)
    remarks = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 2}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['student'].queryset = Student.get_active_students()
        self.fields['student'].help_text = _("Only active students are shown")

    def clean_payment_mode(self):
        return self.cleaned_data.get('payment_mode') or PaymentMode.CASH

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('amount') is None and not cleaned_data.get('fee_structure'):
            raise forms.ValidationError(_("Enter an amount or choose a fee structure"))
        return cleaned_data


class SalaryPaymentForm(forms.Form):
    employee = forms.ModelChoiceField(queryset=Employee.objects.filter(status=Employee.Status.ACTIVE))
    payment_for_month = forms.DateField(
        input_formats=['%Y-%m', '%Y-%m-%d'],
        help_text=_("Month being paid (YYYY-MM)")
    )
    bonus = forms.ModelChoiceField(
        queryset=Discount.objects.filter(category=Discount.Category.EMPLOYEE), required=False
    )
    amount = forms.DecimalField(max_digits=12, decimal_places=2, required=False)
    payment_mode = forms.ChoiceField(
        choices=PaymentMode.choices, initial=PaymentMode.BANK_TRANSFER, required=False
    )
    payment_date = forms.DateField(required=False, widget=forms.DateInput(attrs={'type': 'date'}))
    transaction_ref = forms.CharField(max_length=100, required=False)
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 2}))

    def clean_payment_mode(self):
        return self.cleaned_data.get('payment_mode') or PaymentMode.BANK_TRANSFER

    def clean(self):
        cleaned_data = super().clean()
        employee = cleaned_data.get('employee')
        if employee and cleaned_data.get('amount') is None and employee.salary_amount is None:
            raise forms.ValidationError(
                _("%(name)s has no salary set; enter an amount") % {'name': employee.full_name}
            )
        return cleaned_data


class ExpenseForm(forms.ModelForm):
    class Meta:
        model = Expense
        fields = ['title', 'category', 'amount', 'date', 'payment_mode', 'recipient', 'notes']
        widgets = {
            'date': forms.DateInput(attrs={'type': 'date'}),
            'notes': forms.Textarea(attrs={'rows': 2}),
        }
