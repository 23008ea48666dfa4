from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.staffs.models import Employee
from apps.students.models import Student

POSITIVE_AMOUNT = [MinValueValidator(Decimal('0.01'))]


class PaymentMode(models.TextChoices):
    CASH = 'Cash', _('Cash')
    UPI = 'UPI', _('UPI')
    BANK_TRANSFER = 'Bank Transfer', _('Bank Transfer')
    CHEQUE = 'Cheque', _('Cheque')
    CARD = 'Card', _('Card')


class FeeStructure(models.Model):
    """A named fee charged to a class"""

    class Frequency(models.TextChoices):
        MONTHLY = 'Monthly', _('Monthly')
        QUARTERLY = 'Quarterly', _('Quarterly')
        YEARLY = 'Yearly', _('Yearly')
        ONE_TIME = 'One Time', _('One Time')

    name = models.CharField(max_length=200)
    class_name = models.CharField(max_length=100, verbose_name=_("Class"))
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=POSITIVE_AMOUNT)
    frequency = models.CharField(max_length=20, choices=Frequency.choices, default=Frequency.MONTHLY)
    due_date_day = models.PositiveSmallIntegerField(
        default=10,
        validators=[MinValueValidator(1)],
        help_text=_("Day of the month the fee falls due")
    )
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fee_structures'
        ordering = ['class_name', 'name']

    def __str__(self):
        return f"{self.name} - {self.class_name} ({self.amount})"


class Discount(models.Model):
    """
    Fee discount (student) or salary bonus (employee).

    Student discounts are subtracted from the base amount, employee
    bonuses are added to it.
    """

    class Category(models.TextChoices):
        STUDENT = 'student', _('Student Discount')
        EMPLOYEE = 'employee', _('Employee Bonus')

    class Type(models.TextChoices):
        PERCENTAGE = 'percentage', _('Percentage')
        FLAT = 'flat', _('Flat Amount')

    name = models.CharField(max_length=200)
    category = models.CharField(max_length=10, choices=Category.choices)
    type = models.CharField(max_length=12, choices=Type.choices)
    value = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0'))]
    )
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'discounts'
        ordering = ['category', 'name']

    def __str__(self):
        suffix = '%' if self.type == self.Type.PERCENTAGE else ''
        return f"{self.name} ({self.value}{suffix})"


class FeePayment(models.Model):
    """Fee received from a student; payments are never edited or voided"""

    student = models.ForeignKey(Student, on_delete=models.PROTECT, related_name='fee_payments')
    fee_structure = models.ForeignKey(
        FeeStructure, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments'
    )
    discount = models.ForeignKey(
        Discount, on_delete=models.SET_NULL, null=True, blank=True, related_name='fee_payments'
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=POSITIVE_AMOUNT)
    payment_date = models.DateField(default=timezone.localdate)
    payment_mode = models.CharField(max_length=20, choices=PaymentMode.choices, default=PaymentMode.CASH)
    transaction_ref = models.CharField(max_length=100, blank=True)
    remarks = models.TextField(blank=True)
    received_by = models.CharField(max_length=254, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'fee_payments'
        ordering = ['-payment_date', '-id']

    def __str__(self):
        return f"{self.student} paid {self.amount} on {self.payment_date}"


class SalaryPayment(models.Model):
    """Salary paid to an employee for a month; append-only"""

    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name='salary_payments')
    bonus = models.ForeignKey(
        Discount, on_delete=models.SET_NULL, null=True, blank=True, related_name='salary_payments'
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, validators=POSITIVE_AMOUNT)
    payment_date = models.DateField(default=timezone.localdate)
    payment_for_month = models.DateField(help_text=_("First day of the month being paid"))
    payment_mode = models.CharField(max_length=20, choices=PaymentMode.choices, default=PaymentMode.BANK_TRANSFER)
    transaction_details = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'salary_payments'
        ordering = ['-payment_for_month', '-id']

    def __str__(self):
        return f"{self.employee.full_name} - {self.payment_for_month:%B %Y}"


class Expense(models.Model):
    class Category(models.TextChoices):
        UTILITIES = 'Utilities', _('Utilities')
        MAINTENANCE = 'Maintenance', _('Maintenance')
        SALARY = 'Salary', _('Salary')
        EVENTS = 'Events', _('Events')
        SUPPLIES = 'Supplies', _('Supplies')
        OTHER = 'Other', _('Other')

    title = models.CharField(max_length=200)
    category = models.CharField(max_length=20, choices=Category.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=POSITIVE_AMOUNT)
    date = models.DateField(default=timezone.localdate)
    payment_mode = models.CharField(max_length=20, choices=PaymentMode.choices, default=PaymentMode.CASH)
    recipient = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-id']

    def __str__(self):
        return f"{self.title} ({self.amount})"
