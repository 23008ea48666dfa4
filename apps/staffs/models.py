from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.students.models import GENDER_CHOICES


class StaffLevel(models.TextChoices):
    SENIOR = 'Senior', _('Senior')
    JUNIOR = 'Junior', _('Junior')
    INTERN = 'Intern', _('Intern')
    HOD = 'HOD', _('Head of Department')


class SalaryFrequency(models.TextChoices):
    MONTHLY = 'Monthly', _('Monthly')
    YEARLY = 'Yearly', _('Yearly')
    DAILY = 'Daily', _('Daily')


class Employee(models.Model):
    """Teaching and non-teaching staff"""

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')

    full_name = models.CharField(max_length=200)
    designation = models.CharField(max_length=100, blank=True)
    department = models.CharField(max_length=100, blank=True)
    level = models.CharField(max_length=20, choices=StaffLevel.choices, default=StaffLevel.SENIOR)

    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    dob = models.DateField(null=True, blank=True, verbose_name=_("Date of Birth"))
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)

    qualification = models.CharField(max_length=200, blank=True)
    experience_details = models.TextField(blank=True)
    total_experience = models.CharField(max_length=50, blank=True)
    joining_date = models.DateField(null=True, blank=True)
    photo = models.ImageField(upload_to='employees/photos/', blank=True)

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)

    # Bank Details
    bank_name = models.CharField(max_length=200, blank=True)
    bank_account_no = models.CharField(max_length=50, blank=True)
    bank_ifsc_code = models.CharField(max_length=20, blank=True)
    bank_branch_name = models.CharField(max_length=200, blank=True)
    account_holder_name = models.CharField(max_length=200, blank=True)
    upi_id = models.CharField(max_length=100, blank=True)

    # Salary Details
    salary_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    salary_frequency = models.CharField(
        max_length=10, choices=SalaryFrequency.choices, default=SalaryFrequency.MONTHLY
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'employees'
        ordering = ['full_name']
        verbose_name = _('Employee')
        verbose_name_plural = _('Employees')

    def __str__(self):
        return f"{self.full_name} ({self.designation or self.department})"


class EmployeeDocument(models.Model):
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='documents')
    document_type = models.CharField(max_length=100)
    file = models.FileField(upload_to='employees/documents/')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'employee_documents'
        ordering = ['-uploaded_at']

    def __str__(self):
        return f"{self.employee.full_name} - {self.document_type}"


class SalaryConfig(models.Model):
    """
    Salary rule for a department and level.

    Rules are matched in list order (position, then id); the first match
    wins.
    """

    department = models.CharField(max_length=100)
    level = models.CharField(max_length=20, choices=StaffLevel.choices, default=StaffLevel.SENIOR)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))]
    )
    frequency = models.CharField(
        max_length=10, choices=SalaryFrequency.choices, default=SalaryFrequency.MONTHLY
    )
    position = models.PositiveIntegerField(default=0, blank=True)

    class Meta:
        db_table = 'salary_configs'
        ordering = ['position', 'id']
        verbose_name = _('Salary Configuration')
        verbose_name_plural = _('Salary Configurations')

    def __str__(self):
        return f"{self.department} / {self.level} / {self.frequency}: {self.amount}"
