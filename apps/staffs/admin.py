from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Employee, EmployeeDocument, SalaryConfig


class EmployeeDocumentInline(admin.TabularInline):
    model = EmployeeDocument
    extra = 0
    readonly_fields = ('uploaded_at',)


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'designation', 'department', 'level', 'phone', 'status', 'salary_amount']
    list_filter = ['status', 'department', 'level', 'salary_frequency']
    search_fields = ['full_name', 'phone', 'email', 'designation']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [EmployeeDocumentInline]
    fieldsets = (
        (_('Personal Information'), {
            'fields': ('full_name', 'gender', 'dob', 'blood_group', 'photo')
        }),
        (_('Contact Information'), {
            'fields': ('phone', 'email', 'address')
        }),
        (_('Employment'), {
            'fields': ('designation', 'department', 'level', 'status', 'joining_date',
                      'qualification', 'experience_details', 'total_experience')
        }),
        (_('Bank Details'), {
            'fields': ('bank_name', 'bank_account_no', 'bank_ifsc_code', 'bank_branch_name',
                      'account_holder_name', 'upi_id'),
            'classes': ('collapse',)
        }),
        (_('Salary'), {
            'fields': ('salary_amount', 'salary_frequency')
        }),
        (_('System Information'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(SalaryConfig)
class SalaryConfigAdmin(admin.ModelAdmin):
    list_display = ['department', 'level', 'frequency', 'amount', 'position']
    list_editable = ['position']
    list_filter = ['department', 'level', 'frequency']
