from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import AdmissionEnquiry, StudentRegistration


@admin.register(AdmissionEnquiry)
class AdmissionEnquiryAdmin(admin.ModelAdmin):
    list_display = [
        'full_name', 'class_applying_for', 'mobile_no', 'response_status',
        'enquiry_date', 'next_follow_up', 'assigned_to', 'is_deleted'
    ]
    list_filter = ['response_status', 'is_deleted', 'class_applying_for', 'gender']
    search_fields = ['full_name', 'mobile_no', 'father_name', 'mother_name', 'email']
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        (_('Student Information'), {
            'fields': ('full_name', 'gender', 'dob', 'class_applying_for',
                      'no_of_child', 'previous_school')
        }),
        (_('Parent Information'), {
            'fields': ('father_name', 'mother_name', 'mobile_no', 'email', 'address')
        }),
        (_('Follow Up'), {
            'fields': ('assigned_to', 'reference', 'enquiry_date', 'next_follow_up',
                      'response_status', 'internal_notes')
        }),
        (_('System Information'), {
            'fields': ('is_deleted', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return AdmissionEnquiry.objects.all()


@admin.register(StudentRegistration)
class StudentRegistrationAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'class_enrolled', 'phone', 'status', 'admission_date', 'created_at']
    list_filter = ['status', 'class_enrolled', 'gender']
    search_fields = ['full_name', 'phone', 'father_name', 'mother_name']
    readonly_fields = ['status', 'enquiry', 'created_at', 'updated_at']
    fieldsets = (
        (_('Student Information'), {
            'fields': ('full_name', 'gender', 'dob', 'class_enrolled',
                      'previous_school', 'admission_date')
        }),
        (_('Contact Information'), {
            'fields': ('phone', 'email', 'address', 'father_name', 'mother_name')
        }),
        (_('Review'), {
            'fields': ('status', 'enquiry')
        }),
        (_('System Information'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
