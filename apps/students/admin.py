from django.contrib import admin
from django.db import transaction
from django.utils.translation import gettext_lazy as _

from tasks.student_tasks import queue_student_import
from .models import Student, StudentBulkUpload, StudentDocument


class StudentDocumentInline(admin.TabularInline):
    model = StudentDocument
    extra = 0
    readonly_fields = ('uploaded_at',)


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = [
        'admission_no', 'full_name', 'gender', 'class_section', 'section',
        'phone', 'student_status', 'created_via', 'created_at'
    ]
    list_filter = ['student_status', 'created_via', 'gender', 'class_section', 'is_deleted']
    search_fields = ['admission_no', 'full_name', 'phone', 'father_name', 'mother_name']
    readonly_fields = ['admission_no', 'student_status', 'source_registration', 'created_at', 'updated_at']
    inlines = [StudentDocumentInline]
    fieldsets = (
        (_('Admission'), {
            'fields': ('admission_no', 'student_status', 'created_via', 'source_registration')
        }),
        (_('Personal Information'), {
            'fields': ('full_name', 'gender', 'dob', 'photo', 'aadhar_no',
                      'blood_group', 'identification_mark')
        }),
        (_('Contact Information'), {
            'fields': ('phone', 'whatsapp_no', 'email', 'address')
        }),
        (_('Parents'), {
            'fields': ('father_name', 'father_qualification',
                      'mother_name', 'mother_qualification')
        }),
        (_('Academic & Facilities'), {
            'fields': ('class_section', 'section', 'fee_category',
                      'transport_route', 'hostel_room')
        }),
        (_('System Information'), {
            'fields': ('is_deleted', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(StudentBulkUpload)
class StudentBulkUploadAdmin(admin.ModelAdmin):
    list_display = ('id', 'date_uploaded', 'uploaded_by', 'task_status',
                   'total_records', 'records_created', 'records_failed', 'duration_display')
    list_filter = ('task_status', 'date_uploaded')
    readonly_fields = ('task_id', 'task_status', 'processing_started', 'processing_completed',
                      'total_records', 'records_created', 'records_failed',
                      'error_message', 'failed_rows', 'duration_display')
    fieldsets = (
        ('Upload Information', {
            'fields': ('csv_file', 'uploaded_by')
        }),
        ('Processing Status', {
            'fields': ('task_status', 'task_id')
        }),
        ('Statistics', {
            'fields': ('total_records', 'records_created', 'records_failed')
        }),
        ('Timestamps', {
            'fields': ('processing_started', 'processing_completed', 'duration_display')
        }),
        ('Errors', {
            'fields': ('error_message', 'failed_rows'),
            'classes': ('collapse',)
        }),
    )

    def duration_display(self, obj):
        if obj.processing_started and obj.processing_completed:
            seconds = (obj.processing_completed - obj.processing_started).total_seconds()
            return f"{seconds:.1f}s"
        return "-"
    duration_display.short_description = 'Duration'

    def save_model(self, request, obj, form, change):
        if not change:
            obj.uploaded_by = request.user.email or request.user.get_username()
        super().save_model(request, obj, form, change)
        if not change:
            transaction.on_commit(lambda: queue_student_import(obj))
