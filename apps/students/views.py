import logging

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.admissions.services import StudentAdmissionService
from apps.admissions.workflow import WorkflowError
from apps.corecode.exports import EmptyExportError, ExportError, export_data
from apps.corecode.imaging import ImageProcessingError, compress_image_file, get_cropped_image
from apps.corecode.utils import (
    attachment_response,
    form_errors,
    log_user_action,
    serialize_instance,
)
from tasks.student_tasks import queue_student_import
from .forms import (
    PhotoCropForm,
    StudentAdmissionForm,
    StudentBulkUploadForm,
    StudentDocumentForm,
    StudentForm,
)
from .importer import template_csv
from .models import Student, StudentBulkUpload

logger = logging.getLogger(__name__)

STATUS_FILTERS = {
    'active': Student.get_active_students,
    'provisional': Student.get_provisional_students,
    'inactive': Student.get_inactive_students,
}


def serialize_student(student):
    data = serialize_instance(student)
    data['age'] = student.age
    return data


def _students_for(status):
    if status in STATUS_FILTERS:
        return STATUS_FILTERS[status]()
    return Student.objects.filter(is_deleted=False)


@login_required
@require_GET
def student_list(request):
    """Students filtered by ?status=active|provisional|inactive (default active)"""
    status = request.GET.get('status', 'active')
    students = _students_for(status)

    class_section = request.GET.get('class')
    if class_section:
        students = students.filter(class_section=class_section)

    search = request.GET.get('q')
    if search:
        students = students.filter(full_name__icontains=search)

    return JsonResponse({
        'success': True,
        'students': [serialize_student(s) for s in students],
    })


@login_required
@require_GET
def student_detail(request, pk):
    student = get_object_or_404(Student, pk=pk, is_deleted=False)
    data = serialize_student(student)
    data['documents'] = [serialize_instance(d) for d in student.documents.all()]
    return JsonResponse({'success': True, 'student': data})


@login_required
@require_POST
def student_update(request, pk):
    student = get_object_or_404(Student, pk=pk, is_deleted=False)
    form = StudentForm(request.POST, instance=student)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    try:
        student = form.save()
    except DatabaseError as e:
        logger.error(f"Student {pk} update failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Update Student', f"Student {student.admission_no} updated", request=request)
    return JsonResponse({'success': True, 'student': serialize_student(student)})


@login_required
@require_POST
def finalize_admission(request, pk):
    """Complete a provisional admission and make the student active"""
    student = get_object_or_404(Student, pk=pk, is_deleted=False)
    form = StudentAdmissionForm(request.POST, instance=student)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    try:
        student = StudentAdmissionService.finalize_admission(
            student.pk, data=form.cleaned_data, request=request
        )
    except WorkflowError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=409)
    except DatabaseError as e:
        logger.error(f"Finalize admission failed for student {pk}: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    return JsonResponse({'success': True, 'student': serialize_student(student)})


@login_required
@require_POST
def toggle_status(request, pk):
    try:
        student = StudentAdmissionService.toggle_student_status(pk, request=request)
    except WorkflowError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=409)

    return JsonResponse({
        'success': True,
        'student_status': student.student_status,
    })


@login_required
@require_POST
def upload_photo(request, pk):
    """Crop (optional), compress and store a profile photo"""
    student = get_object_or_404(Student, pk=pk, is_deleted=False)
    form = PhotoCropForm(request.POST, request.FILES)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    photo = form.cleaned_data['photo']
    try:
        if form.crop:
            photo = get_cropped_image(
                photo, form.crop,
                rotation=form.cleaned_data.get('rotation') or 0,
                flip=form.flip,
            )
        photo = compress_image_file(photo)
    except ImageProcessingError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    try:
        student.photo.save(f"{student.admission_no}.jpg", photo, save=False)
        student.save(update_fields=['photo', 'updated_at'])
    except (DatabaseError, OSError) as e:
        logger.error(f"Photo upload failed for student {pk}: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Upload Photo', f"Photo updated for {student.admission_no}", request=request)
    return JsonResponse({'success': True, 'photo_url': student.photo.url})


@login_required
def student_documents(request, pk):
    student = get_object_or_404(Student, pk=pk, is_deleted=False)

    if request.method == 'POST':
        form = StudentDocumentForm(request.POST, request.FILES)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        document = form.save(commit=False)
        document.student = student
        document.save()
        log_user_action(
            'Upload Document',
            f"{document.document_type} uploaded for {student.admission_no}",
            request=request,
        )
        return JsonResponse({'success': True, 'document': serialize_instance(document)}, status=201)

    return JsonResponse({
        'success': True,
        'documents': [serialize_instance(d) for d in student.documents.all()],
    })


@login_required
@require_GET
def export_students(request):
    """Download students as csv, excel, text or pdf"""
    export_type = request.GET.get('type', 'students')
    status = 'provisional' if export_type == 'admission_data' else request.GET.get('status', 'active')

    try:
        artifact = export_data(
            _students_for(status),
            request.GET.get('format', 'csv'),
            request.GET.get('filename', export_type),
            export_type,
        )
    except EmptyExportError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=404)
    except ExportError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    log_user_action('Export', f"{export_type} exported as {artifact.filename}", request=request)
    return attachment_response(artifact)


@login_required
@require_GET
def import_template(request):
    response = HttpResponse(template_csv(), content_type='text/csv')
    response['Content-Disposition'] = 'attachment; filename="student_import_template.csv"'
    return response


@login_required
@require_POST
def bulk_upload(request):
    form = StudentBulkUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    upload = form.save(commit=False)
    upload.uploaded_by = request.user.email or request.user.get_username()
    upload.save()

    queue_student_import(upload)
    upload.refresh_from_db()

    log_user_action('Bulk Import', f"Student CSV upload #{upload.pk} queued", request=request)
    return JsonResponse({
        'success': True,
        'upload_id': upload.pk,
        'task_status': upload.task_status,
    }, status=202)


@login_required
@require_GET
def bulk_upload_status(request, pk):
    upload = get_object_or_404(StudentBulkUpload, pk=pk)
    return JsonResponse({
        'success': True,
        'upload_id': upload.pk,
        'task_status': upload.task_status,
        'total_records': upload.total_records,
        'records_created': upload.records_created,
        'records_failed': upload.records_failed,
        'error_message': upload.error_message,
        'failed_rows': upload.failed_rows,
    })
