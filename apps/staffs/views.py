import logging

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError, transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.corecode.exports import EmptyExportError, ExportError, export_data
from apps.corecode.imaging import ImageProcessingError, compress_image_file
from apps.corecode.utils import (
    attachment_response,
    form_errors,
    log_user_action,
    serialize_instance,
)
from .forms import EmployeeDocumentForm, EmployeeForm, SalaryConfigForm
from .models import Employee, SalaryConfig
from .salary import apply_salary_rule, apply_salary_rules

logger = logging.getLogger(__name__)


def _employees_for(request):
    employees = Employee.objects.all()

    status = request.GET.get('status')
    if status:
        employees = employees.filter(status=status)

    department = request.GET.get('department')
    if department:
        employees = employees.filter(department=department)

    search = request.GET.get('q')
    if search:
        employees = employees.filter(full_name__icontains=search)
    return employees


@login_required
@require_GET
def employee_list(request):
    return JsonResponse({
        'success': True,
        'employees': [serialize_instance(e) for e in _employees_for(request)],
    })


@login_required
@require_POST
def employee_create(request):
    """Add an employee; an empty salary is filled from the salary rules"""
    form = EmployeeForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    employee = form.save(commit=False)
    if employee.salary_amount is None:
        apply_salary_rule(employee, commit=False)

    try:
        employee.save()
    except DatabaseError as e:
        logger.error(f"Employee create failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Add Employee', f"Employee {employee.full_name} added", request=request)
    return JsonResponse({'success': True, 'employee': serialize_instance(employee)}, status=201)


@login_required
@require_GET
def employee_detail(request, pk):
    employee = get_object_or_404(Employee, pk=pk)
    data = serialize_instance(employee)
    data['documents'] = [serialize_instance(d) for d in employee.documents.all()]
    return JsonResponse({'success': True, 'employee': data})


@login_required
@require_POST
def employee_update(request, pk):
    employee = get_object_or_404(Employee, pk=pk)
    form = EmployeeForm(request.POST, instance=employee)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    try:
        employee = form.save()
    except DatabaseError as e:
        logger.error(f"Employee {pk} update failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Update Employee', f"Employee {employee.full_name} updated", request=request)
    return JsonResponse({'success': True, 'employee': serialize_instance(employee)})


@login_required
@require_POST
def employee_delete(request, pk):
    """Hard delete; refused while salary payments reference the employee"""
    employee = get_object_or_404(Employee, pk=pk)
    name = employee.full_name

    if employee.salary_payments.exists():
        return JsonResponse({
            'success': False,
            'error': f"{name} has salary payments and cannot be deleted. Mark them inactive instead.",
        }, status=409)

    try:
        employee.delete()
    except DatabaseError as e:
        logger.error(f"Employee {pk} delete failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Delete Employee', f"Employee {name} deleted", request=request)
    return JsonResponse({'success': True})


@login_required
@require_POST
def upload_photo(request, pk):
    employee = get_object_or_404(Employee, pk=pk)
    photo = request.FILES.get('photo')
    if photo is None:
        return JsonResponse({'success': False, 'errors': {'photo': ['This field is required.']}}, status=400)

    try:
        photo = compress_image_file(photo)
        employee.photo.save(f"employee_{employee.pk}.jpg", photo, save=False)
        employee.save(update_fields=['photo', 'updated_at'])
    except ImageProcessingError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)
    except (DatabaseError, OSError) as e:
        logger.error(f"Photo upload failed for employee {pk}: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Upload Photo', f"Photo updated for {employee.full_name}", request=request)
    return JsonResponse({'success': True, 'photo_url': employee.photo.url})


@login_required
def employee_documents(request, pk):
    employee = get_object_or_404(Employee, pk=pk)

    if request.method == 'POST':
        form = EmployeeDocumentForm(request.POST, request.FILES)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        document = form.save(commit=False)
        document.employee = employee
        document.save()
        log_user_action(
            'Upload Document',
            f"{document.document_type} uploaded for {employee.full_name}",
            request=request,
        )
        return JsonResponse({'success': True, 'document': serialize_instance(document)}, status=201)

    return JsonResponse({
        'success': True,
        'documents': [serialize_instance(d) for d in employee.documents.all()],
    })


@login_required
@require_GET
def export_employees(request):
    try:
        artifact = export_data(
            _employees_for(request),
            request.GET.get('format', 'csv'),
            request.GET.get('filename', 'employees'),
            'employees',
        )
    except EmptyExportError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=404)
    except ExportError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    log_user_action('Export', f"employees exported as {artifact.filename}", request=request)
    return attachment_response(artifact)


# Salary configuration

@login_required
def salary_configs(request):
    """GET lists the rules in match order, POST adds one"""
    if request.method == 'POST':
        form = SalaryConfigForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        config = form.save()
        log_user_action('Salary Config', f"Added salary rule {config}", request=request)
        return JsonResponse({'success': True, 'config': serialize_instance(config)}, status=201)

    return JsonResponse({
        'success': True,
        'configs': [serialize_instance(c) for c in SalaryConfig.objects.all()],
    })


@login_required
@require_POST
def salary_config_delete(request, pk):
    config = get_object_or_404(SalaryConfig, pk=pk)
    label = str(config)
    config.delete()
    log_user_action('Salary Config', f"Removed salary rule {label}", request=request)
    return JsonResponse({'success': True})


@login_required
@require_POST
def apply_salary_configs(request):
    """Re-resolve every employee's salary against the current rules"""
    try:
        with transaction.atomic():
            updated = apply_salary_rules()
    except DatabaseError as e:
        logger.error(f"Applying salary rules failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Salary Config', f"Salary rules applied to {updated} employees", request=request)
    return JsonResponse({'success': True, 'updated': updated})
