import logging

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.corecode.utils import form_errors, log_user_action, serialize_instance
from apps.students.views import serialize_student
from .forms import BulkReviewForm, EnquiryForm, RegistrationForm
from .models import AdmissionEnquiry, StudentRegistration
from .services import EnquiryService, RegistrationService
from .workflow import DuplicateRegistrationError, WorkflowError

logger = logging.getLogger(__name__)


def serialize_enquiry(enquiry):
    data = serialize_instance(enquiry)
    data['step'] = enquiry.step
    return data


def workflow_error_response(error):
    return JsonResponse({'success': False, 'error': str(error)}, status=409)


# Enquiries

@login_required
def enquiry_list(request):
    """GET lists enquiries outside the recycle bin, POST records a new one"""
    if request.method == 'POST':
        form = EnquiryForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        try:
            enquiry = form.save()
        except DatabaseError as e:
            logger.error(f"Enquiry create failed: {e}")
            return JsonResponse({'success': False, 'error': str(e)}, status=500)
        log_user_action('Add Enquiry', f"Enquiry #{enquiry.pk} ({enquiry.full_name})", request=request)
        return JsonResponse({'success': True, 'enquiry': serialize_enquiry(enquiry)}, status=201)

    enquiries = AdmissionEnquiry.active.all()
    status = request.GET.get('status')
    if status:
        enquiries = enquiries.filter(response_status=status)
    search = request.GET.get('q')
    if search:
        enquiries = enquiries.filter(full_name__icontains=search)

    return JsonResponse({
        'success': True,
        'enquiries': [serialize_enquiry(e) for e in enquiries],
    })


@login_required
@require_GET
def enquiry_detail(request, pk):
    enquiry = get_object_or_404(AdmissionEnquiry.active, pk=pk)
    return JsonResponse({'success': True, 'enquiry': serialize_enquiry(enquiry)})


@login_required
@require_POST
def enquiry_update(request, pk):
    enquiry = get_object_or_404(AdmissionEnquiry.active, pk=pk)
    form = EnquiryForm(request.POST, instance=enquiry)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    try:
        enquiry = form.save()
    except DatabaseError as e:
        logger.error(f"Enquiry {pk} update failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Update Enquiry', f"Enquiry #{enquiry.pk} updated", request=request)
    return JsonResponse({'success': True, 'enquiry': serialize_enquiry(enquiry)})


@login_required
@require_POST
def enquiry_delete(request, pk):
    """Move an enquiry to the recycle bin"""
    try:
        EnquiryService.soft_delete_enquiry(pk, request=request)
    except WorkflowError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=404)
    return JsonResponse({'success': True})


@login_required
@require_GET
def recycle_bin(request):
    enquiries = AdmissionEnquiry.objects.filter(is_deleted=True)
    return JsonResponse({
        'success': True,
        'enquiries': [serialize_enquiry(e) for e in enquiries],
    })


@login_required
@require_POST
def enquiry_restore(request, pk):
    try:
        EnquiryService.restore_enquiry(pk, request=request)
    except WorkflowError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=404)
    return JsonResponse({'success': True})


@login_required
@require_POST
def enquiry_purge(request, pk):
    try:
        EnquiryService.permanent_delete_enquiry(pk, request=request)
    except WorkflowError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=404)
    return JsonResponse({'success': True})


@login_required
@require_POST
def promote_enquiry(request, pk):
    """Send an enquiry on to registration"""
    try:
        registration = EnquiryService.promote_enquiry_to_registration(pk, request=request)
    except WorkflowError as e:
        return workflow_error_response(e)
    except DatabaseError as e:
        logger.error(f"Enquiry {pk} promotion failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    return JsonResponse({
        'success': True,
        'registration': serialize_instance(registration),
    }, status=201)


# Registrations

@login_required
def registration_list(request):
    """GET lists registrations (?status filters), POST registers directly"""
    if request.method == 'POST':
        form = RegistrationForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        try:
            registration = RegistrationService.create_registration(form.cleaned_data, request=request)
        except DuplicateRegistrationError as e:
            return workflow_error_response(e)
        except DatabaseError as e:
            logger.error(f"Registration create failed: {e}")
            return JsonResponse({'success': False, 'error': str(e)}, status=500)
        return JsonResponse({
            'success': True,
            'registration': serialize_instance(registration),
        }, status=201)

    registrations = StudentRegistration.objects.all()
    status = request.GET.get('status')
    if status:
        registrations = registrations.filter(status=status)
    search = request.GET.get('q')
    if search:
        registrations = registrations.filter(full_name__icontains=search)

    return JsonResponse({
        'success': True,
        'registrations': [serialize_instance(r) for r in registrations],
    })


@login_required
@require_GET
def registration_detail(request, pk):
    registration = get_object_or_404(StudentRegistration, pk=pk)
    data = serialize_instance(registration)
    data['students'] = [serialize_student(s) for s in registration.students.filter(is_deleted=False)]
    return JsonResponse({'success': True, 'registration': data})


@login_required
@require_POST
def review_registration(request, pk):
    """Approve or reject; approval creates a provisional student"""
    decision = request.POST.get('decision', '')
    try:
        registration, student = RegistrationService.review_registration(pk, decision, request=request)
    except WorkflowError as e:
        return workflow_error_response(e)
    except DatabaseError as e:
        logger.error(f"Registration {pk} review failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    return JsonResponse({
        'success': True,
        'registration': serialize_instance(registration),
        'student': serialize_student(student) if student else None,
    })


@login_required
@require_POST
def bulk_review(request):
    form = BulkReviewForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    results = RegistrationService.bulk_review(
        form.cleaned_data['registration_ids'],
        form.cleaned_data['decision'],
        request=request,
    )
    return JsonResponse({'success': True, 'results': results})


@login_required
@require_POST
def complete_registration(request, pk):
    try:
        registration = RegistrationService.mark_registration_completed(pk, request=request)
    except WorkflowError as e:
        return workflow_error_response(e)
    return JsonResponse({'success': True, 'registration': serialize_instance(registration)})


@login_required
@require_POST
def registration_delete(request, pk):
    try:
        RegistrationService.delete_registration(pk, request=request)
    except WorkflowError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=404)
    return JsonResponse({'success': True})
