import logging

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.db.models import Count
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from apps.admissions.models import AdmissionEnquiry, RegistrationStatus, StudentRegistration
from apps.finance.utils import finance_overview
from apps.staffs.models import Employee
from apps.students.models import Student
from .forms import SiteSettingsForm
from .models import SiteConfig, UserLog
from .utils import form_errors, log_user_action, serialize_instance, upload_file

logger = logging.getLogger(__name__)

SCHOOL_LOGO = 'school_logo'
USER_LOG_LIMIT = 200


def current_settings():
    return {
        'school_name': SiteConfig.get_value(SiteConfig.SCHOOL_NAME, settings.SCHOOL_NAME),
        'currency_symbol': SiteConfig.get_value(SiteConfig.CURRENCY_SYMBOL, settings.CURRENCY_SYMBOL),
        'logo_url': SiteConfig.get_value(SCHOOL_LOGO, ''),
        'student_fields': SiteConfig.student_fields(),
        'departments': SiteConfig.get_value(SiteConfig.DEPARTMENTS),
        'designations': SiteConfig.get_value(SiteConfig.DESIGNATIONS),
    }


@login_required
@require_GET
def dashboard(request):
    """Headline counts across admissions, students, staff and finance"""
    students = Student.objects.filter(is_deleted=False)
    by_status = dict(
        students.values_list('student_status').annotate(total=Count('id')).order_by()
    )

    return JsonResponse({
        'success': True,
        'stats': {
            'enquiries': AdmissionEnquiry.active.count(),
            'pending_registrations': StudentRegistration.objects.filter(
                status=RegistrationStatus.PENDING
            ).count(),
            'active_students': by_status.get(Student.Status.ACTIVE, 0),
            'provisional_students': by_status.get(Student.Status.PROVISIONAL, 0),
            'inactive_students': by_status.get(Student.Status.INACTIVE, 0),
            'employees': Employee.objects.filter(status=Employee.Status.ACTIVE).count(),
            'finance': {key: float(value) for key, value in finance_overview().items()},
        },
    })


@login_required
def site_settings(request):
    """GET returns the school settings, POST updates whichever fields were sent"""
    if request.method != 'POST':
        return JsonResponse({'success': True, 'settings': current_settings()})

    form = SiteSettingsForm(request.POST, request.FILES)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    data = form.cleaned_data
    try:
        if data.get('school_name'):
            SiteConfig.set_value(SiteConfig.SCHOOL_NAME, data['school_name'])
        if data.get('currency_symbol'):
            SiteConfig.set_value(SiteConfig.CURRENCY_SYMBOL, data['currency_symbol'])

        student_fields = {
            name: data[name] for name in ('classes', 'sections', 'subjects') if data[name] is not None
        }
        if student_fields:
            merged = SiteConfig.student_fields()
            merged.update(student_fields)
            SiteConfig.set_value(SiteConfig.STUDENT_FIELDS, merged)
        if data['departments'] is not None:
            SiteConfig.set_value(SiteConfig.DEPARTMENTS, data['departments'])
        if data['designations'] is not None:
            SiteConfig.set_value(SiteConfig.DESIGNATIONS, data['designations'])

        if data.get('logo'):
            SiteConfig.set_value(SCHOOL_LOGO, upload_file(data['logo'], 'branding'))
    except (DatabaseError, OSError) as e:
        logger.error(f"Settings update failed: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=500)

    log_user_action('Update Settings', 'School settings updated', request=request)
    return JsonResponse({'success': True, 'settings': current_settings()})


@login_required
@require_GET
def user_logs(request):
    """Most recent audit entries, optionally ?action= or ?user= filtered"""
    logs = UserLog.objects.all()

    action = request.GET.get('action')
    if action:
        logs = logs.filter(action=action)

    user_email = request.GET.get('user')
    if user_email:
        logs = logs.filter(user_email=user_email)

    return JsonResponse({
        'success': True,
        'logs': [serialize_instance(log) for log in logs[:USER_LOG_LIMIT]],
    })
