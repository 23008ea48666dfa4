"""
Status transition rules for the admission pipeline.

Nothing in this module touches the database; services.py applies these
rules inside transactions.

    Enquiry       Enquiry -> In Registration -> In Admission -> Admission Done
    Registration  pending -> approved | rejected, approved -> Admission Done
    Student       provisional -> active, active <-> inactive
"""
from django.utils.translation import gettext_lazy as _

from apps.students.models import Student
from .models import ENQUIRY_STEPS, EnquiryStatus, RegistrationStatus


class WorkflowError(Exception):
    """Base class for workflow failures surfaced to the caller"""
    pass


class TransitionNotAllowed(WorkflowError):
    """The record's current status does not permit the requested change"""
    pass


class DuplicateRegistrationError(WorkflowError):
    """A registration with the same phone number already exists"""
    pass


class RegistrationApprovalError(WorkflowError):
    """Approval failed part way; all writes were rolled back"""
    pass


REGISTRATION_TRANSITIONS = {
    RegistrationStatus.PENDING: {RegistrationStatus.APPROVED, RegistrationStatus.REJECTED},
    RegistrationStatus.APPROVED: {RegistrationStatus.ADMISSION_DONE},
}

REVIEW_DECISIONS = (RegistrationStatus.APPROVED, RegistrationStatus.REJECTED)

# Keyword fallbacks for free-text statuses from older records, checked in order
LEGACY_STATUS_KEYWORDS = [
    (('done', 'completed'), EnquiryStatus.ADMISSION_DONE),
    (('admission', 'admitted'), EnquiryStatus.IN_ADMISSION),
    (('registration', 'registered'), EnquiryStatus.IN_REGISTRATION),
]


def coerce_enquiry_status(value):
    """Map a stored or legacy free-text status onto EnquiryStatus"""
    if value in EnquiryStatus.values:
        return EnquiryStatus(value)
    text = (value or '').lower()
    for keywords, status in LEGACY_STATUS_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return status
    return EnquiryStatus.ENQUIRY


def enquiry_step(value):
    return ENQUIRY_STEPS[coerce_enquiry_status(value)]


def can_promote_enquiry(status):
    return coerce_enquiry_status(status) != EnquiryStatus.IN_REGISTRATION


def check_enquiry_promotion(enquiry):
    if not can_promote_enquiry(enquiry.response_status):
        raise TransitionNotAllowed(
            _("Enquiry is already %(status)s") % {'status': enquiry.response_status}
        )


def check_registration_transition(current, target):
    if target not in REGISTRATION_TRANSITIONS.get(current, set()):
        raise TransitionNotAllowed(
            _("Registration cannot move from %(current)s to %(target)s") % {
                'current': current, 'target': target
            }
        )


def check_finalize_admission(current):
    if current != Student.Status.PROVISIONAL:
        raise TransitionNotAllowed(
            _("Only provisional students can be finalized, this one is %(current)s") % {'current': current}
        )


def toggled_student_status(current):
    """The other side of the active/inactive switch"""
    if current == Student.Status.ACTIVE:
        return Student.Status.INACTIVE
    if current == Student.Status.INACTIVE:
        return Student.Status.ACTIVE
    raise TransitionNotAllowed(
        _("Only active or inactive students can be toggled, not %(current)s") % {'current': current}
    )
