"""
Services that move enquiries, registrations and students through the
admission workflow
"""
import logging

from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.corecode.utils import log_user_action
from apps.students.models import Student
from .models import AdmissionEnquiry, EnquiryStatus, RegistrationStatus, StudentRegistration
from .workflow import (
    REVIEW_DECISIONS,
    DuplicateRegistrationError,
    RegistrationApprovalError,
    TransitionNotAllowed,
    WorkflowError,
    check_enquiry_promotion,
    check_registration_transition,
    check_finalize_admission,
    toggled_student_status,
)

logger = logging.getLogger(__name__)


class StudentCreationError(WorkflowError):
    """The student row could not be inserted"""
    pass


class EnquiryService:
    """Enquiry promotion and recycle bin handling"""

    @classmethod
    def promote_enquiry_to_registration(cls, enquiry_id, request=None):
        """
        Create a pending registration seeded from an enquiry.

        The registration insert and the enquiry status change commit
        together. Phone numbers are not de-duplicated on this path.
        """
        try:
            with transaction.atomic():
                enquiry = AdmissionEnquiry.objects.select_for_update().get(
                    pk=enquiry_id, is_deleted=False
                )
                check_enquiry_promotion(enquiry)

                registration = StudentRegistration.objects.create(
                    full_name=enquiry.full_name,
                    gender=enquiry.gender,
                    dob=enquiry.dob,
                    email=enquiry.email,
                    phone=enquiry.mobile_no,
                    address=enquiry.address,
                    father_name=enquiry.father_name,
                    mother_name=enquiry.mother_name,
                    class_enrolled=enquiry.class_applying_for,
                    previous_school=enquiry.previous_school,
                    admission_date=timezone.localdate(),
                    status=RegistrationStatus.PENDING,
                    enquiry=enquiry,
                )

                enquiry.response_status = EnquiryStatus.IN_REGISTRATION
                enquiry.save(update_fields=['response_status', 'updated_at'])
        except AdmissionEnquiry.DoesNotExist:
            raise WorkflowError(_("Enquiry not found"))

        logger.info(f"Enquiry {enquiry.pk} promoted to registration {registration.pk}")
        log_user_action(
            'Promote Enquiry',
            f"Enquiry #{enquiry.pk} ({enquiry.full_name}) moved to registration #{registration.pk}",
            request=request,
        )
        return registration

    @classmethod
    def soft_delete_enquiry(cls, enquiry_id, request=None):
        updated = AdmissionEnquiry.objects.filter(pk=enquiry_id, is_deleted=False).update(
            is_deleted=True, updated_at=timezone.now()
        )
        if not updated:
            raise WorkflowError(_("Enquiry not found"))
        log_user_action('Delete Enquiry', f"Enquiry #{enquiry_id} moved to recycle bin", request=request)

    @classmethod
    def restore_enquiry(cls, enquiry_id, request=None):
        updated = AdmissionEnquiry.objects.filter(pk=enquiry_id, is_deleted=True).update(
            is_deleted=False, updated_at=timezone.now()
        )
        if not updated:
            raise WorkflowError(_("Enquiry is not in the recycle bin"))
        log_user_action('Restore Enquiry', f"Enquiry #{enquiry_id} restored", request=request)

    @classmethod
    def permanent_delete_enquiry(cls, enquiry_id, request=None):
        deleted, _details = AdmissionEnquiry.objects.filter(pk=enquiry_id, is_deleted=True).delete()
        if not deleted:
            raise WorkflowError(_("Enquiry is not in the recycle bin"))
        log_user_action('Purge Enquiry', f"Enquiry #{enquiry_id} permanently deleted", request=request)


class RegistrationService:
    """Registration entry and review"""

    DUPLICATE_PHONE_MESSAGE = _("A registration with this phone number already exists.")

    @classmethod
    def registration_exists(cls, phone):
        return StudentRegistration.objects.filter(phone=phone).exists()

    @classmethod
    def create_registration(cls, data, request=None):
        """Direct entry; rejected when the phone number is already registered"""
        if cls.registration_exists(data.get('phone')):
            raise DuplicateRegistrationError(cls.DUPLICATE_PHONE_MESSAGE)

        registration = StudentRegistration.objects.create(**data)
        logger.info(f"Registration {registration.pk} created for {registration.full_name}")
        log_user_action(
            'Create Registration',
            f"Registration #{registration.pk} ({registration.full_name})",
            request=request,
        )
        return registration

    @classmethod
    def review_registration(cls, registration_id, decision, request=None):
        """
        Approve or reject a pending registration.

        Approval inserts a provisional student and marks the registration
        approved in one transaction. If the student insert fails the
        registration stays pending; if the status update fails the new
        student is rolled back and RegistrationApprovalError is raised.
        """
        if decision not in REVIEW_DECISIONS:
            raise TransitionNotAllowed(_("Unknown review decision: %(decision)s") % {'decision': decision})

        student = None
        try:
            with transaction.atomic():
                registration = StudentRegistration.objects.select_for_update().get(pk=registration_id)
                check_registration_transition(registration.status, decision)

                if decision == RegistrationStatus.APPROVED:
                    student = cls.create_provisional_student(registration)

                registration.status = decision
                try:
                    registration.save(update_fields=['status', 'updated_at'])
                except DatabaseError as e:
                    logger.error(f"Registration {registration_id} status update failed: {e}")
                    raise RegistrationApprovalError(
                        _("Student record was not kept because the registration could not be updated: %(error)s")
                        % {'error': e}
                    ) from e
        except StudentRegistration.DoesNotExist:
            raise WorkflowError(_("Registration not found"))

        if student is not None:
            logger.info(f"Registration {registration.pk} approved, provisional student {student.admission_no}")
            log_user_action(
                'Approve Registration',
                f"Registration #{registration.pk} approved as student {student.admission_no}",
                request=request,
            )
        else:
            logger.info(f"Registration {registration.pk} rejected")
            log_user_action('Reject Registration', f"Registration #{registration.pk} rejected", request=request)
        return registration, student

    @classmethod
    def create_provisional_student(cls, registration):
        student = Student(
            full_name=registration.full_name,
            gender=registration.gender,
            dob=registration.dob,
            email=registration.email,
            phone=registration.phone,
            address=registration.address,
            father_name=registration.father_name,
            mother_name=registration.mother_name,
            class_section=registration.class_enrolled,
            student_status=Student.Status.PROVISIONAL,
            created_via=Student.CreationMethod.REGISTRATION,
            source_registration=registration,
        )
        try:
            student.save()
        except DatabaseError as e:
            logger.error(f"Provisional student insert failed for registration {registration.pk}: {e}")
            raise StudentCreationError(str(e)) from e
        return student

    @classmethod
    def bulk_review(cls, registration_ids, decision, request=None):
        """
        Review several registrations, each in its own transaction

        Returns:
            dict: Results with success/failure counts
        """
        results = {
            'total': len(registration_ids),
            'success': 0,
            'failed': 0,
            'errors': []
        }

        for registration_id in registration_ids:
            try:
                cls.review_registration(registration_id, decision, request=request)
                results['success'] += 1
            except WorkflowError as e:
                results['failed'] += 1
                results['errors'].append({
                    'registration_id': registration_id,
                    'error': str(e)
                })

        return results

    @classmethod
    def mark_registration_completed(cls, registration_id, request=None):
        """Apply the terminal 'Admission Done' label to an approved registration"""
        try:
            with transaction.atomic():
                registration = StudentRegistration.objects.select_for_update().get(pk=registration_id)
                check_registration_transition(registration.status, RegistrationStatus.ADMISSION_DONE)
                registration.status = RegistrationStatus.ADMISSION_DONE
                registration.save(update_fields=['status', 'updated_at'])
        except StudentRegistration.DoesNotExist:
            raise WorkflowError(_("Registration not found"))

        log_user_action('Complete Registration', f"Registration #{registration.pk} marked done", request=request)
        return registration

    @classmethod
    def delete_registration(cls, registration_id, request=None):
        deleted, _details = StudentRegistration.objects.filter(pk=registration_id).delete()
        if not deleted:
            raise WorkflowError(_("Registration not found"))
        log_user_action('Delete Registration', f"Registration #{registration_id} deleted", request=request)


class StudentAdmissionService:
    """Student lifecycle changes after approval"""

    @classmethod
    def finalize_admission(cls, student_id, data=None, request=None):
        """
        Promote a provisional student to active.

        Optional data holds admission form fields saved alongside the
        status change. Students in any other state are left untouched.
        """
        try:
            with transaction.atomic():
                student = Student.objects.select_for_update().get(pk=student_id, is_deleted=False)
                check_finalize_admission(student.student_status)

                for field, value in (data or {}).items():
                    setattr(student, field, value)
                student.student_status = Student.Status.ACTIVE
                student.save()
        except Student.DoesNotExist:
            raise WorkflowError(_("Student not found"))

        logger.info(f"Admission finalized for {student.admission_no}")
        log_user_action('Finalize Admission', f"Student {student.admission_no} is now active", request=request)
        return student

    @classmethod
    def toggle_student_status(cls, student_id, request=None):
        """Switch an active student to inactive or back"""
        try:
            with transaction.atomic():
                student = Student.objects.select_for_update().get(pk=student_id, is_deleted=False)
                previous = student.student_status
                student.student_status = toggled_student_status(previous)
                student.save(update_fields=['student_status', 'updated_at'])
        except Student.DoesNotExist:
            raise WorkflowError(_("Student not found"))

        log_user_action(
            'Toggle Student Status',
            f"Student {student.admission_no}: {previous} -> {student.student_status}",
            request=request,
        )
        return student
