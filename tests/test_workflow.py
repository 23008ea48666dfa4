from unittest import mock

import pytest
from django.db import DatabaseError, IntegrityError

from apps.admissions.models import (
    AdmissionEnquiry,
    EnquiryStatus,
    RegistrationStatus,
    StudentRegistration,
)
from apps.admissions.services import (
    EnquiryService,
    RegistrationService,
    StudentAdmissionService,
    StudentCreationError,
)
from apps.admissions.workflow import (
    DuplicateRegistrationError,
    RegistrationApprovalError,
    TransitionNotAllowed,
    WorkflowError,
    coerce_enquiry_status,
    enquiry_step,
)
from apps.corecode.models import UserLog
from apps.students.models import Student

pytestmark = pytest.mark.django_db


class TestEnquiryPromotion:
    def test_promotion_creates_pending_registration(self, make_enquiry):
        enquiry = make_enquiry()

        registration = EnquiryService.promote_enquiry_to_registration(enquiry.pk)

        enquiry.refresh_from_db()
        assert registration.status == RegistrationStatus.PENDING
        assert registration.phone == enquiry.mobile_no
        assert registration.class_enrolled == 'Class 3'
        assert registration.enquiry == enquiry
        assert enquiry.response_status == EnquiryStatus.IN_REGISTRATION
        assert enquiry.step == 2

    def test_same_mobile_number_is_not_deduplicated(self, make_enquiry):
        first = make_enquiry(full_name='Twin One')
        second = make_enquiry(full_name='Twin Two')

        EnquiryService.promote_enquiry_to_registration(first.pk)
        EnquiryService.promote_enquiry_to_registration(second.pk)

        assert StudentRegistration.objects.filter(phone='9876543210').count() == 2

    def test_promoting_twice_is_rejected(self, make_enquiry):
        enquiry = make_enquiry()
        EnquiryService.promote_enquiry_to_registration(enquiry.pk)

        with pytest.raises(TransitionNotAllowed):
            EnquiryService.promote_enquiry_to_registration(enquiry.pk)
        assert StudentRegistration.objects.count() == 1

    @pytest.mark.parametrize('status', [EnquiryStatus.IN_ADMISSION, EnquiryStatus.ADMISSION_DONE])
    def test_only_in_registration_blocks_promotion(self, make_enquiry, status):
        enquiry = make_enquiry(response_status=status)

        registration = EnquiryService.promote_enquiry_to_registration(enquiry.pk)

        enquiry.refresh_from_db()
        assert registration.enquiry == enquiry
        assert enquiry.response_status == EnquiryStatus.IN_REGISTRATION

    def test_deleted_enquiry_cannot_be_promoted(self, make_enquiry):
        enquiry = make_enquiry(is_deleted=True)

        with pytest.raises(WorkflowError):
            EnquiryService.promote_enquiry_to_registration(enquiry.pk)


class TestRecycleBin:
    def test_soft_delete_and_restore(self, make_enquiry):
        enquiry = make_enquiry()

        EnquiryService.soft_delete_enquiry(enquiry.pk)
        assert not AdmissionEnquiry.active.filter(pk=enquiry.pk).exists()

        EnquiryService.restore_enquiry(enquiry.pk)
        assert AdmissionEnquiry.active.filter(pk=enquiry.pk).exists()

    def test_permanent_delete_only_from_bin(self, make_enquiry):
        enquiry = make_enquiry()

        with pytest.raises(WorkflowError):
            EnquiryService.permanent_delete_enquiry(enquiry.pk)

        EnquiryService.soft_delete_enquiry(enquiry.pk)
        EnquiryService.permanent_delete_enquiry(enquiry.pk)
        assert not AdmissionEnquiry.objects.filter(pk=enquiry.pk).exists()


class TestRegistrationReview:
    def test_approval_creates_one_provisional_student(self, make_registration):
        registration = make_registration()

        registration, student = RegistrationService.review_registration(
            registration.pk, RegistrationStatus.APPROVED
        )

        assert registration.status == RegistrationStatus.APPROVED
        assert Student.objects.count() == 1
        assert student.student_status == Student.Status.PROVISIONAL
        assert student.created_via == Student.CreationMethod.REGISTRATION
        assert student.source_registration == registration
        assert student.class_section == 'Class 4'
        assert student.admission_no.startswith('ADM-')

    def test_rejection_creates_no_student(self, make_registration):
        registration = make_registration()

        registration, student = RegistrationService.review_registration(registration.pk, 'rejected')

        assert student is None
        assert registration.status == RegistrationStatus.REJECTED
        assert not Student.objects.exists()

    def test_reviewed_registration_cannot_be_reviewed_again(self, make_registration):
        registration = make_registration()
        RegistrationService.review_registration(registration.pk, 'rejected')

        with pytest.raises(TransitionNotAllowed):
            RegistrationService.review_registration(registration.pk, 'approved')
        assert not Student.objects.exists()

    def test_unknown_decision_is_rejected(self, make_registration):
        registration = make_registration()

        with pytest.raises(TransitionNotAllowed):
            RegistrationService.review_registration(registration.pk, 'admitted')

    def test_failed_student_insert_leaves_registration_pending(self, make_registration):
        registration = make_registration()

        with mock.patch.object(Student, 'save', side_effect=IntegrityError('insert failed')):
            with pytest.raises(StudentCreationError):
                RegistrationService.review_registration(registration.pk, 'approved')

        registration.refresh_from_db()
        assert registration.status == RegistrationStatus.PENDING
        assert not Student.objects.exists()

    def test_failed_status_update_rolls_back_student(self, make_registration):
        registration = make_registration()

        with mock.patch.object(StudentRegistration, 'save', side_effect=DatabaseError('locked')):
            with pytest.raises(RegistrationApprovalError):
                RegistrationService.review_registration(registration.pk, 'approved')

        registration.refresh_from_db()
        assert registration.status == RegistrationStatus.PENDING
        assert not Student.objects.exists()

    def test_bulk_review_reports_each_failure(self, make_registration):
        pending = make_registration()
        rejected = make_registration(phone='9000011111')
        RegistrationService.review_registration(rejected.pk, 'rejected')

        results = RegistrationService.bulk_review([pending.pk, rejected.pk, 99999], 'approved')

        assert results['total'] == 3
        assert results['success'] == 1
        assert results['failed'] == 2
        assert {e['registration_id'] for e in results['errors']} == {rejected.pk, 99999}

    def test_approval_is_audited(self, make_registration):
        registration = make_registration()

        RegistrationService.review_registration(registration.pk, 'approved')

        assert UserLog.objects.filter(action='Approve Registration').count() == 1


class TestDirectRegistration:
    def test_duplicate_phone_is_rejected(self, make_registration):
        make_registration(phone='9111111111')

        with pytest.raises(DuplicateRegistrationError):
            RegistrationService.create_registration({
                'full_name': 'Someone Else',
                'gender': 'Male',
                'dob': '2015-01-01',
                'phone': '9111111111',
                'address': 'x',
                'father_name': 'F',
                'mother_name': 'M',
                'class_enrolled': 'Class 1',
            })
        assert StudentRegistration.objects.count() == 1

    def test_mark_completed_requires_approval(self, make_registration):
        registration = make_registration()

        with pytest.raises(TransitionNotAllowed):
            RegistrationService.mark_registration_completed(registration.pk)

        RegistrationService.review_registration(registration.pk, 'approved')
        registration = RegistrationService.mark_registration_completed(registration.pk)

        assert registration.status == RegistrationStatus.ADMISSION_DONE
        assert registration.is_completed

    def test_student_status_is_not_synchronised(self, make_registration):
        registration = make_registration()
        registration, student = RegistrationService.review_registration(registration.pk, 'approved')

        StudentAdmissionService.finalize_admission(student.pk)

        registration.refresh_from_db()
        assert registration.status == RegistrationStatus.APPROVED


class TestStudentAdmission:
    def test_finalize_provisional_student(self, make_student):
        student = make_student(student_status=Student.Status.PROVISIONAL)

        student = StudentAdmissionService.finalize_admission(
            student.pk, data={'section': 'B', 'fee_category': 'General'}
        )

        assert student.student_status == Student.Status.ACTIVE
        assert student.section == 'B'
        assert student.fee_category == 'General'

    def test_finalize_active_student_is_rejected(self, make_student):
        student = make_student(student_status=Student.Status.ACTIVE, section='A')

        with pytest.raises(TransitionNotAllowed):
            StudentAdmissionService.finalize_admission(student.pk, data={'section': 'C'})

        student.refresh_from_db()
        assert student.student_status == Student.Status.ACTIVE
        assert student.section == 'A'

    def test_toggle_between_active_and_inactive(self, make_student):
        student = make_student()

        assert StudentAdmissionService.toggle_student_status(student.pk).student_status == 'inactive'
        assert StudentAdmissionService.toggle_student_status(student.pk).student_status == 'active'

    def test_provisional_student_cannot_be_toggled(self, make_student):
        student = make_student(student_status=Student.Status.PROVISIONAL)

        with pytest.raises(TransitionNotAllowed):
            StudentAdmissionService.toggle_student_status(student.pk)


@pytest.mark.parametrize('value, expected', [
    ('Enquiry', EnquiryStatus.ENQUIRY),
    ('In Admission', EnquiryStatus.IN_ADMISSION),
    ('registration started', EnquiryStatus.IN_REGISTRATION),
    ('Admission completed', EnquiryStatus.ADMISSION_DONE),
    ('admitted last week', EnquiryStatus.IN_ADMISSION),
    ('called back, no answer', EnquiryStatus.ENQUIRY),
    (None, EnquiryStatus.ENQUIRY),
])
def test_legacy_statuses_are_mapped(value, expected):
    assert coerce_enquiry_status(value) == expected


def test_enquiry_step_follows_status():
    assert enquiry_step('Enquiry') == 1
    assert enquiry_step('Admission Done') == 4
