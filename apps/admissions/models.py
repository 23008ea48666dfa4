from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.students.models import GENDER_CHOICES, mobile_number_validator


class EnquiryStatus(models.TextChoices):
    """Progress of an enquiry through the admission pipeline"""

    ENQUIRY = 'Enquiry', _('Enquiry')
    IN_REGISTRATION = 'In Registration', _('In Registration')
    IN_ADMISSION = 'In Admission', _('In Admission')
    ADMISSION_DONE = 'Admission Done', _('Admission Done')


ENQUIRY_STEPS = {
    EnquiryStatus.ENQUIRY: 1,
    EnquiryStatus.IN_REGISTRATION: 2,
    EnquiryStatus.IN_ADMISSION: 3,
    EnquiryStatus.ADMISSION_DONE: 4,
}


class ActiveEnquiryManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class AdmissionEnquiry(models.Model):
    """An admission lead captured at reception"""

    full_name = models.CharField(max_length=200)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    dob = models.DateField(verbose_name=_("Date of Birth"))
    class_applying_for = models.CharField(max_length=100)
    no_of_child = models.PositiveSmallIntegerField(default=1)
    previous_school = models.CharField(max_length=255, blank=True)

    father_name = models.CharField(max_length=200)
    mother_name = models.CharField(max_length=200)
    mobile_no = models.CharField(max_length=10, validators=[mobile_number_validator])
    email = models.EmailField(blank=True)
    address = models.TextField()

    assigned_to = models.CharField(max_length=200, blank=True)
    reference = models.CharField(max_length=200, blank=True)
    enquiry_date = models.DateField(default=timezone.localdate)
    next_follow_up = models.DateField(null=True, blank=True)
    response_status = models.CharField(
        max_length=30,
        choices=EnquiryStatus.choices,
        default=EnquiryStatus.ENQUIRY,
    )
    internal_notes = models.TextField(blank=True)

    # Soft-deleted rows live in the recycle bin until restored or purged
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active = ActiveEnquiryManager()

    class Meta:
        db_table = 'admission_enquiries'
        ordering = ['-enquiry_date', '-id']
        verbose_name = _('Admission Enquiry')
        verbose_name_plural = _('Admission Enquiries')

    def __str__(self):
        return f"{self.full_name} ({self.class_applying_for})"

    @property
    def step(self):
        """Progress indicator, 1 (enquiry) to 4 (admission done)"""
        return ENQUIRY_STEPS.get(self.response_status, 1)


class RegistrationStatus(models.TextChoices):
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')
    # Legacy terminal label, treated the same as ADMISSION_DONE
    ADMITTED = 'admitted', _('Admitted')
    ADMISSION_DONE = 'Admission Done', _('Admission Done')


class StudentRegistration(models.Model):
    """A request to enroll, reviewed by staff"""

    full_name = models.CharField(max_length=200)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    dob = models.DateField(verbose_name=_("Date of Birth"))
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=10, validators=[mobile_number_validator], db_index=True)
    address = models.TextField()

    father_name = models.CharField(max_length=200)
    mother_name = models.CharField(max_length=200)
    class_enrolled = models.CharField(max_length=100)
    previous_school = models.CharField(max_length=255, blank=True)
    admission_date = models.DateField(default=timezone.localdate)

    status = models.CharField(
        max_length=20,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.PENDING,
    )

    enquiry = models.ForeignKey(
        AdmissionEnquiry,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='registrations',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'student_registrations'
        ordering = ['-created_at', '-id']
        verbose_name = _('Student Registration')
        verbose_name_plural = _('Student Registrations')

    def __str__(self):
        return f"{self.full_name} - {self.class_enrolled} ({self.status})"

    @property
    def is_completed(self):
        return self.status in (RegistrationStatus.ADMITTED, RegistrationStatus.ADMISSION_DONE)
