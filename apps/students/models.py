from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


mobile_number_validator = RegexValidator(
    regex=r"^\d{10}$",
    message=_("Mobile number must be exactly 10 digits"),
)

GENDER_CHOICES = [('Male', 'Male'), ('Female', 'Female'), ('Other', 'Other')]


class Student(models.Model):
    """Student profile, from provisional admission through to alumni"""

    class CreationMethod(models.TextChoices):
        MANUAL = 'manual', _('Manual Entry')
        REGISTRATION = 'registration', _('Registration Approval')
        IMPORT = 'import', _('Bulk Import')

    class Status(models.TextChoices):
        PROVISIONAL = 'provisional', _('Provisional')
        ACTIVE = 'active', _('Active')
        ALUMNI = 'alumni', _('Alumni')
        INACTIVE = 'inactive', _('Inactive')

    ADMISSION_PREFIX = 'ADM'

    created_via = models.CharField(
        max_length=20,
        choices=CreationMethod.choices,
        default=CreationMethod.MANUAL,
        verbose_name=_("Creation Method")
    )

    admission_no = models.CharField(
        max_length=50,
        unique=True,
        editable=False,
        verbose_name=_("Admission No"),
        help_text=_("Auto-generated admission number")
    )
    full_name = models.CharField(max_length=200, verbose_name=_("Full Name"))
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True, verbose_name=_("Gender"))
    dob = models.DateField(null=True, blank=True, verbose_name=_("Date of Birth"))

    # Contact Information
    email = models.EmailField(blank=True, verbose_name=_("Email"))
    phone = models.CharField(max_length=20, blank=True, verbose_name=_("Mobile"))
    whatsapp_no = models.CharField(max_length=20, blank=True, verbose_name=_("WhatsApp No"))
    address = models.TextField(blank=True, verbose_name=_("Address"))

    # Parents
    father_name = models.CharField(max_length=200, blank=True)
    father_qualification = models.CharField(max_length=200, blank=True)
    mother_name = models.CharField(max_length=200, blank=True)
    mother_qualification = models.CharField(max_length=200, blank=True)

    # Academic Information
    class_section = models.CharField(max_length=100, blank=True, verbose_name=_("Class"))
    section = models.CharField(max_length=20, blank=True, verbose_name=_("Section"))
    fee_category = models.CharField(max_length=100, blank=True)

    # Identity & Facilities
    photo = models.ImageField(upload_to='students/photos/', blank=True, verbose_name=_("Profile Photo"))
    aadhar_no = models.CharField(max_length=20, blank=True, verbose_name=_("Aadhar No"))
    blood_group = models.CharField(max_length=5, blank=True)
    identification_mark = models.CharField(max_length=255, blank=True)
    transport_route = models.CharField(max_length=100, blank=True)
    hostel_room = models.CharField(max_length=50, blank=True)

    student_status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PROVISIONAL,
        verbose_name=_("Status")
    )

    # Registration the student was admitted from; statuses are not kept in sync
    source_registration = models.ForeignKey(
        'admissions.StudentRegistration',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students',
        verbose_name=_("Source Registration")
    )

    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'students'
        ordering = ['-id']
        verbose_name = _('Student')
        verbose_name_plural = _('Students')

    def __str__(self):
        return f"{self.admission_no} - {self.full_name}"

    def save(self, *args, **kwargs):
        if not self.admission_no:
            self.admission_no = self.allocate_admission_numbers(1)[0]
        super().save(*args, **kwargs)

    @classmethod
    def allocate_admission_numbers(cls, count, year=None):
        """
        Reserve count sequential admission numbers for year.

        Numbers look like ADM-2025-00042. Call inside the transaction that
        inserts the rows.
        """
        year = year or timezone.now().year
        prefix = f"{cls.ADMISSION_PREFIX}-{year}-"
        last_student = cls.objects.filter(
            admission_no__startswith=prefix
        ).order_by('-admission_no').first()

        new_num = 1
        if last_student and last_student.admission_no:
            try:
                new_num = int(last_student.admission_no.split('-')[-1]) + 1
            except (ValueError, IndexError):
                pass

        return [f"{prefix}{num:05d}" for num in range(new_num, new_num + count)]

    @property
    def is_provisional(self):
        return self.student_status == self.Status.PROVISIONAL

    @property
    def is_active(self):
        return self.student_status == self.Status.ACTIVE

    @property
    def age(self):
        if not self.dob:
            return None
        today = timezone.now().date()
        born = self.dob
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))

    @classmethod
    def get_active_students(cls):
        return cls.objects.filter(student_status=cls.Status.ACTIVE, is_deleted=False)

    @classmethod
    def get_provisional_students(cls):
        return cls.objects.filter(student_status=cls.Status.PROVISIONAL, is_deleted=False)

    @classmethod
    def get_inactive_students(cls):
        return cls.objects.filter(student_status=cls.Status.INACTIVE, is_deleted=False)


class StudentDocument(models.Model):
    """Supporting document attached to a student"""

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='documents')
    document_type = models.CharField(max_length=100)
    file = models.FileField(upload_to='students/documents/')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'student_documents'
        ordering = ['-uploaded_at']

    def __str__(self):
        return f"{self.student.full_name} - {self.document_type}"


class StudentBulkUpload(models.Model):
    class TaskStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        PROCESSING = 'processing', _('Processing')
        COMPLETED = 'completed', _('Completed')
        FAILED = 'failed', _('Failed')

    date_uploaded = models.DateTimeField(auto_now_add=True)
    csv_file = models.FileField(upload_to="students/bulkupload/")
    uploaded_by = models.CharField(max_length=254, blank=True)

    task_id = models.CharField(max_length=255, blank=True)
    task_status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.PENDING,
    )
    processing_started = models.DateTimeField(null=True, blank=True)
    processing_completed = models.DateTimeField(null=True, blank=True)
    total_records = models.PositiveIntegerField(default=0)
    records_created = models.PositiveIntegerField(default=0)
    records_failed = models.PositiveIntegerField(default=0)
    error_message = models.TextField(blank=True)
    failed_rows = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = 'student_bulk_uploads'
        ordering = ['-date_uploaded']

    def __str__(self):
        return f"Upload {self.pk} ({self.task_status})"
