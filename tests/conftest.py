import datetime
import io
from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from apps.admissions.models import AdmissionEnquiry, StudentRegistration
from apps.staffs.models import Employee
from apps.students.models import Student


@pytest.fixture(autouse=True)
def isolated_media(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    settings.TASKS_USE_CELERY = False


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(
        username='office', email='office@school.test', password='s3cret-Pass!'
    )


@pytest.fixture
def staff_client(client, user):
    client.force_login(user)
    return client


@pytest.fixture
def make_enquiry(db):
    def factory(**overrides):
        data = {
            'full_name': 'Asha Verma',
            'gender': 'Female',
            'dob': datetime.date(2016, 4, 12),
            'class_applying_for': 'Class 3',
            'father_name': 'Ravi Verma',
            'mother_name': 'Meera Verma',
            'mobile_no': '9876543210',
            'address': '12 Lake Road',
        }
        data.update(overrides)
        return AdmissionEnquiry.objects.create(**data)
    return factory


@pytest.fixture
def make_registration(db):
    def factory(**overrides):
        data = {
            'full_name': 'Kabir Singh',
            'gender': 'Male',
            'dob': datetime.date(2015, 9, 3),
            'phone': '9123456780',
            'address': '4 Hill Street',
            'father_name': 'Arjun Singh',
            'mother_name': 'Nisha Singh',
            'class_enrolled': 'Class 4',
        }
        data.update(overrides)
        return StudentRegistration.objects.create(**data)
    return factory


@pytest.fixture
def make_student(db):
    def factory(**overrides):
        data = {
            'full_name': 'Riya Das',
            'gender': 'Female',
            'class_section': 'Class 2',
            'phone': '9000000001',
            'student_status': Student.Status.ACTIVE,
        }
        data.update(overrides)
        return Student.objects.create(**data)
    return factory


@pytest.fixture
def make_employee(db):
    def factory(**overrides):
        data = {
            'full_name': 'Sunita Rao',
            'designation': 'Teacher',
            'department': 'Science',
            'level': 'Senior',
            'salary_frequency': 'Monthly',
            'salary_amount': Decimal('30000'),
        }
        data.update(overrides)
        return Employee.objects.create(**data)
    return factory


@pytest.fixture
def image_upload():
    def factory(name='photo.png', size=(400, 300), color=(200, 30, 30), fmt='PNG', content_type='image/png'):
        buffer = io.BytesIO()
        Image.new('RGB', size, color).save(buffer, format=fmt)
        return SimpleUploadedFile(name, buffer.getvalue(), content_type=content_type)
    return factory
