import csv
import io

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from apps.students.models import Student, StudentBulkUpload

pytestmark = pytest.mark.django_db


class TestStudentList:
    def test_filters_by_status_class_and_name(self, staff_client, make_student):
        make_student(full_name='Riya Das', class_section='Class 2')
        make_student(full_name='Tara Sen', class_section='Class 3')
        make_student(full_name='Provisional Kid', student_status=Student.Status.PROVISIONAL)
        make_student(full_name='Hidden', is_deleted=True)
        url = reverse('students:student_list')

        active = staff_client.get(url).json()['students']
        provisional = staff_client.get(url, {'status': 'provisional'}).json()['students']
        class_three = staff_client.get(url, {'class': 'Class 3'}).json()['students']
        searched = staff_client.get(url, {'q': 'riya'}).json()['students']

        assert {s['full_name'] for s in active} == {'Riya Das', 'Tara Sen'}
        assert [s['full_name'] for s in provisional] == ['Provisional Kid']
        assert [s['full_name'] for s in class_three] == ['Tara Sen']
        assert [s['full_name'] for s in searched] == ['Riya Das']

    def test_detail_includes_documents(self, staff_client, make_student):
        student = make_student()
        staff_client.post(
            reverse('students:student_documents', args=[student.pk]),
            {'document_type': 'Birth Certificate',
             'file': SimpleUploadedFile('birth.pdf', b'%PDF-1.4', content_type='application/pdf')},
        )

        body = staff_client.get(reverse('students:student_detail', args=[student.pk])).json()

        assert body['student']['admission_no'] == student.admission_no
        assert [d['document_type'] for d in body['student']['documents']] == ['Birth Certificate']


class TestStudentLifecycle:
    def test_finalize_requires_class(self, staff_client, make_student):
        student = make_student(student_status=Student.Status.PROVISIONAL, class_section='')

        response = staff_client.post(reverse('students:finalize_admission', args=[student.pk]), {})

        assert response.status_code == 400
        assert 'class_section' in response.json()['errors']

    def test_finalize_provisional(self, staff_client, make_student):
        student = make_student(student_status=Student.Status.PROVISIONAL)

        response = staff_client.post(
            reverse('students:finalize_admission', args=[student.pk]),
            {'class_section': 'Class 5', 'section': 'C'},
        )

        assert response.status_code == 200
        assert response.json()['student']['student_status'] == 'active'
        student.refresh_from_db()
        assert (student.class_section, student.section) == ('Class 5', 'C')

    def test_finalize_active_conflicts(self, staff_client, make_student):
        student = make_student()

        response = staff_client.post(
            reverse('students:finalize_admission', args=[student.pk]), {'class_section': 'Class 5'}
        )

        assert response.status_code == 409
        student.refresh_from_db()
        assert student.class_section == 'Class 2'

    def test_toggle_status(self, staff_client, make_student):
        student = make_student()

        response = staff_client.post(reverse('students:toggle_status', args=[student.pk]))

        assert response.json()['student_status'] == 'inactive'

    def test_update_profile(self, staff_client, make_student):
        student = make_student()

        response = staff_client.post(
            reverse('students:student_update', args=[student.pk]),
            {'full_name': 'Riya D.', 'gender': 'Female', 'class_section': 'Class 2'},
        )

        assert response.status_code == 200
        assert response.json()['student']['full_name'] == 'Riya D.'
        assert response.json()['student']['student_status'] == 'active'


class TestPhotoUpload:
    def test_photo_is_compressed_to_jpeg(self, staff_client, make_student, image_upload):
        student = make_student()

        response = staff_client.post(
            reverse('students:upload_photo', args=[student.pk]),
            {'photo': image_upload(size=(1800, 1200))},
        )

        assert response.status_code == 200
        student.refresh_from_db()
        assert student.photo.name.endswith('.jpg')
        assert response.json()['photo_url'] == student.photo.url

    def test_crop_must_keep_passport_ratio(self, staff_client, make_student, image_upload):
        student = make_student()

        response = staff_client.post(
            reverse('students:upload_photo', args=[student.pk]),
            {'photo': image_upload(), 'x': 0, 'y': 0, 'width': 100, 'height': 100},
        )

        assert response.status_code == 400
        assert not Student.objects.get(pk=student.pk).photo

    def test_cropped_upload(self, staff_client, make_student, image_upload):
        student = make_student()

        response = staff_client.post(
            reverse('students:upload_photo', args=[student.pk]),
            {'photo': image_upload(), 'x': 10, 'y': 10, 'width': 120, 'height': 140, 'rotation': 0},
        )

        assert response.status_code == 200


class TestExport:
    def test_csv_export_download(self, staff_client, make_student):
        make_student(full_name='Riya Das')

        response = staff_client.get(reverse('students:export_students'), {'format': 'csv'})

        assert response.status_code == 200
        assert 'attachment; filename="students_' in response['Content-Disposition']
        rows = list(csv.reader(io.StringIO(response.content.decode('utf-8'))))
        assert rows[1][1] == 'Riya Das'

    def test_admission_data_exports_provisional_students(self, staff_client, make_student):
        make_student(full_name='Active Kid')
        make_student(full_name='New Kid', student_status=Student.Status.PROVISIONAL)

        response = staff_client.get(
            reverse('students:export_students'), {'type': 'admission_data', 'format': 'text'}
        )

        content = response.content.decode('utf-8')
        assert 'New Kid' in content
        assert 'Active Kid' not in content
        assert response['Content-Disposition'].endswith('.txt"')

    def test_empty_export_is_not_found(self, staff_client):
        response = staff_client.get(reverse('students:export_students'))

        assert response.status_code == 404
        assert response.json()['error'] == 'No data to export'

    def test_unknown_format_is_rejected(self, staff_client, make_student):
        make_student()

        response = staff_client.get(reverse('students:export_students'), {'format': 'docx'})

        assert response.status_code == 400


class TestBulkUpload:
    def test_upload_runs_inline_and_reports_status(self, staff_client):
        csv_file = SimpleUploadedFile(
            'students.csv', b'full_name,gender\nAsha,Female\n,Male\n', content_type='text/csv'
        )

        response = staff_client.post(reverse('students:bulk_upload'), {'csv_file': csv_file})

        assert response.status_code == 202
        upload_id = response.json()['upload_id']
        assert StudentBulkUpload.objects.get(pk=upload_id).uploaded_by == 'office@school.test'

        status = staff_client.get(reverse('students:bulk_upload_status', args=[upload_id])).json()
        assert status['task_status'] == 'completed'
        assert status['records_created'] == 1
        assert status['records_failed'] == 1
        assert status['failed_rows'][0]['row'] == 3

    def test_non_csv_is_rejected(self, staff_client):
        response = staff_client.post(
            reverse('students:bulk_upload'),
            {'csv_file': SimpleUploadedFile('students.xlsx', b'PK', content_type='application/zip')},
        )

        assert response.status_code == 400
        assert not StudentBulkUpload.objects.exists()

    def test_template_download(self, staff_client):
        response = staff_client.get(reverse('students:import_template'))

        assert response.content.decode('utf-8').startswith('full_name,gender,dob')
