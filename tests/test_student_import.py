import datetime
from unittest import mock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.students.importer import (
    TEMPLATE_COLUMNS,
    ImportFormatError,
    ImportRowError,
    StudentRowBuilder,
    template_csv,
)
from apps.students.models import Student, StudentBulkUpload
from tasks import student_tasks
from tasks.student_tasks import import_students_from_csv, queue_student_import


class TestStudentRowBuilder:
    def test_values_map_by_position_and_are_trimmed(self):
        builder = StudentRowBuilder(['Full Name', 'gender', 'dob', 'phone'])

        student = builder.build(['  Asha Verma ', 'female', '2016-04-12', '9876543210'])

        assert student.full_name == 'Asha Verma'
        assert student.gender == 'Female'
        assert student.dob == datetime.date(2016, 4, 12)
        assert student.phone == '9876543210'
        assert student.student_status == Student.Status.ACTIVE
        assert student.created_via == Student.CreationMethod.IMPORT

    def test_omitted_columns_default_to_empty(self):
        student = StudentRowBuilder(['full_name']).build(['Asha'])

        assert student.father_name == ''
        assert student.dob is None

    def test_unknown_column_is_rejected(self):
        with pytest.raises(ImportFormatError):
            StudentRowBuilder(['full_name', 'favourite_colour'])

    def test_full_name_column_is_required(self):
        with pytest.raises(ImportFormatError):
            StudentRowBuilder(['phone'])

    @pytest.mark.parametrize('values', [
        ['', 'Male'],
        ['Asha', 'robot'],
        ['Asha', 'Female', 'twelfth of April'],
        ['Asha', 'Female', '2016-02-31'],
        ['Asha', 'Female', '2016-04-12', 'extra'],
    ])
    def test_bad_rows_raise(self, values):
        builder = StudentRowBuilder(['full_name', 'gender', 'dob'])

        with pytest.raises(ImportRowError):
            builder.build(values)


def test_template_lists_every_column():
    assert template_csv().strip().split(',') == list(TEMPLATE_COLUMNS)


def make_upload(content):
    return StudentBulkUpload.objects.create(
        csv_file=SimpleUploadedFile('students.csv', content.encode('utf-8'), content_type='text/csv'),
        uploaded_by='office@school.test',
    )


@pytest.mark.django_db
class TestImportTask:
    def test_rows_are_imported_and_failures_recorded(self):
        upload = make_upload(
            '\ufefffull_name,gender,class_section\n'
            'Asha Verma,Female,Class 3\n'
            ',Male,Class 1\n'
            '\n'
            'Kabir Singh,male,Class 4\n'
        )

        queue_student_import(upload)

        upload.refresh_from_db()
        assert upload.task_status == StudentBulkUpload.TaskStatus.COMPLETED
        assert upload.total_records == 3
        assert upload.records_created == 2
        assert upload.records_failed == 1
        assert Student.objects.filter(created_via='import').count() == 2
        assert upload.failed_rows == [{'row': 3, 'error': 'Missing full name'}]
        assert upload.error_message == ''

    def test_imported_students_get_sequential_admission_numbers(self):
        Student.objects.create(full_name='Existing', student_status='active')
        upload = make_upload('full_name\nOne\nTwo\n')

        queue_student_import(upload)

        numbers = sorted(Student.objects.values_list('admission_no', flat=True))
        year = datetime.date.today().year
        assert numbers == [f'ADM-{year}-00001', f'ADM-{year}-00002', f'ADM-{year}-00003']

    def test_rows_past_the_limit_are_reported(self, monkeypatch):
        monkeypatch.setattr(student_tasks, 'MAX_ROWS_PER_TASK', 2)
        upload = make_upload('full_name\nAsha\nKabir\nMeera\nRavi\n')

        queue_student_import(upload)

        upload.refresh_from_db()
        assert upload.task_status == StudentBulkUpload.TaskStatus.COMPLETED
        assert (upload.total_records, upload.records_created, upload.records_failed) == (4, 2, 2)
        assert upload.error_message == 'Row limit of 2 reached; 2 row(s) after row 2 were not imported'
        assert sorted(Student.objects.values_list('full_name', flat=True)) == ['Asha', 'Kabir']

    def test_bad_header_marks_upload_failed(self):
        upload = make_upload('full_name,shoe_size\nAsha,4\n')

        queue_student_import(upload)

        upload.refresh_from_db()
        assert upload.task_status == StudentBulkUpload.TaskStatus.FAILED
        assert 'shoe_size' in upload.error_message
        assert not Student.objects.exists()

    def test_processed_upload_is_not_imported_twice(self):
        upload = make_upload('full_name\nAsha\n')
        queue_student_import(upload)

        result = import_students_from_csv.apply(args=(upload.pk,))

        assert result.result == {'status': 'completed'}
        assert Student.objects.count() == 1

    def test_celery_path_hands_off_to_worker(self, settings, monkeypatch):
        settings.TASKS_USE_CELERY = True
        calls = []
        monkeypatch.setattr(student_tasks, 'import_students_from_csv', mock.Mock(**{'delay.side_effect': calls.append}))
        upload = make_upload('full_name\nAsha\n')

        queue_student_import(upload)

        assert calls == [upload.pk]
        upload.refresh_from_db()
        assert upload.task_status == StudentBulkUpload.TaskStatus.PENDING
