import pytest
from django.urls import reverse

from apps.admissions.models import AdmissionEnquiry, StudentRegistration
from apps.students.models import Student

pytestmark = pytest.mark.django_db

ENQUIRY_POST = {
    'full_name': 'Asha Verma',
    'gender': 'Female',
    'dob': '2016-04-12',
    'class_applying_for': 'Class 3',
    'father_name': 'Ravi Verma',
    'mother_name': 'Meera Verma',
    'mobile_no': '9876543210',
    'address': '12 Lake Road',
}

REGISTRATION_POST = {
    'full_name': 'Kabir Singh',
    'gender': 'Male',
    'dob': '2015-09-03',
    'phone': '9123456780',
    'address': '4 Hill Street',
    'father_name': 'Arjun Singh',
    'mother_name': 'Nisha Singh',
    'class_enrolled': 'Class 4',
}


def test_login_is_required(client):
    response = client.get(reverse('admissions:enquiry_list'))

    assert response.status_code == 302
    assert reverse('corecode:login') in response['Location']


class TestEnquiryViews:
    def test_create_enquiry(self, staff_client):
        response = staff_client.post(reverse('admissions:enquiry_list'), ENQUIRY_POST)

        assert response.status_code == 201
        body = response.json()
        assert body['enquiry']['response_status'] == 'Enquiry'
        assert body['enquiry']['step'] == 1
        assert body['enquiry']['no_of_child'] == 1

    @pytest.mark.parametrize('field, value', [
        ('mobile_no', '98765'),
        ('mobile_no', '98765abcde'),
        ('email', 'not-an-email'),
        ('full_name', ''),
        ('dob', '2999-01-01'),
    ])
    def test_invalid_enquiry_is_rejected(self, staff_client, field, value):
        data = dict(ENQUIRY_POST, **{field: value})

        response = staff_client.post(reverse('admissions:enquiry_list'), data)

        assert response.status_code == 400
        assert field in response.json()['errors']
        assert not AdmissionEnquiry.objects.exists()

    def test_legacy_status_text_is_mapped(self, staff_client):
        data = dict(ENQUIRY_POST, response_status='Registration in progress')

        response = staff_client.post(reverse('admissions:enquiry_list'), data)

        assert response.json()['enquiry']['response_status'] == 'In Registration'

    def test_update_keeps_status_when_not_sent(self, staff_client, make_enquiry):
        enquiry = make_enquiry(response_status='In Admission')
        data = dict(ENQUIRY_POST, full_name='Asha V.')

        response = staff_client.post(reverse('admissions:enquiry_update', args=[enquiry.pk]), data)

        assert response.status_code == 200
        enquiry.refresh_from_db()
        assert enquiry.full_name == 'Asha V.'
        assert enquiry.response_status == 'In Admission'

    def test_recycle_bin_round_trip(self, staff_client, make_enquiry):
        enquiry = make_enquiry()

        staff_client.post(reverse('admissions:enquiry_delete', args=[enquiry.pk]))
        listed = staff_client.get(reverse('admissions:enquiry_list')).json()['enquiries']
        binned = staff_client.get(reverse('admissions:recycle_bin')).json()['enquiries']
        assert listed == []
        assert [e['id'] for e in binned] == [enquiry.pk]

        staff_client.post(reverse('admissions:enquiry_restore', args=[enquiry.pk]))
        assert len(staff_client.get(reverse('admissions:enquiry_list')).json()['enquiries']) == 1

    def test_purge_requires_bin(self, staff_client, make_enquiry):
        enquiry = make_enquiry()

        response = staff_client.post(reverse('admissions:enquiry_purge', args=[enquiry.pk]))

        assert response.status_code == 404
        assert AdmissionEnquiry.objects.filter(pk=enquiry.pk).exists()

    def test_promote_then_promote_again(self, staff_client, make_enquiry):
        enquiry = make_enquiry()
        url = reverse('admissions:promote_enquiry', args=[enquiry.pk])

        first = staff_client.post(url)
        second = staff_client.post(url)

        assert first.status_code == 201
        assert first.json()['registration']['status'] == 'pending'
        assert second.status_code == 409
        assert second.json()['success'] is False
        assert StudentRegistration.objects.count() == 1

    def test_promote_requires_post(self, staff_client, make_enquiry):
        enquiry = make_enquiry()

        response = staff_client.get(reverse('admissions:promote_enquiry', args=[enquiry.pk]))

        assert response.status_code == 405


class TestRegistrationViews:
    def test_direct_registration_and_duplicate_phone(self, staff_client):
        url = reverse('admissions:registration_list')

        first = staff_client.post(url, REGISTRATION_POST)
        second = staff_client.post(url, dict(REGISTRATION_POST, full_name='Other Child'))

        assert first.status_code == 201
        assert second.status_code == 409
        assert 'phone' in second.json()['error']
        assert StudentRegistration.objects.count() == 1

    def test_invalid_phone_is_a_validation_error(self, staff_client):
        response = staff_client.post(
            reverse('admissions:registration_list'), dict(REGISTRATION_POST, phone='12345')
        )

        assert response.status_code == 400
        assert 'phone' in response.json()['errors']

    def test_approve_returns_provisional_student(self, staff_client, make_registration):
        registration = make_registration()

        response = staff_client.post(
            reverse('admissions:review_registration', args=[registration.pk]), {'decision': 'approved'}
        )

        body = response.json()
        assert response.status_code == 200
        assert body['registration']['status'] == 'approved'
        assert body['student']['student_status'] == 'provisional'
        assert body['student']['admission_no'].startswith('ADM-')

        detail = staff_client.get(reverse('admissions:registration_detail', args=[registration.pk])).json()
        assert [s['id'] for s in detail['registration']['students']] == [body['student']['id']]

    def test_reject_twice_conflicts(self, staff_client, make_registration):
        registration = make_registration()
        url = reverse('admissions:review_registration', args=[registration.pk])

        staff_client.post(url, {'decision': 'rejected'})
        response = staff_client.post(url, {'decision': 'approved'})

        assert response.status_code == 409
        assert not Student.objects.exists()

    def test_bulk_review(self, staff_client, make_registration):
        ids = [make_registration(phone=f'900000000{i}').pk for i in range(3)]

        response = staff_client.post(
            reverse('admissions:bulk_review'),
            {'registration_ids': ','.join(str(i) for i in ids), 'decision': 'approved'},
        )

        assert response.json()['results']['success'] == 3
        assert Student.get_provisional_students().count() == 3

    def test_bulk_review_validates_ids(self, staff_client):
        response = staff_client.post(
            reverse('admissions:bulk_review'), {'registration_ids': 'a,b', 'decision': 'approved'}
        )

        assert response.status_code == 400

    def test_complete_and_delete(self, staff_client, make_registration):
        registration = make_registration()
        complete_url = reverse('admissions:complete_registration', args=[registration.pk])

        assert staff_client.post(complete_url).status_code == 409

        staff_client.post(
            reverse('admissions:review_registration', args=[registration.pk]), {'decision': 'approved'}
        )
        completed = staff_client.post(complete_url)
        assert completed.json()['registration']['status'] == 'Admission Done'

        staff_client.post(reverse('admissions:registration_delete', args=[registration.pk]))
        assert not StudentRegistration.objects.exists()
        # the admitted student outlives its registration
        assert Student.objects.get().source_registration is None

