from decimal import Decimal

import pytest
from django.urls import reverse

from apps.finance.models import Discount, FeePayment, FeeStructure, SalaryPayment
from apps.finance.utils import pay_salary
from apps.staffs.models import Employee, SalaryConfig

pytestmark = pytest.mark.django_db

EMPLOYEE_POST = {
    'full_name': 'Sunita Rao',
    'designation': 'Teacher',
    'department': 'Science',
    'level': 'Senior',
    'salary_frequency': 'Monthly',
}


class TestEmployeeViews:
    def test_create_fills_salary_from_rules(self, staff_client):
        SalaryConfig.objects.create(department='Science', level='Senior', frequency='Monthly', amount=45000)

        response = staff_client.post(reverse('staffs:employee_create'), EMPLOYEE_POST)

        assert response.status_code == 201
        assert response.json()['employee']['salary_amount'] == 45000.0

    def test_explicit_salary_is_kept(self, staff_client):
        SalaryConfig.objects.create(department='Science', level='Senior', frequency='Monthly', amount=45000)

        response = staff_client.post(
            reverse('staffs:employee_create'), dict(EMPLOYEE_POST, salary_amount='38000')
        )

        assert response.json()['employee']['salary_amount'] == 38000.0

    def test_create_without_matching_rule_leaves_salary_empty(self, staff_client):
        response = staff_client.post(
            reverse('staffs:employee_create'), {'full_name': 'New Clerk', 'department': 'Administration'}
        )

        employee = response.json()['employee']
        assert response.status_code == 201
        assert employee['salary_amount'] is None
        assert (employee['level'], employee['salary_frequency'], employee['status']) == ('Senior', 'Monthly', 'active')

    def test_negative_salary_is_rejected(self, staff_client):
        response = staff_client.post(
            reverse('staffs:employee_create'), dict(EMPLOYEE_POST, salary_amount='-5')
        )

        assert response.status_code == 400
        assert 'salary_amount' in response.json()['errors']

    def test_hard_delete(self, staff_client, make_employee):
        employee = make_employee()

        response = staff_client.post(reverse('staffs:employee_delete', args=[employee.pk]))

        assert response.status_code == 200
        assert not Employee.objects.exists()

    def test_delete_refused_with_salary_history(self, staff_client, make_employee):
        employee = make_employee()
        pay_salary(employee, '2025-10')

        response = staff_client.post(reverse('staffs:employee_delete', args=[employee.pk]))

        assert response.status_code == 409
        assert Employee.objects.filter(pk=employee.pk).exists()

    def test_export_employees(self, staff_client, make_employee):
        make_employee()

        response = staff_client.get(reverse('staffs:export_employees'), {'format': 'csv'})

        content = response.content.decode('utf-8')
        assert content.splitlines()[0].startswith('Employee ID,Full Name,Designation')
        assert 'Sunita Rao' in content
        assert '30000' not in content

    def test_photo_upload(self, staff_client, make_employee, image_upload):
        employee = make_employee()

        response = staff_client.post(
            reverse('staffs:upload_photo', args=[employee.pk]), {'photo': image_upload(size=(1500, 900))}
        )

        assert response.status_code == 200
        employee.refresh_from_db()
        assert employee.photo.name.endswith('.jpg')


class TestSalaryConfigViews:
    def test_add_list_apply_and_delete(self, staff_client, make_employee):
        employee = make_employee(salary_amount=None)
        url = reverse('staffs:salary_configs')

        created = staff_client.post(url, {'department': 'Science', 'amount': '45000'})
        listed = staff_client.get(url).json()['configs']
        applied = staff_client.post(reverse('staffs:apply_salary_configs')).json()

        assert created.status_code == 201
        assert [c['amount'] for c in listed] == [45000.0]
        assert applied['updated'] == 1
        employee.refresh_from_db()
        assert employee.salary_amount == Decimal('45000')

        config_id = listed[0]['id']
        staff_client.post(reverse('staffs:salary_config_delete', args=[config_id]))
        assert not SalaryConfig.objects.exists()


class TestFinanceViews:
    def test_fee_structure_crud(self, staff_client):
        url = reverse('finance:fee_structures')

        created = staff_client.post(url, {
            'name': 'Tuition', 'class_name': 'Class 2', 'amount': '5000',
            'frequency': 'Monthly', 'due_date_day': 10,
        })
        structure_id = created.json()['fee_structure']['id']
        staff_client.post(reverse('finance:fee_structure_update', args=[structure_id]), {
            'name': 'Tuition', 'class_name': 'Class 2', 'amount': '5500',
            'frequency': 'Monthly', 'due_date_day': 5,
        })

        assert created.status_code == 201
        assert FeeStructure.objects.get().amount == Decimal('5500')
        assert staff_client.get(url, {'class': 'Class 9'}).json()['fee_structures'] == []

        staff_client.post(reverse('finance:fee_structure_delete', args=[structure_id]))
        assert not FeeStructure.objects.exists()

    def test_percentage_discount_over_100_is_rejected(self, staff_client):
        response = staff_client.post(reverse('finance:discounts'), {
            'name': 'Everything', 'category': 'student', 'type': 'percentage', 'value': '150',
        })

        assert response.status_code == 400
        assert 'value' in response.json()['errors']

    def test_collect_fee_with_discount(self, staff_client, make_student):
        student = make_student()
        structure = FeeStructure.objects.create(name='Tuition', class_name='Class 2', amount=5000)
        sibling = Discount.objects.create(name='Sibling', category='student', type='percentage', value=10)

        response = staff_client.post(reverse('finance:fee_payments'), {
            'student': student.pk, 'fee_structure': structure.pk, 'discount': sibling.pk,
        })

        assert response.status_code == 201
        payment = FeePayment.objects.get()
        assert payment.amount == Decimal('4500')
        assert payment.payment_mode == 'Cash'
        assert payment.received_by == 'office@school.test'

        history = staff_client.get(reverse('finance:fee_payments'), {'student': student.pk}).json()
        assert [p['amount'] for p in history['payments']] == [4500.0]

    def test_collect_fee_needs_amount_or_structure(self, staff_client, make_student):
        student = make_student()

        response = staff_client.post(reverse('finance:fee_payments'), {'student': student.pk})

        assert response.status_code == 400
        assert not FeePayment.objects.exists()

    def test_full_waiver_is_rejected(self, staff_client, make_student):
        student = make_student()
        waiver = Discount.objects.create(name='Waiver', category='student', type='flat', value=6000)

        response = staff_client.post(reverse('finance:fee_payments'), {
            'student': student.pk, 'amount': '5000', 'discount': waiver.pk,
        })

        assert response.status_code == 400
        assert 'greater than 0' in response.json()['error']

    def test_pay_salary_with_bonus(self, staff_client, make_employee):
        employee = make_employee()
        bonus = Discount.objects.create(name='Diwali', category='employee', type='percentage', value=10)

        response = staff_client.post(reverse('finance:salary_payments'), {
            'employee': employee.pk, 'payment_for_month': '2025-10', 'bonus': bonus.pk,
            'transaction_ref': 'NEFT-0042',
        })

        assert response.status_code == 201
        payment = SalaryPayment.objects.get()
        assert payment.amount_paid == Decimal('33000')
        assert payment.notes == 'Bonus: Diwali'
        assert payment.transaction_details == {'note': '', 'reference': 'NEFT-0042'}

    def test_expenses_and_overview(self, staff_client):
        staff_client.post(reverse('finance:expenses'), {
            'title': 'Power bill', 'category': 'Utilities', 'amount': '1200',
            'date': '2025-10-01', 'payment_mode': 'UPI',
        })

        listed = staff_client.get(reverse('finance:expenses'), {'category': 'Utilities'}).json()
        overview = staff_client.get(reverse('finance:overview')).json()

        assert [e['title'] for e in listed['expenses']] == ['Power bill']
        assert set(overview['overview']) == {
            'collected_today', 'monthly_collection', 'expenses_this_month', 'salaries_this_month'
        }
