import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.corecode.utils import form_errors, log_user_action, serialize_instance
from .forms import (
    DiscountForm,
    ExpenseForm,
    FeeCollectionForm,
    FeeStructureForm,
    SalaryPaymentForm,
)
from .models import Discount, Expense, FeePayment, FeeStructure, SalaryPayment
from .utils import collect_fee, finance_overview, pay_salary

logger = logging.getLogger(__name__)


def _validation_message(error):
    return ' '.join(error.messages)


@login_required
@require_GET
def overview(request):
    return JsonResponse({
        'success': True,
        'overview': {key: float(value) for key, value in finance_overview().items()},
    })


# Fee structures

@login_required
def fee_structures(request):
    """GET lists fee structures (?class filters), POST creates one"""
    if request.method == 'POST':
        form = FeeStructureForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        structure = form.save()
        log_user_action('Fee Structure', f"Created {structure.name} for {structure.class_name}", request=request)
        return JsonResponse({'success': True, 'fee_structure': serialize_instance(structure)}, status=201)

    structures = FeeStructure.objects.all()
    class_name = request.GET.get('class')
    if class_name:
        structures = structures.filter(class_name=class_name)
    return JsonResponse({
        'success': True,
        'fee_structures': [serialize_instance(s) for s in structures],
    })


@login_required
@require_POST
def fee_structure_update(request, pk):
    structure = get_object_or_404(FeeStructure, pk=pk)
    form = FeeStructureForm(request.POST, instance=structure)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
    structure = form.save()
    log_user_action('Fee Structure', f"Updated {structure.name}", request=request)
    return JsonResponse({'success': True, 'fee_structure': serialize_instance(structure)})


@login_required
@require_POST
def fee_structure_delete(request, pk):
    structure = get_object_or_404(FeeStructure, pk=pk)
    name = structure.name
    structure.delete()
    log_user_action('Fee Structure', f"Deleted {name}", request=request)
    return JsonResponse({'success': True})


# Discounts and bonuses

@login_required
def discounts(request):
    """GET lists discounts (?category=student|employee), POST creates one"""
    if request.method == 'POST':
        form = DiscountForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        discount = form.save()
        log_user_action('Discount', f"Created {discount}", request=request)
        return JsonResponse({'success': True, 'discount': serialize_instance(discount)}, status=201)

    queryset = Discount.objects.all()
    category = request.GET.get('category')
    if category:
        queryset = queryset.filter(category=category)
    return JsonResponse({
        'success': True,
        'discounts': [serialize_instance(d) for d in queryset],
    })


@login_required
@require_POST
def discount_update(request, pk):
    discount = get_object_or_404(Discount, pk=pk)
    form = DiscountForm(request.POST, instance=discount)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
    discount = form.save()
    log_user_action('Discount', f"Updated {discount}", request=request)
    return JsonResponse({'success': True, 'discount': serialize_instance(discount)})


@login_required
@require_POST
def discount_delete(request, pk):
    discount = get_object_or_404(Discount, pk=pk)
    label = str(discount)
    discount.delete()
    log_user_action('Discount', f"Deleted {label}", request=request)
    return JsonResponse({'success': True})


# Payments

@login_required
def fee_payments(request):
    """GET lists fee payments (?student filters), POST collects a fee"""
    if request.method == 'POST':
        form = FeeCollectionForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

        data = form.cleaned_data
        try:
            payment = collect_fee(
                data['student'],
                amount=data.get('amount'),
                fee_structure=data.get('fee_structure'),
                discount=data.get('discount'),
                payment_mode=data['payment_mode'],
                payment_date=data.get('payment_date'),
                transaction_ref=data.get('transaction_ref', ''),
                remarks=data.get('remarks', ''),
                request=request,
            )
        except ValidationError as e:
            return JsonResponse({'success': False, 'error': _validation_message(e)}, status=400)
        except DatabaseError as e:
            logger.error(f"Fee collection failed: {e}")
            return JsonResponse({'success': False, 'error': str(e)}, status=500)

        return JsonResponse({'success': True, 'payment': serialize_instance(payment)}, status=201)

    payments = FeePayment.objects.select_related('student')
    student_id = request.GET.get('student')
    if student_id:
        payments = payments.filter(student_id=student_id)
    return JsonResponse({
        'success': True,
        'payments': [serialize_instance(p) for p in payments],
    })


@login_required
def salary_payments(request):
    """GET lists salary payments (?employee filters), POST pays a salary"""
    if request.method == 'POST':
        form = SalaryPaymentForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

        data = form.cleaned_data
        details = {}
        if data.get('transaction_ref'):
            details['reference'] = data['transaction_ref']

        try:
            payment = pay_salary(
                data['employee'],
                data['payment_for_month'],
                bonus=data.get('bonus'),
                amount=data.get('amount'),
                payment_mode=data['payment_mode'],
                payment_date=data.get('payment_date'),
                notes=data.get('notes', ''),
                transaction_details=details,
                request=request,
            )
        except ValidationError as e:
            return JsonResponse({'success': False, 'error': _validation_message(e)}, status=400)
        except DatabaseError as e:
            logger.error(f"Salary payment failed: {e}")
            return JsonResponse({'success': False, 'error': str(e)}, status=500)

        return JsonResponse({'success': True, 'payment': serialize_instance(payment)}, status=201)

    payments = SalaryPayment.objects.select_related('employee')
    employee_id = request.GET.get('employee')
    if employee_id:
        payments = payments.filter(employee_id=employee_id)
    return JsonResponse({
        'success': True,
        'payments': [serialize_instance(p) for p in payments],
    })


# Expenses

@login_required
def expenses(request):
    if request.method == 'POST':
        form = ExpenseForm(request.POST)
        if not form.is_valid():
            return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)
        expense = form.save()
        log_user_action('Expense', f"Recorded {expense}", request=request)
        return JsonResponse({'success': True, 'expense': serialize_instance(expense)}, status=201)

    queryset = Expense.objects.all()
    category = request.GET.get('category')
    if category:
        queryset = queryset.filter(category=category)
    return JsonResponse({
        'success': True,
        'expenses': [serialize_instance(e) for e in queryset],
    })


@login_required
@require_POST
def expense_delete(request, pk):
    expense = get_object_or_404(Expense, pk=pk)
    label = str(expense)
    expense.delete()
    log_user_action('Expense', f"Deleted {label}", request=request)
    return JsonResponse({'success': True})
