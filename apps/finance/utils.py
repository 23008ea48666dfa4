"""
Finance utilities for discounts, fee collection and salary payments
"""
import datetime
import logging
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db.models import Sum
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.corecode.utils import log_user_action
from apps.students.models import Student
from .models import Discount, Expense, FeePayment, SalaryPayment

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def calculate_total(amount, discount=None):
    """
    Apply a discount or bonus to a base amount.

    Student discounts are subtracted, employee bonuses added. Percentages
    are taken from the base amount. The result never drops below zero.
    """
    amount = Decimal(str(amount or 0))
    if discount is None:
        return max(ZERO, amount)

    value = Decimal(str(discount.value))
    if discount.type == Discount.Type.PERCENTAGE:
        adjustment = amount * value / HUNDRED
    else:
        adjustment = value

    if discount.category == Discount.Category.EMPLOYEE:
        total = amount + adjustment
    else:
        total = amount - adjustment
    return max(ZERO, total)


def calculate_salary_total(base_amount, bonus=None):
    """Salary plus optional bonus, rounded to whole units"""
    return calculate_total(base_amount, bonus).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def first_of_month(value):
    """Accept a date or a 'YYYY-MM' / 'YYYY-MM-DD' string"""
    if isinstance(value, str):
        parts = value.split('-')
        try:
            return datetime.date(int(parts[0]), int(parts[1]), 1)
        except (IndexError, ValueError):
            raise ValidationError(_("Invalid payment month: %(value)s") % {'value': value})
    return value.replace(day=1)


def collect_fee(student, amount=None, fee_structure=None, discount=None, payment_mode='Cash',
                payment_date=None, transaction_ref='', remarks='', request=None):
    """
    Record a fee payment for an active student.

    amount defaults to the fee structure's amount; a student discount is
    applied to it. Raises ValidationError when the student is not active,
    the discount is not a student discount or the total is not positive.
    """
    if student.student_status != Student.Status.ACTIVE:
        raise ValidationError(_("Fees can only be collected from active students"))

    if amount is None:
        if fee_structure is None:
            raise ValidationError(_("Enter an amount or choose a fee structure"))
        amount = fee_structure.amount

    if discount is not None and discount.category != Discount.Category.STUDENT:
        raise ValidationError(_("%(name)s is not a student discount") % {'name': discount.name})

    total = calculate_total(amount, discount)
    if total <= 0:
        raise ValidationError(_("Payment amount must be greater than 0"))

    payment = FeePayment.objects.create(
        student=student,
        fee_structure=fee_structure,
        discount=discount,
        amount=total,
        payment_date=payment_date or timezone.localdate(),
        payment_mode=payment_mode,
        transaction_ref=transaction_ref,
        remarks=remarks,
        received_by=_actor(request),
    )

    logger.info(f"Fee payment {payment.pk}: {total} from {student.admission_no}")
    log_user_action('Collect Fee', f"{total} collected from {student.admission_no}", request=request)
    return payment


def pay_salary(employee, payment_for_month, bonus=None, amount=None, payment_mode='Bank Transfer',
               payment_date=None, notes='', transaction_details=None, request=None):
    """
    Record a salary payment.

    amount defaults to the employee's salary plus the optional bonus,
    rounded to whole units. The bonus name is appended to the notes.
    """
    if bonus is not None and bonus.category != Discount.Category.EMPLOYEE:
        raise ValidationError(_("%(name)s is not an employee bonus") % {'name': bonus.name})

    if amount is None:
        amount = calculate_salary_total(employee.salary_amount, bonus)
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationError(_("Amount must be greater than 0"))

    details = {'note': notes}
    details.update(transaction_details or {})

    note = notes
    if bonus is not None:
        note = f"{notes} (Bonus: {bonus.name})" if notes else f"Bonus: {bonus.name}"

    payment = SalaryPayment.objects.create(
        employee=employee,
        bonus=bonus,
        amount_paid=amount,
        payment_date=payment_date or timezone.localdate(),
        payment_for_month=first_of_month(payment_for_month),
        payment_mode=payment_mode,
        transaction_details=details,
        notes=note,
    )

    logger.info(f"Salary payment {payment.pk}: {amount} to employee {employee.pk}")
    log_user_action(
        'Pay Salary',
        f"{amount} paid to {employee.full_name} for {payment.payment_for_month:%Y-%m}",
        request=request,
    )
    return payment


def finance_overview(today=None):
    """Headline numbers for the finance dashboard"""
    today = today or timezone.localdate()
    month_start = today.replace(day=1)

    def total(queryset, field):
        return queryset.aggregate(total=Sum(field))['total'] or ZERO

    return {
        'collected_today': total(FeePayment.objects.filter(payment_date=today), 'amount'),
        'monthly_collection': total(FeePayment.objects.filter(payment_date__gte=month_start, payment_date__lte=today), 'amount'),
        'expenses_this_month': total(Expense.objects.filter(date__gte=month_start, date__lte=today), 'amount'),
        'salaries_this_month': total(SalaryPayment.objects.filter(payment_for_month=month_start), 'amount_paid'),
    }


def _actor(request):
    if request is None or not request.user.is_authenticated:
        return ''
    return request.user.email or request.user.get_username()
