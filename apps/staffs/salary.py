"""
Salary rule resolution
"""
import logging

from django.db import transaction

from .models import Employee, SalaryConfig

logger = logging.getLogger(__name__)


def resolve_salary(department, level, frequency, configs=None):
    """
    Amount of the first rule matching (department, level, frequency).

    configs defaults to every SalaryConfig in list order. Returns None when
    nothing matches.
    """
    if configs is None:
        configs = SalaryConfig.objects.all()

    for config in configs:
        if (config.department, config.level, config.frequency) == (department, level, frequency):
            return config.amount
    return None


def apply_salary_rule(employee, configs=None, commit=True):
    """
    Set employee.salary_amount from the matching rule.

    The employee is left untouched when no rule matches. Returns True when
    a rule was applied.
    """
    amount = resolve_salary(employee.department, employee.level, employee.salary_frequency, configs)
    if amount is None:
        logger.info(
            "No salary rule for %s / %s / %s",
            employee.department, employee.level, employee.salary_frequency,
        )
        return False

    employee.salary_amount = amount
    if commit and employee.pk:
        employee.save(update_fields=['salary_amount', 'updated_at'])
    return True


def apply_salary_rules(queryset=None):
    """Re-resolve salary_amount for every employee; returns how many matched"""
    configs = list(SalaryConfig.objects.all())
    if queryset is None:
        queryset = Employee.objects.all()

    updated = 0
    with transaction.atomic():
        for employee in queryset:
            if apply_salary_rule(employee, configs):
                updated += 1
    return updated
