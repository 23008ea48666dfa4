from django.contrib import admin

from .models import Discount, Expense, FeePayment, FeeStructure, SalaryPayment


@admin.register(FeeStructure)
class FeeStructureAdmin(admin.ModelAdmin):
    list_display = ['name', 'class_name', 'amount', 'frequency', 'due_date_day']
    list_filter = ['class_name', 'frequency']
    search_fields = ['name', 'class_name']


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'type', 'value']
    list_filter = ['category', 'type']


class AppendOnlyAdmin(admin.ModelAdmin):
    """Payments are recorded once and never edited or removed"""

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(FeePayment)
class FeePaymentAdmin(AppendOnlyAdmin):
    list_display = ['student', 'amount', 'payment_date', 'payment_mode', 'received_by']
    list_filter = ['payment_mode', 'payment_date']
    search_fields = ['student__admission_no', 'student__full_name', 'transaction_ref']
    date_hierarchy = 'payment_date'


@admin.register(SalaryPayment)
class SalaryPaymentAdmin(AppendOnlyAdmin):
    list_display = ['employee', 'payment_for_month', 'amount_paid', 'payment_date', 'payment_mode']
    list_filter = ['payment_mode', 'payment_for_month']
    search_fields = ['employee__full_name']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'amount', 'date', 'payment_mode', 'recipient']
    list_filter = ['category', 'payment_mode']
    search_fields = ['title', 'recipient']
    date_hierarchy = 'date'
