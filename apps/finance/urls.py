from django.urls import path
from . import views

app_name = "finance"

urlpatterns = [
    path("", views.overview, name="overview"),

    # Fee Structure URLs
    path("fee-structures/", views.fee_structures, name="fee_structures"),
    path("fee-structures/<int:pk>/update/", views.fee_structure_update, name="fee_structure_update"),
    path("fee-structures/<int:pk>/delete/", views.fee_structure_delete, name="fee_structure_delete"),

    # Discounts & bonuses
    path("discounts/", views.discounts, name="discounts"),
    path("discounts/<int:pk>/update/", views.discount_update, name="discount_update"),
    path("discounts/<int:pk>/delete/", views.discount_delete, name="discount_delete"),

    # Payments
    path("fees/", views.fee_payments, name="fee_payments"),
    path("salaries/", views.salary_payments, name="salary_payments"),

    # Expenses
    path("expenses/", views.expenses, name="expenses"),
    path("expenses/<int:pk>/delete/", views.expense_delete, name="expense_delete"),
]
