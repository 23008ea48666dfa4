from django.urls import path
from . import views

app_name = "staffs"

urlpatterns = [
    path("", views.employee_list, name="employee_list"),
    path("create/", views.employee_create, name="employee_create"),
    path("<int:pk>/", views.employee_detail, name="employee_detail"),
    path("<int:pk>/update/", views.employee_update, name="employee_update"),
    path("<int:pk>/delete/", views.employee_delete, name="employee_delete"),
    path("<int:pk>/photo/", views.upload_photo, name="upload_photo"),
    path("<int:pk>/documents/", views.employee_documents, name="employee_documents"),
    path("export/", views.export_employees, name="export_employees"),

    # Salary rules
    path("salary-configs/", views.salary_configs, name="salary_configs"),
    path("salary-configs/<int:pk>/delete/", views.salary_config_delete, name="salary_config_delete"),
    path("salary-configs/apply/", views.apply_salary_configs, name="apply_salary_configs"),
]
