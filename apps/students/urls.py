from django.urls import path
from . import views

app_name = "students"

urlpatterns = [
    path("", views.student_list, name="student_list"),
    path("<int:pk>/", views.student_detail, name="student_detail"),
    path("<int:pk>/update/", views.student_update, name="student_update"),
    path("<int:pk>/finalize/", views.finalize_admission, name="finalize_admission"),
    path("<int:pk>/toggle-status/", views.toggle_status, name="toggle_status"),
    path("<int:pk>/photo/", views.upload_photo, name="upload_photo"),
    path("<int:pk>/documents/", views.student_documents, name="student_documents"),

    # Export & bulk import
    path("export/", views.export_students, name="export_students"),
    path("upload/", views.bulk_upload, name="bulk_upload"),
    path("upload/<int:pk>/", views.bulk_upload_status, name="bulk_upload_status"),
    path("upload/template/", views.import_template, name="import_template"),
]
