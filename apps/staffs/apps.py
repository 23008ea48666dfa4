from django.apps import AppConfig


class StaffsConfig(AppConfig):
    default_auto_field = "django.db.models.AutoField"
    name = "apps.staffs"
