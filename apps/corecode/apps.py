from django.apps import AppConfig


class CorecodeConfig(AppConfig):
    default_auto_field = "django.db.models.AutoField"
    name = "apps.corecode"

    def ready(self):
        from . import signals  # noqa: F401
