import json

from django.db import models
from django.utils.translation import gettext_lazy as _


class SiteConfig(models.Model):
    """Site Configurations stored as key / JSON value pairs"""

    STUDENT_FIELDS = 'config_student_fields'
    DEPARTMENTS = 'config_departments'
    DESIGNATIONS = 'config_designations'
    SCHOOL_NAME = 'school_name'
    CURRENCY_SYMBOL = 'currency_symbol'

    DEFAULTS = {
        STUDENT_FIELDS: {
            'classes': ['Class 1', 'Class 2', 'Class 3', 'Class 4', 'Class 5'],
            'sections': ['A', 'B', 'C'],
            'subjects': ['Math', 'Science', 'English'],
        },
        DEPARTMENTS: ['Science', 'Mathematics', 'Languages', 'Administration'],
        DESIGNATIONS: ['Teacher', 'Senior Teacher', 'Accountant', 'Clerk'],
    }

    key = models.SlugField(unique=True)
    value = models.TextField(blank=True, help_text=_("JSON encoded value"))
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'system_settings'
        ordering = ['key']
        verbose_name = _('Site Setting')
        verbose_name_plural = _('Site Settings')

    def __str__(self):
        return self.key

    @property
    def decoded_value(self):
        try:
            return json.loads(self.value)
        except (TypeError, ValueError):
            return self.value

    @classmethod
    def get_value(cls, key, default=None):
        """Return the decoded value for key, falling back to DEFAULTS."""
        if default is None:
            default = cls.DEFAULTS.get(key)
        config = cls.objects.filter(key=key).first()
        if config is None or config.value == '':
            return default
        return config.decoded_value

    @classmethod
    def set_value(cls, key, value):
        config, _created = cls.objects.update_or_create(
            key=key, defaults={'value': json.dumps(value)}
        )
        return config

    @classmethod
    def student_fields(cls):
        fields = dict(cls.DEFAULTS[cls.STUDENT_FIELDS])
        stored = cls.get_value(cls.STUDENT_FIELDS)
        if isinstance(stored, dict):
            fields.update(stored)
        return fields


class UserLog(models.Model):
    """Audit trail of staff actions"""

    user_email = models.CharField(max_length=254, blank=True)
    action = models.CharField(max_length=100)
    details = models.TextField(blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'user_logs'
        ordering = ['-created_at', '-id']
        verbose_name = _('User Log')
        verbose_name_plural = _('User Logs')

    def __str__(self):
        return f"{self.user_email or 'system'}: {self.action}"
