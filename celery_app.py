"""
Celery configuration for Django project.
Named celery_app.py to avoid conflict with celery package.
"""
import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'edusphere.settings')

app = Celery('edusphere_background_tasks')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Tasks live in the top-level tasks package, not inside the apps
app.autodiscover_tasks(['tasks'], related_name='student_tasks')
