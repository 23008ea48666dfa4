"""
Background task settings. Read before Django is configured, so this module
must not import Django.
"""
import os
import logging

logger = logging.getLogger(__name__)

# Shared hosting cannot run a worker, so jobs run inline there
ENV_TYPE = os.environ.get('ENV_TYPE', 'STANDARD').upper()
IS_CPANEL = ENV_TYPE == 'CPANEL'

# Broker configuration - prioritize environment variables
BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/1')


def _use_celery():
    explicit = os.environ.get('TASKS_USE_CELERY')
    if explicit is not None:
        return explicit.lower() in ('1', 'true', 'yes')
    return not IS_CPANEL


# Task configuration
TASK_CONFIG = {
    'USE_CELERY': _use_celery(),
    'IS_CPANEL': IS_CPANEL,
    'ENV_TYPE': ENV_TYPE,
    'BROKER_URL': BROKER_URL,
    'RESULT_BACKEND': RESULT_BACKEND,
    'TASK_TRACK_STARTED': True,
    'TASK_TIME_LIMIT': 30 * 60,
    'WORKER_CONCURRENCY': int(os.environ.get('CELERY_WORKER_CONCURRENCY', 4)),
    'TASK_SERIALIZER': 'json',
    'RESULT_SERIALIZER': 'json',
    'ACCEPT_CONTENT': ['json'],
    'TIMEZONE': 'UTC',
}

logger.debug(
    "Task configuration: env=%s celery=%s broker=%s",
    ENV_TYPE, TASK_CONFIG['USE_CELERY'], BROKER_URL,
)
