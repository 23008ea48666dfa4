# management/commands/task_monitor.py
import logging
import time

import redis
from django.core.management.base import BaseCommand

from apps.students.models import StudentBulkUpload
from celery_app import app
from tasks.config import TASK_CONFIG

logger = logging.getLogger('tasks')


class Command(BaseCommand):
    help = 'Monitor the Celery queue and student import uploads'

    def add_arguments(self, parser):
        parser.add_argument(
            '--interval',
            type=int,
            default=5,
            help='Monitoring interval in seconds'
        )
        parser.add_argument(
            '--once',
            action='store_true',
            help='Run once and exit'
        )

    def handle(self, *args, **options):
        interval = options['interval']
        run_once = options['once']

        self.stdout.write("Starting Celery Task Monitor")
        self.stdout.write(f"   Interval: {interval} seconds")
        self.stdout.write(f"   Broker: {TASK_CONFIG['BROKER_URL']}")
        self.stdout.write("-" * 50)

        redis_client = redis.from_url(TASK_CONFIG['BROKER_URL'])
        try:
            while True:
                self.stdout.write(self.status_line(redis_client))
                if run_once:
                    break
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write("\nMonitor stopped by user")

    def status_line(self, redis_client):
        """One line of queue, worker and upload status"""
        output = [self.upload_summary()]

        try:
            queue_length = redis_client.llen('celery')
        except redis.RedisError as e:
            logger.error(f"Queue length unavailable: {e}")
            output.append(f"Queue: unavailable ({e})")
        else:
            output.append(f"Queue: {queue_length} waiting" if queue_length else "Queue: Empty")

        active_tasks = app.control.inspect(timeout=1.0).active() or {}
        if active_tasks:
            total_active = sum(len(tasks) for tasks in active_tasks.values())
            output.append(f"Active: {total_active}")
            for worker, tasks in active_tasks.items():
                names = sorted({t['name'].split('.')[-1] for t in tasks})
                if names:
                    output.append(f"{worker.split('@')[0]}: {', '.join(names)}")
        else:
            output.append("Active: No active tasks")

        return ' | '.join(output)

    def upload_summary(self):
        statuses = StudentBulkUpload.TaskStatus
        counts = {
            status.label: StudentBulkUpload.objects.filter(task_status=status).count()
            for status in (statuses.PENDING, statuses.PROCESSING, statuses.FAILED)
        }
        return 'Uploads: ' + ', '.join(f"{label} {count}" for label, count in counts.items())
