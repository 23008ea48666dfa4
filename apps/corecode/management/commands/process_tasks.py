import logging

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.students.models import StudentBulkUpload
from tasks.student_tasks import import_students_from_csv

logger = logging.getLogger('tasks')


class Command(BaseCommand):
    help = 'Import pending student uploads inline (for hosts without a Celery worker)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--limit',
            type=int,
            default=10,
            help='Maximum number of uploads to process'
        )
        parser.add_argument(
            '--force',
            action='store_true',
            help='Run even when Celery is enabled'
        )

    def handle(self, *args, **options):
        if settings.TASKS_USE_CELERY and not options['force']:
            self.stdout.write("Celery is enabled, use 'celery -A celery_app worker' instead")
            return

        pending = StudentBulkUpload.objects.filter(
            task_status=StudentBulkUpload.TaskStatus.PENDING
        ).order_by('date_uploaded')[:options['limit']]

        processed = 0
        for upload_id in list(pending.values_list('id', flat=True)):
            logger.info(f"Processing student upload {upload_id}")
            result = import_students_from_csv.apply(args=(upload_id,))
            if result.failed():
                self.stdout.write(self.style.ERROR(f"Upload {upload_id} failed: {result.result}"))
            else:
                self.stdout.write(f"Upload {upload_id}: {result.result}")
            processed += 1

        self.stdout.write(self.style.SUCCESS(f"Processed {processed} upload(s)"))
