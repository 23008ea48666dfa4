"""
Bulk student import from uploaded CSV files.

The file is streamed row by row and inserted in batches, each batch in its
own short transaction. Rows that fail validation are skipped and recorded
on the upload for the status endpoint.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import List

from celery import shared_task
from django.conf import settings
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

BATCH_SIZE = 100
MAX_ROWS_PER_TASK = 10_000


# =====================================================================
# STUDENT CSV IMPORT
# =====================================================================

@shared_task(bind=True, name="students.import_from_csv")
def import_students_from_csv(self, bulk_upload_id: int) -> dict:
    """
    Import one StudentBulkUpload.

    Only a pending upload is processed; any other state is returned as is,
    so re-delivery never imports a file twice. Any unhandled exception marks
    the upload failed and fails the task.
    """
    from apps.students.models import StudentBulkUpload

    task_id = self.request.id or ""
    logger.info("[%s] Student CSV import requested (upload_id=%s)", task_id, bulk_upload_id)

    try:
        with transaction.atomic():
            upload = (
                StudentBulkUpload.objects
                .select_for_update()
                .get(id=bulk_upload_id)
            )

            if upload.task_status != StudentBulkUpload.TaskStatus.PENDING:
                logger.warning("[%s] Upload already %s", task_id, upload.task_status)
                return {"status": upload.task_status}

            upload.task_id = task_id
            upload.task_status = StudentBulkUpload.TaskStatus.PROCESSING
            upload.processing_started = timezone.now()
            upload.save()

        stats = process_csv_upload(upload)

        StudentBulkUpload.objects.filter(id=upload.id).update(
            task_status=StudentBulkUpload.TaskStatus.COMPLETED,
            error_message=stats["error_message"],
            processing_completed=timezone.now(),
        )

        logger.info("[%s] Import completed successfully", task_id)
        return {"status": "completed", **stats}

    except StudentBulkUpload.DoesNotExist:
        logger.error("[%s] Upload not found (id=%s)", task_id, bulk_upload_id)
        return {"status": "missing"}

    except Exception as exc:
        logger.exception("[%s] Import crashed", task_id)

        StudentBulkUpload.objects.filter(id=bulk_upload_id).update(
            task_status=StudentBulkUpload.TaskStatus.FAILED,
            error_message=str(exc)[:500],
            processing_completed=timezone.now(),
        )
        raise


def queue_student_import(upload) -> None:
    """Hand an upload to the worker, or import it inline when Celery is off"""
    if getattr(settings, "TASKS_USE_CELERY", True):
        import_students_from_csv.delay(upload.id)
        return

    logger.info("Celery disabled; importing upload %s inline", upload.id)
    import_students_from_csv.apply(args=(upload.id,))


# =====================================================================
# CSV STREAM PROCESSOR
# =====================================================================


def process_csv_upload(upload) -> dict:
    """
    Read the upload's CSV and insert its rows as students.

    The header row builds a StudentRowBuilder; a bad header raises
    ImportFormatError and nothing is inserted. Row numbers in the failure
    list count the header as row 1. Rows beyond MAX_ROWS_PER_TASK are not
    imported; they are counted as failed and reported in the error message.
    """
    from apps.students.importer import StudentRowBuilder
    from apps.students.models import StudentBulkUpload

    created = 0
    failed = 0
    skipped = 0
    total = 0

    failed_rows: List[dict] = []
    batch: list = []

    logger.info("Starting CSV stream processing (upload_id=%s)", upload.id)

    upload.csv_file.open("rb")
    text_stream = io.TextIOWrapper(upload.csv_file.file, encoding="utf-8-sig", newline="")

    try:
        reader = csv.reader(text_stream)
        header = next(reader, None)
        if not header:
            raise ValueError("CSV file is empty")

        builder = StudentRowBuilder(header)

        for row_number, values in enumerate(reader, start=2):
            if not any(value.strip() for value in values):
                continue

            total += 1
            if total > MAX_ROWS_PER_TASK:
                skipped += 1
                continue

            try:
                batch.append(builder.build(values))
            except ValueError as exc:
                failed += 1
                failed_rows.append({"row": row_number, "error": str(exc)})
                continue

            if len(batch) >= BATCH_SIZE:
                created += _flush_batch(batch)
                batch.clear()
                StudentBulkUpload.objects.filter(id=upload.id).update(
                    records_created=created,
                    records_failed=failed,
                )

        if batch:
            created += _flush_batch(batch)

        error_message = ""
        if skipped:
            # rows past the limit count as failed
            failed += skipped
            error_message = (
                f"Row limit of {MAX_ROWS_PER_TASK} reached; "
                f"{skipped} row(s) after row {MAX_ROWS_PER_TASK} were not imported"
            )
            logger.warning("Upload %s: %s", upload.id, error_message)

        StudentBulkUpload.objects.filter(id=upload.id).update(
            total_records=total,
            records_created=created,
            records_failed=failed,
            failed_rows=failed_rows,
        )

        logger.info(
            "CSV import finished (upload_id=%s total=%s created=%s failed=%s)",
            upload.id,
            total,
            created,
            failed,
        )

        return {
            "total": total,
            "created": created,
            "failed": failed,
            "error_message": error_message,
        }

    finally:
        text_stream.detach()
        upload.csv_file.close()


# =====================================================================
# HELPERS
# =====================================================================

def _flush_batch(batch: list) -> int:
    """
    Number and insert a batch in one short transaction.

    Admission numbers are reserved inside the same transaction as the
    insert.
    """
    from apps.students.models import Student

    with transaction.atomic():
        numbers = Student.allocate_admission_numbers(len(batch))
        for student, number in zip(batch, numbers):
            student.admission_no = number
        Student.objects.bulk_create(batch)

    logger.info("Inserted %s students", len(batch))
    return len(batch)
