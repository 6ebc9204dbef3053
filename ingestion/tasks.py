"""
Celery wiring for transfer jobs: the consumer task and its lifecycle hooks
"""

from logging import getLogger

from driveport.celery import app

from .exceptions import IllegalTransition, IngestionError
from .pipeline import build_pipeline
from .queue import TransferQueue
from .records import RecordStore

logger = getLogger(__name__)

TRANSFER_JOB_NAME = "ingestion.transfer_file"

transfer_queue = TransferQueue(app, TRANSFER_JOB_NAME, ignore_result=False)


def transfer_file(job):
    """
    Copy the file at ``job.source_url`` into storage and finalize its record
    """
    pipeline = build_pipeline()
    try:
        return pipeline.process(job).as_dict()
    finally:
        pipeline.session.close()


transfer_file_task = transfer_queue.register_consumer(transfer_file)


def on_active(job, task_id):
    logger.info(
        "Processing job %s for record %s from URL %s",
        task_id,
        job.record_id,
        job.source_url,
    )


def on_completed(job, task_id, result):
    logger.info("Job %s completed for record %s: %r", task_id, job.record_id, result)


def on_failed(job, task_id, exc, records=None):
    """
    Re-apply the failed state for a delivery that raised

    The pipeline has usually recorded the same message already, in which case
    this rewrite changes nothing. It matters when the worker failed before it
    could record anything itself.
    """
    logger.error("Job %s failed for record %s: %s", task_id, job.record_id, exc)
    records = records if records is not None else RecordStore()
    try:
        records.mark_failed(job.record_id, str(exc))
    except IllegalTransition as transition_exc:
        logger.warning(
            "Not marking record %s as failed: %s", job.record_id, transition_exc
        )
    except IngestionError as store_exc:
        logger.error(
            "Failed to update status to failed for record %s: %s",
            job.record_id,
            store_exc,
        )


transfer_queue.register_hooks(
    on_active=on_active, on_completed=on_completed, on_failed=on_failed
)
