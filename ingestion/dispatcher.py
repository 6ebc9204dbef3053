from logging import getLogger
from typing import NamedTuple, Optional

from driveport.logging import DriveportLogger

from .exceptions import IngestionError
from .queue import TransferJob

logger = getLogger(__name__)
structured_logger = DriveportLogger.get_logger(__name__)


class JobReference(NamedTuple):
    job_id: Optional[str]
    source_url: str


class Dispatcher:
    """
    Accepts batches of URLs: one pending record and one queued job per URL

    The record is always written before its job is queued, so a worker never
    receives a job for a record that does not exist yet. URLs are handled
    independently; a failure for one is logged and the rest still go through.
    """

    def __init__(self, records, queue):
        self.records = records
        self.queue = queue

    def submit(self, urls):
        return [self._submit_one(url) for url in urls]

    def _submit_one(self, url):
        try:
            record = self.records.create(url)
        except IngestionError as exc:
            structured_logger.error(
                "Unable to create a record for URL.",
                event_code="dispatch_record_failed",
                reason=str(exc),
                reason_code="persistence_failure",
                source_url=url,
            )
            return JobReference(None, url)

        job = TransferJob(str(record.pk), url)
        try:
            job_id = self.queue.enqueue(job)
        except Exception as exc:
            # Broker errors come from kombu/redis and have no common base
            structured_logger.error(
                "Unable to enqueue transfer job.",
                event_code="dispatch_enqueue_failed",
                reason=str(exc),
                reason_code="enqueue_failure",
                record=record,
            )
            self._fail_unqueued(record, exc)
            return JobReference(None, url)

        logger.info("Added job %s to queue for record %s", job_id, record.pk)
        return JobReference(job_id, url)

    def _fail_unqueued(self, record, exc):
        # No job will ever pick this record up, so don't leave it pending
        try:
            self.records.mark_failed(
                record.pk, f"Unable to enqueue transfer job: {exc}"
            )
        except IngestionError:
            logger.exception(
                "Unable to mark unqueued record %s as failed", record.pk
            )
