from logging import getLogger
from typing import NamedTuple

import requests
from django.conf import settings

from driveport.logging import DriveportLogger

from .download import open_source
from .exceptions import (
    IllegalTransition,
    PersistenceFailure,
    TransferFailure,
    UploadFailure,
)
from .metadata import infer
from .records import RecordStore
from .storage import RemoteStorage

logger = getLogger(__name__)
structured_logger = DriveportLogger.get_logger(__name__)


class TransferResult(NamedTuple):
    storage_id: str
    message: str

    def as_dict(self):
        return {"storage_id": self.storage_id, "message": self.message}


class TransferPipeline:
    """
    Moves one source URL into storage and records the outcome

    The pipeline holds no state between jobs; everything it knows about a job
    comes from the TransferJob and the record it references. Its collaborators
    are passed in explicitly so tests and other entry points can swap them.
    """

    def __init__(
        self,
        records,
        storage,
        session=None,
        timeout=300,
    ):
        self.records = records
        self.storage = storage
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def process(self, job):
        """
        Run the download, infer, upload and finalize steps for ``job``

        Download and upload failures are recorded on the record and then
        re-raised so the queue sees the delivery fail. A failure to record the
        completed state is not caught: losing a finished transfer's result
        silently would be worse than failing the job.
        """
        log = structured_logger.bind(job=job)
        log.info("Starting transfer.", event_code="transfer_started")

        if not self._mark_processing(job, log):
            return TransferResult(None, "Skipped; record already finalized")

        try:
            stored, metadata = self._transfer(job)
        except TransferFailure as exc:
            logger.error(
                "Error processing record %s from URL %s: %s",
                job.record_id,
                job.source_url,
                exc,
            )
            log.error(
                "Transfer failed.",
                event_code="transfer_failed",
                reason=str(exc),
                reason_code=type(exc).__name__,
            )
            self.records.mark_failed(job.record_id, str(exc))
            raise

        self.records.mark_completed(
            job.record_id,
            storage_id=stored.object_id,
            storage_link=stored.view_link,
            file_name=metadata.file_name,
            content_type=metadata.content_type,
        )
        log.info(
            "Transfer completed.",
            event_code="transfer_completed",
            storage_id=stored.object_id,
        )
        return TransferResult(stored.object_id, "Upload successful")

    def _mark_processing(self, job, log):
        """
        Write the processing marker; return False if the job should not run

        A record that has already reached a terminal state came back through
        at-least-once redelivery and is left alone. Persistence failures are
        only logged since the transfer itself is unaffected.
        """
        try:
            self.records.mark_processing(job.record_id)
        except IllegalTransition as exc:
            log.warning(
                "Record already finalized; transfer will not be repeated.",
                event_code="transfer_skipped",
                reason=str(exc),
                reason_code="record_finalized",
            )
            return False
        except PersistenceFailure as exc:
            log.warning(
                "Unable to mark record as processing; continuing.",
                event_code="transfer_marker_failed",
                reason=str(exc),
                reason_code="persistence_failure",
            )
        return True

    def _transfer(self, job):
        response, reader = open_source(self.session, job.source_url, self.timeout)
        try:
            metadata = infer(response.headers, job.source_url, job.record_id)
            logger.info(
                "Downloading %s (%s) for record %s",
                metadata.file_name,
                metadata.content_type,
                job.record_id,
            )
            try:
                stored = self.storage.create_object(
                    reader,
                    metadata.file_name,
                    metadata.content_type,
                    destination=self.storage.folder_for(job.record_id),
                )
            except UploadFailure as exc:
                # Storage clients may wrap errors raised while reading the
                # source; report those as the download failure they are
                if reader.failure is not None:
                    raise reader.failure from exc
                raise
        finally:
            response.close()
        return stored, metadata


def build_pipeline():
    return TransferPipeline(
        RecordStore(),
        RemoteStorage(),
        timeout=settings.INGESTION_DOWNLOAD_TIMEOUT,
    )
