from logging import getLogger

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils.timezone import now

from . import state
from .exceptions import IllegalTransition, PersistenceFailure, RecordNotFound
from .models import IngestionRecord

logger = getLogger(__name__)

Status = IngestionRecord.Status


class RecordStore:
    """
    Database access for IngestionRecord rows

    Every write is a single-row UPDATE or INSERT. Database errors are raised as
    PersistenceFailure so callers can decide whether a failed write matters.
    """

    model = IngestionRecord

    def create(self, source_url):
        try:
            record = self.model.objects.create(
                source_url=source_url, status=Status.PENDING
            )
        except DatabaseError as exc:
            raise PersistenceFailure(
                f"Unable to create a record for {source_url}: {exc}"
            ) from exc
        logger.info("Created pending record %s for URL %s", record.pk, source_url)
        return record

    def update_by_id(self, record_id, **fields):
        # QuerySet.update() bypasses auto_now so the timestamp is set here
        fields.setdefault("updated_at", now())
        try:
            return self.model.objects.filter(pk=record_id).update(**fields)
        except DatabaseError as exc:
            raise PersistenceFailure(
                f"Unable to update record {record_id}: {exc}"
            ) from exc

    def find_by_id(self, record_id):
        try:
            return self.model.objects.filter(pk=record_id).first()
        except ValidationError:
            # Not a UUID, so it cannot name a record
            return None
        except DatabaseError as exc:
            raise PersistenceFailure(
                f"Unable to load record {record_id}: {exc}"
            ) from exc

    def get(self, record_id):
        record = self.find_by_id(record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    def find_all(self):
        return list(self.model.objects.order_by("-created_at"))

    def transition(self, record_id, target, **fields):
        """
        Move a record to ``target`` and write ``fields`` in the same UPDATE

        The UPDATE only matches rows whose current status may legally move to
        ``target``, so a concurrent or stale writer cannot move a record
        backwards. Raises RecordNotFound or IllegalTransition when nothing
        matched.
        """
        fields["status"] = target
        try:
            updated = self.model.objects.filter(
                pk=record_id, status__in=state.allowed_sources(target)
            ).update(updated_at=now(), **fields)
        except DatabaseError as exc:
            raise PersistenceFailure(
                f"Unable to move record {record_id} to {target}: {exc}"
            ) from exc

        if not updated:
            record = self.find_by_id(record_id)
            if record is None:
                raise RecordNotFound(record_id)
            state.check_transition(record_id, record.status, target)
            # Another writer moved the record between the UPDATE and this read
            raise IllegalTransition(record_id, record.status, target)

        logger.info("Updated status for record %s to %s", record_id, target)

    def mark_processing(self, record_id):
        self.transition(record_id, Status.PROCESSING, error_detail=None)

    def mark_completed(
        self, record_id, storage_id, storage_link, file_name, content_type
    ):
        self.transition(
            record_id,
            Status.COMPLETED,
            storage_id=storage_id,
            storage_link=storage_link,
            file_name=file_name,
            content_type=content_type,
            error_detail=None,
        )

    def mark_failed(self, record_id, error_detail):
        self.transition(record_id, Status.FAILED, error_detail=error_detail)
