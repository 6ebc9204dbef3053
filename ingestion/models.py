import uuid

from django.db import models


class IngestionRecord(models.Model):
    """
    Tracks the transfer of one submitted URL into storage
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    source_url = models.TextField(help_text="URL the file is transferred from")

    file_name = models.TextField(
        help_text="File name inferred from the source response", null=True, blank=True
    )
    content_type = models.CharField(
        help_text="Content type reported by the source response",
        max_length=255,
        null=True,
        blank=True,
    )

    storage_id = models.TextField(
        help_text="Name of the object in the storage backend", null=True, blank=True
    )
    storage_link = models.TextField(
        help_text="URL of the object in the storage backend", null=True, blank=True
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    error_detail = models.TextField(
        help_text="Reason the transfer failed, if it did", null=True, blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return "IngestionRecord(id=%s, status=%s, source_url=%s)" % (
            self.pk,
            self.status,
            self.source_url,
        )
