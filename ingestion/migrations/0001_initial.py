import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="IngestionRecord",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "source_url",
                    models.TextField(help_text="URL the file is transferred from"),
                ),
                (
                    "file_name",
                    models.TextField(
                        blank=True,
                        help_text="File name inferred from the source response",
                        null=True,
                    ),
                ),
                (
                    "content_type",
                    models.CharField(
                        blank=True,
                        help_text="Content type reported by the source response",
                        max_length=255,
                        null=True,
                    ),
                ),
                (
                    "storage_id",
                    models.TextField(
                        blank=True,
                        help_text="Name of the object in the storage backend",
                        null=True,
                    ),
                ),
                (
                    "storage_link",
                    models.TextField(
                        blank=True,
                        help_text="URL of the object in the storage backend",
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "error_detail",
                    models.TextField(
                        blank=True,
                        help_text="Reason the transfer failed, if it did",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
