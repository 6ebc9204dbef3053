from django.contrib import admin

from .models import IngestionRecord


@admin.register(IngestionRecord)
class IngestionRecordAdmin(admin.ModelAdmin):
    """
    Read-only view of ingestion records; status only changes through the
    transfer pipeline
    """

    list_display = (
        "id",
        "source_url",
        "status",
        "file_name",
        "created_at",
        "updated_at",
    )
    list_filter = ("status",)
    search_fields = ("source_url", "file_name", "storage_id")
    date_hierarchy = "created_at"
    ordering = ("-created_at",)
    readonly_fields = (
        "id",
        "source_url",
        "file_name",
        "content_type",
        "storage_id",
        "storage_link",
        "status",
        "error_detail",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
