from rest_framework import serializers

from .models import IngestionRecord


class SubmitUrlsSerializer(serializers.Serializer):
    urls = serializers.ListField(
        child=serializers.URLField(max_length=2048), allow_empty=False
    )


class JobReferenceSerializer(serializers.Serializer):
    job_id = serializers.CharField(allow_null=True)
    source_url = serializers.URLField()


class IngestionRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = IngestionRecord
        fields = [
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
        ]
        read_only_fields = fields
