import uuid
from logging import getLogger

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .dispatcher import Dispatcher
from .exceptions import RecordNotFound
from .records import RecordStore
from .serializers import (
    IngestionRecordSerializer,
    JobReferenceSerializer,
    SubmitUrlsSerializer,
)
from .tasks import transfer_queue

logger = getLogger(__name__)


@api_view(["POST"])
def upload_from_urls(request):
    serializer = SubmitUrlsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    urls = serializer.validated_data["urls"]
    logger.info("Received request to upload from URLs: %s", ", ".join(urls))

    dispatcher = Dispatcher(RecordStore(), transfer_queue)
    job_references = dispatcher.submit(urls)

    return Response(
        {
            "message": "File processing initiated for the provided URLs.",
            "jobs": JobReferenceSerializer(
                [reference._asdict() for reference in job_references], many=True
            ).data,
        },
        status=status.HTTP_202_ACCEPTED,
    )


@api_view(["GET"])
def list_files(request):
    records = RecordStore().find_all()
    return Response(IngestionRecordSerializer(records, many=True).data)


@api_view(["GET"])
def file_detail(request, record_id):
    try:
        uuid.UUID(record_id)
    except ValueError:
        return Response(
            {"message": f"Validation failed: {record_id} is not a valid UUID"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        record = RecordStore().get(record_id)
    except RecordNotFound as exc:
        return Response({"message": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    return Response(IngestionRecordSerializer(record).data)
