from unittest import mock

from ingestion.models import IngestionRecord


def create_record(*, source_url="http://example.com/file.txt", **kwargs):
    record = IngestionRecord(source_url=source_url, **kwargs)
    record.save()
    return record


def create_response(
    body=b"file contents", headers=None, status_code=200, raise_for_status=None
):
    """
    Build a stand-in for a streamed requests.Response whose raw body yields
    ``body`` in one read and then EOF
    """
    response = mock.MagicMock()
    response.status_code = status_code
    response.headers = headers if headers is not None else {}
    response.raw.read.side_effect = [body, b""]
    if raise_for_status is not None:
        response.raise_for_status.side_effect = raise_for_status
    return response
