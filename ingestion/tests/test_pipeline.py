import itertools
from unittest import mock

import requests
from django.core.files.storage import InMemoryStorage
from django.test import TestCase

from ingestion.exceptions import (
    DownloadFailure,
    PersistenceFailure,
    RecordNotFound,
    UploadFailure,
)
from ingestion.models import IngestionRecord
from ingestion.pipeline import TransferPipeline, TransferResult, build_pipeline
from ingestion.queue import TransferJob
from ingestion.records import RecordStore
from ingestion.storage import RemoteStorage

from .utils import create_record, create_response

Status = IngestionRecord.Status


class TransferPipelineTests(TestCase):
    def setUp(self):
        self.backend = InMemoryStorage(base_url="/media/")
        self.storage = RemoteStorage(storage=self.backend, destination="ingested")
        self.session = mock.MagicMock()
        self.pipeline = TransferPipeline(
            RecordStore(), self.storage, session=self.session, timeout=30
        )

    def job_for(self, record):
        return TransferJob(str(record.pk), record.source_url)

    def test_successful_transfer(self):
        record = create_record(source_url="http://example.com/download?id=1")
        response = create_response(
            body=b"hello world",
            headers={
                "Content-Disposition": 'attachment; filename="file.txt"',
                "Content-Type": "text/plain",
            },
        )
        self.session.get.return_value = response

        result = self.pipeline.process(self.job_for(record))

        expected_name = f"ingested/{record.pk}/file.txt"
        self.assertEqual(result, TransferResult(expected_name, "Upload successful"))
        self.assertEqual(
            result.as_dict(),
            {"storage_id": expected_name, "message": "Upload successful"},
        )
        record.refresh_from_db()
        self.assertEqual(record.status, Status.COMPLETED)
        self.assertEqual(record.storage_id, expected_name)
        self.assertEqual(record.storage_link, f"/media/{expected_name}")
        self.assertEqual(record.file_name, "file.txt")
        self.assertEqual(record.content_type, "text/plain")
        self.assertIsNone(record.error_detail)
        with self.backend.open(expected_name) as f:
            self.assertEqual(f.read(), b"hello world")
        response.close.assert_called_once_with()

    def test_name_from_url_and_default_content_type(self):
        record = create_record(
            source_url="http://example.com/path/to/document.pdf?query=param"
        )
        self.session.get.return_value = create_response()

        self.pipeline.process(self.job_for(record))

        record.refresh_from_db()
        self.assertEqual(record.file_name, "document.pdf")
        self.assertEqual(record.content_type, "application/octet-stream")
        self.assertEqual(record.storage_id, f"ingested/{record.pk}/document.pdf")

    def test_same_file_name_for_different_records(self):
        first = create_record()
        second = create_record()
        self.session.get.side_effect = [create_response(), create_response()]

        first_result = self.pipeline.process(self.job_for(first))
        second_result = self.pipeline.process(self.job_for(second))

        self.assertNotEqual(first_result.storage_id, second_result.storage_id)

    def test_download_error(self):
        record = create_record(source_url="http://example.com/missing.txt")
        self.session.get.return_value = create_response(
            status_code=404,
            raise_for_status=requests.HTTPError("404 Client Error: Not Found"),
        )
        mock_storage = mock.MagicMock(wraps=self.storage)
        self.pipeline.storage = mock_storage

        with self.assertLogs("ingestion.pipeline", level="ERROR") as log:
            with self.assertRaises(DownloadFailure):
                self.pipeline.process(self.job_for(record))

        mock_storage.create_object.assert_not_called()
        record.refresh_from_db()
        self.assertEqual(record.status, Status.FAILED)
        self.assertIn("404 Client Error", record.error_detail)
        self.assertIsNone(record.storage_id)
        self.assertIn(f"Error processing record {record.pk}", log.output[0])

    def test_download_timeout_before_upload(self):
        record = create_record()
        self.session.get.side_effect = requests.Timeout("Read timed out")
        mock_storage = mock.MagicMock(wraps=self.storage)
        self.pipeline.storage = mock_storage

        with self.assertLogs("ingestion.pipeline", level="ERROR"):
            with self.assertRaisesRegex(DownloadFailure, "Read timed out"):
                self.pipeline.process(self.job_for(record))

        mock_storage.create_object.assert_not_called()
        record.refresh_from_db()
        self.assertEqual(record.status, Status.FAILED)
        self.assertIn("Read timed out", record.error_detail)

    def test_download_deadline_during_upload(self):
        record = create_record()
        response = create_response()
        self.session.get.return_value = response
        self.pipeline.timeout = 5

        clock = itertools.chain([0], itertools.repeat(10))
        with mock.patch("ingestion.download.time.monotonic", side_effect=clock):
            with self.assertLogs("ingestion.pipeline", level="ERROR"):
                with self.assertRaisesRegex(DownloadFailure, "exceeded 5 seconds"):
                    self.pipeline.process(self.job_for(record))

        record.refresh_from_db()
        self.assertEqual(record.status, Status.FAILED)
        self.assertIn("exceeded 5 seconds", record.error_detail)
        self.assertIsNone(record.storage_id)
        response.close.assert_called_once_with()

    def test_read_error_wrapped_by_storage(self):
        record = create_record()
        response = create_response()
        response.raw.read.side_effect = ConnectionResetError("reset by peer")
        self.session.get.return_value = response
        backend = mock.MagicMock()

        def save(name, content):
            try:
                content.read(1024)
            except DownloadFailure as exc:
                # Multipart uploaders re-raise reader errors as their own type
                raise RuntimeError("upload aborted") from exc

        backend.save.side_effect = save
        self.pipeline.storage = RemoteStorage(storage=backend, destination="ingested")

        with self.assertLogs("ingestion", level="ERROR"):
            with self.assertRaises(DownloadFailure) as assertion:
                self.pipeline.process(self.job_for(record))

        self.assertIsInstance(assertion.exception.__cause__, UploadFailure)
        record.refresh_from_db()
        self.assertEqual(record.status, Status.FAILED)
        self.assertIn("Error while reading", record.error_detail)

    def test_upload_error(self):
        record = create_record()
        self.session.get.return_value = create_response()
        backend = mock.MagicMock()
        backend.save.side_effect = OSError("Access Denied")
        self.pipeline.storage = RemoteStorage(storage=backend, destination="ingested")

        with mock.patch.object(
            self.pipeline.records,
            "mark_completed",
            wraps=self.pipeline.records.mark_completed,
        ) as mark_completed:
            with self.assertLogs("ingestion", level="ERROR"):
                with self.assertRaisesRegex(UploadFailure, "Access Denied"):
                    self.pipeline.process(self.job_for(record))

        mark_completed.assert_not_called()
        record.refresh_from_db()
        self.assertEqual(record.status, Status.FAILED)
        self.assertEqual(
            record.error_detail, "Failed to upload file.txt to storage: Access Denied"
        )
        self.assertIsNone(record.storage_id)

    def test_processing_marker_failure_does_not_stop_transfer(self):
        record = create_record()
        self.session.get.return_value = create_response()

        with mock.patch.object(
            self.pipeline.records,
            "mark_processing",
            side_effect=PersistenceFailure("database is locked"),
        ):
            result = self.pipeline.process(self.job_for(record))

        self.assertEqual(result.message, "Upload successful")
        record.refresh_from_db()
        self.assertEqual(record.status, Status.COMPLETED)

    def test_processing_marker_written_before_download(self):
        record = create_record()
        seen = []

        def get(url, **kwargs):
            seen.append(IngestionRecord.objects.get(pk=record.pk).status)
            return create_response()

        self.session.get.side_effect = get

        self.pipeline.process(self.job_for(record))

        self.assertEqual(seen, [Status.PROCESSING])

    def test_missing_record(self):
        job = TransferJob("8c8a4c3e-5b1f-4f7e-9d55-2f1f0e7a4b10", "http://a/b.txt")

        with self.assertRaises(RecordNotFound):
            self.pipeline.process(job)

        self.session.get.assert_not_called()

    def test_redelivered_job_for_finalized_record_is_skipped(self):
        for status in (Status.COMPLETED, Status.FAILED):
            with self.subTest(status=status):
                record = create_record(status=status, storage_id="existing")

                result = self.pipeline.process(self.job_for(record))

                self.assertEqual(
                    result, TransferResult(None, "Skipped; record already finalized")
                )
                self.session.get.assert_not_called()
                record.refresh_from_db()
                self.assertEqual(record.status, status)
                self.assertEqual(record.storage_id, "existing")


class BuildPipelineTests(TestCase):
    def test_build_pipeline(self):
        with self.settings(INGESTION_DOWNLOAD_TIMEOUT=42):
            pipeline = build_pipeline()
        self.assertIsInstance(pipeline.records, RecordStore)
        self.assertIsInstance(pipeline.storage, RemoteStorage)
        self.assertIsInstance(pipeline.session, requests.Session)
        self.assertEqual(pipeline.timeout, 42)
        pipeline.session.close()
