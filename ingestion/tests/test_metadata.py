from django.test import SimpleTestCase

from ingestion.metadata import (
    DEFAULT_CONTENT_TYPE,
    InferredMetadata,
    filename_from_content_disposition,
    filename_from_url,
    infer,
)


class ContentDispositionTests(SimpleTestCase):
    def test_plain_filename(self):
        self.assertEqual(
            filename_from_content_disposition('attachment; filename="file.txt"'),
            "file.txt",
        )

    def test_unquoted_filename(self):
        self.assertEqual(
            filename_from_content_disposition("attachment; filename=report.csv"),
            "report.csv",
        )

    def test_extended_filename(self):
        self.assertEqual(
            filename_from_content_disposition(
                "attachment; filename*=UTF-8''na%C3%AFve%20notes.txt"
            ),
            "naïve notes.txt",
        )

    def test_extended_filename_is_decoded_once(self):
        self.assertEqual(
            filename_from_content_disposition(
                "attachment; filename*=UTF-8''report%2520final.pdf"
            ),
            "report%20final.pdf",
        )

    def test_extended_filename_wins_over_plain(self):
        self.assertEqual(
            filename_from_content_disposition(
                "attachment; filename=\"fallback.txt\"; "
                "filename*=UTF-8''na%C3%AFve.txt"
            ),
            "naïve.txt",
        )

    def test_missing_filename(self):
        self.assertIsNone(filename_from_content_disposition("inline"))
        self.assertIsNone(filename_from_content_disposition(""))
        self.assertIsNone(filename_from_content_disposition(None))


class FilenameFromUrlTests(SimpleTestCase):
    def test_last_path_segment(self):
        self.assertEqual(
            filename_from_url("http://example.com/path/to/document.pdf?query=param"),
            "document.pdf",
        )

    def test_no_path(self):
        self.assertIsNone(filename_from_url("http://example.com"))
        self.assertIsNone(filename_from_url("http://example.com/"))
        self.assertIsNone(filename_from_url("http://example.com/folder/"))


class InferTests(SimpleTestCase):
    def test_header_values(self):
        metadata = infer(
            {
                "content-disposition": 'attachment; filename="file.txt"',
                "content-type": "text/plain",
            },
            "http://example.com/download?id=12",
            "abc",
        )
        self.assertEqual(metadata, InferredMetadata("file.txt", "text/plain"))

    def test_header_wins_over_url(self):
        metadata = infer(
            {"Content-Disposition": 'attachment; filename="from-header.txt"'},
            "http://example.com/from-url.txt",
            "abc",
        )
        self.assertEqual(metadata.file_name, "from-header.txt")

    def test_url_fallback(self):
        metadata = infer(
            {"Content-Type": "application/pdf"},
            "http://example.com/path/to/document.pdf?query=param",
            "abc",
        )
        self.assertEqual(metadata, InferredMetadata("document.pdf", "application/pdf"))

    def test_percent_encoded_values_are_decoded(self):
        self.assertEqual(
            infer({}, "http://example.com/My%20Report.pdf", "abc").file_name,
            "My Report.pdf",
        )
        self.assertEqual(
            infer(
                {"Content-Disposition": 'attachment; filename="My%20Notes.txt"'},
                "http://example.com/download",
                "abc",
            ).file_name,
            "My Notes.txt",
        )

    def test_generated_fallback(self):
        metadata = infer({}, "http://example.com/", "1234")
        self.assertEqual(metadata, InferredMetadata("file_1234", DEFAULT_CONTENT_TYPE))

    def test_trailing_slash_uses_generated_name(self):
        metadata = infer({}, "http://example.com/path/to/", "1")
        self.assertEqual(metadata.file_name, "file_1")

    def test_missing_headers(self):
        metadata = infer(None, "http://example.com/data.bin", "1234")
        self.assertEqual(
            metadata, InferredMetadata("data.bin", "application/octet-stream")
        )

    def test_empty_content_type(self):
        metadata = infer({"Content-Type": ""}, "http://example.com/a.txt", "1")
        self.assertEqual(metadata.content_type, DEFAULT_CONTENT_TYPE)
