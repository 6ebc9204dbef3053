import posixpath
from logging import getLogger
from typing import NamedTuple

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.core.files.base import File
from django.core.files.storage import storages
from django.utils.functional import LazyObject
from django.utils.text import get_valid_filename

from .exceptions import DownloadFailure, UploadFailure

logger = getLogger(__name__)


class LazyIngestedStorage(LazyObject):
    def _setup(self):
        self._wrapped = storages["ingested"]


# We use a LazyObject so the backend isn't resolved when the code is loaded,
# which is needed to override the STORAGES setting during tests
INGESTED_STORAGE = LazyIngestedStorage()


class StoredObject(NamedTuple):
    object_id: str
    view_link: str


class StreamedFile(File):
    """
    File wrapper for a forward-only stream

    Storage backends read ``content_type`` from the file object when setting
    object metadata (S3Boto3Storage uses it for the ContentType parameter).
    """

    def __init__(self, stream, name, content_type):
        super().__init__(stream, name)
        self.content_type = content_type


class RemoteStorage:
    """
    Writes transferred files into a Django storage backend

    In production the backend is S3Boto3Storage, which passes the stream to
    boto3's ``upload_fileobj`` so the multipart upload reads from the download
    as it arrives instead of buffering the whole body.
    """

    def __init__(self, storage=None, destination=None):
        self.storage = storage if storage is not None else INGESTED_STORAGE
        if destination is None:
            destination = settings.INGESTION_DESTINATION
        self.destination = destination.strip("/")

    def folder_for(self, record_id):
        return posixpath.join(self.destination, str(record_id))

    def object_name(self, name, destination=None):
        folder = destination if destination is not None else self.destination
        base_name = posixpath.basename(name.replace("\\", "/"))
        try:
            safe_name = get_valid_filename(base_name)
        except SuspiciousFileOperation:
            safe_name = "file"
        return posixpath.join(folder, safe_name) if folder else safe_name

    def create_object(self, stream, name, content_type, destination=None):
        """
        Stream ``stream`` into storage and return the object's name and link

        Errors raised while reading the source stream are passed through as
        DownloadFailure; everything else is an UploadFailure.
        """
        object_name = self.object_name(name, destination)
        logger.info(
            "Attempting to upload %s (%s) to storage as %s",
            name,
            content_type,
            object_name,
        )
        try:
            stored_name = self.storage.save(
                object_name, StreamedFile(stream, object_name, content_type)
            )
            view_link = self.storage.url(stored_name)
        except DownloadFailure:
            raise
        except Exception as exc:
            logger.exception("Failed to upload %s to storage", object_name)
            raise UploadFailure(f"Failed to upload {name} to storage: {exc}") from exc

        logger.info("File %s uploaded successfully as %s", name, stored_name)
        return StoredObject(stored_name, view_link)
