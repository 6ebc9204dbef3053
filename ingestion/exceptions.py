class IngestionError(Exception):
    """
    Base class for errors raised by the ingestion pipeline
    """


class TransferFailure(IngestionError):
    """
    Raised when moving a file from its source URL into storage fails.

    The message is recorded verbatim as the record's error detail, so it should
    be a concise human-readable reason.
    """


class DownloadFailure(TransferFailure):
    """
    Raised for network errors, timeouts and non-success HTTP responses while
    reading the source URL
    """


class UploadFailure(TransferFailure):
    """
    Raised when the storage backend rejects or errors during the write
    """


class PersistenceFailure(IngestionError):
    """
    Raised when a record could not be written to the database
    """


class RecordNotFound(IngestionError):
    def __init__(self, record_id):
        super().__init__(f"Ingestion record {record_id} not found")
        self.record_id = record_id


class IllegalTransition(IngestionError):
    def __init__(self, record_id, current, target):
        super().__init__(
            f"Ingestion record {record_id} cannot move from {current} to {target}"
        )
        self.record_id = record_id
        self.current = current
        self.target = target
