from types import MappingProxyType
from typing import Any, Optional

import structlog


def _stringify(value):
    return None if value is None else str(value)


def _record_fields(record) -> dict[str, Any]:
    return {
        "record_id": _stringify(getattr(record, "pk", None)),
        "source_url": getattr(record, "source_url", None),
        "status": getattr(record, "status", None),
    }


def _job_fields(job) -> dict[str, Any]:
    return {
        "record_id": _stringify(getattr(job, "record_id", None)),
        "source_url": getattr(job, "source_url", None),
    }


# Objects passed under these keys are flattened into flat event fields
EXTRACTORS: MappingProxyType = MappingProxyType(
    {"record": _record_fields, "job": _job_fields}
)


class DriveportLogger:
    """
    Structured event logger shared by the API process and the Celery workers

    Every event needs a message and an ``event_code``; warnings and errors
    also need a ``reason`` and a ``reason_code``. Ingestion objects passed as
    ``record=`` or ``job=`` are flattened into ``record_id``, ``source_url``
    and (for records) ``status``, so events from both sides of the queue can be
    joined on the same fields::

        structured_logger = DriveportLogger.get_logger(__name__)
        log = structured_logger.bind(job=job)
        log.info("Starting transfer.", event_code="transfer_started")
        log.error(
            "Transfer failed.",
            event_code="transfer_failed",
            reason=str(exc),
            reason_code=type(exc).__name__,
        )

    Keyword values passed directly take precedence over extracted ones, and
    ``None`` values are dropped.
    """

    def __init__(self, logger, context: Optional[dict[str, Any]] = None):
        self._logger = logger
        self._context = context or {}

    @classmethod
    def get_logger(cls, name: str) -> "DriveportLogger":
        # The "structlog." prefix routes events to the JSON handlers in LOGGING
        return cls(structlog.get_logger(f"structlog.{name}"))

    def _event_fields(self, context: dict[str, Any]) -> dict[str, Any]:
        fields: dict[str, Any] = {}

        for key, extractor in EXTRACTORS.items():
            source = context.pop(key, self._context.get(key))
            if not source:
                continue
            for name, value in extractor(source).items():
                if value is not None:
                    fields.setdefault(name, value)

        for key, value in self._context.items():
            if key in EXTRACTORS or key in context or value is None:
                continue
            fields[key] = value

        fields.update((k, v) for k, v in context.items() if v is not None)
        return fields

    def log(
        self,
        level: str,
        message: str,
        *,
        event_code: str,
        reason: Optional[str] = None,
        reason_code: Optional[str] = None,
        **context: Any,
    ) -> None:
        """
        Validate and emit one event; prefer the level-named methods

        Raises ValueError when the message, event code or (for warnings and
        errors) the reason fields are missing.
        """
        if not message:
            raise ValueError("Log message is required.")
        if not event_code:
            raise ValueError("Structured logs must include an 'event_code' field.")
        if level in ("warning", "error") and not (reason and reason_code):
            raise ValueError(
                "Warnings and errors must include both 'reason' and 'reason_code'."
            )

        fields = {"event_code": event_code}
        if reason:
            fields["reason"] = reason
        if reason_code:
            fields["reason_code"] = reason_code
        fields.update(self._event_fields(context))

        getattr(self._logger, level)(message, **fields)

    def debug(self, message: str, *, event_code: str, **kwargs):
        self.log("debug", message, event_code=event_code, **kwargs)

    def info(self, message: str, *, event_code: str, **kwargs):
        self.log("info", message, event_code=event_code, **kwargs)

    def warning(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **kwargs
    ):
        self.log(
            "warning",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **kwargs,
        )

    def error(
        self, message: str, *, event_code: str, reason: str, reason_code: str, **kwargs
    ):
        self.log(
            "error",
            message,
            event_code=event_code,
            reason=reason,
            reason_code=reason_code,
            **kwargs,
        )

    def bind(self, **kwargs: Any) -> "DriveportLogger":
        """
        Return a copy of this logger with ``kwargs`` added to every event
        """
        return DriveportLogger(self._logger, context={**self._context, **kwargs})
