"""
Legal status transitions for an IngestionRecord

    pending ──► processing ──► completed
       │            │
       └────────────┴───────► failed ◄─┐
                                 └─────┘

Only the transfer pipeline and the queue's failure hook move a record. The
``processing`` marker is best-effort, so the terminal states are also
reachable straight from ``pending``. ``processing → processing`` and
``failed → failed`` are idempotent re-writes from redelivered jobs and
repeated failure notifications. Nothing ever returns to ``pending`` and
nothing leaves ``completed``.
"""

from .exceptions import IllegalTransition
from .models import IngestionRecord

Status = IngestionRecord.Status

#: Maps each target status to the statuses a record may be in to move there
ALLOWED_SOURCES = {
    Status.PENDING: frozenset(),
    Status.PROCESSING: frozenset({Status.PENDING, Status.PROCESSING}),
    Status.COMPLETED: frozenset({Status.PENDING, Status.PROCESSING}),
    Status.FAILED: frozenset({Status.PENDING, Status.PROCESSING, Status.FAILED}),
}


def allowed_sources(target):
    return ALLOWED_SOURCES[Status(target)]


def can_transition(current, target):
    return Status(current) in allowed_sources(target)


def check_transition(record_id, current, target):
    """
    Raise IllegalTransition unless a record in ``current`` may move to ``target``
    """
    if not can_transition(current, target):
        raise IllegalTransition(record_id, current, target)
