from logging import getLogger
from typing import NamedTuple

from celery import Task

logger = getLogger(__name__)


class TransferJob(NamedTuple):
    """
    Queue payload for one transfer; it only references the record it works on
    """

    record_id: str
    source_url: str

    def as_payload(self):
        return {"record_id": str(self.record_id), "source_url": self.source_url}

    @classmethod
    def from_payload(cls, payload):
        return cls(str(payload["record_id"]), payload["source_url"])


def _noop(*args, **kwargs):
    return None


class JobHooks:
    """
    Callback slots for delivery lifecycle notifications

    ``on_active(job, task_id)`` runs before a delivery starts,
    ``on_completed(job, task_id, result)`` after it returns and
    ``on_failed(job, task_id, exc)`` after it raises.
    """

    def __init__(self, on_active=None, on_completed=None, on_failed=None):
        self.on_active = on_active or _noop
        self.on_completed = on_completed or _noop
        self.on_failed = on_failed or _noop


class LifecycleTask(Task):
    """
    Celery base task that forwards lifecycle events to the owning
    TransferQueue's hooks

    A failing hook is logged and never changes the outcome of the delivery.
    """

    transfer_queue = None

    def _notify(self, hook_name, task_id, kwargs, *extra):
        if self.transfer_queue is None:
            return
        hook = getattr(self.transfer_queue.hooks, hook_name)
        try:
            job = TransferJob.from_payload(kwargs)
        except (KeyError, TypeError):
            logger.error(
                "Task %s was delivered without a transfer payload: %r", task_id, kwargs
            )
            return
        try:
            hook(job, task_id, *extra)
        except Exception:
            logger.exception(
                "The %s hook raised for task %s (record %s)",
                hook_name,
                task_id,
                job.record_id,
            )

    def before_start(self, task_id, args, kwargs):
        self._notify("on_active", task_id, kwargs)

    def on_success(self, retval, task_id, args, kwargs):
        self._notify("on_completed", task_id, kwargs, retval)

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        self._notify("on_failed", task_id, kwargs, exc)


class TransferQueue:
    """
    Binds transfer jobs to a Celery application

    ``register_consumer`` declares the Celery task that processes jobs and
    ``register_hooks`` fills the lifecycle callback slots that task calls.
    Jobs are submitted with ``enqueue``, which returns the Celery task id.
    """

    def __init__(self, app, job_name, **task_options):
        self.app = app
        self.job_name = job_name
        self.task_options = task_options
        self.hooks = JobHooks()
        self.task = None

    def register_consumer(self, handler):
        """
        Declare ``handler(job)`` as the Celery task for this queue
        """

        def consume(**payload):
            return handler(TransferJob.from_payload(payload))

        # Task names come from job_name, so any callable can be a handler
        consume.__doc__ = getattr(handler, "__doc__", None)

        self.task = self.app.task(
            name=self.job_name,
            base=LifecycleTask,
            transfer_queue=self,
            **self.task_options,
        )(consume)
        return self.task

    def register_hooks(self, on_active=None, on_completed=None, on_failed=None):
        self.hooks = JobHooks(
            on_active=on_active, on_completed=on_completed, on_failed=on_failed
        )

    def enqueue(self, job):
        if self.task is None:
            raise RuntimeError(f"No consumer is registered for {self.job_name}")
        result = self.task.apply_async(kwargs=job.as_payload())
        logger.info(
            "Added job %s to queue %s for record %s",
            result.id,
            self.job_name,
            job.record_id,
        )
        return result.id
