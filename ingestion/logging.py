import logging

from celery import current_task


class CeleryTaskIDFilter(logging.Filter):
    """
    Adds ``task_id`` to every record so worker log lines can be tied to the
    transfer job that produced them
    """

    def filter(self, record):
        task = current_task
        if task and task.request.id:
            record.task_id = f"/[{task.request.id}]"
        else:
            record.task_id = ""
        # This just tells the logger to not discard this record
        return True
