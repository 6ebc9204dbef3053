"""
Design
======

The ingestion app copies remote files into the configured storage backend
without making the caller wait for the transfer.

General goals:

* All state is stored in the database and visible through the API and admin
* Celery tasks are ephemeral; they only carry a reference to the record they
  work on and every status change is a conditional update against that record
* One record's failure never touches any other record

The ingestion process works like this:

1. A client submits a list of URLs. For each URL an IngestionRecord is created
   in the ``pending`` state and a transfer job referencing it is queued. The
   client receives the job ids immediately with a 202 response.
2. When a worker picks up the job it marks the record ``processing``. This is
   a best-effort marker: if the write fails the transfer still proceeds.
3. The worker opens a streaming request to the source URL, works out the file
   name and content type from the response headers (falling back to the URL),
   and hands the response body straight to the storage backend so the upload
   consumes bytes as they arrive.
4. On success the record is marked ``completed`` together with the storage
   object name, link, file name and content type.
5. On a download or upload failure the record is marked ``failed`` with the
   error message and the exception is re-raised so Celery sees the failure.
   Celery's failure notification re-applies the ``failed`` state, which covers
   crashes the worker could not record itself.
"""
