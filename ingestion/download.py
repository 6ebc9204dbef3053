import io
import time
from logging import getLogger

from requests.exceptions import RequestException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from .exceptions import DownloadFailure

logger = getLogger(__name__)


class DeadlineReader(io.RawIOBase):
    """
    Read-only stream over a response body that enforces an overall deadline

    ``requests`` timeouts only bound each socket operation, so a slow source
    could keep a transfer alive indefinitely. Every read checks the time spent
    since the request started and raises DownloadFailure once the budget is
    used up. Errors from the underlying connection are raised as
    DownloadFailure too, and the first failure is kept on ``failure`` so the
    caller can tell a broken download apart from a broken upload.
    """

    def __init__(self, raw, url, timeout, started=None, clock=None):
        super().__init__()
        self.raw = raw
        self.url = url
        self.timeout = timeout
        self._clock = clock if clock is not None else time.monotonic
        self.started = self._clock() if started is None else started
        self.failure = None
        self.bytes_read = 0

    def readable(self):
        return True

    def _fail(self, message):
        if self.failure is None:
            self.failure = DownloadFailure(message)
        return self.failure

    def _check_deadline(self):
        if self._clock() - self.started > self.timeout:
            raise self._fail(
                f"Download of {self.url} exceeded {self.timeout} seconds "
                f"after {self.bytes_read} bytes"
            )

    def read(self, size=-1):
        if self.failure is not None:
            raise self.failure
        self._check_deadline()
        try:
            data = self.raw.read(None if size is None or size < 0 else size)
        except (Urllib3HTTPError, OSError) as exc:
            raise self._fail(f"Error while reading {self.url}: {exc}") from exc
        self._check_deadline()
        self.bytes_read += len(data)
        return data

    def readinto(self, buffer):
        data = self.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)


def open_source(session, url, timeout):
    """
    Start a streaming GET for ``url`` and return the response with a
    DeadlineReader over its body

    Connection errors, timeouts and non-success statuses raise DownloadFailure.
    The caller owns the returned response and must close it.
    """
    started = time.monotonic()
    response = None
    try:
        response = session.get(url, stream=True, timeout=timeout)
        response.raise_for_status()
    except RequestException as exc:
        if response is not None:
            response.close()
        raise DownloadFailure(f"Unable to download {url}: {exc}") from exc

    # Store the decoded body rather than a gzip/deflate transfer encoding
    response.raw.decode_content = True

    logger.debug("Opened %s with status %s", url, response.status_code)
    return response, DeadlineReader(response.raw, url, timeout, started=started)
