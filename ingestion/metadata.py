import posixpath
from email.message import Message
from email.utils import collapse_rfc2231_value
from typing import NamedTuple
from urllib.parse import unquote, urlsplit

from requests.structures import CaseInsensitiveDict

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class InferredMetadata(NamedTuple):
    file_name: str
    content_type: str


def filename_from_content_disposition(value):
    """
    Return the decoded filename parameter of a Content-Disposition header, or
    None

    RFC 2231 ``filename*=UTF-8''...`` values are decoded by the email parser
    and win over a plain ``filename``; plain values are percent-decoded here.
    """
    if not value:
        return None
    message = Message()
    message["Content-Disposition"] = value
    params = message.get_params(header="content-disposition") or []
    values = [v for k, v in params if k.lower() == "filename" and v]
    # Extended values come back as (charset, language, value) tuples
    extended = [v for v in values if isinstance(v, tuple)]
    if extended:
        filename = collapse_rfc2231_value(extended[0])
    elif values:
        filename = unquote(values[0])
    else:
        return None
    return filename.strip() or None


def filename_from_url(url):
    """
    Return the percent-decoded last segment of the URL path, or None

    A path ending in ``/`` has no final segment.
    """
    path = urlsplit(url).path
    return unquote(posixpath.basename(path)) or None


def infer(headers, source_url, fallback_id) -> InferredMetadata:
    """
    Work out the stored file name and content type for a transfer

    The file name comes from the Content-Disposition filename, then the last
    segment of the URL path, then ``file_<fallback_id>``. This only looks at
    values already in hand and never touches the network.
    """
    headers = CaseInsensitiveDict(headers or {})

    file_name = (
        filename_from_content_disposition(headers.get("Content-Disposition"))
        or filename_from_url(source_url)
        or f"file_{fallback_id}"
    )
    content_type = headers.get("Content-Type") or DEFAULT_CONTENT_TYPE

    return InferredMetadata(file_name, content_type)
