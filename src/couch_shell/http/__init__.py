"""HTTP transport and response records."""

from couch_shell.http.response import JSON_CONTENT_TYPES, Response
from couch_shell.http.transport import (
    JSON_DOC_START_RX,
    FileToUpload,
    HttpTransport,
)

__all__ = [
    "JSON_CONTENT_TYPES",
    "JSON_DOC_START_RX",
    "FileToUpload",
    "HttpTransport",
    "Response",
]
