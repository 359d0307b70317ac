"""HTTP transport for shell requests, built on httpx."""
from __future__ import annotations

import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx

from couch_shell.core.exceptions import RequestError
from couch_shell.http.response import Response

logger = logging.getLogger(__name__)

# Bodies starting like a JSON document are sent as application/json
JSON_DOC_START_RX = re.compile(r"\A[ \t\n\r]*[\(\{]")

SUPPORTED_METHODS = ("GET", "PUT", "POST", "DELETE", "HEAD", "COPY")


@dataclass
class FileToUpload:
    """Request body read from a local file (``put URL @FILE [TYPE]``)."""

    filename: str
    content_type: Optional[str] = None

    def resolved_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "application/octet-stream"


class HttpTransport:
    """Performs requests and wraps the results in Response records."""

    def __init__(
        self,
        timeout: float = 30.0,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            verify=verify,
            transport=transport,
        )

    def request(
        self,
        method: str,
        url: str,
        body: Any = None,
        auth: tuple[str, str] | None = None,
    ) -> Response:
        """Send one request.

        Raises:
            RequestError: unsupported method, unreadable upload file, or a
                transport level failure (connection refused, timeout...).
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise RequestError(f"unsupported http method: `{method}'")

        logger.debug(f"{method} {url}")
        try:
            if isinstance(body, FileToUpload):
                path = Path(body.filename)
                with path.open("rb") as f:
                    res = self._client.request(
                        method,
                        url,
                        files={"upload": (path.name, f, body.resolved_content_type())},
                        auth=auth,
                    )
            else:
                headers = {}
                content = None
                if body is not None:
                    content = body.encode("utf-8") if isinstance(body, str) else body
                    if isinstance(body, str) and JSON_DOC_START_RX.match(body):
                        headers["Content-Type"] = "application/json"
                res = self._client.request(
                    method, url, content=content, headers=headers, auth=auth
                )
        except (httpx.HTTPError, OSError) as e:
            raise RequestError(f"{method} {url} failed: {e}") from e

        logger.debug(f"{method} {url} -> {res.status_code}")
        return Response(res)

    def close(self) -> None:
        self._client.close()
