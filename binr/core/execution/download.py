"""
L4 Execution — HTTP download.

Streams a URL to a local file. The transport is ``urllib.request``;
callers needing TLS or proxy settings inject their own opener.
"""

from __future__ import annotations

import http.client
import logging
import os
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

from binr.core.errors import AlreadyExistsError, StorageError, UpstreamError

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"

_CHUNK_SIZE = 65536


def open_url(
    url: str,
    *,
    timeout: float | None = None,
    opener: urllib.request.OpenerDirector | None = None,
    user_agent: str = "binr",
) -> Any:
    """GET ``url`` and return the open response, which must have status 200.

    Raises:
        UpstreamError: On transport failure or any status other than 200.
    """
    req = urllib.request.Request(url, headers={"User-Agent": user_agent})
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout
    try:
        if opener is not None:
            resp = opener.open(req, **kwargs)
        else:
            resp = urllib.request.urlopen(req, **kwargs)  # nosec: B310 - caller-supplied source
    except urllib.error.HTTPError as exc:
        exc.close()
        raise UpstreamError(
            f"binr received an HTTP {exc.code} from URL {url!r}",
            url=url,
            status=exc.code,
        ) from exc
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
        raise UpstreamError(
            f"binr received an http error fetching {url!r}. {exc}", url=url,
        ) from exc

    status = resp.getcode()
    if status != 200:
        resp.close()
        raise UpstreamError(
            f"binr received an HTTP {status} from URL {url!r}",
            url=url,
            status=status,
        )
    return resp


def _content_length(resp: Any) -> int | None:
    value = resp.headers.get("Content-Length")
    if value is None or not value.strip().isdigit():
        return None
    return int(value)


class Downloader:
    """Fetch remote files to disk."""

    def __init__(
        self,
        *,
        timeout: float | None = None,
        opener: urllib.request.OpenerDirector | None = None,
        user_agent: str = "binr",
    ) -> None:
        self.timeout = timeout
        self.opener = opener
        self.user_agent = user_agent

    def fetch(self, url: str, dest: Path, expected_content_type: str = OCTET_STREAM) -> None:
        """Download ``url`` to ``dest`` as an executable file.

        ``dest`` must not exist: a file left there by an earlier failed
        attempt has to be removed by the caller first. On failure a
        partial file may be left behind.

        Raises:
            AlreadyExistsError: ``dest`` already exists.
            UpstreamError: Transport failure, non-200 status, an
                unexpected ``Content-Type`` or a body cut short of its
                ``Content-Length``.
            StorageError: Writing the local file failed.
        """
        if os.path.lexists(dest):
            raise AlreadyExistsError(
                "binr encountered an existing download file. If you are sure it is "
                f"from a failed earlier attempt, the file can be removed. {dest}"
            )

        with open_url(
            url, timeout=self.timeout, opener=self.opener, user_agent=self.user_agent,
        ) as resp:
            content_type = resp.headers.get("Content-Type")
            if content_type != expected_content_type:
                raise UpstreamError(
                    "binr unable to source command. Source URL reported a content "
                    f"type of {content_type!r} when {expected_content_type!r} was expected",
                    url=url,
                    status=200,
                )

            try:
                fd = os.open(dest, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o755)
            except OSError as exc:
                raise StorageError(f"binr unable to open local file for writing. {exc}") from exc

            declared = _content_length(resp)
            written = 0
            try:
                with os.fdopen(fd, "wb") as handle:
                    for chunk in iter(lambda: resp.read(_CHUNK_SIZE), b""):
                        handle.write(chunk)
                        written += len(chunk)
                os.chmod(dest, 0o755)
            except (urllib.error.URLError, TimeoutError, http.client.HTTPException) as exc:
                raise UpstreamError(
                    f"binr encountered an error copying remote data. {exc}", url=url,
                ) from exc
            except OSError as exc:
                raise StorageError(f"binr encountered an error copying remote data. {exc}") from exc

            # read(amt) returns b"" on an early close instead of raising
            if declared is not None and written != declared:
                raise UpstreamError(
                    f"binr received a truncated download ({written} of {declared} bytes)",
                    url=url,
                    status=200,
                )

        logger.debug("binr download complete: %s", dest)
