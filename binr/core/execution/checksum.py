"""
L4 Execution — SHA-256 digests and checksum verification.
"""

from __future__ import annotations

import hashlib
import http.client
import logging
import re
import urllib.request
from pathlib import Path

from binr.core.errors import IntegrityError, StorageError, UpstreamError
from binr.core.execution.download import open_url

logger = logging.getLogger(__name__)

_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


def is_digest(text: str) -> bool:
    """Whether ``text`` is a lowercase hex SHA-256 digest."""
    return _DIGEST_RE.match(text) is not None


def digest(path: Path) -> str:
    """Lowercase hex SHA-256 of the file at ``path``.

    Raises:
        StorageError: If the file cannot be read.
    """
    hasher = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                hasher.update(chunk)
    except OSError as exc:
        raise StorageError(f"binr unable to calculate file's checksum. {exc}") from exc
    return hasher.hexdigest()


def verify(path: Path, expected: str) -> None:
    """Raise ``IntegrityError`` unless ``path`` hashes to ``expected``."""
    actual = digest(path)
    if actual != expected.lower():
        logger.debug(
            "checksum mismatch: path=%s expected=%s calculated=%s", path, expected, actual,
        )
        raise IntegrityError(
            "binr detected a checksum mismatch. Not sourcing command",
            expected=expected,
            actual=actual,
        )


def fetch_checksum(
    url: str,
    *,
    timeout: float | None = None,
    opener: urllib.request.OpenerDirector | None = None,
    user_agent: str = "binr",
) -> str:
    """Return the checksum published at ``url``, or ``""`` if there is no URL.

    The body is expected to be a plaintext hex digest. Surrounding
    whitespace is stripped, and a ``sha256sum``-style line
    (``<hex>  <filename>``) yields just the digest. The result is
    lowercased.

    Raises:
        UpstreamError: Transport failure, a non-200 status, or a body
            that is not a SHA-256 hex digest.
    """
    if not url:
        return ""

    with open_url(url, timeout=timeout, opener=opener, user_agent=user_agent) as resp:
        try:
            body = resp.read()
        except (OSError, http.client.HTTPException) as exc:
            raise UpstreamError(
                f"binr received an error reading the checksum URL {url!r}. {exc}", url=url,
            ) from exc

    text = body.decode("utf-8", errors="replace").strip()
    fields = text.split()
    sum_ = (fields[0] if len(fields) == 2 else text).lower()
    if not is_digest(sum_):
        raise UpstreamError(
            f"binr received a checksum from {url!r} that is not a SHA-256 hex digest",
            url=url,
            status=200,
        )
    return sum_
