"""
L4 Execution — Content-addressed binary store.

Every cached binary lives at ``<root>/.cache/<sha256>``. An entry is
written once, by an atomic rename of a fully downloaded and verified
partial file, and never modified afterwards.

There is no lock around "is digest X already cached". Two concurrent
``ensure`` calls for the same missing content both download it and both
rename onto the same content-identified name; the result is correct, the
second download is wasted bandwidth.
"""

from __future__ import annotations

import contextlib
import itertools
import logging
import os
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from binr.core.domain.paths import PathResolver
from binr.core.errors import InvalidArgumentError, StorageError
from binr.core.execution import checksum
from binr.core.execution.download import OCTET_STREAM, Downloader

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"

_SEQUENCE = itertools.count()


class CacheStore:
    """Download, verify and commit binaries keyed by their digest."""

    def __init__(self, paths: PathResolver, downloader: Downloader) -> None:
        self.paths = paths
        self.downloader = downloader

    def ensure_root(self) -> Path:
        """Create the cache directory if it is missing."""
        cache_dir = self.paths.cache_dir
        if not cache_dir.is_dir():
            logger.debug("creating local binr cache: %s", cache_dir)
            try:
                cache_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageError(f"binr was unable to create cache directory. {exc}") from exc
        return cache_dir

    def cached(self, digest: str) -> bool:
        """Whether content with ``digest`` is already in the store."""
        if not digest:
            return False
        return self.paths.cache_entry(digest).exists()

    def partial_path(self) -> Path:
        """A fresh, uniquely named partial-download path in the cache."""
        stamp = datetime.now().strftime("%Y%m%d%H%M%S.%f")
        return self.paths.cache_dir / f"{stamp}.{os.getpid()}.{next(_SEQUENCE)}{PARTIAL_SUFFIX}"

    @contextlib.contextmanager
    def ensure(self, source_url: str, expected_checksum: str = "") -> Iterator[str]:
        """Make the content at ``source_url`` available in the store.

        Yields the content's digest. If ``expected_checksum`` is given
        and already cached, nothing is downloaded. Without a checksum the
        digest of the downloaded bytes becomes the content's identity.

        Leaving the ``with`` block, successfully or not, removes the
        partial download if it is still there.

        Raises:
            InvalidArgumentError: ``expected_checksum`` is not a SHA-256 hex digest.
            IntegrityError: The download does not match ``expected_checksum``.
            UpstreamError, AlreadyExistsError, StorageError: From the download.
        """
        expected = expected_checksum.strip().lower()
        if expected and not checksum.is_digest(expected):
            raise InvalidArgumentError(
                f"binr requires a checksum to be a SHA-256 hex digest, got {expected_checksum!r}"
            )
        logger.debug("binr sourcing command: url=%s checksum=%s", source_url, expected)

        if self.cached(expected):
            logger.debug("binr found %s in cache", expected)
            yield expected
            return

        partial = self.partial_path()
        try:
            yield self._commit(source_url, expected, partial)
        finally:
            self._cleanup(partial)

    def _commit(self, source_url: str, expected: str, partial: Path) -> str:
        self.downloader.fetch(source_url, partial, OCTET_STREAM)

        if expected:
            checksum.verify(partial, expected)
            sum_ = expected
        else:
            sum_ = checksum.digest(partial)

        entry = self.paths.cache_entry(sum_)
        logger.debug("moving into place: from=%s to=%s", partial, entry)
        try:
            os.replace(partial, entry)
        except OSError as exc:
            raise StorageError(f"binr unable to move download into the cache. {exc}") from exc
        return sum_

    def _cleanup(self, partial: Path) -> None:
        if not os.path.lexists(partial):
            return
        logger.debug("binr cleaning up %s", partial)
        try:
            partial.unlink()
        except OSError as exc:
            logger.warning("binr unable to remove partial download %s: %s", partial, exc)
