"""
L4 Execution — Versioned and unversioned command links.

Each installed version gets an append-only link
``<namespace>/<command>-<version> -> ../.cache/<digest>``. The floating
``<namespace>/<command>`` link follows the highest version ever linked
and never moves backward.

The highest version is found by rescanning the namespace directory on
every link; the directory is the index.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from binr.core.domain.paths import CACHE_DIR, PathResolver
from binr.core.domain.versioning import Version, highest, parse_version
from binr.core.errors import (
    AlreadyLinkedError,
    InvalidArgumentError,
    StateCorruptionError,
    StorageError,
)

logger = logging.getLogger(__name__)

# One lock per (tree, namespace, command), shared by every LinkManager in
# the process.
_LOCKS: dict[tuple[str, str, str], threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(root: Path, namespace: str, command: str) -> threading.Lock:
    key = (str(root), namespace, command)
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = _LOCKS[key] = threading.Lock()
        return lock


def link_target(digest: str) -> str:
    """Relative link target for a cache entry, as seen from a namespace dir."""
    return os.path.join("..", CACHE_DIR, digest)


class LinkManager:
    """Expose cached binaries under namespaced command names."""

    def __init__(self, paths: PathResolver) -> None:
        self.paths = paths

    def link(self, namespace: str, command: str, version: str, digest: str) -> None:
        """Link ``version`` of ``command`` to the cache entry ``digest``.

        The unversioned link is repointed only when ``version`` is at
        least as high as every version already linked.

        Raises:
            AlreadyLinkedError: The versioned link already exists.
            StateCorruptionError: A versioned link in the namespace cannot
                be parsed as ``<command>-<semver>``.
            StorageError: Creating a directory or link failed.
        """
        if not version:
            raise InvalidArgumentError("binr link requires a version")
        versioned = self.paths.path(namespace, command, version)
        target = link_target(digest)

        try:
            versioned.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"binr unable to create namespace directory. {exc}") from exc

        with _lock_for(self.paths.root, namespace, command):
            logger.debug("linking versioned: target=%s path=%s", target, versioned)
            try:
                os.symlink(target, versioned)
            except FileExistsError as exc:
                raise AlreadyLinkedError(f"binr found {versioned} already linked") from exc
            except OSError as exc:
                raise StorageError(f"binr unable to link {versioned}. {exc}") from exc

            if not self.is_newest(namespace, command, version):
                logger.debug(
                    "version linked is not newest. leaving unversioned link unchanged."
                )
                return

            self._relink_latest(namespace, command, target)

    def is_newest(self, namespace: str, command: str, version: str) -> bool:
        """Whether ``version`` is at least every linked version of ``command``."""
        current = parse_version(version)
        top = highest(self.versions(namespace, command))
        return top is None or not top > current

    def versions(self, namespace: str, command: str) -> list[Version]:
        """All linked versions of ``command`` in ``namespace``, ascending.

        Raises:
            StateCorruptionError: On a ``<command>-`` entry whose suffix
                is not a semver.
        """
        directory = self.paths.namespace_dir(namespace)
        prefix = f"{command}-"
        found: list[Version] = []
        try:
            entries = list(os.scandir(directory))
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(f"binr unable to check for latest version. {exc}") from exc

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                continue
            if not entry.name.startswith(prefix):
                continue  # another command, or this command's unversioned link
            suffix = entry.name[len(prefix):]
            try:
                found.append(parse_version(suffix))
            except InvalidArgumentError as exc:
                raise StateCorruptionError(
                    "binr found a file which is not of the expected form "
                    f"[command]-[version]: {entry.name!r}. the version does not "
                    "appear to be a Semver (v1.2.3)",
                    filename=entry.name,
                ) from exc
        return sorted(found)

    def latest(self, namespace: str, command: str) -> Version | None:
        """The installed version the unversioned link currently points at."""
        unversioned = self.paths.path(namespace, command)
        try:
            target = os.readlink(unversioned)
        except OSError:
            return None
        for version in reversed(self.versions(namespace, command)):
            versioned = self.paths.path(namespace, command, version.original)
            try:
                if os.readlink(versioned) == target:
                    return version
            except OSError:
                continue
        return None

    def _relink_latest(self, namespace: str, command: str, target: str) -> None:
        unversioned = self.paths.path(namespace, command)
        logger.debug("updating unversioned link: target=%s path=%s", target, unversioned)

        # Swap in a fresh link with a rename so readers never see it missing
        staging = unversioned.with_name(f".{unversioned.name}.{os.getpid()}.tmp")
        try:
            staging.unlink(missing_ok=True)
            os.symlink(target, staging)
            os.replace(staging, unversioned)
        except OSError as exc:
            staging.unlink(missing_ok=True)
            raise StorageError(f"binr unable to update {unversioned}. {exc}") from exc
