"""
L5 Orchestration — Get a command, installing it on first use.

Each ``get`` is a sequential pipeline:

    validate → already linked? → source → checksum → cache → link → path

Nothing here retries. Errors from any stage propagate to the caller,
except an ``AlreadyLinkedError`` from a concurrent install of the same
version, which means the work is already done.
"""

from __future__ import annotations

import logging
from pathlib import Path

from binr.core.config.settings import BinrConfig
from binr.core.domain.versioning import is_valid_version
from binr.core.errors import AlreadyLinkedError, InvalidArgumentError
from binr.core.execution import checksum
from binr.core.execution.cache_store import CacheStore
from binr.core.execution.download import Downloader
from binr.core.execution.links import LinkManager
from binr.core.sources import Source, current_platform

logger = logging.getLogger(__name__)


class Orchestrator:
    """Wires the path resolver, cache store and link manager for one tree."""

    def __init__(self, config: BinrConfig) -> None:
        self.config = config
        self.paths = config.paths()
        self.downloader = Downloader(timeout=config.timeout, user_agent=config.user_agent)
        self.store = CacheStore(self.paths, self.downloader)
        self.links = LinkManager(self.paths)

    def get(
        self,
        namespace: str,
        command: str,
        version: str,
        source: Source,
        *,
        update: bool | None = None,
    ) -> Path:
        """Return the path to ``command`` at ``version``, downloading it if needed.

        Args:
            namespace: Name of the application using binr. Commands are
                linked under ``<base>/binr/<namespace>/``.
            command: Name the command is exposed under.
            version: Exact semver to install (ex: ``v1.2.3``).
            source: Resolves ``(version, os, arch)`` to download URLs.
            update: Replace an installed binary. Not yet implemented;
                defaults to the config's ``update`` flag.

        Raises:
            InvalidArgumentError: Missing or malformed arguments.
            UpstreamError: The source URLs could not be fetched.
            IntegrityError: The binary does not match its checksum.
            StateCorruptionError: The namespace holds an unparseable link.
            StorageError: A filesystem operation failed.
        """
        if update is None:
            update = self.config.update

        logger.debug(
            "binr ensuring command: namespace=%s command=%s version=%s update=%s",
            namespace, command, version, update,
        )

        if not namespace:
            raise InvalidArgumentError("binr get requires namespace")
        if not command:
            raise InvalidArgumentError("binr get requires command")
        if not version:
            raise InvalidArgumentError("binr get requires a version")
        if not is_valid_version(version):
            raise InvalidArgumentError(
                "binr get requires version to be a valid semver (ex: v1.2.3)"
            )
        if source is None or not callable(source):
            raise InvalidArgumentError(
                "binr get requires a source to resolve missing commands"
            )
        if update:
            raise InvalidArgumentError("binr get with update is not yet implemented")

        path = self.paths.path(namespace, command, version)
        self.store.ensure_root()

        # Existence only: a broken or foreign entry here is served as-is
        if path.exists():
            logger.debug("binr found command locally: %s", path)
            return path

        os_name, arch = current_platform()
        source_url, sum_url = source(version, os_name, arch)

        expected = checksum.fetch_checksum(
            sum_url,
            timeout=self.config.timeout,
            user_agent=self.config.user_agent,
        )

        with self.store.ensure(source_url, expected) as digest:
            try:
                self.links.link(namespace, command, version, digest)
            except AlreadyLinkedError:
                logger.debug("binr found %s linked by a concurrent install", path)

        logger.debug("binr completed without error")
        return path


def get(
    namespace: str,
    command: str,
    version: str,
    source: Source,
    *,
    update: bool = False,
    config: BinrConfig | None = None,
) -> Path:
    """Get the path to a command, downloading it on first use.

    Uses ``config`` if given, otherwise one built from the environment.
    See ``Orchestrator.get``.
    """
    cfg = config if config is not None else BinrConfig.from_env()
    return Orchestrator(cfg).get(namespace, command, version, source, update=update or None)


def path(
    namespace: str,
    command: str,
    version: str = "",
    *,
    config: BinrConfig | None = None,
) -> Path:
    """Absolute path at which a command is expected to exist.

    Does not check that it does. Without a version, returns the floating
    link that tracks the newest installed version.
    """
    cfg = config if config is not None else BinrConfig.from_env()
    return cfg.paths().path(namespace, command, version)
