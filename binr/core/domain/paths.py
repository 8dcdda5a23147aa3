"""
L1 Domain — On-disk layout of the binr tree.

    <base>/binr/.cache/<sha256>               content-addressed store
    <base>/binr/<namespace>/<command>         unversioned ("latest") link
    <base>/binr/<namespace>/<command>-<vers>  versioned link

``<base>`` is ``$XDG_CONFIG_HOME``, else ``$HOME/.config``, else the
current working directory.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from binr.core.domain.versioning import is_valid_version
from binr.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

BINR_DIR = "binr"
CACHE_DIR = ".cache"


def _home_dir(environ: Mapping[str, str]) -> str:
    if sys.platform == "win32":
        return environ.get("USERPROFILE", "")
    return environ.get("HOME", "")


def config_home(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory binr places its tree under.

    Never raises. When neither ``XDG_CONFIG_HOME`` nor a home directory
    is available, the current working directory is used and a warning
    is logged.

    Args:
        environ: Environment to read (default: ``os.environ``).
    """
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg)

    home = _home_dir(env)
    if home:
        return Path(home) / ".config"

    logger.warning(
        "binr found no home directory nor XDG_CONFIG_HOME environment variable. "
        "The current working directory will be used."
    )
    return Path.cwd()


def _check_name(kind: str, name: str) -> None:
    """Reject names that would resolve outside their directory."""
    separators = [s for s in (os.sep, os.altsep, "/") if s]
    if name in (".", "..") or any(s in name for s in separators) or "\0" in name:
        raise InvalidArgumentError(f"binr path requires {kind} to be a plain name, got {name!r}")


class PathResolver:
    """Deterministic paths for one binr tree.

    Does not touch the filesystem; callers decide what must exist.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(os.path.abspath(base_dir))

    @property
    def root(self) -> Path:
        return self.base_dir / BINR_DIR

    @property
    def cache_dir(self) -> Path:
        return self.root / CACHE_DIR

    def cache_entry(self, digest: str) -> Path:
        return self.cache_dir / digest

    def namespace_dir(self, namespace: str) -> Path:
        return self.root / namespace

    def path(self, namespace: str, command: str, version: str = "") -> Path:
        """Absolute path at which the command is expected to exist.

        Without a version this is the floating link that tracks the
        newest installed version.

        Raises:
            InvalidArgumentError: On an empty namespace or command, one
                containing a path separator or naming ``.``, ``..`` or the
                cache directory, or a version that is not a valid semver.
        """
        if not namespace:
            raise InvalidArgumentError("binr path requires namespace")
        if not command:
            raise InvalidArgumentError("binr path requires command")
        _check_name("namespace", namespace)
        _check_name("command", command)
        if namespace == CACHE_DIR:
            raise InvalidArgumentError(f"binr reserves namespace {CACHE_DIR!r} for its cache")
        if version:
            if not is_valid_version(version):
                raise InvalidArgumentError(
                    "binr path requires version to be a valid semver (ex: v1.2.3)"
                )
            command = f"{command}-{version}"
        return self.namespace_dir(namespace) / command

    def __repr__(self) -> str:
        return f"<PathResolver root={str(self.root)!r}>"
