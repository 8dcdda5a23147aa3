"""
Sources — how a caller tells binr where a command can be downloaded.

A source is any callable ``source(version, os, arch)`` returning the
binary URL and an optional checksum URL. ``template_source`` builds one
from URL templates with ``{version}``, ``{bare_version}``, ``{os}`` and
``{arch}`` placeholders.
"""

from __future__ import annotations

import platform
from typing import Protocol

from binr.core.errors import ConfigError

# Go-style names, which is what most release pipelines publish under
_OS_MAP = {"darwin": "darwin", "linux": "linux", "windows": "windows", "freebsd": "freebsd"}
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


class Source(Protocol):
    """Maps a version and platform to ``(binary_url, checksum_url)``.

    ``checksum_url`` may be empty, in which case the download is
    trusted and identified by the digest of its own bytes.
    """

    def __call__(self, version: str, os: str, arch: str) -> tuple[str, str]: ...


def current_platform() -> tuple[str, str]:
    """Return ``(os, arch)`` for this machine, e.g. ``("linux", "amd64")``."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return _OS_MAP.get(system, system), _ARCH_MAP.get(machine, machine)


def template_source(url_template: str, checksum_template: str = "") -> Source:
    """Build a source from URL templates.

    Example::

        source = template_source(
            "https://example.com/releases/{version}/{os}/{arch}/mytool",
            "https://example.com/releases/{version}/{os}/{arch}/mytool.sha256",
        )
    """

    def _source(version: str, os: str, arch: str) -> tuple[str, str]:
        fields = {
            "version": version,
            "bare_version": version.lstrip("v"),
            "os": os,
            "arch": arch,
        }
        return _format(url_template, fields), _format(checksum_template, fields)

    return _source


def _format(template: str, fields: dict[str, str]) -> str:
    if not template:
        return ""
    try:
        return template.format(**fields)
    except (KeyError, IndexError, ValueError) as e:
        known = ", ".join("{" + name + "}" for name in fields)
        raise ConfigError(
            f"Invalid URL template {template!r}: {e!r}. Known placeholders: {known}"
        ) from e
