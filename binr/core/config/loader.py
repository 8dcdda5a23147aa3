"""
Sources file loader — reads binr.yml into typed source definitions.

The CLI needs to know where commands are downloaded from. Library
callers pass a source function directly and never touch this file.

    commands:
      testbin:
        url: "https://example.com/{version}/{os}/{arch}/testbin"
        checksum: "https://example.com/{version}/{os}/{arch}/testbin.sha256"
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from binr.core.errors import ConfigError
from binr.core.sources import Source, template_source

logger = logging.getLogger(__name__)

SOURCES_FILE = "binr.yml"


class CommandSource(BaseModel):
    """Download location templates for one command."""

    url: str
    checksum: str = ""

    def source(self) -> Source:
        return template_source(self.url, self.checksum)


class SourcesFile(BaseModel):
    """Root of binr.yml."""

    commands: dict[str, CommandSource] = Field(default_factory=dict)

    def source_for(self, command: str) -> Source:
        """Return the source for ``command``.

        Raises:
            ConfigError: If the command is not declared.
        """
        entry = self.commands.get(command)
        if entry is None:
            raise ConfigError(f"No source declared for command {command!r}")
        return entry.source()


def find_sources_file(start_dir: Path | None = None) -> Path | None:
    """Search for binr.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / SOURCES_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_sources(path: Path | None = None) -> SourcesFile:
    """Load and validate a sources file.

    Args:
        path: Explicit path to binr.yml. If None, searches upward.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_sources_file()

    if path is None:
        raise ConfigError(
            f"No {SOURCES_FILE} found. Pass --url, or specify --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading sources from %s", path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        sources = SourcesFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid sources configuration: {e}") from e

    logger.info("Loaded %d command sources from %s", len(sources.commands), path)
    return sources
