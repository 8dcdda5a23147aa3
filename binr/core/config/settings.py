"""
BinrConfig — the explicit configuration record for every entry point.

The core never reads the process environment itself. ``from_env()`` is
called once at the boundary (the CLI or the module-level helpers) and
the resulting record is passed down.

Environment variables (all optional):
    XDG_CONFIG_HOME   Base directory (default: $HOME/.config, else cwd).
    BINR_TIMEOUT      Network timeout in seconds (default: none).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from binr import __version__
from binr.core.domain.paths import PathResolver, config_home
from binr.core.errors import ConfigError


def _default_user_agent() -> str:
    return f"binr/{__version__}"


class BinrConfig(BaseModel):
    """Where binr keeps its tree and how it talks to the network."""

    base_dir: Path
    update: bool = False
    timeout: float | None = None
    user_agent: str = Field(default_factory=_default_user_agent)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        base_dir: Path | None = None,
        update: bool = False,
        timeout: float | None = None,
    ) -> BinrConfig:
        """Build config from environment variables + explicit overrides."""
        env = os.environ if environ is None else environ
        if timeout is None and env.get("BINR_TIMEOUT"):
            try:
                timeout = float(env["BINR_TIMEOUT"])
            except ValueError as e:
                raise ConfigError(f"BINR_TIMEOUT must be a number of seconds: {e}") from e
        return cls(
            base_dir=base_dir if base_dir is not None else config_home(env),
            update=update,
            timeout=timeout,
        )

    def paths(self) -> PathResolver:
        return PathResolver(self.base_dir)
