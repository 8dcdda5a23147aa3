"""
Configuration — the explicit config record and the CLI sources file.
"""

from binr.core.config.settings import BinrConfig  # noqa: F401
