"""
Observability — process-wide logging setup for the CLI.
"""

from binr.core.observability.logging_config import setup_logging  # noqa: F401
