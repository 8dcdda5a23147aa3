"""
binr — download command-line binaries on demand.

Commands are cached content-addressed on disk and exposed under stable,
namespaced paths:

    from binr import get, template_source

    path = get(
        "myapp", "mytool", "v1.2.3",
        template_source("https://example.com/{version}/{os}/{arch}/mytool"),
    )
    subprocess.run([str(path), "--help"])
"""

import logging

__version__ = "0.1.0"

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

from binr.core.config.settings import BinrConfig  # noqa: E402
from binr.core.errors import (  # noqa: E402
    AlreadyExistsError,
    AlreadyLinkedError,
    BinrError,
    ConfigError,
    IntegrityError,
    InvalidArgumentError,
    StateCorruptionError,
    StorageError,
    UpstreamError,
)
from binr.core.orchestration.orchestrator import Orchestrator, get, path  # noqa: E402
from binr.core.sources import Source, current_platform, template_source  # noqa: E402

__all__ = [
    "AlreadyExistsError",
    "AlreadyLinkedError",
    "BinrConfig",
    "BinrError",
    "ConfigError",
    "IntegrityError",
    "InvalidArgumentError",
    "Orchestrator",
    "Source",
    "StateCorruptionError",
    "StorageError",
    "UpstreamError",
    "__version__",
    "current_platform",
    "get",
    "path",
    "template_source",
]
