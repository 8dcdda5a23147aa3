"""
L1 Domain — pure layout and version logic.

No network calls, no filesystem writes.
"""

from binr.core.domain.paths import PathResolver, config_home  # noqa: F401
from binr.core.domain.versioning import (  # noqa: F401
    Version,
    compare_versions,
    highest,
    is_valid_version,
    parse_version,
)
