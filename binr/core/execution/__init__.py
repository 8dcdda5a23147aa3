"""
L4 Execution — everything that writes: downloads, the cache, links.
"""

from binr.core.execution.cache_store import CacheStore  # noqa: F401
from binr.core.execution.checksum import digest, fetch_checksum, verify  # noqa: F401
from binr.core.execution.download import Downloader  # noqa: F401
from binr.core.execution.links import LinkManager  # noqa: F401
