import logging
import threading
from collections.abc import Awaitable, Callable

from gql_extract.core.ports.cache import ResultCache
from gql_extract.models import FileExtraction

logger = logging.getLogger(__name__)


class InMemoryResultCache:
    """Unbounded, write-once cache of extraction results keyed by content hash.

    Implements the ``ResultCache`` protocol. Entries live as long as the cache.
    """

    def __init__(self) -> None:
        self.entries: dict[str, FileExtraction] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> FileExtraction | None:
        return self.entries.get(key)

    def set(self, key: str, entry: FileExtraction) -> FileExtraction:
        with self._lock:
            return self.entries.setdefault(key, entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries


async def get_or_compute(
    cache: ResultCache,
    key: str,
    compute: Callable[[], Awaitable[FileExtraction]],
) -> FileExtraction:
    """Return the cached entry for ``key``, computing and storing it on a miss.

    Two pipelines racing on the same unseen key may both compute; the cache
    keeps one result and both callers get that entry back.
    """
    cached = cache.get(key)
    if cached is not None:
        logger.debug("Cache hit for %s", key)
        return cached
    return cache.set(key, await compute())
