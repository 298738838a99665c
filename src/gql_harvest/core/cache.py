import hashlib
from dataclasses import dataclass

from gql_harvest.models import ExtractionStatus, Fragment


def compute_content_key(file_path: str, contents: str) -> str:
    h = hashlib.sha256()
    h.update(file_path.encode("utf-8"))
    h.update(contents.encode("utf-8"))
    return h.hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    """Extraction outcome for one (path, contents) pair.

    An empty ``fragments`` tuple is the "no fragments" sentinel; ``status``
    records whether that came from an unparseable file.
    """

    fragments: tuple[Fragment, ...]
    status: ExtractionStatus


class InMemoryDocumentCache:
    """Process-lifetime cache; entries are never invalidated, only superseded by new keys."""

    def __init__(self) -> None:
        self.entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    async def get(self, key: str) -> CacheEntry | None:
        entry = self.entries.get(key)
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        self.entries[key] = entry

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def clear(self) -> None:
        self.entries.clear()
        self.hits = 0
        self.misses = 0


_DEFAULT_CACHE: InMemoryDocumentCache | None = None


def default_cache() -> InMemoryDocumentCache:
    global _DEFAULT_CACHE  # noqa: PLW0603
    if _DEFAULT_CACHE is None:
        _DEFAULT_CACHE = InMemoryDocumentCache()
    return _DEFAULT_CACHE
