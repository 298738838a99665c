from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gql_harvest.core.cache import CacheEntry


class DocumentCache(Protocol):
    async def get(self, key: str) -> "CacheEntry | None": ...

    async def put(self, key: str, entry: "CacheEntry") -> None: ...
