from collections.abc import Awaitable, Sequence
from typing import Protocol


class SourcePreprocessor(Protocol):
    """Rewrites a source file into candidate texts the base parser can read.

    Returning ``None`` or an empty sequence means "use the contents as-is".
    """

    def __call__(
        self, file_path: str, contents: str
    ) -> Sequence[str] | None | Awaitable[Sequence[str] | None]: ...
