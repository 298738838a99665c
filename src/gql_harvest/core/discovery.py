from collections.abc import Iterable, Iterator
from pathlib import Path

from gql_harvest.core.languages import is_supported_file

_SKIPPED_DIRECTORIES = frozenset({"node_modules", "public", "__pycache__"})


def is_ignored_path(path: Path) -> bool:
    return any(
        part in _SKIPPED_DIRECTORIES or (part.startswith(".") and part not in {".", ".."}) for part in path.parts
    )


def iter_source_files(paths: Iterable[str | Path]) -> Iterator[Path]:
    """Yield supported source files under ``paths`` in sorted order.

    Files named explicitly are yielded even when their extension is unknown.
    """
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            yield path
            continue
        if not path.is_dir():
            raise FileNotFoundError(f"Path not found: {raw}")
        for candidate in sorted(path.rglob("*")):
            relative = candidate.relative_to(path)
            if candidate.is_file() and is_supported_file(candidate) and not is_ignored_path(relative):
                yield candidate
