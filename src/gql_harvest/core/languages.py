from pathlib import Path

_JAVASCRIPT_DIALECTS = ("javascript", "tsx")

_EXTENSION_DIALECT_MAP: dict[str, tuple[str, ...]] = {
    ".js": _JAVASCRIPT_DIALECTS,
    ".jsx": _JAVASCRIPT_DIALECTS,
    ".mjs": _JAVASCRIPT_DIALECTS,
    ".cjs": _JAVASCRIPT_DIALECTS,
    ".ts": ("typescript",),
    ".mts": ("typescript",),
    ".cts": ("typescript",),
    ".tsx": ("tsx",),
}

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(_EXTENSION_DIALECT_MAP)


def dialects_for_path(file_path: str | Path) -> tuple[str, ...]:
    """Tree-sitter grammars to try, in order, for a file.

    Files with unknown extensions are read as JavaScript; preprocessors are
    expected to have turned them into something a JavaScript grammar accepts.
    """
    suffix = Path(file_path).suffix.lower()
    return _EXTENSION_DIALECT_MAP.get(suffix, _JAVASCRIPT_DIALECTS)


def is_supported_file(file_path: str | Path) -> bool:
    return Path(file_path).suffix.lower() in SUPPORTED_EXTENSIONS
