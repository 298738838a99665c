from gql_harvest.config import ExtractorSettings
from gql_harvest.core.cache import CacheEntry, InMemoryDocumentCache, compute_content_key, default_cache
from gql_harvest.core.diagnostics import DiagnosticsCollector
from gql_harvest.core.file_parser import FileParser, find_graphql_tags
from gql_harvest.models import (
    Diagnostic,
    Document,
    ExtractionResult,
    ExtractionStatus,
    FailureReason,
    Fragment,
    FragmentKind,
    Severity,
)

__all__ = [
    "CacheEntry",
    "Diagnostic",
    "DiagnosticsCollector",
    "Document",
    "ExtractionResult",
    "ExtractionStatus",
    "ExtractorSettings",
    "FailureReason",
    "FileParser",
    "Fragment",
    "FragmentKind",
    "InMemoryDocumentCache",
    "Severity",
    "compute_content_key",
    "default_cache",
    "find_graphql_tags",
]
