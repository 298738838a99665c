from enum import Enum
from typing import Any, Literal

from graphql import DefinitionNode, DocumentNode
from pydantic import BaseModel, ConfigDict, Field


class FragmentKind(str, Enum):
    COMPONENT_QUERY = "component_query"
    HOOK_QUERY = "hook_query"
    PAGE_QUERY = "page_query"


class Fragment(BaseModel):
    """One GraphQL definition found inside a tagged template."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str
    source_text: str
    content_hash: str
    """Hash of the query text with ignored characters stripped, not of ``source_text``.

    Whitespace and comment edits leave it, and any generated name, unchanged.
    """
    kind: FragmentKind
    location_key: str
    file_path: str
    line: int
    column: int
    definition: DefinitionNode = Field(exclude=True, repr=False)

    @property
    def is_static_query(self) -> bool:
        return self.kind in (FragmentKind.COMPONENT_QUERY, FragmentKind.HOOK_QUERY)

    @property
    def is_hook(self) -> bool:
        return self.kind is FragmentKind.HOOK_QUERY


class Document(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    kind: Literal["Document"] = "Document"
    definitions: list[Fragment] = Field(min_length=1)

    def names(self) -> list[str]:
        return [fragment.name for fragment in self.definitions]

    def to_graphql(self) -> DocumentNode:
        return DocumentNode(definitions=tuple(fragment.definition for fragment in self.definitions))


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class FailureReason(str, Enum):
    READ = "read"
    PARSE = "parse"
    QUERY = "query"


class Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    file_path: str
    code: str
    variable_name: str | None = None
    usage_context: str | None = None


class ExtractionStatus(str, Enum):
    NOT_QUERY_FILE = "not_query_file"
    NO_FRAGMENTS = "no_fragments"
    EXTRACTED = "extracted"
    READ_ERROR = "read_error"
    PARSE_ERROR = "parse_error"
    QUERY_ERROR = "query_error"


class ExtractionResult(BaseModel):
    """Outcome of extracting one file.

    ``document`` is only set when ``status`` is ``EXTRACTED``.
    """

    model_config = ConfigDict(frozen=True)

    file_path: str
    status: ExtractionStatus
    document: Document | None = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.status in (
            ExtractionStatus.EXTRACTED,
            ExtractionStatus.NO_FRAGMENTS,
            ExtractionStatus.NOT_QUERY_FILE,
        )

    def summary(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "status": self.status.value,
            "cached": self.cached,
            "fragments": [
                {"name": f.name, "kind": f.kind.value, "line": f.line, "column": f.column}
                for f in (self.document.definitions if self.document else [])
            ],
        }
