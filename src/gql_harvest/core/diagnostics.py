"""Diagnostics collection and the user-facing messages for extraction problems.

The collector is the default ``DiagnosticsSink``. It keeps every diagnostic
in the order it was reported, logs it, and tracks which files are currently
stale: a file becomes stale when extraction fails and stops being stale the
next time extraction succeeds.
"""

import logging

from gql_harvest.models import Diagnostic, FailureReason, Severity

logger = logging.getLogger(__name__)

UNKNOWN_QUERY_VARIABLE = "unknown-query-variable"
GLOBAL_TAG = "deprecated-global-tag"
READ_FAILED = "read-failed"
PARSE_FAILED = "parse-failed"
QUERY_INVALID = "query-invalid"


def unknown_query_variable(variable_name: str, file_path: str, usage_context: str) -> Diagnostic:
    message = (
        f'We were unable to find the declaration of variable "{variable_name}", which you passed as the '
        f'"query" prop into the {usage_context} declaration in "{file_path}".\n\n'
        "Perhaps the variable name has a typo?\n\n"
        f"Also note that we are currently unable to use queries defined in files other than the file where "
        f"the {usage_context} is defined. If you're attempting to import the query, please move it into "
        f'"{file_path}".'
    )
    return Diagnostic(
        severity=Severity.WARNING,
        message=message,
        file_path=file_path,
        code=UNKNOWN_QUERY_VARIABLE,
        variable_name=variable_name,
        usage_context=usage_context,
    )


def global_tag(file_path: str, tag_name: str, module_name: str) -> Diagnostic:
    message = (
        f"Using the global `{tag_name}` tag is deprecated.\n"
        f"Import it instead like:  import {{ {tag_name} }} from '{module_name}' in file:\n{file_path}"
    )
    return Diagnostic(severity=Severity.WARNING, message=message, file_path=file_path, code=GLOBAL_TAG)


def read_failed(file_path: str, error: BaseException) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        message=f"There was a problem reading the file: {file_path}\n\n{error}",
        file_path=file_path,
        code=READ_FAILED,
    )


def parse_failed(file_path: str) -> Diagnostic:
    message = (
        f'There was a problem parsing "{file_path}"; any GraphQL fragments or queries in this file were '
        "not processed.\n"
        "This may indicate a syntax error in the code, or it may be a file type that we do not know how "
        "to parse."
    )
    return Diagnostic(severity=Severity.ERROR, message=message, file_path=file_path, code=PARSE_FAILED)


def preprocessed_candidate_failed(file_path: str, dialects: tuple[str, ...], index: int) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        message=(
            f"Preprocessed candidate #{index + 1} of {file_path} contains syntax errors "
            f"(tried: {', '.join(dialects)})."
        ),
        file_path=file_path,
        code=PARSE_FAILED,
    )


def preprocessed_failed(file_path: str) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        message=f"Failed to parse preprocessed file {file_path}",
        file_path=file_path,
        code=PARSE_FAILED,
    )


def query_invalid(file_path: str, error: BaseException) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        message=f"There was a problem parsing the GraphQL query in file: {file_path}\n\n{error}",
        file_path=file_path,
        code=QUERY_INVALID,
    )


class DiagnosticsCollector:
    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []
        self.succeeded: list[str] = []
        self.failed: list[tuple[str, FailureReason]] = []
        self._stale: set[str] = set()

    def extraction_succeeded(self, file_path: str) -> None:
        self.succeeded.append(file_path)
        self._stale.discard(file_path)

    def extraction_failed(
        self, file_path: str, reason: FailureReason, error: BaseException | None = None
    ) -> None:
        self.failed.append((file_path, reason))
        self._stale.add(file_path)
        if error is not None:
            logger.debug("Extraction failed for %s (%s): %s", file_path, reason.value, error)

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        level = logging.ERROR if diagnostic.severity is Severity.ERROR else logging.WARNING
        logger.log(level, diagnostic.message)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    def for_file(self, file_path: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.file_path == file_path]

    def is_stale(self, file_path: str) -> bool:
        return file_path in self._stale

    def clear(self) -> None:
        self.diagnostics.clear()
        self.succeeded.clear()
        self.failed.clear()
        self._stale.clear()
