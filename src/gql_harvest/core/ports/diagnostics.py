from typing import Protocol

from gql_harvest.models import Diagnostic, FailureReason


class DiagnosticsSink(Protocol):
    def extraction_succeeded(self, file_path: str) -> None: ...

    def extraction_failed(
        self, file_path: str, reason: FailureReason, error: BaseException | None = None
    ) -> None: ...

    def report(self, diagnostic: Diagnostic) -> None: ...
