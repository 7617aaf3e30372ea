"""Severity-tagged diagnostics returned by resource lifecycle operations."""

from dataclasses import dataclass
from enum import Enum
from typing import List


class Severity(str, Enum):
    """Diagnostic severity levels."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """One user-facing message produced by an operation."""
    severity: Severity
    summary: str
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
        }


class Diagnostics(list):
    """Ordered collection of diagnostics."""

    def add_error(self, summary: str, detail: str = "") -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self.append(Diagnostic(Severity.WARNING, summary, detail))

    def add_exception(self, summary: str, exc: Exception) -> None:
        """Record an exception as an error diagnostic."""
        self.add_error(summary, str(exc))

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]
