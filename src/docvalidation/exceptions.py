"""Exception hierarchy for docvalidation.

Validation mismatches are never raised; they are returned as a
``ValidationResult``. Exceptions are reserved for caller contract violations,
broken structure definitions and explicit assertion helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validator import ValidationFailure, ValidationResult


class DocumentValidationError(Exception):
    """Base class for all docvalidation errors."""


class PreconditionError(DocumentValidationError, ValueError):
    """Raised when a caller passes an argument that violates the API contract."""

    def __init__(self, message: str, argument: str = ""):
        self.argument = argument
        super().__init__(message)


class StructureFrozenError(DocumentValidationError, RuntimeError):
    """Raised when an expected structure is modified after validation began."""


class StructureDefinitionError(DocumentValidationError, ValueError):
    """Raised when a declarative structure definition cannot be loaded."""

    def __init__(self, message: str, source: str = "", violations: list[str] | None = None):
        self.source = source
        self.violations = violations or []
        if self.violations:
            message = f"{message}: {self.violations[0]}"
        super().__init__(message)


class MarkupParseError(DocumentValidationError):
    """Raised when markup could not be turned into an actual document tree."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(message)


class DocumentMismatchError(DocumentValidationError, AssertionError):
    """Raised by the assertion helpers when a document fails validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        lines = [f"Document failed validation with {len(result.failures)} failure(s)"]
        lines.extend(f"  {failure}" for failure in result.failures)
        super().__init__("\n".join(lines))

    @property
    def failures(self) -> list[ValidationFailure]:
        return self.result.failures
