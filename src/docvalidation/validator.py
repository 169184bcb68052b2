"""Validator matching an expected structure against an actual document tree.

Both trees are walked in lock-step. For each expected ``Tag`` the matched
actual element must have the same (case-insensitive) name, none of the
illegal attributes, every expected attribute with a fully matching value,
and the expected children as an ordered subsequence of its own children.

Child matching scans left to right and takes the first accepted candidate.
A candidate that later fails its deeper checks is not retried against a
later sibling: matching stays linear in tree size and every failure points
at one well-defined node, at the price of an occasional misleading report
when an earlier sibling with the same name was a false lead.

Mismatches are returned in a ``ValidationResult``, never raised.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .config import DocValidationConfig
from .document import NodeKind, node_kind, node_text
from .exceptions import DocumentMismatchError, PreconditionError
from .structure import Comment, DocumentElement, Tag, TextContent

logger = logging.getLogger(__name__)


class ValidationStatus(str, Enum):
    """Overall validation verdict."""
    PASS = "pass"
    FAIL = "fail"


class FailureKind(str, Enum):
    """Why a node failed validation."""
    TAG_NAME_MISMATCH = "tag_name_mismatch"
    ILLEGAL_ATTRIBUTE_PRESENT = "illegal_attribute_present"
    ATTRIBUTE_MISSING = "attribute_missing"
    ATTRIBUTE_VALUE_MISMATCH = "attribute_value_mismatch"
    CHILD_NOT_FOUND = "child_not_found"
    CONTENT_MISMATCH = "content_mismatch"
    INVALID_PATTERN = "invalid_pattern"

    @property
    def is_structure_defect(self) -> bool:
        """True when the expected structure itself is broken, not the document."""
        return self is FailureKind.INVALID_PATTERN


@dataclass(frozen=True)
class ValidationFailure:
    """A single mismatch between the expected structure and the document."""
    kind: FailureKind
    path: tuple[str, ...]                                # Tag names from the root to the failing node
    message: str
    detail: dict[str, Any] = field(default_factory=dict)
    element: DocumentElement | None = field(default=None, compare=False)  # Expected element involved

    @property
    def location(self) -> str:
        return "/" + "/".join(self.path)

    def __str__(self) -> str:
        return f"[{self.kind.name}] {self.location}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "path": list(self.path),
            "message": self.message,
            "detail": dict(self.detail),
        }


@dataclass
class ValidationResult:
    """Outcome of one validation call."""
    status: ValidationStatus
    failures: list[ValidationFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == ValidationStatus.PASS

    @property
    def failure(self) -> ValidationFailure | None:
        """First failure, or None when validation passed."""
        return self.failures[0] if self.failures else None

    @property
    def kind(self) -> FailureKind | None:
        return self.failure.kind if self.failure else None

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = pass, 1 = fail."""
        return 0 if self.passed else 1

    def __bool__(self) -> bool:
        return self.passed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "status": self.status.value,
            "exit_code": self.exit_code,
            "failures": [failure.to_dict() for failure in self.failures],
        }

    @classmethod
    def from_failures(cls, failures: list[ValidationFailure]) -> ValidationResult:
        status = ValidationStatus.FAIL if failures else ValidationStatus.PASS
        return cls(status=status, failures=list(failures))


class StructureMatcher:
    """Recursive matching of expected elements against actual nodes.

    A matcher only carries the matching mode; it keeps no state between
    calls, so one instance may serve any number of validations.
    """

    def __init__(self, collect_all: bool = False):
        self.collect_all = collect_all

    def match_tag(self, tag: Tag, node: Any, path: tuple[str, ...] = ()) -> list[ValidationFailure]:
        """Validate an actual node (and its subtree) against a ``Tag``."""
        is_element = node_kind(node) == NodeKind.ELEMENT
        actual_name = str(node.tag).lower() if is_element else f"#{node_kind(node).value}"
        node_path = path + (actual_name,)

        # Text and comment nodes never match a tag, whatever its name
        if not is_element or actual_name != tag.tag:
            return [ValidationFailure(
                FailureKind.TAG_NAME_MISMATCH,
                node_path,
                f"expected tag '{tag.tag}' but found '{actual_name}'" if is_element
                else f"expected tag '{tag.tag}' but found a {node_kind(node).value} node",
                {"expected": tag.tag, "actual": actual_name},
                tag,
            )]

        attributes = {str(name).lower(): value for name, value in (node.attributes or {}).items()}
        failures = self._check_illegal_attributes(tag, attributes, node_path)
        if failures and not self.collect_all:
            return failures

        failures.extend(self._check_expected_attributes(tag, attributes, node_path))
        if failures and not self.collect_all:
            return failures

        failures.extend(self._match_children(tag, node, node_path))
        return failures

    def match_content(self, element: DocumentElement, node: Any, path: tuple[str, ...] = ()) -> list[ValidationFailure]:
        """Validate a text or comment node against a leaf pattern."""
        try:
            if element.accepts(node):
                return []
        except re.error as e:
            return [self._invalid_pattern(element, getattr(element, "pattern", ""), e, path)]

        actual = node_text(node).strip() if node_kind(node) != NodeKind.ELEMENT else f"<{node.tag}>"
        return [ValidationFailure(
            FailureKind.CONTENT_MISMATCH,
            path,
            f"expected {element.describe()} but found {actual!r}",
            {"expected": element.describe(), "actual": actual},
            element,
        )]

    def _check_illegal_attributes(self, tag: Tag, attributes: dict[str, Any],
                                  path: tuple[str, ...]) -> list[ValidationFailure]:
        failures = []
        for name in sorted(tag.illegal_attributes):
            if name in attributes:
                failures.append(ValidationFailure(
                    FailureKind.ILLEGAL_ATTRIBUTE_PRESENT,
                    path,
                    f"attribute '{name}' must not be present",
                    {"attribute": name, "actual": attributes[name]},
                    tag,
                ))
                if not self.collect_all:
                    break
        return failures

    def _check_expected_attributes(self, tag: Tag, attributes: dict[str, Any],
                                   path: tuple[str, ...]) -> list[ValidationFailure]:
        failures = []
        for name, pattern in tag.expected_attributes.items():
            # Compile first so a broken pattern is never reported as a missing attribute
            try:
                compiled = tag.compiled_pattern(name)
            except re.error as e:
                failures.append(self._invalid_pattern(tag, pattern, e, path, attribute=name))
            else:
                if name not in attributes:
                    failures.append(ValidationFailure(
                        FailureKind.ATTRIBUTE_MISSING,
                        path,
                        f"attribute '{name}' is missing",
                        {"attribute": name, "pattern": pattern},
                        tag,
                    ))
                else:
                    value = attributes[name]
                    value = "" if value is None else str(value)
                    if compiled.fullmatch(value) is None:
                        failures.append(ValidationFailure(
                            FailureKind.ATTRIBUTE_VALUE_MISMATCH,
                            path,
                            f"attribute '{name}' has value {value!r} which does not match {pattern!r}",
                            {"attribute": name, "actual": value, "pattern": pattern},
                            tag,
                        ))
            if failures and not self.collect_all:
                break
        return failures

    def _match_children(self, tag: Tag, node: Any, path: tuple[str, ...]) -> list[ValidationFailure]:
        failures = []
        children = list(node.children or [])
        position = 0

        for expected_child in tag.expected_children:
            try:
                # Compile before scanning; an empty scan never reaches accepts()
                if isinstance(expected_child, (TextContent, Comment)):
                    expected_child.compiled_pattern()
                index = self._find_candidate(expected_child, children, position)
            except re.error as e:
                failures.append(self._invalid_pattern(expected_child, getattr(expected_child, "pattern", ""), e, path))
                return failures

            if index is None:
                logger.debug(f"No candidate for {expected_child.describe()} under /{'/'.join(path)} from position {position}")
                failures.append(ValidationFailure(
                    FailureKind.CHILD_NOT_FOUND,
                    path,
                    f"expected child {expected_child.describe()} not found at or after position {position}",
                    {"expected": expected_child.describe(), "position": position},
                    expected_child,
                ))
                return failures

            logger.debug(f"Matched {expected_child.describe()} to child {index} under /{'/'.join(path)}")
            child_failures = expected_child.match(children[index], self, path)
            failures.extend(child_failures)
            if child_failures and not self.collect_all:
                return failures
            position = index + 1

        return failures

    @staticmethod
    def _find_candidate(element: DocumentElement, children: list[Any], position: int) -> int | None:
        """Index of the first child at or after ``position`` that ``element`` accepts."""
        for index in range(position, len(children)):
            if element.accepts(children[index]):
                return index
        return None

    @staticmethod
    def _invalid_pattern(element: DocumentElement, pattern: str, error: re.error,
                         path: tuple[str, ...], attribute: str | None = None) -> ValidationFailure:
        logger.warning(f"Invalid pattern {pattern!r} in {element.describe()}: {error}")
        detail = {"pattern": pattern, "error": str(error)}
        if attribute is not None:
            detail["attribute"] = attribute
        return ValidationFailure(
            FailureKind.INVALID_PATTERN,
            path,
            f"pattern {pattern!r} in {element.describe()} does not compile: {error}",
            detail,
            element,
        )


class StructureValidator:
    """Validates actual document trees against expected structures."""

    def __init__(self, config: DocValidationConfig | None = None, collect_all: bool | None = None):
        """Initialize validator.

        Args:
            config: Configuration, defaults are used if None
            collect_all: Overrides ``config.matching.collect_all`` when given
        """
        self.config = config or DocValidationConfig()
        if collect_all is None:
            collect_all = self.config.matching.collect_all
        self.collect_all = collect_all

    def validate(self, expected: DocumentElement, actual: Any) -> ValidationResult:
        """Validate an actual tree against an expected structure.

        The expected structure is frozen first; it can no longer be modified
        afterwards.

        Args:
            expected: Root of the expected structure (usually a ``Tag``)
            actual: Root node of the actual document tree

        Returns:
            ValidationResult with PASS, or FAIL and the failures found

        Raises:
            PreconditionError: If either root is None or ``expected`` is not a DocumentElement
        """
        if expected is None:
            raise PreconditionError("Expected root must not be None", argument="expected")
        if actual is None:
            raise PreconditionError("Actual root must not be None", argument="actual")
        if not isinstance(expected, DocumentElement):
            raise PreconditionError(
                f"Expected root must be a DocumentElement, got {type(expected).__name__}",
                argument="expected",
            )

        expected.freeze()
        matcher = StructureMatcher(collect_all=self.collect_all)
        result = ValidationResult.from_failures(expected.match(actual, matcher, ()))

        logger.info(f"Validation of {expected.describe()} completed with status: {result.status.value}")
        if result.failures:
            logger.info(f"Found {len(result.failures)} failure(s), first: {result.failure}")

        return result

    def validate_and_raise(self, expected: DocumentElement, actual: Any) -> ValidationResult:
        """Validate and raise DocumentMismatchError if the document fails.

        Raises:
            DocumentMismatchError: If validation fails
        """
        result = self.validate(expected, actual)
        if not result.passed:
            raise DocumentMismatchError(result)
        return result


def validate(expected_root: DocumentElement, actual_root: Any,
             config: DocValidationConfig | None = None) -> ValidationResult:
    """Validate ``actual_root`` against ``expected_root`` with a one-off validator."""
    return StructureValidator(config).validate(expected_root, actual_root)
