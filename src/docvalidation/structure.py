"""Expected-structure model.

An expected structure is a tree of pattern nodes built by test code and then
handed to the validator. ``Tag`` constrains one element's name, attributes
and ordered children; ``TextContent`` and ``Comment`` are leaf patterns over
character data and comments.

Basic usage:
    table = Tag("table").add_expected_attribute("border", "1")
    table.add_expected_child(Tag("tr")).add_illegal_attribute("style")

All names are lower-cased on the way in. Add-operations are only allowed
during the builder phase: the validator freezes the tree when validation
begins, after which the tree is read-only and can be shared freely.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .document import NodeKind, node_kind, node_text
from .exceptions import PreconditionError, StructureFrozenError

if TYPE_CHECKING:
    from .validator import StructureMatcher, ValidationFailure


class DocumentElement(ABC):
    """Something that can be matched against a node of an actual tree."""

    @abstractmethod
    def accepts(self, node: Any) -> bool:
        """Whether ``node`` is a candidate for this element during a child scan."""
        pass

    @abstractmethod
    def match(self, node: Any, matcher: StructureMatcher, path: tuple[str, ...] = ()) -> list[ValidationFailure]:
        """Validate a node against this element in depth.

        Args:
            node: Actual node (during a child scan, one ``accepts`` selected)
            matcher: Matcher driving the current validation
            path: Tag names from the actual root down to the node's parent

        Returns:
            List of failures (empty if the node satisfies this element)
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """Short label used in diagnostics."""
        pass

    def freeze(self) -> None:
        """End the builder phase. Leaf patterns have nothing to freeze."""
        pass


class Tag(DocumentElement):
    """Expected element: tag name, attribute rules and ordered children."""

    def __init__(self, tag: str):
        """Create the tag element.

        Args:
            tag: The tag name, compared case-insensitively
        """
        if tag is None:
            raise PreconditionError("Tag name must not be None", argument="tag")
        self._tag = tag.lower()
        self._expected_attributes: dict[str, str] = {}
        self._expected_children: list[DocumentElement] = []
        self._illegal_attributes: set[str] = set()
        self._compiled: dict[str, re.Pattern[str]] = {}
        self._frozen = False

    def add_expected_attribute(self, name: str, pattern: str) -> Tag:
        """Require an attribute whose whole value matches a regular expression.

        The pattern is not compiled here; a broken pattern is reported by the
        validator as ``INVALID_PATTERN``. Registering the same name twice
        replaces the earlier pattern.

        Args:
            name: The name of the attribute
            pattern: The pattern the value must fully match

        Returns:
            This tag
        """
        self._check_mutable()
        if name is None or pattern is None:
            raise PreconditionError("Attribute name and pattern must not be None", argument="name")
        key = name.lower()
        self._expected_attributes[key] = pattern
        self._compiled.pop(key, None)
        return self

    def add_expected_child(self, element: DocumentElement) -> Tag:
        """Append an expected child. Children must be added in document order.

        Args:
            element: The element to add

        Returns:
            This tag
        """
        self._check_mutable()
        if element is None:
            raise PreconditionError("Expected child must not be None", argument="element")
        if not isinstance(element, DocumentElement):
            raise PreconditionError(
                f"Expected child must be a DocumentElement, got {type(element).__name__}",
                argument="element",
            )
        self._expected_children.append(element)
        return self

    def add_illegal_attribute(self, name: str) -> Tag:
        """Forbid an attribute on the matched element.

        Args:
            name: The name of the attribute

        Returns:
            This tag
        """
        self._check_mutable()
        if name is None:
            raise PreconditionError("Attribute name must not be None", argument="name")
        self._illegal_attributes.add(name.lower())
        return self

    @property
    def tag(self) -> str:
        """The (lower-cased) tag name this element represents."""
        return self._tag

    @property
    def expected_attributes(self) -> Mapping[str, str]:
        """Read-only view of attribute name to value pattern."""
        return MappingProxyType(self._expected_attributes)

    @property
    def expected_children(self) -> tuple[DocumentElement, ...]:
        return tuple(self._expected_children)

    @property
    def illegal_attributes(self) -> frozenset[str]:
        return frozenset(self._illegal_attributes)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def compiled_pattern(self, name: str) -> re.Pattern[str]:
        """Compiled value pattern for an expected attribute, cached per tag.

        Raises:
            KeyError: If no pattern is registered under ``name``
            re.error: If the registered pattern does not compile
        """
        key = name.lower()
        compiled = self._compiled.get(key)
        if compiled is None:
            compiled = re.compile(self._expected_attributes[key])
            self._compiled[key] = compiled
        return compiled

    def freeze(self) -> None:
        if self._frozen:
            return
        self._frozen = True
        for child in self._expected_children:
            child.freeze()

    def accepts(self, node: Any) -> bool:
        return node_kind(node) == NodeKind.ELEMENT and str(node.tag).lower() == self._tag

    def match(self, node: Any, matcher: StructureMatcher, path: tuple[str, ...] = ()) -> list[ValidationFailure]:
        return matcher.match_tag(self, node, path)

    def describe(self) -> str:
        return f"<{self._tag}>"

    def _check_mutable(self) -> None:
        if self._frozen:
            raise StructureFrozenError(f"{self} is frozen; expected structures are read-only once validated")

    def __repr__(self) -> str:
        return f"[tag = '{self._tag}']"


class _PatternLeaf(DocumentElement):
    """Leaf pattern over the stripped text of a text-like node."""

    content_kind: NodeKind = NodeKind.TEXT
    label: str = "text"

    def __init__(self, pattern: str):
        if pattern is None:
            raise PreconditionError(f"{type(self).__name__} pattern must not be None", argument="pattern")
        self._pattern = pattern
        self._compiled: re.Pattern[str] | None = None

    @property
    def pattern(self) -> str:
        return self._pattern

    def compiled_pattern(self) -> re.Pattern[str]:
        """Compiled pattern, cached on first use.

        Raises:
            re.error: If the pattern does not compile
        """
        if self._compiled is None:
            self._compiled = re.compile(self._pattern)
        return self._compiled

    def accepts(self, node: Any) -> bool:
        compiled = self.compiled_pattern()
        if node_kind(node) != self.content_kind:
            return False
        text = node_text(node).strip()
        if not text and self.content_kind == NodeKind.TEXT:
            return False
        return compiled.fullmatch(text) is not None

    def match(self, node: Any, matcher: StructureMatcher, path: tuple[str, ...] = ()) -> list[ValidationFailure]:
        return matcher.match_content(self, node, path)

    def describe(self) -> str:
        return f"{self.label}({self._pattern!r})"

    def __repr__(self) -> str:
        return f"[{self.label} = '{self._pattern}']"


class TextContent(_PatternLeaf):
    """Expected text content; the stripped text must fully match ``pattern``."""

    content_kind = NodeKind.TEXT
    label = "text"


class Comment(_PatternLeaf):
    """Expected markup comment; the stripped comment must fully match ``pattern``."""

    content_kind = NodeKind.COMMENT
    label = "comment"
