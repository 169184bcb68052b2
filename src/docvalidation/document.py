"""Actual document tree produced by a markup parser.

These dataclasses are the shape the validator consumes. Any object exposing
``tag``, ``attributes`` and ``children`` is accepted as an element, so other
parsers can hand their own nodes to the validator without converting them.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class NodeKind(str, Enum):
    """Kinds of node found in an actual document tree."""
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"


@dataclass
class TextNode:
    """Character data between elements."""
    text: str

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass
class CommentNode:
    """Markup comment (``<!-- ... -->``)."""
    text: str

    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass
class ElementNode:
    """Element of the actual document tree."""
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[Any] = field(default_factory=list)   # ElementNode | TextNode | CommentNode
    source_line: int | None = None                       # Line in the source markup, if known

    kind: ClassVar[NodeKind] = NodeKind.ELEMENT

    def append(self, child: Any) -> "ElementNode":
        """Append a child node and return self."""
        self.children.append(child)
        return self

    def element_children(self) -> list["ElementNode"]:
        """Child nodes that are elements, in document order."""
        return [child for child in self.children if node_kind(child) == NodeKind.ELEMENT]

    def iter(self) -> Iterator["ElementNode"]:
        """Depth-first iteration over this element and its descendant elements."""
        yield self
        for child in self.element_children():
            yield from child.iter()

    @property
    def text(self) -> str:
        """Concatenated text of this element's direct text children."""
        return "".join(child.text for child in self.children if node_kind(child) == NodeKind.TEXT)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "kind": self.kind.value,
            "tag": self.tag,
            "attributes": dict(self.attributes),
            "children": [
                child.to_dict() if hasattr(child, "to_dict") else {"kind": "text", "text": str(child)}
                for child in self.children
            ],
        }


def node_kind(node: Any) -> NodeKind:
    """Classify an arbitrary node of an actual tree.

    Nodes carrying a ``kind`` attribute are trusted; other objects count as
    elements when they expose a ``tag`` and as text otherwise.
    """
    kind = getattr(node, "kind", None)
    if isinstance(kind, NodeKind):
        return kind
    if hasattr(node, "tag") and hasattr(node, "children"):
        return NodeKind.ELEMENT
    return NodeKind.TEXT


def node_text(node: Any) -> str:
    """Text content of a text or comment node."""
    text = getattr(node, "text", node)
    return text if isinstance(text, str) else str(text)
