"""Loading expected structures from JSON definitions.

A definition is a tree of nodes, each being exactly one of a tag, a text
pattern or a comment pattern:

    {
        "tag": "table",
        "attributes": {"border": "1"},
        "illegal": ["style"],
        "children": [{"tag": "tr"}, {"text": "Total: \\d+"}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import StructureDefinitionError
from .structure import Comment, DocumentElement, Tag, TextContent

logger = logging.getLogger(__name__)


class ElementDefinition(BaseModel):
    """One node of a structure definition."""
    tag: str | None = None
    text: str | None = None
    comment: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    illegal: list[str] = Field(default_factory=list)
    children: list[ElementDefinition] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_single_kind(self) -> ElementDefinition:
        kinds = [name for name in ("tag", "text", "comment") if getattr(self, name) is not None]
        if len(kinds) != 1:
            raise ValueError(f"exactly one of 'tag', 'text' or 'comment' is required, got {kinds or 'none'}")
        if self.tag is None and (self.attributes or self.illegal or self.children):
            raise ValueError(f"'{kinds[0]}' nodes cannot have attributes, illegal attributes or children")
        return self

    def build(self) -> DocumentElement:
        """Build the expected-structure element this definition describes."""
        if self.text is not None:
            return TextContent(self.text)
        if self.comment is not None:
            return Comment(self.comment)

        tag = Tag(self.tag)
        for name, pattern in self.attributes.items():
            tag.add_expected_attribute(name, pattern)
        for name in self.illegal:
            tag.add_illegal_attribute(name)
        for child in self.children:
            tag.add_expected_child(child.build())
        return tag


def structure_from_dict(data: dict[str, Any], source: str = "<dict>") -> DocumentElement:
    """Build an expected structure from a parsed definition.

    Raises:
        StructureDefinitionError: If the definition is malformed
    """
    try:
        definition = ElementDefinition.model_validate(data)
    except ValidationError as e:
        violations = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        ]
        raise StructureDefinitionError(
            f"Invalid structure definition in {source} ({len(violations)} error(s))",
            source=source,
            violations=violations,
        ) from e
    return definition.build()


def load_structure(path: str | Path) -> DocumentElement:
    """Load an expected structure from a JSON file.

    Args:
        path: Path to the JSON definition

    Returns:
        Root element of the expected structure

    Raises:
        StructureDefinitionError: If the file is missing, not JSON or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise StructureDefinitionError(f"Structure definition not found: {path}", source=str(path)) from e
    except json.JSONDecodeError as e:
        raise StructureDefinitionError(f"Invalid JSON in {path}: {e}", source=str(path)) from e

    logger.debug(f"Loaded structure definition from {path}")
    return structure_from_dict(data, source=str(path))
