"""docvalidation - Validate rendered markup against declarative expected structures.

Test code describes the shape a page should have (tags, attribute patterns,
forbidden attributes and ordered children) and checks parsed markup against it.

Basic usage:
    from docvalidation import Tag, validate_markup

    expected = Tag("table").add_expected_attribute("border", "1").add_expected_child(Tag("tr"))
    result = validate_markup(expected, '<table border="1"><tr></tr></table>')

    if not result.passed:
        print(result.failure)
"""

__version__ = "0.1.0"
__author__ = "docvalidation contributors"
__description__ = "Validate rendered markup against declarative expected structures"

from .config import DocValidationConfig, load_config
from .document import CommentNode, ElementNode, NodeKind, TextNode
from .exceptions import (
    DocumentMismatchError,
    DocumentValidationError,
    MarkupParseError,
    PreconditionError,
    StructureDefinitionError,
    StructureFrozenError,
)
from .loader import load_structure, structure_from_dict
from .parser import DocumentParser, ParseResult, parse_markup
from .structure import Comment, DocumentElement, Tag, TextContent
from .validator import (
    FailureKind,
    StructureValidator,
    ValidationFailure,
    ValidationResult,
    ValidationStatus,
    validate,
)

__all__ = [
    "__version__",
    "__author__",
    "__description__",

    # Expected structure
    "DocumentElement",
    "Tag",
    "TextContent",
    "Comment",
    "load_structure",
    "structure_from_dict",

    # Actual document tree
    "ElementNode",
    "TextNode",
    "CommentNode",
    "NodeKind",
    "DocumentParser",
    "ParseResult",
    "parse_markup",

    # Validation
    "StructureValidator",
    "ValidationResult",
    "ValidationFailure",
    "ValidationStatus",
    "FailureKind",
    "validate",
    "validate_markup",
    "assert_document",

    # Configuration
    "DocValidationConfig",
    "load_config",

    # Errors
    "DocumentValidationError",
    "PreconditionError",
    "StructureFrozenError",
    "StructureDefinitionError",
    "MarkupParseError",
    "DocumentMismatchError",
]


def validate_markup(expected, markup, config=None):
    """Convenience function to parse markup and validate it in one step.

    Args:
        expected: Root of the expected structure
        markup: Rendered markup as string
        config: Optional DocValidationConfig

    Returns:
        ValidationResult

    Raises:
        MarkupParseError: If the markup could not be parsed
    """
    config = config or DocValidationConfig()
    parsed = DocumentParser(config.parser).parse_content(markup)
    if not parsed.success:
        raise MarkupParseError(f"Could not parse markup: {'; '.join(parsed.errors)}", parsed.errors)
    return StructureValidator(config).validate(expected, parsed.document)


def assert_document(expected, markup, config=None):
    """Parse and validate markup, raising DocumentMismatchError on failure."""
    result = validate_markup(expected, markup, config)
    if not result.passed:
        raise DocumentMismatchError(result)
    return result
