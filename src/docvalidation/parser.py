"""Markup parsers producing actual document trees.

Two backends are available: ``html`` runs BeautifulSoup with the standard
``html.parser`` tree builder and accepts whatever a browser would; ``xhtml``
parses well-formed markup with defusedxml and reports malformed input as a
parse error. Neither backend inserts implied elements, so ``<table><tr>``
stays exactly as written.

Whitespace-only text is dropped unless ``keep_whitespace`` is set. When it
is kept, the ``html`` backend delivers a run containing a newline collapsed
to ``"\\n"`` (that is how ``html.parser`` hands it to BeautifulSoup), while
``xhtml`` keeps it verbatim.
"""

import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup
from bs4 import Comment as SoupComment
from bs4 import Declaration, Doctype, NavigableString, ProcessingInstruction
from bs4 import Tag as SoupTag
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import DefusedXMLParser

from .config import ParserBackend, ParserConfig
from .constants import ATTRIBUTE_TOKEN_SEPARATOR, DOCUMENT_ROOT_TAG
from .document import CommentNode, ElementNode, TextNode

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Parsing result with success/error information."""
    document: ElementNode | None = None
    success: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    parse_time_ms: float = 0.0
    source: str | None = None
    backend: str = ParserBackend.HTML.value
    element_count: int = 0


class DocumentParser:
    """Turns rendered markup into an ``ElementNode`` tree."""

    def __init__(self, config: ParserConfig | None = None):
        """Initialize parser with configuration.

        Args:
            config: Parser configuration, defaults are used if None
        """
        self.config = config or ParserConfig()

    def parse_file(self, file_path: Path) -> ParseResult:
        """Parse a markup file.

        Args:
            file_path: Path to the HTML/XHTML file

        Returns:
            ParseResult with the document root or error information
        """
        try:
            content = Path(file_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            result = ParseResult(success=False, source=str(file_path), backend=self._backend.value)
            result.errors.append(f"Could not read {file_path}: {e}")
            return result
        return self.parse_content(content, str(file_path))

    def parse_content(self, markup: str, source: str = "<string>") -> ParseResult:
        """Parse markup from a string.

        Args:
            markup: Raw markup
            source: Name used in error messages

        Returns:
            ParseResult with the document root or error information
        """
        start_time = time.time()
        result = ParseResult(source=source, backend=self._backend.value)

        if markup is None or not markup.strip():
            result.success = False
            result.errors.append("Empty document")
        else:
            try:
                if self._backend == ParserBackend.XHTML:
                    result.document = self._parse_xhtml(markup)
                else:
                    result.document = self._parse_html(markup)
            except (ET.ParseError, DefusedXmlException) as e:
                result.success = False
                result.errors.append(f"XML parse error: {e}")

            if result.success and result.document is None:
                result.success = False
                result.errors.append("No root element found")

        if result.document is not None:
            result.element_count = sum(1 for _ in result.document.iter())

        result.parse_time_ms = (time.time() - start_time) * 1000
        logger.debug(
            f"Parsed {source} with {result.backend} backend in {result.parse_time_ms:.1f} ms "
            f"({result.element_count} elements, success={result.success})"
        )
        return result

    @property
    def _backend(self) -> ParserBackend:
        return ParserBackend(self.config.backend)

    def _parse_html(self, markup: str) -> ElementNode | None:
        soup = BeautifulSoup(markup.replace("\ufeff", ""), "html.parser")

        top_level = [child for child in soup.contents if isinstance(child, SoupTag)]
        if not top_level:
            return None

        root = next((tag for tag in top_level if tag.name == DOCUMENT_ROOT_TAG), top_level[0])
        return self._convert_soup_tag(root)

    def _convert_soup_tag(self, tag: SoupTag) -> ElementNode:
        attributes = {}
        for name, value in tag.attrs.items():
            if isinstance(value, (list, tuple)):
                value = ATTRIBUTE_TOKEN_SEPARATOR.join(value)
            attributes[name] = value

        element = ElementNode(tag.name, attributes, source_line=getattr(tag, "sourceline", None))

        for child in tag.children:
            if isinstance(child, SoupTag):
                element.append(self._convert_soup_tag(child))
            elif isinstance(child, SoupComment):
                if self.config.keep_comments:
                    element.append(CommentNode(str(child)))
            elif isinstance(child, (Doctype, Declaration, ProcessingInstruction)):
                continue
            elif isinstance(child, NavigableString):
                self._append_text(element, str(child))

        return element

    def _parse_xhtml(self, markup: str) -> ElementNode | None:
        builder = ET.TreeBuilder(insert_comments=self.config.keep_comments)
        parser = DefusedXMLParser(target=builder)
        parser.feed(markup.replace("\ufeff", ""))
        root = parser.close()
        return self._convert_xml_element(root)

    def _convert_xml_element(self, elem: ET.Element) -> ElementNode:
        attributes = {_local_name(name): value for name, value in elem.attrib.items()}
        element = ElementNode(_local_name(elem.tag), attributes)

        if elem.text:
            self._append_text(element, elem.text)

        for child in elem:
            if child.tag is ET.Comment:
                element.append(CommentNode(child.text or ""))
            elif isinstance(child.tag, str):
                element.append(self._convert_xml_element(child))
            # Processing instructions carry no document structure

            if child.tail:
                self._append_text(element, child.tail)

        return element

    def _append_text(self, element: ElementNode, text: str) -> None:
        if text.strip() or self.config.keep_whitespace:
            element.append(TextNode(text))


def _local_name(name: Any) -> str:
    """Strip an ``{namespace}`` prefix from an ElementTree name."""
    name = str(name)
    return name.split("}")[-1] if "}" in name else name


def parse_markup(markup: str, config: ParserConfig | None = None) -> ParseResult:
    """Convenience function to parse markup with a one-off parser."""
    return DocumentParser(config).parse_content(markup)
