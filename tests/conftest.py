"""Pytest configuration and fixtures for docvalidation tests."""

import pytest

from docvalidation import DocumentParser, StructureValidator, Tag
from docvalidation.config import ParserBackend, ParserConfig


@pytest.fixture
def validator():
    """Validator stopping at the first failure."""
    return StructureValidator()


@pytest.fixture
def collecting_validator():
    """Validator reporting every failure."""
    return StructureValidator(collect_all=True)


@pytest.fixture
def html_parser():
    """Lenient HTML parser."""
    return DocumentParser()


@pytest.fixture
def xhtml_parser():
    """Strict XHTML parser."""
    return DocumentParser(ParserConfig(backend=ParserBackend.XHTML))


@pytest.fixture
def table_structure():
    """Expected table with a border of 1 and one row."""
    return Tag("table").add_expected_attribute("border", "1").add_expected_child(Tag("tr"))


@pytest.fixture
def sample_page():
    """Small rendered page used by parser and end-to-end tests."""
    return """<!DOCTYPE html>
<html lang="en">
  <head>
    <title>Orders</title>
  </head>
  <body class="page orders">
    <!-- order table -->
    <h1 id="title">Orders</h1>
    <table border="1" summary="Open orders">
      <tr><th>Id</th><th>Total</th></tr>
      <tr><td>1</td><td>42.50</td></tr>
    </table>
    <p>Total: 2 orders</p>
  </body>
</html>"""
