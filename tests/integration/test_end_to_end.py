"""End-to-end tests: rendered markup through parsing and validation."""

import json

import pytest

from docvalidation import (
    Comment,
    DocumentMismatchError,
    FailureKind,
    MarkupParseError,
    Tag,
    TextContent,
    assert_document,
    load_structure,
    validate_markup,
)
from docvalidation.config import DocValidationConfig

pytestmark = pytest.mark.integration


def orders_structure():
    return (
        Tag("html")
        .add_expected_attribute("lang", "en|de")
        .add_expected_child(Tag("head").add_expected_child(Tag("title").add_expected_child(TextContent("Orders"))))
        .add_expected_child(
            Tag("body")
            .add_expected_attribute("class", r".*\borders\b.*")
            .add_expected_child(Tag("h1").add_illegal_attribute("style"))
            .add_expected_child(
                Tag("table")
                .add_expected_attribute("border", "1")
                .add_expected_child(Tag("tr").add_expected_child(Tag("th")))
                .add_expected_child(Tag("tr").add_expected_child(Tag("td").add_expected_child(TextContent(r"\d+"))))
            )
            .add_expected_child(Tag("p").add_expected_child(TextContent(r"Total: \d+ orders")))
        )
    )


class TestRenderedPage:
    """Validate a complete rendered page."""

    def test_page_matches(self, sample_page):
        result = validate_markup(orders_structure(), sample_page)

        assert result.passed, [str(failure) for failure in result.failures]

    def test_wrong_total_text(self, sample_page):
        page = sample_page.replace("Total: 2 orders", "Total: two orders")

        result = validate_markup(orders_structure(), page)

        assert result.kind == FailureKind.CHILD_NOT_FOUND
        assert result.failure.path == ("html", "body", "p")

    def test_comment_requires_keep_comments(self, sample_page):
        expected = Tag("html").add_expected_child(
            Tag("body").add_expected_child(Comment("order table")).add_expected_child(Tag("h1"))
        )

        assert not validate_markup(expected, sample_page).passed

        config = DocValidationConfig(**{"parser": {"keepComments": True}})
        assert validate_markup(expected, sample_page, config).passed

    def test_xhtml_backend(self):
        config = DocValidationConfig(**{"parser": {"backend": "xhtml"}})
        markup = '<html xmlns="http://www.w3.org/1999/xhtml"><body><table border="1"><tr/></table></body></html>'
        expected = Tag("html").add_expected_child(
            Tag("body").add_expected_child(Tag("table").add_expected_attribute("border", "1").add_expected_child(Tag("tr")))
        )

        assert validate_markup(expected, markup, config).passed

    def test_structure_shared_across_pages(self, table_structure):
        assert validate_markup(table_structure, '<table border="1"><tr></tr></table>').passed
        assert not validate_markup(table_structure, '<table border="0"><tr></tr></table>').passed
        assert table_structure.frozen is True


class TestTableExamples:
    """Border and row checks on a single table."""

    def test_border_one_passes(self, table_structure):
        result = validate_markup(table_structure, '<table border="1"><tr><td>x</td></tr></table>')
        assert result.passed

    def test_border_two_fails(self, table_structure):
        result = validate_markup(table_structure, '<table border="2"><tr><td>x</td></tr></table>')

        assert result.kind == FailureKind.ATTRIBUTE_VALUE_MISMATCH
        assert result.failure.detail["actual"] == "2"

    def test_missing_row_fails(self, table_structure):
        result = validate_markup(table_structure, '<table border="1"></table>')

        assert result.kind == FailureKind.CHILD_NOT_FOUND
        assert result.failure.path == ("table",)

    def test_forbidden_style(self):
        expected = Tag("table").add_illegal_attribute("style")
        result = validate_markup(expected, '<table style="color: red"></table>')
        assert result.kind == FailureKind.ILLEGAL_ATTRIBUTE_PRESENT

    def test_upper_case_markup(self, table_structure):
        assert validate_markup(table_structure, '<TABLE BORDER="1"><TR></TR></TABLE>').passed


class TestAssertDocument:
    """Assertion-style helper for test suites."""

    def test_returns_result_on_success(self, table_structure):
        result = assert_document(table_structure, '<table border="1"><tr></tr></table>')
        assert result.passed

    def test_raises_on_mismatch(self, table_structure):
        with pytest.raises(DocumentMismatchError) as exc_info:
            assert_document(table_structure, '<table border="2"><tr></tr></table>')

        error = exc_info.value
        assert isinstance(error, AssertionError)
        assert error.result.kind == FailureKind.ATTRIBUTE_VALUE_MISMATCH
        assert "border" in str(error)

    def test_unparseable_markup(self, table_structure):
        config = DocValidationConfig(**{"parser": {"backend": "xhtml"}})

        with pytest.raises(MarkupParseError) as exc_info:
            assert_document(table_structure, "<table><tr></table>", config)
        assert exc_info.value.errors


def test_definition_file_round_trip(tmp_path, sample_page):
    definition = {
        "tag": "html",
        "children": [
            {
                "tag": "body",
                "children": [
                    {"tag": "table", "attributes": {"border": "1", "summary": "Open .*"}, "illegal": ["style"]},
                    {"tag": "p", "children": [{"text": "Total: \\d+ orders"}]},
                ],
            }
        ],
    }
    path = tmp_path / "orders.json"
    path.write_text(json.dumps(definition), encoding="utf-8")

    assert validate_markup(load_structure(path), sample_page).passed
