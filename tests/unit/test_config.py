"""Unit tests for configuration management."""

import json
import logging

import pytest
from pydantic import ValidationError

from docvalidation.config import (
    DocValidationConfig,
    LogLevel,
    ParserBackend,
    create_default_config,
    find_config_file,
    load_config,
)


class TestDocValidationConfig:
    """Test the configuration models."""

    def test_defaults(self):
        config = create_default_config()
        assert config.parser.backend == ParserBackend.HTML
        assert config.parser.keep_comments is False
        assert config.parser.keep_whitespace is False
        assert config.matching.collect_all is False
        assert config.logging.level == LogLevel.WARN

    def test_config_from_dict(self):
        config = DocValidationConfig(**{
            "parser": {"backend": "xhtml", "keepComments": True},
            "matching": {"collectAll": True},
            "logging": {"level": "debug"},
        })
        assert config.parser.backend == ParserBackend.XHTML
        assert config.parser.keep_comments is True
        assert config.matching.collect_all is True
        assert config.logging.level == LogLevel.DEBUG

    def test_populate_by_field_name(self):
        config = DocValidationConfig(**{"parser": {"keep_whitespace": True}})
        assert config.parser.keep_whitespace is True

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            DocValidationConfig(**{"output": {}})

    def test_invalid_backend_rejected(self):
        with pytest.raises(ValidationError):
            DocValidationConfig(**{"parser": {"backend": "lxml"}})

    @pytest.mark.parametrize("level,expected", [
        (LogLevel.ERROR, logging.ERROR),
        (LogLevel.WARN, logging.WARNING),
        (LogLevel.INFO, logging.INFO),
        (LogLevel.DEBUG, logging.DEBUG),
    ])
    def test_log_level_mapping(self, level, expected):
        assert level.to_logging_level() == expected


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load_explicit_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"matching": {"collectAll": True}}), encoding="utf-8")

        assert load_config(path).matching.collect_all is True

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ValueError, match="Config file not found"):
            load_config(tmp_path / "missing.json")

    def test_no_config_found_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("docvalidation.config.find_config_file", lambda start_dir=None: None)

        assert load_config() == create_default_config()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{broken", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"parser": {"backend": "lxml"}}), encoding="utf-8")

        with pytest.raises(ValueError, match="Failed to load config"):
            load_config(path)

    def test_search_parent_directories(self, tmp_path, monkeypatch):
        (tmp_path / ".docvalidation.json").write_text(
            json.dumps({"parser": {"backend": "xhtml"}}), encoding="utf-8"
        )
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == (tmp_path / ".docvalidation.json").resolve()

        monkeypatch.chdir(nested)
        assert load_config().parser.backend == ParserBackend.XHTML
