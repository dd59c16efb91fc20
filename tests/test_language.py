"""Tests for loading compiled grammars on the host side."""

import logging

import pytest

from treesit_ensure import compiler, language
from treesit_ensure.errors import LanguageNotReady


def test_artifact_path(destination):
    assert language.artifact_path("tsx", destination) == destination / compiler.artifact_name("tsx")


def test_artifact_path_defaults_to_settings(data_dir):
    assert language.artifact_path("c").parent == data_dir / "tree-sitter"


class TestLanguageReady:
    def test_missing_artifact(self, destination, caplog):
        with caplog.at_level(logging.WARNING):
            assert language.language_ready("python", destination=destination) is False
        assert "not-found" in caplog.text
        assert "python" in caplog.text

    def test_quiet_does_not_log(self, destination, caplog):
        with caplog.at_level(logging.WARNING):
            assert language.language_ready("python", True, destination) is False
        assert caplog.records == []

    def test_unloadable_artifact(self, destination, caplog):
        destination.mkdir()
        language.artifact_path("python", destination).write_bytes(b"not a shared library")
        with caplog.at_level(logging.WARNING):
            assert language.language_ready("python", destination=destination) is False
        assert "load-failed" in caplog.text


class TestLoadLanguage:
    def test_missing_artifact_raises(self, destination):
        with pytest.raises(LanguageNotReady) as excinfo:
            language.load_language("python", destination)
        assert excinfo.value.language == "python"
        assert excinfo.value.reason.startswith("not-found")

    def test_create_parser_needs_artifact(self, destination):
        with pytest.raises(LanguageNotReady):
            language.create_parser("python", destination)
