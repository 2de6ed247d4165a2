"""Tests for the TOML-backed analyzer settings."""

import pytest
import toml

from tsgraph import config_manager
from tsgraph.config import DEFAULT_FILE_CONTENT_LIMIT, DEFAULT_SYMBOL_CONTENT_LIMIT
from tsgraph.config_manager import AnalyzerSettings


def test_defaults_without_config_file():
    """Test default settings when no config file exists."""
    settings = config_manager.load_settings()

    assert settings.file_content_limit == DEFAULT_FILE_CONTENT_LIMIT == 8000
    assert settings.symbol_content_limit == DEFAULT_SYMBOL_CONTENT_LIMIT == 3000
    assert settings.extra_skip_dirs == []
    assert settings.extra_skip_extensions == []


def test_save_and_load_round_trip():
    """Test saving and reloading settings."""
    settings = AnalyzerSettings(symbol_content_limit=1200, extra_skip_dirs=["generated"])

    assert config_manager.save_settings(settings) is True
    assert config_manager.load_settings() == settings


def test_save_preserves_other_sections(_isolated_config):
    """Test that saving keeps unrelated config sections."""
    _isolated_config.write_text('[ui]\ntheme = "dark"\n', encoding="utf-8")

    config_manager.save_settings(AnalyzerSettings(file_content_limit=100))

    data = toml.loads(_isolated_config.read_text(encoding="utf-8"))
    assert data["ui"] == {"theme": "dark"}
    assert data["analyzer"]["file_content_limit"] == 100


def test_unknown_keys_are_ignored(_isolated_config):
    """Test that unknown analyzer keys are ignored."""
    _isolated_config.write_text("[analyzer]\nfile_content_limit = 10\ncolour = 'red'\n", encoding="utf-8")

    settings = config_manager.load_settings()

    assert settings.file_content_limit == 10


def test_unreadable_config_falls_back_to_defaults(_isolated_config):
    """Test loading a malformed config file."""
    _isolated_config.write_text("[analyzer\nbroken =", encoding="utf-8")

    assert config_manager.load_settings() == AnalyzerSettings()


@pytest.mark.parametrize("section", [
    'extra_skip_dirs = "generated"',
    'file_content_limit = "10"',
    "symbol_content_limit = -1",
    "file_content_limit = true",
    "extra_skip_extensions = [1, 2]",
])
def test_wrongly_typed_section_falls_back_to_defaults(_isolated_config, section: str):
    """Test that wrongly typed analyzer values are rejected as a whole."""
    _isolated_config.write_text(f"[analyzer]\n{section}\n", encoding="utf-8")

    assert config_manager.load_settings() == AnalyzerSettings()


def test_validate_reports_the_bad_field():
    """Test that validation names the offending setting."""
    with pytest.raises(TypeError, match="extra_skip_dirs"):
        AnalyzerSettings(extra_skip_dirs="generated").validate()
    with pytest.raises(ValueError, match="file_content_limit"):
        AnalyzerSettings(file_content_limit=0).validate()


def test_update_setting_int_and_list():
    """Test updating integer and list settings from strings."""
    config_manager.update_setting("symbol_content_limit", "500")
    config_manager.update_setting("extra_skip_dirs", "generated, .cache,")

    settings = config_manager.load_settings()
    assert settings.symbol_content_limit == 500
    assert settings.extra_skip_dirs == ["generated", ".cache"]


def test_update_setting_rejects_bad_input():
    """Test rejecting unknown keys and invalid values."""
    with pytest.raises(KeyError):
        config_manager.update_setting("nope", "1")
    with pytest.raises(ValueError):
        config_manager.update_setting("file_content_limit", "lots")
    with pytest.raises(ValueError):
        config_manager.update_setting("file_content_limit", "0")
