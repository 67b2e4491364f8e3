from pathlib import Path
from unittest.mock import mock_open, patch

import pytest

from ravine_finder.config import load_config, load_search_config, parse_world_seed


def test_load_config_file_not_found():
    """Test that load_config raises FileNotFoundError if config file is missing."""
    with pytest.raises(FileNotFoundError):
        load_config(Path("nonexistent_config.yaml"))


def test_load_config_success():
    """Test that load_config successfully loads a valid config file."""
    mock_yaml_content = """
    search:
      seed: "ravines"
      radius: 8
    """
    with patch("builtins.open", mock_open(read_data=mock_yaml_content)):
        with patch("pathlib.Path.exists", return_value=True):
            config = load_config(Path("config.yaml"))
            assert config["search"]["seed"] == "ravines"
            assert config["search"]["radius"] == 8


def test_load_config_empty_file():
    """Test that an empty config file loads as an empty dictionary."""
    with patch("builtins.open", mock_open(read_data="")):
        with patch("pathlib.Path.exists", return_value=True):
            assert load_config(Path("config.yaml")) == {}


def test_load_search_config_file_not_found():
    """Test that load_search_config raises FileNotFoundError if config file is missing."""
    with pytest.raises(FileNotFoundError):
        load_search_config(Path("nonexistent_config.yaml"))


def test_load_search_config_hashes_text_seed():
    """Test that load_search_config converts a text seed the way the game does."""
    mock_yaml_content = """
    search:
      seed: "ravines"
      radius: 8
    """
    with patch("builtins.open", mock_open(read_data=mock_yaml_content)):
        with patch("pathlib.Path.exists", return_value=True):
            search_config = load_search_config(Path("config.yaml"))
            assert search_config["seed"] == 985444666
            assert search_config["radius"] == 8


def test_load_search_config_missing_section():
    """Test that load_search_config returns an empty dictionary if search section is missing."""
    mock_yaml_content = """
    output:
      path: "data/ravines.csv"
    """
    with patch("builtins.open", mock_open(read_data=mock_yaml_content)):
        with patch("pathlib.Path.exists", return_value=True):
            assert load_search_config(Path("config.yaml")) == {}


def test_load_search_config_default_path():
    """Test that load_search_config uses default config.yaml path when none provided."""
    mock_yaml_content = """
    search:
      seed: 42
      criteria:
        max_lower_y: 11
    """
    with patch("builtins.open", mock_open(read_data=mock_yaml_content)):
        with patch("pathlib.Path.exists", return_value=True):
            search_config = load_search_config()
            assert search_config["seed"] == 42
            assert search_config["criteria"] == {"max_lower_y": 11}


class TestParseWorldSeed:
    """Seed values follow the game's rules for numeric and text seeds."""

    def test_int_passes_through(self):
        assert parse_world_seed(123) == 123
        assert parse_world_seed(-4962768465676381896) == -4962768465676381896

    def test_numeric_string_is_parsed(self):
        assert parse_world_seed("12345") == 12345
        assert parse_world_seed(" -7 ") == -7

    def test_text_uses_string_hash_code(self):
        assert parse_world_seed("hello") == 99162322
        assert parse_world_seed("Hello World") == -862545276

    def test_unsigned_value_is_wrapped_to_signed(self):
        assert parse_world_seed(2**64 - 1) == -1
        assert parse_world_seed(2**63) == -(2**63)
