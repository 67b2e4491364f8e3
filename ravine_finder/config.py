"""
Configuration loading for the ravine search.

Handles loading search parameters from config.yaml files.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


def _java_string_hash(text: str) -> int:
    """String.hashCode, the game's rule for turning a text seed into a number."""
    value = 0
    for char in text:
        value = (31 * value + ord(char)) & 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def parse_world_seed(seed: Union[int, str]) -> int:
    """
    Convert a configured seed into a signed 64-bit world seed.

    Args:
        seed: Integer seed, numeric string, or arbitrary text

    Returns:
        Signed 64-bit seed (text seeds are hashed like the game does)
    """
    if isinstance(seed, str):
        text = seed.strip()
        try:
            value = int(text)
        except ValueError:
            value = _java_string_hash(text)
    else:
        value = int(seed)

    value &= (1 << 64) - 1
    return value - (1 << 64) if value >> 63 else value


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load full configuration from config.yaml.

    Args:
        config_path: Path to config.yaml file

    Returns:
        Dictionary with full configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_path is None:
        config_path = Path("config.yaml")

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return config or {}


def load_search_config(config_path: Path = Path("config.yaml")) -> Dict[str, Any]:
    """
    Load the search section from config.yaml.

    Args:
        config_path: Path to config.yaml file (defaults to "config.yaml" in current directory)

    Returns:
        Dictionary with the search configuration (seed is converted to a numeric world seed)

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    search_config = load_config(config_path).get("search") or {}

    if "seed" in search_config:
        search_config["seed"] = parse_world_seed(search_config["seed"])

    return search_config
