"""TOML config loading for csssource.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "csssource.toml"


@dataclass
class HighlightConfig:
    color: bool = True
    ignore_errors: bool = True


@dataclass
class MapConfig:
    enabled: bool = True


@dataclass
class CssSourceConfig:
    highlight: HighlightConfig = field(default_factory=HighlightConfig)
    map: MapConfig = field(default_factory=MapConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find csssource.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> CssSourceConfig:
    """Parse a csssource.toml file into a CssSourceConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = CssSourceConfig()

    if "highlight" in data:
        hl = data["highlight"]
        config.highlight = HighlightConfig(
            color=hl.get("color", True),
            ignore_errors=hl.get("ignore_errors", True),
        )

    if "map" in data:
        config.map = MapConfig(enabled=data["map"].get("enabled", True))

    return config


def discover_config(start_path: Path | None = None) -> CssSourceConfig:
    """Load the nearest csssource.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return CssSourceConfig()
