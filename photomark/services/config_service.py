"""
Configuration service for Photomark.

This module handles loading, saving, and managing editor settings.
Configuration is stored as JSON in ~/.config/photomark/config.json following
the XDG Base Directory Specification.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from photomark.services.logging_service import get_logger

# Default configuration directory following XDG Base Directory Specification
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "photomark"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    # Tool selected when the editor opens: arrow, text, circle, rectangle, freehand
    "default_tool": "arrow",
    "default_color": "#EF4444",
    "default_stroke_width": 3,
    # Swatches offered in the toolbar
    "palette": [
        "#EF4444", "#F59E0B", "#10B981", "#3B82F6",
        "#8B5CF6", "#EC4899", "#64748B", "#000000",
    ],
    "stroke_widths": [1, 2, 3, 5, 8],
    # Undo snapshots retained per editing session
    "history_limit": 20,
    # Flattened image encoding used on save
    "export_format": "JPEG",
    "export_quality": 90,
    # Where annotated photos and annotation sidecars are written
    "output_folder": str(Path.home() / "Pictures" / "Photomark"),
}


class ConfigService:
    """
    Service for managing editor configuration.

    Handles loading, saving, and accessing configuration values.
    Provides sensible defaults when config file is missing or corrupted.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/photomark/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = config_path or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    @property
    def path(self) -> Path:
        return self._config_path

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            if not isinstance(loaded_config, dict):
                raise ValueError("Config file does not contain a valid JSON object")

            # Loaded values override defaults
            self._deep_merge(self._config, loaded_config)
            self._logger.info(f"Configuration loaded from {self._config_path}")
            # Persist any new default keys
            self._save_to_file()

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except OSError as e:
            self._logger.warning(
                f"Could not read config file: {e}. Using defaults."
            )

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save_to_file(self) -> None:
        """Save current configuration to file."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")

        except OSError as e:
            self._logger.error(f"Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve.
            default: Default value if key doesn't exist.

        Returns:
            The configuration value, or default if not found.
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value (in memory only).

        Call save() to persist changes to disk.
        """
        self._config[key] = value
        self._logger.debug(f"Config key '{key}' set to '{value}'")

    def save(self) -> None:
        """Persist current configuration to disk."""
        self._save_to_file()

    def _int_setting(self, key: str, minimum: int = 1) -> int:
        """Integer value for key; hand-edited values like "20" are accepted."""
        value = self.get(key, DEFAULT_CONFIG[key])
        try:
            number = int(value)
        except (TypeError, ValueError):
            number = None
        if number is None or isinstance(value, bool) or number < minimum:
            self._logger.warning(f"Invalid value {value!r} for '{key}', using {DEFAULT_CONFIG[key]}")
            return DEFAULT_CONFIG[key]
        return number

    def _str_setting(self, key: str) -> str:
        value = self.get(key, DEFAULT_CONFIG[key])
        if not isinstance(value, str) or not value:
            self._logger.warning(f"Invalid value {value!r} for '{key}', using {DEFAULT_CONFIG[key]!r}")
            return DEFAULT_CONFIG[key]
        return value

    # ─── Drawing Defaults ─────────────────────────────────────────────────

    @property
    def default_tool(self) -> str:
        return self._str_setting("default_tool")

    @property
    def default_color(self) -> str:
        return self._str_setting("default_color")

    @property
    def default_stroke_width(self) -> int:
        return self._int_setting("default_stroke_width")

    @property
    def palette(self) -> List[str]:
        colors = self.get("palette", DEFAULT_CONFIG["palette"])
        if not isinstance(colors, list) or not colors or not all(isinstance(c, str) for c in colors):
            self._logger.warning(f"Invalid palette {colors!r}, using defaults")
            return list(DEFAULT_CONFIG["palette"])
        return list(colors)

    @property
    def stroke_widths(self) -> List[int]:
        widths = self.get("stroke_widths", DEFAULT_CONFIG["stroke_widths"])
        try:
            result = [int(w) for w in widths]
        except (TypeError, ValueError):
            result = []
        if not result or any(w < 1 for w in result):
            self._logger.warning(f"Invalid stroke widths {widths!r}, using defaults")
            return list(DEFAULT_CONFIG["stroke_widths"])
        return result

    # ─── History ──────────────────────────────────────────────────────────

    @property
    def history_limit(self) -> int:
        return self._int_setting("history_limit")

    # ─── Export Settings ──────────────────────────────────────────────────

    @property
    def export_format(self) -> str:
        return self._str_setting("export_format").upper()

    @property
    def export_quality(self) -> int:
        quality = self._int_setting("export_quality", minimum=0)
        if quality > 100:
            self._logger.warning(f"export_quality {quality} out of range, using {DEFAULT_CONFIG['export_quality']}")
            return DEFAULT_CONFIG["export_quality"]
        return quality

    @property
    def output_folder(self) -> str:
        return self._str_setting("output_folder")
