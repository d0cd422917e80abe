"""
Configuration service for Captioner.

This module handles loading, saving, and managing application settings.
Configuration is stored as JSON in ~/.config/captioner/config.json following
the XDG Base Directory Specification.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from captioner.services.logging_service import get_logger

# Default configuration directory following XDG Base Directory Specification
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "captioner"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "theme": "dark",
    # Where exported images and saved projects go by default
    "default_save_folder": str(Path.home() / "Pictures" / "Captioner"),
    "export_filename": "captioned-image.png",
    "project_filename": "my-project.json",
    # Alignment snapping while dragging/resizing, in image pixels
    "snapping": {
        "enabled": True,
        "threshold": 5,
    },
    # Resize gesture limits, in image pixels
    "resize": {
        "min_width": 50,
        "min_height": 20,
        "handle_size": 20,
    },
    # Degrees within which a released rotation snaps to a 45 degree step
    "rotation_snap_threshold": 4,
    # Maximum undo steps; 0 keeps every step
    "history_limit": 0,
}


class ConfigService:
    """
    Service for managing application configuration.

    Handles loading, saving, and accessing configuration values.
    Provides sensible defaults when config file is missing or corrupted.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/captioner/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = config_path or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

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

            if isinstance(loaded_config, dict):
                self._deep_merge(self._config, loaded_config)
                self._logger.info(f"Configuration loaded from {self._config_path}")
                # Save back to ensure any new default keys are persisted
                self._save_to_file()
            else:
                raise ValueError("Config file does not contain a valid JSON object")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except (OSError, PermissionError) as e:
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

        except (OSError, PermissionError) as e:
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

    def _section(self, key: str) -> Dict[str, Any]:
        value = self.get(key)
        return value if isinstance(value, dict) else DEFAULT_CONFIG[key]

    # ─── General Settings ─────────────────────────────────────────────────

    @property
    def theme(self) -> str:
        return self.get("theme", "dark")

    @property
    def default_save_folder(self) -> str:
        """Get the default folder for exports and projects."""
        return self.get("default_save_folder", DEFAULT_CONFIG["default_save_folder"])

    @property
    def export_filename(self) -> str:
        return self.get("export_filename", DEFAULT_CONFIG["export_filename"])

    @property
    def project_filename(self) -> str:
        return self.get("project_filename", DEFAULT_CONFIG["project_filename"])

    # ─── Editing Settings ─────────────────────────────────────────────────

    @property
    def snapping_enabled(self) -> bool:
        return bool(self._section("snapping").get("enabled", True))

    @property
    def snap_threshold(self) -> float:
        """Get the alignment snap distance in image pixels."""
        return float(self._section("snapping").get("threshold", 5))

    @property
    def min_width(self) -> float:
        return float(self._section("resize").get("min_width", 50))

    @property
    def min_height(self) -> float:
        return float(self._section("resize").get("min_height", 20))

    @property
    def handle_size(self) -> float:
        """Get the side of the square resize-handle hit region."""
        return float(self._section("resize").get("handle_size", 20))

    @property
    def rotation_snap_threshold(self) -> float:
        return float(self.get("rotation_snap_threshold", 4))

    @property
    def history_limit(self) -> int:
        """Get the undo step cap (0 = unbounded)."""
        return max(0, int(self.get("history_limit", 0)))
