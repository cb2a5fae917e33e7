"""
Settings Manager.

Handles editor settings with JSON file storage.
"""

import base64
import json
import logging
import os
from dataclasses import dataclass, field, asdict, fields
from typing import Optional
from pathlib import Path

from models import DrawMode

logger = logging.getLogger(__name__)


def _known_fields(cls, data: dict) -> dict:
    """Keep only keys that ``cls`` declares, so old files still load."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass
class EditorSettings:
    """Pointer interaction settings."""
    draw_mode: str = DrawMode.CORNER.value
    snap_to_grid: bool = True
    grid_snap_step: float = 10.0
    show_grid: bool = True
    grid_size: int = 10
    drag_threshold: float = 3.0
    handle_size: int = 8


@dataclass
class DrawingDefaults:
    """Style given to newly created shapes."""
    fill_color: str = "#4f46e5"
    stroke_color: str = "#000000"
    stroke_width: float = 1.0
    number_of_sides: int = 5
    text_font: str = "Arial"
    text_font_size: float = 24.0
    text_color: str = "#000000"


@dataclass
class CanvasSettings:
    """Exported canvas and script settings."""
    width: int = 800
    height: int = 600
    background: str = "#ffffff"
    project_name: str = "Tkinter Canvas"
    canvas_var_name: str = "c"
    auto_comments: bool = True


@dataclass
class AppSettings:
    """Complete application settings."""
    editor: EditorSettings = field(default_factory=EditorSettings)
    drawing: DrawingDefaults = field(default_factory=DrawingDefaults)
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    recent_files: list = field(default_factory=list)
    recent_files_max: int = 10
    window_geometry: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "editor": asdict(self.editor),
            "drawing": asdict(self.drawing),
            "canvas": asdict(self.canvas),
            "recent_files": self.recent_files,
            "recent_files_max": self.recent_files_max,
            "window_geometry": self.window_geometry,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """
        Create from dictionary.

        Unknown keys are ignored and missing keys keep their defaults.
        """
        settings = cls()

        if "editor" in data:
            settings.editor = EditorSettings(**_known_fields(EditorSettings, data["editor"]))
        if "drawing" in data:
            settings.drawing = DrawingDefaults(**_known_fields(DrawingDefaults, data["drawing"]))
        if "canvas" in data:
            settings.canvas = CanvasSettings(**_known_fields(CanvasSettings, data["canvas"]))
        if "recent_files" in data:
            settings.recent_files = list(data["recent_files"])
        if "recent_files_max" in data:
            settings.recent_files_max = int(data["recent_files_max"])
        if "window_geometry" in data:
            settings.window_geometry = dict(data["window_geometry"])

        return settings


class SettingsManager:
    """
    Manages application settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/TkCanvasEditor/settings.json
    - Linux: ~/.config/TkCanvasEditor/settings.json
    - macOS: ~/Library/Application Support/TkCanvasEditor/settings.json
    """

    APP_NAME = "TkCanvasEditor"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    @property
    def editor(self) -> EditorSettings:
        return self._settings.editor

    @property
    def drawing(self) -> DrawingDefaults:
        return self._settings.drawing

    @property
    def canvas(self) -> CanvasSettings:
        return self._settings.canvas

    # Convenience properties for common settings
    @property
    def draw_mode(self) -> DrawMode:
        try:
            return DrawMode(self._settings.editor.draw_mode)
        except ValueError:
            logger.warning(f"Unknown draw mode '{self._settings.editor.draw_mode}', using corner")
            return DrawMode.CORNER

    @draw_mode.setter
    def draw_mode(self, value: DrawMode):
        self._settings.editor.draw_mode = DrawMode(value).value
        self.save()

    @property
    def snap_step(self) -> float:
        """Grid step applied to pointer positions, or 0 when snapping is off."""
        editor = self._settings.editor
        return float(editor.grid_snap_step) if editor.snap_to_grid else 0.0

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            logger.debug(f"Loaded settings from {self._settings_path}")
            return True
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Error loading settings: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Error saving settings: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()

    def add_recent_file(self, file_path: str):
        """Add a file to recent files list."""
        if file_path in self._settings.recent_files:
            self._settings.recent_files.remove(file_path)

        self._settings.recent_files.insert(0, file_path)
        self._settings.recent_files = self._settings.recent_files[:self._settings.recent_files_max]

        self.save()

    def get_recent_files(self) -> list:
        """Get recent files list, filtered to existing files."""
        existing = [f for f in self._settings.recent_files if os.path.exists(f)]
        if len(existing) != len(self._settings.recent_files):
            self._settings.recent_files = existing
            self.save()
        return existing

    def save_window_geometry(self, geometry: bytes, state: bytes):
        """Save window geometry and state."""
        self._settings.window_geometry = {
            "geometry": base64.b64encode(geometry).decode("ascii"),
            "state": base64.b64encode(state).decode("ascii"),
        }
        self.save()

    def get_window_geometry(self) -> tuple:
        """Get saved window geometry and state."""
        geo = self._settings.window_geometry
        if not geo:
            return None, None

        try:
            geometry = base64.b64decode(geo.get("geometry", ""))
            state = base64.b64decode(geo.get("state", ""))
            return geometry, state
        except ValueError:
            return None, None


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
