"""
Unit tests for the settings manager.

Tests:
- Defaults and JSON round trip through the settings file
- Tolerance of unknown keys and broken files
- Draw mode and snapping accessors
- Recent files and window geometry
"""

import json

from models import DrawMode
from services.settings_manager import (
    AppSettings, SettingsManager, get_settings, reset_settings_manager,
)


class TestAppSettings:
    """Tests for AppSettings serialization."""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.editor.draw_mode == "corner"
        assert settings.drawing.number_of_sides == 5
        assert settings.canvas.width == 800
        assert settings.recent_files == []

    def test_unknown_keys_ignored(self):
        data = {
            "editor": {"snap_to_grid": False, "retired_option": 1},
            "canvas": {"width": 1024},
            "plugins": ["x"],
        }
        settings = AppSettings.from_dict(data)
        assert settings.editor.snap_to_grid is False
        assert settings.editor.grid_snap_step == 10.0
        assert settings.canvas.width == 1024
        assert settings.canvas.height == 600


class TestPersistence:
    """Tests for loading and saving the settings file."""

    def test_missing_file_uses_defaults(self, settings_manager, settings_file):
        assert not settings_file.exists()
        assert settings_manager.settings_path == str(settings_file)
        assert settings_manager.canvas.project_name == "Tkinter Canvas"

    def test_save_and_reload(self, settings_manager, settings_file):
        settings_manager.canvas.background = "#202020"
        settings_manager.drawing.stroke_width = 4
        assert settings_manager.save()

        reloaded = SettingsManager(config_override=str(settings_file))
        assert reloaded.canvas.background == "#202020"
        assert reloaded.drawing.stroke_width == 4

    def test_file_is_json(self, settings_manager, settings_file):
        settings_manager.save()
        data = json.loads(settings_file.read_text(encoding="utf-8"))
        assert set(data) >= {"editor", "drawing", "canvas", "recent_files"}

    def test_broken_file_keeps_defaults(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{not json", encoding="utf-8")
        manager = SettingsManager(config_override=str(settings_file))
        assert manager.editor.snap_to_grid is True

    def test_reset(self, settings_manager):
        settings_manager.canvas.width = 100
        settings_manager.reset()
        assert settings_manager.canvas.width == 800


class TestEditorAccessors:
    """Tests for draw mode and snapping accessors."""

    def test_draw_mode_setter_saves(self, settings_manager, settings_file):
        settings_manager.draw_mode = DrawMode.CENTER
        assert settings_manager.draw_mode == DrawMode.CENTER
        data = json.loads(settings_file.read_text(encoding="utf-8"))
        assert data["editor"]["draw_mode"] == "center"

    def test_unknown_draw_mode_falls_back(self, settings_manager):
        settings_manager.editor.draw_mode = "sideways"
        assert settings_manager.draw_mode == DrawMode.CORNER

    def test_snap_step(self, settings_manager):
        assert settings_manager.snap_step == 10.0
        settings_manager.editor.snap_to_grid = False
        assert settings_manager.snap_step == 0.0


class TestRecentFiles:
    """Tests for the recent files list."""

    def test_most_recent_first(self, settings_manager, tmp_path):
        first = tmp_path / "a.py"
        second = tmp_path / "b.py"
        for path in (first, second):
            path.write_text("", encoding="utf-8")
            settings_manager.add_recent_file(str(path))
        settings_manager.add_recent_file(str(first))
        assert settings_manager.get_recent_files() == [str(first), str(second)]

    def test_limited_length(self, settings_manager):
        for i in range(15):
            settings_manager.add_recent_file(f"/tmp/file{i}.py")
        assert len(settings_manager.settings.recent_files) == 10
        assert settings_manager.settings.recent_files[0] == "/tmp/file14.py"

    def test_missing_files_dropped(self, settings_manager, tmp_path):
        kept = tmp_path / "kept.py"
        kept.write_text("", encoding="utf-8")
        settings_manager.add_recent_file(str(tmp_path / "gone.py"))
        settings_manager.add_recent_file(str(kept))
        assert settings_manager.get_recent_files() == [str(kept)]
        assert settings_manager.settings.recent_files == [str(kept)]


class TestWindowGeometry:
    """Tests for window geometry persistence."""

    def test_round_trip(self, settings_manager, settings_file):
        settings_manager.save_window_geometry(b"\x01\x02geo", b"\x00state")
        reloaded = SettingsManager(config_override=str(settings_file))
        assert reloaded.get_window_geometry() == (b"\x01\x02geo", b"\x00state")

    def test_nothing_saved(self, settings_manager):
        assert settings_manager.get_window_geometry() == (None, None)


class TestGlobalInstance:
    """Tests for the shared settings manager."""

    def test_single_instance(self, settings_file):
        reset_settings_manager()
        try:
            first = get_settings(str(settings_file))
            assert get_settings() is first
        finally:
            reset_settings_manager()
