"""Tests für das Konfigurationssystem."""

import pytest

from config.defaults import (
    DEPARTMENT_COLORS,
    default_booking_config,
    default_departments,
    default_rooms,
    default_time_window,
)
from config.manager import ConfigManager
from config.schema import (
    BookingConfig,
    ConflictPolicy,
    DepartmentDef,
    RoomDef,
    TimeWindowConfig,
)


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_time_window(self):
        """08:00 bis 18:00 im 30-Minuten-Raster."""
        tw = default_time_window()
        assert tw.opening == "08:00"
        assert tw.closing == "18:00"
        assert tw.step_minutes == 30
        assert tw.total_minutes == 600

    def test_default_rooms_and_departments(self):
        assert len(default_rooms()) == 4
        assert [d.name for d in default_departments()] == list(DEPARTMENT_COLORS)

    def test_default_config_valid(self):
        config = default_booking_config()
        assert config.policy.conflict_policy == ConflictPolicy.ROOM
        assert config.policy.visitor_purpose in config.policy.purposes
        assert config.policy.guest_count_options[-1] == "10+"
        assert config.room_names[0] == "Conference Room"

    def test_department_color(self):
        config = default_booking_config()
        assert config.department_color("Manufacturing") == "#3b82f6"
        assert config.department_color("Unbekannt") == "#6b7280"


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_opening_after_closing_raises(self):
        with pytest.raises(Exception):
            TimeWindowConfig(opening="18:00", closing="08:00")

    def test_malformed_time_raises(self):
        with pytest.raises(Exception):
            TimeWindowConfig(opening="8:00", closing="18:00")

    def test_unsupported_step_raises(self):
        with pytest.raises(Exception):
            TimeWindowConfig(step_minutes=7)

    def test_ten_minute_grid_allowed(self):
        tw = TimeWindowConfig(opening="08:00", closing="18:00", step_minutes=10)
        assert tw.step_minutes == 10

    def test_duplicate_rooms_raise(self):
        with pytest.raises(Exception):
            BookingConfig(
                rooms=[RoomDef(name="A"), RoomDef(name="A")],
                departments=default_departments(),
            )

    def test_no_rooms_raise(self):
        with pytest.raises(Exception):
            BookingConfig(rooms=[], departments=default_departments())

    def test_color_normalized(self):
        assert DepartmentDef(name="X", color="AABBCC").color == "#aabbcc"
        with pytest.raises(Exception):
            DepartmentDef(name="X", color="#zzz")


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path):
        path = tmp_path / "booking_config.yaml"
        mgr = ConfigManager(path)
        assert mgr.first_run_check()

        config = default_booking_config()
        mgr.save(config)
        assert not mgr.first_run_check()
        assert mgr.load() == config

    def test_saved_yaml_has_comments(self, tmp_path):
        path = tmp_path / "booking_config.yaml"
        ConfigManager(path).save(default_booking_config())
        text = path.read_text(encoding="utf-8")
        assert "Raumbuchung" in text
        assert "Buchbares Zeitfenster" in text

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path / "fehlt.yaml").load()

    def test_invalid_file_raises_value_error(self, tmp_path):
        path = tmp_path / "booking_config.yaml"
        path.write_text("rooms: []\ndepartments: []\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(path).load()
