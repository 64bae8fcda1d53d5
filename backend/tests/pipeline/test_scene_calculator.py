"""
Tests for the scene parameter calculator.
"""

import pytest

from pipeline.scene_calculator import (
    FORMAT_CONFIG,
    calculate_scene_params,
    get_format_limits,
    validate_overrides,
)


class TestCalculateSceneParams:
    """Test cases for calculate_scene_params()"""

    @pytest.mark.parametrize("format,pressure,expected_scenes,expected_duration", [
        ("SHORT", "SLOW", 3, 5),
        ("SHORT", "FLUID", 4, 5),
        ("SHORT", "FAST", 6, 5),
        ("REEL", "FLUID", 6, 8),
        ("REEL", "SLOW", 4, 8),
        ("LONG", "SLOW", 7, 10),
        ("LONG", "FAST", 14, 10),
        ("YOUTUBE", "FAST", 28, 15),
    ])
    def test_scene_count_follows_pressure(self, format, pressure, expected_scenes, expected_duration):
        params = calculate_scene_params(format, pressure)

        assert params["max_scenes"] == expected_scenes
        assert params["avg_scene_duration"] == expected_duration
        assert params["total_duration"] == expected_scenes * expected_duration

    def test_missing_pressure_is_fluid(self):
        assert calculate_scene_params("SHORT") == calculate_scene_params("SHORT", "FLUID")

    @pytest.mark.parametrize("format", list(FORMAT_CONFIG))
    @pytest.mark.parametrize("pressure", ["SLOW", "FLUID", "FAST"])
    def test_total_stays_inside_format_window(self, format, pressure):
        params = calculate_scene_params(format, pressure)
        config = FORMAT_CONFIG[format]

        assert params["max_scenes"] >= 1
        assert config["min_duration"] <= params["total_duration"] <= config["max_duration"]

    def test_format_config_is_a_copy(self):
        params = calculate_scene_params("SHORT")
        params["format_config"]["base_scenes"] = 99
        assert FORMAT_CONFIG["SHORT"]["base_scenes"] == 4

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid format 'TIKTOK'"):
            calculate_scene_params("TIKTOK")

    def test_invalid_pressure(self):
        with pytest.raises(ValueError):
            calculate_scene_params("SHORT", "WARP")


class TestValidateOverrides:
    """Test cases for validate_overrides()"""

    def test_no_overrides(self):
        assert validate_overrides("SHORT") == (True, [])

    def test_overrides_within_limits(self):
        assert validate_overrides("SHORT", max_scenes=10, avg_scene_duration=3) == (True, [])

    def test_too_many_scenes(self):
        is_valid, warnings = validate_overrides("SHORT", max_scenes=11)
        assert not is_valid
        assert warnings == ["Suggested scene count for SHORT is between 1 and 10."]

    def test_scene_duration_out_of_range(self):
        is_valid, warnings = validate_overrides("REEL", avg_scene_duration=20)
        assert not is_valid
        assert warnings == ["Scene duration for REEL must be between 5s and 12s."]

    def test_both_invalid(self):
        is_valid, warnings = validate_overrides("SHORT", max_scenes=0, avg_scene_duration=2)
        assert not is_valid
        assert len(warnings) == 2


class TestGetFormatLimits:
    """Test cases for get_format_limits()"""

    def test_short_limits(self):
        assert get_format_limits("SHORT") == {
            "scenes": {"min": 1, "max": 10, "suggested": 4},
            "duration": {"min": 3, "max": 10, "suggested": 5},
        }

    def test_youtube_limits(self):
        assert get_format_limits("YOUTUBE")["scenes"]["max"] == 50
