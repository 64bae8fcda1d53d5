"""
Tests for the scriptwriter payload builder.
"""

import pytest

from pipeline.error_handler import ErrorCode
from pipeline.payload_builder import PayloadError, build_scriptwriter_payload


@pytest.fixture
def style():
    return {
        "name": "Explainer",
        "content_type": "EDUCATIONAL",
        "hook_type": "DATA_FACT",
        "cta_type": "FOLLOW",
        "keywords": ["ocean"],
        "visual_prompt_base": "documentary, natural light",
        "advanced_instructions": "Mention one statistic.",
    }


@pytest.fixture
def climate():
    return {
        "name": "Hypnotic Wonder",
        "emotional_state": "FASCINATION",
        "revelation_dynamic": "FRAGMENTS",
        "narrative_pressure": "SLOW",
        "hook_type": "VISUAL",
        "closing_type": "LOOP",
        "prompt_fragment": "Linger on textures.",
    }


class TestBuildScriptwriterPayload:
    """Test cases for build_scriptwriter_payload()"""

    def test_payload_shape(self, style, climate):
        payload = build_scriptwriter_payload("  Octopus hearts  ", style, climate, "SHORT")

        assert payload["premise"] == "Octopus hearts"
        assert payload["style"]["visual_prompt"] == "documentary, natural light"
        assert payload["style"]["script_instructions"] == "Mention one statistic."
        assert payload["climate"]["name"] == "Hypnotic Wonder"
        assert payload["climate"]["custom_instructions"] == "Linger on textures."
        assert payload["climate"]["closing_type"] == "LOOP"
        assert payload["characters"] == []

    def test_constraints_from_pressure(self, style, climate):
        constraints = build_scriptwriter_payload("Octopus", style, climate, "SHORT")["constraints"]

        assert constraints == {
            "format": "SHORT",
            "max_scenes": 3,
            "avg_scene_duration": 5,
            "total_duration": 15,
            "is_overridden": False,
        }

    def test_manual_overrides(self, style, climate):
        constraints = build_scriptwriter_payload(
            "Octopus", style, climate, "SHORT", max_scenes=8, avg_scene_duration=4
        )["constraints"]

        assert constraints["max_scenes"] == 8
        assert constraints["avg_scene_duration"] == 4
        assert constraints["total_duration"] == 32
        assert constraints["is_overridden"] is True

    def test_incoherent_climate_is_corrected(self, style, climate):
        climate["closing_type"] = "CTA_DIRECT"
        payload = build_scriptwriter_payload("Octopus", style, climate, "SHORT")
        assert payload["climate"]["closing_type"] == "REVELATION"

    def test_corrected_pressure_drives_scene_count(self, style):
        threat = {"name": "Alarm", "emotional_state": "THREAT", "narrative_pressure": "SLOW"}
        constraints = build_scriptwriter_payload("Octopus", style, threat, "SHORT")["constraints"]
        # SLOW is not permitted for THREAT; FLUID is used instead
        assert constraints["max_scenes"] == 4

    def test_characters(self, style, climate):
        payload = build_scriptwriter_payload(
            "Octopus", style, climate, "SHORT",
            characters=[{"name": "Otto", "prompt_description": "a red octopus"}],
        )
        assert payload["characters"] == [
            {"name": "Otto", "description": "", "visual_prompt": "a red octopus", "role": "character"}
        ]

    def test_missing_premise(self, style, climate):
        with pytest.raises(PayloadError) as exc_info:
            build_scriptwriter_payload("  ", style, climate, "SHORT")
        assert exc_info.value.code == ErrorCode.MISSING_REQUIRED_FIELD

    @pytest.mark.parametrize("field", ["hook_type", "cta_type"])
    def test_style_without_hook_or_cta(self, style, climate, field):
        style[field] = None
        with pytest.raises(PayloadError, match=f"has no {field} defined") as exc_info:
            build_scriptwriter_payload("Octopus", style, climate, "SHORT")
        assert exc_info.value.code == ErrorCode.INVALID_STYLE

    def test_climate_without_emotional_state(self, style, climate):
        climate["emotional_state"] = None
        with pytest.raises(PayloadError) as exc_info:
            build_scriptwriter_payload("Octopus", style, climate, "SHORT")
        assert exc_info.value.code == ErrorCode.INVALID_CLIMATE

    def test_unknown_emotional_state(self, style, climate):
        climate["emotional_state"] = "BOREDOM"
        with pytest.raises(PayloadError) as exc_info:
            build_scriptwriter_payload("Octopus", style, climate, "SHORT")
        assert exc_info.value.code == ErrorCode.INVALID_CLIMATE
