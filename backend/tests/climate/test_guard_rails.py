"""
Tests for the climate guard rails.

Every emotional state is checked against every value of every guarded field:
a permitted value is kept, anything else becomes the first permitted value.
"""

import itertools

import pytest

from climate.enums import (
    EmotionalState,
    RevelationDynamic,
    NarrativePressure,
    HookType,
    ClosingType,
)
from climate.guard_rails import (
    VALID_COMBINATIONS,
    ClimateConfig,
    ClimateConfigError,
    diff_corrections,
    get_corrected_config,
    get_rules,
    is_permitted,
    rules_table,
    validate_climate_configuration,
)

GUARDED = [
    ("revelation_dynamic", RevelationDynamic, "allowed_revelations"),
    ("narrative_pressure", NarrativePressure, "allowed_pressures"),
    ("hook_type", HookType, "allowed_hooks"),
    ("closing_type", ClosingType, "allowed_closings"),
]


class TestCorrectedConfig:
    """Test cases for get_corrected_config()"""

    @pytest.mark.parametrize("state", list(EmotionalState))
    @pytest.mark.parametrize("field,enum_type,rules_attr", GUARDED)
    def test_every_value_lands_in_permitted_set(self, state, field, enum_type, rules_attr):
        """Permitted values are kept, others fall back to the first permitted value."""
        allowed = getattr(VALID_COMBINATIONS[state], rules_attr)

        for value in enum_type:
            corrected = get_corrected_config({"emotional_state": state.value, field: value.value})
            result = getattr(corrected, field)

            assert result in allowed
            if value in allowed:
                assert result == value
            else:
                assert result == allowed[0]

    def test_correction_is_idempotent(self):
        """Correcting a corrected configuration changes nothing."""
        for state, revelation, pressure, hook, closing in itertools.product(
            EmotionalState, RevelationDynamic, NarrativePressure, HookType, ClosingType
        ):
            once = get_corrected_config({
                "emotional_state": state,
                "revelation_dynamic": revelation,
                "narrative_pressure": pressure,
                "hook_type": hook,
                "closing_type": closing,
            })
            assert get_corrected_config(once) == once
            assert get_corrected_config(once.to_dict()) == once

    def test_fascination_with_direct_cta_closes_on_revelation(self):
        corrected = get_corrected_config({"emotional_state": "FASCINATION", "closing_type": "CTA_DIRECT"})
        assert corrected.closing_type == ClosingType.REVELATION

    def test_threat_with_slow_pressure_becomes_fluid(self):
        corrected = get_corrected_config({"emotional_state": "THREAT", "narrative_pressure": "SLOW"})
        assert corrected.narrative_pressure == NarrativePressure.FLUID

    def test_missing_state_defaults_to_curiosity(self):
        corrected = get_corrected_config({})
        assert corrected == ClimateConfig(
            emotional_state=EmotionalState.CURIOSITY,
            revelation_dynamic=RevelationDynamic.PROGRESSIVE,
            narrative_pressure=NarrativePressure.SLOW,
            hook_type=HookType.QUESTION,
            closing_type=ClosingType.REVELATION,
        )

    def test_none_config_is_treated_as_empty(self):
        assert get_corrected_config(None) == get_corrected_config({})

    def test_unknown_state_raises(self):
        with pytest.raises(ClimateConfigError, match="Unknown emotional state 'EUPHORIA'"):
            get_corrected_config({"emotional_state": "EUPHORIA"})

    def test_unknown_field_value_uses_default(self):
        corrected = get_corrected_config({"emotional_state": "THREAT", "hook_type": "NOPE"})
        assert corrected.hook_type == HookType.SHOCK

    def test_permitted_combination_is_unchanged(self):
        config = {
            "emotional_state": "CONFRONTATION",
            "revelation_dynamic": "EARLY",
            "narrative_pressure": "FAST",
            "hook_type": "QUESTION",
            "closing_type": "REFLECTION",
        }
        assert get_corrected_config(config).to_dict() == config


class TestValidateClimateConfiguration:
    """Test cases for validate_climate_configuration()"""

    def test_valid_combination(self):
        result = validate_climate_configuration({
            "emotional_state": "CURIOSITY",
            "narrative_pressure": "FLUID",
            "hook_type": "MYSTERY",
        })
        assert result.valid is True
        assert result.errors == []

    def test_invalid_combination_reports_message(self):
        result = validate_climate_configuration({"emotional_state": "FASCINATION", "closing_type": "CTA_DIRECT"})

        assert result.valid is False
        assert result.errors == [
            'Closing "CTA_DIRECT" is not recommended for emotional state "FASCINATION"'
        ]
        assert result.corrected.closing_type == ClosingType.REVELATION

    def test_reports_every_invalid_field(self):
        result = validate_climate_configuration({
            "emotional_state": "DARK_INSPIRATION",
            "revelation_dynamic": "EARLY",
            "narrative_pressure": "FAST",
            "hook_type": "SHOCK",
            "closing_type": "CLIFFHANGER",
        })
        assert len(result.errors) == 4
        assert result.errors[0].startswith('Revelation "EARLY"')

    def test_unknown_value_is_reported(self):
        result = validate_climate_configuration({"emotional_state": "THREAT", "hook_type": "NOPE"})
        assert result.valid is False
        assert result.errors == ['Hook "NOPE" is not a valid hook_type value']

    def test_missing_fields_are_not_errors(self):
        result = validate_climate_configuration({"emotional_state": "THREAT"})
        assert result.valid is True
        assert result.corrected.narrative_pressure == NarrativePressure.FLUID

    def test_to_dict(self):
        data = validate_climate_configuration({"emotional_state": "THREAT"}).to_dict()
        assert data == {
            "valid": True,
            "errors": [],
            "corrected": {
                "emotional_state": "THREAT",
                "revelation_dynamic": "PROGRESSIVE",
                "narrative_pressure": "FLUID",
                "hook_type": "SHOCK",
                "closing_type": "CTA_DIRECT",
            },
        }

    def test_unknown_state_raises(self):
        with pytest.raises(ClimateConfigError):
            validate_climate_configuration({"emotional_state": "BOREDOM"})


class TestHelpers:
    """Test cases for is_permitted(), diff_corrections(), get_rules() and rules_table()"""

    def test_is_permitted_complete_valid(self):
        assert is_permitted({
            "emotional_state": "THREAT",
            "revelation_dynamic": "HIDDEN",
            "narrative_pressure": "FAST",
            "hook_type": "SHOCK",
            "closing_type": "REVELATION",
        })

    def test_is_permitted_rejects_incomplete(self):
        assert not is_permitted({"emotional_state": "THREAT", "hook_type": "SHOCK"})

    def test_is_permitted_rejects_invalid(self):
        config = get_corrected_config({"emotional_state": "CURIOSITY"}).to_dict()
        config["closing_type"] = "CTA_DIRECT"
        assert not is_permitted(config)

    def test_is_permitted_rejects_unknown_state(self):
        config = get_corrected_config({}).to_dict()
        config["emotional_state"] = "BOREDOM"
        assert not is_permitted(config)

    def test_is_permitted_accepts_climate_config(self):
        assert is_permitted(get_corrected_config({"emotional_state": "FASCINATION"}))

    def test_diff_corrections_lists_changed_fields(self):
        original = {"emotional_state": "FASCINATION", "closing_type": "CTA_DIRECT", "hook_type": "VISUAL"}
        changes = diff_corrections(original, get_corrected_config(original))

        assert changes["closing_type"] == {"from": "CTA_DIRECT", "to": "REVELATION"}
        assert "hook_type" not in changes
        assert "emotional_state" not in changes
        # Missing fields show up as filled in
        assert changes["narrative_pressure"] == {"from": None, "to": "SLOW"}

    def test_diff_corrections_accepts_enum_values(self):
        original = {"emotional_state": EmotionalState.THREAT, "hook_type": HookType.SHOCK}
        changes = diff_corrections(original, get_corrected_config(original))
        assert "emotional_state" not in changes
        assert "hook_type" not in changes

    def test_get_rules(self):
        rules = get_rules("THREAT")
        assert rules.allowed_closings[0] == ClosingType.CTA_DIRECT

    def test_rules_table_covers_every_state(self):
        table = rules_table()

        assert set(table) == {state.value for state in EmotionalState}
        assert table["FASCINATION"]["allowed_closings"][0] == "REVELATION"
        for rules in table.values():
            assert set(rules) == {"allowed_revelations", "allowed_pressures", "allowed_hooks", "allowed_closings"}
            assert all(rules.values())
