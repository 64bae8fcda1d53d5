"""
Climate guard rails.

Cross-field rules that keep a Climate coherent: every emotional state permits
only some revelation dynamics, narrative pressures, hook types and closing
types. A configuration outside those sets is either reported
(validate_climate_configuration) or corrected to the first permitted value of
each field (get_corrected_config).

Example:
    >>> get_corrected_config({"emotional_state": "FASCINATION", "closing_type": "CTA_DIRECT"}).closing_type
    <ClosingType.REVELATION: 'REVELATION'>
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union
from enum import Enum

from climate.enums import (
    EmotionalState,
    RevelationDynamic,
    NarrativePressure,
    HookType,
    ClosingType,
)


DEFAULT_EMOTIONAL_STATE = EmotionalState.CURIOSITY


class ClimateConfigError(ValueError):
    """Raised when a climate configuration cannot be interpreted"""
    pass


@dataclass(frozen=True)
class GuardRailRules:
    """Permitted values per field. The first entry of each tuple is the default."""
    allowed_revelations: Tuple[RevelationDynamic, ...]
    allowed_pressures: Tuple[NarrativePressure, ...]
    allowed_hooks: Tuple[HookType, ...]
    allowed_closings: Tuple[ClosingType, ...]


@dataclass(frozen=True)
class ClimateConfig:
    """A fully resolved climate configuration"""
    emotional_state: EmotionalState
    revelation_dynamic: RevelationDynamic
    narrative_pressure: NarrativePressure
    hook_type: HookType
    closing_type: ClosingType

    def to_dict(self) -> Dict[str, str]:
        return {key: value.value for key, value in asdict(self).items()}


@dataclass
class ClimateValidation:
    """Result of validate_climate_configuration()"""
    valid: bool
    corrected: ClimateConfig
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "corrected": self.corrected.to_dict(),
        }


VALID_COMBINATIONS: Dict[EmotionalState, GuardRailRules] = {
    EmotionalState.CURIOSITY: GuardRailRules(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.FRAGMENTS),
        allowed_pressures=(NarrativePressure.SLOW, NarrativePressure.FLUID),
        allowed_hooks=(HookType.QUESTION, HookType.MYSTERY),
        allowed_closings=(ClosingType.REVELATION, ClosingType.LOOP, ClosingType.CLIFFHANGER),
    ),
    EmotionalState.THREAT: GuardRailRules(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.HIDDEN),
        allowed_pressures=(NarrativePressure.FLUID, NarrativePressure.FAST),
        allowed_hooks=(HookType.SHOCK, HookType.BOLD_CLAIM),
        allowed_closings=(ClosingType.CTA_DIRECT, ClosingType.REVELATION),
    ),
    EmotionalState.FASCINATION: GuardRailRules(
        allowed_revelations=(
            RevelationDynamic.PROGRESSIVE,
            RevelationDynamic.FRAGMENTS,
            RevelationDynamic.EARLY,
        ),
        allowed_pressures=(NarrativePressure.SLOW, NarrativePressure.FLUID),
        allowed_hooks=(HookType.VISUAL, HookType.MYSTERY, HookType.QUESTION),
        allowed_closings=(ClosingType.REVELATION, ClosingType.LOOP, ClosingType.REFLECTION),
    ),
    EmotionalState.CONFRONTATION: GuardRailRules(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.EARLY),
        allowed_pressures=(NarrativePressure.FLUID, NarrativePressure.FAST),
        allowed_hooks=(HookType.BOLD_CLAIM, HookType.SHOCK, HookType.QUESTION),
        allowed_closings=(ClosingType.CTA_DIRECT, ClosingType.REFLECTION),
    ),
    EmotionalState.DARK_INSPIRATION: GuardRailRules(
        allowed_revelations=(RevelationDynamic.PROGRESSIVE, RevelationDynamic.HIDDEN),
        allowed_pressures=(NarrativePressure.SLOW, NarrativePressure.FLUID),
        allowed_hooks=(HookType.MYSTERY, HookType.VISUAL),
        allowed_closings=(ClosingType.REFLECTION, ClosingType.LOOP),
    ),
}

# (config key, enum type, rules attribute, label used in messages)
_FIELDS = (
    ("revelation_dynamic", RevelationDynamic, "allowed_revelations", "Revelation"),
    ("narrative_pressure", NarrativePressure, "allowed_pressures", "Pressure"),
    ("hook_type", HookType, "allowed_hooks", "Hook"),
    ("closing_type", ClosingType, "allowed_closings", "Closing"),
)

ConfigInput = Union[ClimateConfig, Mapping[str, Any]]


def _as_mapping(config: Optional[ConfigInput]) -> Mapping[str, Any]:
    if config is None:
        return {}
    if isinstance(config, ClimateConfig):
        return asdict(config)
    return config


def _coerce(enum_type: Type[Enum], value: Any) -> Optional[Enum]:
    """Convert a raw value to enum_type, or None when missing/unknown."""
    if value is None or value == "":
        return None
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return None


def resolve_emotional_state(value: Any) -> EmotionalState:
    """
    Resolve the emotional state of a configuration.

    Missing → CURIOSITY. Unknown → ClimateConfigError, since every other
    rule depends on it.
    """
    if value is None or value == "":
        return DEFAULT_EMOTIONAL_STATE
    state = _coerce(EmotionalState, value)
    if state is None:
        raise ClimateConfigError(
            f"Unknown emotional state '{value}'. "
            f"Valid states: {', '.join(s.value for s in EmotionalState)}"
        )
    return state


def get_rules(state: Union[EmotionalState, str]) -> GuardRailRules:
    """Return the guard rail rules for an emotional state."""
    return VALID_COMBINATIONS[resolve_emotional_state(state)]


def get_corrected_config(config: Optional[ConfigInput]) -> ClimateConfig:
    """
    Return a coherent configuration.

    Each field is kept when it is permitted for the emotional state and replaced
    by the first permitted value otherwise (including missing or unknown values).
    Idempotent: correcting a corrected configuration changes nothing.
    """
    raw = _as_mapping(config)
    state = resolve_emotional_state(raw.get("emotional_state"))
    rules = VALID_COMBINATIONS[state]

    resolved = {}
    for key, enum_type, rules_attr, _ in _FIELDS:
        allowed = getattr(rules, rules_attr)
        value = _coerce(enum_type, raw.get(key))
        resolved[key] = value if value in allowed else allowed[0]

    return ClimateConfig(emotional_state=state, **resolved)


def validate_climate_configuration(config: Optional[ConfigInput]) -> ClimateValidation:
    """
    Check a configuration against the guard rails.

    Only provided values are reported; missing ones are filled silently in
    the corrected configuration.
    """
    raw = _as_mapping(config)
    state = resolve_emotional_state(raw.get("emotional_state"))
    rules = VALID_COMBINATIONS[state]

    errors = []
    for key, enum_type, rules_attr, label in _FIELDS:
        provided = raw.get(key)
        if provided is None or provided == "":
            continue
        value = _coerce(enum_type, provided)
        shown = value.value if value is not None else provided
        if value is None:
            errors.append(f'{label} "{shown}" is not a valid {key} value')
        elif value not in getattr(rules, rules_attr):
            errors.append(f'{label} "{shown}" is not recommended for emotional state "{state.value}"')

    return ClimateValidation(
        valid=not errors,
        errors=errors,
        corrected=get_corrected_config(raw),
    )


def is_permitted(config: ConfigInput) -> bool:
    """True when every field of a complete configuration is permitted."""
    raw = _as_mapping(config)
    if any(raw.get(key) in (None, "") for key in ("emotional_state",) + tuple(f[0] for f in _FIELDS)):
        return False
    try:
        return validate_climate_configuration(raw).valid
    except ClimateConfigError:
        return False


def diff_corrections(original: Mapping[str, Any], corrected: ClimateConfig) -> Dict[str, Dict[str, Optional[str]]]:
    """
    Describe which fields the correction changed.

    Returns {field: {"from": old, "to": new}} for every changed field.
    """
    changes = {}
    for key, value in corrected.to_dict().items():
        before = original.get(key)
        before = before.value if isinstance(before, Enum) else before
        if before != value:
            changes[key] = {"from": before, "to": value}
    return changes


def rules_table() -> Dict[str, Dict[str, List[str]]]:
    """Serializable form of VALID_COMBINATIONS (for the API)."""
    return {
        state.value: {
            rules_attr: [v.value for v in getattr(rules, rules_attr)]
            for _, _, rules_attr, _ in _FIELDS
        }
        for state, rules in VALID_COMBINATIONS.items()
    }
