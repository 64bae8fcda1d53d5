"""
Climate configuration package.

- Enumerations for the emotional/pacing parameters of a script
- Guard rails that keep a configuration coherent
- Behavior mapping from configuration to scriptwriter instructions
"""

from .enums import EmotionalState, RevelationDynamic, NarrativePressure, HookType, ClosingType
from .guard_rails import (
    ClimateConfig,
    ClimateConfigError,
    ClimateValidation,
    VALID_COMBINATIONS,
    get_corrected_config,
    validate_climate_configuration,
)
from .behavior_mapping import build_climate_prompt

__all__ = [
    "EmotionalState",
    "RevelationDynamic",
    "NarrativePressure",
    "HookType",
    "ClosingType",
    "ClimateConfig",
    "ClimateConfigError",
    "ClimateValidation",
    "VALID_COMBINATIONS",
    "get_corrected_config",
    "validate_climate_configuration",
    "build_climate_prompt",
]
