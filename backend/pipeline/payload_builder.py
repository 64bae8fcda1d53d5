"""
Scriptwriter payload builder.

Assembles everything the scriptwriter needs (premise, style, climate,
scene constraints, characters) into one structured dictionary.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from climate.guard_rails import ClimateConfigError, get_corrected_config, diff_corrections
from pipeline.error_handler import PipelineError, ErrorCode
from pipeline.scene_calculator import calculate_scene_params

logger = logging.getLogger(__name__)


class PayloadError(PipelineError):
    """Raised when a style or climate lacks a field the scriptwriter needs"""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_STYLE, details: Optional[Dict] = None):
        super().__init__(code, message, details)


def build_scriptwriter_payload(
    premise: str,
    style: Mapping[str, Any],
    climate: Mapping[str, Any],
    format: str,
    characters: Iterable[Mapping[str, Any]] = (),
    max_scenes: Optional[int] = None,
    avg_scene_duration: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Build the structured payload for the scriptwriter.

    The climate is passed through the guard rails so the payload never
    carries an incoherent combination.

    Args:
        premise: What the short is about
        style: Style as a mapping (Style.to_dict())
        climate: Climate as a mapping (Climate.to_dict())
        format: SHORT, REEL, LONG or YOUTUBE
        characters: Optional characters with name/description/visual_prompt/role
        max_scenes: Manual override of the calculated scene count
        avg_scene_duration: Manual override of the calculated scene duration

    Returns:
        {"premise", "style", "climate", "constraints", "characters"}

    Raises:
        PayloadError: If required style/climate fields are missing
    """
    if not premise or not premise.strip():
        raise PayloadError("Premise is required", ErrorCode.MISSING_REQUIRED_FIELD, {"field": "premise"})
    if not style.get("hook_type"):
        raise PayloadError(f'Style "{style.get("name")}" has no hook_type defined.', details={"field": "hook_type"})
    if not style.get("cta_type"):
        raise PayloadError(f'Style "{style.get("name")}" has no cta_type defined.', details={"field": "cta_type"})
    if not climate.get("emotional_state"):
        raise PayloadError(
            f'Climate "{climate.get("name")}" has no emotional_state defined.',
            ErrorCode.INVALID_CLIMATE,
            {"field": "emotional_state"},
        )

    try:
        corrected = get_corrected_config(climate)
    except ClimateConfigError as e:
        raise PayloadError(str(e), ErrorCode.INVALID_CLIMATE, {"field": "emotional_state"})
    changes = diff_corrections(climate, corrected)
    if changes:
        logger.info(f"Climate '{climate.get('name')}' corrected for scriptwriter: {changes}")

    calculated = calculate_scene_params(format, corrected.narrative_pressure.value)
    scenes = max_scenes or calculated["max_scenes"]
    duration = avg_scene_duration or calculated["avg_scene_duration"]

    return {
        "premise": premise.strip(),
        "style": {
            "name": style.get("name"),
            "content_type": style.get("content_type"),
            "hook_type": style.get("hook_type"),
            "hook_example": style.get("hook_example"),
            "cta_type": style.get("cta_type"),
            "cta_example": style.get("cta_example"),
            "discourse_architecture": style.get("discourse_architecture"),
            "language_register": style.get("language_register"),
            "script_function": style.get("script_function"),
            "narrator_posture": style.get("narrator_posture"),
            "content_complexity": style.get("content_complexity"),
            "target_audience": style.get("target_audience"),
            "keywords": list(style.get("keywords") or []),
            "visual_prompt": style.get("visual_prompt_base") or "",
            "script_instructions": style.get("advanced_instructions") or "",
        },
        "climate": {
            "name": climate.get("name"),
            **corrected.to_dict(),
            "custom_instructions": climate.get("prompt_fragment") or "",
            "behavior_preview": climate.get("behavior_preview") or "",
        },
        "constraints": {
            "format": format,
            "max_scenes": scenes,
            "avg_scene_duration": duration,
            "total_duration": scenes * duration,
            "is_overridden": bool(max_scenes or avg_scene_duration),
        },
        "characters": [
            {
                "name": c.get("name"),
                "description": c.get("description") or "",
                "visual_prompt": c.get("visual_prompt") or c.get("prompt_description") or "",
                "role": c.get("role") or "character",
            }
            for c in characters
        ],
    }
