"""
Scene parameter calculator.

Derives how many scenes a short should have, and how long each should last,
from its format and the narrative pressure of its climate. Slow climates get
fewer, longer-feeling scenes; fast climates get more cuts.
"""

import math
from typing import Dict, Any, List, Optional, Tuple

from climate.enums import NarrativePressure


FORMAT_CONFIG: Dict[str, Dict[str, int]] = {
    "SHORT": {
        "min_duration": 15,
        "max_duration": 60,
        "default_duration": 30,
        "base_scenes": 4,
        "min_scene_duration": 3,
        "max_scene_duration": 10,
        "default_scene_duration": 5,
    },
    "REEL": {
        "min_duration": 30,
        "max_duration": 90,
        "default_duration": 60,
        "base_scenes": 6,
        "min_scene_duration": 5,
        "max_scene_duration": 12,
        "default_scene_duration": 8,
    },
    "LONG": {
        "min_duration": 60,
        "max_duration": 180,
        "default_duration": 120,
        "base_scenes": 10,
        "min_scene_duration": 8,
        "max_scene_duration": 15,
        "default_scene_duration": 10,
    },
    "YOUTUBE": {
        "min_duration": 180,
        "max_duration": 600,
        "default_duration": 300,
        "base_scenes": 20,
        "min_scene_duration": 10,
        "max_scene_duration": 20,
        "default_scene_duration": 15,
    },
}

PRESSURE_MULTIPLIER: Dict[NarrativePressure, float] = {
    NarrativePressure.SLOW: 0.7,   # fewer, longer scenes
    NarrativePressure.FLUID: 1.0,
    NarrativePressure.FAST: 1.4,   # more, shorter scenes
}

MAX_SCENES_FACTOR = 2.5


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def get_format_config(format: str) -> Dict[str, int]:
    """
    Get the configuration of a short format.

    Raises:
        ValueError: If format is unknown
    """
    try:
        return FORMAT_CONFIG[format]
    except KeyError:
        raise ValueError(
            f"Invalid format '{format}'. Available formats: {', '.join(FORMAT_CONFIG)}"
        )


def calculate_scene_params(format: str, pressure: Optional[str] = None) -> Dict[str, Any]:
    """
    Calculate scene count and duration for a format and narrative pressure.

    Args:
        format: SHORT, REEL, LONG or YOUTUBE
        pressure: SLOW, FLUID or FAST (FLUID when missing)

    Returns:
        {"max_scenes", "avg_scene_duration", "total_duration", "format_config"}

    Example:
        >>> calculate_scene_params("SHORT", "FAST")["max_scenes"]
        6
    """
    config = get_format_config(format)
    multiplier = PRESSURE_MULTIPLIER[NarrativePressure(pressure or NarrativePressure.FLUID)]

    max_scenes = _round_half_up(config["base_scenes"] * multiplier)
    avg_scene_duration = config["default_scene_duration"]
    total_duration = max_scenes * avg_scene_duration

    # Keep the total inside the format's duration window
    if total_duration > config["max_duration"]:
        max_scenes = config["max_duration"] // avg_scene_duration
    elif total_duration < config["min_duration"]:
        max_scenes = math.ceil(config["min_duration"] / avg_scene_duration)

    max_scenes = max(1, max_scenes)

    return {
        "max_scenes": max_scenes,
        "avg_scene_duration": avg_scene_duration,
        "total_duration": max_scenes * avg_scene_duration,
        "format_config": dict(config),
    }


def validate_overrides(
    format: str,
    max_scenes: Optional[int] = None,
    avg_scene_duration: Optional[int] = None,
) -> Tuple[bool, List[str]]:
    """
    Check manual scene overrides against the format's limits.

    Returns:
        (is_valid, warnings)
    """
    config = get_format_config(format)
    warnings = []

    if max_scenes is not None:
        scenes_limit = config["base_scenes"] * MAX_SCENES_FACTOR
        if max_scenes < 1 or max_scenes > scenes_limit:
            warnings.append(
                f"Suggested scene count for {format} is between 1 and {_round_half_up(scenes_limit)}."
            )

    if avg_scene_duration is not None:
        if not config["min_scene_duration"] <= avg_scene_duration <= config["max_scene_duration"]:
            warnings.append(
                f"Scene duration for {format} must be between "
                f"{config['min_scene_duration']}s and {config['max_scene_duration']}s."
            )

    return not warnings, warnings


def get_format_limits(format: str) -> Dict[str, Dict[str, int]]:
    """Scene count and duration limits for display"""
    config = get_format_config(format)

    return {
        "scenes": {
            "min": 1,
            "max": _round_half_up(config["base_scenes"] * MAX_SCENES_FACTOR),
            "suggested": config["base_scenes"],
        },
        "duration": {
            "min": config["min_scene_duration"],
            "max": config["max_scene_duration"],
            "suggested": config["default_scene_duration"],
        },
    }
