"""
Climate enumerations.

A Climate is the emotional/pacing half of a script configuration. Values are
stored as their string names in the database and accepted as strings in the API.
"""

from enum import Enum


class EmotionalState(str, Enum):
    """What the viewer should feel"""
    CURIOSITY = "CURIOSITY"
    THREAT = "THREAT"
    FASCINATION = "FASCINATION"
    CONFRONTATION = "CONFRONTATION"
    DARK_INSPIRATION = "DARK_INSPIRATION"


class RevelationDynamic(str, Enum):
    """How the central truth is revealed over the scenes"""
    PROGRESSIVE = "PROGRESSIVE"
    HIDDEN = "HIDDEN"
    EARLY = "EARLY"
    FRAGMENTS = "FRAGMENTS"


class NarrativePressure(str, Enum):
    """Pacing of the narration"""
    SLOW = "SLOW"
    FLUID = "FLUID"
    FAST = "FAST"


class HookType(str, Enum):
    """Opening move of the first seconds"""
    QUESTION = "QUESTION"
    SHOCK = "SHOCK"
    MYSTERY = "MYSTERY"
    BOLD_CLAIM = "BOLD_CLAIM"
    VISUAL = "VISUAL"


class ClosingType(str, Enum):
    """How the short ends"""
    REVELATION = "REVELATION"
    LOOP = "LOOP"
    REFLECTION = "REFLECTION"
    CTA_DIRECT = "CTA_DIRECT"
    CLIFFHANGER = "CLIFFHANGER"
