"""
Behavior mapping for Climates.

Translates each climate enum value into the writing instructions handed to the
scriptwriter model, plus the label/icon/subtitle shown by the UI.
"""

from typing import Any, Dict, Mapping, Optional

from climate.enums import (
    EmotionalState,
    RevelationDynamic,
    NarrativePressure,
    HookType,
    ClosingType,
)


EMOTIONAL_STATE_PROMPTS: Dict[EmotionalState, Dict[str, str]] = {
    EmotionalState.CURIOSITY: {
        "label": "Curiosity",
        "icon": "🔍",
        "subtitle": "Needs to understand",
        "prompt_instructions": (
            "EMOTIONAL FORCE: CURIOSITY\n"
            "- Open with a question or an incomplete fact that makes the viewer need the next step.\n"
            "- Use information gaps: \"Have you ever wondered...\", \"What few people know about...\".\n"
            "- Keep the tone explanatory but intriguing.\n"
            "- Each scene gives a clue, never the full answer before its moment."
        ),
    },
    EmotionalState.THREAT: {
        "label": "Threat",
        "icon": "⚡",
        "subtitle": "Needs to pay attention",
        "prompt_instructions": (
            "EMOTIONAL FORCE: THREAT\n"
            "- Open with an imminent negative consequence or a common, dangerous mistake.\n"
            "- Create a sense of potential loss: \"If you don't do this...\", \"The mistake that is ruining your...\".\n"
            "- Use impact words: danger, mistake, careful, stop, urgent.\n"
            "- Keep the tension that something important is at stake."
        ),
    },
    EmotionalState.FASCINATION: {
        "label": "Fascination",
        "icon": "✨",
        "subtitle": "Gets absorbed",
        "prompt_instructions": (
            "EMOTIONAL FORCE: FASCINATION\n"
            "- Use rich sensory and visual descriptions.\n"
            "- Focus on the extraordinary, the beautiful or the deeply satisfying.\n"
            "- The tone is admiration and discovery.\n"
            "- \"Imagine a world where...\", \"The absolute perfection of...\"."
        ),
    },
    EmotionalState.CONFRONTATION: {
        "label": "Confrontation",
        "icon": "🔥",
        "subtitle": "Is challenged",
        "prompt_instructions": (
            "EMOTIONAL FORCE: CONFRONTATION\n"
            "- Challenge the viewer's common beliefs right at the start.\n"
            "- Use bold, polarizing statements.\n"
            "- The tone is direct, provocative and energetic.\n"
            "- \"The truth nobody tells you is...\", \"You are being misled about...\"."
        ),
    },
    EmotionalState.DARK_INSPIRATION: {
        "label": "Dark Inspiration",
        "icon": "🌑",
        "subtitle": "Feels depth",
        "prompt_instructions": (
            "EMOTIONAL FORCE: DARK INSPIRATION\n"
            "- Explore existential, dense or slightly melancholic themes.\n"
            "- The tone is deep, poetic and reflective.\n"
            "- Use metaphors about time, legacy or human nature.\n"
            "- \"In the silence of our choices...\", \"What remains when everything fades...\"."
        ),
    },
}

REVELATION_DYNAMIC_PROMPTS: Dict[RevelationDynamic, Dict[str, str]] = {
    RevelationDynamic.PROGRESSIVE: {
        "label": "Build up gradually",
        "icon": "📈",
        "subtitle": "Linear construction of the truth",
        "prompt_instructions": (
            "DYNAMIC: Develop the argument logically and incrementally. "
            "Each scene adds a layer of understanding until the conclusion."
        ),
    },
    RevelationDynamic.HIDDEN: {
        "label": "Hide until the end",
        "icon": "🎭",
        "subtitle": "Plot twist in the last second",
        "prompt_instructions": (
            "DYNAMIC: Keep the main secret hidden. Use false leads or total mystery. "
            "The reveal only happens in the last scene or in the closing."
        ),
    },
    RevelationDynamic.EARLY: {
        "label": "Reveal early and go deeper",
        "icon": "💡",
        "subtitle": "Immediate impact, then explanation",
        "prompt_instructions": (
            "DYNAMIC: Deliver the biggest value or the main truth in the first 5 seconds. "
            "Use the remaining time to dissect, prove or deepen it."
        ),
    },
    RevelationDynamic.FRAGMENTS: {
        "label": "Show fragments",
        "icon": "🧩",
        "subtitle": "Non-linear, mosaic style",
        "prompt_instructions": (
            "DYNAMIC: Show intense pieces of the truth. "
            "The viewer assembles the puzzle mentally while watching."
        ),
    },
}

NARRATIVE_PRESSURE_PROMPTS: Dict[NarrativePressure, Dict[str, Any]] = {
    NarrativePressure.SLOW: {
        "label": "Slow and dense",
        "icon": "🐢",
        "subtitle": "For deep reflection",
        "prompt_instructions": (
            "PACE: Use long sentences and extended pauses after important statements. "
            "Give the visuals time to breathe."
        ),
        "sentence_max_words": 20,
        "pause_frequency": "high",
    },
    NarrativePressure.FLUID: {
        "label": "Fluid and hypnotic",
        "icon": "🌊",
        "subtitle": "Natural balance",
        "prompt_instructions": (
            "PACE: Keep a constant flow of information. Smooth transitions between ideas. "
            "Natural conversational rhythm."
        ),
        "sentence_max_words": 15,
        "pause_frequency": "medium",
    },
    NarrativePressure.FAST: {
        "label": "Fast and aggressive",
        "icon": "⚡",
        "subtitle": "Impact and urgency",
        "prompt_instructions": (
            "PACE: Use extremely short sentences (staccato). No breathing room between ideas. "
            "Cut thoughts quickly."
        ),
        "sentence_max_words": 8,
        "pause_frequency": "low",
    },
}

HOOK_TYPE_PROMPTS: Dict[HookType, Dict[str, str]] = {
    HookType.QUESTION: {
        "label": "Question",
        "icon": "❓",
        "subtitle": "Asks the viewer directly",
        "prompt_instructions": "HOOK: Open with a direct question the viewer cannot answer yet.",
    },
    HookType.SHOCK: {
        "label": "Shock",
        "icon": "💥",
        "subtitle": "Startling first line",
        "prompt_instructions": "HOOK: Open with a startling fact or image that breaks the scroll.",
    },
    HookType.MYSTERY: {
        "label": "Mystery",
        "icon": "🕵️",
        "subtitle": "Something is missing",
        "prompt_instructions": "HOOK: Open with an unexplained detail that only makes sense later.",
    },
    HookType.BOLD_CLAIM: {
        "label": "Bold claim",
        "icon": "📣",
        "subtitle": "Statement that demands a reaction",
        "prompt_instructions": "HOOK: Open with a bold, defensible claim stated with full confidence.",
    },
    HookType.VISUAL: {
        "label": "Visual",
        "icon": "🎬",
        "subtitle": "The image speaks first",
        "prompt_instructions": "HOOK: Open on a striking visual moment; narration enters after the image lands.",
    },
}

CLOSING_TYPE_PROMPTS: Dict[ClosingType, Dict[str, str]] = {
    ClosingType.REVELATION: {
        "label": "Revelation",
        "icon": "🔓",
        "subtitle": "The answer arrives",
        "prompt_instructions": "CLOSING: End by delivering the final piece of the truth.",
    },
    ClosingType.LOOP: {
        "label": "Loop",
        "icon": "🔁",
        "subtitle": "The end leads back to the start",
        "prompt_instructions": "CLOSING: End with a line that connects seamlessly back to the hook.",
    },
    ClosingType.REFLECTION: {
        "label": "Reflection",
        "icon": "💭",
        "subtitle": "Leaves a thought behind",
        "prompt_instructions": "CLOSING: End with a quiet line that leaves the viewer thinking.",
    },
    ClosingType.CTA_DIRECT: {
        "label": "Direct call-to-action",
        "icon": "👉",
        "subtitle": "Tells the viewer what to do",
        "prompt_instructions": "CLOSING: End with a direct, explicit call-to-action.",
    },
    ClosingType.CLIFFHANGER: {
        "label": "Cliffhanger",
        "icon": "⏳",
        "subtitle": "To be continued",
        "prompt_instructions": "CLOSING: End on an open question that sets up a follow-up short.",
    },
}

_EFFECT_TABLES = (
    ("emotional_state", EmotionalState, EMOTIONAL_STATE_PROMPTS),
    ("revelation_dynamic", RevelationDynamic, REVELATION_DYNAMIC_PROMPTS),
    ("narrative_pressure", NarrativePressure, NARRATIVE_PRESSURE_PROMPTS),
    ("hook_type", HookType, HOOK_TYPE_PROMPTS),
    ("closing_type", ClosingType, CLOSING_TYPE_PROMPTS),
)


def _lookup(table: Mapping, enum_type, value) -> Optional[Dict[str, Any]]:
    if not value:
        return None
    try:
        return table[enum_type(value)]
    except ValueError:
        return None


def build_climate_prompt(climate: Mapping[str, Any]) -> str:
    """
    Build the climate section of the scriptwriter system prompt.

    Args:
        climate: Mapping with any of emotional_state, revelation_dynamic,
            narrative_pressure, hook_type, closing_type, prompt_fragment

    Returns:
        Instruction blocks separated by blank lines (empty string if nothing set)
    """
    sections = []

    for key, enum_type, table in _EFFECT_TABLES:
        effect = _lookup(table, enum_type, climate.get(key))
        if effect is None:
            continue
        sections.append(effect["prompt_instructions"])
        if key == "narrative_pressure":
            sections.append(
                f"WRITING RULES: At most {effect['sentence_max_words']} words per sentence. "
                f"Pause frequency: {effect['pause_frequency']}."
            )

    fragment = (climate.get("prompt_fragment") or "").strip()
    if fragment:
        sections.append(f"ADDITIONAL FINE TUNING:\n{fragment}")

    return "\n\n".join(sections)


def describe_climate(climate: Mapping[str, Any]) -> Dict[str, Optional[Dict[str, str]]]:
    """Label/icon/subtitle for each climate field, for API responses."""
    details = {}
    for key, enum_type, table in _EFFECT_TABLES:
        effect = _lookup(table, enum_type, climate.get(key))
        details[key] = (
            {"label": effect["label"], "icon": effect["icon"], "subtitle": effect["subtitle"]}
            if effect else None
        )
    return details


def sentence_max_words(pressure) -> int:
    """Sentence length limit implied by a narrative pressure (FLUID if unknown)."""
    effect = _lookup(NARRATIVE_PRESSURE_PROMPTS, NarrativePressure, pressure)
    if effect is None:
        effect = NARRATIVE_PRESSURE_PROMPTS[NarrativePressure.FLUID]
    return effect["sentence_max_words"]


def enum_options() -> Dict[str, list]:
    """All climate enum values with their labels, for the options endpoint."""
    return {
        key: [
            {"value": member.value, "label": table[member]["label"],
             "icon": table[member]["icon"], "subtitle": table[member]["subtitle"]}
            for member in enum_type
        ]
        for key, enum_type, table in _EFFECT_TABLES
    }
