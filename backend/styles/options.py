"""
Style enumerations and their UI labels.

A Style is the structural half of a script configuration (what kind of
content, how the narrator speaks). Climate affinities are suggestions, not
rules: any climate may be combined with any style.
"""

from enum import Enum
from typing import Dict, List, Optional, Type

from climate.enums import EmotionalState


class ContentType(str, Enum):
    NEWS = "NEWS"
    STORIES = "STORIES"
    MEMES_HUMOR = "MEMES_HUMOR"
    EDUCATIONAL = "EDUCATIONAL"
    MOTIVATIONAL = "MOTIVATIONAL"
    TUTORIAL = "TUTORIAL"
    CUSTOM = "CUSTOM"


class DiscourseArchitecture(str, Enum):
    DIRECT_OBJECTIVE = "DIRECT_OBJECTIVE"
    NARRATIVE_FLUID = "NARRATIVE_FLUID"
    TECHNICAL_DETAILED = "TECHNICAL_DETAILED"
    CONVERSATIONAL = "CONVERSATIONAL"
    PROVOCATIVE = "PROVOCATIVE"


class LanguageRegister(str, Enum):
    FORMAL = "FORMAL"
    INFORMAL = "INFORMAL"
    TECHNICAL = "TECHNICAL"
    COLLOQUIAL = "COLLOQUIAL"


class ScriptFunction(str, Enum):
    INFORM = "INFORM"
    ENTERTAIN = "ENTERTAIN"
    CONVINCE = "CONVINCE"
    REFLECT = "REFLECT"


class NarratorPosture(str, Enum):
    AUTHORITY = "AUTHORITY"
    COMPANION = "COMPANION"
    OBSERVER = "OBSERVER"
    PROVOCATEUR = "PROVOCATEUR"


class ContentComplexity(str, Enum):
    SIMPLE = "SIMPLE"
    MEDIUM = "MEDIUM"
    DENSE = "DENSE"


class StyleHookType(str, Enum):
    QUESTION = "QUESTION"
    STRONG_STATEMENT = "STRONG_STATEMENT"
    DATA_FACT = "DATA_FACT"
    SHORT_STORY = "SHORT_STORY"
    CONTRAST = "CONTRAST"


class StyleCtaType(str, Enum):
    DIRECT_ACTION = "DIRECT_ACTION"
    ENGAGEMENT = "ENGAGEMENT"
    REFLECTION = "REFLECTION"
    SHARE = "SHARE"
    FOLLOW = "FOLLOW"


CONTENT_TYPE_LABELS = {
    ContentType.NEWS: {"label": "News", "description": "Facts, current events and updates", "icon": "📰"},
    ContentType.STORIES: {"label": "Stories", "description": "Narratives, tales and fiction", "icon": "📖"},
    ContentType.MEMES_HUMOR: {"label": "Memes/Humor", "description": "Jokes, satire and funny content", "icon": "😂"},
    ContentType.EDUCATIONAL: {"label": "Educational", "description": "Explanations, concepts and learning", "icon": "🎓"},
    ContentType.MOTIVATIONAL: {"label": "Motivational", "description": "Inspiration and personal growth", "icon": "✨"},
    ContentType.TUTORIAL: {"label": "Tutorial", "description": "Step by step, how-to", "icon": "🔧"},
    ContentType.CUSTOM: {"label": "Custom", "description": "Fully custom rules", "icon": "⚙️"},
}

DISCOURSE_ARCHITECTURE_LABELS = {
    DiscourseArchitecture.DIRECT_OBJECTIVE: {"label": "Direct and objective", "description": "Straight to the point"},
    DiscourseArchitecture.NARRATIVE_FLUID: {"label": "Narrative and fluid", "description": "Tells a story naturally"},
    DiscourseArchitecture.TECHNICAL_DETAILED: {"label": "Technical and detailed", "description": "Explains with depth and precision"},
    DiscourseArchitecture.CONVERSATIONAL: {"label": "Conversational", "description": "Like an informal chat"},
    DiscourseArchitecture.PROVOCATIVE: {"label": "Provocative", "description": "Challenges and questions the viewer"},
}

LANGUAGE_REGISTER_LABELS = {
    LanguageRegister.FORMAL: {"label": "Formal", "description": "Polished, professional language"},
    LanguageRegister.INFORMAL: {"label": "Informal", "description": "Casual, relaxed language"},
    LanguageRegister.TECHNICAL: {"label": "Technical", "description": "Field-specific terms"},
    LanguageRegister.COLLOQUIAL: {"label": "Colloquial", "description": "Slang and popular expressions"},
}

SCRIPT_FUNCTION_LABELS = {
    ScriptFunction.INFORM: {"label": "Inform", "description": "Pass on knowledge or news", "icon": "📢"},
    ScriptFunction.ENTERTAIN: {"label": "Entertain", "description": "Amuse and engage the audience", "icon": "🎭"},
    ScriptFunction.CONVINCE: {"label": "Convince", "description": "Persuade toward an action or idea", "icon": "🎯"},
    ScriptFunction.REFLECT: {"label": "Provoke reflection", "description": "Make the viewer think", "icon": "💭"},
}

NARRATOR_POSTURE_LABELS = {
    NarratorPosture.AUTHORITY: {"label": "Authority", "description": "Expert teaching with confidence", "icon": "👨‍🏫"},
    NarratorPosture.COMPANION: {"label": "Companion", "description": "Friend sharing experiences", "icon": "🤝"},
    NarratorPosture.OBSERVER: {"label": "Observer", "description": "Neutral narrator who describes", "icon": "👁️"},
    NarratorPosture.PROVOCATEUR: {"label": "Provocateur", "description": "Challenges conventions", "icon": "🔥"},
}

CONTENT_COMPLEXITY_LABELS = {
    ContentComplexity.SIMPLE: {"label": "Simple", "description": "Easy to follow, general audience"},
    ContentComplexity.MEDIUM: {"label": "Medium", "description": "Needs some prior knowledge"},
    ContentComplexity.DENSE: {"label": "Dense", "description": "Technical, in-depth content"},
}

STYLE_HOOK_LABELS = {
    StyleHookType.QUESTION: {"label": "Question", "description": "Asks the audience directly"},
    StyleHookType.STRONG_STATEMENT: {"label": "Strong statement", "description": "Controversial or striking statement"},
    StyleHookType.DATA_FACT: {"label": "Data / Fact", "description": "Curiosity or statistic"},
    StyleHookType.SHORT_STORY: {"label": "Short story", "description": "Brief narrative to connect"},
    StyleHookType.CONTRAST: {"label": "Contrast", "description": "Breaks expectations"},
}

STYLE_CTA_LABELS = {
    StyleCtaType.DIRECT_ACTION: {"label": "Direct action", "description": "Buy, click, visit"},
    StyleCtaType.ENGAGEMENT: {"label": "Engagement", "description": "Ask for an opinion or comment"},
    StyleCtaType.REFLECTION: {"label": "Reflection", "description": "Provokes deep thought"},
    StyleCtaType.SHARE: {"label": "Share", "description": "Encourages spreading"},
    StyleCtaType.FOLLOW: {"label": "Follow", "description": "Invites to keep watching"},
}

# Natural climate affinities per content type (suggestions only)
CLIMATE_AFFINITIES: Dict[ContentType, List[EmotionalState]] = {
    ContentType.NEWS: [EmotionalState.CURIOSITY, EmotionalState.THREAT],
    ContentType.STORIES: [EmotionalState.FASCINATION, EmotionalState.THREAT, EmotionalState.DARK_INSPIRATION],
    ContentType.MEMES_HUMOR: [EmotionalState.CONFRONTATION, EmotionalState.CURIOSITY],
    ContentType.EDUCATIONAL: [EmotionalState.CURIOSITY, EmotionalState.FASCINATION],
    ContentType.MOTIVATIONAL: [EmotionalState.DARK_INSPIRATION, EmotionalState.CONFRONTATION],
    ContentType.TUTORIAL: [EmotionalState.CURIOSITY],
    ContentType.CUSTOM: list(EmotionalState),
}

# (field name on Style, enum, labels)
STYLE_FIELDS = (
    ("content_type", ContentType, CONTENT_TYPE_LABELS),
    ("discourse_architecture", DiscourseArchitecture, DISCOURSE_ARCHITECTURE_LABELS),
    ("language_register", LanguageRegister, LANGUAGE_REGISTER_LABELS),
    ("script_function", ScriptFunction, SCRIPT_FUNCTION_LABELS),
    ("narrator_posture", NarratorPosture, NARRATOR_POSTURE_LABELS),
    ("content_complexity", ContentComplexity, CONTENT_COMPLEXITY_LABELS),
    ("hook_type", StyleHookType, STYLE_HOOK_LABELS),
    ("cta_type", StyleCtaType, STYLE_CTA_LABELS),
)


def labels_to_options(labels: Dict[Enum, Dict[str, str]]) -> List[Dict[str, str]]:
    """Convert a label table into a list of select options."""
    return [{"value": value.value, **data} for value, data in labels.items()]


def all_options() -> Dict[str, List[Dict[str, str]]]:
    """Options for every style field, keyed by field name."""
    return {name: labels_to_options(labels) for name, _, labels in STYLE_FIELDS}


def label_for(enum_type: Type[Enum], value: Optional[str]) -> Optional[str]:
    """Human label of a stored style value, or None."""
    for _, field_enum, labels in STYLE_FIELDS:
        if field_enum is enum_type:
            try:
                return labels[enum_type(value)]["label"]
            except ValueError:
                return None
    return None


def suggest_climates(content_type: str) -> List[str]:
    """
    Emotional states with a natural affinity for a content type.

    Raises:
        ValueError: If content_type is not a ContentType
    """
    return [state.value for state in CLIMATE_AFFINITIES[ContentType(content_type)]]
