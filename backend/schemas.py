"""
Pydantic schemas for request/response validation
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


# ============================================================================
# Climates
# ============================================================================

class ClimateFields(BaseModel):
    """
    The five guard-railed climate fields.

    Kept as plain strings: unknown or incompatible values are corrected by the
    guard rails instead of being rejected with a 422.
    """
    emotional_state: Optional[str] = Field(None, description="CURIOSITY, THREAT, FASCINATION, CONFRONTATION, DARK_INSPIRATION")
    revelation_dynamic: Optional[str] = Field(None, description="PROGRESSIVE, FRAGMENTS, HIDDEN, EARLY")
    narrative_pressure: Optional[str] = Field(None, description="SLOW, FLUID, FAST")
    hook_type: Optional[str] = Field(None, description="QUESTION, SHOCK, MYSTERY, BOLD_CLAIM, VISUAL")
    closing_type: Optional[str] = Field(None, description="REVELATION, LOOP, REFLECTION, CTA_DIRECT, CLIFFHANGER")


class ClimateCreateRequest(ClimateFields):
    """Request model for creating a personal climate"""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=16)
    emotional_state: str = Field(..., min_length=1)
    min_scenes: int = Field(3, ge=1, le=50)
    max_scenes: int = Field(12, ge=1, le=50)
    prompt_fragment: Optional[str] = Field(None, max_length=2000)
    behavior_preview: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Slow Burn",
                "icon": "🔥",
                "emotional_state": "FASCINATION",
                "revelation_dynamic": "PROGRESSIVE",
                "narrative_pressure": "SLOW",
                "hook_type": "VISUAL",
                "closing_type": "CTA_DIRECT",
            }
        }
    )


class ClimateUpdateRequest(ClimateFields):
    """Partial update; omitted fields keep their stored value"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=16)
    min_scenes: Optional[int] = Field(None, ge=1, le=50)
    max_scenes: Optional[int] = Field(None, ge=1, le=50)
    prompt_fragment: Optional[str] = Field(None, max_length=2000)
    behavior_preview: Optional[str] = Field(None, max_length=1000)


class ClimateValidateRequest(ClimateFields):
    """Request model for checking a combination without saving it"""


class ClimateValidationResponse(BaseModel):
    """Result of checking a climate combination"""
    valid: bool
    errors: List[str] = Field(default_factory=list)
    corrected: Dict[str, Optional[str]]


# ============================================================================
# Styles
# ============================================================================

class StyleFields(BaseModel):
    description: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=16)
    target_audience: Optional[str] = Field(None, max_length=500)
    keywords: Optional[List[str]] = None
    discourse_architecture: Optional[str] = None
    language_register: Optional[str] = None
    script_function: Optional[str] = None
    narrator_posture: Optional[str] = None
    content_complexity: Optional[str] = None
    advanced_instructions: Optional[str] = Field(None, max_length=2000)
    hook_type: Optional[str] = None
    hook_example: Optional[str] = Field(None, max_length=500)
    cta_type: Optional[str] = None
    cta_example: Optional[str] = Field(None, max_length=500)
    visual_prompt_base: Optional[str] = Field(None, max_length=1000)
    compatible_climates: Optional[List[str]] = None


class StyleCreateRequest(StyleFields):
    """Request model for creating a personal style"""
    name: str = Field(..., min_length=1, max_length=100)
    content_type: str = Field("CUSTOM", description="Content type, drives climate suggestions")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Myth Breaker",
                "content_type": "EDUCATIONAL",
                "hook_type": "STRONG_STATEMENT",
                "cta_type": "ENGAGEMENT",
                "keywords": ["myth", "science"],
            }
        }
    )


class StyleUpdateRequest(StyleFields):
    """Partial update; omitted fields keep their stored value"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    content_type: Optional[str] = None


# ============================================================================
# Shorts
# ============================================================================

class SceneInput(BaseModel):
    order: Optional[int] = Field(None, ge=0)
    narration: str = ""
    visual_desc: str = ""
    duration: int = Field(5, ge=1, le=60)


class ShortCreateRequest(BaseModel):
    """Request model for creating a short"""
    premise: str = Field(..., min_length=1, max_length=2000, description="What the short is about")
    title: Optional[str] = Field(None, max_length=200)
    climate_id: Optional[str] = None
    style_id: Optional[str] = None
    format: str = Field("SHORT", description="SHORT, REEL, LONG or YOUTUBE")
    target_duration: int = Field(30, ge=5, le=600)
    max_scenes: Optional[int] = Field(None, ge=1, le=100, description="Manual override of the calculated scene count")
    avg_scene_duration: Optional[int] = Field(None, ge=1, le=60, description="Manual override of the scene duration")
    ai_model: Optional[str] = Field(None, description="Text model (registry name or OpenRouter ID)")
    scenes: List[SceneInput] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "premise": "Why octopuses have three hearts",
                "climate_id": "climate-uuid",
                "style_id": "style-uuid",
                "format": "SHORT",
            }
        }
    )


class SceneUpdateRequest(BaseModel):
    narration: Optional[str] = None
    visual_desc: Optional[str] = None
    duration: Optional[int] = Field(None, ge=1, le=60)
    image_prompt: Optional[str] = None
    negative_prompt: Optional[str] = None


class SceneReorderRequest(BaseModel):
    scene_ids: List[str] = Field(..., min_length=1)


class RegenerateImageRequest(BaseModel):
    image_prompt: Optional[str] = None
    negative_prompt: Optional[str] = None


class MediaGenerationResponse(BaseModel):
    """Response for the asynchronous media step"""
    short_id: str
    status: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response"""
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Detailed error message")
    user_message: str = Field(..., description="Message safe to show to the user")
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_code": "NOT_FOUND",
                "message": "Short 123 not found",
                "user_message": "The requested item was not found.",
                "details": {"short_id": "123"},
            }
        }
    )
