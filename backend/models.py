"""
SQLAlchemy database models
"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from database import Base


def _iso(value):
    return value.isoformat() if value else None


class Climate(Base):
    """
    Climate model: emotional/pacing configuration applied to a script

    System climates have is_system=True and no owner.
    """
    __tablename__ = "climates"

    id = Column(String, primary_key=True, index=True)  # UUID
    user_id = Column(String, nullable=True, index=True)  # None for system climates
    is_system = Column(Boolean, default=False, nullable=False)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, nullable=True, default="🎭")

    # Guard-railed fields (see climate.guard_rails)
    emotional_state = Column(String, nullable=False)
    revelation_dynamic = Column(String, nullable=False)
    narrative_pressure = Column(String, nullable=False)
    hook_type = Column(String, nullable=False)
    closing_type = Column(String, nullable=False)

    # Limits
    sentence_max_words = Column(Integer, nullable=False, default=15)
    min_scenes = Column(Integer, nullable=False, default=3)
    max_scenes = Column(Integer, nullable=False, default=12)

    prompt_fragment = Column(Text, nullable=True)
    behavior_preview = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Climate(id={self.id}, name={self.name}, state={self.emotional_state})>"

    def to_dict(self):
        """Convert climate to dictionary"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "is_system": self.is_system,
            "type": "system" if self.is_system else "personal",
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "emotional_state": self.emotional_state,
            "revelation_dynamic": self.revelation_dynamic,
            "narrative_pressure": self.narrative_pressure,
            "hook_type": self.hook_type,
            "closing_type": self.closing_type,
            "sentence_max_words": self.sentence_max_words,
            "min_scenes": self.min_scenes,
            "max_scenes": self.max_scenes,
            "prompt_fragment": self.prompt_fragment,
            "behavior_preview": self.behavior_preview,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Style(Base):
    """
    Style model: structural/narrative configuration, orthogonal to Climate
    """
    __tablename__ = "styles"

    id = Column(String, primary_key=True, index=True)  # UUID
    user_id = Column(String, nullable=True, index=True)
    is_system = Column(Boolean, default=False, nullable=False)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, nullable=True, default="🎬")
    content_type = Column(String, nullable=False, default="CUSTOM")

    # Structure
    target_audience = Column(Text, nullable=True)
    keywords = Column(JSON, nullable=True, default=list)
    discourse_architecture = Column(String, nullable=True)
    language_register = Column(String, nullable=True)

    # Guided blocks
    script_function = Column(String, nullable=True)
    narrator_posture = Column(String, nullable=True)
    content_complexity = Column(String, nullable=True)

    advanced_instructions = Column(Text, nullable=True)

    # Hooks / CTA
    hook_type = Column(String, nullable=True)
    hook_example = Column(Text, nullable=True)
    cta_type = Column(String, nullable=True)
    cta_example = Column(Text, nullable=True)

    visual_prompt_base = Column(Text, nullable=True)
    compatible_climates = Column(JSON, nullable=True, default=list)  # emotional state names

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Style(id={self.id}, name={self.name}, content_type={self.content_type})>"

    def to_dict(self):
        """Convert style to dictionary"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "is_system": self.is_system,
            "type": "system" if self.is_system else "personal",
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "content_type": self.content_type,
            "target_audience": self.target_audience,
            "keywords": self.keywords or [],
            "discourse_architecture": self.discourse_architecture,
            "language_register": self.language_register,
            "script_function": self.script_function,
            "narrator_posture": self.narrator_posture,
            "content_complexity": self.content_complexity,
            "advanced_instructions": self.advanced_instructions,
            "hook_type": self.hook_type,
            "hook_example": self.hook_example,
            "cta_type": self.cta_type,
            "cta_example": self.cta_example,
            "visual_prompt_base": self.visual_prompt_base,
            "compatible_climates": self.compatible_climates or [],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Short(Base):
    """
    Short model: one short-form video project (script + scenes)

    Status flow: DRAFT → GENERATING_SCRIPT → SCRIPT_READY → SCRIPT_APPROVED
    → GENERATING_PROMPTS → GENERATING_MEDIA → COMPLETED (or FAILED)
    """
    __tablename__ = "shorts"

    id = Column(String, primary_key=True, index=True)  # UUID
    user_id = Column(String, nullable=False, index=True)

    premise = Column(Text, nullable=False)
    title = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    hook = Column(Text, nullable=True)
    cta = Column(Text, nullable=True)
    script = Column(JSON, nullable=True)  # last generated script payload

    format = Column(String, nullable=False, default="SHORT")
    target_duration = Column(Integer, nullable=False, default=30)
    max_scenes = Column(Integer, nullable=True)  # manual overrides
    avg_scene_duration = Column(Integer, nullable=True)
    ai_model = Column(String, nullable=True)

    climate_id = Column(String, ForeignKey("climates.id", ondelete="SET NULL"), nullable=True)
    style_id = Column(String, ForeignKey("styles.id", ondelete="SET NULL"), nullable=True)

    status = Column(String, nullable=False, default="DRAFT", index=True)
    progress = Column(Integer, nullable=False, default=0)  # 0-100 within the current step
    script_version = Column(Integer, nullable=False, default=1)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    script_approved_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    climate = relationship("Climate")
    style = relationship("Style")
    scenes = relationship(
        "ShortScene",
        back_populates="short",
        cascade="all, delete-orphan",
        order_by="ShortScene.order",
    )

    def __repr__(self):
        return f"<Short(id={self.id}, status={self.status}, title={self.title})>"

    def to_dict(self, include_scenes: bool = True):
        """Convert short to dictionary"""
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "premise": self.premise,
            "title": self.title,
            "summary": self.summary,
            "hook": self.hook,
            "cta": self.cta,
            "format": self.format,
            "target_duration": self.target_duration,
            "max_scenes": self.max_scenes,
            "avg_scene_duration": self.avg_scene_duration,
            "ai_model": self.ai_model,
            "climate_id": self.climate_id,
            "style_id": self.style_id,
            "status": self.status,
            "progress": self.progress,
            "script_version": self.script_version,
            "error_message": self.error_message,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "script_approved_at": _iso(self.script_approved_at),
            "completed_at": _iso(self.completed_at),
        }
        if include_scenes:
            data["scenes"] = [scene.to_dict() for scene in self.scenes] if self.scenes else []
        return data


class ShortScene(Base):
    """
    Scene of a short: narration, visual description and generated media
    """
    __tablename__ = "short_scenes"

    id = Column(String, primary_key=True, index=True)  # UUID
    short_id = Column(String, ForeignKey("shorts.id", ondelete="CASCADE"), nullable=False, index=True)

    order = Column(Integer, nullable=False)  # 0-based position
    duration = Column(Integer, nullable=False, default=5)  # seconds
    narration = Column(Text, nullable=False, default="")
    visual_desc = Column(Text, nullable=False, default="")

    image_prompt = Column(Text, nullable=True)
    negative_prompt = Column(Text, nullable=True)

    media_type = Column(String, nullable=True)  # IMAGE | VIDEO
    media_url = Column(String, nullable=True)
    media_width = Column(Integer, nullable=True)
    media_height = Column(Integer, nullable=True)
    is_generated = Column(Boolean, nullable=False, default=False)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    short = relationship("Short", back_populates="scenes")

    def __repr__(self):
        return f"<ShortScene(id={self.id}, short_id={self.short_id}, order={self.order})>"

    def to_dict(self):
        """Convert scene to dictionary"""
        return {
            "id": self.id,
            "short_id": self.short_id,
            "order": self.order,
            "duration": self.duration,
            "narration": self.narration,
            "visual_desc": self.visual_desc,
            "image_prompt": self.image_prompt,
            "negative_prompt": self.negative_prompt,
            "media_type": self.media_type,
            "media_url": self.media_url,
            "media_width": self.media_width,
            "media_height": self.media_height,
            "is_generated": self.is_generated,
            "error_message": self.error_message,
        }


# Short status constants
class ShortStatus:
    """Constants for short status values"""
    DRAFT = "DRAFT"
    GENERATING_SCRIPT = "GENERATING_SCRIPT"
    SCRIPT_READY = "SCRIPT_READY"
    SCRIPT_APPROVED = "SCRIPT_APPROVED"
    GENERATING_PROMPTS = "GENERATING_PROMPTS"
    GENERATING_MEDIA = "GENERATING_MEDIA"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @classmethod
    def scriptable(cls):
        """Statuses from which a script may be generated"""
        return [cls.DRAFT, cls.SCRIPT_READY, cls.FAILED]

    @classmethod
    def running(cls):
        """Statuses in which a generation step is in progress"""
        return [cls.GENERATING_SCRIPT, cls.GENERATING_PROMPTS, cls.GENERATING_MEDIA]


class ShortFormat:
    """Constants for short format values"""
    SHORT = "SHORT"
    REEL = "REEL"
    LONG = "LONG"
    YOUTUBE = "YOUTUBE"

    @classmethod
    def all_formats(cls):
        return [cls.SHORT, cls.REEL, cls.LONG, cls.YOUTUBE]
