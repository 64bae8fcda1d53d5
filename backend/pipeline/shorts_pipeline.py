"""
Shorts pipeline orchestrator.

Drives a short through its lifecycle:

    DRAFT → GENERATING_SCRIPT → SCRIPT_READY → SCRIPT_APPROVED
          → GENERATING_PROMPTS → GENERATING_MEDIA → COMPLETED

Any step may end in FAILED with error_message set; the error is re-raised so
the caller can report it. Retrying is a user action.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from config import settings
from models import Climate, Short, ShortScene, ShortStatus, ShortFormat, Style
from pipeline.error_handler import PipelineError, ErrorCode, ValidationError, categorize_error
from pipeline.payload_builder import build_scriptwriter_payload
from pipeline.prompt_engineer import PromptEngineer
from pipeline.script_generator import ScriptGenerator
from services.ai_service import AIService

logger = logging.getLogger(__name__)

DEFAULT_SCENE_DURATION = 5

# Media progress runs from MEDIA_PROGRESS_START to 100 as scenes complete
PROMPTS_PROGRESS = 10
MEDIA_PROGRESS_START = 30


class ShortsPipeline:
    """
    Orchestrates script and media generation for shorts.

    Example:
        >>> pipeline = ShortsPipeline(db)
        >>> short = pipeline.create_short("user-1", "Why octopuses have three hearts",
        ...                               climate_id=climate.id, style_id=style.id)
        >>> await pipeline.run_full_pipeline(short.id)
    """

    def __init__(
        self,
        db: Session,
        ai_service: Optional[AIService] = None,
        script_generator: Optional[ScriptGenerator] = None,
        prompt_engineer: Optional[PromptEngineer] = None,
        batch_size: Optional[int] = None,
    ):
        self.db = db
        self.ai_service = ai_service or AIService()
        self.script_generator = script_generator or ScriptGenerator(self.ai_service)
        self.prompt_engineer = prompt_engineer or PromptEngineer(self.ai_service)
        self.batch_size = batch_size or settings.MEDIA_BATCH_SIZE

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_short(self, short_id: str) -> Short:
        short = self.db.query(Short).filter(Short.id == short_id).first()
        if not short:
            raise PipelineError(ErrorCode.NOT_FOUND, f"Short {short_id} not found", {"short_id": short_id})
        return short

    def get_scene(self, scene_id: str, short_id: Optional[str] = None) -> ShortScene:
        query = self.db.query(ShortScene).filter(ShortScene.id == scene_id)
        if short_id:
            query = query.filter(ShortScene.short_id == short_id)
        scene = query.first()
        if not scene:
            raise PipelineError(ErrorCode.NOT_FOUND, f"Scene {scene_id} not found", {"scene_id": scene_id})
        return scene

    def _require_visible(self, model, label: str, record_id: str, user_id: str) -> None:
        """System records and the user's own; anything else reads as missing"""
        record = self.db.query(model).filter(model.id == record_id).first()
        if not record or (not record.is_system and record.user_id != user_id):
            key = f"{label.lower()}_id"
            raise PipelineError(ErrorCode.NOT_FOUND, f"{label} {record_id} not found", {key: record_id})

    def _scenes(self, short_id: str) -> List[ShortScene]:
        return (
            self.db.query(ShortScene)
            .filter(ShortScene.short_id == short_id)
            .order_by(ShortScene.order)
            .all()
        )

    def _update_short(self, short: Short, **fields) -> None:
        for key, value in fields.items():
            setattr(short, key, value)
        self.db.commit()

    def _fail(self, short: Short, error: Exception) -> None:
        self.db.rollback()
        message = error.message if isinstance(error, PipelineError) else str(error)
        logger.error(f"Short {short.id} failed ({categorize_error(error).value}): {message}")
        self._update_short(short, status=ShortStatus.FAILED, error_message=message)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_short(
        self,
        user_id: str,
        premise: str,
        climate_id: Optional[str] = None,
        style_id: Optional[str] = None,
        format: str = ShortFormat.SHORT,
        title: Optional[str] = None,
        target_duration: int = 30,
        max_scenes: Optional[int] = None,
        avg_scene_duration: Optional[int] = None,
        ai_model: Optional[str] = None,
        scenes: Optional[List[Dict[str, Any]]] = None,
    ) -> Short:
        """Create a DRAFT short, optionally with hand-written scenes"""
        if not premise or not premise.strip():
            raise ValidationError("Premise is required", field="premise")
        if format not in ShortFormat.all_formats():
            raise ValidationError(f"Invalid format '{format}'", field="format")
        if climate_id:
            self._require_visible(Climate, "Climate", climate_id, user_id)
        if style_id:
            self._require_visible(Style, "Style", style_id, user_id)

        short = Short(
            id=str(uuid.uuid4()),
            user_id=user_id,
            premise=premise.strip(),
            title=title,
            climate_id=climate_id,
            style_id=style_id,
            format=format,
            target_duration=target_duration,
            max_scenes=max_scenes,
            avg_scene_duration=avg_scene_duration,
            ai_model=ai_model,
            status=ShortStatus.DRAFT,
            progress=0,
        )
        self.db.add(short)

        for index, scene in enumerate(scenes or []):
            self.db.add(ShortScene(
                id=str(uuid.uuid4()),
                short_id=short.id,
                order=scene.get("order", index),
                duration=scene.get("duration") or DEFAULT_SCENE_DURATION,
                narration=scene.get("narration") or "",
                visual_desc=scene.get("visual_desc") or "",
            ))

        self.db.commit()
        self.db.refresh(short)

        logger.info(f"Short {short.id} created for user {user_id} ({len(scenes or [])} initial scenes)")
        return short

    # ------------------------------------------------------------------
    # Script
    # ------------------------------------------------------------------

    def build_payload(self, short: Short) -> Dict[str, Any]:
        if short.style is None:
            raise PipelineError(ErrorCode.INVALID_STYLE, "Short has no style selected", {"short_id": short.id})
        if short.climate is None:
            raise PipelineError(ErrorCode.INVALID_CLIMATE, "Short has no climate selected", {"short_id": short.id})

        return build_scriptwriter_payload(
            premise=short.premise,
            style=short.style.to_dict(),
            climate=short.climate.to_dict(),
            format=short.format,
            max_scenes=short.max_scenes,
            avg_scene_duration=short.avg_scene_duration,
        )

    async def generate_script(self, short_id: str) -> Dict[str, Any]:
        """
        Generate the script of a short (DRAFT/SCRIPT_READY/FAILED → SCRIPT_READY).

        Existing scenes are replaced by the generated ones.

        Raises:
            PipelineError: INVALID_STATE if the short is mid-generation or approved;
                any generation error after marking the short FAILED
        """
        short = self.get_short(short_id)
        if short.status not in ShortStatus.scriptable():
            raise PipelineError(
                ErrorCode.INVALID_STATE,
                f"Cannot generate a script for a short in status {short.status}",
                {"short_id": short_id, "status": short.status},
            )

        logger.info(f"Generating script for short {short_id} (version {short.script_version})")
        self._update_short(short, status=ShortStatus.GENERATING_SCRIPT, progress=10, error_message=None)

        try:
            payload = self.build_payload(short)
            script = await self.script_generator.generate_script(payload, model_name=short.ai_model)
        except Exception as e:
            logger.error(f"Script generation failed for short {short_id}: {e}")
            self._fail(short, e)
            raise

        for old_scene in self._scenes(short_id):
            self.db.delete(old_scene)
        for scene in script["scenes"]:
            self.db.add(ShortScene(
                id=str(uuid.uuid4()),
                short_id=short_id,
                order=scene["order"],
                duration=scene["duration"],
                narration=scene["narration"],
                visual_desc=scene["visual_description"],
            ))

        short.title = script["title"]
        short.summary = script.get("summary")
        short.hook = script["hook"]
        short.cta = script["cta"]
        short.script = script
        short.status = ShortStatus.SCRIPT_READY
        short.progress = 100
        self.db.commit()
        self.db.refresh(short)

        logger.info(f"Script ready for short {short_id}: {len(script['scenes'])} scenes")
        return script

    async def regenerate_script(self, short_id: str) -> Dict[str, Any]:
        """Bump the script version, reset to DRAFT and generate again (any state but a running one)"""
        short = self.get_short(short_id)
        if short.status in ShortStatus.running():
            raise PipelineError(
                ErrorCode.INVALID_STATE,
                f"Cannot regenerate the script of a short in status {short.status}",
                {"short_id": short_id, "status": short.status},
            )

        self._update_short(short, script_version=short.script_version + 1, status=ShortStatus.DRAFT)
        return await self.generate_script(short_id)

    # ------------------------------------------------------------------
    # Scene editing
    # ------------------------------------------------------------------

    def update_scene(self, scene_id: str, short_id: Optional[str] = None, **fields) -> ShortScene:
        """Edit narration, visual_desc, duration or image prompts of a scene"""
        scene = self.get_scene(scene_id, short_id)
        editable = ("narration", "visual_desc", "duration", "image_prompt", "negative_prompt")

        for key, value in fields.items():
            if key in editable and value is not None:
                setattr(scene, key, value)

        self.db.commit()
        self.db.refresh(scene)
        logger.info(f"Scene {scene_id} updated: {sorted(k for k, v in fields.items() if v is not None)}")
        return scene

    def add_scene(
        self,
        short_id: str,
        order: Optional[int] = None,
        narration: str = "",
        visual_desc: str = "",
        duration: int = DEFAULT_SCENE_DURATION,
    ) -> ShortScene:
        """Insert a scene at `order` (appends when omitted); later scenes shift up"""
        self.get_short(short_id)
        scenes = self._scenes(short_id)

        if order is None or order > len(scenes):
            order = len(scenes)
        if order < 0:
            raise ValidationError("Scene order must be >= 0", field="order")

        for existing in scenes:
            if existing.order >= order:
                existing.order += 1

        scene = ShortScene(
            id=str(uuid.uuid4()),
            short_id=short_id,
            order=order,
            narration=narration or "",
            visual_desc=visual_desc or "",
            duration=duration or DEFAULT_SCENE_DURATION,
        )
        self.db.add(scene)
        self.db.commit()
        self.db.refresh(scene)

        logger.info(f"Scene added to short {short_id} at position {order}")
        return scene

    def remove_scene(self, scene_id: str, short_id: Optional[str] = None) -> None:
        """Delete a scene; later scenes shift down"""
        scene = self.get_scene(scene_id, short_id)
        parent_id, removed_order = scene.short_id, scene.order

        self.db.delete(scene)
        for existing in self._scenes(parent_id):
            if existing.id != scene_id and existing.order > removed_order:
                existing.order -= 1
        self.db.commit()

        logger.info(f"Scene {scene_id} removed from short {parent_id}")

    def reorder_scenes(self, short_id: str, scene_ids: List[str]) -> List[ShortScene]:
        """
        Set scene order to the position of each id in scene_ids.

        Raises:
            ValidationError: If scene_ids is not exactly the short's scenes
        """
        self.get_short(short_id)
        scenes = {scene.id: scene for scene in self._scenes(short_id)}

        if len(scene_ids) != len(set(scene_ids)) or set(scene_ids) != set(scenes):
            raise ValidationError(
                "scene_ids must list every scene of the short exactly once",
                field="scene_ids",
            )

        for index, scene_id in enumerate(scene_ids):
            scenes[scene_id].order = index
        self.db.commit()

        logger.info(f"Scenes of short {short_id} reordered")
        return self._scenes(short_id)

    def approve_script(self, short_id: str) -> Short:
        """
        Approve the script (→ SCRIPT_APPROVED) and reset progress for the media step.

        Raises:
            PipelineError: INVALID_STATE without scenes or while generating
        """
        short = self.get_short(short_id)
        if short.status in ShortStatus.running():
            raise PipelineError(
                ErrorCode.INVALID_STATE,
                f"Cannot approve a short in status {short.status}",
                {"short_id": short_id, "status": short.status},
            )
        if not self._scenes(short_id):
            raise PipelineError(
                ErrorCode.INVALID_STATE,
                "The short must have at least one scene",
                {"short_id": short_id},
            )

        self._update_short(
            short,
            status=ShortStatus.SCRIPT_APPROVED,
            script_approved_at=datetime.utcnow(),
            progress=0,
            error_message=None,
        )
        logger.info(f"Script approved for short {short_id}")
        return short

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def _script_for_prompts(self, short: Short, scenes: List[ShortScene]) -> Dict[str, Any]:
        return {
            "title": short.title or "",
            "summary": short.summary or "",
            "hook": short.hook or "",
            "cta": short.cta or "",
            "scenes": [
                {
                    "order": scene.order,
                    "narration": scene.narration or "",
                    "visual_description": scene.visual_desc or "",
                    "duration": scene.duration,
                }
                for scene in scenes
            ],
        }

    async def _render_scene(self, short: Short, scene: ShortScene, total: int, done: List[int]) -> None:
        try:
            image = await self.ai_service.generate_image(
                scene.image_prompt, negative_prompt=scene.negative_prompt
            )
            scene.media_type = "IMAGE"
            scene.media_url = image.get("url")
            scene.media_width = image.get("width")
            scene.media_height = image.get("height")
            scene.is_generated = True
            scene.error_message = None
            done[0] += 1
        except Exception as e:
            logger.error(f"Image generation failed for scene {scene.order} of short {short.id}: {e}")
            scene.error_message = e.message if isinstance(e, PipelineError) else str(e)

        short.progress = MEDIA_PROGRESS_START + (done[0] * (100 - MEDIA_PROGRESS_START)) // total
        self.db.commit()

    async def generate_media(self, short_id: str) -> Short:
        """
        Generate prompts and images for an approved short (→ COMPLETED).

        Images are rendered concurrently in batches of `batch_size`. A scene
        that fails keeps its error_message and does not fail the short.

        Raises:
            PipelineError: INVALID_STATE unless SCRIPT_APPROVED; prompt errors
                after marking the short FAILED
        """
        short = self.get_short(short_id)
        if short.status != ShortStatus.SCRIPT_APPROVED:
            raise PipelineError(
                ErrorCode.INVALID_STATE,
                "The script must be approved before generating media",
                {"short_id": short_id, "status": short.status},
            )

        logger.info(f"Starting media generation for short {short_id}")
        self._update_short(short, status=ShortStatus.GENERATING_PROMPTS, progress=PROMPTS_PROGRESS)

        try:
            scenes = self._scenes(short_id)
            prompts = await self.prompt_engineer.generate_prompts(
                self._script_for_prompts(short, scenes),
                style_name=short.style.name if short.style else None,
                visual_base=short.style.visual_prompt_base if short.style else None,
                model_name=short.ai_model,
            )

            by_order = {scene.order: scene for scene in scenes}
            for index, prompt in enumerate(prompts["prompts"]):
                scene = by_order.get(prompt["scene_order"])
                if scene is None and index < len(scenes):
                    scene = scenes[index]
                if scene is not None:
                    scene.image_prompt = prompt["image_prompt"]
                    scene.negative_prompt = prompt["negative_prompt"]

            short.status = ShortStatus.GENERATING_MEDIA
            short.progress = MEDIA_PROGRESS_START
            self.db.commit()

            pending = [scene for scene in scenes if scene.image_prompt]
            total = len(scenes) or 1
            done = [0]
            for start in range(0, len(pending), self.batch_size):
                batch = pending[start:start + self.batch_size]
                await asyncio.gather(*(self._render_scene(short, scene, total, done) for scene in batch))
        except Exception as e:
            logger.error(f"Media generation failed for short {short_id}: {e}")
            self._fail(short, e)
            raise

        self._update_short(
            short,
            status=ShortStatus.COMPLETED,
            progress=100,
            completed_at=datetime.utcnow(),
        )
        logger.info(f"Media generated for short {short_id}: {done[0]}/{len(scenes)} scenes rendered")
        return short

    async def regenerate_scene_image(
        self,
        scene_id: str,
        new_prompt: Optional[str] = None,
        new_negative_prompt: Optional[str] = None,
        short_id: Optional[str] = None,
    ) -> ShortScene:
        """
        Render a scene's image again, optionally with a new prompt.

        Raises:
            ValidationError: If the scene has no image prompt and none is given
        """
        scene = self.get_scene(scene_id, short_id)
        prompt = new_prompt or scene.image_prompt
        if not prompt:
            raise ValidationError("Scene has no image prompt", field="image_prompt")

        negative_prompt = new_negative_prompt or scene.negative_prompt

        logger.info(f"Regenerating image for scene {scene_id}")
        image = await self.ai_service.generate_image(prompt, negative_prompt=negative_prompt)

        scene.image_prompt = prompt
        scene.negative_prompt = negative_prompt
        scene.media_type = "IMAGE"
        scene.media_url = image.get("url")
        scene.media_width = image.get("width")
        scene.media_height = image.get("height")
        scene.is_generated = True
        scene.error_message = None
        self.db.commit()
        self.db.refresh(scene)
        return scene

    async def run_full_pipeline(self, short_id: str) -> Short:
        """Script → approval → media in one call"""
        logger.info(f"Running full pipeline for short {short_id}")
        await self.generate_script(short_id)
        self.approve_script(short_id)
        short = await self.generate_media(short_id)
        logger.info(f"Full pipeline finished for short {short_id}")
        return short
