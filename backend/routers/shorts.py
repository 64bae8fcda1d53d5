"""
Shorts API Router

Provides endpoints for:
- Creating, listing and deleting shorts
- Script generation, regeneration and approval
- Scene editing (update, add, remove, reorder)
- Media generation (background task) and single-image regeneration
- Scene parameter preview for the creation form
"""

from typing import Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from auth import get_current_user_id
from database import get_db, get_db_context
from models import Short, ShortStatus
from pipeline.error_handler import PipelineError, ErrorCode
from pipeline.scene_calculator import calculate_scene_params, get_format_limits, validate_overrides
from pipeline.shorts_pipeline import ShortsPipeline
from schemas import (
    MediaGenerationResponse,
    RegenerateImageRequest,
    SceneInput,
    SceneReorderRequest,
    SceneUpdateRequest,
    ShortCreateRequest,
)
from services.ai_service import get_ai_service

logger = structlog.get_logger()

router = APIRouter(prefix="/api/shorts", tags=["Shorts"])


def get_pipeline(db: Session = Depends(get_db)) -> ShortsPipeline:
    return ShortsPipeline(db, ai_service=get_ai_service())


def _get_owned_short(pipeline: ShortsPipeline, short_id: str, user_id: str) -> Short:
    short = pipeline.get_short(short_id)
    if short.user_id != user_id:
        raise PipelineError(ErrorCode.NOT_FOUND, f"Short {short_id} not found", {"short_id": short_id})
    return short


async def run_media_generation(short_id: str) -> None:
    """Background task: generate prompts and images with its own session"""
    with get_db_context() as db:
        pipeline = ShortsPipeline(db, ai_service=get_ai_service())
        try:
            await pipeline.generate_media(short_id)
        except Exception as e:
            # The short is already marked FAILED with the error message
            logger.error("media_generation_failed", short_id=short_id, error=str(e))


@router.get("/scene-params", summary="Preview Scene Parameters")
async def preview_scene_params(
    format: str = Query("SHORT", description="SHORT, REEL, LONG or YOUTUBE"),
    pressure: Optional[str] = Query(None, description="SLOW, FLUID or FAST"),
    max_scenes: Optional[int] = Query(None, ge=1),
    avg_scene_duration: Optional[int] = Query(None, ge=1),
):
    """
    Calculated scene count/duration for a format and narrative pressure,
    the format's limits, and warnings for manual overrides.
    """
    try:
        params = calculate_scene_params(format, pressure)
        is_valid, warnings = validate_overrides(format, max_scenes, avg_scene_duration)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        **params,
        "limits": get_format_limits(format),
        "overrides_valid": is_valid,
        "warnings": warnings,
    }


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Short")
async def create_short(
    request: ShortCreateRequest,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    short = pipeline.create_short(
        user_id=user_id,
        premise=request.premise,
        climate_id=request.climate_id,
        style_id=request.style_id,
        format=request.format,
        title=request.title,
        target_duration=request.target_duration,
        max_scenes=request.max_scenes,
        avg_scene_duration=request.avg_scene_duration,
        ai_model=request.ai_model,
        scenes=[scene.model_dump() for scene in request.scenes],
    )
    logger.info("short_created", short_id=short.id, user_id=user_id)
    return short.to_dict()


@router.get("", summary="List Shorts")
async def list_shorts(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    query = db.query(Short).filter(Short.user_id == user_id)
    if status_filter:
        query = query.filter(Short.status == status_filter)

    total = query.count()
    shorts = query.order_by(Short.created_at.desc()).offset(offset).limit(limit).all()

    return {
        "shorts": [s.to_dict(include_scenes=False) for s in shorts],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/{short_id}", summary="Get Short")
async def get_short(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    return _get_owned_short(pipeline, short_id, user_id).to_dict()


@router.delete("/{short_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Short")
async def delete_short(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    short = _get_owned_short(pipeline, short_id, user_id)
    pipeline.db.delete(short)
    pipeline.db.commit()
    logger.info("short_deleted", short_id=short_id, user_id=user_id)


@router.post("/{short_id}/generate-script", summary="Generate Script")
async def generate_script(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    """DRAFT/SCRIPT_READY/FAILED → SCRIPT_READY. Errors leave the short FAILED."""
    _get_owned_short(pipeline, short_id, user_id)
    script = await pipeline.generate_script(short_id)
    logger.info("script_generated", short_id=short_id, scenes=len(script["scenes"]))
    return pipeline.get_short(short_id).to_dict()


@router.post("/{short_id}/regenerate-script", summary="Regenerate Script")
async def regenerate_script(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    await pipeline.regenerate_script(short_id)
    return pipeline.get_short(short_id).to_dict()


@router.post("/{short_id}/approve-script", summary="Approve Script")
async def approve_script(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    return pipeline.approve_script(short_id).to_dict()


@router.post(
    "/{short_id}/generate-media",
    response_model=MediaGenerationResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Generate Media",
)
async def generate_media(
    short_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    """
    Start prompt and image generation for an approved short.

    Returns immediately; poll `GET /api/shorts/{id}` for status and progress.
    """
    short = _get_owned_short(pipeline, short_id, user_id)
    if short.status != ShortStatus.SCRIPT_APPROVED:
        raise PipelineError(
            ErrorCode.INVALID_STATE,
            "The script must be approved before generating media",
            {"short_id": short_id, "status": short.status},
        )

    background_tasks.add_task(run_media_generation, short_id)
    logger.info("media_generation_queued", short_id=short_id)

    return MediaGenerationResponse(
        short_id=short_id,
        status=short.status,
        message="Media generation started",
    )


@router.get("/{short_id}/scenes", summary="List Scenes")
async def list_scenes(
    short_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    short = _get_owned_short(pipeline, short_id, user_id)
    return [scene.to_dict() for scene in short.scenes]


@router.post("/{short_id}/scenes", status_code=status.HTTP_201_CREATED, summary="Add Scene")
async def add_scene(
    short_id: str,
    request: SceneInput,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    scene = pipeline.add_scene(
        short_id,
        order=request.order,
        narration=request.narration,
        visual_desc=request.visual_desc,
        duration=request.duration,
    )
    return scene.to_dict()


@router.post("/{short_id}/scenes/reorder", summary="Reorder Scenes")
async def reorder_scenes(
    short_id: str,
    request: SceneReorderRequest,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    scenes = pipeline.reorder_scenes(short_id, request.scene_ids)
    return [scene.to_dict() for scene in scenes]


@router.patch("/{short_id}/scenes/{scene_id}", summary="Update Scene")
async def update_scene(
    short_id: str,
    scene_id: str,
    request: SceneUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    scene = pipeline.update_scene(scene_id, short_id=short_id, **request.model_dump(exclude_unset=True))
    return scene.to_dict()


@router.delete("/{short_id}/scenes/{scene_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Remove Scene")
async def remove_scene(
    short_id: str,
    scene_id: str,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    pipeline.remove_scene(scene_id, short_id=short_id)


@router.post("/{short_id}/scenes/{scene_id}/regenerate-image", summary="Regenerate Scene Image")
async def regenerate_scene_image(
    short_id: str,
    scene_id: str,
    request: RegenerateImageRequest,
    user_id: str = Depends(get_current_user_id),
    pipeline: ShortsPipeline = Depends(get_pipeline),
):
    _get_owned_short(pipeline, short_id, user_id)
    scene = await pipeline.regenerate_scene_image(
        scene_id,
        new_prompt=request.image_prompt,
        new_negative_prompt=request.negative_prompt,
        short_id=short_id,
    )
    return scene.to_dict()
