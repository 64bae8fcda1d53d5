"""
Model Configuration API Router

Provides endpoints for:
- Listing the registered models for each task
- Browsing the live OpenRouter catalog (text model picker)
"""

import structlog
from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional
from pydantic import BaseModel

from services.model_registry import ModelRegistry, ModelTask
from services.openrouter_client import OpenRouterClient

logger = structlog.get_logger()

router = APIRouter(prefix="/api/models", tags=["Models"])

TASK_DESCRIPTIONS = {
    ModelTask.SCRIPT_GENERATION: ("Script Generation", "Write short scripts from a premise"),
    ModelTask.PROMPT_ENGINEERING: ("Prompt Engineering", "Turn scene descriptions into image prompts"),
    ModelTask.IMAGE: ("Images", "Render scene images"),
    ModelTask.VIDEO: ("Videos", "Render scene video clips"),
}


class ModelInfo(BaseModel):
    """Model information response"""
    name: str
    model_id: str
    provider: str
    display_name: str
    description: str
    is_free: bool
    is_default: bool


class TaskModelsResponse(BaseModel):
    """Response containing available models for a task"""
    task: str
    default_model: str
    models: List[ModelInfo]


@router.get("/tasks", summary="List All Tasks")
async def list_tasks():
    """List all AI tasks that accept a model selection."""
    return {
        "tasks": [
            {"id": task.value, "name": name, "description": description}
            for task, (name, description) in TASK_DESCRIPTIONS.items()
        ]
    }


@router.get(
    "/tasks/{task}/models",
    response_model=TaskModelsResponse,
    summary="List Available Models for Task",
)
async def list_task_models(task: str):
    """
    List all registered models for a task.

    **Path Parameters:**
    - **task**: script_generation, prompt_engineering, image or video
    """
    try:
        task_enum = ModelTask(task)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "InvalidTask",
                "message": f"Invalid task type: {task}",
                "valid_tasks": [t.value for t in ModelTask],
            },
        )

    default_model_name = ModelRegistry.get_default_model_name(task_enum)
    models_list = [
        ModelInfo(
            name=name,
            model_id=config.model_id,
            provider=config.provider,
            display_name=config.display_name,
            description=config.description,
            is_free=config.is_free,
            is_default=name == default_model_name or config.model_id == default_model_name,
        )
        for name, config in ModelRegistry.list_models(task_enum).items()
    ]

    logger.info("models_listed", task=task, count=len(models_list))
    return TaskModelsResponse(task=task, default_model=default_model_name, models=models_list)


@router.get("/openrouter", summary="Browse OpenRouter Models")
async def list_openrouter_models(
    capability: Optional[str] = Query(None, description="text, image, vision or audio"),
):
    """Live OpenRouter catalog with pricing per 1M tokens."""
    models = await OpenRouterClient().list_models(capability=capability)
    logger.info("openrouter_models_listed", capability=capability, count=len(models))
    return {"models": models, "count": len(models)}
