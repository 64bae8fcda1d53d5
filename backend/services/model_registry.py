"""
Model Registry - Centralized configuration for all AI models

Single source of truth for the models used by each task, supporting runtime
model selection. Text models run on OpenRouter, image/video models on fal.ai.
"""

from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel
import structlog

from config import settings

logger = structlog.get_logger()


class ModelTask(str, Enum):
    """AI task types"""
    SCRIPT_GENERATION = "script_generation"
    PROMPT_ENGINEERING = "prompt_engineering"
    IMAGE = "image"
    VIDEO = "video"


class ModelConfig(BaseModel):
    """Configuration for a specific AI model"""
    model_id: str  # Provider model ID (e.g., "anthropic/claude-3.5-sonnet")
    provider: str  # "openrouter" or "fal"
    display_name: str
    description: str
    default_params: Dict[str, Any] = {}
    is_free: bool = False


class ModelRegistry:
    """
    Registry of all available AI models organized by task type.

    Provides:
    - Model discovery and selection
    - Runtime model configuration
    - Default model fallbacks (overridable through settings)
    """

    TEXT_MODELS: Dict[str, ModelConfig] = {
        "claude-3.5-sonnet": ModelConfig(
            model_id="anthropic/claude-3.5-sonnet",
            provider="openrouter",
            display_name="Claude 3.5 Sonnet",
            description="Best for creative, nuanced script writing",
            default_params={"temperature": 0.7, "max_tokens": 4096},
        ),
        "deepseek-chat": ModelConfig(
            model_id="deepseek/deepseek-chat",
            provider="openrouter",
            display_name="DeepSeek Chat",
            description="Fast, cost-effective script writing",
            default_params={"temperature": 0.7, "max_tokens": 4096},
        ),
        "gpt-4o-mini": ModelConfig(
            model_id="openai/gpt-4o-mini",
            provider="openrouter",
            display_name="GPT-4o mini",
            description="Balanced performance and cost",
            default_params={"temperature": 0.7, "max_tokens": 4096},
        ),
        "llama-3.1-8b-free": ModelConfig(
            model_id="meta-llama/llama-3.1-8b-instruct:free",
            provider="openrouter",
            display_name="Llama 3.1 8B (free)",
            description="Free tier model for drafts",
            default_params={"temperature": 0.7, "max_tokens": 2048},
            is_free=True,
        ),
    }

    IMAGE_MODELS: Dict[str, ModelConfig] = {
        "flux-schnell": ModelConfig(
            model_id="fal-ai/flux/schnell",
            provider="fal",
            display_name="FLUX.1 Schnell",
            description="Ultra-fast image generation",
            default_params={"num_inference_steps": 4, "enable_safety_checker": True},
        ),
        "flux-dev": ModelConfig(
            model_id="fal-ai/flux/dev",
            provider="fal",
            display_name="FLUX.1 Dev",
            description="Higher quality, slower generation",
            default_params={"num_inference_steps": 28, "enable_safety_checker": True},
        ),
    }

    VIDEO_MODELS: Dict[str, ModelConfig] = {
        "kling-2.5-turbo": ModelConfig(
            model_id="fal-ai/kling-video/v2.5-turbo/pro",
            provider="fal",
            display_name="Kling 2.5 Turbo Pro",
            description="Text/image-to-video clips of 5 or 10 seconds",
            default_params={"duration": "5", "aspect_ratio": "9:16"},
        ),
    }

    # Default models for each task
    DEFAULT_MODELS: Dict[ModelTask, str] = {
        ModelTask.SCRIPT_GENERATION: "claude-3.5-sonnet",
        ModelTask.PROMPT_ENGINEERING: "claude-3.5-sonnet",
        ModelTask.IMAGE: "flux-schnell",
        ModelTask.VIDEO: "kling-2.5-turbo",
    }

    @classmethod
    def _registry_for(cls, task: ModelTask) -> Dict[str, ModelConfig]:
        registry_map = {
            ModelTask.SCRIPT_GENERATION: cls.TEXT_MODELS,
            ModelTask.PROMPT_ENGINEERING: cls.TEXT_MODELS,
            ModelTask.IMAGE: cls.IMAGE_MODELS,
            ModelTask.VIDEO: cls.VIDEO_MODELS,
        }
        return registry_map.get(task, {})

    @classmethod
    def get_default_model_name(cls, task: ModelTask) -> str:
        """Get the default model name for a task (settings override the built-in default)."""
        overrides = {
            ModelTask.SCRIPT_GENERATION: settings.DEFAULT_SCRIPT_MODEL,
            ModelTask.PROMPT_ENGINEERING: settings.DEFAULT_PROMPT_MODEL,
            ModelTask.IMAGE: settings.DEFAULT_IMAGE_MODEL,
            ModelTask.VIDEO: settings.DEFAULT_VIDEO_MODEL,
        }
        return overrides.get(task) or cls.DEFAULT_MODELS.get(task, "")

    @classmethod
    def get_model(cls, task: ModelTask, model_name: Optional[str] = None) -> ModelConfig:
        """
        Get model configuration for a task.

        model_name may be a registry name ("flux-schnell") or a raw provider
        model ID ("fal-ai/flux/schnell"); an unregistered ID containing "/"
        is accepted as-is for text models, since OpenRouter exposes hundreds.

        Raises:
            ValueError: If model not found
        """
        registry = cls._registry_for(task)
        if not registry:
            raise ValueError(f"Unknown task type: {task}")

        if model_name is None:
            model_name = cls.get_default_model_name(task)

        model_config = registry.get(model_name)
        if model_config is None:
            model_config = next((m for m in registry.values() if m.model_id == model_name), None)
        if model_config is None and registry is cls.TEXT_MODELS and "/" in model_name:
            model_config = ModelConfig(
                model_id=model_name,
                provider="openrouter",
                display_name=model_name,
                description="OpenRouter model",
                default_params={"temperature": 0.7},
            )
        if model_config is None:
            raise ValueError(
                f"Model '{model_name}' not found for task '{task.value}'. "
                f"Available models: {list(registry.keys())}"
            )

        logger.info(
            "model_selected",
            task=task.value,
            model_name=model_name,
            model_id=model_config.model_id,
        )

        return model_config

    @classmethod
    def list_models(cls, task: ModelTask) -> Dict[str, ModelConfig]:
        """List all available models for a task."""
        return cls._registry_for(task)
