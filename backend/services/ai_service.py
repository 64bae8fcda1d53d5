"""
Unified AI Service - Single interface for all AI operations

Architecture:
    AIService (high-level, task-oriented)
        ↓
    OpenRouterClient (text)  /  FalClient (image, video)
        ↓
    OpenRouter API  /  fal.ai API
"""

from typing import Dict, Any, Optional
import structlog

from services.openrouter_client import OpenRouterClient
from services.fal_client import FalClient, IMAGE_PRESETS
from services.model_registry import ModelRegistry, ModelTask, ModelConfig

logger = structlog.get_logger()


class AIService:
    """
    Unified AI service for all AI operations.

    Provides task-oriented methods that hide which provider runs a model.
    Supports runtime model selection through the registry.

    Example:
        ```python
        ai_service = AIService()

        text = await ai_service.generate_text(
            prompt="Write a hook about deep sea creatures",
            system="You are a short-form video scriptwriter",
        )
        image = await ai_service.generate_image("bioluminescent jellyfish, cinematic")
        ```
    """

    def __init__(
        self,
        openrouter_client: Optional[OpenRouterClient] = None,
        fal_client: Optional[FalClient] = None,
    ):
        self.text_client = openrouter_client or OpenRouterClient()
        self.media_client = fal_client or FalClient()
        self.registry = ModelRegistry()

        logger.info("ai_service_initialized")

    async def generate_text(
        self,
        prompt: str,
        system: Optional[str] = None,
        task: ModelTask = ModelTask.SCRIPT_GENERATION,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Generate text with an OpenRouter model.

        Args:
            prompt: User prompt
            system: Optional system prompt
            task: SCRIPT_GENERATION or PROMPT_ENGINEERING (selects the default model)
            model_name: Optional registry name or OpenRouter model ID
            temperature: Overrides the model's default temperature
        """
        model = self.registry.get_model(task, model_name)
        params = model.default_params

        logger.info("generating_text", task=task.value, model=model.model_id, prompt_length=len(prompt))

        try:
            return await self.text_client.chat(
                model=model.model_id,
                prompt=prompt,
                system=system,
                temperature=params.get("temperature", 0.7) if temperature is None else temperature,
                max_tokens=params.get("max_tokens"),
            )
        except Exception as e:
            logger.error("text_generation_failed", error=str(e), model=model.model_id)
            raise

    async def generate_image(
        self,
        prompt: str,
        image_size: Any = IMAGE_PRESETS["short_vertical"],
        seed: Optional[int] = None,
        model_name: Optional[str] = None,
        negative_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate a single image.

        Returns:
            {"url", "width", "height", "content_type"} of the first image
        """
        model = self.registry.get_model(ModelTask.IMAGE, model_name)
        params = model.default_params

        logger.info("generating_image", prompt=prompt[:50], model=model.model_id)

        try:
            output = await self.media_client.generate_flux_image(
                prompt=prompt,
                image_size=image_size,
                seed=seed,
                negative_prompt=negative_prompt,
                num_inference_steps=params.get("num_inference_steps", 4),
                enable_safety_checker=params.get("enable_safety_checker", True),
                model=model.model_id,
            )
        except Exception as e:
            logger.error("image_generation_failed", error=str(e), model=model.model_id)
            raise

        images = output.get("images") or []
        if not images:
            raise ValueError("Image model returned no images")

        logger.info("image_generated", url=images[0].get("url"))
        return images[0]

    async def generate_video(
        self,
        prompt: str,
        image_url: Optional[str] = None,
        duration: int = 5,
        negative_prompt: Optional[str] = None,
        model_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate a vertical video clip.

        Kling only renders 5 or 10 second clips; durations above 5 use 10.

        Returns:
            {"url", "content_type", "file_name", "file_size"}
        """
        model = self.registry.get_model(ModelTask.VIDEO, model_name)
        clip_duration = "10" if duration > 5 else "5"

        logger.info(
            "generating_video",
            prompt=prompt[:50],
            duration=clip_duration,
            model=model.model_id,
            has_image=image_url is not None,
        )

        try:
            output = await self.media_client.generate_kling_video(
                prompt=prompt,
                image_url=image_url,
                duration=clip_duration,
                aspect_ratio=model.default_params.get("aspect_ratio", "9:16"),
                negative_prompt=negative_prompt,
            )
        except Exception as e:
            logger.error("video_generation_failed", error=str(e), model=model.model_id)
            raise

        video = output.get("video")
        if not video:
            raise ValueError("Video model returned no video")

        logger.info("video_generated", url=video.get("url"))
        return video

    def get_available_models(self, task: ModelTask) -> Dict[str, ModelConfig]:
        """Get all available models for a task."""
        return self.registry.list_models(task)

    def get_default_model(self, task: ModelTask) -> str:
        """Get the default model name for a task."""
        return self.registry.get_default_model_name(task)


_ai_service: Optional[AIService] = None


def get_ai_service() -> AIService:
    """Get the shared AIService instance."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService()
    return _ai_service
