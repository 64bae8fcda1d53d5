"""
Prompt Engineer

Converts the visual descriptions of an approved script into image prompts
tuned for FLUX (vertical 9:16, consistent look across scenes).
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pipeline.error_handler import PipelineError, ErrorCode
from pipeline.script_generator import strip_code_fences
from services.ai_service import AIService
from services.model_registry import ModelTask

logger = logging.getLogger(__name__)

DEFAULT_NEGATIVE_PROMPT = "blurry, low quality, distorted, ugly, bad anatomy, text, watermark"

PROMPT_ENGINEER_SYSTEM_PROMPT = """You are a prompt engineer specialized in image generation models such as FLUX and Stable Diffusion.

Turn the visual descriptions of a script into prompts that:
- Produce high quality, visually striking images
- Keep a consistent look across scenes
- Are composed for vertical 9:16 frames
- Include technical details (lighting, composition, art style)

PROMPT STRUCTURE:
1. Main subject
2. Action/pose
3. Environment
4. Lighting
5. Art style
6. Quality tags

DEFAULT NEGATIVE PROMPTS:
- Always include: "blurry, low quality, distorted, ugly, bad anatomy"
- With people add: "extra limbs, missing limbs, disfigured"
- Against text add: "text, watermark, signature, logo"

Respond ONLY with valid JSON, without markdown or explanations.
The response must be a JSON object with: prompts (array), style, consistency."""


class PromptEngineeringError(PipelineError):
    """Raised when image prompts cannot be produced"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.PROMPT_GENERATION_FAILED, message, details)


class PromptEngineer:
    """Generates one image prompt per scene using AIService"""

    def __init__(self, ai_service: Optional[AIService] = None):
        self.ai_service = ai_service or AIService()

    def build_user_prompt(
        self,
        script: Mapping[str, Any],
        style_name: Optional[str] = None,
        characters: Iterable[Mapping[str, Any]] = (),
        visual_base: Optional[str] = None,
    ) -> str:
        characters = list(characters)
        character_block = ""
        if characters:
            lines = "\n".join(f"- {c['name']}: {c.get('visual_prompt') or c.get('description') or ''}" for c in characters)
            character_block = f"\nCHARACTERS (describe them identically in every scene they appear in):\n{lines}\n"

        visual_block = f"\nBASE VISUAL STYLE: {visual_base}\n" if visual_base else ""

        return f"""Convert the scenes of this script into optimized image prompts.

STYLE: {style_name or 'Default'}
{visual_block}{character_block}
SCRIPT:
{json.dumps(script, indent=2, ensure_ascii=False)}

For each scene write a prompt following these guidelines:
- Prompts in English
- Vertical format (9:16)
- Consistent style across scenes
- A scene-specific negative prompt

Return JSON with this structure:
{{
  "prompts": [
    {{
      "scene_order": 0,
      "image_prompt": "subject, action, environment, lighting, style, quality tags",
      "negative_prompt": "{DEFAULT_NEGATIVE_PROMPT}"
    }}
  ],
  "style": "consistent style description for all scenes",
  "consistency": "tips to keep scenes visually consistent"
}}"""

    def parse_prompts_response(self, text: str, scene_count: int) -> Dict[str, Any]:
        """
        Parse the model output into {"prompts", "style", "consistency"}.

        Raises:
            PromptEngineeringError: Invalid JSON, no prompts, or a prompt count
                different from the number of scenes
        """
        try:
            output = json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse prompts JSON: {e}")
            raise PromptEngineeringError(f"Invalid JSON response from AI: {e}")

        raw_prompts = output.get("prompts") if isinstance(output, dict) else None
        if not raw_prompts:
            raise PromptEngineeringError("Invalid prompts: no prompts generated")

        if len(raw_prompts) != scene_count:
            raise PromptEngineeringError(
                f"Invalid prompts: expected {scene_count} prompts, received {len(raw_prompts)}",
                {"expected": scene_count, "received": len(raw_prompts)},
            )

        prompts: List[Dict[str, Any]] = []
        for index, item in enumerate(raw_prompts):
            image_prompt = item.get("image_prompt") or item.get("imagePrompt")
            if not image_prompt:
                raise PromptEngineeringError(f"Invalid prompts: prompt {index} is empty")

            order = item.get("scene_order", item.get("sceneOrder", index))
            prompts.append({
                "scene_order": order if isinstance(order, int) else index,
                "image_prompt": image_prompt,
                "negative_prompt": item.get("negative_prompt") or item.get("negativePrompt") or DEFAULT_NEGATIVE_PROMPT,
            })

        return {
            "prompts": prompts,
            "style": output.get("style") or "",
            "consistency": output.get("consistency") or "",
        }

    async def generate_prompts(
        self,
        script: Mapping[str, Any],
        style_name: Optional[str] = None,
        characters: Iterable[Mapping[str, Any]] = (),
        visual_base: Optional[str] = None,
        model_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate image prompts for every scene of a script.

        Args:
            script: {"title", "hook", "cta", "scenes": [{"order", "narration", "visual_description", "duration"}]}
            style_name: Name of the short's style
            characters: Characters to keep visually consistent
            visual_base: The style's base visual prompt
            model_name: Optional text model override
        """
        scene_count = len(script.get("scenes") or [])
        logger.info(f"Generating image prompts for {scene_count} scenes")

        try:
            text = await self.ai_service.generate_text(
                prompt=self.build_user_prompt(script, style_name, characters, visual_base),
                system=PROMPT_ENGINEER_SYSTEM_PROMPT,
                task=ModelTask.PROMPT_ENGINEERING,
                model_name=model_name,
                temperature=0.5,
            )
        except PipelineError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error during prompt generation: {e}")
            raise PromptEngineeringError(f"Prompt generation failed: {e}")

        output = self.parse_prompts_response(text, scene_count)
        logger.info(f"Generated {len(output['prompts'])} image prompts")
        return output
