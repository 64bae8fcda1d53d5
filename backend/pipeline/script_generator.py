"""
Script Generator

Turns a scriptwriter payload (premise + style + climate + constraints) into a
structured short script using a text model on OpenRouter.

The system prompt stacks three layers, strongest first:
1. Climate instructions (emotion, pacing, hook, closing)
2. Style instructions (structure, register, narrator)
3. The user's advanced instructions, sanitized and marked low-weight
"""

import json
import logging
import re
from typing import Dict, Any, Optional

from climate.behavior_mapping import build_climate_prompt
from pipeline.error_handler import PipelineError, ErrorCode
from services.ai_service import AIService
from services.model_registry import ModelTask
from styles.instructions import build_style_prompt, process_advanced_instructions

# Configure logging
logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*|\s*```")

DEFAULT_SCENE_DURATION = 5

SCRIPTWRITER_BASE_PROMPT = """You are an expert scriptwriter for viral short-form videos (Shorts, Reels, TikTok).

Your scripts must:
- Grab attention in the first 3 seconds with a strong hook
- Keep the viewer engaged until the end
- Follow a clear narrative with a beginning, middle and end
- Close in the way the climate below asks for

RULES:
1. Narration must be concise and spoken-word friendly
2. Visual descriptions must be detailed enough to generate images from
3. The sum of scene durations should match the target duration
4. Respect the exact number of scenes requested

Respond ONLY with valid JSON, without markdown or explanations.
The response must be a JSON object with the fields: title, summary, hook, scenes (array), cta."""


class ScriptGenerationError(PipelineError):
    """Raised when script generation fails"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.SCRIPT_GENERATION_FAILED, message, details)


def strip_code_fences(text: str) -> str:
    """Remove ```json fences models like to wrap their JSON in"""
    return CODE_FENCE_PATTERN.sub("", text or "").strip()


class ScriptGenerator:
    """
    Generates short scripts using AIService (OpenRouter text models)

    Features:
    - Climate- and style-driven system prompt
    - Scene count and duration constraints from the scene calculator
    - Character-aware narration
    - Strict JSON parsing and normalization of the model output
    """

    def __init__(self, ai_service: Optional[AIService] = None):
        """
        Initialize the script generator

        Args:
            ai_service: Optional AIService instance (creates one if None)
        """
        self.ai_service = ai_service or AIService()
        logger.info("ScriptGenerator initialized with AIService")

    def build_system_prompt(self, payload: Dict[str, Any]) -> str:
        """Compose base instructions, climate, style and low-weight user instructions"""
        climate = payload.get("climate") or {}
        style = payload.get("style") or {}

        sections = [SCRIPTWRITER_BASE_PROMPT]

        climate_prompt = build_climate_prompt(
            {**climate, "prompt_fragment": climate.get("custom_instructions")}
        )
        if climate_prompt:
            sections.append(f"CLIMATE: {climate.get('name') or 'Default'}\n\n{climate_prompt}")

        sections.append(build_style_prompt(style))

        advanced = process_advanced_instructions(
            style.get("script_instructions"),
            style_name=style.get("name"),
            climate_name=climate.get("name"),
        )
        if advanced:
            sections.append(advanced)

        return "\n\n".join(sections)

    def build_user_prompt(self, payload: Dict[str, Any]) -> str:
        """Premise, scene constraints, characters and the expected JSON shape"""
        constraints = payload["constraints"]
        scenes = constraints["max_scenes"]
        duration = constraints["avg_scene_duration"]

        characters = payload.get("characters") or []
        if characters:
            character_lines = "\n".join(
                f"- {c['name']} ({c.get('role') or 'character'}): {c.get('description') or ''}".rstrip(": ")
                for c in characters
            )
            characters_block = (
                f"\nCHARACTERS (use them consistently in narration and visuals):\n{character_lines}\n"
            )
        else:
            characters_block = ""

        return f"""Write a script for a {constraints['format']} video about:
PREMISE: {payload['premise']}

CONSTRAINTS:
- Exactly {scenes} scenes
- About {duration} seconds per scene
- Target total duration: {constraints['total_duration']} seconds
{characters_block}
Return JSON with this structure:
{{
  "title": "Catchy title",
  "summary": "One-sentence summary",
  "hook": "Opening line for the first 3 seconds",
  "scenes": [
    {{
      "order": 0,
      "narration": "Text narrated in this scene",
      "visual_description": "Detailed description of what appears on screen",
      "duration": {duration}
    }}
  ],
  "cta": "Closing call to action"
}}"""

    def parse_script_response(self, text: str) -> Dict[str, Any]:
        """
        Parse and normalize the model output

        - Strips markdown code fences
        - Requires title, hook, cta and at least one scene
        - Scenes are re-numbered 0..n-1 in the order they were returned,
          whatever "order" values the model wrote
        - Missing/invalid durations fall back to DEFAULT_SCENE_DURATION

        Raises:
            ScriptGenerationError: If the output is not a valid script
        """
        try:
            script = json.loads(strip_code_fences(text))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse script JSON: {e}")
            raise ScriptGenerationError(f"Invalid JSON response from AI: {e}", {"raw": (text or "")[:500]})

        if not isinstance(script, dict):
            raise ScriptGenerationError("Script must be a JSON object")

        missing = [field for field in ("title", "hook", "scenes", "cta") if not script.get(field)]
        if missing:
            raise ScriptGenerationError(
                f"Invalid script: missing required fields {', '.join(missing)}",
                {"missing_fields": missing},
            )

        raw_scenes = script["scenes"]
        if not isinstance(raw_scenes, list) or not raw_scenes:
            raise ScriptGenerationError("Invalid script: no scenes generated")

        scenes = []
        for index, scene in enumerate(raw_scenes):
            if not isinstance(scene, dict):
                raise ScriptGenerationError(f"Invalid script: scene {index} is not an object")

            try:
                duration = int(scene.get("duration") or DEFAULT_SCENE_DURATION)
            except (TypeError, ValueError):
                duration = DEFAULT_SCENE_DURATION

            scenes.append({
                "order": index,
                "narration": scene.get("narration") or "",
                "visual_description": scene.get("visual_description") or scene.get("visualDescription") or "",
                "duration": duration if duration > 0 else DEFAULT_SCENE_DURATION,
            })

        return {
            "title": script["title"],
            "summary": script.get("summary") or "",
            "hook": script["hook"],
            "scenes": scenes,
            "cta": script["cta"],
            "total_duration": sum(s["duration"] for s in scenes),
        }

    async def generate_script(self, payload: Dict[str, Any], model_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Generate a complete short script

        Args:
            payload: Output of build_scriptwriter_payload()
            model_name: Optional registry name or OpenRouter model ID

        Returns:
            {"title", "summary", "hook", "scenes": [...], "cta", "total_duration"}

        Raises:
            ScriptGenerationError: If the model output is unusable
            PipelineError: Provider errors are propagated unchanged
        """
        logger.info(
            f"Generating script for premise '{payload['premise'][:60]}' "
            f"({payload['constraints']['max_scenes']} scenes, model={model_name or 'default'})"
        )

        try:
            text = await self.ai_service.generate_text(
                prompt=self.build_user_prompt(payload),
                system=self.build_system_prompt(payload),
                task=ModelTask.SCRIPT_GENERATION,
                model_name=model_name,
            )
        except PipelineError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error during script generation: {e}")
            raise ScriptGenerationError(f"Script generation failed: {e}")

        script = self.parse_script_response(text)

        logger.info(f"Script generated: '{script['title']}' with {len(script['scenes'])} scenes")
        return script


def create_script_generator(ai_service: Optional[AIService] = None) -> ScriptGenerator:
    """
    Factory function to create a ScriptGenerator instance

    Example:
        >>> generator = create_script_generator()
        >>> script = await generator.generate_script(payload)
    """
    return ScriptGenerator(ai_service=ai_service)
