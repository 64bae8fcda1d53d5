"""
OpenRouter API Wrapper

Thin async client for the OpenRouter chat-completions and models endpoints,
with retry on transient network errors and provider errors mapped to
pipeline error codes.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import httpx
import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from config import settings
from pipeline.error_handler import APIError, ErrorCode, PipelineError


logger = structlog.get_logger(__name__)

# Typical request used to estimate credits per call
TYPICAL_INPUT_TOKENS = 2000
TYPICAL_OUTPUT_TOKENS = 500


class OpenRouterClient:
    """
    Async wrapper for OpenRouter.

    Usage:
        client = OpenRouterClient()
        text = await client.chat(
            model="anthropic/claude-3.5-sonnet",
            system="You are a scriptwriter",
            prompt="Write a hook about volcanoes",
        )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize OpenRouter client.

        Args:
            api_key: OpenRouter API key. If None, loads from settings
            base_url: API base URL (default: https://openrouter.ai/api/v1)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key or settings.OPENROUTER_API_KEY
        self.base_url = (base_url or settings.OPENROUTER_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.OPENROUTER_TIMEOUT
        self._transport = transport
        self.logger = logger.bind(service="openrouter_client")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=before_sleep_log(logging.getLogger(__name__), logging.INFO),
        reraise=True,
    )
    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with self._client() as client:
            return await client.request(method, path, **kwargs)

    async def _send(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.is_configured():
            raise PipelineError(
                ErrorCode.PROVIDER_NOT_CONFIGURED,
                "OpenRouter API key not configured. Set OPENROUTER_API_KEY.",
                {"service": "openrouter"},
            )

        try:
            response = await self._request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            self.logger.error("openrouter_timeout", path=path, error=str(e))
            raise PipelineError(ErrorCode.API_TIMEOUT, f"OpenRouter request timed out: {e}", {"service": "openrouter"})
        except httpx.TransportError as e:
            self.logger.error("openrouter_network_error", path=path, error=str(e))
            raise APIError("openrouter", f"OpenRouter network error: {e}")

        if response.status_code >= 400:
            self.logger.error("openrouter_api_error", path=path, status_code=response.status_code)
            raise APIError(
                "openrouter",
                f"OpenRouter API error: {response.status_code} {response.text[:500]}",
                status_code=response.status_code,
            )

        return response.json()

    async def chat(
        self,
        model: str,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Run a chat completion and return the assistant text.

        Raises:
            PipelineError: On missing configuration, timeouts or provider errors
        """
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        body: Dict[str, Any] = {"model": model, "messages": messages, "temperature": temperature}
        if max_tokens:
            body["max_tokens"] = max_tokens

        self.logger.info("openrouter_chat_started", model=model, prompt_length=len(prompt))
        data = await self._send("POST", "/chat/completions", json=body)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise APIError("openrouter", "OpenRouter returned no completion", details={"model": model})

        usage = data.get("usage") or {}
        self.logger.info(
            "openrouter_chat_completed",
            model=model,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
        )
        return content or ""

    async def list_models(self, capability: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List OpenRouter models, normalized.

        Args:
            capability: Optional filter: text, image, vision or audio
        """
        data = await self._send("GET", "/models")
        models = [self.normalize_model(raw) for raw in data.get("data", [])]
        if capability:
            models = [m for m in models if capability in m["capabilities"]]
        return models

    @staticmethod
    def extract_capabilities(raw: Dict[str, Any]) -> List[str]:
        architecture = raw.get("architecture") or {}
        inputs = architecture.get("input_modalities") or []
        outputs = architecture.get("output_modalities") or []

        capabilities = []
        if "text" in inputs or "text" in outputs:
            capabilities.append("text")
        if "image" in outputs:
            capabilities.append("image")
        if "image" in inputs:
            capabilities.append("vision")
        if "audio" in inputs or "audio" in outputs:
            capabilities.append("audio")

        return capabilities or ["text"]

    @staticmethod
    def extract_pricing(raw: Dict[str, Any]) -> Dict[str, Any]:
        """Per-token prices converted to per-1M tokens, plus a credit estimate (1 credit ≈ $0.001)."""
        pricing = raw.get("pricing") or {}

        def _price(key: str) -> float:
            try:
                return float(pricing.get(key) or 0)
            except (TypeError, ValueError):
                return 0.0

        input_per_token = _price("prompt")
        output_per_token = _price("completion")
        typical_cost = TYPICAL_INPUT_TOKENS * input_per_token + TYPICAL_OUTPUT_TOKENS * output_per_token

        return {
            "input_per_1m": input_per_token * 1_000_000,
            "output_per_1m": output_per_token * 1_000_000,
            "billing_type": "token",
            "estimated_credits_per_use": max(1, math.ceil(typical_cost * 1000)),
        }

    def normalize_model(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        top_provider = raw.get("top_provider") or {}
        return {
            "id": raw["id"],
            "name": raw.get("name") or raw["id"],
            "description": raw.get("description"),
            "provider": "openrouter",
            "capabilities": self.extract_capabilities(raw),
            "context_window": raw.get("context_length") or top_provider.get("context_length"),
            "max_output_tokens": top_provider.get("max_completion_tokens"),
            "pricing": self.extract_pricing(raw),
        }
