"""
fal.ai API Wrapper

Two invocation modes:
- run(): synchronous endpoint (fal.run), for fast models like FLUX Schnell
- run_queued(): queue endpoint (queue.fal.run) with polling, for slow
  models like Kling video
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

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

FAL_RUN_URL = "https://fal.run"
FAL_QUEUE_URL = "https://queue.fal.run"

FLUX_SCHNELL_MODEL = "fal-ai/flux/schnell"

KLING_MODELS = {
    "text_to_video": "fal-ai/kling-video/v2.5-turbo/pro/text-to-video",
    "image_to_video": "fal-ai/kling-video/v2.5-turbo/pro/image-to-video",
}

IMAGE_PRESETS = {
    "short_vertical": "portrait_16_9",
    "short_square": "square_hd",
    "thumbnail": "landscape_16_9",
}


class FalClient:
    """
    Async wrapper for fal.ai.

    Usage:
        client = FalClient()
        output = await client.generate_flux_image("a lighthouse in a storm")
        url = output["images"][0]["url"]
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        queue_timeout: Optional[float] = None,
        polling_interval: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.FAL_API_KEY
        self.timeout = timeout or settings.FAL_TIMEOUT
        self.queue_timeout = queue_timeout or settings.FAL_QUEUE_TIMEOUT
        self.polling_interval = settings.FAL_POLLING_INTERVAL if polling_interval is None else polling_interval
        self._transport = transport
        self.logger = logger.bind(service="fal_client")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _ensure_configured(self) -> None:
        if not self.is_configured():
            raise PipelineError(
                ErrorCode.PROVIDER_NOT_CONFIGURED,
                "fal.ai API key not configured. Set FAL_API_KEY.",
                {"service": "fal"},
            )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Authorization": f"Key {self.api_key}", "Content-Type": "application/json"},
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
    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        async with self._client() as client:
            return await client.request(method, url, **kwargs)

    async def _call(self, method: str, url: str, stage: str, **kwargs) -> httpx.Response:
        try:
            return await self._request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            self.logger.error("fal_timeout", url=url, stage=stage, error=str(e))
            raise PipelineError(ErrorCode.API_TIMEOUT, f"fal.ai request timed out ({stage}): {e}", {"service": "fal"})
        except httpx.TransportError as e:
            self.logger.error("fal_network_error", url=url, stage=stage, error=str(e))
            raise APIError("fal", f"fal.ai network error ({stage}): {e}")

    def _raise_for_status(self, response: httpx.Response, model: str, stage: str) -> None:
        self.logger.error("fal_api_error", model=model, stage=stage, status_code=response.status_code)
        raise APIError(
            "fal",
            f"fal.ai API error ({stage}): {response.status_code} {response.text[:500]}",
            status_code=response.status_code,
            details={"model": model},
        )

    async def run(
        self, model: str, input_params: Dict[str, Any], timeout: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Run a model on the synchronous endpoint and return its JSON output.

        Raises:
            PipelineError: On missing key, timeout or non-2xx response
        """
        self._ensure_configured()
        self.logger.info("fal_run_started", model=model)

        response = await self._call(
            "POST", f"{FAL_RUN_URL}/{model}", "run", json=input_params, timeout=timeout or self.timeout
        )
        if response.status_code >= 400:
            self._raise_for_status(response, model, "run")

        self.logger.info("fal_run_completed", model=model)
        return response.json()

    async def run_queued(
        self,
        model: str,
        input_params: Dict[str, Any],
        timeout: Optional[float] = None,
        polling_interval: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Submit a request to the queue and poll until it completes.

        A poll answering 200 carries the result, 202 means still running,
        anything else is a failure. Polling stops at timeout (queue_timeout by default).

        Raises:
            PipelineError: API_TIMEOUT when the deadline passes, FAL_API_ERROR otherwise
        """
        self._ensure_configured()
        timeout = timeout or self.queue_timeout
        interval = self.polling_interval if polling_interval is None else polling_interval
        deadline = time.monotonic() + timeout

        submit = await self._call("POST", f"{FAL_QUEUE_URL}/{model}", "submit", json=input_params)
        if submit.status_code >= 400:
            self._raise_for_status(submit, model, "submit")

        request_id = submit.json().get("request_id")
        if not request_id:
            raise APIError("fal", "fal.ai queue did not return a request_id", details={"model": model})

        self.logger.info("fal_request_queued", model=model, request_id=request_id)
        poll_url = f"{FAL_QUEUE_URL}/{model}/requests/{request_id}"

        while time.monotonic() < deadline:
            result = await self._call("GET", poll_url, "poll")
            if result.status_code == 200:
                self.logger.info("fal_request_completed", model=model, request_id=request_id)
                return result.json()
            if result.status_code != 202:
                self._raise_for_status(result, model, "poll")
            await asyncio.sleep(interval)

        self.logger.error("fal_queue_timeout", model=model, request_id=request_id)
        raise PipelineError(
            ErrorCode.API_TIMEOUT,
            f"fal.ai request {request_id} did not finish within {timeout}s",
            {"service": "fal", "model": model, "request_id": request_id},
        )

    async def generate_flux_image(
        self,
        prompt: str,
        image_size: Any = IMAGE_PRESETS["short_vertical"],
        num_images: int = 1,
        num_inference_steps: int = 4,
        seed: Optional[int] = None,
        enable_safety_checker: bool = True,
        model: str = FLUX_SCHNELL_MODEL,
        negative_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Returns {"images": [{"url", "width", "height", "content_type"}], "seed"}"""
        input_params: Dict[str, Any] = {
            "prompt": prompt,
            "image_size": image_size,
            "num_images": num_images,
            "num_inference_steps": num_inference_steps,
            "enable_safety_checker": enable_safety_checker,
        }
        if seed is not None:
            input_params["seed"] = seed
        if negative_prompt:
            input_params["negative_prompt"] = negative_prompt

        return await self.run(model, input_params)

    async def generate_kling_video(
        self,
        prompt: str,
        image_url: Optional[str] = None,
        duration: str = "5",
        aspect_ratio: str = "9:16",
        negative_prompt: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate a video clip with Kling.

        Uses image-to-video when image_url is given, text-to-video otherwise.
        Returns {"video": {"url", "content_type", "file_name", "file_size"}, "seed"}
        """
        model = KLING_MODELS["image_to_video"] if image_url else KLING_MODELS["text_to_video"]

        input_params: Dict[str, Any] = {
            "prompt": prompt,
            "duration": str(duration),
            "aspect_ratio": aspect_ratio,
        }
        if image_url:
            input_params["image_url"] = image_url
        if negative_prompt:
            input_params["negative_prompt"] = negative_prompt

        return await self.run_queued(model, input_params)


_fal_client: Optional[FalClient] = None


def get_fal_client() -> FalClient:
    """Get the shared FalClient instance."""
    global _fal_client
    if _fal_client is None:
        _fal_client = FalClient()
    return _fal_client
