from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..config import ProviderCredentials, ResolutionConfig
from .base import GenerationRequest, HttpProvider, ImageGenerator, ProviderCallFailed, ProviderUnavailable

logger = logging.getLogger(__name__)

RUNPOD_BASE_URL = "https://api.runpod.ai/v2"
OPENAI_IMAGES_URL = "https://api.openai.com/v1/images/generations"


def _as_data_uri(payload: str, mime: str = "image/png") -> str:
    if payload.startswith("data:"):
        return payload
    return f"data:{mime};base64,{payload}"


class RunpodImageProvider(HttpProvider, ImageGenerator):
    """Fast serverless FLUX/SDXL generation through RunPod ``runsync``."""

    name = "runpod"

    def __init__(
        self,
        api_key: Optional[str],
        flux_endpoint: Optional[str],
        sdxl_endpoint: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(client, timeout=timeout)
        self.api_key = (api_key or "").strip() or None
        self.flux_endpoint = (flux_endpoint or "").strip() or None
        self.sdxl_endpoint = (sdxl_endpoint or "").strip() or None

    @property
    def configured(self) -> bool:
        return self.api_key is not None and (self.flux_endpoint or self.sdxl_endpoint) is not None

    def _endpoint_for(self, model: Optional[str]) -> Optional[str]:
        if model == "sdxl" and self.sdxl_endpoint:
            return self.sdxl_endpoint
        return self.flux_endpoint or self.sdxl_endpoint

    async def generate(self, request: GenerationRequest) -> str:
        endpoint = self._endpoint_for(request.model)
        if self.api_key is None or endpoint is None:
            raise ProviderUnavailable("RUNPOD_API_KEY or RunPod endpoint is not configured")

        body = {
            "input": {
                "prompt": request.prompt,
                "width": request.width,
                "height": request.height,
                "num_inference_steps": 8 if request.quality == "high" else 4,
                "guidance_scale": 3.5,
            }
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        logger.debug("Requesting RunPod generation on endpoint %s", endpoint)
        data = await self._request_json(
            "POST", f"{RUNPOD_BASE_URL}/{endpoint}/runsync", json=body, headers=headers
        )
        return self._extract_image(data)

    def _extract_image(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise ProviderCallFailed("RunPod response is not a JSON object")
        if data.get("status") == "FAILED":
            raise ProviderCallFailed(f"RunPod job failed: {data.get('error') or 'unknown error'}")

        output = data.get("output")
        if isinstance(output, dict):
            images = output.get("images")
            if isinstance(images, list) and images and isinstance(images[0], str) and images[0]:
                return _as_data_uri(images[0])
            image = output.get("image")
            if isinstance(image, str) and image:
                return image
        raise ProviderCallFailed(f"RunPod returned no image (status={data.get('status')})")


class OpenAIImageProvider(HttpProvider, ImageGenerator):
    """Slower, higher quality generation through the OpenAI images endpoint."""

    name = "openai"
    default_model = "dall-e-3"

    def __init__(
        self,
        api_key: Optional[str],
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(client, timeout=timeout)
        self.api_key = (api_key or "").strip() or None

    @property
    def configured(self) -> bool:
        return self.api_key is not None

    @staticmethod
    def size_for(aspect_ratio: str) -> str:
        if aspect_ratio == "1:1":
            return "1024x1024"
        if aspect_ratio in ("9:16", "3:4"):
            return "1024x1792"
        return "1792x1024"

    async def generate(self, request: GenerationRequest) -> str:
        if self.api_key is None:
            raise ProviderUnavailable("OPENAI_API_KEY is not configured")

        model = request.model if request.model and request.model.startswith("dall-e") else self.default_model
        body = {
            "model": model,
            "prompt": request.prompt,
            "n": 1,
            "size": self.size_for(request.aspect_ratio),
            "quality": "hd" if request.quality == "high" else "standard",
            "style": "vivid",
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        logger.debug("Requesting OpenAI image generation with model %s", model)
        data = await self._request_json("POST", OPENAI_IMAGES_URL, json=body, headers=headers)
        return self._extract_image(data)

    def _extract_image(self, data: Any) -> str:
        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise ProviderCallFailed("OpenAI response contains no image data")
        first = items[0]
        url = first.get("url")
        if isinstance(url, str) and url:
            return url
        encoded = first.get("b64_json")
        if isinstance(encoded, str) and encoded:
            return _as_data_uri(encoded)
        raise ProviderCallFailed("OpenAI response contains neither url nor b64_json")


def build_generators(
    credentials: ProviderCredentials,
    config: ResolutionConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> List[ImageGenerator]:
    """Generative backends in attempt order: the fast one first unless another is preferred."""

    runpod = RunpodImageProvider(
        credentials.runpod_api_key,
        credentials.runpod_flux_endpoint,
        credentials.runpod_sdxl_endpoint,
        client,
        timeout=config.timeout,
    )
    openai = OpenAIImageProvider(credentials.openai_api_key, client, timeout=config.timeout)
    if config.provider == "openai":
        return [openai, runpod]
    return [runpod, openai]


def is_generation_available(credentials: Optional[ProviderCredentials] = None) -> bool:
    """Whether any generative backend is configured; performs no network I/O."""

    creds = credentials if credentials is not None else ProviderCredentials.from_env()
    return any(generator.configured for generator in build_generators(creds, ResolutionConfig()))
