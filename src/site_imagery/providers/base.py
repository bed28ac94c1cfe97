from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import httpx

logger = logging.getLogger(__name__)

# Generation canvas per aspect ratio; remote backends reject the full page sizes.
GENERATION_DIMENSIONS: dict[str, tuple[int, int]] = {
    "16:9": (1024, 576),
    "1:1": (1024, 1024),
    "4:3": (1024, 768),
    "3:4": (768, 1024),
    "9:16": (576, 1024),
    "21:9": (1280, 548),
}


class ProviderError(RuntimeError):
    """Base class for failures raised by image providers."""


class ProviderUnavailable(ProviderError):
    """The provider is missing credentials or configuration; skip it."""


class ProviderCallFailed(ProviderError):
    """A remote call failed (network, timeout, non-2xx status, malformed payload)."""


@dataclass(frozen=True, slots=True)
class SearchHit:
    id: str
    url: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    prompt: str
    width: int
    height: int
    aspect_ratio: str = "16:9"
    quality: str = "standard"
    model: Optional[str] = None

    @classmethod
    def for_aspect_ratio(
        cls,
        prompt: str,
        aspect_ratio: str,
        *,
        quality: str = "standard",
        model: Optional[str] = None,
    ) -> GenerationRequest:
        width, height = GENERATION_DIMENSIONS.get(aspect_ratio, (1024, 1024))
        return cls(
            prompt=prompt,
            width=width,
            height=height,
            aspect_ratio=aspect_ratio,
            quality=quality,
            model=model,
        )


class SearchProvider:
    name = "search"

    @property
    def configured(self) -> bool:
        return True

    async def search(self, query: str, *, orientation: str = "horizontal", count: int = 3) -> List[SearchHit]:
        raise NotImplementedError


class ImageGenerator:
    name = "generator"

    @property
    def configured(self) -> bool:
        return True

    async def generate(self, request: GenerationRequest) -> str:
        """Return a URL (possibly a ``data:`` URI) for the generated image."""

        raise NotImplementedError


class HttpProvider:
    """Shared request/response handling for providers backed by ``httpx``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, *, timeout: float = 30.0) -> None:
        self._client = client
        self.timeout = timeout

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        if self._client is not None:
            return await self._send(self._client, method, url, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await self._send(client, method, url, **kwargs)

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderCallFailed(
                f"{self.__class__.__name__} returned status {exc.response.status_code}"
            ) from exc
        except json.JSONDecodeError as exc:
            raise ProviderCallFailed(f"{self.__class__.__name__} returned malformed JSON") from exc
        except httpx.HTTPError as exc:
            raise ProviderCallFailed(f"{self.__class__.__name__} request failed: {exc}") from exc
