from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..catalog import SEARCH_TERMS, DEFAULT_KEY, detect_subcategory
from .base import HttpProvider, ProviderCallFailed, ProviderUnavailable, SearchHit, SearchProvider

logger = logging.getLogger(__name__)

PIXABAY_API_URL = "https://pixabay.com/api/"
_PIXABAY_MIN_PER_PAGE = 3
_PIXABAY_MAX_PER_PAGE = 200


class PixabaySearchProvider(HttpProvider, SearchProvider):
    """Keyword photo search against the Pixabay API."""

    name = "pixabay"

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

    async def search(self, query: str, *, orientation: str = "horizontal", count: int = 3) -> List[SearchHit]:
        if self.api_key is None:
            raise ProviderUnavailable("PIXABAY_API_KEY is not configured")

        # Pixabay rejects per_page values outside 3..200; trim locally instead.
        per_page = min(max(count, _PIXABAY_MIN_PER_PAGE), _PIXABAY_MAX_PER_PAGE)
        params = {
            "key": self.api_key,
            "q": query,
            "orientation": orientation,
            "per_page": str(per_page),
            "image_type": "photo",
            "safesearch": "true",
            "editors_choice": "true",
        }
        logger.debug("Searching Pixabay for %r (orientation=%s)", query, orientation)
        payload = await self._request_json("GET", PIXABAY_API_URL, params=params)
        hits = list(self._parse_hits(payload))
        return hits[:count]

    def _parse_hits(self, payload: Any):
        if not isinstance(payload, dict) or not isinstance(payload.get("hits"), list):
            raise ProviderCallFailed("Pixabay response is missing the hits list")

        for item in payload["hits"]:
            if not isinstance(item, dict):
                continue
            url = item.get("largeImageURL") or item.get("webformatURL")
            if not isinstance(url, str) or not url:
                continue
            width = item.get("imageWidth")
            height = item.get("imageHeight")
            yield SearchHit(
                id=f"pixabay-{item.get('id')}",
                url=url,
                width=width if isinstance(width, int) else None,
                height=height if isinstance(height, int) else None,
            )


async def quick_image_search(provider: SearchProvider, query: str, count: int = 5) -> List[str]:
    """Return up to *count* image URLs for a free-text query."""

    hits = await provider.search(query, orientation="all", count=count)
    return [hit.url for hit in hits]


async def industry_image_pack(
    provider: SearchProvider,
    industry: Optional[str],
    prompt: Optional[str] = None,
    *,
    terms_per_role: int = 2,
    per_role: int = 5,
) -> Dict[str, List[str]]:
    """Collect a small set of search results for every role of an industry.

    Failed searches are logged and skipped so a partial pack is still returned.
    """

    key = detect_subcategory(prompt) or (industry or "").strip().lower()
    table = SEARCH_TERMS.get(key) or SEARCH_TERMS[DEFAULT_KEY]

    pack: Dict[str, List[str]] = {}
    for role, terms in table.items():
        urls: List[str] = []
        for term in terms[:terms_per_role]:
            try:
                hits = await provider.search(term, orientation="horizontal", count=3)
            except (ProviderUnavailable, ProviderCallFailed) as exc:
                logger.warning("Image pack search for %r failed: %s", term, exc)
                continue
            for hit in hits:
                if hit.url not in urls:
                    urls.append(hit.url)
        pack[role.value] = urls[:per_role]
    return pack
