"""Fallback tiers tried in order for every slot until one yields a URL.

Each tier implements ``attempt(slot, context) -> url``. A tier signals "not
configured" with :class:`ProviderUnavailable` and any other failure with an
exception; the orchestrator moves on to the next tier either way.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

import httpx

from .. import catalog
from ..config import ProviderCredentials, ResolutionConfig
from ..models import BusinessInfo, ImageRole, ImageSlot
from ..prompts import build_prompt
from ..providers.base import (
    GenerationRequest,
    ImageGenerator,
    ProviderCallFailed,
    ProviderUnavailable,
    SearchProvider,
)
from ..providers.generative import build_generators
from ..providers.search import PixabaySearchProvider
from ..synthesis.placeholder import synthesize_placeholder

logger = logging.getLogger(__name__)

SEARCH_RESULTS_PER_TERM = 3


def describe_error(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


@dataclass(slots=True)
class ResolutionContext:
    """Per-invocation state shared by the tiers; ``used_urls`` belongs to the caller."""

    business_info: BusinessInfo
    prompt: str
    used_urls: set[str]
    config: ResolutionConfig
    subcategory: Optional[str] = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.subcategory = catalog.detect_subcategory(self.prompt or self.business_info.prompt)

    def claim(self, url: str) -> bool:
        """Record *url* as used; False when another slot already took it."""

        if url in self.used_urls:
            return False
        self.used_urls.add(url)
        return True


class ResolutionTier:
    name = "tier"
    status = "completed"

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        raise NotImplementedError


class CuratedTier(ResolutionTier):
    name = "curated"

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        key = catalog.catalog_key(context.business_info.industry, context.subcategory)
        candidates = catalog.curated_candidates(key, slot.role)
        if not candidates:
            raise ProviderUnavailable(f"no curated images for {key}/{slot.role.value}")
        for url in candidates:
            if context.claim(url):
                return url
        raise ProviderCallFailed(f"all curated images for {key}/{slot.role.value} are already used")


class SearchTier(ResolutionTier):
    name = "search"

    def __init__(self, provider: SearchProvider) -> None:
        self.provider = provider

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        if not self.provider.configured:
            raise ProviderUnavailable(f"{self.provider.name} search is not configured")

        terms = catalog.search_terms(slot.role, context.business_info.industry, context.subcategory)
        orientation = catalog.orientation_for(slot.size.aspect_ratio)
        last_error: Optional[Exception] = None
        for term in terms:
            try:
                hits = await asyncio.wait_for(
                    self.provider.search(term, orientation=orientation, count=SEARCH_RESULTS_PER_TERM),
                    timeout=context.config.timeout,
                )
            except (ProviderCallFailed, asyncio.TimeoutError) as exc:
                logger.warning("Search for %r failed for slot %s: %s", term, slot.id, describe_error(exc))
                last_error = exc
                continue
            for hit in hits:
                if context.claim(hit.url):
                    return hit.url
        if last_error is not None:
            raise ProviderCallFailed(f"no usable search results for {slot.id}") from last_error
        raise ProviderCallFailed(f"no unused search results for {slot.id}")


class GenerativeTier(ResolutionTier):
    name = "generative"

    def __init__(self, generators: Sequence[ImageGenerator]) -> None:
        self.generators = list(generators)

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        request = GenerationRequest.for_aspect_ratio(
            build_prompt(slot, context.business_info),
            slot.size.aspect_ratio,
            quality=context.config.quality,
            model=context.config.model,
        )

        attempted = False
        last_error: Optional[Exception] = None
        for generator in self.generators:
            if not generator.configured:
                logger.debug("Generator %s is not configured; skipping", generator.name)
                continue
            attempted = True
            try:
                url = await asyncio.wait_for(generator.generate(request), timeout=context.config.timeout)
            except ProviderUnavailable:
                logger.debug("Generator %s reported unavailable for slot %s", generator.name, slot.id)
                continue
            except Exception as exc:  # noqa: BLE001 - every backend failure advances the chain
                logger.warning("Generator %s failed for slot %s: %s", generator.name, slot.id, describe_error(exc))
                last_error = exc
                continue
            context.used_urls.add(url)
            logger.debug("Generator %s produced an image for slot %s", generator.name, slot.id)
            return url

        if not attempted:
            raise ProviderUnavailable("no generative backend is configured")
        if last_error is not None:
            raise ProviderCallFailed(f"all generative backends failed for {slot.id}") from last_error
        raise ProviderUnavailable("no generative backend accepted the request")


class StockTier(ResolutionTier):
    name = "stock"
    status = "fallback"

    def __init__(self, table: Optional[Mapping[ImageRole, str]] = None) -> None:
        self.table = catalog.STOCK_FALLBACKS if table is None else table

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        url = self.table.get(slot.role) or self.table.get(ImageRole.GENERAL)
        if not url:
            raise ProviderUnavailable(f"no stock image for role {slot.role.value}")
        return url


class SynthesizedTier(ResolutionTier):
    name = "synthesized"
    status = "failed"

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        return synthesize_placeholder(slot.role)


def default_tiers(
    config: ResolutionConfig,
    credentials: ProviderCredentials,
    client: Optional[httpx.AsyncClient] = None,
) -> list[ResolutionTier]:
    tiers: list[ResolutionTier] = [
        CuratedTier(),
        SearchTier(PixabaySearchProvider(credentials.pixabay_api_key, client, timeout=config.timeout)),
        GenerativeTier(build_generators(credentials, config, client)),
    ]
    if config.stock_fallback:
        tiers.append(StockTier())
    return tiers
