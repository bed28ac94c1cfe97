from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from .budget import select_slots
from .config import ProviderCredentials, ResolutionConfig
from .markup.extractor import ContextExtractor
from .markup.injector import inject_images
from .models import BusinessInfo, ImageSlot, PipelineResult
from .resolution.orchestrator import ProgressCallback, ResolutionOrchestrator
from .resolution.tiers import ResolutionTier, default_tiers

logger = logging.getLogger(__name__)


class ImageResolutionPipeline:
    """HTML in, one resolved URL per budgeted placeholder slot out."""

    def __init__(
        self,
        config: ResolutionConfig | None = None,
        credentials: ProviderCredentials | None = None,
        extractor: ContextExtractor | None = None,
        tiers: Sequence[ResolutionTier] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ResolutionConfig()
        self.credentials = credentials
        self.extractor = extractor or ContextExtractor()
        self.tiers = list(tiers) if tiers is not None else None
        self.transport = transport

    def plan(self, html: str) -> tuple[List[ImageSlot], List[ImageSlot]]:
        """Extract slots and apply the budget without touching any provider."""

        slots = self.extractor.extract(html)
        selected = select_slots(slots, self.config.max_images)
        logger.info("Found %s placeholder slots, %s selected for resolution", len(slots), len(selected))
        return slots, selected

    async def run(
        self,
        html: str,
        business_info: Optional[BusinessInfo] = None,
        prompt: str = "",
        *,
        used_urls: Optional[set[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PipelineResult:
        slots, selected = self.plan(html)
        used = used_urls if used_urls is not None else set()
        result = PipelineResult(slots=slots, selected=selected, used_urls=used, html=html)
        if not selected:
            return result

        if self.tiers is not None:
            orchestrator = ResolutionOrchestrator(self.tiers, self.config)
            result.images = await orchestrator.resolve_images(selected, business_info, prompt, used, on_progress)
        else:
            credentials = self.credentials if self.credentials is not None else ProviderCredentials.from_env()
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                orchestrator = ResolutionOrchestrator(default_tiers(self.config, credentials, client), self.config)
                result.images = await orchestrator.resolve_images(
                    selected, business_info, prompt, used, on_progress
                )

        result.html = inject_images(html, selected, result.urls)
        return result


def resolve_page_images(
    html: str,
    business_info: Optional[BusinessInfo] = None,
    prompt: str = "",
    config: Optional[ResolutionConfig] = None,
    credentials: Optional[ProviderCredentials] = None,
) -> PipelineResult:
    """Synchronous entry point for callers outside an event loop."""

    pipeline = ImageResolutionPipeline(config=config, credentials=credentials)
    return asyncio.run(pipeline.run(html, business_info, prompt))
