from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional, Sequence

from ..config import ProviderCredentials, ResolutionConfig
from ..models import BusinessInfo, ImageSlot, ResolutionProgress, ResolvedImage
from ..providers.base import ProviderUnavailable
from .tiers import ResolutionContext, ResolutionTier, SynthesizedTier, default_tiers, describe_error

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ResolutionProgress], None]


class ResolutionOrchestrator:
    """Resolves every slot to a URL by walking the tier chain in bounded batches.

    The synthesized tier is always appended, so each slot ends with a usable
    URL. Only caller cancellation (``asyncio.CancelledError``) escapes.
    """

    def __init__(self, tiers: Sequence[ResolutionTier], config: Optional[ResolutionConfig] = None) -> None:
        self.config = config or ResolutionConfig()
        self.tiers = list(tiers)
        self._last_resort = SynthesizedTier()

    async def resolve_images(
        self,
        slots: Sequence[ImageSlot],
        business_info: Optional[BusinessInfo] = None,
        prompt: str = "",
        used_urls: Optional[set[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, ResolvedImage]:
        context = ResolutionContext(
            business_info=business_info or BusinessInfo(),
            prompt=prompt or "",
            used_urls=used_urls if used_urls is not None else set(),
            config=self.config,
        )
        results: Dict[str, ResolvedImage] = {}
        total = len(slots)
        completed = 0

        async def run(slot: ImageSlot) -> None:
            nonlocal completed
            result = await self._resolve_slot(slot, context)
            results[slot.id] = result
            completed += 1
            self._notify(on_progress, ResolutionProgress(completed=completed, total=total, result=result))

        batch_size = self.config.batch_size
        for start in range(0, total, batch_size):
            batch = slots[start:start + batch_size]
            logger.debug("Resolving batch %s: %s", start // batch_size + 1, [slot.id for slot in batch])
            await asyncio.gather(*(run(slot) for slot in batch))

        failed = sum(1 for result in results.values() if result.status == "failed")
        logger.info("Resolved %s image slots (%s synthesized)", len(results), failed)
        return results

    async def resolve(
        self,
        slots: Sequence[ImageSlot],
        business_info: Optional[BusinessInfo] = None,
        prompt: str = "",
        used_urls: Optional[set[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, str]:
        images = await self.resolve_images(slots, business_info, prompt, used_urls, on_progress)
        return {slot_id: image.url for slot_id, image in images.items()}

    async def _resolve_slot(self, slot: ImageSlot, context: ResolutionContext) -> ResolvedImage:
        last_error: Optional[str] = None
        for tier in [*self.tiers, self._last_resort]:
            try:
                url = await tier.attempt(slot, context)
            except ProviderUnavailable as exc:
                logger.debug("Tier %s unavailable for slot %s: %s", tier.name, slot.id, exc)
                continue
            except Exception as exc:  # noqa: BLE001 - a tier failure never escapes the slot
                last_error = f"{tier.name}: {describe_error(exc)}"
                logger.warning("Tier %s failed for slot %s: %s", tier.name, slot.id, describe_error(exc))
                continue

            logger.debug("Slot %s resolved by %s tier", slot.id, tier.name)
            error = last_error if tier.status == "failed" else None
            return ResolvedImage(slot_id=slot.id, url=url, source=tier.name, status=tier.status, error=error)

        raise AssertionError("the synthesized tier always produces a URL")  # pragma: no cover

    def _notify(self, on_progress: Optional[ProgressCallback], progress: ResolutionProgress) -> None:
        if on_progress is None:
            return
        try:
            on_progress(progress)
        except Exception:  # noqa: BLE001 - progress reporting must not break resolution
            logger.warning("Progress callback raised for slot %s", progress.result.slot_id, exc_info=True)


async def resolve(
    slots: Sequence[ImageSlot],
    business_info: Optional[BusinessInfo],
    prompt: str,
    used_urls: set[str],
    config: Optional[ResolutionConfig] = None,
    on_progress: Optional[ProgressCallback] = None,
    *,
    tiers: Optional[Sequence[ResolutionTier]] = None,
    credentials: Optional[ProviderCredentials] = None,
) -> Dict[str, str]:
    """Map every slot id to a URL; never raises for reasons internal to resolution."""

    config = config or ResolutionConfig()
    if tiers is None:
        tiers = default_tiers(config, credentials if credentials is not None else ProviderCredentials.from_env())
    orchestrator = ResolutionOrchestrator(tiers, config)
    return await orchestrator.resolve(slots, business_info, prompt, used_urls, on_progress)
