from __future__ import annotations

import asyncio

import pytest

from site_imagery import catalog
from site_imagery.config import ResolutionConfig
from site_imagery.models import BusinessInfo, ImageRole, ImageSlot, ResolutionProgress
from site_imagery.providers.base import (
    GenerationRequest,
    ImageGenerator,
    ProviderCallFailed,
    SearchHit,
    SearchProvider,
)
from site_imagery.resolution.orchestrator import ResolutionOrchestrator, resolve
from site_imagery.resolution.tiers import (
    CuratedTier,
    GenerativeTier,
    ResolutionContext,
    ResolutionTier,
    SearchTier,
    StockTier,
)


def _slot(slot_id: str, role: ImageRole = ImageRole.HERO) -> ImageSlot:
    return ImageSlot(id=slot_id, role=role, placeholder="", hint="")


class _FailingSearch(SearchProvider):
    name = "failing-search"

    def __init__(self) -> None:
        self.calls = 0

    async def search(self, query, *, orientation="horizontal", count=3):
        self.calls += 1
        raise ProviderCallFailed("search backend down")


class _SameHitsSearch(SearchProvider):
    name = "same-hits"

    def __init__(self, urls: list[str]) -> None:
        self.urls = urls
        self.queries: list[str] = []

    async def search(self, query, *, orientation="horizontal", count=3):
        self.queries.append(query)
        await asyncio.sleep(0)
        return [SearchHit(id=url, url=url) for url in self.urls][:count]


class _FailingGenerator(ImageGenerator):
    name = "failing-generator"

    async def generate(self, request: GenerationRequest) -> str:
        raise ProviderCallFailed("generation backend down")


class _SlowGenerator(ImageGenerator):
    name = "slow"

    async def generate(self, request: GenerationRequest) -> str:
        await asyncio.sleep(5)
        return "https://slow.example.net/never.png"


class _StaticGenerator(ImageGenerator):
    name = "static"

    def __init__(self) -> None:
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> str:
        self.requests.append(request)
        return f"https://generated.example.net/{len(self.requests)}.png"


class _CountingTier(ResolutionTier):
    name = "counting"

    def __init__(self) -> None:
        self.in_flight = 0
        self.peak = 0

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return f"https://cdn.example.net/{slot.id}.jpg"


class _BlockingTier(ResolutionTier):
    name = "blocking"

    def __init__(self) -> None:
        self.started = asyncio.Event()

    async def attempt(self, slot: ImageSlot, context: ResolutionContext) -> str:
        self.started.set()
        await asyncio.Event().wait()
        return "unreachable"


def test_subcategory_selects_curated_images() -> None:
    orchestrator = ResolutionOrchestrator([CuratedTier()])

    images = asyncio.run(
        orchestrator.resolve_images(
            [_slot("img-1")],
            BusinessInfo(industry="restaurant"),
            "Authentic mexican cantina with live music",
        )
    )

    image = images["img-1"]
    assert image.url in catalog.CURATED_IMAGES["mexican"][ImageRole.HERO]
    assert image.source == "curated"
    assert image.status == "completed"


def test_every_remote_tier_failing_still_yields_synthesized_images() -> None:
    search = _FailingSearch()
    tiers = [
        CuratedTier(),
        SearchTier(search),
        GenerativeTier([_FailingGenerator()]),
        StockTier(table={}),
    ]
    slots = [_slot("img-1", ImageRole.GALLERY), _slot("img-2", ImageRole.TEAM), _slot("bg-3", ImageRole.BACKGROUND)]

    images = asyncio.run(ResolutionOrchestrator(tiers).resolve_images(slots, BusinessInfo(industry="bakery")))

    assert set(images) == {"img-1", "img-2", "bg-3"}
    for image in images.values():
        assert image.url.startswith("data:image/png;base64,")
        assert image.status == "failed"
        assert image.source == "synthesized"
        assert image.error and image.error.startswith("generative:")
    assert search.calls > 0


def test_urls_are_not_reused_across_slots() -> None:
    used: set[str] = set()
    slots = [_slot("img-1"), _slot("img-2"), _slot("img-3")]

    images = asyncio.run(
        ResolutionOrchestrator([CuratedTier(), StockTier()]).resolve_images(
            slots, BusinessInfo(industry="restaurant"), "mexican", used
        )
    )

    curated = [images["img-1"].url, images["img-2"].url]
    assert len(set(curated)) == 2
    assert set(curated) <= used
    assert images["img-3"].status == "fallback"
    assert images["img-3"].url == catalog.STOCK_FALLBACKS[ImageRole.HERO]


def test_search_hits_are_not_shared_between_slots_in_a_batch() -> None:
    search = _SameHitsSearch(["https://cdn.pixabay.com/a.jpg", "https://cdn.pixabay.com/b.jpg"])
    used: set[str] = set()

    images = asyncio.run(
        ResolutionOrchestrator([SearchTier(search)]).resolve_images(
            [_slot("img-1"), _slot("img-2")], BusinessInfo(industry="portfolio"), "", used
        )
    )

    urls = {image.url for image in images.values()}
    assert urls == {"https://cdn.pixabay.com/a.jpg", "https://cdn.pixabay.com/b.jpg"}
    assert used == urls
    assert {image.source for image in images.values()} == {"search"}


def test_search_moves_to_next_term_when_hits_are_used() -> None:
    search = _SameHitsSearch(["https://cdn.pixabay.com/a.jpg"])
    used = {"https://cdn.pixabay.com/a.jpg"}

    images = asyncio.run(
        ResolutionOrchestrator([SearchTier(search), StockTier()]).resolve_images(
            [_slot("img-1")], BusinessInfo(industry="portfolio"), "", used
        )
    )

    assert len(search.queries) == len(catalog.search_terms(ImageRole.HERO, "portfolio", None))
    assert images["img-1"].source == "stock"
    assert images["img-1"].error is None


def test_preexisting_used_urls_are_respected() -> None:
    hero_urls = catalog.CURATED_IMAGES["saas"][ImageRole.HERO]
    used = {hero_urls[0]}

    urls = asyncio.run(resolve([_slot("img-1")], BusinessInfo(industry="saas"), "", used, tiers=[CuratedTier()]))

    assert urls == {"img-1": hero_urls[1]}
    assert used == set(hero_urls)


def test_generated_urls_are_recorded_and_prompts_built() -> None:
    generator = _StaticGenerator()
    used: set[str] = set()

    urls = asyncio.run(
        resolve(
            [_slot("img-1", ImageRole.TEAM)],
            BusinessInfo(industry="fitness"),
            "",
            used,
            ResolutionConfig(quality="high"),
            tiers=[GenerativeTier([generator])],
        )
    )

    assert urls["img-1"] == "https://generated.example.net/1.png"
    assert used == {"https://generated.example.net/1.png"}
    request = generator.requests[0]
    assert request.aspect_ratio == "1:1"
    assert request.quality == "high"
    assert "professional corporate headshot" in request.prompt


def test_progress_reports_each_slot() -> None:
    updates: list[ResolutionProgress] = []
    slots = [_slot(f"img-{index}") for index in range(1, 6)]

    asyncio.run(ResolutionOrchestrator([StockTier()]).resolve(slots, on_progress=updates.append))

    assert [update.completed for update in updates] == [1, 2, 3, 4, 5]
    assert {update.total for update in updates} == {5}
    assert {update.result.slot_id for update in updates} == {slot.id for slot in slots}


def test_raising_progress_callback_does_not_break_resolution() -> None:
    def explode(progress: ResolutionProgress) -> None:
        raise RuntimeError("ui went away")

    urls = asyncio.run(
        ResolutionOrchestrator([StockTier()]).resolve([_slot("img-1"), _slot("img-2")], on_progress=explode)
    )

    assert set(urls) == {"img-1", "img-2"}


def test_timeout_advances_to_next_generator() -> None:
    config = ResolutionConfig(timeout=0.05)
    tiers = [GenerativeTier([_SlowGenerator(), _StaticGenerator()])]

    images = asyncio.run(ResolutionOrchestrator(tiers, config).resolve_images([_slot("img-1")]))

    assert images["img-1"].url == "https://generated.example.net/1.png"
    assert images["img-1"].status == "completed"


def test_timeout_on_only_generator_falls_through_to_stock() -> None:
    config = ResolutionConfig(timeout=0.05)
    tiers = [GenerativeTier([_SlowGenerator()]), StockTier()]

    images = asyncio.run(ResolutionOrchestrator(tiers, config).resolve_images([_slot("img-1", ImageRole.PRODUCT)]))

    assert images["img-1"].source == "stock"
    assert images["img-1"].status == "fallback"


@pytest.mark.parametrize("batch_size, expected_peak", [(1, 1), (2, 2), (3, 3)])
def test_batch_size_bounds_concurrency(batch_size: int, expected_peak: int) -> None:
    tier = _CountingTier()
    slots = [_slot(f"img-{index}") for index in range(7)]

    urls = asyncio.run(ResolutionOrchestrator([tier], ResolutionConfig(batch_size=batch_size)).resolve(slots))

    assert tier.peak == expected_peak
    assert set(urls) == {slot.id for slot in slots}


def test_empty_slot_list_resolves_to_empty_map() -> None:
    assert asyncio.run(ResolutionOrchestrator([StockTier()]).resolve([])) == {}


def test_cancellation_propagates() -> None:
    async def scenario() -> None:
        tier = _BlockingTier()
        task = asyncio.create_task(ResolutionOrchestrator([tier]).resolve([_slot("img-1")]))
        await tier.started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
