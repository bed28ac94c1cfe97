from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from site_imagery.config import ProviderCredentials, ResolutionConfig
from site_imagery.providers.base import GenerationRequest, ProviderCallFailed, ProviderUnavailable, SearchHit
from site_imagery.providers.generative import (
    OpenAIImageProvider,
    RunpodImageProvider,
    build_generators,
    is_generation_available,
)
from site_imagery.providers.search import PixabaySearchProvider, industry_image_pack, quick_image_search


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _run(coro_factory):
    async def runner():
        return await coro_factory()

    return asyncio.run(runner())


def test_pixabay_search_sends_query_and_parses_hits() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "hits": [
                    {
                        "id": 1,
                        "largeImageURL": "https://cdn.pixabay.com/1.jpg",
                        "imageWidth": 1920,
                        "imageHeight": 1280,
                    },
                    {"id": 2, "webformatURL": "https://cdn.pixabay.com/2.jpg"},
                    {"id": 3},
                    "junk",
                ]
            },
        )

    async def scenario():
        async with _client(handler) as client:
            provider = PixabaySearchProvider("secret", client)
            return await provider.search("tacos plated", orientation="vertical", count=5)

    hits = _run(scenario)

    assert [hit.url for hit in hits] == ["https://cdn.pixabay.com/1.jpg", "https://cdn.pixabay.com/2.jpg"]
    assert hits[0].id == "pixabay-1"
    assert hits[0].width == 1920
    assert hits[1].width is None
    params = seen[0].url.params
    assert params["q"] == "tacos plated"
    assert params["orientation"] == "vertical"
    assert params["key"] == "secret"
    assert params["safesearch"] == "true"


def test_pixabay_without_key_is_unavailable() -> None:
    provider = PixabaySearchProvider("  ")
    assert provider.configured is False
    with pytest.raises(ProviderUnavailable):
        _run(lambda: provider.search("anything"))


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"<html>not json</html>"),
        httpx.Response(200, json={"total": 0}),
    ],
)
def test_pixabay_failures_become_provider_call_failed(response: httpx.Response) -> None:
    async def scenario():
        async with _client(lambda request: response) as client:
            return await PixabaySearchProvider("key", client).search("office")

    with pytest.raises(ProviderCallFailed):
        _run(scenario)


def test_pixabay_network_error_becomes_provider_call_failed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with _client(handler) as client:
            return await PixabaySearchProvider("key", client).search("office")

    with pytest.raises(ProviderCallFailed):
        _run(scenario)


def test_runpod_returns_base64_as_data_uri() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "COMPLETED", "output": {"images": ["aGVsbG8="]}})

    request = GenerationRequest.for_aspect_ratio("a taco", "16:9", quality="high")

    async def scenario():
        async with _client(handler) as client:
            return await RunpodImageProvider("rp-key", "flux123", client=client).generate(request)

    url = _run(scenario)

    assert url == "data:image/png;base64,aGVsbG8="
    assert captured["url"] == "https://api.runpod.ai/v2/flux123/runsync"
    assert captured["auth"] == "Bearer rp-key"
    assert captured["body"]["input"]["width"] == 1024
    assert captured["body"]["input"]["height"] == 576
    assert captured["body"]["input"]["num_inference_steps"] == 8


def test_runpod_uses_sdxl_endpoint_when_requested() -> None:
    urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json={"status": "COMPLETED", "output": {"image": "https://runpod.cdn/img.png"}})

    request = GenerationRequest.for_aspect_ratio("a taco", "1:1", model="sdxl")

    async def scenario():
        async with _client(handler) as client:
            provider = RunpodImageProvider("rp-key", "flux123", "sdxl456", client=client)
            return await provider.generate(request)

    assert _run(scenario) == "https://runpod.cdn/img.png"
    assert urls == ["https://api.runpod.ai/v2/sdxl456/runsync"]


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "FAILED", "error": "out of memory"},
        {"status": "COMPLETED", "output": {}},
        {"status": "IN_QUEUE"},
    ],
)
def test_runpod_unusable_payloads_fail(payload: dict) -> None:
    async def scenario():
        async with _client(lambda request: httpx.Response(200, json=payload)) as client:
            provider = RunpodImageProvider("rp-key", "flux123", client=client)
            return await provider.generate(GenerationRequest.for_aspect_ratio("x", "4:3"))

    with pytest.raises(ProviderCallFailed):
        _run(scenario)


def test_runpod_without_credentials_short_circuits() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("no request expected")

    async def scenario():
        async with _client(handler) as client:
            provider = RunpodImageProvider("rp-key", None, client=client)
            assert provider.configured is False
            return await provider.generate(GenerationRequest.for_aspect_ratio("x", "4:3"))

    with pytest.raises(ProviderUnavailable):
        _run(scenario)


def test_openai_sends_expected_body_and_accepts_url() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"url": "https://oaidalle.blob/1.png"}]})

    request = GenerationRequest.for_aspect_ratio("portrait", "9:16", quality="high", model="flux-schnell")

    async def scenario():
        async with _client(handler) as client:
            return await OpenAIImageProvider("sk-test", client).generate(request)

    assert _run(scenario) == "https://oaidalle.blob/1.png"
    assert captured["body"]["model"] == "dall-e-3"
    assert captured["body"]["size"] == "1024x1792"
    assert captured["body"]["quality"] == "hd"
    assert captured["body"]["n"] == 1


def test_openai_accepts_inline_base64() -> None:
    async def scenario():
        response = httpx.Response(200, json={"data": [{"b64_json": "Zm9v"}]})
        async with _client(lambda request: response) as client:
            return await OpenAIImageProvider("sk-test", client).generate(
                GenerationRequest.for_aspect_ratio("x", "1:1")
            )

    assert _run(scenario) == "data:image/png;base64,Zm9v"


@pytest.mark.parametrize(
    "aspect_ratio, expected",
    [("1:1", "1024x1024"), ("3:4", "1024x1792"), ("16:9", "1792x1024"), ("4:3", "1792x1024")],
)
def test_openai_size_mapping(aspect_ratio: str, expected: str) -> None:
    assert OpenAIImageProvider.size_for(aspect_ratio) == expected


def test_generator_order_follows_preference() -> None:
    credentials = ProviderCredentials(runpod_api_key="rp", runpod_flux_endpoint="flux", openai_api_key="sk")

    default_order = build_generators(credentials, ResolutionConfig())
    preferred = build_generators(credentials, ResolutionConfig(provider="openai", model="dall-e-3"))

    assert [generator.name for generator in default_order] == ["runpod", "openai"]
    assert [generator.name for generator in preferred] == ["openai", "runpod"]


def test_is_generation_available() -> None:
    assert is_generation_available(ProviderCredentials()) is False
    assert is_generation_available(ProviderCredentials(runpod_api_key="rp")) is False
    assert is_generation_available(ProviderCredentials(openai_api_key="sk")) is True
    assert is_generation_available(ProviderCredentials(runpod_api_key="rp", runpod_sdxl_endpoint="s")) is True


class _StaticSearch(PixabaySearchProvider):
    def __init__(self, results: dict[str, list[str]]) -> None:
        super().__init__("key")
        self.results = results
        self.queries: list[str] = []

    async def search(self, query: str, *, orientation: str = "horizontal", count: int = 3):
        self.queries.append(query)
        if query not in self.results:
            raise ProviderCallFailed("no results")
        return [SearchHit(id=url, url=url) for url in self.results[query]][:count]


def test_quick_image_search_returns_urls() -> None:
    provider = _StaticSearch({"coffee": ["a", "b", "c"]})
    assert _run(lambda: quick_image_search(provider, "coffee", count=2)) == ["a", "b"]


def test_industry_image_pack_dedupes_and_uses_subcategory() -> None:
    provider = _StaticSearch(
        {
            "mexican restaurant colorful": ["u1", "u2"],
            "tacos authentic": ["u2", "u3"],
        }
    )

    pack = _run(lambda: industry_image_pack(provider, "restaurant", "best mexican food in town"))

    assert pack["hero"] == ["u1", "u2", "u3"]
    assert pack["team"] == []
    assert "mexican restaurant colorful" in provider.queries
    assert "restaurant interior elegant" not in provider.queries
