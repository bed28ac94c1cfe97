from __future__ import annotations

import pytest

from site_imagery.models import BusinessInfo, ImageRole, ImageSlot
from site_imagery.prompts import NEGATIVE_SUFFIX, QUALITY_SUFFIX, build_prompt


def _slot(role: ImageRole = ImageRole.HERO, hint: str = "sunlit dining room") -> ImageSlot:
    return ImageSlot(id="img-1", role=role, placeholder="", hint=hint)


def test_prompt_composition_order() -> None:
    prompt = build_prompt(_slot(), BusinessInfo(industry="restaurant", style="elegant"))

    industry = prompt.index("food, culinary, dining experience")
    role = prompt.index("stunning hero image")
    style = prompt.index("elegant, sophisticated")
    hint = prompt.index("sunlit dining room")
    quality = prompt.index(QUALITY_SUFFIX)
    negative = prompt.index(NEGATIVE_SUFFIX)
    assert industry < role < style < hint < quality < negative
    assert prompt.endswith("no text, no watermarks, no logos")


def test_prompt_is_deterministic() -> None:
    info = BusinessInfo(industry="saas", style="modern", prompt="analytics platform")
    assert build_prompt(_slot(), info) == build_prompt(_slot(), info)


@pytest.mark.parametrize(
    "info",
    [
        None,
        BusinessInfo(),
        BusinessInfo(industry="underwater basket weaving", style="grungy"),
        BusinessInfo(industry="", style=""),
    ],
)
def test_unknown_fields_contribute_nothing(info) -> None:
    prompt = build_prompt(_slot(hint=""), info)

    assert prompt == ", ".join(
        [
            "stunning hero image, professional photography, high resolution, dramatic lighting",
            QUALITY_SUFFIX,
            NEGATIVE_SUFFIX,
        ]
    )
    for artifact in ("None", "undefined", "placeholder", ", ,"):
        assert artifact not in prompt


def test_industry_and_style_are_case_insensitive() -> None:
    prompt = build_prompt(_slot(ImageRole.TEAM), BusinessInfo(industry=" Fitness ", style="BOLD"))
    assert prompt.startswith("fitness, health, active lifestyle, professional corporate headshot")
    assert "bold colors, high contrast, striking" in prompt
