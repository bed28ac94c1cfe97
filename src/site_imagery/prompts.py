from __future__ import annotations

from typing import List, Optional

from .models import BusinessInfo, ImageRole, ImageSlot

INDUSTRY_DESCRIPTIONS: dict[str, str] = {
    "saas": "technology company, software, digital",
    "agency": "creative agency, marketing, professional",
    "restaurant": "food, culinary, dining experience",
    "ecommerce": "retail, products, shopping",
    "portfolio": "creative work, artistic, professional",
    "realestate": "real estate, property, homes",
    "fitness": "fitness, health, active lifestyle",
    "medical": "healthcare, medical, professional care",
    "legal": "legal services, law firm, professional",
    "construction": "construction, building, architecture",
}

ROLE_PROMPTS: dict[ImageRole, str] = {
    ImageRole.HERO: "stunning hero image, professional photography, high resolution, dramatic lighting",
    ImageRole.PRODUCT: "product photography, studio lighting, clean white background, sharp details",
    ImageRole.TEAM: "professional corporate headshot, friendly expression, neutral background, well-lit",
    ImageRole.FEATURE: "modern illustration, conceptual, clean design, professional",
    ImageRole.GALLERY: "high quality photograph, artistic composition, professional",
    ImageRole.BACKGROUND: "abstract background pattern, subtle, elegant, non-distracting",
    ImageRole.LOGO: "minimalist logo design, professional brand mark, clean lines",
    ImageRole.ICON: "flat icon design, simple, modern, single color",
    ImageRole.GENERAL: "professional stock photo, high quality, business appropriate",
}

STYLE_MODIFIERS: dict[str, str] = {
    "modern": "modern aesthetic, contemporary, sleek",
    "minimal": "minimalist, clean, simple, white space",
    "bold": "bold colors, high contrast, striking",
    "elegant": "elegant, sophisticated, refined, luxury feel",
    "playful": "vibrant colors, fun, energetic",
    "professional": "corporate, trustworthy, polished",
}

QUALITY_SUFFIX = "8k, high detail, professional quality, photorealistic"
NEGATIVE_SUFFIX = "no text, no watermarks, no logos"


def build_prompt(slot: ImageSlot, business_info: Optional[BusinessInfo] = None) -> str:
    """Compose a generation prompt for *slot*; unknown industry or style add nothing."""

    info = business_info or BusinessInfo()
    parts: List[str] = []

    industry = _lookup_key(info.industry)
    if industry in INDUSTRY_DESCRIPTIONS:
        parts.append(INDUSTRY_DESCRIPTIONS[industry])

    parts.append(ROLE_PROMPTS[slot.role])

    style = _lookup_key(info.style)
    if style in STYLE_MODIFIERS:
        parts.append(STYLE_MODIFIERS[style])

    if slot.hint and slot.hint.strip():
        parts.append(slot.hint.strip())

    parts.append(QUALITY_SUFFIX)
    parts.append(NEGATIVE_SUFFIX)
    return ", ".join(parts)


def _lookup_key(value: Optional[str]) -> str:
    return (value or "").strip().lower()
