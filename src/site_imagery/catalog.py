"""Read-only lookup tables for curated images, search terms, and stock fallbacks."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .models import ImageRole

_TermTable = Mapping[str, Mapping[ImageRole, tuple[str, ...]]]


def _freeze(table: dict[str, dict[ImageRole, tuple[str, ...]]]) -> _TermTable:
    return MappingProxyType({key: MappingProxyType(dict(value)) for key, value in table.items()})


SUBCATEGORIES: tuple[str, ...] = (
    "mexican",
    "italian",
    "japanese",
    "chinese",
    "indian",
    "thai",
    "french",
    "american",
)

DEFAULT_KEY = "default"

_R = ImageRole

SEARCH_TERMS: _TermTable = _freeze(
    {
        "restaurant": {
            _R.HERO: ("restaurant interior elegant", "fine dining ambiance", "gourmet food table"),
            _R.PRODUCT: ("gourmet dish plated", "food photography", "chef cooking"),
            _R.TEAM: ("chef portrait", "restaurant staff", "waiter professional"),
            _R.FEATURE: ("fresh ingredients", "kitchen professional", "wine selection"),
            _R.GALLERY: ("food plating", "restaurant atmosphere", "dining experience"),
            _R.BACKGROUND: ("restaurant blur", "food texture", "kitchen abstract"),
        },
        "mexican": {
            _R.HERO: ("mexican restaurant colorful", "tacos authentic", "mexican food spread"),
            _R.PRODUCT: ("tacos plated", "mexican dish", "enchiladas", "guacamole fresh"),
            _R.TEAM: ("mexican chef", "chef cooking", "restaurant kitchen"),
            _R.FEATURE: ("mexican ingredients", "chili peppers", "mexican spices"),
            _R.GALLERY: ("mexican food variety", "tacos close up", "burrito plate"),
            _R.BACKGROUND: ("mexican pattern", "colorful tiles", "festive decor"),
        },
        "saas": {
            _R.HERO: ("technology abstract", "digital innovation", "modern office tech"),
            _R.PRODUCT: ("laptop dashboard", "software interface", "app mockup"),
            _R.TEAM: ("tech professional", "developer portrait", "startup team"),
            _R.FEATURE: ("data visualization", "cloud computing", "digital network"),
            _R.GALLERY: ("office modern", "team collaboration", "tech workspace"),
            _R.BACKGROUND: ("abstract technology", "digital gradient", "code blur"),
        },
        "ecommerce": {
            _R.HERO: ("shopping lifestyle", "fashion store", "retail modern"),
            _R.PRODUCT: ("product photography white", "fashion item", "luxury product"),
            _R.TEAM: ("retail professional", "fashion model", "store manager"),
            _R.FEATURE: ("shopping bags", "delivery package", "credit card payment"),
            _R.GALLERY: ("product flat lay", "fashion collection", "store display"),
            _R.BACKGROUND: ("minimal texture", "fabric texture", "marble surface"),
        },
        "portfolio": {
            _R.HERO: ("creative workspace", "designer desk", "artistic studio"),
            _R.PRODUCT: ("design mockup", "creative project", "portfolio piece"),
            _R.TEAM: ("creative professional", "designer portrait", "artist at work"),
            _R.FEATURE: ("design tools", "creative process", "sketching"),
            _R.GALLERY: ("art photography", "creative work", "design showcase"),
            _R.BACKGROUND: ("minimal abstract", "creative texture", "paper texture"),
        },
        "fitness": {
            _R.HERO: ("gym modern", "fitness training", "workout intense"),
            _R.PRODUCT: ("fitness equipment", "gym weights", "yoga mat"),
            _R.TEAM: ("personal trainer", "fitness instructor", "athlete portrait"),
            _R.FEATURE: ("exercise class", "healthy lifestyle", "running outdoor"),
            _R.GALLERY: ("gym interior", "workout session", "fitness results"),
            _R.BACKGROUND: ("gym blur", "exercise abstract", "energy motion"),
        },
        "realestate": {
            _R.HERO: ("luxury home exterior", "modern architecture", "real estate aerial"),
            _R.PRODUCT: ("house beautiful", "apartment interior", "property listing"),
            _R.TEAM: ("real estate agent", "business professional", "realtor portrait"),
            _R.FEATURE: ("home interior", "kitchen modern", "living room elegant"),
            _R.GALLERY: ("property photos", "home staging", "architecture detail"),
            _R.BACKGROUND: ("home blur", "interior abstract", "architecture pattern"),
        },
        "medical": {
            _R.HERO: ("medical clinic modern", "healthcare professional", "hospital clean"),
            _R.PRODUCT: ("medical equipment", "healthcare service", "medicine"),
            _R.TEAM: ("doctor portrait", "nurse professional", "medical team"),
            _R.FEATURE: ("medical care", "health checkup", "patient care"),
            _R.GALLERY: ("clinic interior", "medical facility", "healthcare"),
            _R.BACKGROUND: ("medical abstract", "health blue", "clean minimal"),
        },
        "agency": {
            _R.HERO: ("creative agency", "marketing team", "modern office"),
            _R.PRODUCT: ("campaign creative", "brand design", "marketing materials"),
            _R.TEAM: ("creative director", "marketing professional", "agency team"),
            _R.FEATURE: ("brainstorming", "strategy meeting", "creative process"),
            _R.GALLERY: ("agency work", "campaign results", "client projects"),
            _R.BACKGROUND: ("office blur", "creative abstract", "brand colors"),
        },
        DEFAULT_KEY: {
            _R.HERO: ("business professional", "modern office", "corporate team"),
            _R.PRODUCT: ("professional service", "business solution", "quality work"),
            _R.TEAM: ("business portrait", "professional headshot", "team member"),
            _R.FEATURE: ("business meeting", "professional service", "quality"),
            _R.GALLERY: ("office environment", "business success", "professional work"),
            _R.BACKGROUND: ("abstract business", "minimal gradient", "professional"),
        },
    }
)

_UNSPLASH = "https://images.unsplash.com/"

CURATED_IMAGES: _TermTable = _freeze(
    {
        "restaurant": {
            _R.HERO: (
                _UNSPLASH + "photo-1517248135467-4c7edcad34c4?w=1920&q=80",
                _UNSPLASH + "photo-1514933651103-005eec06c04b?w=1920&q=80",
                _UNSPLASH + "photo-1552566626-52f8b828add9?w=1920&q=80",
            ),
            _R.PRODUCT: (
                _UNSPLASH + "photo-1504674900247-0877df9cc836?w=800&q=80",
                _UNSPLASH + "photo-1546069901-ba9599a7e63c?w=800&q=80",
                _UNSPLASH + "photo-1565299624946-b28f40a0ae38?w=800&q=80",
            ),
        },
        "mexican": {
            _R.HERO: (
                _UNSPLASH + "photo-1565299585323-38d6b0865b47?w=1920&q=80",
                _UNSPLASH + "photo-1551504734-5ee1c4a1479b?w=1920&q=80",
            ),
            _R.PRODUCT: (
                _UNSPLASH + "photo-1599974579688-8dbdd335c77f?w=800&q=80",
                _UNSPLASH + "photo-1613514785940-daed07799d9b?w=800&q=80",
                _UNSPLASH + "photo-1624300629298-e9de39c13be5?w=800&q=80",
            ),
        },
        "saas": {
            _R.HERO: (
                _UNSPLASH + "photo-1451187580459-43490279c0fa?w=1920&q=80",
                _UNSPLASH + "photo-1518770660439-4636190af475?w=1920&q=80",
            ),
            _R.PRODUCT: (
                _UNSPLASH + "photo-1551288049-bebda4e38f71?w=800&q=80",
                _UNSPLASH + "photo-1460925895917-afdab827c52f?w=800&q=80",
            ),
        },
    }
)

STOCK_FALLBACKS: Mapping[ImageRole, str] = MappingProxyType(
    {
        _R.HERO: _UNSPLASH + "photo-1497366216548-37526070297c?w=1920&q=80",
        _R.PRODUCT: _UNSPLASH + "photo-1523275335684-37898b6baf30?w=800&q=80",
        _R.TEAM: _UNSPLASH + "photo-1560250097-0b93528c311a?w=400&q=80",
        _R.FEATURE: _UNSPLASH + "photo-1551434678-e076c223a692?w=800&q=80",
        _R.GALLERY: _UNSPLASH + "photo-1545665277-5937489579f2?w=800&q=80",
        _R.BACKGROUND: _UNSPLASH + "photo-1557682250-33bd709cbe85?w=1920&q=80",
        _R.GENERAL: _UNSPLASH + "photo-1497366216548-37526070297c?w=800&q=80",
    }
)

_ORIENTATIONS: Mapping[str, str] = MappingProxyType(
    {"1:1": "all", "3:4": "vertical", "9:16": "vertical"}
)


def detect_subcategory(prompt: Optional[str]) -> Optional[str]:
    """Return the first specific cuisine/business type mentioned in *prompt*."""

    if not prompt:
        return None
    lowered = prompt.lower()
    for subcategory in SUBCATEGORIES:
        if subcategory in lowered:
            return subcategory
    return None


def catalog_key(industry: Optional[str], subcategory: Optional[str]) -> str:
    if subcategory:
        return subcategory
    if industry:
        return industry.strip().lower()
    return DEFAULT_KEY


def curated_candidates(key: str, role: ImageRole) -> tuple[str, ...]:
    return CURATED_IMAGES.get(key, {}).get(role, ())


def search_terms(role: ImageRole, industry: Optional[str], subcategory: Optional[str]) -> tuple[str, ...]:
    """Search terms for *role*; a detected sub-category replaces the industry terms entirely."""

    if subcategory and subcategory in SEARCH_TERMS:
        terms = SEARCH_TERMS[subcategory].get(role)
        if terms:
            return terms

    key = (industry or DEFAULT_KEY).strip().lower()
    table = SEARCH_TERMS.get(key) or SEARCH_TERMS[DEFAULT_KEY]
    return table.get(role) or table[ImageRole.HERO]


def stock_url(role: ImageRole) -> str:
    return STOCK_FALLBACKS.get(role) or STOCK_FALLBACKS[ImageRole.GENERAL]


def orientation_for(aspect_ratio: str) -> str:
    return _ORIENTATIONS.get(aspect_ratio, "horizontal")
