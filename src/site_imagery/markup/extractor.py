from __future__ import annotations

import logging
import re
from typing import Dict, Iterator, List, Optional

from ..models import ImageRole, ImageSlot

logger = logging.getLogger(__name__)

_IMG_TAG_PATTERN = re.compile(r"<img\b([^>]*)>", re.IGNORECASE)
_BACKGROUND_PATTERN = re.compile(
    r"background(?:-image)?\s*:\s*url\(\s*(['\"]?)([^'\")\s]*)\1\s*\)",
    re.IGNORECASE,
)
_SECTION_PATTERN = re.compile(
    r"<(?:section|div)\b[^>]*?\b(?:id|class)\s*=\s*[\"']([^\"']*"
    r"(?:hero|team|product|gallery|feature|service|testimonial|about|contact|pricing|faq)"
    r"[^\"']*)[\"']",
    re.IGNORECASE,
)
# One attribute per match: name, then an optional double-quoted, single-quoted or bare value.
_ATTR_PATTERN = re.compile(
    r"([^\s\"'=<>/]+)(?:\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s\"'>]+)))?",
)
_LAZY_SOURCE_ATTRS = ("data-src", "srcset", "data-srcset", "data-lazy-src")
_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_NON_ALPHA_PATTERN = re.compile(r"[^a-z]")

_PLACEHOLDER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"images\.unsplash\.com", re.IGNORECASE),
    re.compile(r"picsum\.photos", re.IGNORECASE),
    re.compile(r"placeholder\.", re.IGNORECASE),
    re.compile(r"via\.placeholder", re.IGNORECASE),
    re.compile(r"placehold\.it", re.IGNORECASE),
    re.compile(r"placekitten", re.IGNORECASE),
    re.compile(r"loremflickr", re.IGNORECASE),
    re.compile(r"dummyimage", re.IGNORECASE),
    re.compile(r"fakeimg", re.IGNORECASE),
    re.compile(r"^data:image/svg", re.IGNORECASE),
    re.compile(r"example\.com", re.IGNORECASE),
    re.compile(r"/placeholder", re.IGNORECASE),
    re.compile(r"\{\{.*\}\}"),
)

# Checked in order; the first role with a matching indicator wins.
_ROLE_INDICATORS: tuple[tuple[ImageRole, tuple[str, ...]], ...] = (
    (ImageRole.HERO, ("hero", "banner", "header-image", "main-image", "cover", "splash")),
    (ImageRole.PRODUCT, ("product", "item", "merchandise", "goods", "shop", "store")),
    (
        ImageRole.TEAM,
        ("team", "staff", "employee", "founder", "ceo", "member", "headshot", "portrait", "profile"),
    ),
    (ImageRole.FEATURE, ("feature", "benefit", "service", "capability", "solution")),
    (ImageRole.GALLERY, ("gallery", "portfolio", "showcase", "project", "work", "case-study")),
    (ImageRole.BACKGROUND, ("background", "bg-", "backdrop", "pattern")),
    (ImageRole.LOGO, ("logo", "brand", "company-logo")),
    (ImageRole.ICON, ("icon", "symbol", "glyph")),
)

_SECTION_ROLES: tuple[tuple[tuple[str, ...], ImageRole], ...] = (
    (("hero",), ImageRole.HERO),
    (("team",), ImageRole.TEAM),
    (("product",), ImageRole.PRODUCT),
    (("gallery", "portfolio"), ImageRole.GALLERY),
    (("feature", "service"), ImageRole.FEATURE),
)

ROLE_HINTS: dict[ImageRole, str] = {
    ImageRole.HERO: "professional hero image, high quality, editorial",
    ImageRole.PRODUCT: "product photography, clean background, studio lighting",
    ImageRole.TEAM: "professional headshot, corporate, friendly smile, neutral background",
    ImageRole.FEATURE: "conceptual illustration, modern, abstract representation",
    ImageRole.GALLERY: "portfolio piece, high quality photography, artistic",
    ImageRole.BACKGROUND: "abstract background, subtle pattern, professional",
    ImageRole.LOGO: "minimalist logo, clean design, professional brand mark",
    ImageRole.ICON: "simple icon, flat design, single color",
    ImageRole.GENERAL: "professional photograph, high quality, business appropriate",
}

BACKGROUND_HINT = "website background, abstract, professional"

_GENERIC_ALT_WORDS = ("placeholder", "image", "undefined", "null")
_STOPWORDS = frozenset(
    {
        "class", "src", "alt", "div", "img", "section", "span", "href", "style",
        "about", "after", "also", "been", "before", "from", "have", "here", "into",
        "more", "only", "other", "over", "some", "than", "that", "their", "them",
        "then", "there", "these", "they", "this", "through", "very", "what", "when",
        "where", "which", "while", "will", "with", "your", "yours", "image", "images",
        "placeholder", "photo", "picture",
    }
)

_SECTION_LOOKBEHIND = 500
_CONTEXT_RADIUS = 200
_MAX_CONTEXT_WORDS = 5


def is_placeholder_url(url: Optional[str]) -> bool:
    """True when *url* is empty or points at a stock/placeholder source that should be replaced."""

    if not url or not url.strip():
        return True
    return any(pattern.search(url) for pattern in _PLACEHOLDER_PATTERNS)


class ContextExtractor:
    """Finds placeholder image slots in generated HTML and classifies their roles."""

    def extract(self, html: str) -> List[ImageSlot]:
        if not isinstance(html, str) or not html:
            return []

        candidates: List[re.Match[str]] = [
            *_IMG_TAG_PATTERN.finditer(html),
            *_BACKGROUND_PATTERN.finditer(html),
        ]
        candidates.sort(key=lambda match: match.start())

        slots: List[ImageSlot] = []
        for counter, match in enumerate(candidates, start=1):
            if match.re is _BACKGROUND_PATTERN:
                slot = self._parse_background(match, counter)
            else:
                slot = self._parse_img_tag(match, counter, html)
            if slot is None:
                continue
            if slot.role is ImageRole.ICON:
                logger.debug("Skipping icon slot %s", slot.id)
                continue
            slots.append(slot)

        slots.sort(key=lambda slot: (slot.priority, slot.offset))
        logger.debug("Extracted %s placeholder slots", len(slots))
        return slots

    def _parse_background(self, match: re.Match[str], counter: int) -> Optional[ImageSlot]:
        url = match.group(2)
        if not is_placeholder_url(url):
            return None
        return ImageSlot(
            id=f"bg-{counter}",
            role=ImageRole.BACKGROUND,
            placeholder=url,
            hint=BACKGROUND_HINT,
            kind="background",
            offset=match.start(),
            span=match.span(2),
        )

    def _parse_img_tag(self, match: re.Match[str], counter: int, html: str) -> Optional[ImageSlot]:
        attrs = _parse_attrs(match.group(1))
        attrs_start = match.start(1)
        position = match.start()

        src_value = attrs.get("src")
        src = src_value[0].strip() if src_value else ""
        if src and not is_placeholder_url(src):
            return None
        if not src and _has_lazy_source(attrs):
            return None

        alt = _attr_text(attrs, "alt")
        class_name = _attr_text(attrs, "class")
        data_type = _attr_text(attrs, "data-image-type") or None

        parent_section = _find_parent_section(html, position)
        role = _classify(alt, class_name, data_type, parent_section)
        hint = _build_hint(alt, html, position, role)

        span: Optional[tuple[int, int]] = None
        if src_value is not None:
            start, end = src_value[1]
            span = (attrs_start + start, attrs_start + end)

        return ImageSlot(
            id=f"img-{counter}",
            role=role,
            placeholder=src or "",
            hint=hint,
            css_classes=tuple(class_name.split()),
            parent_section=parent_section,
            kind="img",
            offset=position,
            span=span,
        )


def extract_image_slots(html: str) -> List[ImageSlot]:
    return ContextExtractor().extract(html)


_Attrs = Dict[str, tuple[str, tuple[int, int]]]


def _parse_attrs(attrs: str) -> _Attrs:
    """Tokenize a tag's attribute text; the first occurrence of each name wins."""

    parsed: _Attrs = {}
    for match in _ATTR_PATTERN.finditer(attrs):
        name = match.group(1).lower()
        if name in parsed:
            continue
        for group in (2, 3, 4):
            if match.group(group) is not None:
                parsed[name] = (match.group(group), match.span(group))
                break
    return parsed


def _attr_text(attrs: _Attrs, name: str) -> str:
    value = attrs.get(name)
    return value[0] if value else ""


def _has_lazy_source(attrs: _Attrs) -> bool:
    """True when a lazy-loading attribute already points at real content."""

    for name in _LAZY_SOURCE_ATTRS:
        value = _attr_text(attrs, name)
        for candidate in value.split(","):
            url = candidate.strip().split(" ")[0]
            if url and not is_placeholder_url(url):
                return True
    return False


def _classify(
    alt: str,
    class_name: str,
    data_type: Optional[str],
    parent_section: Optional[str],
) -> ImageRole:
    explicit = ImageRole.parse(data_type)
    if explicit is not None:
        return explicit

    combined = f"{alt} {class_name} {data_type or ''}".lower()
    for role, indicators in _ROLE_INDICATORS:
        if any(indicator in combined for indicator in indicators):
            return role

    if parent_section:
        for keywords, role in _SECTION_ROLES:
            if any(keyword in parent_section for keyword in keywords):
                return role

    if "w-full" in class_name or "h-screen" in class_name or "min-h-" in class_name:
        return ImageRole.HERO
    if "rounded-full" in class_name or "avatar" in class_name:
        return ImageRole.TEAM
    if "aspect-square" in class_name or "w-24" in class_name or "w-32" in class_name:
        return ImageRole.PRODUCT

    return ImageRole.GENERAL


def _find_parent_section(html: str, position: int) -> Optional[str]:
    before = html[max(0, position - _SECTION_LOOKBEHIND):position]
    last: Optional[str] = None
    for match in _SECTION_PATTERN.finditer(before):
        last = match.group(1).lower()
    return last


def _build_hint(alt: str, html: str, position: int, role: ImageRole) -> str:
    hints: List[str] = []

    lowered_alt = alt.lower()
    if alt.strip() and not any(word in lowered_alt for word in _GENERIC_ALT_WORDS):
        hints.append(alt.strip())

    hints.append(ROLE_HINTS[role])

    nearby = " ".join(_nearby_words(html, position))
    if nearby:
        hints.append(nearby)

    return ", ".join(hints)


def _nearby_words(html: str, position: int) -> Iterator[str]:
    start = max(0, position - _CONTEXT_RADIUS)
    end = min(len(html), position + _CONTEXT_RADIUS)
    window = html[start:end]

    # Drop tag fragments cut off at either edge of the window.
    first_close = window.find(">")
    if first_close != -1 and "<" not in window[:first_close]:
        window = window[first_close + 1:]
    last_open = window.rfind("<")
    if last_open != -1 and ">" not in window[last_open:]:
        window = window[:last_open]

    text = _WHITESPACE_PATTERN.sub(" ", _TAG_PATTERN.sub(" ", window)).strip()

    emitted = 0
    for word in text.split(" "):
        if emitted >= _MAX_CONTEXT_WORDS:
            return
        if any(char in word for char in "=\"'{}<>/"):
            continue
        clean = _NON_ALPHA_PATTERN.sub("", word.lower())
        if len(clean) <= 3 or clean in _STOPWORDS:
            continue
        emitted += 1
        yield word.strip(".,;:!?()[]")
