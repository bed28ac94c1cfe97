from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Iterable, Mapping

from ..models import ImageSlot

logger = logging.getLogger(__name__)

_IMG_OPEN_PATTERN = re.compile(r"<img\b", re.IGNORECASE)
_IMG_TAG_PATTERN = re.compile(r"<img\b([^>]*?)(/?)>", re.IGNORECASE)
_LOADING_ATTR_PATTERN = re.compile(r"(?<![\w-])loading\s*=", re.IGNORECASE)


def inject_images(html: str, slots: Iterable[ImageSlot], urls: Mapping[str, str]) -> str:
    """Write resolved URLs back at each slot's recorded location in *html*.

    *html* must be the exact markup the slots were extracted from. Slots
    without a URL in *urls* are left untouched.
    """

    edits: list[tuple[int, int, str]] = []
    for slot in slots:
        url = urls.get(slot.id)
        if not url:
            continue
        if slot.span is not None:
            start, end = slot.span
            value = html_lib.escape(url, quote=True) if slot.kind == "img" else _css_url(url)
            edits.append((start, end, value))
            continue
        match = _IMG_OPEN_PATTERN.match(html, slot.offset)
        if match is None:
            logger.warning("Slot %s no longer points at an <img> tag; skipping", slot.id)
            continue
        insert_at = match.end()
        edits.append((insert_at, insert_at, f' src="{html_lib.escape(url, quote=True)}"'))

    result = html
    for start, end, value in sorted(edits, key=lambda edit: edit[0], reverse=True):
        result = result[:start] + value + result[end:]
    logger.debug("Injected %s image URLs", len(edits))
    return result


def _css_url(url: str) -> str:
    return url.replace("'", "%27").replace('"', "%22").replace(")", "%29")


def add_lazy_loading(html: str) -> str:
    """Add ``loading`` to ``<img>`` tags lacking one; hero images load eagerly."""

    def replace(match: re.Match[str]) -> str:
        attrs, closing = match.group(1), match.group(2)
        if _LOADING_ATTR_PATTERN.search(attrs):
            return match.group(0)
        mode = "eager" if "hero" in attrs.lower() else "lazy"
        return f'<img{attrs.rstrip()} loading="{mode}"{" " + closing if closing else ""}>'

    return _IMG_TAG_PATTERN.sub(replace, html)
