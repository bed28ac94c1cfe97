from __future__ import annotations

import base64
import logging
from functools import lru_cache
from io import BytesIO

import numpy as np
from PIL import Image

from ..models import ROLE_SIZES, ImageRole, ImageSize

try:
    import cv2
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError("OpenCV is required for placeholder synthesis") from exc

logger = logging.getLogger(__name__)

ROLE_COLORS: dict[ImageRole, tuple[str, str]] = {
    ImageRole.HERO: ("#6366f1", "#8b5cf6"),
    ImageRole.PRODUCT: ("#10b981", "#34d399"),
    ImageRole.TEAM: ("#3b82f6", "#60a5fa"),
    ImageRole.FEATURE: ("#f59e0b", "#fbbf24"),
    ImageRole.GALLERY: ("#ec4899", "#f472b6"),
    ImageRole.BACKGROUND: ("#1e293b", "#334155"),
    ImageRole.LOGO: ("#6366f1", "#818cf8"),
    ImageRole.ICON: ("#64748b", "#94a3b8"),
    ImageRole.GENERAL: ("#6366f1", "#8b5cf6"),
}

DEFAULT_MAX_EDGE = 640
_FONT = cv2.FONT_HERSHEY_SIMPLEX
_LABEL_OPACITY = 0.5


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _scaled_size(size: ImageSize, max_edge: int) -> tuple[int, int]:
    scale = min(1.0, max_edge / max(size.width, size.height))
    return max(1, round(size.width * scale)), max(1, round(size.height * scale))


def render_placeholder(role: ImageRole, *, max_edge: int = DEFAULT_MAX_EDGE) -> Image.Image:
    """Render a diagonal two-colour gradient labelled with the role name."""

    width, height = _scaled_size(ROLE_SIZES[role], max_edge)
    start_hex, end_hex = ROLE_COLORS.get(role, ROLE_COLORS[ImageRole.GENERAL])
    start = np.array(_hex_to_rgb(start_hex), dtype=np.float32)
    end = np.array(_hex_to_rgb(end_hex), dtype=np.float32)

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    t = (xs / max(width - 1, 1) + ys / max(height - 1, 1)) / 2.0
    canvas = (start + (end - start) * t[..., np.newaxis]).round().astype(np.uint8)

    label = f"{role.value.capitalize()} Image"
    font_scale = min(width, height) / 10 / 22
    thickness = max(1, round(font_scale * 2))
    (text_width, text_height), _ = cv2.getTextSize(label, _FONT, font_scale, thickness)
    if text_width > width * 0.9:
        font_scale *= width * 0.9 / text_width
        thickness = max(1, round(font_scale * 2))
        (text_width, text_height), _ = cv2.getTextSize(label, _FONT, font_scale, thickness)

    overlay = canvas.copy()
    origin = ((width - text_width) // 2, (height + text_height) // 2)
    cv2.putText(overlay, label, origin, _FONT, font_scale, (255, 255, 255), thickness, cv2.LINE_AA)
    blended = cv2.addWeighted(overlay, _LABEL_OPACITY, canvas, 1 - _LABEL_OPACITY, 0)
    return Image.fromarray(blended)


@lru_cache(maxsize=32)
def synthesize_placeholder(role: ImageRole, *, max_edge: int = DEFAULT_MAX_EDGE) -> str:
    """Return the labelled gradient for *role* as a PNG ``data:`` URI (offline, deterministic)."""

    image = render_placeholder(role, max_edge=max_edge)
    buffer = BytesIO()
    image.save(buffer, format="PNG", optimize=True)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    logger.debug("Synthesized %sx%s placeholder for role %s", image.width, image.height, role.value)
    return f"data:image/png;base64,{encoded}"
