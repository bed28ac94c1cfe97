from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ImageRole(str, Enum):
    """Semantic category of an image slot."""

    HERO = "hero"
    PRODUCT = "product"
    TEAM = "team"
    FEATURE = "feature"
    GALLERY = "gallery"
    BACKGROUND = "background"
    LOGO = "logo"
    ICON = "icon"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ImageRole"]:
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class ImageSize:
    width: int
    height: int
    aspect_ratio: str


ROLE_SIZES: dict[ImageRole, ImageSize] = {
    ImageRole.HERO: ImageSize(1920, 1080, "16:9"),
    ImageRole.PRODUCT: ImageSize(800, 800, "1:1"),
    ImageRole.TEAM: ImageSize(400, 400, "1:1"),
    ImageRole.FEATURE: ImageSize(800, 600, "4:3"),
    ImageRole.GALLERY: ImageSize(800, 600, "4:3"),
    ImageRole.BACKGROUND: ImageSize(1920, 1080, "16:9"),
    ImageRole.LOGO: ImageSize(256, 256, "1:1"),
    ImageRole.ICON: ImageSize(128, 128, "1:1"),
    ImageRole.GENERAL: ImageSize(800, 600, "4:3"),
}

# Lower value = resolved first.
ROLE_PRIORITY: dict[ImageRole, int] = {
    ImageRole.HERO: 1,
    ImageRole.PRODUCT: 2,
    ImageRole.FEATURE: 2,
    ImageRole.TEAM: 3,
    ImageRole.LOGO: 3,
    ImageRole.GALLERY: 4,
    ImageRole.BACKGROUND: 4,
    ImageRole.ICON: 5,
    ImageRole.GENERAL: 5,
}


@dataclass(frozen=True, slots=True)
class ImageSlot:
    """One placeholder image location discovered in generated markup."""

    id: str
    role: ImageRole
    placeholder: str
    hint: str
    css_classes: tuple[str, ...] = ()
    parent_section: Optional[str] = None
    kind: str = "img"
    offset: int = 0
    span: Optional[tuple[int, int]] = None

    @property
    def size(self) -> ImageSize:
        return ROLE_SIZES[self.role]

    @property
    def priority(self) -> int:
        return ROLE_PRIORITY[self.role]


@dataclass(frozen=True, slots=True)
class BusinessInfo:
    """Optional business metadata threaded into prompts and provider queries."""

    name: Optional[str] = None
    industry: Optional[str] = None
    style: Optional[str] = None
    prompt: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResolvedImage:
    """Outcome of resolving a single slot.

    ``status`` is diagnostic only: a ``failed`` slot still carries a usable
    (synthesized) URL.
    """

    slot_id: str
    url: str
    source: str
    status: str = "completed"
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResolutionProgress:
    completed: int
    total: int
    result: ResolvedImage


@dataclass(slots=True)
class PipelineResult:
    slots: list[ImageSlot]
    selected: list[ImageSlot]
    images: dict[str, ResolvedImage] = field(default_factory=dict)
    used_urls: set[str] = field(default_factory=set)
    html: str = ""

    @property
    def urls(self) -> dict[str, str]:
        return {slot_id: image.url for slot_id, image in self.images.items()}
