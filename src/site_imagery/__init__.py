from .budget import select_slots
from .config import ProviderCredentials, ResolutionConfig
from .markup.extractor import ContextExtractor, extract_image_slots, is_placeholder_url
from .markup.injector import add_lazy_loading, inject_images
from .models import (
    BusinessInfo,
    ImageRole,
    ImageSize,
    ImageSlot,
    PipelineResult,
    ResolutionProgress,
    ResolvedImage,
)
from .pipeline import ImageResolutionPipeline, resolve_page_images
from .prompts import build_prompt
from .providers.base import ProviderCallFailed, ProviderError, ProviderUnavailable
from .providers.generative import is_generation_available
from .resolution.orchestrator import ResolutionOrchestrator, resolve
from .synthesis.placeholder import synthesize_placeholder

__all__ = [
    "BusinessInfo",
    "ContextExtractor",
    "ImageResolutionPipeline",
    "ImageRole",
    "ImageSize",
    "ImageSlot",
    "PipelineResult",
    "ProviderCallFailed",
    "ProviderCredentials",
    "ProviderError",
    "ProviderUnavailable",
    "ResolutionConfig",
    "ResolutionOrchestrator",
    "ResolutionProgress",
    "ResolvedImage",
    "add_lazy_loading",
    "build_prompt",
    "extract_image_slots",
    "inject_images",
    "is_generation_available",
    "is_placeholder_url",
    "resolve",
    "resolve_page_images",
    "select_slots",
    "synthesize_placeholder",
]
