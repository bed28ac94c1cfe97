from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PROVIDERS = ("runpod", "openai")
MODELS = ("flux-schnell", "sdxl", "dall-e-3")
QUALITIES = ("draft", "standard", "high")

DEFAULT_MAX_IMAGES = 5
DEFAULT_BATCH_SIZE = 2
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class ResolutionConfig:
    """Immutable settings for a single pipeline invocation."""

    provider: str = "runpod"
    model: str = "flux-schnell"
    max_images: int = DEFAULT_MAX_IMAGES
    timeout: float = DEFAULT_TIMEOUT
    quality: str = "standard"
    batch_size: int = DEFAULT_BATCH_SIZE
    stock_fallback: bool = True

    def __post_init__(self) -> None:
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unsupported provider {self.provider!r}; expected one of {PROVIDERS}")
        if self.model not in MODELS:
            raise ValueError(f"Unsupported model {self.model!r}; expected one of {MODELS}")
        if self.quality not in QUALITIES:
            raise ValueError(f"Unsupported quality {self.quality!r}; expected one of {QUALITIES}")
        if self.max_images < 0:
            raise ValueError("max_images must not be negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

    @classmethod
    def from_options(
        cls,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        max_images: Optional[int] = None,
        timeout: Optional[float] = None,
        quality: Optional[str] = None,
        batch_size: Optional[int] = None,
        stock_fallback: Optional[bool] = None,
    ) -> ResolutionConfig:
        """Build a config from loosely typed option values, keeping defaults for ``None``."""

        defaults = cls()
        return cls(
            provider=(provider or defaults.provider).strip().lower(),
            model=(model or defaults.model).strip().lower(),
            max_images=defaults.max_images if max_images is None else int(max_images),
            timeout=defaults.timeout if timeout is None else float(timeout),
            quality=(quality or defaults.quality).strip().lower(),
            batch_size=defaults.batch_size if batch_size is None else int(batch_size),
            stock_fallback=defaults.stock_fallback if stock_fallback is None else stock_fallback,
        )


@dataclass(frozen=True, slots=True)
class ProviderCredentials:
    pixabay_api_key: Optional[str] = None
    runpod_api_key: Optional[str] = None
    runpod_flux_endpoint: Optional[str] = None
    runpod_sdxl_endpoint: Optional[str] = None
    openai_api_key: Optional[str] = None

    @classmethod
    def from_env(cls, env_path: Path = Path(".env")) -> ProviderCredentials:
        file_values = _read_env_file(env_path)

        def lookup(key: str) -> Optional[str]:
            value = _normalize(os.getenv(key))
            if value is not None:
                return value
            return _normalize(file_values.get(key))

        return cls(
            pixabay_api_key=lookup("PIXABAY_API_KEY"),
            runpod_api_key=lookup("RUNPOD_API_KEY"),
            runpod_flux_endpoint=lookup("RUNPOD_FLUX_ENDPOINT"),
            runpod_sdxl_endpoint=lookup("RUNPOD_SDXL_ENDPOINT"),
            openai_api_key=lookup("OPENAI_API_KEY"),
        )


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


def _read_env_file(env_path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if "=" not in stripped:
                continue
            key, raw_value = stripped.split("=", 1)
            values[key.strip()] = raw_value.strip().strip('"').strip("'")
    except OSError:
        logger.debug("Unable to read %s for provider credentials", env_path, exc_info=True)
    return values
