from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..config import MODELS, PROVIDERS, QUALITIES, ProviderCredentials, ResolutionConfig
from ..models import BusinessInfo, ResolutionProgress
from ..pipeline import ImageResolutionPipeline


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve placeholder images in a generated HTML page")
    parser.add_argument("input", type=Path, help="HTML file to scan for placeholder images")
    parser.add_argument("--output", type=Path, default=None, help="Write the page with resolved images here")
    parser.add_argument("--name", default=None, help="Business name")
    parser.add_argument("--industry", default=None, help="Business industry (e.g. restaurant, saas)")
    parser.add_argument("--style", default=None, help="Visual style (modern, minimal, bold, ...)")
    parser.add_argument("--prompt", default="", help="Free-text description used to detect sub-categories")
    parser.add_argument("--provider", choices=PROVIDERS, default=None, help="Preferred generative backend")
    parser.add_argument("--model", choices=MODELS, default=None, help="Generative model identifier")
    parser.add_argument("--quality", choices=QUALITIES, default=None, help="Generation quality tier")
    parser.add_argument("--max-images", type=int, default=None, help="Maximum number of slots to resolve")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout in seconds")
    parser.add_argument(
        "--no-stock",
        action="store_true",
        help="Skip the stock photo tier and synthesize placeholders when remote tiers fail",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only extract and budget slots without contacting any provider",
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON report of the resolved slots")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> ResolutionConfig:
    return ResolutionConfig.from_options(
        provider=args.provider,
        model=args.model,
        max_images=args.max_images,
        timeout=args.timeout,
        quality=args.quality,
        stock_fallback=False if args.no_stock else None,
    )


def _log_progress(progress: ResolutionProgress) -> None:
    logger.info(
        "[%s/%s] %s -> %s (%s)",
        progress.completed,
        progress.total,
        progress.result.slot_id,
        progress.result.source,
        progress.result.status,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        config = _build_config(args)
        html = args.input.read_text(encoding="utf-8")
    except (ValueError, OSError) as exc:
        logger.error("Invalid input: %s", exc)
        raise SystemExit(1) from exc

    pipeline = ImageResolutionPipeline(config=config, credentials=ProviderCredentials.from_env())
    if args.dry_run:
        slots, selected = pipeline.plan(html)
        chosen = {slot.id for slot in selected}
        for slot in slots:
            marker = "*" if slot.id in chosen else " "
            print(f"{marker} {slot.id:<8} {slot.role.value:<10} {slot.size.aspect_ratio:<5} {slot.hint}")
        raise SystemExit(0)

    business_info = BusinessInfo(name=args.name, industry=args.industry, style=args.style, prompt=args.prompt)
    result = asyncio.run(pipeline.run(html, business_info, args.prompt, on_progress=_log_progress))

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(result.html, encoding="utf-8")
        logger.info("Stored page with resolved images at %s", args.output)

    if args.json:
        report = [
            {
                "id": image.slot_id,
                "source": image.source,
                "status": image.status,
                "error": image.error,
                "url": image.url,
            }
            for image in result.images.values()
        ]
        json.dump(report, sys.stdout, indent=2)
        sys.stdout.write("\n")


if __name__ == "__main__":
    main()
