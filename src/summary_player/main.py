#!/usr/bin/env python3
"""Main entry point for the summary player tooling."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from summary_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from summary_player.domain.media.value_objects import MediaResource

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning("Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH)

    logging.getLogger().setLevel(resolved_level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="summary-player",
        description="Audio tooling for the book summary player.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s probe audio/intro.mp3
  %(prog)s probe f9gy1gpai8=https://example.com/audio.mp3
        """,
    )
    subparsers = parser.add_subparsers(dest="action", required=True)

    probe = subparsers.add_parser("probe", help="print the duration of one or more sources")
    probe.add_argument(
        "sources",
        nargs="+",
        metavar="[ID=]URI",
        help="source to probe; the id defaults to the URI itself",
    )
    return parser


def parse_source(value: str) -> MediaResource:
    """Turn ``ID=URI`` (or a bare URI) into a MediaResource."""
    from summary_player.domain.media.value_objects import MediaResource

    resource_id, sep, uri = value.partition("=")
    if not sep or "://" in resource_id or not resource_id:
        return MediaResource(id=value, source_uri=value)
    return MediaResource(id=resource_id, source_uri=uri)


async def probe(sources: Sequence[str]) -> list[str]:
    """Resolve durations for ``sources`` and return ``id<TAB>label`` lines."""
    from summary_player.config.container import create_container
    from summary_player.config.settings import get_settings

    container = create_container(get_settings())
    resources = [parse_source(source) for source in sources]
    loader = container.batch_duration_loader()
    try:
        await loader.load(resources)
    finally:
        await container.shutdown()

    seen: set[str] = set()
    lines: list[str] = []
    for resource in resources:
        if resource.id in seen:
            continue
        seen.add(resource.id)
        lines.append(f"{resource.id}\t{loader.label_for(resource.id)}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    from summary_player.config.settings import get_settings

    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    logger.debug(LogTemplates.APP_STARTING, settings.environment)

    try:
        if args.action == "probe":
            for line in asyncio.run(probe(args.sources)):
                print(line)
        return 0
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
