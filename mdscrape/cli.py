"""Command-line interface for the Markdown site scraper."""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .cli_config import CONFIG_DIR, CONFIG_ENV_FILE, load_config
from .config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_URL,
    WAIT_UNTIL_CHOICES,
    ConfigOverrides,
    build_config,
)
from .site import scrape_site_async


def _load_config() -> None:
    loaded = load_config(
        config_dir=CONFIG_DIR,
        config_env_file=CONFIG_ENV_FILE,
        cwd=Path.cwd(),
        load_env=load_dotenv,
        copy_file=shutil.copy,
    )
    if loaded is not None:
        logging.debug("Loaded environment from %s", loaded)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mdscrape",
        description="Crawl a website and save every page as Markdown with a screenshot.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  # Seed page and two levels of same-domain links into ./scraped_data
  mdscrape https://docs.example.com 2

  # Seed page only
  mdscrape https://docs.example.com 0 -o out/

  # Route the crawl through a rewriting proxy
  mdscrape https://docs.example.com 1 --proxy-url 'https://corsproxy.io/?'
""",
    )

    parser.add_argument(
        "url",
        nargs="?",
        default=DEFAULT_URL,
        help=f"Seed URL (default: {DEFAULT_URL})",
    )
    parser.add_argument(
        "max_depth",
        nargs="?",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum link depth, 1-5 recommended (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output directory (default: scraped_data)",
    )
    parser.add_argument(
        "--proxy-url",
        type=str,
        default=None,
        help="Prefix prepended to the seed URL, e.g. 'https://corsproxy.io/?'",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Navigation timeout in seconds (default: 60)",
    )
    parser.add_argument(
        "--wait-until",
        type=str,
        default=None,
        choices=list(WAIT_UNTIL_CHOICES),
        help="Page load event to wait for (default: networkidle)",
    )
    parser.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="User agent for page requests",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def _build_overrides(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        output_dir=args.output,
        timeout=args.timeout,
        wait_until=args.wait_until,
        user_agent=args.user_agent,
        headless=False if args.headed else None,
        proxy_url=args.proxy_url,
    )


async def _run_scrape_async(args: argparse.Namespace) -> int:
    """Main async entry point for a scrape run."""
    config = build_config(_build_overrides(args))
    result = await scrape_site_async(
        args.url,
        max_depth=args.max_depth,
        config=config,
    )

    for error in result.errors:
        logging.warning(
            "Skipped: %s - %s (%s)", error["url"], error["error"], error["stage"]
        )

    markdown_files = result.metadata.markdown_files if result.metadata else 0
    logging.info("Wrote %d markdown files to %s", markdown_files, result.output_dir)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the mdscrape command."""
    args = _parse_args(argv)
    _setup_logging(args.verbose)
    _load_config()

    try:
        return asyncio.run(_run_scrape_async(args))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return 1


if __name__ == "__main__":
    sys.exit(main())
