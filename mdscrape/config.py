"""Scraper defaults and environment-driven configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_URL = "https://example.com"
DEFAULT_MAX_DEPTH = 2
DEFAULT_OUTPUT_DIR = "scraped_data"
DEFAULT_TIMEOUT = 60.0
DEFAULT_WAIT_UNTIL = "networkidle"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/96.0.4664.110 Safari/537.36"
)

# Candidate roots for the main content, first match wins; body otherwise.
MAIN_SELECTORS: List[str] = [
    "main",
    "article",
    "#content",
    ".content",
    ".main",
]

BROWSER_ARGS: List[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

WAIT_UNTIL_CHOICES = ("load", "domcontentloaded", "networkidle", "commit")

ENV_PREFIX = "MDSCRAPE_"


@dataclass
class ScraperConfig:
    """Settings shared by every page of a run."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    timeout: float = DEFAULT_TIMEOUT
    wait_until: str = DEFAULT_WAIT_UNTIL
    user_agent: str = DEFAULT_USER_AGENT
    headless: bool = True
    proxy_url: Optional[str] = None
    main_selectors: List[str] = field(default_factory=lambda: list(MAIN_SELECTORS))

    @property
    def timeout_ms(self) -> float:
        return self.timeout * 1000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScraperConfig":
        """Read ``MDSCRAPE_*`` variables on top of the defaults."""
        env = os.environ if environ is None else environ
        config = cls()
        _apply_overrides(
            config,
            ConfigOverrides(
                output_dir=env.get(f"{ENV_PREFIX}OUTPUT_DIR") or None,
                timeout=_parse_float(env.get(f"{ENV_PREFIX}TIMEOUT"), DEFAULT_TIMEOUT),
                wait_until=env.get(f"{ENV_PREFIX}WAIT_UNTIL") or None,
                user_agent=env.get(f"{ENV_PREFIX}USER_AGENT") or None,
                headless=_parse_bool(env.get(f"{ENV_PREFIX}HEADLESS")),
                proxy_url=env.get(f"{ENV_PREFIX}PROXY_URL") or None,
            ),
        )
        return config


@dataclass
class ConfigOverrides:
    """Optional per-run overrides, typically from the command line."""

    output_dir: Optional[str] = None
    timeout: Optional[float] = None
    wait_until: Optional[str] = None
    user_agent: Optional[str] = None
    headless: Optional[bool] = None
    proxy_url: Optional[str] = None


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or not value.strip():
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_float(value: Optional[str], default: float) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid number '%s'; falling back to %s.", value, default)
        return default


def _apply_overrides(config: ScraperConfig, overrides: ConfigOverrides) -> None:
    """Apply optional overrides to a ScraperConfig."""
    if overrides.output_dir:
        config.output_dir = overrides.output_dir
    if overrides.timeout is not None:
        config.timeout = overrides.timeout
    if overrides.wait_until:
        if overrides.wait_until in WAIT_UNTIL_CHOICES:
            config.wait_until = overrides.wait_until
        else:
            LOGGER.warning(
                "Unknown wait_until '%s'; falling back to %s.",
                overrides.wait_until,
                config.wait_until,
            )
    if overrides.user_agent:
        config.user_agent = overrides.user_agent
    if overrides.headless is not None:
        config.headless = overrides.headless
    if overrides.proxy_url:
        config.proxy_url = overrides.proxy_url


def build_config(
    overrides: Optional[ConfigOverrides] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ScraperConfig:
    """Environment configuration with ``overrides`` applied on top."""
    config = ScraperConfig.from_env(environ)
    if overrides:
        _apply_overrides(config, overrides)
    return config
