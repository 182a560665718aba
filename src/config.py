"""Unified configuration loaded from .topstories.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import string
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".topstories.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "topstories" / "config.toml"

IMAGE_PROMPT_TEMPLATE = (
    "{title} showcased in a gritty noir comic book splash page. High contrast "
    "chiaroscuro lighting, heavy ink lines, dramatic angle. Full bleed, "
    "edge-to-edge artwork, masterpiece."
)

_TRUTHY = ("true", "1", "yes")


class FeedSectionConfig(BaseModel):
    """[feed] section."""

    base_url: str = "https://hacker-news.firebaseio.com/v0"
    item_host: str = "news.ycombinator.com"
    top_n: int = Field(default=5, ge=0)
    cache_dir: str = "cache"
    fetch_timeout: int = Field(default=30, gt=0)
    force_refresh: bool = False


class ImageSectionConfig(BaseModel):
    """[images] section."""

    api_key: str = ""
    model: str = "gemini-2.5-flash-image"
    aspect_ratio: str = "4:3"
    timeout: int = Field(default=60, gt=0)
    directory: str = "headline_images_nano_banana"
    default_image: str = "default.png"
    retention_days: int = Field(default=30, gt=0)
    test_mode: bool = False
    prompt_template: str = IMAGE_PROMPT_TEMPLATE

    @field_validator("prompt_template")
    @classmethod
    def _check_prompt_template(cls, value: str) -> str:
        """Require exactly one ``{title}`` replacement field and no others."""
        fields = [name for _, name, _, _ in string.Formatter().parse(value) if name is not None]
        if fields != ["title"]:
            raise ValueError(
                "prompt_template must contain exactly one {title} placeholder "
                f"and no other replacement fields, got {fields or 'none'}"
            )
        return value


class TopStoriesConfig(BaseModel):
    """Top-level configuration model."""

    feed: FeedSectionConfig = Field(default_factory=FeedSectionConfig)
    images: ImageSectionConfig = Field(default_factory=ImageSectionConfig)


def load_config(path: str | Path | None = None) -> TopStoriesConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .topstories.toml in CWD
    3. ~/.config/topstories/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged TopStoriesConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = TopStoriesConfig.model_validate(data) if data else TopStoriesConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: TopStoriesConfig, **cli_kwargs: object) -> TopStoriesConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``force_refresh``, ``test_mode``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "force_refresh": ("feed", "force_refresh"),
        "test_mode": ("images", "test_mode"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return TopStoriesConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: TopStoriesConfig) -> TopStoriesConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "GEMINI_API_KEY": ("images", "api_key"),
        "IMAGE_MODEL": ("images", "model"),
        "TOPSTORIES_CACHE_DIR": ("feed", "cache_dir"),
        "TOPSTORIES_IMAGE_DIR": ("images", "directory"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    force_raw = os.environ.get("FORCE_UPDATE")
    if force_raw is not None:
        data["feed"]["force_refresh"] = force_raw.lower() in _TRUTHY
    test_raw = os.environ.get("TEST_MODE")
    if test_raw is not None:
        data["images"]["test_mode"] = test_raw.lower() in _TRUTHY

    return TopStoriesConfig.model_validate(data)
