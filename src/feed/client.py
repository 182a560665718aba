"""Hacker News API client on top of :class:`FeedCache`."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import StrictInt, TypeAdapter, ValidationError

from topstories.config import FeedSectionConfig
from topstories.errors import DecodeFailure
from topstories.feed.cache import FeedCache
from topstories.feed.models import Item

logger = logging.getLogger(__name__)

RANKED_CACHE_KEY = "beststories"

_RANKED_IDS = TypeAdapter(list[StrictInt])


class HackerNewsClient:
    """Fetch the ranked story list and individual items, cache-first."""

    def __init__(self, config: FeedSectionConfig, cache: FeedCache | None = None) -> None:
        self._config = config
        self._cache = cache or FeedCache(
            Path(config.cache_dir),
            force_refresh=config.force_refresh,
            timeout=config.fetch_timeout,
        )

    @property
    def ranked_ids_url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/{RANKED_CACHE_KEY}.json"

    def item_url(self, item_id: int) -> str:
        return f"{self._config.base_url.rstrip('/')}/item/{item_id}.json"

    def fetch_ranked_ids(self) -> list[int]:
        """Return the first ``top_n`` ranked story ids.

        A payload that is not a JSON array of integers yields ``[]``.

        Raises:
            NetworkFailure: Nothing could be fetched and nothing is cached.
        """
        data = self._cache.resolve(self.ranked_ids_url, self._cache.path_for(RANKED_CACHE_KEY))
        try:
            ids = _RANKED_IDS.validate_json(data)
        except ValidationError as exc:
            logger.warning("Failed to parse story IDs: %s", exc)
            return []
        return ids[: self._config.top_n]

    def fetch_item(self, item_id: int) -> Item:
        """Fetch and decode a single item.

        Raises:
            NetworkFailure: Nothing could be fetched and nothing is cached.
            DecodeFailure: The payload is not a valid item object.
        """
        data = self._cache.resolve(self.item_url(item_id), self._cache.path_for(item_id))
        try:
            return Item.model_validate_json(data)
        except ValidationError as exc:
            raise DecodeFailure(f"Malformed item {item_id}: {exc}") from exc
