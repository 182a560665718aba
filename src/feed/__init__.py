"""Feed domain: upstream story models, cache-first fetching and the API client."""

from topstories.feed.cache import FeedCache
from topstories.feed.client import HackerNewsClient
from topstories.feed.models import (
    FeedResponse,
    FormattedRecord,
    Item,
    Metadata,
    format_rfc3339,
    format_timestamp,
)

__all__ = [
    "FeedCache",
    "FeedResponse",
    "FormattedRecord",
    "HackerNewsClient",
    "Item",
    "Metadata",
    "format_rfc3339",
    "format_timestamp",
]
