"""Feed domain models as pure Pydantic v2 data types.

``Item`` mirrors the upstream item record; ``FormattedRecord`` and
``FeedResponse`` are the camelCase JSON shapes emitted on stdout.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

RESPONSE_VERSION = "1.0"


def format_timestamp(epoch_seconds: int) -> str:
    """Render an epoch timestamp as a display date, e.g. ``Jan 2, 2006`` (local time).

    Timestamps the platform cannot represent (milliseconds, garbage) render as ``""``.
    """
    try:
        dt = datetime.fromtimestamp(epoch_seconds)
    except (ValueError, OverflowError, OSError):
        logger.warning("Unrepresentable timestamp: %s", epoch_seconds)
        return ""
    return f"{dt:%b} {dt.day}, {dt.year}"


def format_rfc3339(dt: datetime) -> str:
    """RFC 3339 timestamp to the second, with ``Z`` for UTC."""
    stamp = dt.isoformat(timespec="seconds")
    if stamp.endswith("+00:00"):
        return stamp[:-6] + "Z"
    return stamp


class Item(BaseModel):
    """A story record from the upstream content API."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    title: str = ""
    url: str = ""
    score: int = 0
    time: int = 0
    descendants: int = 0

    def resolved_link(self, host: str, item_id: int | None = None) -> str:
        """External link, or the discussion page on ``host`` when there is none."""
        if self.url:
            return self.url
        return f"https://{host}/item?id={self.id if item_id is None else item_id}"


class FormattedRecord(BaseModel):
    """One output story: an Item projected together with its artifact path."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(alias="storyTitle")
    url: str = Field(alias="storyUrl")
    image: str = Field(alias="storyImage")
    timestamp: str = Field(alias="storyTimestamp")
    id: int = Field(alias="storyId")
    score: int = Field(alias="storyScore")


class Metadata(BaseModel):
    """Response metadata block."""

    model_config = ConfigDict(populate_by_name=True)

    total_count: int = Field(alias="totalCount")
    last_updated: str = Field(alias="lastUpdated")
    version: str = RESPONSE_VERSION


class FeedResponse(BaseModel):
    """The JSON document produced once per run."""

    stories: list[FormattedRecord] = Field(default_factory=list)
    metadata: Metadata

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
