"""Feed pipeline: ranked stories → illustrated JSON records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from topstories.artifacts import ArtifactStore
from topstories.config import TopStoriesConfig
from topstories.errors import FeedError
from topstories.feed import (
    FeedResponse,
    FormattedRecord,
    HackerNewsClient,
    Item,
    Metadata,
    format_rfc3339,
    format_timestamp,
)

logger = logging.getLogger(__name__)


def format_item(
    item_id: int,
    item: Item,
    *,
    artifacts: ArtifactStore,
    item_host: str,
    prompt_template: str,
) -> FormattedRecord:
    """Project an item and its illustration into an output record."""
    prompt = prompt_template.format(title=item.title)
    image_path = artifacts.materialize(prompt, item_id)

    return FormattedRecord(
        title=item.title,
        url=item.resolved_link(item_host, item_id),
        image=str(image_path),
        timestamp=format_timestamp(item.time),
        id=item_id,
        score=item.score,
    )


def render_feed(
    config: TopStoriesConfig,
    *,
    client: HackerNewsClient | None = None,
    artifacts: ArtifactStore | None = None,
) -> list[FormattedRecord]:
    """Fetch the top stories in ranking order and illustrate each one.

    Stories whose detail fetch fails are logged and left out; a failed
    illustration falls back to the default image and keeps the story.
    """
    if client is None:
        client = HackerNewsClient(config.feed)
    if artifacts is None:
        artifacts = ArtifactStore(config.images)

    try:
        story_ids = client.fetch_ranked_ids()
    except FeedError as exc:
        logger.warning("Failed to fetch best stories: %s", exc)
        return []

    records: list[FormattedRecord] = []
    for item_id in story_ids:
        try:
            item = client.fetch_item(item_id)
        except FeedError as exc:
            logger.warning("Failed to fetch story %d: %s", item_id, exc)
            continue
        records.append(
            format_item(
                item_id,
                item,
                artifacts=artifacts,
                item_host=config.feed.item_host,
                prompt_template=config.images.prompt_template,
            )
        )

    logger.info("Rendered %d of %d stories", len(records), len(story_ids))
    return records


def build_response(
    records: list[FormattedRecord],
    *,
    now: datetime | None = None,
) -> FeedResponse:
    """Wrap records in the response envelope with count and timestamp."""
    stamp = (now or datetime.now(UTC)).astimezone()
    return FeedResponse(
        stories=records,
        metadata=Metadata(
            total_count=len(records),
            last_updated=format_rfc3339(stamp),
        ),
    )
