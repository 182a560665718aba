"""End-to-end tests for the feed pipeline over a pre-seeded cache."""

from __future__ import annotations

import json
import time
import urllib.error
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from topstories.artifacts import ArtifactStore
from topstories.config import FeedSectionConfig, ImageSectionConfig, TopStoriesConfig
from topstories.feed import HackerNewsClient, Item
from topstories.pipeline import build_response, format_item, render_feed


@pytest.fixture
def config(tmp_path: Path) -> TopStoriesConfig:
    return TopStoriesConfig(
        feed=FeedSectionConfig(cache_dir=str(tmp_path / "cache")),
        images=ImageSectionConfig(directory=str(tmp_path / "images"), test_mode=True),
    )


def _seed(config: TopStoriesConfig, ranked: list[int], items: dict[int, dict]) -> None:
    cache_dir = Path(config.feed.cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    (cache_dir / "beststories.json").write_text(json.dumps(ranked))
    for item_id, body in items.items():
        (cache_dir / f"{item_id}.json").write_text(json.dumps(body))


def _story(item_id: int, **fields) -> dict:
    body = {
        "id": item_id,
        "title": f"Story {item_id}",
        "url": f"https://example.com/{item_id}",
        "score": 100 + item_id,
        "time": 1718452800,
        "descendants": 10,
    }
    body.update(fields)
    return body


class TestRenderFeed:
    def test_skips_failed_item_and_truncates(self, config):
        _seed(config, [1, 2, 3, 4, 5, 6], {i: _story(i) for i in (1, 2, 4, 5, 6)})

        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")):
            records = render_feed(config)

        assert [r.id for r in records] == [1, 2, 4, 5]
        assert [r.title for r in records] == ["Story 1", "Story 2", "Story 4", "Story 5"]

    def test_each_record_gets_its_artifact(self, config):
        _seed(config, [1, 2], {1: _story(1), 2: _story(2)})

        records = render_feed(config)

        images_dir = Path(config.images.directory)
        assert [r.image for r in records] == [str(images_dir / "1.jpg"), str(images_dir / "2.jpg")]
        assert (images_dir / "1.jpg").exists()

    def test_missing_url_uses_discussion_link(self, config):
        _seed(config, [8], {8: _story(8, url="")})

        (record,) = render_feed(config)

        assert record.url == "https://news.ycombinator.com/item?id=8"

    def test_ranked_list_failure_yields_empty(self, config):
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")):
            assert render_feed(config) == []

    def test_malformed_item_is_skipped(self, config):
        _seed(config, [1, 2], {1: _story(1)})
        (Path(config.feed.cache_dir) / "2.json").write_text("{truncated")

        records = render_feed(config)

        assert [r.id for r in records] == [1]

    def test_failed_illustration_keeps_story(self, config):
        _seed(config, [1], {1: _story(1)})
        artifacts = MagicMock(spec=ArtifactStore)
        artifacts.materialize.return_value = Path("default.png")

        records = render_feed(config, artifacts=artifacts)

        assert len(records) == 1
        assert records[0].image == "default.png"

    def test_unrepresentable_time_keeps_story(self, config):
        _seed(config, [1, 2], {1: _story(1, time=1718452800000), 2: _story(2)})

        records = render_feed(config)

        assert [r.id for r in records] == [1, 2]
        assert records[0].timestamp == ""
        assert records[1].timestamp == "Jun 15, 2024"

    def test_uses_injected_client(self, config):
        client = MagicMock(spec=HackerNewsClient)
        client.fetch_ranked_ids.return_value = [9]
        client.fetch_item.return_value = Item(id=9, title="Injected", time=1718452800)
        artifacts = MagicMock(spec=ArtifactStore)
        artifacts.materialize.return_value = Path("default.png")

        records = render_feed(config, client=client, artifacts=artifacts)

        client.fetch_item.assert_called_once_with(9)
        assert records[0].title == "Injected"


class TestFormatItem:
    def test_builds_prompt_from_title(self):
        artifacts = MagicMock(spec=ArtifactStore)
        artifacts.materialize.return_value = Path("images/3.jpg")
        item = Item(id=3, title="Rust in the kernel", score=512, time=1718452800)

        record = format_item(
            3,
            item,
            artifacts=artifacts,
            item_host="news.ycombinator.com",
            prompt_template="{title} as a woodcut",
        )

        artifacts.materialize.assert_called_once_with("Rust in the kernel as a woodcut", 3)
        assert record.score == 512
        assert record.timestamp == "Jun 15, 2024"
        assert record.image == str(Path("images/3.jpg"))


class TestBuildResponse:
    def test_metadata(self):
        now = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)

        response = build_response([], now=now)

        assert response.metadata.total_count == 0
        assert response.metadata.version == "1.0"
        assert datetime.fromisoformat(response.metadata.last_updated) == now

    def test_last_updated_uses_z_in_utc_zone(self, monkeypatch):
        monkeypatch.setenv("TZ", "UTC")
        time.tzset()
        try:
            response = build_response([], now=datetime(2024, 6, 15, 12, 0, tzinfo=UTC))
        finally:
            monkeypatch.undo()
            time.tzset()

        assert response.metadata.last_updated == "2024-06-15T12:00:00Z"
