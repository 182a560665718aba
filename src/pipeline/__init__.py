"""Pipeline modules: orchestration layer for topstories.

  feed: ranked story ids -> fetched items -> illustrated output records

Pipeline modules import domain logic via public APIs:
  - ``from topstories.feed import ...`` (not ``topstories.feed.cache``)
  - ``from topstories.artifacts import ...`` for illustrations
"""

from topstories.pipeline.feed import build_response, format_item, render_feed

__all__ = ["build_response", "format_item", "render_feed"]
