"""topstories: Hacker News best stories with generated illustrations."""

__version__ = "1.0.0"
