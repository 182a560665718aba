"""Error taxonomy for the fetch-cache layer."""


class FeedError(Exception):
    """Base error for upstream feed access."""


class NetworkFailure(FeedError):
    """The upstream fetch failed and no cached payload could stand in."""


class DecodeFailure(FeedError):
    """A payload was not valid JSON of the expected shape."""
