class FeedEngineError(Exception):
    pass

class ConfigError(FeedEngineError):
    pass

class SubscriptionError(FeedEngineError):
    """Malformed subscription input; a caller contract violation, not a runtime condition."""


class UniverseError(FeedEngineError):
    pass


class ConcurrentAccessError(FeedEngineError):
    """A single-writer component was entered while another call was still in flight."""
