"""Exception hierarchy for event routing."""


class EventNotifierError(Exception):
    """Base class for all event-notifier errors."""

    pass


class ConfigError(EventNotifierError):
    """Raised when required configuration is missing or invalid."""

    pass


class RoutingError(EventNotifierError):
    """Raised when a payload cannot be routed to completion."""

    pass


class MalformedPayload(RoutingError):
    """Raised when the top-level payload is not valid JSON."""

    pass


class UnsupportedShape(RoutingError):
    """Raised when a payload matches no known event shape."""

    pass


class DecodeError(RoutingError):
    """Raised when a nested document fails strict decoding."""

    pass


class SinkError(RoutingError):
    """Raised when a notification could not be delivered."""

    pass


def with_prefix(error: RoutingError, prefix: str) -> RoutingError:
    """Return a new error of the same class with a causal prefix prepended."""
    return type(error)(f"{prefix}{error}")
