"""Prometheus metrics for the event router.

All metrics use the 'event_notifier_' prefix and live in the default registry,
so a host process that already exposes prometheus_client metrics picks them up.
"""

from prometheus_client import Counter, Histogram

EVENTS = Counter(
    "event_notifier_events_total",
    "Total payloads routed",
    ["path"],  # path: sns, cloudwatch, dropped
)

NOTIFICATIONS = Counter(
    "event_notifier_notifications_total",
    "Total notifications sent to sinks",
    ["sink", "status"],  # sink: slack, pagerduty; status: success, error
)

ERRORS = Counter(
    "event_notifier_errors_total",
    "Total routing errors",
    ["error_type"],
)

ROUTE_DURATION = Histogram(
    "event_notifier_route_duration_seconds",
    "Time spent routing one payload",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
