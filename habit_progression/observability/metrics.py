"""
Prometheus metrics definitions for the progression engine.

Metrics are organized by category:
- Activity metrics: activities logged and reversed
- Level metrics: level-ups and level-downs
- Degradation metrics: penalties applied per category
- Error metrics: engine errors by type

The host application decides how (and whether) to expose the default
registry; the engine only increments counters.
"""

import logging
from prometheus_client import Counter

from habit_progression import config

logger = logging.getLogger(__name__)

# =============================================================================
# Activity Metrics
# =============================================================================

activities_logged_total = Counter(
    "progression_activities_logged_total",
    "Total activities applied to a user state",
    ["activity_type"],
)

activities_reversed_total = Counter(
    "progression_activities_reversed_total",
    "Total activities undone",
    ["activity_type"],
)

# =============================================================================
# Level Metrics
# =============================================================================

level_changes_total = Counter(
    "progression_level_changes_total",
    "Total levels gained or lost",
    ["direction"],  # direction: up/down
)

# =============================================================================
# Degradation Metrics
# =============================================================================

degradation_penalties_total = Counter(
    "progression_degradation_penalties_total",
    "Total degradation penalties applied",
    ["category"],  # category: workout/study
)

# =============================================================================
# Error Metrics
# =============================================================================

errors_total = Counter(
    "progression_errors_total",
    "Total engine errors by type",
    ["error_type"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def track_activity_logged(activity_type: str) -> None:
    if config.ENABLE_PROMETHEUS:
        activities_logged_total.labels(activity_type=activity_type).inc()


def track_activity_reversed(activity_type: str) -> None:
    if config.ENABLE_PROMETHEUS:
        activities_reversed_total.labels(activity_type=activity_type).inc()


def track_level_change(direction: str, levels: int) -> None:
    """Record levels gained ('up') or lost ('down')"""
    if config.ENABLE_PROMETHEUS and levels > 0:
        level_changes_total.labels(direction=direction).inc(levels)


def track_degradation(category: str) -> None:
    if config.ENABLE_PROMETHEUS:
        degradation_penalties_total.labels(category=category).inc()


def track_error(error_type: str) -> None:
    if config.ENABLE_PROMETHEUS:
        errors_total.labels(error_type=error_type).inc()
