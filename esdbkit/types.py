"""Core value types: positions, directions, filters and persistent subscription data."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

SUBSCRIBER_COUNT_UNLIMITED = 0

USER_STREAM_ACL = "$userStreamAcl"
SYSTEM_STREAM_ACL = "$systemStreamAcl"

NO_MAX_SEARCH_WINDOW = -1


@dataclass(frozen=True)
class Position:
    """A transaction log position."""

    commit: int = 0
    prepare: int = 0

    def __post_init__(self) -> None:
        if self.commit < 0 or self.prepare < 0:
            raise ValueError("positions cannot be negative")


class Direction(IntEnum):
    """Read direction."""

    FORWARDS = 0
    BACKWARDS = 1


class ConsumerStrategy(str, Enum):
    """Named consumer strategies for persistent subscriptions."""

    ROUND_ROBIN = "RoundRobin"
    DISPATCH_TO_SINGLE = "DispatchToSingle"
    PINNED = "Pinned"


@dataclass
class PersistentSubscriptionSettings:
    """Settings of a persistent subscription; timeouts are in milliseconds."""

    start_from: object = None
    resolve_link_tos: bool = False
    extra_statistics: bool = False
    max_retry_count: int = 10
    checkpoint_lower_bound: int = 10
    checkpoint_upper_bound: int = 1_000
    max_subscriber_count: int = SUBSCRIBER_COUNT_UNLIMITED
    live_buffer_size: int = 500
    read_batch_size: int = 20
    history_buffer_size: int = 500
    consumer_strategy_name: ConsumerStrategy = ConsumerStrategy.ROUND_ROBIN
    message_timeout: int = 30 * 1000
    checkpoint_after: int = 2 * 1000


def subscription_settings_default() -> PersistentSubscriptionSettings:
    """Return persistent subscription settings filled with default values."""
    return PersistentSubscriptionSettings()


class FilterType(IntEnum):
    """What a subscription filter is applied to."""

    EVENT = 0
    STREAM = 1


@dataclass
class SubscriptionFilter:
    """A server-side filter for subscriptions to $all."""

    type: FilterType = FilterType.EVENT
    prefixes: list[str] = field(default_factory=list)
    regex: str = ""


def exclude_system_events_filter() -> SubscriptionFilter:
    """A filter that drops events whose type starts with '$'."""
    return SubscriptionFilter(type=FilterType.EVENT, regex="^[^\\$].*")


@dataclass
class PersistentSubscriptionMeasurement:
    """A metric name and its value."""

    key: str
    value: int


@dataclass
class PersistentSubscriptionConnectionInfo:
    """An active connection to a persistent subscription."""

    from_: str = ""
    username: str = ""
    average_items_per_second: float = 0.0
    total_items_processed: int = 0
    count_since_last_measurement: int = 0
    available_slots: int = 0
    in_flight_messages: int = 0
    connection_name: str = ""
    extra_statistics: list[PersistentSubscriptionMeasurement] = field(default_factory=list)


@dataclass
class PersistentSubscriptionStats:
    """Processing statistics of a persistent subscription."""

    average_per_second: int = 0
    total_items: int = 0
    count_since_last_measurement: int = 0
    last_checkpointed_event_revision: int | None = None
    last_known_event_revision: int | None = None
    last_checkpointed_position: Position | None = None
    last_known_position: Position | None = None
    read_buffer_count: int = 0
    live_buffer_count: int = 0
    retry_buffer_count: int = 0
    total_in_flight_messages: int = 0
    outstanding_messages_count: int = 0
    parked_messages_count: int = 0


@dataclass
class PersistentSubscriptionInfo:
    """Description of a persistent subscription."""

    event_source: str = ""
    group_name: str = ""
    status: str = ""
    connections: list[PersistentSubscriptionConnectionInfo] = field(default_factory=list)
    settings: PersistentSubscriptionSettings | None = None
    stats: PersistentSubscriptionStats | None = None