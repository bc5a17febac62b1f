"""Events read from the database and notifications raised by subscriptions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .types import Position

if TYPE_CHECKING:
    from .subscriptions import Subscription

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class RecordedEvent:
    """A previously written event."""

    event_id: uuid.UUID = uuid.UUID(int=0)
    event_type: str = ""
    content_type: str = ""
    stream_id: str = ""
    event_number: int = 0
    position: Position = field(default_factory=Position)
    created_date: datetime = _EPOCH
    data: bytes = b""
    system_metadata: dict[str, str] = field(default_factory=dict)
    user_metadata: bytes = b""


@dataclass
class ResolvedEvent:
    """An event together with the link that pointed at it, if any."""

    link: RecordedEvent | None = None
    event: RecordedEvent | None = None
    commit: int | None = None

    def original_event(self) -> RecordedEvent | None:
        """The event that was read or that triggered the subscription."""
        if self.link is not None:
            return self.link
        return self.event


@dataclass
class SubscriptionDropped:
    """A subscription was dropped."""

    error: BaseException | None = None


@dataclass
class EventAppeared:
    """An event delivered to a persistent subscription."""

    event: ResolvedEvent | None = None
    retry_count: int = 0


@dataclass
class SubscriptionEvent:
    """One notification of a catch-up subscription; exactly one field is set."""

    event_appeared: ResolvedEvent | None = None
    subscription_dropped: SubscriptionDropped | None = None
    checkpoint_reached: Position | None = None
    caught_up: Subscription | None = None
    fell_behind: Subscription | None = None


@dataclass
class PersistentSubscriptionEvent:
    """One notification of a persistent subscription; exactly one field is set."""

    event_appeared: EventAppeared | None = None
    subscription_dropped: SubscriptionDropped | None = None
    checkpoint_reached: Position | None = None


@dataclass(frozen=True)
class WriteResult:
    """Outcome of an append."""

    commit_position: int = 0
    prepare_position: int = 0
    next_expected_version: int = 0