"""Options of read, subscribe and tombstone requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import ClassVar, Union

from .revision import Any, End, NoStream, Start, StreamExists, StreamRevision
from .types import Direction, Position, SubscriptionFilter

StreamPosition = Union[Start, End, StreamRevision]
AllPosition = Union[Start, End, Position]
ExpectedRevision = Union[Any, StreamExists, NoStream, StreamRevision]


@dataclass
class ReadStreamOptions:
    """Options of a read-stream request."""

    streaming: ClassVar[bool] = True

    direction: Direction = Direction.FORWARDS
    start: StreamPosition | None = None
    resolve_link_tos: bool = False
    authenticated: object | None = None
    deadline: timedelta | None = None
    requires_leader: bool = False

    def set_defaults(self) -> None:
        """Read from the start of the stream unless told otherwise."""
        if self.start is None:
            self.start = Start()


@dataclass
class ReadAllOptions:
    """Options of a read-$all request."""

    streaming: ClassVar[bool] = True

    direction: Direction = Direction.FORWARDS
    start: AllPosition | None = None
    resolve_link_tos: bool = False
    authenticated: object | None = None
    deadline: timedelta | None = None
    requires_leader: bool = False

    def set_defaults(self) -> None:
        """Read from the start of the log unless told otherwise."""
        if self.start is None:
            self.start = Start()


@dataclass
class SubscribeToStreamOptions:
    """Options of a subscribe-to-stream request."""

    streaming: ClassVar[bool] = True

    start: StreamPosition | None = None
    resolve_link_tos: bool = False
    authenticated: object | None = None
    deadline: timedelta | None = None
    requires_leader: bool = False

    def set_defaults(self) -> None:
        """Subscribe from the end of the stream unless told otherwise."""
        if self.start is None:
            self.start = End()


@dataclass
class SubscribeToAllOptions:
    """Options of a subscribe-to-$all request."""

    streaming: ClassVar[bool] = True

    start: AllPosition | None = None
    resolve_link_tos: bool = False
    max_search_window: int = 0
    checkpoint_interval: int = 0
    filter: SubscriptionFilter | None = None
    authenticated: object | None = None
    deadline: timedelta | None = None
    requires_leader: bool = False

    def set_defaults(self) -> None:
        """Subscribe from the end; a filter gets a search window and checkpoint interval."""
        if self.start is None:
            self.start = End()
        if self.filter is not None:
            if self.max_search_window == 0:
                self.max_search_window = 32
            if self.checkpoint_interval == 0:
                self.checkpoint_interval = 1


@dataclass
class TombstoneStreamOptions:
    """Options of a tombstone-stream request."""

    streaming: ClassVar[bool] = False

    expected_revision: ExpectedRevision | None = None
    authenticated: object | None = None
    deadline: timedelta | None = None
    requires_leader: bool = False

    def set_defaults(self) -> None:
        """Accept any current revision unless told otherwise."""
        if self.expected_revision is None:
            self.expected_revision = Any()