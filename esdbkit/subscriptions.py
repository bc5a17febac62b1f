"""Handle of a catch-up subscription to a stream or to $all."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Iterator, Mapping

from .decoding import resolved_event_from_wire
from .events import SubscriptionDropped, SubscriptionEvent
from .types import Position

_log = logging.getLogger(__name__)


class Subscription:
    """A live subscription; :meth:`recv` returns one notification at a time.

    ``inner`` yields subscription responses: ``{"event": ...}``,
    ``{"checkpoint": {...}}``, ``{"caught_up": {}}`` or ``{"fell_behind": {}}``.
    """

    def __init__(
        self,
        inner: Iterable[Mapping],
        cancel: Callable[[], None] | None = None,
        subscription_id: str = "",
    ) -> None:
        self._inner: Iterator[Mapping] = iter(inner)
        self._cancel = cancel
        self._id = subscription_id
        self._closed = False
        self._cancelled = False
        self._close_lock = threading.Lock()

    @property
    def id(self) -> str:
        """The subscription's id."""
        return self._id

    def close(self) -> None:
        """Drop the subscription and release the underlying call."""
        with self._close_lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._closed = True
            if self._cancel is not None:
                self._cancel()

    def recv(self) -> SubscriptionEvent:
        """Wait for the next notification; a dropped subscription reports the drop."""
        if self._closed:
            return SubscriptionEvent(
                subscription_dropped=SubscriptionDropped(
                    error=RuntimeError("subscription has been dropped")
                )
            )

        while True:
            try:
                message = next(self._inner)
            except StopIteration:
                return self._drop(EOFError("subscription stream ended"))
            except Exception as err:
                return self._drop(err)

            if "checkpoint" in message:
                checkpoint = message["checkpoint"] or {}
                return SubscriptionEvent(
                    checkpoint_reached=Position(
                        commit=checkpoint.get("commit_position", 0),
                        prepare=checkpoint.get("prepare_position", 0),
                    )
                )
            if "event" in message:
                return SubscriptionEvent(event_appeared=resolved_event_from_wire(message["event"]))
            if "caught_up" in message:
                return SubscriptionEvent(caught_up=self)
            if "fell_behind" in message:
                return SubscriptionEvent(fell_behind=self)

            _log.warning("received unknown message, skipping")

    def _drop(self, err: BaseException) -> SubscriptionEvent:
        _log.error("subscription has dropped. Reason: %s", err)
        self._closed = True
        return SubscriptionEvent(subscription_dropped=SubscriptionDropped(error=err))

    def __iter__(self) -> Iterator[SubscriptionEvent]:
        """Yield notifications until the subscription is dropped."""
        while True:
            event = self.recv()
            if event.subscription_dropped is not None:
                return
            yield event

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()