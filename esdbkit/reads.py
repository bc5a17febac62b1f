"""Iterator over the results of a stream or $all read."""

from __future__ import annotations

import threading
from typing import Callable, Iterable, Iterator, Mapping

from .decoding import resolved_event_from_wire
from .events import ResolvedEvent


class StreamNotFoundError(LookupError):
    """The stream being read does not exist."""

    def __init__(self, stream_name: str) -> None:
        super().__init__(f"stream '{stream_name}' is not found")
        self.stream_name = stream_name


def _identity(err: BaseException) -> BaseException:
    return err


class ReadStream:
    """Events of a read request, received one at a time.

    ``inner`` yields read responses: ``{"event": ...}`` or
    ``{"stream_not_found": {"stream_identifier": {"stream_name": ...}}}``.
    When the responses run out, :meth:`recv` raises :class:`EOFError`.
    """

    def __init__(
        self,
        inner: Iterable[Mapping],
        cancel: Callable[[], None] | None = None,
        error_handler: Callable[[BaseException], BaseException] | None = None,
    ) -> None:
        self._inner: Iterator[Mapping] = iter(inner)
        self._cancel = cancel
        self._error_handler = error_handler or _identity
        self._closed = False
        self._close_lock = threading.Lock()
        self._cancelled = False

    def close(self) -> None:
        """Stop reading and release the underlying call."""
        with self._close_lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._closed = True
            if self._cancel is not None:
                self._cancel()

    def recv(self) -> ResolvedEvent:
        """Return the next event; raise EOFError once the read is over."""
        if self._closed:
            raise EOFError("read stream is exhausted")

        try:
            message = next(self._inner)
        except StopIteration:
            self._closed = True
            raise EOFError("read stream is exhausted") from None
        except Exception as err:
            self._closed = True
            handled = self._error_handler(err)
            if handled is err:
                raise
            raise handled from err

        if "event" in message:
            return resolved_event_from_wire(message["event"])
        if "stream_not_found" in message:
            self._closed = True
            raw = ((message["stream_not_found"] or {}).get("stream_identifier") or {}).get(
                "stream_name"
            ) or b""
            name = raw if isinstance(raw, str) else bytes(raw).decode("utf-8", errors="replace")
            raise StreamNotFoundError(name)
        raise ValueError(f"unexpected read response: {sorted(message)!r}")

    def __iter__(self) -> Iterator[ResolvedEvent]:
        while True:
            try:
                yield self.recv()
            except EOFError:
                return

    def __enter__(self) -> ReadStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()