"""Expected revisions and stream positions used by stream operations."""

from __future__ import annotations

from dataclasses import dataclass

_MAX_U64 = (1 << 64) - 1


@dataclass(frozen=True)
class Any:
    """The write should not conflict with anything and should always succeed."""


@dataclass(frozen=True)
class StreamExists:
    """The stream should already exist."""


@dataclass(frozen=True)
class NoStream:
    """The stream being written to should not yet exist."""


@dataclass(frozen=True)
class Start:
    """The beginning of a stream or of the transaction log."""


@dataclass(frozen=True)
class End:
    """The end of a stream or of the transaction log."""


@dataclass(frozen=True)
class StreamRevision:
    """An explicit event revision within a stream."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"stream revision must be an integer, got {self.value!r}")
        if not 0 <= self.value <= _MAX_U64:
            raise ValueError(f"stream revision out of range: {self.value}")