"""Turning wire messages (nested dictionaries) into event values.

A recorded event on the wire carries ``id``, ``stream_identifier``,
``stream_revision``, ``prepare_position``, ``commit_position``,
``metadata``, ``custom_metadata`` and ``data``. A read event carries
``event``, ``link`` and either ``commit_position`` or ``no_position``;
a persistent read event may also carry ``retry_count`` or ``no_retry_count``.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Mapping

from .events import RecordedEvent, ResolvedEvent
from .requests import (
    SYSTEM_METADATA_KEY_CONTENT_TYPE,
    SYSTEM_METADATA_KEY_CREATED,
    SYSTEM_METADATA_KEY_TYPE,
)
from .types import Position

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_INTEGER = re.compile(r"[+-]?\d+")
_NIL_UUID = uuid.UUID(int=0)


def created_from_ticks(value: str | int) -> datetime:
    """Convert .NET ticks (100 ns units) since the Unix epoch to a UTC datetime."""
    if isinstance(value, bool):
        raise ValueError(f"Failed to parse created date as int from {value!r}")
    if isinstance(value, int):
        ticks = value
    elif isinstance(value, str) and _INTEGER.fullmatch(value):
        ticks = int(value)
    else:
        raise ValueError(f"Failed to parse created date as int from {value!r}")
    return _EPOCH + timedelta(microseconds=ticks // 10)


def _event_id(message: Mapping) -> uuid.UUID:
    text = (message.get("id") or {}).get("string") or ""
    try:
        return uuid.UUID(text)
    except (ValueError, TypeError):
        return _NIL_UUID


def _stream_name(message: Mapping) -> str:
    raw = (message.get("stream_identifier") or {}).get("stream_name") or b""
    if isinstance(raw, str):
        return raw
    return bytes(raw).decode("utf-8", errors="replace")


def recorded_event_from_wire(message: Mapping) -> RecordedEvent:
    """Build a RecordedEvent from a recorded-event wire message."""
    metadata = dict(message.get("metadata") or {})
    return RecordedEvent(
        event_id=_event_id(message),
        event_type=metadata.get(SYSTEM_METADATA_KEY_TYPE, ""),
        content_type=metadata.get(SYSTEM_METADATA_KEY_CONTENT_TYPE, ""),
        stream_id=_stream_name(message),
        event_number=message.get("stream_revision", 0),
        created_date=created_from_ticks(metadata.get(SYSTEM_METADATA_KEY_CREATED, "")),
        position=Position(
            commit=message.get("commit_position", 0),
            prepare=message.get("prepare_position", 0),
        ),
        data=message.get("data") or b"",
        system_metadata=metadata,
        user_metadata=message.get("custom_metadata") or b"",
    )


def _resolved(read_event: Mapping) -> ResolvedEvent:
    event_wire = read_event.get("event")
    link_wire = read_event.get("link")
    return ResolvedEvent(
        event=recorded_event_from_wire(event_wire) if event_wire is not None else None,
        link=recorded_event_from_wire(link_wire) if link_wire is not None else None,
        commit=read_event.get("commit_position"),
    )


def resolved_event_from_wire(message: Mapping) -> ResolvedEvent:
    """Build a ResolvedEvent from a read-event wire message."""
    return _resolved(message)


def persistent_event_from_wire(response: Mapping) -> tuple[ResolvedEvent, int]:
    """Build the event and its retry count from a persistent read response."""
    read_event = response.get("event") or {}
    retry_count = int(read_event.get("retry_count", 0))
    return _resolved(read_event), retry_count


def _position_of(response: Mapping, what: str) -> Position:
    position = response.get("position")
    if position is None:
        raise ValueError(f"{what} response carries no position")
    return Position(
        commit=position.get("commit_position", 0),
        prepare=position.get("prepare_position", 0),
    )


def delete_position_from_wire(response: Mapping) -> Position:
    """The log position reported by a delete response."""
    return _position_of(response, "delete")


def tombstone_position_from_wire(response: Mapping) -> Position:
    """The log position reported by a tombstone response."""
    return _position_of(response, "tombstone")