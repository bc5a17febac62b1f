"""Builders for stream read, write, delete and subscription requests.

Requests are plain nested dictionaries that follow the shape of the wire
messages: a field that holds one of several alternatives is a dictionary
with exactly one key naming the chosen alternative.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from .revision import Any, End, NoStream, Start, StreamExists, StreamRevision
from .types import NO_MAX_SEARCH_WINDOW, Direction, FilterType, Position, SubscriptionFilter

SYSTEM_METADATA_KEY_TYPE = "type"
SYSTEM_METADATA_KEY_CONTENT_TYPE = "content-type"
SYSTEM_METADATA_KEY_CREATED = "created"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_BINARY = "application/octet-stream"

_NIL_UUID = uuid.UUID(int=0)
_U32_MASK = 0xFFFFFFFF


class InvalidFilterError(ValueError):
    """A subscription filter cannot be turned into a request."""


@dataclass
class SubscriptionFilterOptions:
    """A subscription filter together with its search window and checkpoint interval."""

    max_search_window: int = 0
    checkpoint_interval: int = 0
    subscription_filter: SubscriptionFilter = field(default_factory=SubscriptionFilter)


def _stream_identifier(stream_id: str) -> dict:
    return {"stream_name": stream_id.encode("utf-8")}


def _expected_revision(revision: object) -> dict:
    if isinstance(revision, Any):
        return {"any": {}}
    if isinstance(revision, NoStream):
        return {"no_stream": {}}
    if isinstance(revision, StreamExists):
        return {"stream_exists": {}}
    if isinstance(revision, StreamRevision):
        return {"revision": revision.value}
    raise TypeError(f"unsupported expected revision: {revision!r}")


def append_header(stream_id: str, expected_revision: object) -> dict:
    """The first message of an append: target stream and expected revision."""
    return {
        "options": {
            "stream_identifier": _stream_identifier(stream_id),
            "expected_stream_revision": _expected_revision(expected_revision),
        }
    }


def proposed_message(
    event_type: str,
    data: bytes | None,
    metadata: bytes | None,
    is_json: bool,
    event_id: uuid.UUID | None,
) -> dict:
    """An event to append; a missing or nil id is replaced by a random one."""
    if event_id is None or event_id == _NIL_UUID:
        event_id = uuid.uuid4()
    return {
        "id": {"string": str(event_id)},
        "data": data if data is not None else b"",
        "custom_metadata": metadata if metadata is not None else b"",
        "metadata": {
            SYSTEM_METADATA_KEY_CONTENT_TYPE: CONTENT_TYPE_JSON if is_json else CONTENT_TYPE_BINARY,
            SYSTEM_METADATA_KEY_TYPE: event_type,
        },
    }


def read_direction(direction: Direction) -> str:
    """The wire name of a read direction."""
    if direction == Direction.BACKWARDS:
        return "Backwards"
    return "Forwards"


def all_read_options(position: object) -> dict:
    """Stream option selecting $all from the given position."""
    if isinstance(position, Start):
        option = {"start": {}}
    elif isinstance(position, End):
        option = {"end": {}}
    elif isinstance(position, Position):
        option = {
            "position": {
                "prepare_position": position.prepare,
                "commit_position": position.commit,
            }
        }
    else:
        raise TypeError(f"unsupported $all position: {position!r}")
    return {"all": {"all_option": option}}


def stream_read_options(stream_id: str, position: object) -> dict:
    """Stream option selecting a stream from the given revision."""
    if isinstance(position, Start):
        option = {"start": {}}
    elif isinstance(position, End):
        option = {"end": {}}
    elif isinstance(position, StreamRevision):
        option = {"revision": position.value}
    else:
        raise TypeError(f"unsupported stream position: {position!r}")
    return {
        "stream": {
            "stream_identifier": _stream_identifier(stream_id),
            "revision_option": option,
        }
    }


def filter_options(options: SubscriptionFilterOptions) -> dict:
    """Server-side filter settings of a subscription to $all."""
    flt = options.subscription_filter
    if not flt.prefixes and not flt.regex:
        raise InvalidFilterError("the subscription filter requires a set of prefixes or a regex")
    if flt.prefixes and flt.regex:
        raise InvalidFilterError(
            "the subscription filter may only contain a regex or a set of prefixes, but not both"
        )

    expression = {"prefix": list(flt.prefixes), "regex": flt.regex}
    target = "event_type" if flt.type == FilterType.EVENT else "stream_identifier"

    if options.max_search_window == NO_MAX_SEARCH_WINDOW:
        window = {"count": {}}
    else:
        window = {"max": options.max_search_window & _U32_MASK}

    return {
        "checkpoint_interval_multiplier": options.checkpoint_interval & _U32_MASK,
        "filter": {target: expression},
        "window": window,
    }


def delete_request(stream_id: str, expected_revision: object) -> dict:
    """A soft-delete request for a stream."""
    return {
        "options": {
            "stream_identifier": _stream_identifier(stream_id),
            "expected_stream_revision": _expected_revision(expected_revision),
        }
    }


def tombstone_request(stream_id: str, expected_revision: object) -> dict:
    """A hard-delete (tombstone) request for a stream."""
    return {
        "options": {
            "stream_identifier": _stream_identifier(stream_id),
            "expected_stream_revision": _expected_revision(expected_revision),
        }
    }


def _read_request(stream_option: dict, direction: Direction, count: int, resolve_links: bool) -> dict:
    return {
        "options": {
            "count_option": {"count": count},
            "filter_option": {"no_filter": None},
            "read_direction": read_direction(direction),
            "resolve_links": resolve_links,
            "stream_option": stream_option,
            "uuid_option": {"content": {"string": None}},
        }
    }


def read_stream_request(
    stream_id: str, direction: Direction, start: object, count: int, resolve_links: bool
) -> dict:
    """A request reading up to ``count`` events from a stream."""
    return _read_request(stream_read_options(stream_id, start), direction, count, resolve_links)


def read_all_request(direction: Direction, start: object, count: int, resolve_links: bool) -> dict:
    """A request reading up to ``count`` events from $all."""
    return _read_request(all_read_options(start), direction, count, resolve_links)


def _subscription_request(
    stream_option: dict, resolve_links: bool, filter_opts: SubscriptionFilterOptions | None
) -> dict:
    request = {
        "options": {
            "count_option": {"subscription": {}},
            "filter_option": {"no_filter": {}},
            "read_direction": read_direction(Direction.FORWARDS),
            "resolve_links": resolve_links,
            "stream_option": stream_option,
            "uuid_option": {"content": {"string": None}},
        }
    }
    if filter_opts is not None:
        try:
            built = filter_options(filter_opts)
        except InvalidFilterError as err:
            raise InvalidFilterError(
                f"Failed to construct subscription request. Reason: {err}"
            ) from err
        request["options"]["filter_option"] = {"filter": built}
    return request


def stream_subscription_request(
    stream_id: str,
    start: object,
    resolve_links: bool,
    filter_opts: SubscriptionFilterOptions | None = None,
) -> dict:
    """A request subscribing to a stream."""
    return _subscription_request(stream_read_options(stream_id, start), resolve_links, filter_opts)


def all_subscription_request(
    start: object,
    resolve_links: bool,
    filter_opts: SubscriptionFilterOptions | None = None,
) -> dict:
    """A request subscribing to $all."""
    return _subscription_request(all_read_options(start), resolve_links, filter_opts)