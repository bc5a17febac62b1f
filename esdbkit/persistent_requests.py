"""Builders for persistent subscription create, update, delete and read requests.

Requests are nested dictionaries shaped like the wire messages. A field that
holds one of several alternatives is a dictionary with exactly one key that
names the chosen alternative.
"""

from __future__ import annotations

from .requests import SubscriptionFilterOptions
from .revision import End, Start, StreamRevision
from .types import (
    NO_MAX_SEARCH_WINDOW,
    ConsumerStrategy,
    FilterType,
    PersistentSubscriptionSettings,
    Position,
)

_U32_MASK = 0xFFFFFFFF
_MAX_U64 = (1 << 64) - 1


class PersistentRequestError(ValueError):
    """A persistent subscription request cannot be built from the given options."""


def _stream_identifier(stream_name: str | bytes) -> dict:
    if isinstance(stream_name, str):
        stream_name = stream_name.encode("utf-8")
    return {"stream_name": bytes(stream_name)}


def _consumer_strategy(strategy: object) -> str:
    try:
        return ConsumerStrategy(strategy).value
    except ValueError:
        raise ValueError(f"Could not map strategy {strategy!r} to proto") from None


def _settings(settings: PersistentSubscriptionSettings) -> dict:
    return {
        "resolve_links": settings.resolve_link_tos,
        "extra_statistics": settings.extra_statistics,
        "max_retry_count": settings.max_retry_count,
        "min_checkpoint_count": settings.checkpoint_lower_bound,
        "max_checkpoint_count": settings.checkpoint_upper_bound,
        "max_subscriber_count": settings.max_subscriber_count,
        "live_buffer_size": settings.live_buffer_size,
        "read_batch_size": settings.read_batch_size,
        "history_buffer_size": settings.history_buffer_size,
        "named_consumer_strategy": _consumer_strategy(settings.consumer_strategy_name),
        "message_timeout": {"message_timeout_ms": settings.message_timeout},
        "checkpoint_after": {"checkpoint_after_ms": settings.checkpoint_after},
    }


def _create_settings(position: object, settings: PersistentSubscriptionSettings) -> dict:
    # The revision field only matters to old servers; recent ones ignore it.
    revision = 0
    if isinstance(position, End):
        revision = _MAX_U64
    elif isinstance(position, StreamRevision):
        revision = position.value
    return {"revision": revision, **_settings(settings)}


def _log_position(position: Position) -> dict:
    return {
        "position": {
            "prepare_position": position.prepare,
            "commit_position": position.commit,
        }
    }


def create_filter_options(options: SubscriptionFilterOptions) -> dict:
    """Filter settings of a persistent subscription to $all."""
    flt = options.subscription_filter
    if bool(flt.prefixes) == bool(flt.regex):
        raise PersistentRequestError("persistent subscription to $all must provide regex or prefixes")

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


def create_stream_request(
    stream_name: str,
    group_name: str,
    position: object,
    settings: PersistentSubscriptionSettings,
) -> dict:
    """A request creating a persistent subscription on a stream."""
    if isinstance(position, Start):
        revision_option = {"start": {}}
    elif isinstance(position, End):
        revision_option = {"end": {}}
    elif isinstance(position, StreamRevision):
        revision_option = {"revision": position.value}
    else:
        raise TypeError(f"unsupported stream position: {position!r}")
    return {
        "options": {
            "stream_option": {
                "stream": {
                    "stream_identifier": _stream_identifier(stream_name),
                    "revision_option": revision_option,
                }
            },
            # Kept for servers that still read the top-level identifier.
            "stream_identifier": _stream_identifier(stream_name),
            "group_name": group_name,
            "settings": _create_settings(position, settings),
        }
    }


def create_all_request(
    group_name: str,
    position: object,
    settings: PersistentSubscriptionSettings,
    filter_opts: SubscriptionFilterOptions | None = None,
) -> dict:
    """A request creating a persistent subscription on $all."""
    if isinstance(position, Start):
        all_option = {"start": {}}
    elif isinstance(position, End):
        all_option = {"end": {}}
    elif isinstance(position, Position):
        all_option = _log_position(position)
    else:
        raise TypeError(f"unsupported $all position: {position!r}")

    if filter_opts is None:
        filter_option = {"no_filter": {}}
    else:
        filter_option = {"filter": create_filter_options(filter_opts)}

    return {
        "options": {
            "stream_option": {"all": {"all_option": all_option, "filter_option": filter_option}},
            "group_name": group_name,
            "settings": _create_settings(None, settings),
        }
    }


def update_stream_request(
    stream_name: str,
    group_name: str,
    position: object,
    settings: PersistentSubscriptionSettings,
) -> dict:
    """A request updating a persistent subscription on a stream.

    An end position is sent as the start of the stream, as the server expects.
    """
    if isinstance(position, (Start, End)):
        revision_option = {"start": {}}
    elif isinstance(position, StreamRevision):
        revision_option = {"revision": position.value}
    else:
        raise TypeError(f"unsupported stream position: {position!r}")
    return {
        "options": {
            "stream_option": {
                "stream": {
                    "stream_identifier": _stream_identifier(stream_name),
                    "revision_option": revision_option,
                }
            },
            "stream_identifier": _stream_identifier(stream_name),
            "group_name": group_name,
            "settings": _settings(settings),
        }
    }


def update_all_request(
    group_name: str,
    position: object,
    settings: PersistentSubscriptionSettings,
) -> dict:
    """A request updating a persistent subscription on $all.

    An end position is sent as the start of the log, as the server expects.
    """
    if isinstance(position, (Start, End)):
        all_option = {"start": {}}
    elif isinstance(position, Position):
        all_option = _log_position(position)
    else:
        raise TypeError(f"unsupported $all position: {position!r}")
    return {
        "options": {
            "stream_option": {"all": {"all_option": all_option}},
            "group_name": group_name,
            "settings": _settings(settings),
        }
    }


def delete_stream_request(stream_name: str, group_name: str) -> dict:
    """A request deleting a persistent subscription on a stream."""
    return {
        "options": {
            "group_name": group_name,
            "stream_option": {"stream_identifier": _stream_identifier(stream_name)},
        }
    }


def delete_all_request(group_name: str) -> dict:
    """A request deleting a persistent subscription on $all."""
    return {"options": {"group_name": group_name, "stream_option": {"all": {}}}}


def persistent_read_request(buffer_size: int, group_name: str, stream_name: str | bytes) -> dict:
    """The opening message of a persistent subscription; an empty stream name means $all."""
    if stream_name:
        stream_option = {"stream_identifier": _stream_identifier(stream_name)}
    else:
        stream_option = {"all": {}}
    return {
        "options": {
            "buffer_size": buffer_size,
            "group_name": group_name,
            "uuid_option": {"content": {"string": None}},
            "stream_option": stream_option,
        }
    }