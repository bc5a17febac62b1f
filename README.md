# esdbkit

Building blocks for a client of an event store database: the types that
describe streams, positions, revisions and events; stream metadata with
access control lists; the options for reads, subscriptions and tombstones;
functions that turn them into request messages (plain nested dictionaries
shaped like the wire messages); and functions that turn response messages
back into events.

## Installing

```
pip install esdbkit
```

The package has no runtime dependencies. The tests use pytest
(`pip install esdbkit[test]`).

## Revisions and positions

```python
from esdbkit.revision import Any, NoStream, StreamExists, StreamRevision, Start, End
from esdbkit.types import Position

expected = StreamRevision(9)      # the stream must be at revision 9
from_here = Position(commit=1056, prepare=1056)
```

`Any`, `StreamExists`, `NoStream` and `StreamRevision` say what revision a
write expects. `Start`, `End` and `StreamRevision` say where a stream read or
subscription begins; `Start`, `End` and `Position` do the same for `$all`.
`StreamRevision` accepts only integers from 0 to 2**64 - 1, and `Position`
rejects negative values.

`esdbkit.types` also holds `Direction` (`FORWARDS`, `BACKWARDS`),
`ConsumerStrategy`, `FilterType`, `SubscriptionFilter`,
`PersistentSubscriptionSettings` and the persistent subscription
information classes (`PersistentSubscriptionInfo`,
`PersistentSubscriptionStats`, `PersistentSubscriptionConnectionInfo`,
`PersistentSubscriptionMeasurement`).

`subscription_settings_default()` returns settings with the defaults:
round-robin, 10 retries, checkpoint bounds 10 and 1000, unlimited
subscribers, live and history buffers of 500, read batches of 20, a
30 000 ms message timeout and a 2 000 ms checkpoint delay.
`exclude_system_events_filter()` returns an event-type filter that skips
types starting with `$`.

## Stream metadata

```python
from datetime import timedelta
from esdbkit.metadata import Acl, StreamMetadata, stream_metadata_from_json

acl = Acl()
acl.add_read_roles("admin")
acl.add_write_roles("admin", "ops")

meta = StreamMetadata()
meta.max_age = timedelta(seconds=2)
meta.max_count = 12
meta.acl = acl
meta.add_custom_property("foo", "bar")

payload = meta.to_json()
assert stream_metadata_from_json(payload) == meta
```

The ACL can also be one of the two default names, `"$userStreamAcl"` or
`"$systemStreamAcl"`; `is_user_stream_acl()` and `is_system_stream_acl()`
tell which is set, and `stream_acl()` returns the `Acl` when one is. Any
other string ACL, an unknown ACL key, or a bad value for `$maxCount`,
`$maxAge`, `$tb` or `$cacheControl` raises `ValueError`. Custom properties
whose names start with `$` are left out of `to_dict()` and `to_json()`.

## Options and defaults

```python
from esdbkit.options import ReadStreamOptions, SubscribeToAllOptions
from esdbkit.types import Direction, exclude_system_events_filter

read = ReadStreamOptions(direction=Direction.BACKWARDS)
read.set_defaults()               # reads start at Start() unless told otherwise

sub = SubscribeToAllOptions(filter=exclude_system_events_filter())
sub.set_defaults()                # starts at End(); with a filter: window 32, interval 1
```

`ReadAllOptions` also defaults to `Start()`, `SubscribeToStreamOptions` to
`End()`, and `TombstoneStreamOptions` expects `Any()` unless told otherwise.

## Requests

`esdbkit.requests` builds the messages for appends (`append_header`,
`proposed_message`), reads (`read_stream_request`, `read_all_request`),
deletes (`delete_request`, `tombstone_request`) and subscriptions
(`stream_subscription_request`, `all_subscription_request`). A filter is
passed as `SubscriptionFilterOptions`; one with neither prefixes nor a
regex, or with both, raises `InvalidFilterError`. `proposed_message`
replaces a missing or nil event id with a random one.

`esdbkit.persistent_requests` builds the messages to create, update and
delete persistent subscriptions on a stream or on `$all`, and the opening
`persistent_read_request`. Invalid filters raise `PersistentRequestError`.

## Decoding responses

`esdbkit.decoding` turns response messages into `RecordedEvent` and
`ResolvedEvent` values (`recorded_event_from_wire`,
`resolved_event_from_wire`), returns an event and its retry count from a
persistent read response (`persistent_event_from_wire`), and reads the log
position of delete and tombstone responses. `created_from_ticks` converts
the server's creation time (100 ns ticks since the Unix epoch) to a UTC
`datetime`. `ResolvedEvent.original_event()` returns the link when there is
one, otherwise the event.

## Reading and subscribing

`ReadStream` wraps an iterable of read responses: `recv()` returns the next
`ResolvedEvent`, raises `StreamNotFoundError` when the stream does not
exist, and raises `EOFError` once the responses run out or the stream is
closed. It can be iterated and used as a context manager.

`Subscription` wraps an iterable of subscription responses: `recv()`
returns a `SubscriptionEvent` carrying an appeared event, a checkpoint, a
caught-up or fell-behind notice, or a `SubscriptionDropped` with the reason.
Iterating it yields notifications until it is dropped. Both classes have
`close()`, which calls the given cancel function once.

## What this package does not do

It opens no connections and talks to no server. There is no client that
sends the request dictionaries or receives the responses; `ReadStream` and
`Subscription` read from whatever iterable of response messages they are
given. There is no command-line program.