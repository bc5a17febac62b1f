import uuid

import pytest

from esdbkit.reads import ReadStream, StreamNotFoundError


class _Translated(Exception):
    pass


def _recorded(stream="orders", revision=0, event_id=None, event_type="some-event"):
    event_id = event_id or uuid.uuid4()
    return {
        "id": {"string": str(event_id)},
        "stream_identifier": {"stream_name": stream.encode()},
        "stream_revision": revision,
        "commit_position": 10,
        "prepare_position": 10,
        "metadata": {"type": event_type, "content-type": "application/json", "created": "0"},
        "data": b"{}",
        "custom_metadata": b"",
    }


def _event_message(**kwargs):
    return {"event": {"event": _recorded(**kwargs), "commit_position": 10}}


def _failing_after(messages, error):
    yield from messages
    raise error


def test_recv_returns_events_then_eof():
    ids = [uuid.uuid4(), uuid.uuid4()]
    stream = ReadStream([_event_message(revision=i, event_id=ids[i]) for i in range(2)])
    first = stream.recv()
    second = stream.recv()
    assert first.original_event().event_id == ids[0]
    assert second.original_event().event_number == 1
    assert first.original_event().stream_id == "orders"
    with pytest.raises(EOFError):
        stream.recv()


def test_recv_keeps_returning_eof_after_completion():
    stream = ReadStream([_event_message() for _ in range(10)])
    events = list(stream)
    assert len(events) == 10
    with pytest.raises(EOFError):
        stream.recv()
    with pytest.raises(EOFError):
        stream.recv()


def test_stream_not_found():
    stream = ReadStream([{"stream_not_found": {"stream_identifier": {"stream_name": b"missing"}}}])
    with pytest.raises(StreamNotFoundError) as info:
        stream.recv()
    assert info.value.stream_name == "missing"
    assert str(info.value) == "stream 'missing' is not found"
    with pytest.raises(EOFError):
        stream.recv()


def test_close_cancels_once_and_ends_reading():
    calls = []
    stream = ReadStream([_event_message()], cancel=lambda: calls.append(1))
    stream.close()
    stream.close()
    assert calls == [1]
    with pytest.raises(EOFError):
        stream.recv()


def test_context_manager_closes():
    calls = []
    with ReadStream([_event_message()], cancel=lambda: calls.append(1)) as stream:
        assert stream.recv().original_event().event_type == "some-event"
    assert calls == [1]


def test_inner_error_goes_through_handler():
    seen = []

    def handler(err):
        seen.append(err)
        return _Translated(str(err))

    stream = ReadStream(
        _failing_after([_event_message()], ConnectionError("boom")), error_handler=handler
    )
    stream.recv()
    with pytest.raises(_Translated, match="boom"):
        stream.recv()
    assert isinstance(seen[0], ConnectionError)
    with pytest.raises(EOFError):
        stream.recv()


def test_inner_error_without_handler_is_raised_as_is():
    stream = ReadStream(_failing_after([], ConnectionError("down")))
    with pytest.raises(ConnectionError, match="down"):
        stream.recv()


def test_link_is_the_original_event():
    link = _recorded(stream="$et-some-event", revision=3)
    target = _recorded(stream="orders", revision=0)
    stream = ReadStream([{"event": {"event": target, "link": link}}])
    resolved = stream.recv()
    assert resolved.original_event().stream_id == "$et-some-event"
    assert resolved.event.stream_id == "orders"
    assert resolved.commit is None


def test_unexpected_message_raises():
    stream = ReadStream([{"something": {}}])
    with pytest.raises(ValueError):
        stream.recv()