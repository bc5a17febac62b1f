import pytest

from esdbkit.persistent_requests import (
    PersistentRequestError,
    create_all_request,
    create_filter_options,
    create_stream_request,
    delete_all_request,
    delete_stream_request,
    persistent_read_request,
    update_all_request,
    update_stream_request,
)
from esdbkit.requests import SubscriptionFilterOptions
from esdbkit.revision import End, Start, StreamRevision
from esdbkit.types import (
    NO_MAX_SEARCH_WINDOW,
    FilterType,
    Position,
    SubscriptionFilter,
    subscription_settings_default,
)


def _settings():
    return subscription_settings_default()


def test_create_stream_request_from_start():
    settings = _settings()
    request = create_stream_request("orders", "group-a", Start(), settings)
    options = request["options"]
    assert options["group_name"] == "group-a"
    assert options["stream_identifier"] == {"stream_name": b"orders"}
    assert options["stream_option"]["stream"]["revision_option"] == {"start": {}}
    assert options["settings"]["revision"] == 0
    assert options["settings"]["named_consumer_strategy"] == "RoundRobin"
    assert options["settings"]["message_timeout"] == {"message_timeout_ms": settings.message_timeout}
    assert options["settings"]["checkpoint_after"] == {"checkpoint_after_ms": settings.checkpoint_after}
    assert options["settings"]["min_checkpoint_count"] == settings.checkpoint_lower_bound
    assert options["settings"]["max_checkpoint_count"] == settings.checkpoint_upper_bound


def test_create_stream_request_from_end_uses_max_revision():
    request = create_stream_request("orders", "g", End(), _settings())
    options = request["options"]
    assert options["stream_option"]["stream"]["revision_option"] == {"end": {}}
    assert options["settings"]["revision"] == 2**64 - 1


def test_create_stream_request_from_revision():
    request = create_stream_request("orders", "g", StreamRevision(7), _settings())
    options = request["options"]
    assert options["stream_option"]["stream"]["revision_option"] == {"revision": 7}
    assert options["settings"]["revision"] == 7


def test_create_all_request_without_filter():
    request = create_all_request("g", Start(), _settings(), None)
    all_opts = request["options"]["stream_option"]["all"]
    assert all_opts["all_option"] == {"start": {}}
    assert all_opts["filter_option"] == {"no_filter": {}}
    assert request["options"]["settings"]["revision"] == 0


def test_create_all_request_from_position_with_filter():
    filter_opts = SubscriptionFilterOptions(
        max_search_window=32,
        checkpoint_interval=1,
        subscription_filter=SubscriptionFilter(type=FilterType.STREAM, prefixes=["test"]),
    )
    request = create_all_request("g", Position(commit=1056, prepare=1056), _settings(), filter_opts)
    all_opts = request["options"]["stream_option"]["all"]
    assert all_opts["all_option"] == {"position": {"prepare_position": 1056, "commit_position": 1056}}
    built = all_opts["filter_option"]["filter"]
    assert built["filter"] == {"stream_identifier": {"prefix": ["test"], "regex": ""}}
    assert built["window"] == {"max": 32}
    assert built["checkpoint_interval_multiplier"] == 1


def test_create_filter_options_event_type_without_window():
    opts = SubscriptionFilterOptions(
        max_search_window=NO_MAX_SEARCH_WINDOW,
        checkpoint_interval=1,
        subscription_filter=SubscriptionFilter(type=FilterType.EVENT, regex="^user|^company"),
    )
    built = create_filter_options(opts)
    assert built["filter"] == {"event_type": {"prefix": [], "regex": "^user|^company"}}
    assert built["window"] == {"count": {}}


@pytest.mark.parametrize(
    "flt",
    [
        SubscriptionFilter(),
        SubscriptionFilter(prefixes=["a"], regex="^b"),
    ],
)
def test_create_filter_options_rejects_invalid_filters(flt):
    with pytest.raises(PersistentRequestError, match="must provide regex or prefixes"):
        create_filter_options(SubscriptionFilterOptions(subscription_filter=flt))


def test_create_all_request_with_invalid_filter_raises():
    opts = SubscriptionFilterOptions(subscription_filter=SubscriptionFilter())
    with pytest.raises(PersistentRequestError):
        create_all_request("g", Start(), _settings(), opts)


def test_update_stream_request_sends_end_as_start():
    request = update_stream_request("orders", "g", End(), _settings())
    options = request["options"]
    assert options["stream_option"]["stream"]["revision_option"] == {"start": {}}
    assert "revision" not in options["settings"]
    assert options["stream_identifier"] == {"stream_name": b"orders"}


def test_update_stream_request_with_revision_and_settings():
    settings = _settings()
    settings.resolve_link_tos = True
    settings.checkpoint_lower_bound = 20
    request = update_stream_request("orders", "g", StreamRevision(3), settings)
    options = request["options"]
    assert options["stream_option"]["stream"]["revision_option"] == {"revision": 3}
    assert options["settings"]["resolve_links"] is True
    assert options["settings"]["min_checkpoint_count"] == 20


def test_update_all_request_positions():
    assert update_all_request("g", End(), _settings())["options"]["stream_option"] == {
        "all": {"all_option": {"start": {}}}
    }
    pos_request = update_all_request("g", Position(commit=5, prepare=4), _settings())
    assert pos_request["options"]["stream_option"]["all"]["all_option"] == {
        "position": {"prepare_position": 4, "commit_position": 5}
    }


def test_unknown_consumer_strategy_raises():
    settings = _settings()
    settings.consumer_strategy_name = "PinnedByCorrelation"
    with pytest.raises(ValueError, match="Could not map strategy"):
        create_stream_request("s", "g", Start(), settings)


def test_consumer_strategy_accepts_plain_string():
    settings = _settings()
    settings.consumer_strategy_name = "Pinned"
    request = update_all_request("g", Start(), settings)
    assert request["options"]["settings"]["named_consumer_strategy"] == "Pinned"


def test_delete_requests():
    assert delete_stream_request("orders", "g") == {
        "options": {"group_name": "g", "stream_option": {"stream_identifier": {"stream_name": b"orders"}}}
    }
    assert delete_all_request("g") == {"options": {"group_name": "g", "stream_option": {"all": {}}}}


def test_persistent_read_request_stream_and_all():
    stream_req = persistent_read_request(2, "g", b"orders")
    assert stream_req["options"]["stream_option"] == {"stream_identifier": {"stream_name": b"orders"}}
    assert stream_req["options"]["buffer_size"] == 2
    assert stream_req["options"]["uuid_option"] == {"content": {"string": None}}
    all_req = persistent_read_request(2, "g", b"")
    assert all_req["options"]["stream_option"] == {"all": {}}
    assert all_req["options"]["group_name"] == "g"