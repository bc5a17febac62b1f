import pytest

from esdbkit.revision import Any, End, NoStream, Start, StreamExists, StreamRevision


@pytest.mark.parametrize("marker_type", [Any, NoStream, StreamExists, Start, End])
def test_marker_types_compare_equal_across_instances(marker_type):
    marker = marker_type()
    other = marker_type()
    assert marker == other
    assert hash(marker) == hash(other)


def test_marker_types_are_distinct():
    markers = [Any(), NoStream(), StreamExists(), Start(), End()]
    assert len(set(markers)) == len(markers)


def test_stream_revision_holds_value():
    revision = StreamRevision(42)
    assert revision.value == 42
    assert revision == StreamRevision(42)
    assert revision != StreamRevision(43)


def test_stream_revision_is_hashable():
    assert {StreamRevision(5), StreamRevision(5)} == {StreamRevision(5)}


def test_stream_revision_accepts_uint64_max():
    assert StreamRevision((1 << 64) - 1).value == (1 << 64) - 1


@pytest.mark.parametrize("bad", [-1, 1 << 64])
def test_stream_revision_out_of_range(bad):
    with pytest.raises(ValueError):
        StreamRevision(bad)


@pytest.mark.parametrize("bad", ["3", 1.0, True])
def test_stream_revision_requires_integer(bad):
    with pytest.raises(TypeError):
        StreamRevision(bad)


def test_stream_revision_is_immutable():
    revision = StreamRevision(1)
    with pytest.raises(AttributeError):
        revision.value = 2
    assert revision.value == 1