import platform
import struct

import pytest

import concolic_core.session as session_module
from concolic_core.errors import (
    AllocationError,
    ConstraintError,
    IdentifierTooLongError,
    PathDiscarded,
    PreconditionError,
    UnsupportedTypeError,
)
from concolic_core.gateway import DisabledGateway, Predicate, ReplayGateway
from concolic_core.protocol import UNICODE_CODEC
from concolic_core.session import ConcolicSession


def test_inactive_engine_is_precondition_error():
    gateway = ReplayGateway(active=False)
    session = ConcolicSession(gateway)
    with pytest.raises(PreconditionError):
        session.make_concolic_int(1, "n")
    with pytest.raises(PreconditionError):
        session.make_concolic_sequence(None, "s")
    assert gateway.calls == []


def test_disabled_gateway_is_never_active():
    with pytest.raises(PreconditionError):
        ConcolicSession(DisabledGateway()).make_concolic_sequence(b"x", "s")


def test_session_rejects_non_positive_container_bound(replay):
    with pytest.raises(ValueError):
        ConcolicSession(replay, max_symbolic_size=0)


# -- integers -------------------------------------------------------------

def test_int_outside_range_fails_before_engine(session, replay):
    with pytest.raises(ConstraintError):
        session.make_concolic_int(11, "n", max_value=10, min_value=0)
    assert replay.calls == []


def test_int_range_disabled_when_min_above_max(session, replay):
    assert session.make_concolic_int(-500, "n", max_value=0, min_value=1) == -500
    assert replay.marks == ["n.i#value"]
    assert replay.assumptions == []


def test_int_range_assumptions_in_order(session, replay):
    assert session.make_concolic_int(3, "req.retries", max_value=5, min_value=0) == 3
    assert replay.assignment() == {"req.retries.i#value": struct.pack("=i", 3)}
    assert replay.assumptions == [
        Predicate("req.retries.i#value", ">=", 0),
        Predicate("req.retries.i#value", "<=", 5),
    ]


def test_int_wider_than_four_bytes(session, replay):
    with pytest.raises(ConstraintError):
        session.make_concolic_int(2 ** 31, "n")
    assert replay.calls == []


def test_int_rejects_non_int(session):
    with pytest.raises(UnsupportedTypeError):
        session.make_concolic_int(True, "n")
    with pytest.raises(UnsupportedTypeError):
        session.make_concolic_int(1.5, "n")


# -- dispatch ---------------------------------------------------------------

def test_negative_min_size(session, replay):
    with pytest.raises(ConstraintError):
        session.make_concolic_sequence(b"abc", "s", max_size=10, min_size=-1)
    assert replay.calls == []


def test_unsupported_sequences(session, replay):
    with pytest.raises(UnsupportedTypeError, match="None"):
        session.make_concolic_sequence(None, "s")
    for value in (1.0, bytearray(b"ab"), {1, 2}):
        with pytest.raises(UnsupportedTypeError):
            session.make_concolic_sequence(value, "s")
    assert replay.calls == []


# -- strings ------------------------------------------------------------------

def test_byte_string_end_to_end(session, replay):
    value = b"hello"
    result = session.make_concolic_sequence(value, "req.body", max_size=10, min_size=1)

    assert result == b"hello"
    assert result is not value
    assert replay.marks == ["req.body.s#value", "req.body.l#size"]
    assert replay.assignment()["req.body.s#value"] == b"hello"
    assert replay.assignment()["req.body.l#size"] == struct.pack("n", 5)
    assert replay.assumptions == [
        Predicate("req.body.l#size", ">=", 1),
        Predicate("req.body.l#size", "<=", 10),
    ]


def test_unicode_string(session, replay):
    value = "héllo\U0001F600"
    result = session.make_concolic_sequence(value, "msg", max_size=0, min_size=2)

    assert result == value
    assert result is not value
    assert replay.assignment()["msg.u#value"] == value.encode(UNICODE_CODEC)
    assert len(replay.assignment()["msg.u#value"]) == 4 * len(value)
    assert replay.assumptions == [Predicate("msg.l#size", ">=", 2)]


def test_untracked_string_marks_value_only(session, replay):
    result = session.make_concolic_string(b"fixed", "f")
    assert result == b"fixed"
    assert replay.marks == ["f.s#value"]
    assert replay.assumptions == []


def test_string_size_violation_fails_before_engine(session, replay):
    with pytest.raises(ConstraintError):
        session.make_concolic_sequence(b"too long", "s", max_size=4)
    with pytest.raises(ConstraintError):
        session.make_concolic_unicode("ab", "u", max_size=0, min_size=3)
    assert replay.calls == []


def test_overlong_name_fails_before_engine(session, replay):
    with pytest.raises(IdentifierTooLongError):
        session.make_concolic_sequence(b"abc", "n" * 300, max_size=10)
    assert replay.calls == []


def test_allocation_failure(session, replay, monkeypatch):
    def no_memory(*args):
        raise MemoryError()

    monkeypatch.setattr(session_module, "bytearray", no_memory, raising=False)
    with pytest.raises(AllocationError):
        session.make_concolic_sequence(b"abc", "s", max_size=10)
    assert replay.calls == []


# -- containers ---------------------------------------------------------------

def test_list_keeps_identity(session, replay):
    value = ["a", "b", "c"]
    result = session.make_concolic_sequence(value, "xs", max_size=4, min_size=1)

    assert result is value
    assert replay.assignment() == {"xs.l#size": struct.pack("n", 3)}
    assert replay.assumptions == [
        Predicate("xs.l#size", ">=", 1),
        Predicate("xs.l#size", "<=", 4),
    ]


def test_untracked_list_is_not_marked(session, replay):
    value = [1]
    assert session.make_concolic_sequence(value, "xs") is value
    assert replay.calls == []


def test_list_size_violation(session, replay):
    with pytest.raises(ConstraintError):
        session.make_concolic_sequence([1, 2, 3], "xs", max_size=2)
    assert replay.calls == []


def test_dict_and_tuple_use_session_bound(session, replay):
    mapping = {"a": 1}
    items = (1, 2)

    # Caller bounds do not apply to dicts and tuples.
    assert session.make_concolic_sequence(mapping, "m", max_size=1, min_size=5) is mapping
    assert session.make_concolic_sequence(items, "t") is items

    assert replay.marks == ["m.l#size", "t.l#size"]
    assert replay.assumptions == [
        Predicate("m.l#size", ">=", 0),
        Predicate("m.l#size", "<", 16),
        Predicate("t.l#size", ">=", 0),
        Predicate("t.l#size", "<", 16),
    ]


def test_oversized_dict_discards_path(session):
    with pytest.raises(PathDiscarded):
        session.make_concolic_sequence({i: i for i in range(16)}, "m")


# -- assignments --------------------------------------------------------------

def test_decode_recorded_assignment(session, replay):
    session.make_concolic_sequence(b"hello", "req.body", max_size=10, min_size=1)
    session.make_concolic_int(7, "req.n")

    tree = session.decode_assignment(replay.assignment())
    assert tree == {
        "req.body": {"value": b"hello", "size": 5},
        "req.n": {"value": 7},
    }


# -- engine-chosen values -------------------------------------------------------

def test_string_length_follows_size_field(rewriting_gateway):
    gateway = rewriting_gateway({"s.l#size": struct.pack("n", 2)})
    session = ConcolicSession(gateway)

    assert session.make_concolic_sequence(b"hello", "s", max_size=10, min_size=1) == b"he"
    assert gateway.assumptions == [
        Predicate("s.l#size", ">=", 1),
        Predicate("s.l#size", "<=", 10),
    ]


def test_unicode_length_follows_size_field(rewriting_gateway):
    gateway = rewriting_gateway({"u.l#size": struct.pack("n", 3)})
    session = ConcolicSession(gateway)
    assert session.make_concolic_sequence("héllo", "u", max_size=0) == "hél"


def test_unicode_unit_beyond_code_point_range(rewriting_gateway):
    gateway = rewriting_gateway({"msg.u#value": struct.pack("=I", 0xFFFFFFFF)})
    session = ConcolicSession(gateway)

    assert session.make_concolic_sequence("a", "msg", max_size=4) == (0xFFFFFFFF,)
    assert gateway.marks == ["msg.u#value", "msg.l#size"]
    assert len(gateway.assumptions) == 2


@pytest.mark.skipif(platform.python_implementation() != "CPython",
                    reason="object caching is a CPython detail")
def test_cached_objects_come_back_identical(session):
    # CPython hands out its cached empty and one-character objects, so
    # these rebuilt values are the input objects themselves.
    for value in (b"", b"a"):
        assert session.make_concolic_sequence(value, "s", max_size=4) is value
    for value in ("", "a"):
        assert session.make_concolic_sequence(value, "u", max_size=4) is value

    value = b"ab"
    assert session.make_concolic_sequence(value, "s", max_size=4) is not value
