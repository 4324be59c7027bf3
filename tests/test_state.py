import pytest

from siegereplay.model import (
    EndOfDataError,
    MatchUpdate,
    MatchUpdateType,
    Operator,
    Player,
    TeamRole,
)
from siegereplay.state import Cursor, ReplayState


def test_read_bytes_returns_slice_and_advances():
    cursor = Cursor(b"abcdef")
    assert cursor.read_bytes(2) == b"ab"
    assert cursor.offset == 2
    assert cursor.read_bytes(3) == b"cde"


def test_reading_to_end_raises():
    cursor = Cursor(b"abc")
    with pytest.raises(EndOfDataError):
        cursor.read_bytes(3)
    assert cursor.offset == 3


def test_skip_past_end_raises():
    cursor = Cursor(b"abc")
    with pytest.raises(EOFError):
        cursor.skip(10)


def test_read_int_and_string():
    cursor = Cursor(bytes([5]) + b"hello" + bytes([2]) + b"hi" + b"\x00")
    assert cursor.read_string() == "hello"
    assert cursor.read_int() == 2
    assert cursor.read_bytes(2) == b"hi"


def test_read_uint32_skips_size_byte():
    value = 1234
    cursor = Cursor(b"\x04" + value.to_bytes(4, "little") + b"\x00")
    assert cursor.read_uint32() == value


def test_read_uint64_little_endian():
    value = int(Operator.Ash)
    cursor = Cursor(b"\x08" + value.to_bytes(8, "little") + b"\x00")
    assert cursor.read_uint64() == value


def test_seek_positions_after_pattern():
    data = b"xxxx" + b"\x1f\x07\xef\xc9" + b"rest"
    cursor = Cursor(data)
    cursor.seek(b"\x1f\x07\xef\xc9")
    assert cursor.offset == 8
    assert cursor.read_bytes(2) == b"re"


def test_seek_not_found_raises():
    cursor = Cursor(b"abcdefgh")
    with pytest.raises(EndOfDataError):
        cursor.seek(b"zz")


def test_seek_empty_pattern_rejected():
    with pytest.raises(ValueError):
        Cursor(b"abc").seek(b"")


def _players():
    return [
        Player(username="alpha", team_index=0, operator=Operator.Recruit, dissect_id=b"\x01\x00\x00\x00"),
        Player(username="empty", team_index=1, operator=0, dissect_id=b"\x02\x00\x00\x00"),
        Player(username="charlie", team_index=1, operator=Operator.Ash, dissect_id=b"\x03\x00\x00\x00"),
    ]


def test_player_index_lookup():
    state = ReplayState(b"")
    state.header.players = _players()
    assert state.player_index_by_id(b"\x03\x00\x00\x00") == 2
    assert state.player_index_by_id(b"\x09\x09\x09\x09") is None
    assert state.player_index_by_username("empty") == 1
    assert state.player_index_by_username("nobody") is None


def test_derive_team_roles_filters_and_sets_roles():
    state = ReplayState(b"")
    state.header.players = _players()
    state.derive_team_roles()
    assert [p.username for p in state.header.players] == ["alpha", "charlie"]
    assert [s.id for s in state.scoreboard.players] == [b"\x01\x00\x00\x00", b"\x03\x00\x00\x00"]
    assert state.header.teams[1].role == TeamRole.Attack
    assert state.header.teams[0].role == TeamRole.Defense


def test_derive_team_roles_defender():
    state = ReplayState(b"")
    state.header.players = [Player(username="d", team_index=0, operator=Operator.Castle, dissect_id=b"\x05\x00\x00\x00")]
    state.derive_team_roles()
    assert state.header.teams[0].role == TeamRole.Defense
    assert state.header.teams[1].role == TeamRole.Attack


def test_record_appends():
    state = ReplayState(b"")
    update = MatchUpdate(type=MatchUpdateType.Death, username="alpha")
    state.record(update)
    assert state.match_feedback == [update]