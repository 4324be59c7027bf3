from datetime import datetime, timezone

import pytest

from siegereplay.header import (
    detect_chunked_compression,
    read_header,
    read_header_magic,
    read_header_string,
)
from siegereplay.model import (
    DissectError,
    EndOfDataError,
    GameMode,
    InvalidFileError,
    InvalidStringSepError,
    Map,
    MatchType,
    Version,
)
from siegereplay.state import Cursor


def hstr(text):
    raw = text.encode()
    return bytes([len(raw)]) + b"\x00" * 7 + raw


def build(pairs):
    return b"".join(hstr(k) + hstr(v) for k, v in pairs) + b"\xff" * 4


def base_pairs(code=Version.Y9S1, scores=("3", "2")):
    return [
        ("version", "Y9S1"),
        ("code", str(int(code))),
        ("datetime", "2023-05-01-12-30-45"),
        ("matchtype", str(int(MatchType.Ranked))),
        ("worldid", str(int(Map.Bank))),
        ("recordingplayerid", "42"),
        ("recordingprofileid", "profile-a"),
        ("additionaltags", "tag"),
        ("gamemodeid", str(int(GameMode.Bomb))),
        ("roundspermatch", "12"),
        ("roundspermatchovertime", "3"),
        ("roundnumber", "5"),
        ("overtimeroundnumber", "0"),
        ("teamname0", "Blue"),
        ("teamname1", "Orange"),
        ("gmsetting", "7"),
        ("gmsetting", "9"),
        ("playerid", "42"),
        ("playername", "alpha"),
        ("team", "0"),
        ("heroname", "11"),
        ("alliance", "1"),
        ("rolename", "Ash"),
        ("playerid", "43"),
        ("playername", "bravo"),
        ("team", "1"),
        ("playlistcategory", "4"),
        ("id", "match-1"),
        ("teamscore0", scores[0]),
        ("teamscore1", scores[1]),
    ]


def test_detect_chunked_compression():
    assert detect_chunked_compression(b"\x28\xb5\x2f\xfd\x00") is False
    assert detect_chunked_compression(b"dissect") is True


def test_detect_invalid_magic():
    with pytest.raises(InvalidFileError):
        detect_chunked_compression(b"abcd")
    with pytest.raises(EndOfDataError):
        detect_chunked_compression(b"ab")


def test_read_header_magic_skips_two_zero_runs():
    prefix = b"dissect" + b"\x01\x02" + b"\x00" * 7 + b"\x05" + b"\x00\x00" + b"\x07" + b"\x00" * 7
    cursor = Cursor(prefix + b"payload")
    read_header_magic(cursor)
    assert cursor.offset == len(prefix)


def test_read_header_magic_consecutive_runs():
    prefix = b"dissect" + b"\x00" * 14
    cursor = Cursor(prefix + b"xyz")
    read_header_magic(cursor)
    assert cursor.offset == len(prefix)


def test_read_header_magic_rejects_other_data():
    with pytest.raises(InvalidFileError):
        read_header_magic(Cursor(b"notadissectfile"))


def test_read_header_string():
    cursor = Cursor(hstr("version") + b"\x00")
    assert read_header_string(cursor) == "version"


def test_read_header_string_bad_separator():
    cursor = Cursor(b"\x03" + b"\x00\x00\x01\x00\x00\x00\x00" + b"abc\x00")
    with pytest.raises(InvalidStringSepError):
        read_header_string(cursor)


def test_read_header_fields():
    header = read_header(Cursor(build(base_pairs())))
    assert header.game_version == "Y9S1"
    assert header.code_version == Version.Y9S1
    assert header.timestamp == datetime(2023, 5, 1, 12, 30, 45, tzinfo=timezone.utc)
    assert header.match_type is MatchType.Ranked
    assert header.map is Map.Bank
    assert header.game_mode is GameMode.Bomb
    assert header.recording_player_id == 42
    assert header.recording_profile_id == "profile-a"
    assert header.additional_tags == "tag"
    assert header.rounds_per_match == 12
    assert header.rounds_per_match_overtime == 3
    assert header.round_number == 5
    assert header.gm_settings == [7, 9]
    assert header.playlist_category == 4
    assert header.match_id == "match-1"
    assert [t.name for t in header.teams] == ["Blue", "Orange"]
    assert [t.score for t in header.teams] == [3, 2]
    assert [t.starting_score for t in header.teams] == [0, 0]


def test_read_header_players():
    header = read_header(Cursor(build(base_pairs())))
    assert [p.username for p in header.players] == ["alpha", "bravo"]
    alpha, bravo = header.players
    assert alpha.id == 42
    assert alpha.hero_name == 11
    assert alpha.alliance == 1
    assert alpha.role_name == "Ash"
    assert bravo.team_index == 1
    assert header.recording_player().username == "alpha"


def test_read_header_starting_scores_from_y9s4():
    pairs = base_pairs(code=Version.Y9S4)
    pairs.insert(-2, ("startingteamscore0", "1"))
    pairs.insert(-2, ("startingteamscore1", "2"))
    header = read_header(Cursor(build(pairs)))
    assert [t.starting_score for t in header.teams] == [1, 2]


def test_read_header_missing_starting_scores_y9s4():
    with pytest.raises(DissectError):
        read_header(Cursor(build(base_pairs(code=Version.Y9S4))))


def test_read_header_bad_integer():
    pairs = [(k, "x" if k == "roundnumber" else v) for k, v in base_pairs()]
    with pytest.raises(DissectError):
        read_header(Cursor(build(pairs)))


def test_read_header_bad_datetime():
    pairs = [(k, "2023-05-01" if k == "datetime" else v) for k, v in base_pairs()]
    with pytest.raises(DissectError):
        read_header(Cursor(build(pairs)))


def test_read_header_truncated():
    data = build(base_pairs())
    with pytest.raises(EndOfDataError):
        read_header(Cursor(data[: len(data) // 2]))