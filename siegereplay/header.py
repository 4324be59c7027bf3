"""Reading the uncompressed replay header."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from enum import IntEnum

from .model import (
    DissectError,
    GameMode,
    Header,
    InvalidFileError,
    InvalidStringSepError,
    EndOfDataError,
    Map,
    MatchType,
    Player,
    Team,
    Version,
)
from .state import Cursor

_log = logging.getLogger(__name__)

ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
DISSECT_MAGIC = b"diss"
STRING_SEPARATOR = b"\x00" * 7

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_DATETIME_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}-[0-9]{2}-[0-9]{2}-[0-9]{2}")


def detect_chunked_compression(magic: bytes) -> bool:
    """Return True for chunked (>= Y8S4) files, False for plain zstd files."""
    if len(magic) < 4:
        raise EndOfDataError()
    head = bytes(magic[:4])
    if head == ZSTD_MAGIC:
        return False
    if head == DISSECT_MAGIC:
        return True
    raise InvalidFileError()


def read_header_magic(cursor: Cursor) -> None:
    """Check the dissect magic and skip the versioning block after it."""
    if cursor.read_bytes(7) != b"dissect":
        raise InvalidFileError()
    zeros = 0
    runs = 0
    while runs != 2:
        value = cursor.read_bytes(1)[0]
        if value == 0x00:
            if zeros != 6:
                zeros += 1
            else:
                zeros = 0
                runs += 1
        elif zeros > 0:
            zeros = 0


def read_header_string(cursor: Cursor) -> str:
    """Read one length-prefixed, separator-delimited header string."""
    length = cursor.read_bytes(1)[0]
    if cursor.read_bytes(7) != STRING_SEPARATOR:
        raise InvalidStringSepError()
    return cursor.read_bytes(length).decode("utf-8", errors="replace")


def _atoi(key: str, value: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise DissectError(f"invalid integer for {key!r}: {value!r}")
    number = int(value)
    if not -(1 << 63) <= number < (1 << 63):
        raise DissectError(f"integer out of range for {key!r}: {value!r}")
    return number


def _parse_uint(key: str, value: str) -> int:
    if not _UINT_RE.fullmatch(value):
        raise DissectError(f"invalid unsigned integer for {key!r}: {value!r}")
    number = int(value)
    if number >= 1 << 64:
        raise DissectError(f"unsigned integer out of range for {key!r}: {value!r}")
    return number


def _parse_timestamp(value: str) -> datetime:
    if not _DATETIME_RE.fullmatch(value):
        raise DissectError(f"invalid datetime: {value!r}")
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d-%H-%M-%S")
    except ValueError as exc:
        raise DissectError(f"invalid datetime: {value!r}") from exc
    return parsed.replace(tzinfo=timezone.utc)


def _as_enum(kind: type[IntEnum], number: int) -> IntEnum | int:
    try:
        return kind(number)
    except ValueError:
        return number


_PLAYER_INT_FIELDS = {
    "team": "team_index",
    "heroname": "hero_name",
    "alliance": "alliance",
    "roleimage": "role_image",
    "roleportrait": "role_portrait",
}


def read_header(cursor: Cursor) -> Header:
    """Read header properties until the last team score and build a Header."""
    props: dict[str, str] = {}
    gm_settings: list[int] = []
    players: list[Player] = []
    current = Player()
    in_player = False

    while "teamscore1" not in props:
        key = read_header_string(cursor)
        value = read_header_string(cursor)
        if key == "playerid":
            if in_player:
                players.append(current)
            in_player = True
            current = Player()
        if key in ("playlistcategory", "id") and in_player:
            players.append(current)
            in_player = False
        if not in_player:
            if key == "gmsetting":
                gm_settings.append(_atoi(key, value))
            else:
                props[key] = value
        elif key == "playerid":
            current.id = _parse_uint(key, value)
        elif key == "playername":
            current.username = value
        elif key == "rolename":
            current.role_name = value
        elif key in _PLAYER_INT_FIELDS:
            setattr(current, _PLAYER_INT_FIELDS[key], _atoi(key, value))
        else:
            props[key] = value

    def prop_int(key: str) -> int:
        return _atoi(key, props.get(key, ""))

    header = Header(teams=[Team(), Team()], players=players, gm_settings=gm_settings)
    header.game_version = props.get("version", "")
    header.code_version = prop_int("code")
    header.timestamp = _parse_timestamp(props.get("datetime", ""))
    header.match_type = _as_enum(MatchType, prop_int("matchtype"))
    header.map = _as_enum(Map, prop_int("worldid"))
    header.recording_player_id = _parse_uint(
        "recordingplayerid", props.get("recordingplayerid", "")
    )
    header.recording_profile_id = props.get("recordingprofileid", "")
    header.additional_tags = props.get("additionaltags", "")
    header.game_mode = _as_enum(GameMode, prop_int("gamemodeid"))
    header.rounds_per_match = prop_int("roundspermatch")
    header.rounds_per_match_overtime = prop_int("roundspermatchovertime")
    header.round_number = prop_int("roundnumber")
    header.overtime_round_number = prop_int("overtimeroundnumber")
    header.teams[0].name = props.get("teamname0", "")
    header.teams[1].name = props.get("teamname1", "")
    category = props.get("playlistcategory", "")
    if category:
        try:
            header.playlist_category = _atoi("playlistcategory", category)
        except DissectError as exc:
            _log.debug("omitting playlistcategory: %s", exc)
    header.match_id = props.get("id", "")
    header.teams[0].score = prop_int("teamscore0")
    header.teams[1].score = prop_int("teamscore1")
    if header.code_version >= Version.Y9S4:
        header.teams[0].starting_score = prop_int("startingteamscore0")
        header.teams[1].starting_score = prop_int("startingteamscore1")
    return header