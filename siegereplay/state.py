"""Byte cursor and the mutable state shared by replay packet readers."""

from __future__ import annotations

import logging

from .model import (
    EndOfDataError,
    Header,
    MatchUpdate,
    Operator,
    Scoreboard,
    ScoreboardPlayer,
    TeamRole,
)

_log = logging.getLogger(__name__)

_EMPTY_ID = b"\x00\x00\x00\x00"


class Cursor:
    """Sequential reader over decompressed replay bytes.

    A read that moves the offset to or past the end of the data raises
    EndOfDataError; the offset is still advanced in that case.
    """

    def __init__(self, data: bytes = b"") -> None:
        self.data = bytes(data)
        self.offset = 0

    def skip(self, n: int) -> None:
        """Advance the offset by n bytes."""
        self.offset += n
        if self.offset >= len(self.data):
            raise EndOfDataError()

    def read_bytes(self, n: int) -> bytes:
        """Read n raw bytes."""
        self.skip(n)
        return self.data[self.offset - n:self.offset]

    def read_int(self) -> int:
        """Read a single unsigned byte."""
        return self.read_bytes(1)[0]

    def read_string(self) -> str:
        """Read a string prefixed by a one-byte length."""
        size = self.read_int()
        return self.read_bytes(size).decode("utf-8", errors="replace")

    def read_uint32(self) -> int:
        """Read a size byte followed by a little-endian 32-bit integer."""
        self.skip(1)
        return int.from_bytes(self.read_bytes(4), "little")

    def read_uint64(self) -> int:
        """Read a size byte followed by a little-endian 64-bit integer."""
        self.skip(1)
        return int.from_bytes(self.read_bytes(8), "little")

    def seek(self, pattern: bytes) -> None:
        """Advance until just past the next occurrence of pattern."""
        if not pattern:
            raise ValueError("seek pattern must not be empty")
        start = self.offset
        matched = 0
        while True:
            try:
                value = self.read_bytes(1)[0]
            except EndOfDataError:
                _log.warning("large seek: %d bytes", self.offset - start)
                raise
            if value != pattern[matched]:
                matched = 0
                continue
            matched += 1
            if matched == len(pattern):
                return


class ReplayState(Cursor):
    """Cursor plus everything packet readers learn about the match."""

    def __init__(self, data: bytes = b"") -> None:
        super().__init__(data)
        self.time = 0.0
        self.time_raw = ""
        self.last_defuser_player_index = 0
        self.planted = False
        self.players_read = 0
        self.last_killer_from_scoreboard = ""
        self.header = Header()
        self.match_feedback: list[MatchUpdate] = []
        self.scoreboard = Scoreboard()

    def player_index_by_id(self, dissect_id: bytes) -> int | None:
        """Return the index of the player with this dissect id, or None."""
        dissect_id = bytes(dissect_id)
        for index, player in enumerate(self.header.players):
            if player.dissect_id == dissect_id:
                return index
        if dissect_id != _EMPTY_ID:
            _log.debug("could not index player by id %s", dissect_id.hex())
        return None

    def player_index_by_username(self, username: str) -> int | None:
        """Return the index of the player with this username, or None."""
        for index, player in enumerate(self.header.players):
            if player.username == username:
                return index
        _log.debug("could not index player by username %r", username)
        return None

    def derive_team_roles(self) -> None:
        """Drop players without an operator and set team roles from operators."""
        players = self.header.players
        _log.debug("deriving team roles from %d players", len(players))
        if len(players) > 10:
            _log.warning("tracked players greater than 10")
        kept = []
        for player in players:
            if player.operator != 0:
                kept.append(player)
                self.scoreboard.players.append(ScoreboardPlayer(id=player.dissect_id))
            else:
                _log.warning("operator id was 0, removing %r from list", player.username)
        self.header.players = kept
        for player in kept:
            if player.operator == Operator.Recruit:
                continue
            role = Operator(player.operator).role()
            own = player.team_index
            other = own ^ 1
            if role == TeamRole.Attack:
                self.header.teams[own].role = TeamRole.Attack
                self.header.teams[other].role = TeamRole.Defense
            else:
                self.header.teams[own].role = TeamRole.Defense
                self.header.teams[other].role = TeamRole.Attack
            break

    def record(self, update: MatchUpdate) -> None:
        """Append a match update to the feedback list."""
        self.match_feedback.append(update)
        _log.debug("match update: %s", update)