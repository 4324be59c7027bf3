"""Replay reader: decompression, packet dispatch and round results."""

from __future__ import annotations

import base64
import logging
from collections import Counter
from collections.abc import Callable, Iterator
from typing import Any, BinaryIO

import zstandard

from .clock import read_time, read_y7_time
from .defuse import read_defuser_timer
from .feedback import read_match_feedback
from .header import ZSTD_MAGIC, detect_chunked_compression, read_header, read_header_magic
from .model import (
    DissectError,
    EndOfDataError,
    GameMode,
    Map,
    MatchType,
    MatchUpdateType,
    TeamRole,
    Version,
    WinCondition,
    encode_named,
)
from .player import read_atk_op_swap, read_player
from .scoreboard import read_scoreboard_assists, read_scoreboard_kills, read_scoreboard_score
from .site import read_spawn
from .state import ReplayState

_log = logging.getLogger(__name__)

Listener = Callable[[ReplayState], None]


def _decompress_frames(data: bytes) -> tuple[bytes, int]:
    """Decompress consecutive zstd frames at the start of data.

    Returns the decompressed bytes and the number of input bytes consumed.
    Decoding stops at the first byte run that is not a zstd frame.
    """
    decompressor = zstandard.ZstdDecompressor()
    out = bytearray()
    pos = 0
    view = memoryview(data)
    while data.startswith(ZSTD_MAGIC, pos):
        obj = decompressor.decompressobj()
        try:
            out += obj.decompress(view[pos:])
        except zstandard.ZstdError as exc:
            raise DissectError(f"zstd: {exc}") from exc
        if not obj.eof:
            raise DissectError("zstd: unexpected end of compressed data")
        pos = len(data) - len(obj.unused_data)
    if pos < len(data) and not out:
        raise DissectError("zstd: magic number mismatch")
    return bytes(out), pos


def _naive_matches(data: bytes, pattern: bytes, start: int, end: int) -> Iterator[int]:
    """Yield the offsets of the last byte of each pattern match in data[start:end].

    Matching never backtracks: after a mismatch the mismatching byte is
    consumed and matching restarts at the following byte.
    """
    first = pattern[0]
    size = len(pattern)
    pos = start
    while True:
        candidate = data.find(first, pos, end)
        if candidate < 0:
            return
        matched = 1
        while (
            matched < size
            and candidate + matched < end
            and data[candidate + matched] == pattern[matched]
        ):
            matched += 1
        if matched == size:
            yield candidate + size - 1
            pos = candidate + size
        elif candidate + matched >= end:
            return
        else:
            pos = candidate + matched + 1


class Reader(ReplayState):
    """A decompressed replay with its header and the listeners run by read()."""

    def __init__(self, data: bytes = b"") -> None:
        super().__init__(data)
        self._listeners: dict[bytes, list[Listener]] = {}
        self._partial = False

    @classmethod
    def from_bytes(cls, raw: bytes) -> Reader:
        """Decompress a replay file's bytes and read its header."""
        raw = bytes(raw)
        chunked = detect_chunked_compression(raw[:4])
        _log.debug("chunked compression (>=Y8S4): %s", chunked)
        reader = cls()
        if chunked:
            reader._load_chunked(raw)
        else:
            reader._load_plain(raw)
        _log.debug(
            "size %d, season %s, code %d",
            len(reader.data),
            reader.header.game_version,
            reader.header.code_version,
        )
        reader._register_default_listeners()
        return reader

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> Reader:
        """Read a whole replay from a binary stream."""
        return cls.from_bytes(stream.read())

    def _load_chunked(self, raw: bytes) -> None:
        self.data = raw
        self.offset = 0
        read_header_magic(self)
        self.header = read_header(self)
        out = bytearray()
        sections = 0
        pos = self.offset
        # The last byte is never scanned, as with any cursor read.
        end = len(raw) - 1
        while True:
            match_end = next(_naive_matches(raw, ZSTD_MAGIC, pos, end), None)
            if match_end is None:
                break
            sections += 1
            frame_start = match_end - len(ZSTD_MAGIC) + 1
            chunk, consumed = _decompress_frames(raw[frame_start:])
            out += chunk
            pos = frame_start + consumed
        self.data = bytes(out)
        self.offset = 0
        _log.debug("zstd sections: %d", sections)

    def _load_plain(self, raw: bytes) -> None:
        self.data, _ = _decompress_frames(raw)
        self.offset = 0
        read_header_magic(self)
        self.header = read_header(self)

    def _register_default_listeners(self) -> None:
        self.listen(b"\x22\x07\x94\x9b\xdc", read_player)
        self.listen(b"\x22\xa9\x26\x0b\xe4", read_atk_op_swap)
        self.listen(b"\xaf\x98\x99\xca", read_spawn)
        if self.header.code_version >= Version.Y8S1:
            self.listen(b"\x1f\x07\xef\xc9", read_time)
        else:
            self.listen(b"\x1e\xf1\x11\xab", read_y7_time)
        self.listen(b"\x59\x34\xe5\x8b\x04", read_match_feedback)
        self.listen(b"\x22\xa9\xc8\x58\xd9", read_defuser_timer)
        self.listen(b"\xec\xda\x4f\x80", read_scoreboard_score)
        self.listen(b"\x4d\x73\x7f\x9e", read_scoreboard_assists)
        self.listen(b"\x1c\xd2\xb1\x9d", read_scoreboard_kills)

    def listen(self, pattern: bytes, callback: Listener) -> None:
        """Run callback during read() wherever pattern is found."""
        pattern = bytes(pattern)
        if not pattern:
            raise ValueError("listener pattern must not be empty")
        self._listeners.setdefault(pattern, []).append(callback)

    def read(self) -> None:
        """Dispatch every packet past the header to its listeners."""
        start = self.offset
        end = len(self.data)
        if self._partial:
            end //= 3
        matches = sorted(
            (match_end, index)
            for index, pattern in enumerate(self._listeners)
            for match_end in _naive_matches(self.data, pattern, start, end)
        )
        _log.debug("%d matches, calling listeners", len(matches))
        callbacks = list(self._listeners.values())
        for match_end, index in matches:
            for callback in callbacks[index]:
                self.offset = match_end + 1
                callback(self)
        if not self._partial:
            self.round_end()
        self.data = b""

    def read_partial(self) -> None:
        """Read only the first third of the replay, enough for the player list."""
        self._partial = True
        _log.debug("using partial read")
        try:
            self.read()
        finally:
            self._partial = False

    def _team_of(self, username: str) -> int:
        index = self.player_index_by_username(username)
        if index is None:
            raise DissectError(f"unknown player {username!r} in match feedback")
        return self.header.players[index].team_index

    def round_end(self) -> None:
        """Decide which team won the round and how."""
        _log.debug("round end")
        header = self.header
        teams = header.teams
        planter: int | None = None
        deaths: Counter[int] = Counter()
        sizes: Counter[int] = Counter()
        roles: dict[int, TeamRole | None] = {}
        for player in header.players:
            sizes[player.team_index] += 1
            roles[player.team_index] = teams[player.team_index].role

        if header.code_version >= Version.Y9S4:
            team0_won = teams[0].starting_score < teams[0].score
            teams[0].won = team0_won
            teams[1].won = not team0_won

        for update in self.match_feedback:
            if update.type == MatchUpdateType.Kill:
                deaths[self._team_of(update.target)] += 1
            elif update.type == MatchUpdateType.Death:
                deaths[self._team_of(update.username)] += 1
            elif update.type == MatchUpdateType.DefuserPlantComplete:
                planter = self.player_index_by_username(update.username)
            elif update.type == MatchUpdateType.DefuserDisableComplete:
                team = teams[self._team_of(update.username)]
                team.won = True
                team.win_condition = WinCondition.DisabledDefuser
                return

        if planter is not None:
            team = teams[header.players[planter].team_index]
            team.won = True
            team.win_condition = WinCondition.DefusedBomb
            return

        if header.code_version >= Version.Y9S4:
            return

        if deaths[0] == sizes[0]:
            teams[1].won = True
            teams[1].win_condition = WinCondition.KilledOpponents
            return
        if deaths[1] == sizes[1]:
            teams[0].won = True
            teams[0].win_condition = WinCondition.KilledOpponents
            return

        winner = 1 if roles.get(1) == TeamRole.Defense else 0
        teams[winner].won = True
        teams[winner].win_condition = WinCondition.Time

    def head(self) -> list[str]:
        """Log a summary of the header and return its lines."""
        header = self.header
        username = "N/A"
        for player in header.players:
            if player.profile_id == header.recording_profile_id:
                username = player.username
        lines = [
            f"Version:          {header.game_version}/{header.code_version}",
            f"Recording Player: {username} [{header.recording_profile_id}]",
            f"Match ID:         {header.match_id}",
            f"Timestamp:        {header.timestamp.astimezone()}",
            f"Match Type:       {encode_named(MatchType, header.match_type)['name']}",
            f"Game Mode:        {encode_named(GameMode, header.game_mode)['name']}",
            f"Map:              {encode_named(Map, header.map)['name']}",
        ]
        for line in lines:
            _log.info(line)
        return lines

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of the replay."""
        return {
            "header": self.header.to_dict(),
            "matchFeedback": [update.to_dict() for update in self.match_feedback],
            "Scoreboard": {
                "Players": [
                    {
                        "ID": base64.b64encode(player.id).decode("ascii"),
                        "Score": player.score,
                        "Assists": player.assists,
                        "AssistsFromRound": player.assists_from_round,
                    }
                    for player in self.scoreboard.players
                ]
            },
        }


def parse_replay(path: str) -> Reader:
    """Open, decompress and fully read a replay file.

    Running out of data while reading packets is not an error.
    """
    with open(path, "rb") as stream:
        reader = Reader.from_stream(stream)
    try:
        reader.read()
    except EndOfDataError:
        _log.debug("replay data ended while reading packets")
    return reader