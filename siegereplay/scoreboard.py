"""Scoreboard packets: kills, assists and score."""

from __future__ import annotations

import logging

from .state import ReplayState

_log = logging.getLogger(__name__)


def read_scoreboard_kills(state: ReplayState) -> None:
    """Remember the last player whose scoreboard kill count changed."""
    kills = state.read_uint32()
    state.skip(30)
    dissect_id = state.read_bytes(4)
    index = state.player_index_by_id(dissect_id)
    if index is not None:
        username = state.header.players[index].username
        state.last_killer_from_scoreboard = username
        _log.debug("scoreboard kill: %s has %d kills", username, kills)


def read_scoreboard_assists(state: ReplayState) -> None:
    """Record a player's assist count."""
    assists = state.read_uint32()
    if assists == 0:
        return
    state.skip(30)
    dissect_id = state.read_bytes(4)
    index = state.player_index_by_id(dissect_id)
    username = "N/A"
    if index is not None:
        username = state.header.players[index].username
        entry = state.scoreboard.players[index]
        entry.assists = assists
        entry.assists_from_round += 1
    _log.debug("scoreboard assists: %s has %d", username, assists)


def read_scoreboard_score(state: ReplayState) -> None:
    """Record a player's score."""
    score = state.read_uint32()
    if score == 0:
        return
    state.skip(13)
    dissect_id = state.read_bytes(4)
    index = state.player_index_by_id(dissect_id)
    username = "N/A"
    if index is not None:
        username = state.header.players[index].username
        state.scoreboard.players[index].score = score
    _log.debug("scoreboard score: %s has %d", username, score)