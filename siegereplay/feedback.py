"""Kill feed and other match feedback packets."""

from __future__ import annotations

import logging

from .model import DissectError, MatchUpdate, MatchUpdateType, Version
from .state import ReplayState

_log = logging.getLogger(__name__)

ACTIVITY2 = b"\x00\x00\x00\x22\xe3\x09\x00\x79"
KILL_INDICATOR = b"\x22\xd9\x13\x3c\xba"


def _read_kill(state: ReplayState) -> None:
    trace = state.read_bytes(5)
    if trace != KILL_INDICATOR:
        _log.debug("unknown feedback trace %s", trace.hex())
        return
    username = state.read_string()
    empty = not username
    if empty:
        _log.debug("kill username empty")
    state.skip(15)
    target = state.read_string()
    if empty:
        if target:
            state.record(
                MatchUpdate(
                    type=MatchUpdateType.Death,
                    username=target,
                    time=state.time_raw,
                    time_in_seconds=state.time,
                )
            )
        return
    update = MatchUpdate(
        type=MatchUpdateType.Kill,
        username=username,
        target=target,
        time=state.time_raw,
        time_in_seconds=state.time,
    )
    state.skip(56)
    update.headshot = state.read_int() == 1
    if any(
        u.type == MatchUpdateType.Kill and u.username == username and u.target == target
        for u in state.match_feedback
    ):
        return
    if state.last_killer_from_scoreboard != username:
        update.username_from_scoreboard = state.last_killer_from_scoreboard
    state.record(update)


def _classify(message: str) -> MatchUpdateType:
    kind = MatchUpdateType.Other
    if "bombs" in message or "objective" in message:
        kind = MatchUpdateType.LocateObjective
    if "BattlEye" in message:
        kind = MatchUpdateType.Battleye
    if "left" in message:
        kind = MatchUpdateType.PlayerLeave
    return kind


def read_match_feedback(state: ReplayState) -> None:
    """Record kills, deaths and feed messages."""
    code = state.header.code_version
    if code >= Version.Y9S1Update3:
        state.skip(38)
    elif code >= Version.Y9S1:
        state.skip(9)
        if state.read_int() != 4:
            raise DissectError("match feedback failed valid check")
        state.skip(24)
    else:
        state.skip(1)
        state.seek(ACTIVITY2)
    size = state.read_int()
    if size == 0:
        _read_kill(state)
        return
    if code >= Version.Y9S1:
        return
    message = state.read_bytes(size).decode("utf-8", errors="replace")
    kind = _classify(message)
    username = message.split(" ")[0]
    if kind == MatchUpdateType.Other:
        username = ""
    else:
        message = ""
    state.record(
        MatchUpdate(
            type=kind,
            username=username,
            time=state.time_raw,
            time_in_seconds=state.time,
            message=message,
        )
    )