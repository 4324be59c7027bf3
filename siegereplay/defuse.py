"""Defuser timer packets."""

from __future__ import annotations

from .model import MatchUpdate, MatchUpdateType
from .state import ReplayState


def read_defuser_timer(state: ReplayState) -> None:
    """Record defuser plant and disable events."""
    timer = state.read_string()
    state.skip(34)
    dissect_id = state.read_bytes(4)
    index = state.player_index_by_id(dissect_id)
    kind = (
        MatchUpdateType.DefuserDisableStart
        if state.planted
        else MatchUpdateType.DefuserPlantStart
    )
    if index is not None:
        state.record(
            MatchUpdate(
                type=kind,
                username=state.header.players[index].username,
                time=state.time_raw,
                time_in_seconds=state.time,
            )
        )
        state.last_defuser_player_index = index
    if not timer.startswith("0.00"):
        return
    kind = MatchUpdateType.DefuserDisableComplete
    if not state.planted:
        kind = MatchUpdateType.DefuserPlantComplete
        state.planted = True
    state.record(
        MatchUpdate(
            type=kind,
            username=state.header.players[state.last_defuser_player_index].username,
            time=state.time_raw,
            time_in_seconds=state.time,
        )
    )