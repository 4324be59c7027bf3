"""Player roster and attacker operator swap packets."""

from __future__ import annotations

import logging

from .model import MatchUpdate, MatchUpdateType, Operator, Player, TeamRole, Version, operator_role
from .state import ReplayState

_log = logging.getLogger(__name__)

ID_INDICATOR = b"\x33\xd8\x3d\x4f\x23"
ID_INDICATOR_Y7 = b"\xe6\xf9\x7d\x86"
SPAWN_INDICATOR = b"\xaf\x98\x99\xca"
PROFILE_ID_INDICATOR = b"\x8a\x50\x9b\xd0"
OPERATOR_INDICATOR = b"\x40\xf2\x15\x04"
OPERATOR_INDICATOR_Y7 = b"\x22\xa9\x26\x0b\xe4"
UI_ID_INDICATOR = b"\x38\xdf\xee\x88"


def _as_operator(value: int) -> Operator | int:
    try:
        return Operator(value)
    except ValueError:
        return value


def read_player(state: ReplayState) -> None:
    """Read one player packet; after the tenth, derive the team roles."""
    state.players_read += 1
    try:
        _read_player(state)
    finally:
        if state.players_read == 10:
            state.derive_team_roles()


def _read_player(state: ReplayState) -> None:
    header = state.header
    code = header.code_version
    id_indicator = ID_INDICATOR_Y7 if code <= Version.Y7S2 else ID_INDICATOR
    username = state.read_string()
    if code >= Version.Y7S4:
        state.seek(OPERATOR_INDICATOR)
        state.skip(8)
        # The operator indicator is sometimes sent twice.
        if state.read_bytes(1)[0] == 0x9D:
            return
    else:
        state.seek(OPERATOR_INDICATOR_Y7)
    op = state.read_uint64()
    if op == 0:
        _log.debug("empty player slot")
        return
    if state.read_bytes(1)[0] != 0x22:
        _log.warning("strange invalid player located (op %d)", op)
        return
    state.seek(id_indicator)
    dissect_id = state.read_bytes(4)
    state.seek(SPAWN_INDICATOR)
    spawn = state.read_string()
    if not spawn:
        state.skip(10)
        if state.read_bytes(1) != b"\x1b":
            return
    team_index = 1 if state.players_read > 5 else 0
    ui_id = 0
    if code >= Version.Y9S3:
        state.seek(UI_ID_INDICATOR)
        state.skip(13)
        ui_id = state.read_uint64()
    profile_id = ""
    unknown_id = 0
    if header.recording_profile_id:
        state.seek(PROFILE_ID_INDICATOR)
        profile_id = state.read_string()
        state.skip(5)
        unknown_id = state.read_uint64()
    else:
        _log.debug("profile id not found, skipping")
    player = Player(
        id=unknown_id,
        profile_id=profile_id,
        username=username,
        team_index=team_index,
        operator=_as_operator(op),
        spawn=spawn,
        dissect_id=dissect_id,
        ui_id=ui_id,
    )
    if player.operator != Operator.Recruit and operator_role(player.operator) == TeamRole.Defense:
        player.spawn = header.site
    _log.debug("player: %s", player)
    for existing in header.players:
        if (
            existing.username == player.username
            or (code < Version.Y8S2 and existing.id == player.id and player.id != 0)
            or (code >= Version.Y8S2 and existing.dissect_id == player.dissect_id)
            or (code <= Version.Y7S2 and player.username.startswith(existing.username))
        ):
            existing.profile_id = player.profile_id
            existing.username = player.username
            existing.operator = player.operator
            existing.spawn = player.spawn
            existing.dissect_id = player.dissect_id
            existing.ui_id = player.ui_id
            return
    if username:
        header.players.append(player)


def _record_swap(state: ReplayState, player: Player, operator: Operator | int) -> None:
    player.operator = operator
    state.record(
        MatchUpdate(
            type=MatchUpdateType.OperatorSwap,
            username=player.username,
            time=state.time_raw,
            time_in_seconds=state.time,
            operator=operator,
        )
    )


def read_atk_op_swap(state: ReplayState) -> None:
    """Record an attacker changing operator."""
    operator = _as_operator(state.read_uint64())
    if state.header.code_version < Version.Y9S3:
        state.skip(5)
        dissect_id = state.read_bytes(4)
        index = state.player_index_by_id(dissect_id)
        _log.debug("attack operator swap %s -> %s", dissect_id.hex(), operator)
        if index is not None:
            _record_swap(state, state.header.players[index], operator)
        return
    state.skip(402)
    ui_id = state.read_uint64()
    for player in state.header.players:
        if player.ui_id == ui_id:
            _record_swap(state, player, operator)
            break