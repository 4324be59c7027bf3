"""Defense site packets."""

from __future__ import annotations

import logging

from .model import Operator, TeamRole, operator_role
from .state import ReplayState

_log = logging.getLogger(__name__)

CURRENT_SITE_PATTERN = b"\xfc\xc6\xa8\x60\x01"


def read_spawn(state: ReplayState) -> None:
    """Record the defended site and assign it to defenders as their spawn."""
    location = state.read_string()
    state.skip(150)
    pattern = state.read_bytes(5)
    if "<br/>" not in location:
        return
    _log.debug("site: %s", location)
    header = state.header
    if header.site and pattern != CURRENT_SITE_PATTERN:
        return
    formatted = location.replace("<br/>", ", ", 1)
    for player in header.players:
        defense_team = header.teams[player.team_index].role == TeamRole.Defense
        defense_role = (
            player.operator not in (Operator.Recruit, 0)
            and operator_role(player.operator) == TeamRole.Defense
        )
        if defense_team or defense_role:
            player.spawn = formatted
    header.site = formatted