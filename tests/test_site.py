from siegereplay.model import Operator, Player, TeamRole
from siegereplay.site import CURRENT_SITE_PATTERN, read_spawn
from siegereplay.state import ReplayState

PAD = b"\xff" * 4
LOCATION = "1F Kitchen<br/>2F Bedroom"


def _s(text):
    raw = text.encode()
    return bytes([len(raw)]) + raw


def _state(location, pattern=b"\x00" * 5):
    state = ReplayState(_s(location) + bytes(150) + pattern + PAD)
    state.header.teams[0].role = TeamRole.Attack
    state.header.teams[1].role = TeamRole.Defense
    state.header.players = [
        Player(username="Alpha", team_index=0, operator=Operator.Sledge, spawn="Yard"),
        Player(username="Bravo", team_index=1, operator=Operator.Smoke),
    ]
    return state


def test_site_recorded_for_defenders():
    state = _state(LOCATION)
    read_spawn(state)
    assert state.header.site == "1F Kitchen, 2F Bedroom"
    assert state.header.players[1].spawn == state.header.site
    assert state.header.players[0].spawn == "Yard"


def test_location_without_break_ignored():
    state = _state("Yard")
    read_spawn(state)
    assert state.header.site == ""
    assert state.header.players[1].spawn == ""


def test_existing_site_kept_without_current_pattern():
    state = _state(LOCATION)
    state.header.site = "earlier"
    read_spawn(state)
    assert state.header.site == "earlier"


def test_existing_site_replaced_with_current_pattern():
    state = _state(LOCATION, CURRENT_SITE_PATTERN)
    state.header.site = "earlier"
    read_spawn(state)
    assert state.header.site == LOCATION.replace("<br/>", ", ")
    assert state.header.players[1].spawn == state.header.site


def test_defense_operator_on_attack_team_gets_site():
    state = _state(LOCATION)
    state.header.players[0].operator = Operator.Mute
    read_spawn(state)
    assert state.header.players[0].spawn == state.header.site