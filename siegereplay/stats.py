"""Per-round and per-match player statistics derived from match feedback."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .model import MatchUpdate, MatchUpdateType, Operator, ScoreboardPlayer, encode_named
from .state import ReplayState

TRADE_THRESHOLD_SECONDS = 3


@dataclass
class PlayerRoundStats:
    username: str = ""
    team_index: int = 0
    score: int = 0
    operator: str = ""
    kills: int = 0
    died: bool = False
    assists: int = 0
    headshots: int = 0
    headshot_percentage: float = 0.0
    one_vx: int = 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "username": self.username,
            "score": self.score,
            "kills": self.kills,
            "died": self.died,
            "assists": self.assists,
            "headshots": self.headshots,
            "headshotPercentage": float(self.headshot_percentage),
        }
        if self.one_vx:
            out["1vX"] = self.one_vx
        return out


@dataclass
class PlayerMatchStats:
    username: str = ""
    team_index: int = 0
    rounds: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    headshots: int = 0
    headshot_percentage: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "rounds": self.rounds,
            "kills": self.kills,
            "deaths": self.deaths,
            "assists": self.assists,
            "headshots": self.headshots,
            "headshotPercentage": float(self.headshot_percentage),
        }


def headshot_percentage(headshots: int, kills: int) -> float:
    """Return headshots as a percentage of kills, or 0 without kills."""
    if kills == 0:
        return 0.0
    return headshots / kills * 100


def opening_kill(state: ReplayState) -> MatchUpdate | None:
    """Return the first kill of the round, or None."""
    return next(
        (u for u in state.match_feedback if u.type == MatchUpdateType.Kill), None
    )


def opening_death(state: ReplayState) -> MatchUpdate | None:
    """Return the first kill or death of the round, or None."""
    return next(
        (
            u
            for u in state.match_feedback
            if u.type in (MatchUpdateType.Kill, MatchUpdateType.Death)
        ),
        None,
    )


def trades(state: ReplayState) -> list[tuple[MatchUpdate, MatchUpdate]]:
    """Return pairs of consecutive updates where a kill traded the previous one."""
    found: list[tuple[MatchUpdate, MatchUpdate]] = []
    previous = MatchUpdate()
    for update in state.match_feedback:
        same_players = (
            previous.target == update.username or previous.username == update.target
        )
        within = previous.time_in_seconds - update.time_in_seconds <= TRADE_THRESHOLD_SECONDS
        if update.type == MatchUpdateType.Kill and same_players and within:
            found.append((previous, update))
        previous = update
    return found


def kills_and_deaths(state: ReplayState) -> list[MatchUpdate]:
    """Return only the kill and death updates, in order."""
    return [
        u
        for u in state.match_feedback
        if u.type in (MatchUpdateType.Kill, MatchUpdateType.Death)
    ]


def num_players(state: ReplayState, team: int) -> int:
    """Return how many players are on the given team."""
    return sum(1 for p in state.header.players if p.team_index == team)


def player_round_stats(state: ReplayState) -> list[PlayerRoundStats]:
    """Compute each player's statistics for one round, including 1vX clutches."""
    header = state.header
    players = header.players
    if not players:
        return []
    winning = 1 if header.teams[1].won else 0
    board = state.scoreboard.players
    stats: list[PlayerRoundStats] = []
    index: dict[str, int] = {}
    for i, player in enumerate(players):
        entry = board[i] if i < len(board) else ScoreboardPlayer()
        stats.append(
            PlayerRoundStats(
                username=player.username,
                team_index=player.team_index,
                operator=encode_named(Operator, player.operator)["name"],
                assists=entry.assists_from_round,
                score=entry.score,
            )
        )
        index[player.username] = i

    def position(name: str) -> int:
        return index.get(name, 0)

    last_death: int | None = None
    for update in state.match_feedback:
        if update.type == MatchUpdateType.Kill:
            killer = stats[position(update.username)]
            killer.kills += 1
            if update.headshot:
                killer.headshots += 1
            killer.headshot_percentage = headshot_percentage(killer.headshots, killer.kills)
            victim = position(update.target)
            stats[victim].died = True
            last_death = victim
        elif update.type == MatchUpdateType.Death:
            victim = position(update.username)
            stats[victim].died = True
            last_death = victim

    winners_alive = [
        i for i, p in enumerate(players) if p.team_index == winning and not stats[i].died
    ]
    last_death_was_winner = (
        last_death is not None and players[last_death].team_index == winning
    )
    last_standing: int | None = None
    if len(winners_alive) == 1:
        last_standing = winners_alive[0]
    elif not winners_alive and last_death_was_winner:
        last_standing = last_death

    if last_standing is not None:
        username = stats[last_standing].username
        team_left = num_players(state, winning)
        one_vx = 0
        for update in state.match_feedback:
            if update.type == MatchUpdateType.Kill:
                if stats[position(update.target)].team_index == winning:
                    team_left -= 1
            elif update.type in (MatchUpdateType.Death, MatchUpdateType.PlayerLeave):
                if stats[position(update.username)].team_index == winning:
                    team_left -= 1
            if update.username != username:
                continue
            if update.type == MatchUpdateType.Kill and team_left < 2:
                one_vx += 1
        one_vx += sum(1 for s in stats if s.team_index != winning and not s.died)
        stats[last_standing].one_vx = one_vx
    return stats


def player_match_stats(rounds: Iterable[ReplayState]) -> list[PlayerMatchStats]:
    """Sum round statistics over several rounds, in order of first appearance."""
    totals: dict[str, PlayerMatchStats] = {}
    for round_state in rounds:
        for p in player_round_stats(round_state):
            entry = totals.get(p.username)
            if entry is None:
                entry = PlayerMatchStats(username=p.username, team_index=p.team_index)
                totals[p.username] = entry
            entry.rounds += 1
            entry.kills += p.kills
            if p.died:
                entry.deaths += 1
            entry.assists += p.assists
            entry.headshots += p.headshots
            entry.headshot_percentage = headshot_percentage(entry.headshots, entry.kills)
    return list(totals.values())