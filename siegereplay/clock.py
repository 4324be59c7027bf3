"""Round clock packets."""

from __future__ import annotations

import re

from .model import DissectError
from .state import ReplayState

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise DissectError(f"invalid integer in time: {text!r}")
    return int(text)


def read_time(state: ReplayState) -> None:
    """Read the remaining round time in whole seconds (Y8S1 and later)."""
    seconds = state.read_uint32()
    state.time = float(seconds)
    state.time_raw = f"{seconds // 60}:{seconds % 60:02d}"


def read_y7_time(state: ReplayState) -> None:
    """Read the remaining round time as text, either "m:ss" or "s.ss"."""
    text = state.read_string()
    parts = text.split(":")
    if len(parts) == 1:
        try:
            seconds = float(parts[0])
        except ValueError as exc:
            raise DissectError(f"invalid time: {text!r}") from exc
        state.time = seconds
        state.time_raw = parts[0]
        return
    minutes = _atoi(parts[0])
    seconds = _atoi(parts[1])
    state.time = float(minutes * 60 + seconds)
    state.time_raw = text