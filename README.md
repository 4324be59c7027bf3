# siegereplay

Read a Rainbow Six Siege round replay file (`.rec`) and get the round out of
it as plain Python objects and JSON-ready dictionaries: the header (game
version, map, game mode, teams, players), the round's match feedback (kills,
deaths, defuser plants and disables, operator swaps, players leaving), the
scoreboard and per-player statistics.

Both replay layouts are read: a single zstd stream, and the chunked layout
used by newer game versions.

## Installation

```
pip install siegereplay
```

For running the test suite:

```
pip install "siegereplay[test]"
pytest
```

## Reading a replay

```python
from siegereplay.reader import Reader

with open("R01_match.rec", "rb") as stream:
    reader = Reader.from_stream(stream)

reader.read()
match = reader.to_dict()

print(match["header"]["map"])
for update in match["matchFeedback"]:
    print(update["time"], update["type"]["name"], update.get("username"))
```

`Reader.from_bytes(raw)` does the same for a replay already held in memory.
Both decompress the data and read the header; `read()` then scans the rest,
runs the packet listeners and decides which team won the round and how
(`header.teams[i].won` and `win_condition`).

`reader.read_partial()` scans only the first third of the data, which is
enough for the player list, and does not decide the round's outcome.

`parse_replay(path)` from `siegereplay.reader` opens a file, reads the header
and calls `read()`; running out of data while reading packets is not treated
as an error.

`reader.head()` logs a short summary of the recording (game version,
recording player, match ID, timestamp, match type, game mode and map) and
returns the lines.

`reader.to_dict()` returns `header`, `matchFeedback` and `Scoreboard`; the
scoreboard player IDs are base64 text.

### Custom listeners

The reader scans the decompressed replay for byte patterns and calls the
listeners registered for a pattern at each match, with the reader's offset set
just past the pattern. You can add your own before calling `read()`:

```python
def on_pattern(state):
    print("pattern found, data continues at", state.offset)

reader.listen(b"\x22\x07\x94\x9b\xdc", on_pattern)
reader.read()
```

A listener reads from the state with `read_bytes`, `read_int`,
`read_string`, `read_uint32`, `read_uint64`, `skip` and `seek`; a read past
the end raises `EndOfDataError`.

## Statistics

`siegereplay.stats` works on a read replay:

- `opening_kill(state)` and `opening_death(state)`: the first kill, and the
  first kill or death, of the round, or `None`
- `trades(state)`: pairs of consecutive updates where a kill traded the
  previous one within three seconds
- `kills_and_deaths(state)`: the kill and death entries of the match feedback
- `num_players(state, team)`: players on team 0 or 1
- `player_round_stats(state)`: a `PlayerRoundStats` per player, with score,
  kills, assists, headshots, headshot percentage, whether the player died and
  clutch (1vX) kills
- `player_match_stats(rounds)`: totals over several read rounds as
  `PlayerMatchStats`
- `headshot_percentage(headshots, kills)`

## Operators, maps and game modes

`siegereplay.model` holds the enumerations that appear in a header:
`MatchType`, `GameMode`, `Map`, `Operator`, `TeamRole`, `WinCondition` and
`MatchUpdateType`, plus the game `Version` codes. `Operator.role()` (or
`operator_role(operator)`) tells whether an operator attacks or defends, and
raises `ValueError` for an operator with no known side.

In JSON these values are written as an object holding both the name and the
numeric ID, for example `{"name": "Bank", "id": 355496559878}`;
`encode_named(kind, value)` builds that object and `decode_named(kind, data)`
turns it (or its JSON text) back into the enumeration member, or the bare
number for an unknown ID.

Errors raised while reading are subclasses of `DissectError`, such as
`InvalidFileError` for data that is not a replay and `InvalidStringSepError`
for a damaged header.

`siegereplay.ubi` can fetch the attacker/defender split from the official
operators page: `get_operator_map(url)` downloads the page and returns a
mapping of operator slug to `UbiOperator`; `parse_operator_html` and
`parse_operator_js` parse a page you already have.

## Upload server

A small HTTP service accepts replay uploads and answers with the parsed round
as JSON:

```
siegereplay-server
```

It listens on `0.0.0.0:8080`; `--host`, `--port` and `--upload-dir` change the
address, the port and where uploads are stored (the system temporary
directory by default). Send a replay as a multipart form field named `file` to
`/upload`:

```
curl -F "file=@R01_match.rec" http://localhost:8080/upload
```

A missing file gives `400`; a replay that cannot be parsed gives `500` with
the reason in the body.

To embed the service in your own application,
`siegereplay.server.create_app(upload_dir)` returns the Flask application.

## What it does not do

- It reads one round file at a time. There is no reading of a whole match
  folder; to total several rounds, read each file and pass the readers to
  `player_match_stats`.
- The operator side table used by `Operator.role()` is built in.
  `get_operator_map` only returns the downloaded data; it does not update that
  table.
- The upload server sets no size limit on uploads and keeps uploaded files in
  the upload directory.