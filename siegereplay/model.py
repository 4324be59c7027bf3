"""Core data model for replay parsing: errors, enumerations and records."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Any


class DissectError(Exception):
    """Base error for replay parsing."""

    default_message = "dissect: error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidFileError(DissectError):
    """The input is not a replay file."""

    default_message = "dissect: not a dissect file"


class InvalidFolderError(DissectError):
    """The input is not a match folder."""

    default_message = "dissect: not a match folder"


class InvalidStringSepError(DissectError):
    """A header string was not followed by the expected separator."""

    default_message = "dissect: invalid string separator"


class EndOfDataError(DissectError, EOFError):
    """A read went past the end of the replay data."""

    default_message = "dissect: end of data"


class Version(IntEnum):
    """Game code versions that change the replay layout."""

    Y7S1 = 6884476
    Y7S2 = 7040830
    Y7S4 = 7338571
    Y8S1 = 7408213
    Y8S2 = 7601998
    Y8S3 = 7762708
    Y8S4 = 7921866
    Y9S1 = 8111697
    Y9S1Update3 = 8211379
    Y9S2 = 8303162
    Y9S3 = 8506016
    Y9S4 = 8673114


class MatchType(IntEnum):
    QuickMatch = 1
    Ranked = 2
    CustomGameLocal = 3
    CustomGameOnline = 4
    Standard = 8


class GameMode(IntEnum):
    Bomb = 327933806
    SecureArea = 1983085217
    Hostage = 2838806006
    QuickMatchBomb = 400168582901


class Map(IntEnum):
    ClubHouse = 837214085
    KafeDostoyevsky = 1378191338
    Kanal = 1460220617
    Yacht = 1767965020
    PresidentialPlane = 2609218856
    ConsulateY7 = 2609221242
    BartlettU = 2697268122
    Coastline = 42090092951
    Tower = 53627213396
    Villa = 88107330328
    Fortress = 126196841359
    HerefordBase = 127951053400
    ThemePark = 199824623654
    Oregon = 231702797556
    House = 237873412352
    Chalet = 259816839773
    Skyscraper = 276279025182
    Border = 305979357167
    Favela = 329867321446
    Bank = 355496559878
    Outback = 362605108559
    EmeraldPlains = 365284490964
    StadiumBravo = 270063334510
    NighthavenLabs = 378595635123
    Consulate = 379218689149
    Lair = 388073319671
    Stadium2020 = 405306299908


class WinCondition(str, Enum):
    KilledOpponents = "KilledOpponents"
    SecuredArea = "SecuredArea"
    DisabledDefuser = "DisabledDefuser"
    DefusedBomb = "DefusedBomb"
    ExtractedHostage = "ExtractedHostage"
    Time = "Time"


class TeamRole(str, Enum):
    Attack = "Attack"
    Defense = "Defense"


class Operator(IntEnum):
    Recruit = 359656345734
    Castle = 92270642682
    Aruni = 104189664704
    Kaid = 161289666230
    Mozzie = 174977508820
    Pulse = 92270642708
    Ace = 104189664390
    Echo = 92270642214
    Azami = 378305069945
    Solis = 391752120891
    Capitao = 92270644215
    Zofia = 92270644189
    Dokkaebi = 92270644267
    Warden = 104189662920
    Mira = 92270644319
    Sledge = 92270642344
    Melusi = 104189664273
    Bandit = 92270642526
    Valkyrie = 92270642188
    Rook = 92270644059
    Kapkan = 92270641980
    Zero = 291191151607
    Iana = 104189664038
    Ash = 92270642656
    Blackbeard = 92270642136
    Osa = 288200867444
    Thorn = 373711624351
    Jager = 92270642604
    Kali = 104189663920
    Thermite = 92270642760
    Brava = 288200866821
    Amaru = 104189663607
    Ying = 92270642292
    Lesion = 92270642266
    Doc = 92270644007
    Lion = 104189661861
    Fuze = 92270642032
    Smoke = 92270642396
    Vigil = 92270644293
    Mute = 92270642318
    Goyo = 104189663698
    Wamai = 104189663803
    Ela = 92270644163
    Montagne = 92270644033
    Nokk = 104189663024
    Alibi = 104189662071
    Finka = 104189661965
    Caveira = 92270644241
    Nomad = 161289666248
    Thunderbird = 288200867351
    Sens = 384797789346
    IQ = 92270642578
    Blitz = 92270642539
    Hibana = 92270642240
    Maverick = 104189662384
    Flores = 328397386974
    Buck = 92270642474
    Twitch = 92270644111
    Gridlock = 174977508808
    Thatcher = 92270642422
    Glaz = 92270642084
    Jackal = 92270644345
    Grim = 374667788042
    Tachanka = 291437347686
    Oryx = 104189664155
    Frost = 92270642500
    Maestro = 104189662175
    Clash = 104189662280
    Fenrir = 288200867339
    Ram = 395943091136
    Tubarao = 288200867549
    Deimos = 374667787816
    Striker = 409899350463
    Sentry = 409899350403
    Skopos = 386098331713
    Rauora = 386098331923

    def role(self) -> TeamRole:
        """Return the side this operator plays on."""
        return operator_role(self)


class MatchUpdateType(IntEnum):
    Kill = 0
    Death = 1
    DefuserPlantStart = 2
    DefuserPlantComplete = 3
    DefuserDisableStart = 4
    DefuserDisableComplete = 5
    LocateObjective = 6
    OperatorSwap = 7
    Battleye = 8
    PlayerLeave = 9
    Other = 10


_A = TeamRole.Attack
_D = TeamRole.Defense

_OPERATOR_ROLES: dict[int, TeamRole] = {
    104189661861: _A,
    104189661965: _A,
    104189662071: _D,
    104189662175: _D,
    104189662280: _D,
    104189662384: _A,
    104189662920: _D,
    104189663024: _A,
    104189663607: _A,
    104189663698: _D,
    104189663803: _D,
    104189663920: _A,
    104189664038: _A,
    104189664155: _D,
    104189664273: _D,
    104189664390: _A,
    104189664704: _D,
    161289666230: _D,
    161289666248: _A,
    174977508808: _A,
    174977508820: _D,
    288200866821: _A,
    288200867339: _D,
    288200867351: _D,
    288200867444: _A,
    288200867549: _D,
    291191151607: _A,
    291437347686: _D,
    328397386974: _A,
    373711624351: _D,
    374667787816: _A,
    374667788042: _A,
    378305069945: _D,
    384797789346: _A,
    386098331713: _D,
    386098331923: _A,
    391752120891: _D,
    395943091136: _A,
    409899350403: _D,
    409899350463: _A,
    92270641980: _D,
    92270642032: _A,
    92270642084: _A,
    92270642136: _A,
    92270642188: _D,
    92270642214: _D,
    92270642240: _A,
    92270642266: _D,
    92270642292: _A,
    92270642318: _D,
    92270642344: _A,
    92270642396: _D,
    92270642422: _A,
    92270642474: _A,
    92270642500: _D,
    92270642526: _D,
    92270642539: _A,
    92270642578: _A,
    92270642604: _D,
    92270642656: _A,
    92270642682: _D,
    92270642708: _D,
    92270642760: _A,
    92270644007: _D,
    92270644033: _A,
    92270644059: _D,
    92270644111: _A,
    92270644163: _D,
    92270644189: _A,
    92270644215: _A,
    92270644241: _D,
    92270644267: _A,
    92270644293: _D,
    92270644319: _D,
    92270644345: _A,
}


def operator_role(operator: int) -> TeamRole:
    """Return the side of an operator id; raise ValueError if it has none."""
    try:
        return _OPERATOR_ROLES[int(operator)]
    except KeyError:
        raise ValueError(f"role unknown for operator ID {int(operator)}") from None


def _name_of(kind: type[IntEnum], value: int) -> str:
    try:
        return kind(value).name
    except ValueError:
        return f"{kind.__name__}({int(value)})"


def encode_named(kind: type[IntEnum], value: int) -> dict[str, Any]:
    """Encode an enumerated id as a {"name", "id"} object."""
    return {"name": _name_of(kind, value), "id": int(value)}


def decode_named(kind: type[IntEnum], data: Any) -> IntEnum | int:
    """Decode a {"name", "id"} object (or its JSON text); only the id is used."""
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise DissectError(f"invalid {kind.__name__} JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise DissectError(f"cannot decode {kind.__name__} from {type(data).__name__}")
    raw = data.get("id", 0)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise DissectError(f"invalid {kind.__name__} id: {raw!r}")
    try:
        return kind(raw)
    except ValueError:
        return raw


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
    )
    if ts.microsecond:
        text += f".{ts.microsecond:06d}".rstrip("0")
    offset = ts.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass
class Team:
    name: str = ""
    starting_score: int = 0
    score: int = 0
    won: bool = False
    win_condition: WinCondition | None = None
    role: TeamRole | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "startingScore": self.starting_score,
            "score": self.score,
            "won": self.won,
        }
        if self.win_condition:
            out["winCondition"] = WinCondition(self.win_condition).value
        if self.role:
            out["role"] = TeamRole(self.role).value
        return out


@dataclass
class Player:
    id: int = 0
    profile_id: str = ""
    username: str = ""
    team_index: int = 0
    operator: Operator | int = 0
    hero_name: int = 0
    alliance: int = 0
    role_image: int = 0
    role_name: str = ""
    role_portrait: int = 0
    spawn: str = ""
    dissect_id: bytes = b""
    ui_id: int = field(default=0, repr=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.profile_id:
            out["profileID"] = self.profile_id
        out["username"] = self.username
        out["teamIndex"] = self.team_index
        out["operator"] = encode_named(Operator, self.operator)
        if self.hero_name:
            out["heroName"] = self.hero_name
        out["alliance"] = self.alliance
        if self.role_image:
            out["roleImage"] = self.role_image
        if self.role_name:
            out["roleName"] = self.role_name
        if self.role_portrait:
            out["rolePortrait"] = self.role_portrait
        if self.spawn:
            out["spawn"] = self.spawn
        return out


@dataclass
class Header:
    game_version: str = ""
    code_version: int = 0
    timestamp: datetime = _ZERO_TIME
    match_type: MatchType | int = 0
    map: Map | int = 0
    site: str = ""
    recording_player_id: int = 0
    recording_profile_id: str = ""
    additional_tags: str = ""
    game_mode: GameMode | int = 0
    rounds_per_match: int = 0
    rounds_per_match_overtime: int = 0
    round_number: int = 0
    overtime_round_number: int = 0
    teams: list[Team] = field(default_factory=lambda: [Team(), Team()])
    players: list[Player] = field(default_factory=list)
    gm_settings: list[int] = field(default_factory=list)
    playlist_category: int = 0
    match_id: str = ""

    def recording_player(self) -> Player:
        """Return the player who recorded the replay, or an empty Player."""
        return next(
            (p for p in self.players if p.id == self.recording_player_id),
            Player(),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "gameVersion": self.game_version,
            "codeVersion": int(self.code_version),
            "timestamp": _format_timestamp(self.timestamp),
            "matchType": encode_named(MatchType, self.match_type),
            "map": encode_named(Map, self.map),
        }
        if self.site:
            out["site"] = self.site
        out["recordingPlayerID"] = self.recording_player_id
        if self.recording_profile_id:
            out["recordingProfileID"] = self.recording_profile_id
        out["additionalTags"] = self.additional_tags
        out["gamemode"] = encode_named(GameMode, self.game_mode)
        out["roundsPerMatch"] = self.rounds_per_match
        out["roundsPerMatchOvertime"] = self.rounds_per_match_overtime
        out["roundNumber"] = self.round_number
        out["overtimeRoundNumber"] = self.overtime_round_number
        out["teams"] = [team.to_dict() for team in self.teams]
        out["players"] = [player.to_dict() for player in self.players]
        out["gmSettings"] = list(self.gm_settings)
        if self.playlist_category:
            out["playlistCategory"] = self.playlist_category
        out["matchID"] = self.match_id
        return out


@dataclass
class MatchUpdate:
    type: MatchUpdateType = MatchUpdateType.Kill
    username: str = ""
    target: str = ""
    headshot: bool | None = None
    time: str = ""
    time_in_seconds: float = 0.0
    message: str = ""
    operator: Operator | int = 0
    username_from_scoreboard: str = field(default="", repr=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": encode_named(MatchUpdateType, self.type)}
        if self.username:
            out["username"] = self.username
        if self.target:
            out["target"] = self.target
        if self.headshot is not None:
            out["headshot"] = self.headshot
        out["time"] = self.time
        out["timeInSeconds"] = float(self.time_in_seconds)
        if self.message:
            out["message"] = self.message
        if self.operator:
            out["operator"] = encode_named(Operator, self.operator)
        return out


@dataclass
class ScoreboardPlayer:
    id: bytes = b""
    score: int = 0
    assists: int = 0
    assists_from_round: int = 0


@dataclass
class Scoreboard:
    players: list[ScoreboardPlayer] = field(default_factory=list)