import io
import json

import zstandard

from siegereplay.model import GameMode, Map, Version
from siegereplay.server import create_app


def _header_string(text):
    raw = text.encode()
    return bytes([len(raw)]) + b"\x00" * 7 + raw


def _replay_bytes():
    props = [
        ("version", "Y9S2"),
        ("code", str(int(Version.Y9S2))),
        ("datetime", "2024-05-01-12-30-00"),
        ("matchtype", "2"),
        ("worldid", str(int(Map.Bank))),
        ("recordingplayerid", "0"),
        ("gamemodeid", str(int(GameMode.Bomb))),
        ("roundspermatch", "12"),
        ("roundspermatchovertime", "3"),
        ("roundnumber", "0"),
        ("overtimeroundnumber", "0"),
        ("teamname0", "BLUE"),
        ("teamname1", "ORANGE"),
        ("teamscore0", "0"),
        ("teamscore1", "1"),
    ]
    payload = b"dissect" + b"\x01" + b"\x00" * 7 + b"\x01" + b"\x00" * 7
    for key, value in props:
        payload += _header_string(key) + _header_string(value)
    payload += b"\x00" * 8
    return zstandard.ZstdCompressor().compress(payload)


def test_missing_file_is_bad_request(tmp_path):
    client = create_app(str(tmp_path)).test_client()
    response = client.post("/upload", data={})
    assert response.status_code == 400
    assert response.data == b"File upload error\n"


def test_invalid_replay_reports_parse_error(tmp_path):
    client = create_app(str(tmp_path)).test_client()
    response = client.post(
        "/upload",
        data={"file": (io.BytesIO(b"not a replay file"), "bad.rec")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 500
    assert response.data.decode().startswith("Error parsing replay: dissect: not a dissect file")
    assert (tmp_path / "bad.rec").read_bytes() == b"not a replay file"


def test_valid_replay_returns_json(tmp_path):
    client = create_app(str(tmp_path)).test_client()
    response = client.post(
        "/upload",
        data={"file": (io.BytesIO(_replay_bytes()), "match.rec")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    assert response.mimetype == "application/json"
    data = json.loads(response.data)
    header = data["header"]
    assert header["gameVersion"] == "Y9S2"
    assert header["map"] == {"name": "Bank", "id": int(Map.Bank)}
    assert header["gamemode"]["name"] == "Bomb"
    assert [team["name"] for team in header["teams"]] == ["BLUE", "ORANGE"]
    assert header["teams"][1]["won"] is True
    assert header["teams"][1]["winCondition"] == "KilledOpponents"
    assert data["matchFeedback"] == []
    assert (tmp_path / "match.rec").exists()