"""HTTP service that accepts replay uploads and returns the parsed match as JSON."""

from __future__ import annotations

import argparse
import json
import os
import tempfile

from flask import Flask, Response, request

from .model import DissectError
from .reader import parse_replay

_PARSE_ERRORS = (DissectError, OSError, ValueError, IndexError, KeyError)


def _error(message: str, status: int) -> Response:
    return Response(message + "\n", status=status, mimetype="text/plain")


def create_app(upload_dir: str | None = None) -> Flask:
    """Build the application; uploads are stored in upload_dir."""
    directory = upload_dir if upload_dir is not None else tempfile.gettempdir()
    app = Flask(__name__)

    @app.route("/upload", methods=["GET", "POST", "PUT"])
    def upload() -> Response:
        upload_file = request.files.get("file")
        if upload_file is None or not upload_file.filename:
            return _error("File upload error", 400)
        path = os.path.join(directory, os.path.basename(upload_file.filename))
        try:
            upload_file.save(path)
        except OSError:
            return _error("Failed to save file", 500)
        try:
            reader = parse_replay(path)
        except _PARSE_ERRORS as exc:
            return _error(f"Error parsing replay: {exc}", 500)
        try:
            body = json.dumps(reader.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError):
            return _error("Failed to convert to JSON", 500)
        return Response(body, status=200, mimetype="application/json")

    return app


def main(argv: list[str] | None = None) -> None:
    """Run the upload server."""
    parser = argparse.ArgumentParser(description="Replay upload server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--upload-dir", default=tempfile.gettempdir())
    args = parser.parse_args(argv)
    app = create_app(args.upload_dir)
    print(f"Server running on :{args.port}")
    app.run(host=args.host, port=args.port)