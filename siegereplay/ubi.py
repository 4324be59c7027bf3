"""Fetching and parsing the official operator list for role lookup."""

from __future__ import annotations

import html
import json
import re
import urllib.request
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Any

from .model import DissectError

_STATE_RE = re.compile(r"^window\.__PRELOADED_STATE__\s=\s(.+);\Z", re.DOTALL)


@dataclass(frozen=True)
class UbiOperator:
    slug: str
    is_attacker: bool


def _field(obj: Any, name: str) -> Any:
    if not isinstance(obj, dict):
        return None
    if name in obj:
        return obj[name]
    folded = name.casefold()
    for key, value in obj.items():
        if isinstance(key, str) and key.casefold() == folded:
            return value
    return None


def _operator_from(entry: Any) -> UbiOperator:
    slug = _field(entry, "slug")
    side = _field(entry, "side")
    if slug is None:
        slug = ""
    if side is None:
        side = False
    if not isinstance(slug, str):
        raise DissectError(f"invalid operator slug: {slug!r}")
    if not isinstance(side, bool):
        raise DissectError(f"invalid operator side: {side!r}")
    return UbiOperator(slug=slug, is_attacker=side)


def parse_operator_js(js: str) -> list[UbiOperator]:
    """Extract the operator list from the preloaded-state script."""
    match = _STATE_RE.match(js)
    if match is None:
        raise DissectError("error: regex did not match anything")
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise DissectError(f"invalid operator JSON: {exc}") from exc
    container = _field(_field(data, "ContentfulGraphQL"), "OperatorsListContainer")
    content = _field(container, "content")
    if content is None:
        return []
    if not isinstance(content, list):
        raise DissectError("operator content is not a list")
    return [_operator_from(entry) for entry in content if entry is not None]


class _FirstScript(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.found = False
        self.done = False
        self._inside = False
        self.parts: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if not self.found and tag == "script":
            self.found = True
            self._inside = True

    def handle_data(self, data: str) -> None:
        if self._inside and not self.done:
            self.parts.append(data)

    def handle_endtag(self, tag: str) -> None:
        if self._inside and not self.done:
            self._inside = False
            self.done = True


def parse_operator_html(document: str) -> list[UbiOperator]:
    """Find the first script in the page and parse the operator list from it."""
    parser = _FirstScript()
    parser.feed(document)
    parser.close()
    if not parser.found:
        raise DissectError("error: no script tag found in HTML")
    content = "".join(parser.parts)
    if not content:
        raise DissectError("error: script tag ended without content")
    return parse_operator_js(html.unescape(content))


def get_operator_map(url: str) -> dict[str, UbiOperator]:
    """Download the operator page at url and map operator slugs to metadata."""
    request = urllib.request.Request(
        url, headers={"User-Agent": "siegereplay", "Accept": "text/html"}
    )
    with urllib.request.urlopen(request) as response:
        document = response.read().decode("utf-8", errors="replace")
    return {op.slug: op for op in parse_operator_html(document)}