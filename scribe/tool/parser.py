"""Tool call parsing - extracts the single tool request from model text

The prompt asks the model to request a tool with one canonical form::

    TOOL_CALL: {"tool_name": "...", "parameters": {...}}

optionally wrapped in a ```json fence. A bare ``{"tool_name": ...}`` object
is recognised as the same marker. Decoding is a strict JSON decode starting
at the object, followed by at most one lenient salvage pass. Only the
earliest marker in a reply is ever considered; anything after it is inert.
"""

import json
import logging
import re
from typing import Iterable

from scribe.session.message import ToolCall

logger = logging.getLogger(__name__)

MARKER = "TOOL_CALL:"

_MARKER_RE = re.compile(
    r"(?P<labeled>(?:```(?:json)?\s*)?TOOL_CALL:\s*)(?=\{)"
    r"|(?P<bare>\{)\s*\"tool_name\"\s*:"
)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_DECODER = json.JSONDecoder()


def find_marker(text: str) -> re.Match | None:
    """Locate the earliest tool marker, valid or not"""
    if not text:
        return None
    return _MARKER_RE.search(text)


def visible_prefix(text: str) -> str:
    """Text shown to the user: everything strictly before the first marker"""
    if not text:
        return text or ""
    match = find_marker(text)
    if match is None:
        return text
    return text[:match.start()]


def _object_start(match: re.Match) -> int:
    if match.group("bare") is not None:
        return match.start("bare")
    return match.end()


def _salvage(text: str, start: int) -> object:
    """Lenient second attempt: drop fences and trailing text, relax JSON"""
    body = text[start:]
    fence = body.find("```")
    if fence != -1:
        body = body[:fence]
    body = body.replace(MARKER, "")
    body = body[:body.rfind("}") + 1].strip()
    body = _TRAILING_COMMA_RE.sub(r"\1", body)
    return json.loads(body, strict=False)


def _decode(text: str, match: re.Match) -> object | None:
    start = _object_start(match)
    try:
        obj, _ = _DECODER.raw_decode(text, start)
        return obj
    except json.JSONDecodeError as e:
        logger.warning(f"Tool call decode failed ({e.msg}), trying lenient parse")

    try:
        obj = _salvage(text, start)
        logger.info("Lenient tool call parse succeeded")
        return obj
    except json.JSONDecodeError as e:
        logger.warning(f"Lenient tool call parse failed: {e.msg}")
        return None


class ToolCallParser:
    """Parses at most one tool call from a model reply"""

    def __init__(self, known_tools: Iterable[str]):
        self.known_tools = frozenset(known_tools)

    def parse(self, text: str) -> list[ToolCall]:
        """Return the first accepted tool call as a 0- or 1-element list"""
        if not text or not isinstance(text, str):
            return []

        match = find_marker(text)
        if match is None:
            return []

        obj = _decode(text, match)
        if not isinstance(obj, dict):
            return []

        name = obj.get("tool_name")
        parameters = obj.get("parameters", {})
        if not isinstance(name, str) or not name:
            logger.warning("Tool call is missing tool_name")
            return []
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            logger.warning(f"Tool call parameters for {name} are not an object")
            return []

        if name not in self.known_tools:
            logger.warning(f"Unknown tool requested: {name}")
            return []

        logger.info(f"Parsed tool call: {name}")
        return [ToolCall(name=name, parameters=parameters)]

    def has_marker(self, text: str) -> bool:
        return find_marker(text) is not None

    def visible_prefix(self, text: str) -> str:
        return visible_prefix(text)
