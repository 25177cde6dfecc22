"""Lexical JSON syntax highlighting.

Works on the serialised text rather than the parsed value: one regex pass finds
keys, strings, booleans, nulls, and numbers, and everything between matches
(indentation, line breaks, punctuation) is passed through untouched. Joining
the token texts back together always reproduces the input exactly.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from markupsafe import Markup, escape

JSON_TOKEN_RE = re.compile(
    r'("(\\u[a-zA-Z0-9]{4}|\\[^u]|[^\\"])*"(\s*:)?|\b(true|false|null)\b|-?\d+(?:\.\d*)?(?:[eE][+\-]?\d+)?)'
)

KEY = "json-key"
STRING = "json-string"
BOOLEAN = "json-boolean"
NULL = "json-null"
NUMBER = "json-number"


@dataclass(frozen=True, slots=True)
class JsonToken:
    """A slice of the input; `css_class` is None for untagged text."""

    text: str
    css_class: str | None = None


def classify(token: str) -> str:
    """Return the CSS class for a regex match."""
    if token.startswith('"'):
        return KEY if token.endswith(":") else STRING
    if token in ("true", "false"):
        return BOOLEAN
    if token == "null":
        return NULL
    return NUMBER


def tokenize_json(text: str) -> list[JsonToken]:
    tokens: list[JsonToken] = []
    position = 0
    for match in JSON_TOKEN_RE.finditer(text):
        start, end = match.span()
        if start > position:
            tokens.append(JsonToken(text[position:start]))
        token = match.group(0)
        tokens.append(JsonToken(token, classify(token)))
        position = end
    if position < len(text):
        tokens.append(JsonToken(text[position:]))
    return tokens


def highlight_json(text: str) -> Markup:
    """Wrap every token in `<span class="...">`; untagged text is only HTML-escaped."""
    parts: list[str] = []
    for token in tokenize_json(text):
        if token.css_class is None:
            parts.append(str(escape(token.text)))
        else:
            parts.append(f'<span class="{token.css_class}">{escape(token.text)}</span>')
    return Markup("".join(parts))


def dump_json(value: Any) -> str:
    """Serialise with the 2-space layout the highlighter expects."""
    return json.dumps(value, indent=2, ensure_ascii=False)
