from __future__ import annotations

import html
import re

import pytest

from dbplay_cli.dbplay_query import seeds
from dbplay_cli.dbplay_query.highlight import dump_json, highlight_json, tokenize_json

SPAN_RE = re.compile(r'<span class="json-[a-z]+">|</span>')


def _classes(text: str) -> list[tuple[str, str]]:
    return [(token.css_class, token.text) for token in tokenize_json(text) if token.css_class]


def test_token_classes_for_every_literal_kind() -> None:
    text = dump_json({"name": "Ada", "age": 12, "ratio": -1.5e3, "active": True, "manager": None})

    assert _classes(text) == [
        ("json-key", '"name":'),
        ("json-string", '"Ada"'),
        ("json-key", '"age":'),
        ("json-number", "12"),
        ("json-key", '"ratio":'),
        ("json-number", "-1500.0"),
        ("json-key", '"active":'),
        ("json-boolean", "true"),
        ("json-key", '"manager":'),
        ("json-null", "null"),
    ]


def test_strings_containing_literals_stay_strings() -> None:
    text = dump_json(["true", "null", "user:1", 'say "hi"', "café"])

    assert [cls for cls, _ in _classes(text)] == ["json-string"] * 5


def test_escaped_quotes_do_not_split_tokens() -> None:
    text = dump_json({'quote "key"': 'a \\ b "c"'})

    tokens = _classes(text)
    assert tokens[0][0] == "json-key"
    assert tokens[1] == ("json-string", '"a \\\\ b \\"c\\""')


@pytest.mark.parametrize(
    "value",
    [
        seeds.document_records()["user:1"],
        ["Minecraft", "Roblox", "Fortnite"],
        {"nested": {"list": [1, 2.5, -3, False, None], "empty": {}, "blank": []}},
        "just a string",
        0,
    ],
)
def test_tokens_reproduce_input_exactly(value) -> None:
    text = dump_json(value)

    assert "".join(token.text for token in tokenize_json(text)) == text


def test_stripping_markers_reproduces_input() -> None:
    text = dump_json({"html": "<b>bold</b> & co", "n": 1})

    highlighted = str(highlight_json(text))

    assert "<b>" not in highlighted
    assert html.unescape(SPAN_RE.sub("", highlighted)) == text


def test_indentation_and_line_breaks_untouched() -> None:
    text = dump_json({"a": [1, 2]})

    highlighted = str(highlight_json(text))

    assert highlighted.splitlines()[1] == '  <span class="json-key">&#34;a&#34;:</span> ['
    assert highlighted.count("\n") == text.count("\n")
