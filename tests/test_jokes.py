from __future__ import annotations

import json

import pytest

from ashbot.config import ConfigError
from ashbot.jokes import default_jokes, load_jokes


def test_bundled_jokes():
    jokes = default_jokes()
    assert len(jokes) > 100
    assert "To the guy who invented zero... thanks for nothing." in jokes
    assert load_jokes(None) == jokes


def test_load_jokes_from_file(tmp_path):
    p = tmp_path / "dad.json"
    p.write_text(json.dumps(["a joke", "  ", "another"]), encoding="utf-8")
    assert load_jokes(p) == ["a joke", "another"]


def test_empty_joke_file_uses_bundled(tmp_path):
    p = tmp_path / "dad.json"
    p.write_text("[]", encoding="utf-8")
    assert load_jokes(p) == default_jokes()


@pytest.mark.parametrize("content", ['{"jokes": []}', "[1, 2]", "not json"])
def test_bad_joke_file(tmp_path, content):
    p = tmp_path / "dad.json"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_jokes(p)
