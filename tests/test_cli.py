from __future__ import annotations

import json

import pytest

from regexbridge.cli import main


def test_find_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["find", "x😀", "😀"]) == 0
    out = json.loads(capsys.readouterr().out)
    (match,) = out["matches"]
    assert match[0]["startUtf16"] == 1
    assert match[0]["endUtf16"] == 3


def test_replace_with_flags(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["replace", "aaa", "a", "b", "--flags", "g"]) == 0
    assert json.loads(capsys.readouterr().out) == {"result": "bbb"}


def test_replace_list_with_kinds(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["replace-list", "foo bar", r"\w+", "$0\\n", "-f", "g", "--rep-kind", "str"]) == 0
    assert json.loads(capsys.readouterr().out) == {"result": "foo\nbar\n"}


def test_error_exit_code(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["find", "abc", "a(b"]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["errorClass"] == "regexSyntax"
