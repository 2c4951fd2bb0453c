from __future__ import annotations

import pytest

from regexbridge import Position, span_from_offsets, span_from_upstream
from regexbridge.spans import UpstreamPosition, UpstreamSpan


def test_span_from_offsets_single_line() -> None:
    s = "a😊\\bc"
    pair = span_from_offsets(s, 5, 7)

    assert pair.span.start == Position(offset=5, line=1, column=6)
    # end line is reported one past the line holding the end offset
    assert pair.span.end == Position(offset=7, line=2, column=8)
    assert pair.span_utf16.start == Position(offset=3, line=1, column=4)
    assert pair.span_utf16.end == Position(offset=5, line=2, column=6)


def test_span_from_offsets_second_line() -> None:
    s = "ab\ncd😀e\nf"
    pair = span_from_offsets(s, 9, 10)

    assert pair.span.start == Position(offset=9, line=2, column=7)
    assert pair.span.end == Position(offset=10, line=3, column=8)
    assert pair.span_utf16.start == Position(offset=7, line=2, column=5)
    assert pair.span_utf16.end == Position(offset=8, line=3, column=6)


def test_span_from_offsets_at_line_start() -> None:
    pair = span_from_offsets("ab\ncd", 3, 3)
    assert pair.span.start == Position(offset=3, line=2, column=1)
    assert pair.span_utf16.start == Position(offset=3, line=2, column=1)


def test_span_from_offsets_rejects_bad_ranges() -> None:
    with pytest.raises(IndexError):
        span_from_offsets("abc", 0, 4)
    with pytest.raises(ValueError):
        span_from_offsets("abc", 2, 1)


def test_span_from_upstream_converts_character_columns() -> None:
    s = "a😀b\nc😀(d"
    upstream = UpstreamSpan(
        start=UpstreamPosition(offset=12, line=2, column=3),
        end=UpstreamPosition(offset=13, line=2, column=4),
    )
    pair = span_from_upstream(s, upstream)

    assert pair.span.start == Position(offset=12, line=2, column=3)
    assert pair.span.end == Position(offset=13, line=2, column=4)
    assert pair.span_utf16.start == Position(offset=8, line=2, column=4)
    assert pair.span_utf16.end == Position(offset=9, line=2, column=5)


def test_span_from_upstream_line_outside_text() -> None:
    pos = UpstreamPosition(offset=0, line=3, column=1)
    with pytest.raises(IndexError):
        span_from_upstream("abc", UpstreamSpan(start=pos, end=pos))
