from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from .utf16 import utf16_index_bytes, utf16_index_bytes_slice, utf16_index_chars


@dataclass(frozen=True, slots=True)
class Position:
    """A concrete position in either byte space or UTF-16 space.

    Offsets are 0-based; line/column are 1-based for user-facing messages.
    """

    offset: int
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    start: Position
    end: Position

    def format(self) -> str:
        return f"{self.start.line}:{self.start.column}"


@dataclass(frozen=True, slots=True)
class SpanPair:
    """The same region expressed in byte space and in UTF-16 space."""

    span: Span
    span_utf16: Span


@dataclass(frozen=True, slots=True)
class UpstreamPosition:
    """Position as reported by a pattern syntax parser.

    ``offset`` counts bytes, ``column`` counts characters within the line.
    """

    offset: int
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class UpstreamSpan:
    start: UpstreamPosition
    end: UpstreamPosition


T = TypeVar("T")
PositionPair = tuple[Position, Position]


def _build_pair(
    s: str,
    start: T,
    end: T,
    convert: Callable[[str, T], PositionPair],
    *,
    bump_end_line: bool = False,
) -> SpanPair:
    start8, start16 = convert(s, start)
    end8, end16 = convert(s, end)
    if bump_end_line:
        end8 = replace(end8, line=end8.line + 1)
        end16 = replace(end16, line=end16.line + 1)
    return SpanPair(span=Span(start8, end8), span_utf16=Span(start16, end16))


def positions_from_offset(s: str, offset: int) -> PositionPair:
    data = s.encode("utf-8")
    if not 0 <= offset <= len(data):
        raise IndexError(f"byte offset {offset} out of range for string of {len(data)} bytes")

    line_start = data.rfind(b"\n", 0, offset) + 1
    line_end = data.find(b"\n", line_start)
    if line_end < 0:
        line_end = len(data)
    line = data.count(b"\n", 0, offset) + 1
    column8 = offset - line_start

    # Lines are delimited by an ASCII byte so the slice is always valid UTF-8.
    line_text = data[line_start:line_end].decode("utf-8")
    offset16 = utf16_index_bytes(s, offset)
    column16 = utf16_index_bytes_slice(line_text, (column8,))[column8]

    return (
        Position(offset=offset, line=line, column=column8 + 1),
        Position(offset=offset16, line=line, column=column16 + 1),
    )


def positions_from_upstream(s: str, pos: UpstreamPosition) -> PositionPair:
    if pos.line < 1:
        raise IndexError(f"line {pos.line} out of range")
    # IndexError here means the parser reported a line the text does not have.
    line_text = s.split("\n")[pos.line - 1]
    offset16 = utf16_index_bytes(s, pos.offset)
    column16 = utf16_index_chars(line_text, pos.column - 1) + 1
    return (
        Position(offset=pos.offset, line=pos.line, column=pos.column),
        Position(offset=offset16, line=pos.line, column=column16),
    )


def span_from_offsets(s: str, start: int, end: int) -> SpanPair:
    """Build a span pair from a half-open byte range ``[start, end)``.

    The end position is reported one line past the line holding ``end`` so
    hosts highlight through the trailing boundary.
    """
    if start > end:
        raise ValueError(f"span start {start} is after end {end}")
    return _build_pair(s, start, end, positions_from_offset, bump_end_line=True)


def span_from_upstream(s: str, span: UpstreamSpan) -> SpanPair:
    return _build_pair(s, span.start, span.end, positions_from_upstream)
