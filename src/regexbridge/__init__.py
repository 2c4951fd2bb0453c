from __future__ import annotations

from .api import find, re_find, re_replace, re_replace_list, replace, replace_matches
from .errors import (
    BridgeError,
    RegexCompiledTooBigError,
    RegexSyntaxError,
    RegexUnspecifiedError,
    UnescapeError,
)
from .flags import Flags
from .literals import LiteralKind, unescape
from .matches import CaptureRecord, MatchResult, ReplaceResult
from .spans import Position, Span, SpanPair, span_from_offsets, span_from_upstream
from .utf16 import utf16_index_bytes, utf16_index_bytes_slice, utf16_index_chars

__all__ = [
    "BridgeError",
    "CaptureRecord",
    "Flags",
    "LiteralKind",
    "MatchResult",
    "Position",
    "RegexCompiledTooBigError",
    "RegexSyntaxError",
    "RegexUnspecifiedError",
    "ReplaceResult",
    "Span",
    "SpanPair",
    "UnescapeError",
    "find",
    "re_find",
    "re_replace",
    "re_replace_list",
    "replace",
    "replace_matches",
    "span_from_offsets",
    "span_from_upstream",
    "unescape",
    "utf16_index_bytes",
    "utf16_index_bytes_slice",
    "utf16_index_chars",
]
