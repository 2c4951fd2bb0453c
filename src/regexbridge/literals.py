from __future__ import annotations

import logging
import string
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .errors import UnescapeError
from .spans import span_from_offsets
from .utf16 import utf8_len

logger = logging.getLogger(__name__)


class LiteralKind(str, Enum):
    """Quoting convention an input string was written in.

    Values are the names the host sends.
    """

    IGNORE = "ignore"
    STR = "str"
    RAW = "raw"
    RAW_HASH1 = "rawhash1"
    RAW_HASH2 = "rawhash2"
    RAW_HASH3 = "rawhash3"
    RAW_HASH4 = "rawhash4"

    @classmethod
    def from_host(cls, name: str | None) -> "LiteralKind":
        # Unknown names raise ValueError: the host only offers known kinds.
        if name is None:
            return cls.IGNORE
        return cls(name)

    @property
    def hashes(self) -> int | None:
        return _RAW_HASHES.get(self)

    @property
    def terminator(self) -> str | None:
        """Closing delimiter a raw string of this kind cannot contain."""
        n = self.hashes
        if n is None:
            return None
        return '"' + "#" * n

    def __str__(self) -> str:
        return _DESCRIPTIONS[self]


_RAW_HASHES = {
    LiteralKind.RAW: 0,
    LiteralKind.RAW_HASH1: 1,
    LiteralKind.RAW_HASH2: 2,
    LiteralKind.RAW_HASH3: 3,
    LiteralKind.RAW_HASH4: 4,
}

_DESCRIPTIONS = {
    LiteralKind.IGNORE: "unescaped",
    LiteralKind.STR: "standard",
    LiteralKind.RAW: "raw",
    LiteralKind.RAW_HASH1: "r#",
    LiteralKind.RAW_HASH2: "r##",
    LiteralKind.RAW_HASH3: "r###",
    LiteralKind.RAW_HASH4: "r####",
}


class EscapeError(str, Enum):
    """Ways an escape sequence in a standard string can be malformed.

    Values are the messages shown to the user.
    """

    LONE_SLASH = "invalid trailing slash in literal"
    INVALID_ESCAPE = "unknown character escape"
    BARE_CARRIAGE_RETURN = r"bare CR not allowed in string, use \r instead"
    ESCAPE_ONLY_CHAR = "character must be escaped"
    TOO_SHORT_HEX_ESCAPE = "numeric character escape is too short"
    INVALID_CHAR_IN_HEX_ESCAPE = "invalid character in numeric character escape"
    OUT_OF_RANGE_HEX_ESCAPE = r"out of range hex escape, must be in the range [\x00-\x7f]"
    NO_BRACE_IN_UNICODE_ESCAPE = "incorrect unicode escape sequence, expected '{'"
    INVALID_CHAR_IN_UNICODE_ESCAPE = "invalid character in unicode escape"
    EMPTY_UNICODE_ESCAPE = "empty unicode escape, must have at least 1 hex digit"
    UNCLOSED_UNICODE_ESCAPE = "unterminated unicode escape, missing a closing '}'"
    LEADING_UNDERSCORE_UNICODE_ESCAPE = "invalid start of unicode escape: '_'"
    OVERLONG_UNICODE_ESCAPE = "overlong unicode escape, must have at most 6 hex digits"
    LONE_SURROGATE_UNICODE_ESCAPE = "invalid unicode character escape, must not be a surrogate"
    OUT_OF_RANGE_UNICODE_ESCAPE = "invalid unicode character escape, must be at most 10FFFF"


UNESCAPED_QUOTE = "unescaped '\"' in string"

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "0": "\0",
    "'": "'",
    '"': '"',
}

_HEX = frozenset(string.hexdigits)
_CONTINUATION_WS = frozenset(" \t\n\r")


@dataclass(slots=True)
class _Cursor:
    src: str
    i: int = 0
    byte: int = 0

    def eof(self) -> bool:
        return self.i >= len(self.src)

    def peek(self) -> str:
        if self.eof():
            return ""
        return self.src[self.i]

    def next(self) -> str:
        ch = self.peek()
        if ch:
            self.i += 1
            self.byte += utf8_len(ch)
        return ch


def _scan_unicode_escape(cur: _Cursor) -> str | EscapeError:
    # `\u` already consumed
    if cur.next() != "{":
        return EscapeError.NO_BRACE_IN_UNICODE_ESCAPE

    first = cur.next()
    if first == "":
        return EscapeError.UNCLOSED_UNICODE_ESCAPE
    if first == "_":
        return EscapeError.LEADING_UNDERSCORE_UNICODE_ESCAPE
    if first == "}":
        return EscapeError.EMPTY_UNICODE_ESCAPE
    if first not in _HEX:
        return EscapeError.INVALID_CHAR_IN_UNICODE_ESCAPE

    value = int(first, 16)
    n_digits = 1
    while True:
        ch = cur.next()
        if ch == "":
            return EscapeError.UNCLOSED_UNICODE_ESCAPE
        if ch == "_":
            continue
        if ch == "}":
            if n_digits > 6:
                return EscapeError.OVERLONG_UNICODE_ESCAPE
            if 0xD800 <= value <= 0xDFFF:
                return EscapeError.LONE_SURROGATE_UNICODE_ESCAPE
            if value > 0x10FFFF:
                return EscapeError.OUT_OF_RANGE_UNICODE_ESCAPE
            return chr(value)
        if ch not in _HEX:
            return EscapeError.INVALID_CHAR_IN_UNICODE_ESCAPE
        n_digits += 1
        if n_digits > 6:
            # Already overlong; keep scanning for the closing brace.
            continue
        value = value * 16 + int(ch, 16)


def _scan_escape(cur: _Cursor) -> str | EscapeError:
    # `\` already consumed
    ch = cur.next()
    if ch == "":
        return EscapeError.LONE_SLASH
    simple = _SIMPLE_ESCAPES.get(ch)
    if simple is not None:
        return simple
    if ch == "x":
        digits = ""
        for _ in range(2):
            d = cur.next()
            if d == "":
                return EscapeError.TOO_SHORT_HEX_ESCAPE
            if d not in _HEX:
                return EscapeError.INVALID_CHAR_IN_HEX_ESCAPE
            digits += d
        value = int(digits, 16)
        if value > 0x7F:
            return EscapeError.OUT_OF_RANGE_HEX_ESCAPE
        return chr(value)
    if ch == "u":
        return _scan_unicode_escape(cur)
    return EscapeError.INVALID_ESCAPE


def decode_escapes(s: str) -> str:
    """Decode backslash escapes in a standard string literal body.

    Stops at the first malformed escape and raises UnescapeError spanning
    from the escape's start to the last character read.
    """
    cur = _Cursor(s)
    out: list[str] = []

    while not cur.eof():
        start = cur.byte
        ch = cur.next()

        if ch == "\\" and cur.peek() == "\n":
            # line continuation: drop the newline and leading whitespace
            while cur.peek() in _CONTINUATION_WS:
                cur.next()
            continue

        if ch == "\\":
            res = _scan_escape(cur)
        elif ch == "\r":
            res = EscapeError.BARE_CARRIAGE_RETURN
        elif ch == '"':
            res = EscapeError.ESCAPE_ONLY_CHAR
        else:
            res = ch

        if isinstance(res, EscapeError):
            raise UnescapeError.at(res.value, span_from_offsets(s, start, cur.byte))
        out.append(res)

    return "".join(out)


def check_unescaped_quotes(s: str) -> None:
    """Reject a `"` that is not preceded by an odd run of backslashes."""
    slashes = 0
    for idx, byte in enumerate(s.encode("utf-8")):
        if byte == 0x5C:
            slashes += 1
            continue
        if byte == 0x22 and slashes % 2 == 0:
            raise UnescapeError.at(UNESCAPED_QUOTE, span_from_offsets(s, idx, idx + 1))
        slashes = 0


def _unescape_ignore(s: str, kind: LiteralKind) -> str:
    return s


def _unescape_raw(s: str, kind: LiteralKind) -> str:
    pat = '"' + "#" * _RAW_HASHES[kind]
    idx = s.find(pat)
    if idx >= 0:
        start = len(s[:idx].encode("utf-8"))
        raise UnescapeError.at(
            f"unexpected {pat!r} would terminate a {str(kind)} string",
            span_from_offsets(s, start, start + len(pat)),
        )
    return s


def _unescape_str(s: str, kind: LiteralKind) -> str:
    if "\\" not in s:
        return s
    check_unescaped_quotes(s)
    return decode_escapes(s)


_HANDLERS: dict[LiteralKind, Callable[[str, LiteralKind], str]] = {
    LiteralKind.IGNORE: _unescape_ignore,
    LiteralKind.STR: _unescape_str,
    LiteralKind.RAW: _unescape_raw,
    LiteralKind.RAW_HASH1: _unescape_raw,
    LiteralKind.RAW_HASH2: _unescape_raw,
    LiteralKind.RAW_HASH3: _unescape_raw,
    LiteralKind.RAW_HASH4: _unescape_raw,
}


def unescape(s: str, kind: LiteralKind | str | None = None, *, source: str | None = None) -> str:
    """Interpret ``s`` as a literal body of the given kind.

    ``kind`` may be a LiteralKind or a host name ("str", "raw", "rawhash1", ...).
    ``source`` is recorded on any UnescapeError raised.
    """
    if not isinstance(kind, LiteralKind):
        kind = LiteralKind.from_host(kind)
    try:
        return _HANDLERS[kind](s, kind)
    except UnescapeError as e:
        e.source = source
        logger.debug("unescape failed for %s (%s literal): %s", source or "input", kind, e.message)
        raise
