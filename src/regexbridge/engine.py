from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from itertools import accumulate, islice

from .errors import RegexCompiledTooBigError, RegexSyntaxError, RegexUnspecifiedError
from .flags import Flags
from .spans import SpanPair, UpstreamPosition, UpstreamSpan, span_from_upstream
from .utf16 import utf8_len

logger = logging.getLogger(__name__)


# Message prefixes reported by `re`, mapped to stable kind names.
_SYNTAX_KINDS: tuple[tuple[str, str], ...] = (
    ("nothing to repeat", "RepetitionMissing"),
    ("multiple repeat", "RepetitionMultiple"),
    ("min repeat greater than max repeat", "RepetitionCountInvalid"),
    ("the repetition number is too large", "RepetitionCountTooLarge"),
    ("missing ), unterminated subpattern", "GroupUnclosed"),
    ("unbalanced parenthesis", "GroupUnopened"),
    ("unterminated character set", "ClassUnclosed"),
    ("bad character range", "ClassRangeInvalid"),
    ("bad escape", "EscapeUnrecognized"),
    ("incomplete escape", "EscapeUnexpectedEof"),
    ("octal escape value", "EscapeOctalInvalid"),
    ("redefinition of group name", "GroupNameDuplicate"),
    ("bad character in group name", "GroupNameInvalid"),
    ("missing group name", "GroupNameEmpty"),
    ("missing >, unterminated name", "GroupNameUnexpectedEof"),
    ("missing ), unterminated name", "GroupNameUnexpectedEof"),
    ("unknown group name", "GroupNameUnknown"),
    ("invalid group reference", "GroupReferenceInvalid"),
    ("cannot refer to an open group", "GroupReferenceOpen"),
    ("cannot refer to group defined in the same lookbehind", "GroupReferenceOpen"),
    ("unknown extension", "GroupExtensionUnknown"),
    ("unterminated comment", "CommentUnclosed"),
    ("missing -, : or )", "FlagUnexpectedEof"),
    ("missing :", "FlagUnexpectedEof"),
    ("unknown flag", "FlagUnrecognized"),
    ("bad inline flags", "FlagInvalid"),
    ("global flags not at the start", "FlagNotAtStart"),
    ("look-behind requires fixed-width pattern", "LookbehindNotFixedWidth"),
    ("conditional backref with more than two branches", "ConditionalInvalid"),
)

_DUPLICATE_NAME = re.compile(r"redefinition of group name '([^']*)'")
_BRACE_QUANTIFIER = re.compile(r"\{(?!\})\d*(?:,\d*)?\}")
_CAP_NAME = re.compile(rb"[0-9A-Za-z_]+")


def syntax_kind(message: str) -> str:
    for prefix, kind in _SYNTAX_KINDS:
        if message.startswith(prefix):
            return kind
    return "Unspecified"


def _upstream_at(pattern: str, char_idx: int) -> UpstreamPosition:
    head = pattern[:char_idx]
    line_start = head.rfind("\n") + 1
    return UpstreamPosition(
        offset=len(head.encode("utf-8")),
        line=head.count("\n") + 1,
        column=char_idx - line_start + 1,
    )


def _upstream_span(pattern: str, char_idx: int) -> UpstreamSpan:
    end = min(char_idx + 1, len(pattern))
    return UpstreamSpan(start=_upstream_at(pattern, char_idx), end=_upstream_at(pattern, end))


def _syntax_error(pattern: str, err: re.error) -> RegexSyntaxError | RegexUnspecifiedError:
    if err.pos is None:
        return RegexUnspecifiedError(message=err.msg)

    if isinstance(err.pattern, bytes):
        # Bytes patterns report byte positions; the span builder wants characters.
        char_idx = len(err.pattern[: err.pos].decode("utf-8", "ignore"))
    else:
        char_idx = err.pos

    auxiliary: SpanPair | None = None
    dup = _DUPLICATE_NAME.match(err.msg)
    if dup is not None:
        first = pattern.find(f"(?P<{dup.group(1)}>")
        if 0 <= first < char_idx:
            auxiliary = span_from_upstream(pattern, _upstream_span(pattern, first))

    return RegexSyntaxError.from_spans(
        kind=syntax_kind(err.msg),
        message=err.msg,
        pattern=pattern,
        span=span_from_upstream(pattern, _upstream_span(pattern, char_idx)),
        auxiliary_span=auxiliary,
    )


def _quantifier_end(pattern: str, i: int) -> int | None:
    ch = pattern[i]
    if ch in "*+?":
        return i + 1
    if ch == "{":
        m = _BRACE_QUANTIFIER.match(pattern, i)
        if m is not None:
            return m.end()
    return None


def swap_greed(pattern: str) -> str:
    """Toggle the lazy suffix of every quantifier outside character classes."""
    out: list[str] = []
    i = 0
    n = len(pattern)
    in_class = False

    while i < n:
        ch = pattern[i]

        if ch == "\\":
            out.append(pattern[i : i + 2])
            i += 2
            continue

        if in_class:
            if ch == "]":
                in_class = False
            out.append(ch)
            i += 1
            continue

        if ch == "[":
            in_class = True
            out.append(ch)
            i += 1
            # a leading `]` (after an optional `^`) is a literal member
            if pattern.startswith("^", i):
                out.append("^")
                i += 1
            if pattern.startswith("]", i):
                out.append("]")
                i += 1
            continue

        if ch == "(" and pattern.startswith("?", i + 1):
            out.append("(?")
            i += 2
            continue

        end = _quantifier_end(pattern, i)
        if end is None:
            out.append(ch)
            i += 1
            continue

        out.append(pattern[i:end])
        i = end
        if pattern.startswith("?", i):
            i += 1
        elif pattern.startswith("+", i):
            # possessive, has no lazy form
            out.append("+")
            i += 1
        else:
            out.append("?")

    return "".join(out)


def _re_flags(flags: Flags) -> int:
    out = 0
    if flags.case_insensitive:
        out |= re.IGNORECASE
    if flags.multi_line:
        out |= re.MULTILINE
    if flags.dot_matches_new_line:
        out |= re.DOTALL
    if flags.ignore_whitespace:
        out |= re.VERBOSE
    return out


def _compile(pattern: str, source: str | bytes, re_flags: int) -> re.Pattern:
    try:
        return re.compile(source, re_flags)
    except re.error as e:
        raise _syntax_error(pattern, e) from None
    except (OverflowError, RecursionError) as e:
        raise RegexCompiledTooBigError(message=f"compiled regex is too big: {e}") from None


@dataclass(frozen=True, slots=True)
class Captures:
    """Byte ranges of every group for one match; None where a group did not take part."""

    spans: tuple[tuple[int, int] | None, ...]

    def get(self, i: int) -> tuple[int, int] | None:
        return self.spans[i]

    def __len__(self) -> int:
        return len(self.spans)


def _span_or_none(m: re.Match, i: int) -> tuple[int, int] | None:
    start, end = m.span(i)
    if start < 0:
        return None
    return start, end


def _parse_capture_ref(template: bytes, i: int) -> tuple[str, int] | None:
    # template[i] is `$`
    if template.startswith(b"{", i + 1):
        close = template.find(b"}", i + 2)
        if close <= i + 2:
            return None
        return template[i + 2 : close].decode("utf-8", "replace"), close + 1
    m = _CAP_NAME.match(template, i + 1)
    if m is None:
        return None
    return m.group().decode("ascii"), m.end()


@dataclass(frozen=True, slots=True)
class Matcher:
    regex: re.Pattern
    flags: Flags

    @property
    def limit(self) -> int | None:
        return self.flags.limit

    def capture_names(self) -> list[str | None]:
        names: list[str | None] = [None] * (self.regex.groups + 1)
        for name, idx in self.regex.groupindex.items():
            names[idx] = name
        return names

    def captures_iter(self, haystack: bytes) -> Iterator[Captures]:
        if self.flags.unicode:
            yield from self._captures_unicode(haystack)
            return
        n = self.regex.groups + 1
        for m in self.regex.finditer(haystack):
            yield Captures(tuple(_span_or_none(m, i) for i in range(n)))

    def _captures_unicode(self, haystack: bytes) -> Iterator[Captures]:
        # Unicode patterns run over text; map character offsets back to bytes.
        text = haystack.decode("utf-8")
        byte_at = list(accumulate((utf8_len(ch) for ch in text), initial=0))
        n = self.regex.groups + 1
        for m in self.regex.finditer(text):
            spans = []
            for i in range(n):
                sp = _span_or_none(m, i)
                spans.append(None if sp is None else (byte_at[sp[0]], byte_at[sp[1]]))
            yield Captures(tuple(spans))

    def _group_span(self, caps: Captures, name: str) -> tuple[int, int] | None:
        if name.isascii() and name.isdigit():
            idx: int | None = int(name)
        else:
            idx = self.regex.groupindex.get(name)
        if idx is None or idx >= len(caps):
            return None
        return caps.get(idx)

    def expand(self, caps: Captures, haystack: bytes, template: bytes, dest: bytearray) -> None:
        """Append ``template`` to ``dest`` with `$name`, `${name}` and `$N` substituted.

        `$$` is a literal dollar; unknown or non-participating groups expand to nothing.
        """
        i = 0
        while True:
            j = template.find(b"$", i)
            if j < 0:
                dest += template[i:]
                return
            dest += template[i:j]
            if template.startswith(b"$", j + 1):
                dest += b"$"
                i = j + 2
                continue
            ref = _parse_capture_ref(template, j)
            if ref is None:
                dest += b"$"
                i = j + 1
                continue
            name, i = ref
            span = self._group_span(caps, name)
            if span is not None:
                dest += haystack[span[0] : span[1]]

    def replace(self, haystack: bytes, template: bytes, limit: int | None) -> bytes:
        out = bytearray()
        last = 0
        for caps in islice(self.captures_iter(haystack), limit):
            whole = caps.get(0)
            if whole is None:
                raise RuntimeError("match reported without an overall span")
            out += haystack[last : whole[0]]
            self.expand(caps, haystack, template, out)
            last = whole[1]
        out += haystack[last:]
        return bytes(out)


def build(pattern: str, flags: str | Flags = "", *, size_limit: int | None = None) -> Matcher | None:
    """Compile ``pattern`` with single-character ``flags``.

    Returns None for an empty pattern so callers can short circuit. Without the
    `u` flag the pattern is compiled over UTF-8 bytes, so matches may start or
    end inside a multi-byte character.
    """
    if not pattern:
        return None

    opts = flags if isinstance(flags, Flags) else Flags.parse(flags)
    re_flags = _re_flags(opts)

    def source(p: str) -> str | bytes:
        return p if opts.unicode else p.encode("utf-8")

    # Validate the pattern as written so error positions refer to it.
    # Syntax errors take precedence over the size limit.
    regex = _compile(pattern, source(pattern), re_flags)
    if size_limit is not None and len(pattern.encode("utf-8")) > size_limit:
        raise RegexCompiledTooBigError(message=f"Compiled regex exceeds size limit of {size_limit} bytes.")
    if opts.swap_greed:
        regex = _compile(pattern, source(swap_greed(pattern)), re_flags)

    logger.debug(
        "compiled pattern %r flags=%r mode=%s groups=%d",
        pattern,
        str(opts),
        "unicode" if opts.unicode else "bytes",
        regex.groups,
    )
    return Matcher(regex=regex, flags=opts)
