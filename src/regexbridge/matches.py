from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import islice

from .engine import Matcher
from .utf16 import utf16_index_bytes_slice

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CaptureRecord:
    """One capture group of one match.

    When ``is_participating`` is False the group exists in the pattern but
    did not take part in this match, and every optional field is None.
    """

    group_name: str | None
    match_num: int = field(metadata={"name": "match"})
    group_num: int
    is_participating: bool = False
    entire_match: bool = False
    content: str | None = None
    start: int | None = None
    end: int | None = None
    start_utf16: int | None = None
    end_utf16: int | None = None


@dataclass(frozen=True, slots=True)
class MatchResult:
    # One inner tuple per match, one record per capture group.
    matches: tuple[tuple[CaptureRecord, ...], ...] = ()


@dataclass(frozen=True, slots=True)
class ReplaceResult:
    result: str


def str_from_utf8_rep(data: str | bytes, start: int, end: int) -> str:
    """Slice ``data[start:end]`` by bytes, escaping invalid bytes as ``\\xHH``.

    Valid runs are kept verbatim, so a slice that splits a code point never fails.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return data[start:end].decode("utf-8", errors="backslashreplace")


def collect_matches(text: str, matcher: Matcher, *, limit: int | None) -> MatchResult:
    """Run ``matcher`` over ``text`` and build dual-indexed capture records.

    All byte offsets are translated to UTF-16 in a single batch.
    """
    haystack = text.encode("utf-8")
    names = matcher.capture_names()

    found: list[list[tuple[str | None, tuple[int, int] | None]]] = []
    all_indices: list[int] = []

    for caps in islice(matcher.captures_iter(haystack), limit):
        groups = []
        for i, name in enumerate(names):
            span = caps.get(i)
            if span is not None:
                all_indices.extend(span)
            groups.append((name, span))
        found.append(groups)

    utf16 = utf16_index_bytes_slice(text, all_indices)
    logger.debug("collected %d match(es), %d offset(s)", len(found), len(utf16))

    matches = []
    for match_idx, groups in enumerate(found):
        records = []
        for group_idx, (name, span) in enumerate(groups):
            if span is None:
                records.append(CaptureRecord(group_name=name, match_num=match_idx, group_num=group_idx))
                continue
            start, end = span
            records.append(
                CaptureRecord(
                    group_name=name,
                    match_num=match_idx,
                    group_num=group_idx,
                    is_participating=True,
                    entire_match=group_idx == 0,
                    content=str_from_utf8_rep(haystack, start, end),
                    start=start,
                    end=end,
                    start_utf16=utf16[start],
                    end_utf16=utf16[end],
                )
            )
        matches.append(tuple(records))

    return MatchResult(matches=tuple(matches))


def replace_text(text: str, matcher: Matcher, template: str, *, limit: int | None) -> ReplaceResult:
    """Substitute ``template`` for the first ``limit`` matches (all when None)."""
    out = matcher.replace(text.encode("utf-8"), template.encode("utf-8"), limit)
    # Byte-level matches can split code points; decode lossily.
    return ReplaceResult(result=out.decode("utf-8", errors="replace"))


def replace_list(text: str, matcher: Matcher, template: str, *, limit: int | None) -> ReplaceResult:
    """Concatenate only the expanded ``template`` for each match."""
    haystack = text.encode("utf-8")
    rep = template.encode("utf-8")
    dest = bytearray()
    for caps in islice(matcher.captures_iter(haystack), limit):
        matcher.expand(caps, haystack, rep, dest)
    return ReplaceResult(result=dest.decode("utf-8", errors="replace"))
