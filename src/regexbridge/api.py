from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from . import engine
from .errors import BridgeError
from .literals import LiteralKind, unescape
from .matches import MatchResult, ReplaceResult, collect_matches, replace_list, replace_text
from .serialize import to_jsonable

logger = logging.getLogger(__name__)

Kind = LiteralKind | str | None


def find(
    text: str,
    reg_exp: str,
    flags: str = "",
    *,
    text_kind: Kind = None,
    reg_exp_kind: Kind = None,
    size_limit: int | None = None,
) -> MatchResult:
    """Find the first match (or every match with the `g` flag) of ``reg_exp`` in ``text``."""
    text_esc = unescape(text, text_kind, source="text")
    reg_exp_esc = unescape(reg_exp, reg_exp_kind, source="reg_exp")

    matcher = engine.build(reg_exp_esc, flags, size_limit=size_limit)
    if matcher is None:
        logger.debug("empty pattern, no matches")
        return MatchResult()
    return collect_matches(text_esc, matcher, limit=matcher.limit)


def replace(
    text: str,
    reg_exp: str,
    rep: str,
    flags: str = "",
    *,
    text_kind: Kind = None,
    reg_exp_kind: Kind = None,
    rep_kind: Kind = None,
    size_limit: int | None = None,
) -> ReplaceResult:
    """Return ``text`` with the first match (or every match with `g`) replaced by ``rep``."""
    text_esc = unescape(text, text_kind, source="text")
    reg_exp_esc = unescape(reg_exp, reg_exp_kind, source="reg_exp")
    rep_esc = unescape(rep, rep_kind, source="rep")

    matcher = engine.build(reg_exp_esc, flags, size_limit=size_limit)
    if matcher is None:
        logger.debug("empty pattern, text returned unchanged")
        return ReplaceResult(result=text_esc)
    return replace_text(text_esc, matcher, rep_esc, limit=matcher.limit)


def replace_matches(
    text: str,
    reg_exp: str,
    rep: str,
    flags: str = "",
    *,
    text_kind: Kind = None,
    reg_exp_kind: Kind = None,
    rep_kind: Kind = None,
    size_limit: int | None = None,
) -> ReplaceResult:
    """Return only the expanded ``rep`` of each match, concatenated."""
    text_esc = unescape(text, text_kind, source="text")
    reg_exp_esc = unescape(reg_exp, reg_exp_kind, source="reg_exp")
    rep_esc = unescape(rep, rep_kind, source="rep")

    matcher = engine.build(reg_exp_esc, flags, size_limit=size_limit)
    if matcher is None:
        logger.debug("empty pattern, nothing to list")
        return ReplaceResult(result="")
    return replace_list(text_esc, matcher, rep_esc, limit=matcher.limit)


def _wrap(f: Callable[[], object]) -> dict[str, Any]:
    # Errors caused by user input come back as data; contract violations propagate.
    try:
        return to_jsonable(f())
    except BridgeError as e:
        logger.debug("request failed: %s", e)
        return e.to_dict()


def re_find(
    text: str,
    reg_exp: str,
    flags: str,
    text_kind: str | None = None,
    reg_exp_kind: str | None = None,
    *,
    size_limit: int | None = None,
) -> dict[str, Any]:
    """Host entry point for ``find``; returns ``{"matches": [...]}`` or a tagged error."""
    return _wrap(
        lambda: find(
            text,
            reg_exp,
            flags,
            text_kind=text_kind,
            reg_exp_kind=reg_exp_kind,
            size_limit=size_limit,
        )
    )


def re_replace(
    text: str,
    reg_exp: str,
    rep: str,
    flags: str,
    text_kind: str | None = None,
    reg_exp_kind: str | None = None,
    rep_kind: str | None = None,
    *,
    size_limit: int | None = None,
) -> dict[str, Any]:
    """Host entry point for ``replace``; returns ``{"result": ...}`` or a tagged error."""
    return _wrap(
        lambda: replace(
            text,
            reg_exp,
            rep,
            flags,
            text_kind=text_kind,
            reg_exp_kind=reg_exp_kind,
            rep_kind=rep_kind,
            size_limit=size_limit,
        )
    )


def re_replace_list(
    text: str,
    reg_exp: str,
    rep: str,
    flags: str,
    text_kind: str | None = None,
    reg_exp_kind: str | None = None,
    rep_kind: str | None = None,
    *,
    size_limit: int | None = None,
) -> dict[str, Any]:
    """Host entry point for ``replace_matches``."""
    return _wrap(
        lambda: replace_matches(
            text,
            reg_exp,
            rep,
            flags,
            text_kind=text_kind,
            reg_exp_kind=reg_exp_kind,
            rep_kind=rep_kind,
            size_limit=size_limit,
        )
    )
