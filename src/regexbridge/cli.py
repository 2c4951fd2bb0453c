from __future__ import annotations

import argparse
import json
import logging

from .api import re_find, re_replace, re_replace_list

_KINDS = ["ignore", "str", "raw", "rawhash1", "rawhash2", "rawhash3", "rawhash4"]


def _add_common(sp: argparse.ArgumentParser, *, with_rep: bool) -> None:
    sp.add_argument("text", help="Text to search")
    sp.add_argument("reg_exp", help="Pattern to match")
    if with_rep:
        sp.add_argument("rep", help="Replacement template ($name, ${name}, $0)")
    sp.add_argument("-f", "--flags", default="", help="Flag characters from gimsUux")
    sp.add_argument("--text-kind", choices=_KINDS, default=None, help="Literal kind of the text")
    sp.add_argument("--reg-exp-kind", choices=_KINDS, default=None, help="Literal kind of the pattern")
    if with_rep:
        sp.add_argument("--rep-kind", choices=_KINDS, default=None, help="Literal kind of the replacement")
    sp.add_argument("--size-limit", type=int, default=None, help="Reject patterns longer than this many bytes")


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="regexbridge", description="Run byte-oriented regex queries with UTF-16 offsets")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = ap.add_subparsers(dest="command", required=True)
    _add_common(sub.add_parser("find", help="List matches and capture groups"), with_rep=False)
    _add_common(sub.add_parser("replace", help="Replace matches in the text"), with_rep=True)
    _add_common(sub.add_parser("replace-list", help="Print only the expanded replacements"), with_rep=True)
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "find":
        payload = re_find(
            args.text,
            args.reg_exp,
            args.flags,
            args.text_kind,
            args.reg_exp_kind,
            size_limit=args.size_limit,
        )
    else:
        fn = re_replace if args.command == "replace" else re_replace_list
        payload = fn(
            args.text,
            args.reg_exp,
            args.rep,
            args.flags,
            args.text_kind,
            args.reg_exp_kind,
            args.rep_kind,
            size_limit=args.size_limit,
        )

    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
    return 1 if "errorClass" in payload else 0
