from __future__ import annotations

from dataclasses import dataclass, fields

_FLAG_CHARS = {
    "g": "global_",
    "i": "case_insensitive",
    "m": "multi_line",
    "s": "dot_matches_new_line",
    "U": "swap_greed",
    "u": "unicode",
    "x": "ignore_whitespace",
}


@dataclass(frozen=True, slots=True)
class Flags:
    """Match options selected by single-character flags (``gimsUux``)."""

    global_: bool = False
    case_insensitive: bool = False
    multi_line: bool = False
    dot_matches_new_line: bool = False
    swap_greed: bool = False
    unicode: bool = False
    ignore_whitespace: bool = False

    @classmethod
    def parse(cls, flags: str) -> "Flags":
        enabled: dict[str, bool] = {}
        for ch in flags:
            name = _FLAG_CHARS.get(ch)
            if name is None:
                # The host only offers known flags.
                raise ValueError(f"unrecognized flag {ch!r}")
            enabled[name] = True
        return cls(**enabled)

    @property
    def limit(self) -> int | None:
        """Maximum number of matches to visit; None means all of them."""
        return None if self.global_ else 1

    def __str__(self) -> str:
        chars = {name: ch for ch, name in _FLAG_CHARS.items()}
        return "".join(chars[f.name] for f in fields(self) if getattr(self, f.name))
