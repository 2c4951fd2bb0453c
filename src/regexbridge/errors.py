from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from .serialize import to_jsonable
from .spans import Span, SpanPair


class BridgeError(Exception):
    """Base for every error reported back to the host as data."""

    error_class: ClassVar[str] = "unspecified"

    def payload(self) -> Any:
        # Message-only errors report their text; structured errors override.
        return str(self)

    def to_dict(self) -> dict[str, Any]:
        return {"errorClass": self.error_class, "error": self.payload()}


@dataclass(slots=True)
class RegexSyntaxError(BridgeError):
    """A pattern failed to parse.

    ``auxiliary_span`` points at a second location when one is relevant,
    e.g. the first definition of a duplicated group name.
    """

    error_class: ClassVar[str] = "regexSyntax"

    kind: str
    message: str
    pattern: str
    span: Span
    span_utf16: Span
    auxiliary_span: Span | None = None
    auxiliary_span_utf16: Span | None = None

    @classmethod
    def from_spans(
        cls,
        *,
        kind: str,
        message: str,
        pattern: str,
        span: SpanPair,
        auxiliary_span: SpanPair | None = None,
    ) -> "RegexSyntaxError":
        return cls(
            kind=kind,
            message=message,
            pattern=pattern,
            span=span.span,
            span_utf16=span.span_utf16,
            auxiliary_span=auxiliary_span.span if auxiliary_span else None,
            auxiliary_span_utf16=auxiliary_span.span_utf16 if auxiliary_span else None,
        )

    def payload(self) -> Any:
        return to_jsonable(self)

    def __str__(self) -> str:
        return f"{self.span.format()}: {self.message}"


@dataclass(slots=True)
class RegexCompiledTooBigError(BridgeError):
    error_class: ClassVar[str] = "regexCompiledTooBig"

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class RegexUnspecifiedError(BridgeError):
    error_class: ClassVar[str] = "regexUnspecified"

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class UnescapeError(BridgeError):
    """A text, pattern or replacement literal could not be unescaped.

    ``source`` names the input field: "text", "reg_exp" or "rep".
    """

    error_class: ClassVar[str] = "unescape"

    message: str
    span: Span
    span_utf16: Span
    source: str | None = None

    @classmethod
    def at(cls, message: str, span: SpanPair) -> "UnescapeError":
        return cls(message=message, span=span.span, span_utf16=span.span_utf16)

    def payload(self) -> Any:
        return to_jsonable(self)

    def __str__(self) -> str:
        base = f"{self.span.format()}: {self.message}"
        if self.source:
            return f"{self.source}: {base}"
        return base
