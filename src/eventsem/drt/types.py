"""Semantic types: ``e`` (entities), ``t`` (truth values), ``s`` (events)."""

from __future__ import annotations

from dataclasses import dataclass


class SemType:
    """Base class for semantic types."""

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class BasicType(SemType):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FunctionType(SemType):
    domain: SemType
    range: SemType

    def __str__(self) -> str:
        return f"<{self.domain},{self.range}>"


E = BasicType("e")
T = BasicType("t")
S = BasicType("s")

BASIC_TYPES = {"e": E, "t": T, "s": S}


def fn(*types: SemType) -> SemType:
    """Right-associative function type: ``fn(E, S, T)`` is ``<e,<s,t>>``."""
    if not types:
        raise ValueError("fn() needs at least one type")
    result = types[-1]
    for domain in reversed(types[:-1]):
        result = FunctionType(domain, result)
    return result


def parse_type(text: str) -> SemType:
    """Parse ``e``, ``t``, ``s`` or ``<a,b>`` notation."""
    parsed, rest = _parse(text.replace(" ", ""))
    if rest:
        raise ValueError(f"Trailing characters in type {text!r}: {rest!r}")
    return parsed


def _parse(text: str) -> tuple[SemType, str]:
    if not text:
        raise ValueError("Unexpected end of type")
    if text[0] in BASIC_TYPES:
        return BASIC_TYPES[text[0]], text[1:]
    if text[0] != "<":
        raise ValueError(f"Unexpected character {text[0]!r} in type")
    domain, rest = _parse(text[1:])
    if not rest.startswith(","):
        raise ValueError("Expected ',' in function type")
    range_, rest = _parse(rest[1:])
    if not rest.startswith(">"):
        raise ValueError("Expected '>' closing function type")
    return FunctionType(domain, range_), rest[1:]
