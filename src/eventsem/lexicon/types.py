"""Frame types returned by lexical resources."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..exceptions import LexiconError
from ..types import SyntacticSlot, ThetaRole


class SelectionalRestriction(str, Enum):
    """Semantic restriction a frame slot places on its filler."""

    ANY = "any"
    ANIMATE = "animate"
    INANIMATE = "inanimate"
    CONCRETE = "concrete"
    ABSTRACT = "abstract"
    LOCATION = "location"
    PROPOSITION = "proposition"


@dataclass(frozen=True)
class FrameSlot:
    """One argument position of a frame.

    ``roles`` lists candidate roles, preferred first. ``semantic_type`` is
    the logical type of the filler (``e`` for entities, ``s`` for events).
    """

    slot: SyntacticSlot
    roles: tuple[ThetaRole, ...]
    restriction: SelectionalRestriction = SelectionalRestriction.ANY
    preposition: str | None = None
    optional: bool = False
    semantic_type: str = "e"

    def __post_init__(self) -> None:
        if not self.roles:
            raise LexiconError(f"Frame slot {self.slot.value} names no roles")
        # Local import: eventsem.drt imports this module
        from ..drt.types import parse_type

        try:
            parse_type(self.semantic_type)
        except (AttributeError, ValueError) as e:
            raise LexiconError(
                f"Frame slot {self.slot.value} has invalid semantic type {self.semantic_type!r}",
                cause=e,
            ) from e

    @property
    def role(self) -> ThetaRole:
        return self.roles[0]

    def accepts(self, slot: SyntacticSlot, preposition: str | None) -> bool:
        if slot is not self.slot:
            return False
        if self.slot is SyntacticSlot.OBLIQUE and self.preposition is not None:
            return preposition == self.preposition
        return True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        data: dict[str, Any] = {
            "slot": self.slot.value,
            "roles": [r.value for r in self.roles],
            "restriction": self.restriction.value,
        }
        if self.preposition:
            data["preposition"] = self.preposition
        if self.optional:
            data["optional"] = True
        if self.semantic_type != "e":
            data["semantic_type"] = self.semantic_type
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FrameSlot":
        """Deserialize from dictionary."""
        try:
            roles = data.get("roles") or [data["role"]]
            return cls(
                slot=SyntacticSlot(data["slot"]),
                roles=tuple(ThetaRole.parse(r) for r in roles),
                restriction=SelectionalRestriction(data.get("restriction", "any")),
                preposition=data.get("preposition"),
                optional=bool(data.get("optional", False)),
                semantic_type=data.get("semantic_type", "e"),
            )
        except (KeyError, ValueError) as e:
            raise LexiconError(f"Invalid frame slot definition: {data!r}", cause=e) from e


@dataclass(frozen=True)
class Frame:
    """A lexical argument frame for one predicate sense."""

    frame_id: str
    lemma: str
    slots: tuple[FrameSlot, ...]
    frequency: float = 0.5
    verb_class: str | None = None
    source: str = "unknown"

    @property
    def arity(self) -> int:
        return len(self.slots)

    @property
    def required_slots(self) -> tuple[FrameSlot, ...]:
        return tuple(s for s in self.slots if not s.optional)

    @property
    def core_slots(self) -> tuple[FrameSlot, ...]:
        return tuple(s for s in self.slots if s.slot.is_core)

    def slot_for_role(self, role: ThetaRole) -> FrameSlot | None:
        for slot in self.slots:
            if role in slot.roles:
                return slot
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.frame_id,
            "lemma": self.lemma,
            "frequency": self.frequency,
            "class": self.verb_class,
            "slots": [s.to_dict() for s in self.slots],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], lemma: str | None = None, source: str = "unknown") -> "Frame":
        """Deserialize from dictionary."""
        try:
            frame_lemma = (data.get("lemma") or lemma or "").lower()
            if not frame_lemma:
                raise KeyError("lemma")
            frequency = float(data.get("frequency", 0.5))
        except (KeyError, TypeError, ValueError) as e:
            raise LexiconError(f"Invalid frame definition: {data!r}", resource=source, cause=e) from e
        if not 0.0 <= frequency <= 1.0:
            raise LexiconError(f"Frame frequency must be in [0, 1]: {data!r}", resource=source)
        return cls(
            frame_id=str(data.get("id") or f"{frame_lemma}-{len(data.get('slots', []))}"),
            lemma=frame_lemma,
            slots=tuple(FrameSlot.from_dict(s) for s in data.get("slots", [])),
            frequency=frequency,
            verb_class=data.get("class"),
            source=source,
        )
