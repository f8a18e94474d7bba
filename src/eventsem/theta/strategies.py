"""Frame scoring strategies.

Each strategy scores how well one frame fits a predicate's arguments.
The assigner combines them by configured weights:

    score = 0.5 * pattern + 0.3 * selectional + 0.2 * frequency
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol

from ..lexicon.types import Frame, FrameSlot
from ..types import Argument, PredicateSite
from .cues import ArgumentCues


@dataclass
class SlotMatch:
    """Alignment of a predicate's arguments with one frame's slots."""

    frame: Frame
    matched: dict[str, FrameSlot] = field(default_factory=dict)
    unmatched: list[Argument] = field(default_factory=list)
    implicit: list[FrameSlot] = field(default_factory=list)
    missing: list[FrameSlot] = field(default_factory=list)
    argument_count: int = 0

    @property
    def compatible(self) -> bool:
        """Arity fits: required slots filled and every core argument placed."""
        return not self.missing and all(not a.slot.is_core for a in self.unmatched)

    def slot_of(self, argument: Argument) -> FrameSlot | None:
        return self.matched.get(argument.arg_id)


def match_frame(frame: Frame, site: PredicateSite) -> SlotMatch:
    match = SlotMatch(frame=frame, argument_count=len(site.arguments))
    free = list(frame.slots)
    for argument in site.arguments:
        for slot in free:
            if slot.accepts(argument.slot, argument.preposition):
                match.matched[argument.arg_id] = slot
                free.remove(slot)
                break
        else:
            match.unmatched.append(argument)

    for slot in free:
        if slot.optional:
            continue
        if slot.slot in site.licensed_implicit:
            match.implicit.append(slot)
        else:
            match.missing.append(slot)
    return match


class AssignmentStrategy(Protocol):
    """Protocol for frame scoring strategies."""

    name: str

    def score(self, match: SlotMatch, cues: Mapping[str, ArgumentCues]) -> float:
        """Return a score in [0, 1] for one frame alignment."""
        ...


class PatternMatchStrategy:
    """Syntactic pattern: slot kinds and prepositions line up exactly."""

    name = "pattern"

    def score(self, match: SlotMatch, cues: Mapping[str, ArgumentCues]) -> float:
        filled = len(match.matched) + len(match.implicit)
        required = len(match.frame.required_slots) + sum(
            1 for s in match.matched.values() if s.optional
        )
        denominator = max(match.argument_count + len(match.implicit), required)
        if denominator == 0:
            return 1.0
        return filled / denominator


class SelectionalStrategy:
    """Selectional restrictions: animacy and concreteness of the fillers."""

    name = "selectional"

    def score(self, match: SlotMatch, cues: Mapping[str, ArgumentCues]) -> float:
        fits = [self.fit(slot, cues[arg_id]) for arg_id, slot in match.matched.items()]
        if not fits:
            return 1.0
        return sum(fits) / len(fits)

    @staticmethod
    def fit(slot: FrameSlot, cue: ArgumentCues) -> float:
        return cue.satisfies(slot.restriction)


class FrequencyStrategy:
    """Prior preference for frequent frames."""

    name = "frequency"

    def score(self, match: SlotMatch, cues: Mapping[str, ArgumentCues]) -> float:
        return match.frame.frequency


DEFAULT_STRATEGIES: tuple[AssignmentStrategy, ...] = (
    PatternMatchStrategy(),
    SelectionalStrategy(),
    FrequencyStrategy(),
)
