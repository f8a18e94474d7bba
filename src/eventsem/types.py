"""Core argument-structure types shared by every analysis stage.

Thematic roles, syntactic slots, arguments and predicate sites. All of
them are immutable; reconstruction builds replacements instead of
mutating.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


# =============================================================================
# Theta Roles
# =============================================================================


class ThetaRole(str, Enum):
    """Closed inventory of thematic roles."""

    AGENT = "agent"
    PATIENT = "patient"
    THEME = "theme"
    EXPERIENCER = "experiencer"
    RECIPIENT = "recipient"
    BENEFACTIVE = "benefactive"
    INSTRUMENT = "instrument"
    COMITATIVE = "comitative"
    LOCATION = "location"
    SOURCE = "source"
    GOAL = "goal"
    DIRECTION = "direction"
    TEMPORAL = "temporal"
    FREQUENCY = "frequency"
    MEASURE = "measure"
    CAUSE = "cause"
    MANNER = "manner"
    CONTROLLED_SUBJECT = "controlled_subject"
    STIMULUS = "stimulus"

    @property
    def is_core(self) -> bool:
        return self in CORE_ROLES

    @property
    def label(self) -> str:
        """CamelCase name used in logical forms (``ControlledSubject``)."""
        return "".join(part.capitalize() for part in self.value.split("_"))

    @classmethod
    def parse(cls, value: str) -> "ThetaRole":
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        for role in cls:
            if key in (role.value, role.label.lower()):
                return role
        raise ValueError(f"Unknown theta role: {value!r}")


CORE_ROLES = frozenset({
    ThetaRole.AGENT,
    ThetaRole.PATIENT,
    ThetaRole.THEME,
    ThetaRole.EXPERIENCER,
    ThetaRole.RECIPIENT,
})

# Agent first, then Patient/Theme, then the rest
CANONICAL_ROLE_ORDER: tuple[ThetaRole, ...] = (
    ThetaRole.AGENT,
    ThetaRole.PATIENT,
    ThetaRole.THEME,
    ThetaRole.EXPERIENCER,
    ThetaRole.STIMULUS,
    ThetaRole.CONTROLLED_SUBJECT,
    ThetaRole.RECIPIENT,
    ThetaRole.BENEFACTIVE,
    ThetaRole.GOAL,
    ThetaRole.SOURCE,
    ThetaRole.DIRECTION,
    ThetaRole.LOCATION,
    ThetaRole.INSTRUMENT,
    ThetaRole.COMITATIVE,
    ThetaRole.MANNER,
    ThetaRole.CAUSE,
    ThetaRole.MEASURE,
    ThetaRole.FREQUENCY,
    ThetaRole.TEMPORAL,
)


def canonical_rank(role: ThetaRole) -> int:
    return CANONICAL_ROLE_ORDER.index(role)


# =============================================================================
# Arguments
# =============================================================================


class SyntacticSlot(str, Enum):
    """Grammatical position an argument occupies relative to its predicate."""

    SUBJECT = "subject"
    OBJECT = "object"
    INDIRECT_OBJECT = "indirect_object"
    OBLIQUE = "oblique"
    CLAUSAL_COMPLEMENT = "clausal_complement"

    @property
    def is_core(self) -> bool:
        return self is not SyntacticSlot.OBLIQUE


SLOT_ORDER = (
    SyntacticSlot.SUBJECT,
    SyntacticSlot.OBJECT,
    SyntacticSlot.INDIRECT_OBJECT,
    SyntacticSlot.CLAUSAL_COMPLEMENT,
    SyntacticSlot.OBLIQUE,
)


class ArgumentOrigin(str, Enum):
    """How an argument came to occupy its slot."""

    OVERT = "overt"            # As parsed
    TRACE = "trace"            # Reconstructed into a movement chain's tail
    CONTROLLED = "controlled"  # Subject of a control complement
    DEMOTED = "demoted"        # Passive by-phrase restored to subject
    SHARED = "shared"          # Subject of a coordinated predicate, from its first conjunct


class Voice(str, Enum):
    """Voice of a predicate.

    Middle verbs keep active morphology but suppress the agent, so their
    subject is a Theme ("The door opened", "The book reads easily").
    """

    ACTIVE = "active"
    PASSIVE = "passive"
    MIDDLE = "middle"
    REFLEXIVE = "reflexive"
    RECIPROCAL = "reciprocal"


@dataclass(frozen=True)
class Argument:
    """One syntactic argument of a predicate.

    For clausal complements ``word_index`` is the complement's predicate.
    ``antecedent_index`` points at the word whose referent the argument
    denotes when that differs from the word itself (relativizers).
    """

    predicate_index: int
    slot: SyntacticSlot
    word_index: int
    preposition: str | None = None
    origin: ArgumentOrigin = ArgumentOrigin.OVERT
    antecedent_index: int | None = None

    @property
    def arg_id(self) -> str:
        slot = self.slot.value
        if self.preposition:
            slot = f"{slot}:{self.preposition}"
        return f"p{self.predicate_index}:{slot}:w{self.word_index}"

    @property
    def referent_index(self) -> int:
        """Word whose discourse referent fills this argument."""
        return self.antecedent_index if self.antecedent_index is not None else self.word_index

    @property
    def is_clausal(self) -> bool:
        return self.slot is SyntacticSlot.CLAUSAL_COMPLEMENT

    def moved_to(self, predicate_index: int, slot: SyntacticSlot, origin: ArgumentOrigin) -> "Argument":
        return replace(
            self,
            predicate_index=predicate_index,
            slot=slot,
            preposition=None,
            origin=origin,
        )


# =============================================================================
# Predicate Sites
# =============================================================================


@dataclass(frozen=True)
class PredicateSite:
    """A predicate word with its arguments and clause properties."""

    index: int
    lemma: str
    arguments: tuple[Argument, ...] = ()
    finite: bool = True
    passive: bool = False
    voice: Voice = Voice.ACTIVE
    imperative: bool = False
    clause_relation: str = "root"
    parent_index: int | None = None
    depth: int = 0
    licensed_implicit: frozenset[SyntacticSlot] = field(default_factory=frozenset)
    """Slots that may stay empty because a default insertion rule fills them."""

    def argument(self, slot: SyntacticSlot, preposition: str | None = None) -> Argument | None:
        for arg in self.arguments:
            if arg.slot is slot and (preposition is None or arg.preposition == preposition):
                return arg
        return None

    def has(self, slot: SyntacticSlot) -> bool:
        return self.argument(slot) is not None

    def with_arguments(
        self,
        arguments: list[Argument] | tuple[Argument, ...],
        licensed: frozenset[SyntacticSlot] | None = None,
    ) -> "PredicateSite":
        ordered = tuple(sorted(arguments, key=_argument_sort_key))
        return replace(
            self,
            arguments=ordered,
            licensed_implicit=self.licensed_implicit if licensed is None else licensed,
        )

    @property
    def is_relative_clause(self) -> bool:
        return self.clause_relation.startswith("acl")


def _argument_sort_key(arg: Argument) -> tuple[int, int]:
    return SLOT_ORDER.index(arg.slot), arg.word_index
