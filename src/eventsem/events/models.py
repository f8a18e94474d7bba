"""Neo-Davidsonian event structures and discourse referents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from ..models import Sentence, UPos
from ..types import CANONICAL_ROLE_ORDER, ThetaRole, Voice

EventId = int
ReferentId = int


# =============================================================================
# Classification Enums
# =============================================================================


class AspectualClass(str, Enum):
    """Vendler class of an event predicate."""

    STATE = "state"
    ACTIVITY = "activity"
    ACCOMPLISHMENT = "accomplishment"
    ACHIEVEMENT = "achievement"

    @property
    def is_telic(self) -> bool:
        return self in (AspectualClass.ACCOMPLISHMENT, AspectualClass.ACHIEVEMENT)

    @property
    def is_dynamic(self) -> bool:
        return self is not AspectualClass.STATE

    @property
    def is_durative(self) -> bool:
        return self is not AspectualClass.ACHIEVEMENT

    def accepts_adverbial(self, preposition: str) -> bool:
        """``for X`` needs atelic, ``in X`` telic, ``at X`` punctual or state."""
        if preposition == "for":
            return not self.is_telic
        if preposition == "in":
            return self.is_telic
        if preposition == "at":
            return self in (AspectualClass.ACHIEVEMENT, AspectualClass.STATE)
        return True

    @property
    def allows_progressive(self) -> bool:
        return self is not AspectualClass.STATE


class LittleV(str, Enum):
    """Light verb heading a decomposed event."""

    CAUSE = "CAUSE"
    BECOME = "BECOME"
    DO = "DO"
    BE = "BE"


class ReferentKind(str, Enum):
    ENTITY = "entity"
    EVENT = "event"
    IMPLICIT = "implicit"


class Quantifier(str, Enum):
    UNIVERSAL = "universal"
    EXISTENTIAL = "existential"
    NEGATIVE = "negative"
    DEFINITE = "definite"
    PROPER = "proper"
    PRONOUN = "pronoun"
    WH = "wh"
    BARE = "bare"

    @property
    def is_quantificational(self) -> bool:
        return self in (Quantifier.UNIVERSAL, Quantifier.EXISTENTIAL, Quantifier.NEGATIVE)


DETERMINER_QUANTIFIERS = {
    "every": Quantifier.UNIVERSAL,
    "each": Quantifier.UNIVERSAL,
    "all": Quantifier.UNIVERSAL,
    "a": Quantifier.EXISTENTIAL,
    "an": Quantifier.EXISTENTIAL,
    "some": Quantifier.EXISTENTIAL,
    "several": Quantifier.EXISTENTIAL,
    "no": Quantifier.NEGATIVE,
    "the": Quantifier.DEFINITE,
    "this": Quantifier.DEFINITE,
    "that": Quantifier.DEFINITE,
    "these": Quantifier.DEFINITE,
    "those": Quantifier.DEFINITE,
    "which": Quantifier.WH,
    "what": Quantifier.WH,
    "whose": Quantifier.WH,
}

QUANTIFIED_PRONOUNS = {
    "everyone": Quantifier.UNIVERSAL,
    "everybody": Quantifier.UNIVERSAL,
    "everything": Quantifier.UNIVERSAL,
    "someone": Quantifier.EXISTENTIAL,
    "somebody": Quantifier.EXISTENTIAL,
    "something": Quantifier.EXISTENTIAL,
    "nobody": Quantifier.NEGATIVE,
    "nothing": Quantifier.NEGATIVE,
    "who": Quantifier.WH,
    "whom": Quantifier.WH,
    "what": Quantifier.WH,
    "which": Quantifier.WH,
}


def quantifier_of(sentence: Sentence, index: int) -> Quantifier:
    word = sentence.get(index)
    if word.norm in QUANTIFIED_PRONOUNS and word.upos in (UPos.PRON, UPos.NOUN, UPos.DET):
        return QUANTIFIED_PRONOUNS[word.norm]
    if word.upos is UPos.PROPN:
        return Quantifier.PROPER
    if word.upos is UPos.PRON:
        return Quantifier.PRONOUN
    determiner = sentence.determiner_of(index)
    if determiner in DETERMINER_QUANTIFIERS:
        return DETERMINER_QUANTIFIERS[determiner]
    if sentence.dependents(index, "nmod:poss"):
        return Quantifier.DEFINITE
    if sentence.dependents(index, "nummod"):
        return Quantifier.EXISTENTIAL
    return Quantifier.BARE


# =============================================================================
# Referents
# =============================================================================


@dataclass(frozen=True)
class Referent:
    """A discourse referent: an entity, an event, or an implicit participant."""

    referent_id: ReferentId
    kind: ReferentKind
    label: str
    word_index: int | None = None
    quantifier: Quantifier = Quantifier.BARE
    event_id: EventId | None = None

    @property
    def is_quantified(self) -> bool:
        return self.quantifier.is_quantificational

    @property
    def name(self) -> str:
        """Variable name used in DRSs and terms (``x3``, ``e1``)."""
        prefix = "e" if self.kind is ReferentKind.EVENT else "x"
        return f"{prefix}{self.referent_id}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.referent_id,
            "name": self.name,
            "kind": self.kind.value,
            "label": self.label,
            "word": self.word_index,
            "quantifier": self.quantifier.value,
            "event": self.event_id,
        }


class ReferentTable:
    """Arena of referents for one sentence, keyed by integer id."""

    def __init__(self) -> None:
        self._referents: dict[ReferentId, Referent] = {}
        self._by_word: dict[int, ReferentId] = {}
        self._by_event: dict[EventId, ReferentId] = {}

    def __len__(self) -> int:
        return len(self._referents)

    def __iter__(self) -> Iterator[Referent]:
        return iter(self._referents.values())

    def get(self, referent_id: ReferentId) -> Referent:
        return self._referents[referent_id]

    def for_word(self, word_index: int) -> ReferentId | None:
        return self._by_word.get(word_index)

    def for_event(self, event_id: EventId) -> ReferentId | None:
        return self._by_event.get(event_id)

    def entity_for_word(self, word_index: int, sentence: Sentence) -> ReferentId:
        """Referent of a nominal word; one per word."""
        if word_index in self._by_word:
            return self._by_word[word_index]
        word = sentence.get(word_index)
        referent = self._add(
            kind=ReferentKind.ENTITY,
            label=word.lemma if word.upos is UPos.PROPN else word.norm,
            word_index=word_index,
            quantifier=quantifier_of(sentence, word_index),
        )
        self._by_word[word_index] = referent.referent_id
        return referent.referent_id

    def implicit(self, label: str) -> ReferentId:
        return self._add(kind=ReferentKind.IMPLICIT, label=label).referent_id

    def event_referent(self, event_id: EventId, label: str = "event") -> ReferentId:
        if event_id in self._by_event:
            return self._by_event[event_id]
        referent = self._add(kind=ReferentKind.EVENT, label=label, event_id=event_id)
        self._by_event[event_id] = referent.referent_id
        return referent.referent_id

    def _add(self, **kwargs: Any) -> Referent:
        referent = Referent(referent_id=len(self._referents) + 1, **kwargs)
        self._referents[referent.referent_id] = referent
        return referent

    def to_dict(self) -> list[dict[str, Any]]:
        """Serialize to dictionary."""
        return [r.to_dict() for r in self._referents.values()]


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class Predicate:
    lemma: str
    frame_id: str | None = None
    word_index: int | None = None


class ModifierKind(str, Enum):
    MANNER = "manner"
    TEMPORAL = "temporal"
    LOCATIVE = "locative"
    DEGREE = "degree"
    NEGATION = "negation"
    CONDITIONAL = "conditional"
    OTHER = "other"


@dataclass(frozen=True)
class Modifier:
    """A non-theta-marked adjunct. ``event_id`` links clausal modifiers."""

    kind: ModifierKind
    lemma: str
    word_index: int | None = None
    event_id: EventId | None = None


@dataclass(frozen=True)
class Event:
    """One predicate's event with its participants.

    Participants map each role to exactly one referent, so the map is
    role-unique by construction.
    """

    event_id: EventId
    predicate: Predicate
    participants: Mapping[ThetaRole, ReferentId] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    modifiers: tuple[Modifier, ...] = ()
    aspect: AspectualClass = AspectualClass.ACTIVITY
    little_v: LittleV | None = None
    caused: EventId | None = None
    complement: EventId | None = None
    parent: EventId | None = None
    clause_relation: str = "root"
    voice: Voice = Voice.ACTIVE
    polarity: bool = True
    confidence: float = 1.0
    is_sub_event: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.participants, MappingProxyType):
            object.__setattr__(self, "participants", MappingProxyType(dict(self.participants)))

    @property
    def lemma(self) -> str:
        return self.predicate.lemma

    @property
    def roles(self) -> tuple[ThetaRole, ...]:
        """Participant roles in canonical order."""
        return tuple(r for r in CANONICAL_ROLE_ORDER if r in self.participants)

    def participant(self, role: ThetaRole) -> ReferentId | None:
        return self.participants.get(role)

    def modifiers_of(self, kind: ModifierKind) -> list[Modifier]:
        return [m for m in self.modifiers if m.kind is kind]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.event_id,
            "predicate": self.predicate.lemma,
            "frame": self.predicate.frame_id,
            "word": self.predicate.word_index,
            "participants": {r.value: self.participants[r] for r in self.roles},
            "modifiers": [
                {"kind": m.kind.value, "lemma": m.lemma, "word": m.word_index, "event": m.event_id}
                for m in self.modifiers
            ],
            "aspect": self.aspect.value,
            "little_v": self.little_v.value if self.little_v else None,
            "caused": self.caused,
            "complement": self.complement,
            "parent": self.parent,
            "clause_relation": self.clause_relation,
            "voice": self.voice.value,
            "polarity": self.polarity,
            "confidence": round(self.confidence, 4),
            "sub_event": self.is_sub_event,
        }
