"""Morphosyntactic cues used for selectional restriction checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..lexicon.types import SelectionalRestriction
from ..models import Sentence, UPos
from ..types import Argument


class Animacy(str, Enum):
    ANIMATE = "animate"
    INANIMATE = "inanimate"
    UNKNOWN = "unknown"


class Definiteness(str, Enum):
    DEFINITE = "definite"
    INDEFINITE = "indefinite"
    BARE = "bare"


ANIMATE_PRONOUNS = frozenset({
    "i", "you", "he", "she", "we", "they", "me", "him", "her", "us", "them",
    "who", "whom", "someone", "somebody", "everyone", "everybody", "anyone",
    "anybody", "nobody", "myself", "yourself", "himself", "herself",
    "ourselves", "themselves",
})

INANIMATE_PRONOUNS = frozenset({
    "it", "what", "something", "everything", "nothing", "anything", "this",
    "that", "these", "those", "which",
})

ANIMATE_NOUNS = frozenset({
    "person", "people", "man", "woman", "child", "boy", "girl", "baby",
    "student", "teacher", "doctor", "nurse", "lawyer", "farmer", "friend",
    "king", "queen", "chef", "author", "worker", "guest", "player", "parent",
    "mother", "father", "sister", "brother", "dog", "cat", "bird", "horse",
    "mouse", "animal", "customer", "manager", "soldier", "police", "officer",
})

ABSTRACT_NOUNS = frozenset({
    "idea", "fact", "truth", "answer", "problem", "question", "theory",
    "freedom", "plan", "reason", "news", "story", "love", "time", "decision",
    "belief", "opinion", "rumor", "claim", "proposal", "result", "thought",
})

DEFINITE_DETERMINERS = frozenset({"the", "this", "that", "these", "those", "my", "your", "his", "her", "its", "our", "their"})
INDEFINITE_DETERMINERS = frozenset({"a", "an", "some", "any", "every", "each", "no", "all", "which", "what"})


@dataclass(frozen=True)
class ArgumentCues:
    """Observable properties of an argument's filler."""

    animacy: Animacy
    definiteness: Definiteness
    concrete: bool
    clausal: bool
    lemma: str

    def satisfies(self, restriction: SelectionalRestriction) -> float:
        """Degree in [0, 1] to which these cues meet a restriction."""
        if restriction is SelectionalRestriction.ANY:
            return 1.0
        if restriction is SelectionalRestriction.PROPOSITION:
            if self.clausal:
                return 1.0
            return 0.5 if not self.concrete else 0.0
        if self.clausal:
            return 1.0 if restriction is SelectionalRestriction.ABSTRACT else 0.0
        if restriction is SelectionalRestriction.ANIMATE:
            return {Animacy.ANIMATE: 1.0, Animacy.UNKNOWN: 0.5, Animacy.INANIMATE: 0.0}[self.animacy]
        if restriction is SelectionalRestriction.INANIMATE:
            return {Animacy.ANIMATE: 0.0, Animacy.UNKNOWN: 0.5, Animacy.INANIMATE: 1.0}[self.animacy]
        if restriction is SelectionalRestriction.CONCRETE:
            return 1.0 if self.concrete else 0.2
        if restriction is SelectionalRestriction.ABSTRACT:
            return 0.3 if self.concrete else 1.0
        if restriction is SelectionalRestriction.LOCATION:
            return 0.5 if self.animacy is Animacy.ANIMATE else 1.0
        return 1.0


def cues_for(argument: Argument, sentence: Sentence) -> ArgumentCues:
    if argument.is_clausal:
        word = sentence.get(argument.word_index)
        return ArgumentCues(Animacy.INANIMATE, Definiteness.BARE, False, True, word.norm)

    word = sentence.get(argument.referent_index)
    return ArgumentCues(
        animacy=animacy_of(sentence, word.index),
        definiteness=definiteness_of(sentence, word.index),
        concrete=word.norm not in ABSTRACT_NOUNS,
        clausal=False,
        lemma=word.norm,
    )


def animacy_of(sentence: Sentence, index: int) -> Animacy:
    word = sentence.get(index)
    feature = word.feature("Animacy")
    if feature in ("Anim", "Hum"):
        return Animacy.ANIMATE
    if feature == "Inan":
        return Animacy.INANIMATE
    if word.upos is UPos.PROPN:
        return Animacy.ANIMATE
    if word.upos is UPos.PRON:
        if word.norm in ANIMATE_PRONOUNS:
            return Animacy.ANIMATE
        if word.norm in INANIMATE_PRONOUNS:
            return Animacy.INANIMATE
        return Animacy.UNKNOWN
    if word.norm in ANIMATE_NOUNS:
        return Animacy.ANIMATE
    if word.upos is UPos.NOUN and word.norm in ABSTRACT_NOUNS:
        return Animacy.INANIMATE
    if word.upos is UPos.NOUN:
        return Animacy.UNKNOWN
    return Animacy.INANIMATE


def definiteness_of(sentence: Sentence, index: int) -> Definiteness:
    word = sentence.get(index)
    if word.upos in (UPos.PROPN, UPos.PRON):
        return Definiteness.DEFINITE
    if word.feature("Definite") == "Def":
        return Definiteness.DEFINITE
    determiner = sentence.determiner_of(index)
    if determiner in DEFINITE_DETERMINERS:
        return Definiteness.DEFINITE
    if determiner in INDEFINITE_DETERMINERS:
        return Definiteness.INDEFINITE
    if sentence.dependents(index, "nmod:poss"):
        return Definiteness.DEFINITE
    return Definiteness.BARE
