"""Aspectual (Vendler) classification of predicates."""

from __future__ import annotations

from ..extraction import TIME_NOUNS
from ..lexicon.types import Frame
from ..models import Sentence, UPos
from ..types import PredicateSite, SyntacticSlot
from .models import AspectualClass

STATE_VERBS = frozenset({
    "be", "have", "own", "possess", "know", "believe", "like", "love", "hate",
    "want", "need", "seem", "appear", "resemble", "contain", "consist",
    "belong", "exist", "remain", "mean", "understand", "fear", "prefer",
    "think", "consider", "expect", "tend", "happen", "doubt", "deserve",
    "matter", "cost", "weigh", "equal",
})

ACHIEVEMENT_VERBS = frozenset({
    "arrive", "die", "find", "notice", "recognize", "reach", "win", "lose",
    "leave", "explode", "start", "begin", "stop", "finish", "realize",
    "spot", "hit", "break", "shatter", "pop", "land", "kill", "open",
    "close", "drop",
})

ACTIVITY_VERBS = frozenset({
    "run", "walk", "swim", "sleep", "chase", "push", "pull", "dance", "sing",
    "laugh", "cry", "work", "play", "talk", "rain", "wander", "drive",
    "smile", "wait",
})

# Verbs whose object measures out the event
INCREMENTAL_VERBS = frozenset({
    "eat", "devour", "drink", "read", "write", "build", "cook", "paint",
    "draw", "make", "create", "destroy", "consume", "knit", "bake", "compose",
    "mow", "peel",
})

STATE_CLASSES = frozenset({"stative", "psych", "perception", "raising", "tough", "existential"})
CHANGE_CLASSES = frozenset({"causative", "unaccusative"})

QUANTIZING_DETERMINERS = frozenset({
    "a", "an", "the", "this", "that", "these", "those", "every", "each", "no",
    "my", "your", "his", "her", "its", "our", "their",
})


class AspectClassifier:
    """Assigns a Vendler class from lemma, frame class, objects and adverbials."""

    def classify(
        self,
        site: PredicateSite,
        frame: Frame | None,
        sentence: Sentence,
        changes_state: bool = False,
    ) -> AspectualClass:
        lemma = site.lemma
        verb_class = frame.verb_class if frame else None
        word = sentence.get(site.index)

        if word.upos is UPos.ADJ or (lemma in STATE_VERBS and not changes_state):
            base = AspectualClass.STATE
        elif verb_class in STATE_CLASSES and not changes_state:
            base = AspectualClass.STATE
        elif changes_state or verb_class in CHANGE_CLASSES:
            base = AspectualClass.ACHIEVEMENT if lemma in ACHIEVEMENT_VERBS else AspectualClass.ACCOMPLISHMENT
        elif verb_class == "achievement" or lemma in ACHIEVEMENT_VERBS:
            base = AspectualClass.ACHIEVEMENT
        elif lemma in INCREMENTAL_VERBS or verb_class == "incremental":
            obj = site.argument(SyntacticSlot.OBJECT)
            if obj is not None and self.is_quantized(sentence, obj.referent_index):
                base = AspectualClass.ACCOMPLISHMENT
            else:
                base = AspectualClass.ACTIVITY
        elif site.argument(SyntacticSlot.OBLIQUE, "to") is not None and (
            lemma in ACTIVITY_VERBS or verb_class == "activity"
        ):
            # "run to the store"
            base = AspectualClass.ACCOMPLISHMENT
        else:
            base = AspectualClass.ACTIVITY

        return self._adjust_for_adverbials(base, site, sentence)

    @staticmethod
    def is_quantized(sentence: Sentence, index: int) -> bool:
        """A bounded nominal: determiner, numeral, proper name or pronoun."""
        word = sentence.get(index)
        if word.upos in (UPos.PROPN, UPos.PRON):
            return True
        if sentence.determiner_of(index) in QUANTIZING_DETERMINERS:
            return True
        if sentence.dependents(index, "nummod", "nmod:poss"):
            return True
        return False

    @staticmethod
    def time_adverbial(sentence: Sentence, index: int) -> str | None:
        """Preposition of a ``for/in <time>`` adverbial on the predicate."""
        for dep in sentence.dependents(index, "obl", "nmod"):
            if dep.norm not in TIME_NOUNS:
                continue
            preposition = sentence.preposition_of(dep.index)
            if preposition in ("for", "in"):
                return preposition
        return None

    def _adjust_for_adverbials(
        self,
        base: AspectualClass,
        site: PredicateSite,
        sentence: Sentence,
    ) -> AspectualClass:
        adverbial = self.time_adverbial(sentence, site.index)
        if adverbial == "in" and base is AspectualClass.ACTIVITY:
            return AspectualClass.ACCOMPLISHMENT
        if adverbial == "for" and base is AspectualClass.ACCOMPLISHMENT:
            return AspectualClass.ACTIVITY
        return base
