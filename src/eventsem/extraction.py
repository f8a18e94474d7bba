"""Predicate and argument discovery over the dependency graph.

Finds every clause-heading predicate (verbs, and adjectives that carry a
copula or subject) and collects its syntactic arguments in surface form.
Reconstruction of displaced arguments happens later, in
``eventsem.movement.reconstruction``.
"""

from __future__ import annotations

import logging

from .models import Sentence, UPos, Word
from .types import Argument, PredicateSite, SyntacticSlot, Voice

logger = logging.getLogger(__name__)


# Relations whose dependents never head a predicate of their own
NON_PREDICATE_RELATIONS = frozenset({"aux", "cop", "amod", "compound", "fixed", "flat", "goeswith"})

# Obliques that behave as adjuncts even with a case marker
ADJUNCT_OBLIQUES = frozenset({"obl:tmod", "obl:npmod", "nmod:tmod"})

NONFINITE_FORMS = frozenset({"Inf", "Part", "Ger"})

# Heads of duration and time-point obliques ("for an hour", "on Monday")
TIME_NOUNS = frozenset({
    "second", "minute", "hour", "day", "week", "month", "year", "moment",
    "while", "decade", "century", "morning", "evening", "night", "monday",
    "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
})

# Change-of-state verbs that take the middle alternation ("The door opened")
MIDDLE_VERBS = frozenset({
    "open", "close", "break", "melt", "freeze", "dissolve", "move", "turn",
    "bend", "fold", "split", "crack", "start", "begin", "stop", "end",
    "change", "improve", "worsen", "increase", "decrease",
})

# Adverbs of facility that license a middle on any verb ("The book reads easily")
FACILITY_ADVERBS = frozenset({"easily", "well", "smoothly", "nicely", "badly", "poorly"})

AGENTIVE_PRONOUNS = frozenset({"i", "you", "he", "she", "we", "they"})

RECIPROCALS = {"each": "other", "one": "another"}


class PredicateExtractor:
    """Extracts predicate sites in surface (pre-reconstruction) form."""

    def extract(self, sentence: Sentence) -> list[PredicateSite]:
        predicates = [w for w in sentence if self.is_predicate(sentence, w)]
        predicate_indices = {w.index for w in predicates}

        sites = []
        for word in predicates:
            parent = self._parent_predicate(sentence, word, predicate_indices)
            passive = self.is_passive(sentence, word)
            sites.append(
                PredicateSite(
                    index=word.index,
                    lemma=word.norm,
                    arguments=(),
                    finite=self.is_finite(sentence, word),
                    passive=passive,
                    voice=self.voice_of(sentence, word, passive),
                    imperative=self._is_imperative(sentence, word),
                    clause_relation=word.deprel,
                    parent_index=parent,
                    depth=self._depth(sentence, word, predicate_indices),
                )
            )

        result = []
        for site in sites:
            arguments = self._arguments(sentence, site, predicate_indices)
            result.append(site.with_arguments(arguments))
            logger.debug(
                f"Predicate {site.lemma}@{site.index}: "
                f"{[a.arg_id for a in arguments]} finite={site.finite} voice={site.voice.value}"
            )
        return result

    # -------------------------------------------------------------------------
    # Predicate properties
    # -------------------------------------------------------------------------

    @staticmethod
    def is_predicate(sentence: Sentence, word: Word) -> bool:
        if word.is_rel(*NON_PREDICATE_RELATIONS) or word.deprel == "aux:pass":
            return False
        if word.upos is UPos.VERB:
            return True
        if word.upos is UPos.ADJ:
            return bool(sentence.dependents(word.index, "cop", "nsubj"))
        # Copula-less existential "be" tagged AUX at the root
        if word.upos is UPos.AUX and word.deprel == "root":
            return True
        return False

    @staticmethod
    def is_finite(sentence: Sentence, word: Word) -> bool:
        for marker in sentence.dependents(word.index, "mark"):
            if marker.norm == "to":
                return False
        if word.is_rel("xcomp"):
            return False
        form = word.feature("VerbForm")
        if form == "Fin" or "Tense" in word.feats or "Mood" in word.feats:
            return True
        if sentence.dependents(word.index, "aux", "aux:pass", "cop"):
            return True
        if form in NONFINITE_FORMS:
            return False
        return True

    @staticmethod
    def is_passive(sentence: Sentence, word: Word) -> bool:
        if sentence.dependents(word.index, "nsubj:pass", "csubj:pass", "aux:pass"):
            return True
        if word.feature("Voice") == "Pass":
            return True
        if word.feature("VerbForm") == "Part":
            # "get" passives are often annotated with plain aux
            for aux in sentence.dependents(word.index, "aux"):
                if aux.norm == "get":
                    return True
        return False

    @staticmethod
    def voice_of(sentence: Sentence, word: Word, passive: bool) -> Voice:
        """Classify voice from passive marking, reflexive objects and middle cues."""
        if passive:
            return Voice.PASSIVE

        objects = sentence.dependents(word.index, "obj", "iobj")
        for obj in objects:
            partner = RECIPROCALS.get(obj.norm)
            if partner and any(d.norm == partner for d in sentence.dependents(obj.index)):
                return Voice.RECIPROCAL
            if obj.feature("Reflex") == "Yes" or obj.norm.endswith(("self", "selves")):
                return Voice.REFLEXIVE

        if objects or word.upos is not UPos.VERB:
            return Voice.ACTIVE
        subject = sentence.first_dependent(word.index, "nsubj")
        if subject is None or subject.upos is UPos.PROPN or subject.norm in AGENTIVE_PRONOUNS:
            return Voice.ACTIVE
        if word.norm in MIDDLE_VERBS:
            return Voice.MIDDLE
        if any(a.norm in FACILITY_ADVERBS for a in sentence.dependents(word.index, "advmod")):
            return Voice.MIDDLE
        return Voice.ACTIVE

    @staticmethod
    def _is_imperative(sentence: Sentence, word: Word) -> bool:
        if word.feature("Mood") == "Imp":
            return True
        if word.deprel != "root" or word.upos is not UPos.VERB:
            return False
        if sentence.dependents(word.index, "nsubj", "nsubj:pass", "expl", "aux", "aux:pass"):
            return False
        if word.feature("VerbForm") in NONFINITE_FORMS - {"Inf"}:
            return False
        leading = [w for w in sentence.words[: word.index - 1] if w.upos not in (UPos.PUNCT, UPos.INTJ)]
        return not leading

    @staticmethod
    def _parent_predicate(sentence: Sentence, word: Word, predicates: set[int]) -> int | None:
        head = word.head
        while head:
            if head in predicates:
                return head
            head = sentence.get(head).head
        return None

    def _depth(self, sentence: Sentence, word: Word, predicates: set[int]) -> int:
        depth = 0
        parent = self._parent_predicate(sentence, word, predicates)
        while parent is not None:
            depth += 1
            parent = self._parent_predicate(sentence, sentence.get(parent), predicates)
        return depth

    # -------------------------------------------------------------------------
    # Arguments
    # -------------------------------------------------------------------------

    def _arguments(
        self,
        sentence: Sentence,
        site: PredicateSite,
        predicates: set[int],
    ) -> list[Argument]:
        arguments = []
        for dep in sentence.dependents(site.index):
            slot, preposition = self._slot_for(sentence, dep, predicates)
            if slot is None:
                continue
            arguments.append(
                Argument(
                    predicate_index=site.index,
                    slot=slot,
                    word_index=dep.index,
                    preposition=preposition,
                )
            )
        return arguments

    @staticmethod
    def _slot_for(
        sentence: Sentence,
        dep: Word,
        predicates: set[int],
    ) -> tuple[SyntacticSlot | None, str | None]:
        if dep.is_rel("nsubj", "csubj"):
            return SyntacticSlot.SUBJECT, None
        if dep.is_rel("obj"):
            return SyntacticSlot.OBJECT, None
        if dep.is_rel("iobj"):
            return SyntacticSlot.INDIRECT_OBJECT, None
        if dep.is_rel("obl"):
            if dep.deprel in ADJUNCT_OBLIQUES or dep.norm in TIME_NOUNS:
                return None, None
            preposition = sentence.preposition_of(dep.index)
            if dep.deprel == "obl:agent" and preposition is None:
                preposition = "by"
            if preposition is None:
                return None, None
            return SyntacticSlot.OBLIQUE, preposition
        if dep.is_rel("ccomp", "xcomp") and dep.index in predicates:
            return SyntacticSlot.CLAUSAL_COMPLEMENT, None
        return None, None
