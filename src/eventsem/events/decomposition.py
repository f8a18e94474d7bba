"""Little-v event decomposition.

Causatives and resultatives decompose as ``CAUSE(e, BECOME(result))``:
the main event gets LittleV CAUSE and a nested result-state sub-event.
Cues, in order:

1. resultative adjectives and particles (``hammer the metal flat``)
2. lexical causatives (``break`` -> ``broken``, ``kill`` -> ``dead``)
3. causative morphology (``-ify``, ``-ize``, ``-en``)

Without a causing argument a change of state is BECOME; agentive events
are DO and states are BE.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..models import Sentence, UPos, Word
from ..types import PredicateSite, SyntacticSlot, ThetaRole
from .models import AspectualClass, LittleV

logger = logging.getLogger(__name__)

LEXICAL_CAUSATIVES = {
    "break": "broken",
    "open": "open",
    "close": "closed",
    "kill": "dead",
    "melt": "melted",
    "freeze": "frozen",
    "shatter": "shattered",
    "dry": "dry",
    "empty": "empty",
    "clean": "clean",
    "fill": "full",
    "sink": "sunk",
    "burn": "burnt",
    "raise": "raised",
    "drop": "dropped",
    "bend": "bent",
    "crack": "cracked",
    "destroy": "destroyed",
    "split": "split",
    "warm": "warm",
    "cool": "cool",
}

CAUSATIVE_SUFFIXES = ("ify", "ize", "ise", "en")

# Words that end in a causative suffix without being causatives
SUFFIX_EXCEPTIONS = frozenset({
    "happen", "listen", "open", "threaten", "glisten", "reckon", "season",
    "realize", "recognize", "apologize", "criticize", "emphasize", "memorize",
    "summarize", "size", "seize", "prize", "testify", "qualify", "even",
    "garden", "chicken", "often", "given", "eaten", "seen", "taken", "written",
    "broken", "fallen", "driven", "spoken", "chosen", "forgotten", "gotten",
    "frozen", "hidden", "risen", "beaten", "bitten", "shaken", "stolen",
    "promise", "arise", "advise", "revise", "exercise", "supervise", "despise",
    "devise", "comprise", "franchise", "compromise",
})

RESULT_PARTICLES = frozenset({"open", "shut", "apart", "flat", "dry", "clean", "free", "loose", "dead"})

AGENTIVE_ROLES = (ThetaRole.AGENT, ThetaRole.CAUSE)


@dataclass(frozen=True)
class Decomposition:
    """Little-v analysis of one predicate.

    ``result_lemma`` and ``result_word`` describe the result state of a
    CAUSE decomposition; ``cue`` names what triggered it.
    """

    little_v: LittleV | None
    result_lemma: str | None = None
    result_word: int | None = None
    cue: str | None = None

    @property
    def has_result_state(self) -> bool:
        return self.little_v is LittleV.CAUSE and self.result_lemma is not None


def participle(lemma: str) -> str:
    """Regular past participle used as a result-state predicate."""
    if lemma.endswith("e"):
        return lemma + "d"
    if lemma.endswith("y") and len(lemma) > 1 and lemma[-2] not in "aeiou":
        return lemma[:-1] + "ied"
    return lemma + "ed"


class LittleVDecomposer:
    """Finds little-v cues on a predicate and its dependents."""

    def change_of_state(self, site: PredicateSite, sentence: Sentence) -> tuple[str | None, int | None, str | None]:
        """Return ``(result lemma, result word, cue)`` for a change-of-state predicate."""
        lemma = site.lemma

        resultative = self._resultative(site, sentence)
        if resultative is not None:
            return resultative.norm, resultative.index, "resultative"

        if lemma in LEXICAL_CAUSATIVES:
            return LEXICAL_CAUSATIVES[lemma], None, "lexical"

        if lemma not in SUFFIX_EXCEPTIONS and any(
            lemma.endswith(s) and len(lemma) > len(s) + 2 for s in CAUSATIVE_SUFFIXES
        ):
            return participle(lemma), None, "morphology"

        return None, None, None

    def decompose(
        self,
        site: PredicateSite,
        sentence: Sentence,
        roles: set[ThetaRole],
        aspect: AspectualClass,
    ) -> Decomposition:
        result_lemma, result_word, cue = self.change_of_state(site, sentence)
        has_undergoer = ThetaRole.PATIENT in roles or ThetaRole.THEME in roles
        causer = any(r in roles for r in AGENTIVE_ROLES) or (
            site.passive and SyntacticSlot.SUBJECT in site.licensed_implicit
        )

        if result_lemma is not None and has_undergoer and causer and site.has(SyntacticSlot.OBJECT):
            logger.debug(f"'{site.lemma}' decomposes as CAUSE ({cue}: {result_lemma})")
            return Decomposition(LittleV.CAUSE, result_lemma, result_word, cue)
        if result_lemma is not None and has_undergoer:
            return Decomposition(LittleV.BECOME, result_lemma, result_word, cue)
        if aspect is AspectualClass.STATE:
            return Decomposition(LittleV.BE)
        if ThetaRole.AGENT in roles:
            return Decomposition(LittleV.DO)
        return Decomposition(None)

    @staticmethod
    def _resultative(site: PredicateSite, sentence: Sentence) -> Word | None:
        if not site.has(SyntacticSlot.OBJECT):
            return None
        for dep in sentence.dependents(site.index, "xcomp"):
            if dep.upos is UPos.ADJ and not sentence.dependents(dep.index, "cop", "nsubj"):
                return dep
        for dep in sentence.dependents(site.index, "compound:prt"):
            if dep.norm in RESULT_PARTICLES:
                return dep
        return None
