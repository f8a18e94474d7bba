"""Movement detection and chain building.

Each trigger runs a small state machine:

    NO_SIGNAL -> SIGNAL_DETECTED -> CLASSIFIED -> CHAIN_BUILT

Detection is evidence-gated: a missed signal yields no chain and never an
error. Triggers:

- passive: auxiliary + participle, ``nsubj:pass``, optional by-phrase
- wh: interrogative argument fronted before its predicate
- relative: relative clause with relativizer or gap
- topicalization: object fronted before the subject
- raising: raising verb whose complement lacks its own subject
- ecm: exceptional case marking verb with object + infinitive
- tough: tough adjective with an object-gapped infinitive
- existential: expletive ``there`` with a postposed associate

Passive, raising, ECM, tough and existential chains are A-movement;
wh, relative and topicalization chains are A-bar movement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from ..config import MovementConfig
from ..diagnostics import Diagnostic, DiagnosticKind
from ..models import Sentence, UPos
from ..types import Argument, PredicateSite, SyntacticSlot
from .chains import ChainArena, ChainType, LocalityDomain, MovementChain, MovementKind, PositionKind

logger = logging.getLogger(__name__)

STAGE = "movement"

WH_WORDS = frozenset({"what", "who", "whom", "which", "whose"})
WH_DETERMINERS = frozenset({"which", "what", "whose"})
RELATIVIZERS = frozenset({"that", "which", "who", "whom", "whose"})
EXPLETIVES = frozenset({"there"})

RAISING_VERBS = frozenset({
    "seem", "appear", "happen", "tend", "prove", "turn", "begin", "start",
    "continue", "cease", "threaten", "chance",
})

ECM_VERBS = frozenset({
    "believe", "consider", "find", "think", "want", "expect", "know",
    "assume", "suppose", "imagine", "declare", "report", "claim",
})

TOUGH_ADJECTIVES = frozenset({
    "easy", "hard", "tough", "difficult", "impossible", "simple", "fun",
    "pleasant", "annoying", "dangerous",
})

# Clauses that block extraction
ISLAND_RELATIONS = frozenset({"acl", "advcl", "csubj"})


class DetectionState(str, Enum):
    NO_SIGNAL = "no_signal"
    SIGNAL_DETECTED = "signal_detected"
    CLASSIFIED = "classified"
    CHAIN_BUILT = "chain_built"


@dataclass
class MovementSignal:
    """Evidence for one displaced argument, tracked through detection states."""

    kind: MovementKind
    head_predicate: int
    head_slot: SyntacticSlot | None
    head_word: int | None
    tail_predicate: int
    tail_slot: SyntacticSlot
    tail_word: int | None = None
    confidence: float = 0.5
    evidence: list[str] = field(default_factory=list)
    # A-positions the argument passes through between Head and Tail
    via: list[tuple[int, SyntacticSlot]] = field(default_factory=list)
    state: DetectionState = DetectionState.SIGNAL_DETECTED
    chain_type: ChainType | None = None
    chain_id: int | None = None


@dataclass
class MovementAnalysis:
    """Chains found in one sentence, plus the signals behind them."""

    arena: ChainArena = field(default_factory=ChainArena)
    signals: list[MovementSignal] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def chains(self) -> list[MovementChain]:
        return self.arena.chains

    @property
    def has_movement(self) -> bool:
        return len(self.arena) > 0


class MovementDetector:
    """Detects movement triggers and builds chains into a ChainArena."""

    def __init__(self, config: MovementConfig | None = None):
        self.config = config or MovementConfig()

    def detect(self, sentence: Sentence, sites: Iterable[PredicateSite]) -> MovementAnalysis:
        sites = list(sites)
        by_index = {s.index: s for s in sites}
        analysis = MovementAnalysis()

        for site in sites:
            analysis.signals.extend(self._signals_for(sentence, site, by_index))

        for signal in analysis.signals:
            signal.chain_type = signal.kind.chain_type
            signal.state = DetectionState.CLASSIFIED
            self._build(sentence, signal, by_index, analysis)

        if analysis.has_movement:
            logger.debug(
                f"Built {len(analysis.arena)} chain(s): "
                f"{[c.kind.value for c in analysis.chains]}"
            )
        return analysis

    # -------------------------------------------------------------------------
    # Signal detection
    # -------------------------------------------------------------------------

    def _signals_for(
        self,
        sentence: Sentence,
        site: PredicateSite,
        by_index: dict[int, PredicateSite],
    ) -> list[MovementSignal]:
        detectors = (
            ("existential", self._existential),
            ("passive", self._passive),
            ("raising", self._raising),
            ("tough", self._tough),
            ("relative", self._relative),
            ("wh", self._wh),
            ("topicalization", self._topicalization),
        )
        signals = []
        for name, detector in detectors:
            if not self.config.is_enabled(name):
                continue
            signal = detector(sentence, site, by_index)
            if signal is not None:
                signals.append(signal)
        return signals

    def _passive(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        if not site.passive:
            return None
        subject = site.argument(SyntacticSlot.SUBJECT)
        if subject is None:
            return None

        if sentence.get(subject.word_index).is_rel("csubj"):
            tail_slot = SyntacticSlot.CLAUSAL_COMPLEMENT
        elif site.has(SyntacticSlot.OBJECT):
            tail_slot = SyntacticSlot.INDIRECT_OBJECT
        else:
            tail_slot = SyntacticSlot.OBJECT

        signal = MovementSignal(
            kind=MovementKind.PASSIVE,
            head_predicate=site.index,
            head_slot=SyntacticSlot.SUBJECT,
            head_word=subject.word_index,
            tail_predicate=site.index,
            tail_slot=tail_slot,
            confidence=0.4,
        )
        if sentence.get(subject.word_index).deprel.endswith(":pass"):
            signal.confidence += 0.2
            signal.evidence.append("passive subject")
        if _by_phrase(site) is not None:
            signal.confidence += 0.2
            signal.evidence.append("by-phrase")
        if sentence.dependents(site.index, "aux:pass") or sentence.get(site.index).feature("Voice") == "Pass":
            signal.confidence += 0.2
            signal.evidence.append("passive auxiliary")
        signal.confidence = min(1.0, signal.confidence)
        return signal

    def _existential(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        expletive = next(
            (w for w in sentence.dependents(site.index, "expl") if w.norm in EXPLETIVES),
            None,
        )
        subject = site.argument(SyntacticSlot.SUBJECT)
        if expletive is None or subject is None or subject.word_index < site.index:
            return None
        return MovementSignal(
            kind=MovementKind.EXISTENTIAL,
            head_predicate=site.index,
            head_slot=SyntacticSlot.SUBJECT,
            head_word=expletive.index,
            tail_predicate=site.index,
            tail_slot=SyntacticSlot.SUBJECT,
            tail_word=subject.word_index,
            confidence=0.9,
            evidence=["expletive subject", "postposed associate"],
        )

    def _raising(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        if site.passive:
            return None
        complement = _subjectless_complement(site, by_index)
        if complement is None:
            return None

        if site.lemma in RAISING_VERBS:
            raised = site.argument(SyntacticSlot.SUBJECT)
            kind, head_slot = MovementKind.RAISING, SyntacticSlot.SUBJECT
        elif site.lemma in ECM_VERBS and not complement.finite:
            raised = site.argument(SyntacticSlot.OBJECT)
            kind, head_slot = MovementKind.ECM, SyntacticSlot.OBJECT
        else:
            return None
        if raised is None:
            return None

        signal = MovementSignal(
            kind=kind,
            head_predicate=site.index,
            head_slot=head_slot,
            head_word=raised.word_index,
            tail_predicate=complement.index,
            tail_slot=SyntacticSlot.SUBJECT,
            confidence=0.5,
            evidence=[f"{kind.value} predicate '{site.lemma}'"],
        )
        if not complement.finite:
            signal.confidence += 0.3
            signal.evidence.append("infinitival complement")
        if any(m.norm == "to" for m in sentence.dependents(complement.index, "mark")):
            signal.confidence += 0.2
            signal.evidence.append("to-marker")
        if complement.passive:
            # "John seems to be liked": the raised subject starts as the passive object
            signal.via.append((complement.index, SyntacticSlot.SUBJECT))
            signal.tail_slot = (
                SyntacticSlot.INDIRECT_OBJECT if complement.has(SyntacticSlot.OBJECT) else SyntacticSlot.OBJECT
            )
            signal.evidence.append("passive complement")
        signal.confidence = min(1.0, signal.confidence)
        return signal

    def _tough(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        if site.lemma not in TOUGH_ADJECTIVES:
            return None
        subject = site.argument(SyntacticSlot.SUBJECT)
        complement = _subjectless_complement(site, by_index)
        if subject is None or complement is None or complement.finite:
            return None
        if complement.has(SyntacticSlot.OBJECT):
            return None
        return MovementSignal(
            kind=MovementKind.TOUGH,
            head_predicate=site.index,
            head_slot=SyntacticSlot.SUBJECT,
            head_word=subject.word_index,
            tail_predicate=complement.index,
            tail_slot=SyntacticSlot.OBJECT,
            confidence=0.8,
            evidence=[f"tough adjective '{site.lemma}'", "object gap in infinitive"],
        )

    def _relative(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        if not site.clause_relation.startswith("acl:relcl"):
            return None
        relativizer = next(
            (a for a in site.arguments if _is_relativizer(sentence, a)),
            None,
        )
        if relativizer is not None:
            word = sentence.get(relativizer.word_index)
            return MovementSignal(
                kind=MovementKind.RELATIVE,
                head_predicate=site.index,
                head_slot=None,
                head_word=relativizer.word_index,
                tail_predicate=site.index,
                tail_slot=relativizer.slot,
                confidence=0.8 if word.norm == "that" else 0.7,
                evidence=[f"relativizer '{word.norm}'"],
            )

        if not site.has(SyntacticSlot.SUBJECT):
            gap = SyntacticSlot.SUBJECT
        elif not site.has(SyntacticSlot.OBJECT) and not site.passive:
            gap = SyntacticSlot.OBJECT
        else:
            return None
        return MovementSignal(
            kind=MovementKind.RELATIVE,
            head_predicate=site.index,
            head_slot=None,
            head_word=None,
            tail_predicate=site.index,
            tail_slot=gap,
            confidence=0.5,
            evidence=["null operator", f"{gap.value} gap"],
        )

    def _wh(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        if site.is_relative_clause:
            return None
        for argument in site.arguments:
            if argument.slot is SyntacticSlot.SUBJECT or argument.is_clausal:
                continue
            if not _is_wh_phrase(sentence, argument.word_index):
                continue
            start = sentence.subtree_start(argument.word_index)
            if start > site.index:
                continue

            landing = site
            while landing.parent_index in by_index and start < _clause_start(
                sentence, landing.index, argument.word_index
            ):
                landing = by_index[landing.parent_index]

            signal = MovementSignal(
                kind=MovementKind.WH,
                head_predicate=landing.index,
                head_slot=None,
                head_word=argument.word_index,
                tail_predicate=site.index,
                tail_slot=argument.slot,
                confidence=0.5,
                evidence=["fronted wh-phrase"],
            )
            subject = landing.argument(SyntacticSlot.SUBJECT)
            if subject is not None and any(
                aux.index < subject.word_index for aux in sentence.dependents(landing.index, "aux")
            ):
                signal.confidence += 0.2
                signal.evidence.append("subject-auxiliary inversion")
            if sentence.words[-1].text == "?":
                signal.confidence += 0.2
                signal.evidence.append("question mark")
            signal.confidence = min(1.0, signal.confidence)
            return signal
        return None

    def _topicalization(self, sentence: Sentence, site: PredicateSite, by_index) -> MovementSignal | None:
        if site.is_relative_clause:
            return None
        obj = site.argument(SyntacticSlot.OBJECT)
        subject = site.argument(SyntacticSlot.SUBJECT)
        if obj is None or subject is None:
            return None
        if _is_wh_phrase(sentence, obj.word_index) or _is_relativizer(sentence, obj):
            return None
        if not (obj.word_index < subject.word_index and obj.word_index < site.index):
            return None

        signal = MovementSignal(
            kind=MovementKind.TOPICALIZATION,
            head_predicate=site.index,
            head_slot=None,
            head_word=obj.word_index,
            tail_predicate=site.index,
            tail_slot=SyntacticSlot.OBJECT,
            confidence=0.6,
            evidence=["object before subject"],
        )
        phrase_end = sentence.subtree(obj.word_index)[-1]
        if phrase_end < len(sentence) and sentence.get(phrase_end + 1).text == ",":
            signal.confidence += 0.2
            signal.evidence.append("comma after fronted object")
        return signal

    # -------------------------------------------------------------------------
    # Chain building
    # -------------------------------------------------------------------------

    def _build(
        self,
        sentence: Sentence,
        signal: MovementSignal,
        by_index: dict[int, PredicateSite],
        analysis: MovementAnalysis,
    ) -> None:
        arena = analysis.arena
        if arena.chain_for_head(signal.head_word) is not None:
            logger.debug(f"Word {signal.head_word} already heads a chain; dropping {signal.kind.value} signal")
            return

        domain = _locality_domain(signal.head_predicate, by_index)
        path = _clause_path(signal.tail_predicate, signal.head_predicate, by_index)

        if signal.chain_type is ChainType.A:
            locality_ok = domain.contains(signal.tail_predicate)
            crossed = []
        else:
            crossed = [p for p in path if by_index[p].finite]
            islands = [p for p in path if by_index[p].clause_relation.split(":")[0] in ISLAND_RELATIONS]
            locality_ok = not islands

        head_id = arena.add_position(PositionKind.HEAD, signal.head_predicate, signal.head_slot, signal.head_word)
        intermediate_ids = tuple(
            arena.add_position(PositionKind.INTERMEDIATE, p, slot, None) for p, slot in signal.via
        ) + tuple(
            arena.add_position(PositionKind.INTERMEDIATE, p, None, None) for p in reversed(crossed)
        )
        tail_id = arena.add_position(PositionKind.TAIL, signal.tail_predicate, signal.tail_slot, signal.tail_word)

        chain = arena.build_chain(
            kind=signal.kind,
            head_id=head_id,
            tail_id=tail_id,
            domain=domain,
            intermediate_ids=intermediate_ids,
            confidence=signal.confidence,
            locality_ok=locality_ok,
        )
        signal.state = DetectionState.CHAIN_BUILT
        signal.chain_id = chain.chain_id

        if not locality_ok and self.config.check_locality:
            message = (
                f"{signal.kind.value} chain {chain.chain_id} leaves the locality domain "
                f"of clause {domain.clause_head}"
            )
            logger.warning(message)
            analysis.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.LOCALITY_VIOLATION,
                    message=message,
                    stage=STAGE,
                    word_index=signal.head_word,
                    details={
                        "chain_id": chain.chain_id,
                        "movement": signal.kind.value,
                        "tail_predicate": signal.tail_predicate,
                    },
                )
            )


# =============================================================================
# Helpers
# =============================================================================


def _by_phrase(site: PredicateSite) -> Argument | None:
    return site.argument(SyntacticSlot.OBLIQUE, "by")


def _subjectless_complement(site: PredicateSite, by_index: dict[int, PredicateSite]) -> PredicateSite | None:
    for argument in site.arguments:
        if not argument.is_clausal:
            continue
        complement = by_index.get(argument.word_index)
        if complement is not None and not complement.has(SyntacticSlot.SUBJECT):
            return complement
    return None


def _is_wh_phrase(sentence: Sentence, index: int) -> bool:
    word = sentence.get(index)
    if word.norm in WH_WORDS and word.upos in (UPos.PRON, UPos.DET):
        return True
    determiner = sentence.determiner_of(index)
    return determiner in WH_DETERMINERS


def _is_relativizer(sentence: Sentence, argument: Argument) -> bool:
    word = sentence.get(argument.word_index)
    return word.norm in RELATIVIZERS and word.upos in (UPos.PRON, UPos.DET)


def _clause_start(sentence: Sentence, clause_index: int, excluded: int) -> int:
    excluded_words = set(sentence.subtree(excluded))
    remaining = [i for i in sentence.subtree(clause_index) if i not in excluded_words]
    return remaining[0] if remaining else clause_index


def _locality_domain(predicate_index: int, by_index: dict[int, PredicateSite]) -> LocalityDomain:
    clause = by_index[predicate_index]
    while not clause.finite and clause.parent_index in by_index:
        clause = by_index[clause.parent_index]

    members = {clause.index}
    frontier = [clause.index]
    while frontier:
        current = frontier.pop()
        for site in by_index.values():
            if site.parent_index == current and not site.finite and site.index not in members:
                members.add(site.index)
                frontier.append(site.index)
    return LocalityDomain(clause_head=clause.index, members=frozenset(members))


def _clause_path(lower: int, upper: int, by_index: dict[int, PredicateSite]) -> list[int]:
    """Clauses from ``lower`` up to, but excluding, ``upper``."""
    path = []
    current = by_index.get(lower)
    while current is not None and current.index != upper:
        path.append(current.index)
        current = by_index.get(current.parent_index) if current.parent_index is not None else None
    return path
