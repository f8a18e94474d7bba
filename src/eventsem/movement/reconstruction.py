"""Reconstruction of base argument positions from movement chains.

Role assignment runs on the base (Tail) configuration. This module turns
surface predicate sites into base sites:

- passive: subject re-slotted to the object (trace); by-phrase demoted
  back to subject, otherwise an implicit subject is licensed
- raising / ECM: the raised argument leaves the matrix and becomes the
  embedded subject, or the embedded object when the complement is passive
- tough: the matrix subject becomes the embedded object
- relative: relativizers and gaps resolve to the head noun
- control: subjectless complements get a controlled subject
- coordination: a conjunct without a subject shares its first conjunct's

After assignment, ``rekey`` copies each Tail's role onto its Head for
surface reporting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Sequence

from ..models import Sentence
from ..theta.assigner import RoleAssignment
from ..types import Argument, ArgumentOrigin, PredicateSite, SyntacticSlot, ThetaRole
from .chains import MovementChain, MovementKind
from .detector import RELATIVIZERS, MovementAnalysis

logger = logging.getLogger(__name__)

OBJECT_CONTROL_VERBS = frozenset({
    "persuade", "convince", "force", "ask", "tell", "order", "allow",
    "encourage", "urge", "require", "advise", "permit", "remind",
})


@dataclass(frozen=True)
class SurfaceRole:
    """A Tail role reported at its chain's Head."""

    chain_id: int
    kind: MovementKind
    head_word: int | None
    head_predicate: int
    role: ThetaRole
    confidence: float
    tail_predicate: int
    tail_slot: SyntacticSlot

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "chain_id": self.chain_id,
            "kind": self.kind.value,
            "head_word": self.head_word,
            "head_predicate": self.head_predicate,
            "role": self.role.value,
            "confidence": round(self.confidence, 4),
            "tail": f"p{self.tail_predicate}:{self.tail_slot.value}",
        }


class Reconstructor:
    """Builds base predicate sites from surface sites and chains."""

    def reconstruct(
        self,
        sentence: Sentence,
        sites: Sequence[PredicateSite],
        analysis: MovementAnalysis,
    ) -> list[PredicateSite]:
        arguments: dict[int, list[Argument]] = {s.index: list(s.arguments) for s in sites}
        licensed: dict[int, set[SyntacticSlot]] = {s.index: set(s.licensed_implicit) for s in sites}
        by_index = {s.index: s for s in sites}
        # Predicates whose subject is settled by a chain
        resolved_subjects: set[int] = set()

        for chain in analysis.arena:
            self._apply_chain(sentence, chain, analysis, arguments, licensed, resolved_subjects)

        for site in sorted(sites, key=lambda s: (s.depth, s.index)):
            if site.index in resolved_subjects:
                continue
            if any(a.slot is SyntacticSlot.SUBJECT for a in arguments[site.index]):
                continue
            self._control(site, by_index, arguments, licensed)

        self._link_relativizers(sentence, sites, arguments)

        return [s.with_arguments(arguments[s.index], frozenset(licensed[s.index])) for s in sites]

    # -------------------------------------------------------------------------
    # Chains
    # -------------------------------------------------------------------------

    def _apply_chain(
        self,
        sentence: Sentence,
        chain: MovementChain,
        analysis: MovementAnalysis,
        arguments: dict[int, list[Argument]],
        licensed: dict[int, set[SyntacticSlot]],
        resolved_subjects: set[int],
    ) -> None:
        head = analysis.arena.head(chain)
        tail = analysis.arena.tail(chain)
        kind = chain.kind

        if kind is MovementKind.PASSIVE:
            moved = _take(arguments[head.predicate_index], SyntacticSlot.SUBJECT, head.word_index)
            if moved is None:
                return
            arguments[tail.predicate_index].append(
                moved.moved_to(tail.predicate_index, tail.slot, ArgumentOrigin.TRACE)
            )
            _restore_agent(head.predicate_index, arguments, licensed)
            resolved_subjects.add(head.predicate_index)

        elif kind in (MovementKind.RAISING, MovementKind.ECM, MovementKind.TOUGH):
            moved = _take(arguments[head.predicate_index], head.slot, head.word_index)
            if moved is None:
                return
            arguments[tail.predicate_index].append(
                moved.moved_to(tail.predicate_index, tail.slot, ArgumentOrigin.TRACE)
            )
            if kind is MovementKind.TOUGH:
                licensed[tail.predicate_index].add(SyntacticSlot.SUBJECT)
            elif tail.slot is not SyntacticSlot.SUBJECT:
                # raised out of a passive complement
                _restore_agent(tail.predicate_index, arguments, licensed)
            resolved_subjects.add(tail.predicate_index)
            if kind is MovementKind.RAISING:
                resolved_subjects.add(head.predicate_index)

        elif kind is MovementKind.RELATIVE and head.word_index is None:
            antecedent = sentence.get(tail.predicate_index).head
            arguments[tail.predicate_index].append(
                Argument(
                    predicate_index=tail.predicate_index,
                    slot=tail.slot,
                    word_index=antecedent,
                    origin=ArgumentOrigin.TRACE,
                )
            )
            if tail.slot is SyntacticSlot.SUBJECT:
                resolved_subjects.add(tail.predicate_index)

        # wh, topicalization, existential and relativizer chains keep their
        # arguments in place: the dependency graph already attaches them to
        # the Tail predicate

        logger.debug(f"Reconstructed {kind.value} chain {chain.chain_id}")

    # -------------------------------------------------------------------------
    # Control and relativizers
    # -------------------------------------------------------------------------

    @staticmethod
    def _control(
        site: PredicateSite,
        by_index: dict[int, PredicateSite],
        arguments: dict[int, list[Argument]],
        licensed: dict[int, set[SyntacticSlot]],
    ) -> None:
        parent = by_index.get(site.parent_index) if site.parent_index is not None else None
        if site.clause_relation.startswith("conj") and parent is not None:
            shared = parent.argument(SyntacticSlot.SUBJECT)
            if shared is None and not parent.passive:
                shared = _find(arguments[parent.index], SyntacticSlot.SUBJECT)
            if shared is None:
                licensed[site.index].add(SyntacticSlot.SUBJECT)
                return
            slot = SyntacticSlot.SUBJECT
            if site.passive and not site.has(SyntacticSlot.OBJECT):
                # "The cake was baked and eaten": the shared subject is the object of both
                slot = SyntacticSlot.OBJECT
                licensed[site.index].add(SyntacticSlot.SUBJECT)
            arguments[site.index].append(
                Argument(
                    predicate_index=site.index,
                    slot=slot,
                    word_index=shared.word_index,
                    origin=ArgumentOrigin.SHARED,
                    antecedent_index=shared.antecedent_index,
                )
            )
            return

        if site.clause_relation.startswith("xcomp") and parent is not None:
            parent_args = arguments[parent.index]
            controller = None
            if parent.lemma in OBJECT_CONTROL_VERBS:
                controller = _find(parent_args, SyntacticSlot.OBJECT)
            if controller is None:
                controller = _find(parent_args, SyntacticSlot.SUBJECT)
            if controller is not None:
                arguments[site.index].append(
                    Argument(
                        predicate_index=site.index,
                        slot=SyntacticSlot.SUBJECT,
                        word_index=controller.word_index,
                        origin=ArgumentOrigin.CONTROLLED,
                        antecedent_index=controller.antecedent_index,
                    )
                )
                return
            licensed[site.index].add(SyntacticSlot.SUBJECT)
            return

        if not site.finite or site.imperative:
            licensed[site.index].add(SyntacticSlot.SUBJECT)

    @staticmethod
    def _link_relativizers(
        sentence: Sentence,
        sites: Sequence[PredicateSite],
        arguments: dict[int, list[Argument]],
    ) -> None:
        for site in sites:
            if not site.clause_relation.startswith("acl"):
                continue
            antecedent = sentence.get(site.index).head
            args = arguments[site.index]
            for i, arg in enumerate(args):
                if arg.antecedent_index is None and sentence.get(arg.word_index).norm in RELATIVIZERS:
                    args[i] = replace(arg, antecedent_index=antecedent)


# =============================================================================
# Re-keying
# =============================================================================


def rekey(
    analysis: MovementAnalysis,
    assignments: Mapping[int, RoleAssignment],
) -> list[SurfaceRole]:
    """Copy each chain's Tail role onto its Head."""
    surface = []
    for chain in analysis.arena:
        head = analysis.arena.head(chain)
        tail = analysis.arena.tail(chain)
        assignment = assignments.get(tail.predicate_index)
        if assignment is None or tail.slot is None:
            continue
        entry = assignment.entry_for_slot(tail.slot)
        if entry is None:
            logger.debug(f"Chain {chain.chain_id} tail p{tail.predicate_index}:{tail.slot.value} has no role")
            continue
        surface.append(
            SurfaceRole(
                chain_id=chain.chain_id,
                kind=chain.kind,
                head_word=head.word_index,
                head_predicate=head.predicate_index,
                role=entry.role,
                confidence=entry.confidence,
                tail_predicate=tail.predicate_index,
                tail_slot=tail.slot,
            )
        )
    return surface


def _find(arguments: list[Argument], slot: SyntacticSlot) -> Argument | None:
    for arg in arguments:
        if arg.slot is slot:
            return arg
    return None


def _take(arguments: list[Argument], slot: SyntacticSlot | None, word_index: int | None) -> Argument | None:
    for arg in arguments:
        if arg.slot is slot and arg.word_index == word_index:
            arguments.remove(arg)
            return arg
    return None


def _take_oblique(arguments: list[Argument], preposition: str) -> Argument | None:
    for arg in arguments:
        if arg.slot is SyntacticSlot.OBLIQUE and arg.preposition == preposition:
            arguments.remove(arg)
            return arg
    return None


def _restore_agent(
    predicate_index: int,
    arguments: dict[int, list[Argument]],
    licensed: dict[int, set[SyntacticSlot]],
) -> None:
    """Demote a passive by-phrase back to subject, or license an implicit one."""
    agent = _take_oblique(arguments[predicate_index], "by")
    if agent is not None:
        arguments[predicate_index].append(
            agent.moved_to(predicate_index, SyntacticSlot.SUBJECT, ArgumentOrigin.DEMOTED)
        )
    else:
        licensed[predicate_index].add(SyntacticSlot.SUBJECT)
