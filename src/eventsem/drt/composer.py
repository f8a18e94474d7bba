"""DRS and lambda-term composition with quantifier scope readings.

Each scope reading is one ordering of the quantified referents of the
main clause domain. Readings are ranked by:

1. inversions against canonical surface order (matrix clause before
   embedded, then linear order)
2. universal-over-existential pairs at equal depth

For every reading a DRS is built top-down (quantifier boxes, then event
conditions placed in the innermost box that scopes over them) and
translated into a typed lambda term, which is reduced to normal form.

Events whose participant types do not fit their frame are reported as
``type_mismatch`` and left out; the rest still composes.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..config import CompositionConfig
from ..diagnostics import Diagnostic, DiagnosticKind
from ..events.composer import EventComposition
from ..events.models import Event, EventId, ModifierKind, Quantifier, ReferentId, ReferentKind
from ..exceptions import TypeMismatchError
from ..lexicon.types import Frame
from ..models import Sentence, UPos
from .drs import (
    DRS,
    BoxRelation,
    DRSBuilder,
    Equality,
    Implication,
    Negation,
    Predication,
    Quantification,
)
from .terms import (
    IMPLIES,
    NOT,
    Abstraction,
    Constant,
    Reducer,
    Term,
    Variable,
    abstract,
    apply,
    conjoin,
    determiner,
    exists,
    forall,
)
from .types import E, S, T, fn, parse_type

logger = logging.getLogger(__name__)

STAGE = "composition"

# Beyond this many quantifiers only the surface reading is built
MAX_PERMUTED_QUANTIFIERS = 7

ROOT_QUANTIFIERS = frozenset({Quantifier.PROPER, Quantifier.DEFINITE, Quantifier.PRONOUN, Quantifier.WH})

DETERMINER_NAMES = {
    Quantifier.UNIVERSAL: "every",
    Quantifier.EXISTENTIAL: "some",
    Quantifier.NEGATIVE: "no",
}


@dataclass
class Reading:
    """One scope reading: its DRS and reduced term."""

    rank: int
    scope_order: tuple[ReferentId, ...]
    drs: DRS
    term: Term | None = None
    inversions: int = 0
    universal_over_existential: int = 0
    reduction_steps: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "rank": self.rank,
            "scope_order": [self.drs.names.get(r, str(r)) for r in self.scope_order],
            "drs": self.drs.to_dict(),
            "term": str(self.term) if self.term is not None else None,
            "inversions": self.inversions,
            "universal_over_existential": self.universal_over_existential,
            "reduction_steps": self.reduction_steps,
        }


@dataclass
class CompositionResult:
    readings: list[Reading] = field(default_factory=list)
    skipped_events: list[EventId] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def default(self) -> Reading | None:
        return self.readings[0] if self.readings else None


class DRTComposer:
    """Composes events into ranked DRS/term readings."""

    def __init__(
        self,
        config: CompositionConfig | None = None,
        definitions: Mapping[str, Term] | None = None,
    ):
        self.config = config or CompositionConfig()
        self.definitions = definitions

    def compose(
        self,
        sentence: Sentence,
        composition: EventComposition,
        frames: Mapping[EventId, Frame] | None = None,
    ) -> CompositionResult:
        """Build ranked readings.

        Raises:
            ReductionDepthExceeded: A term did not normalise within
                ``max_reduction_steps``.
        """
        frames = frames or {}
        result = CompositionResult()
        context = _Context(sentence, composition, frames)

        for event in composition.events:
            try:
                self._event_formula(event, context)
            except TypeMismatchError as e:
                logger.warning(f"Skipping event {event.event_id} ('{event.lemma}'): {e}")
                result.skipped_events.append(event.event_id)
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.TYPE_MISMATCH,
                        message=str(e),
                        stage=STAGE,
                        word_index=event.predicate.word_index,
                        event_id=event.event_id,
                        details={"expected": str(e.expected), "actual": str(e.actual)},
                    )
                )
        context.skipped = set(result.skipped_events)

        reducer = Reducer(self.definitions, max_steps=self.config.max_reduction_steps)
        for rank, (order, inversions, ue_pairs) in enumerate(self.scope_orders(context), start=1):
            drs, layout = self._build_drs(order, context)
            for problem in drs.violations():
                logger.warning(f"Reading {rank}: {problem}")
            reading = Reading(
                rank=rank,
                scope_order=order,
                drs=drs,
                inversions=inversions,
                universal_over_existential=ue_pairs,
            )
            if self.config.build_terms:
                reduction = reducer.normalize(self._term(drs, layout, context))
                reading.term = reduction.term
                reading.reduction_steps = reduction.steps
            result.readings.append(reading)

        logger.debug(f"Composed {len(result.readings)} reading(s)")
        return result

    # -------------------------------------------------------------------------
    # Scope
    # -------------------------------------------------------------------------

    def scope_orders(self, context: "_Context") -> list[tuple[tuple[ReferentId, ...], int, int]]:
        """Ranked ``(order, inversions, universal-over-existential pairs)``."""
        canonical = context.main_quantified()
        if len(canonical) > MAX_PERMUTED_QUANTIFIERS:
            logger.warning(f"{len(canonical)} quantifiers; building the surface reading only")
            return [(tuple(canonical), 0, context.ue_pairs(canonical))]

        position = {r: i for i, r in enumerate(canonical)}
        ranked = []
        for order in itertools.permutations(canonical):
            inversions = sum(
                1
                for i, j in itertools.combinations(range(len(order)), 2)
                if position[order[i]] > position[order[j]]
            )
            ranked.append((inversions, context.ue_pairs(order), [position[r] for r in order], order))
        ranked.sort(key=lambda item: (item[0], item[1], item[2]))
        return [(tuple(order), inv, ue) for inv, ue, _, order in ranked[: self.config.max_readings]]

    # -------------------------------------------------------------------------
    # DRS
    # -------------------------------------------------------------------------

    def _build_drs(self, order: tuple[ReferentId, ...], context: "_Context") -> tuple[DRS, "_Layout"]:
        builder = DRSBuilder()
        layout = _Layout()
        table = context.table
        root = DRS.ROOT

        for referent in table:
            if referent.kind is ReferentKind.ENTITY and referent.quantifier in ROOT_QUANTIFIERS:
                builder.add_referent(root, referent.referent_id)
                if referent.quantifier is Quantifier.PROPER:
                    layout.add_atom(builder, root, Equality(referent.referent_id, referent.label))
                elif context.is_described(referent.referent_id):
                    layout.add_atom(builder, root, Predication(referent.label, (referent.referent_id,)))
                layout.placed.add(referent.referent_id)

        current = root
        for referent_id in order:
            referent = table.get(referent_id)
            restrictor = builder.new_box(current, BoxRelation.RESTRICTOR)
            body = builder.new_box(current, BoxRelation.BODY)
            builder.add_condition(current, Quantification(referent.quantifier, referent_id, restrictor, body))
            builder.add_referent(restrictor, referent_id)
            layout.add_atom(builder, restrictor, Predication(referent.label, (referent_id,)))
            layout.restrictors[referent_id] = restrictor
            layout.placed.add(referent_id)
            current = body
        layout.main = current

        for event in context.ordered_events():
            box = self._place_event(event, builder, layout, context)
            layout.event_boxes[event.event_id] = box
            layout.events.setdefault(box, []).append(event)
            for condition in context.event_conditions(event):
                builder.add_condition(box, condition)

        # Remaining referents go to the innermost box dominating all their mentions
        mentions: dict[ReferentId, list[int]] = {}
        for drs_id in builder.box_ids():
            for condition in builder.conditions_of(drs_id):
                for referent_id in getattr(condition, "referents", ()):
                    mentions.setdefault(referent_id, []).append(drs_id)
        for referent_id, boxes in mentions.items():
            if referent_id in layout.placed:
                continue
            box = builder.common_ancestor(boxes)
            builder.add_referent(box, referent_id)
            if context.is_described(referent_id):
                layout.add_atom(builder, box, Predication(table.get(referent_id).label, (referent_id,)))
            layout.placed.add(referent_id)

        names = {r.referent_id: r.name for r in table}
        return builder.build(names), layout

    def _place_event(
        self,
        event: Event,
        builder: DRSBuilder,
        layout: "_Layout",
        context: "_Context",
    ) -> int:
        if event.event_id in layout.antecedents:
            box = layout.antecedents[event.event_id]
        elif event.clause_relation.startswith("acl"):
            box = self._relative_box(event, layout, context)
        elif event.parent is not None and event.parent in layout.event_boxes:
            box = layout.event_boxes[event.parent]
        else:
            box = layout.main

        for modifier in event.modifiers_of(ModifierKind.CONDITIONAL):
            if modifier.event_id is None or modifier.event_id in context.skipped:
                continue
            antecedent = builder.new_box(box, BoxRelation.ANTECEDENT)
            consequent = builder.new_box(box, BoxRelation.CONSEQUENT)
            builder.add_condition(box, Implication(antecedent, consequent))
            layout.antecedents[modifier.event_id] = antecedent
            box = consequent

        if not event.polarity and not event.is_sub_event:
            negated = builder.new_box(box, BoxRelation.NEGATED)
            builder.add_condition(box, Negation(negated))
            box = negated
        return box

    @staticmethod
    def _relative_box(event: Event, layout: "_Layout", context: "_Context") -> int:
        noun = context.sentence.get(event.predicate.word_index).head
        referent_id = context.table.for_word(noun) if noun else None
        if referent_id is not None and referent_id in layout.restrictors:
            return layout.restrictors[referent_id]
        if referent_id is not None and context.table.get(referent_id).quantifier in ROOT_QUANTIFIERS:
            return DRS.ROOT
        governing = context.governing_event(noun)
        if governing is not None and governing in layout.event_boxes:
            return layout.event_boxes[governing]
        return layout.main

    # -------------------------------------------------------------------------
    # Terms
    # -------------------------------------------------------------------------

    def _event_formula(self, event: Event, context: "_Context") -> Term:
        """``(λa1...λan.λv. pred(v) ∧ Role(v, ai) ...)(x1)...(xn)(e)``.

        Raises:
            TypeMismatchError: A participant's type differs from its frame slot type.
        """
        frame = context.frames.get(event.event_id)
        params = []
        arguments = []
        for i, role in enumerate(event.roles, start=1):
            actual = context.variable(event.participants[role])
            slot = frame.slot_for_role(role) if frame else None
            expected = parse_type(slot.semantic_type) if slot else actual.type
            params.append(Variable(f"a{i}", expected))
            arguments.append(actual)

        v = Variable("v", S)
        conjuncts: list[Term] = [apply(Constant(event.lemma, fn(S, T)), v)]
        for role, param in zip(event.roles, params):
            conjuncts.append(apply(Constant(role.label, fn(S, param.type, T)), v, param))
        for modifier in event.modifiers:
            if modifier.event_id is None and modifier.kind is not ModifierKind.NEGATION:
                conjuncts.append(apply(Constant(modifier.lemma, fn(S, T)), v))

        event_variable = context.variable(context.table.event_referent(event.event_id))
        formula = apply(abstract(params + [v], conjoin(conjuncts)), *arguments, event_variable)

        links = []
        if event.caused is not None and event.caused not in context.skipped:
            caused = context.variable(context.table.event_referent(event.caused))
            links.append(apply(Constant("CAUSE", fn(S, S, T)), event_variable, caused))
        for modifier in event.modifiers:
            if modifier.event_id is not None and modifier.kind is ModifierKind.OTHER:
                other = context.variable(context.table.event_referent(modifier.event_id))
                links.append(apply(Constant(modifier.lemma, fn(S, S, T)), event_variable, other))
        return conjoin([formula] + links) if links else formula

    def _term(self, drs: DRS, layout: "_Layout", context: "_Context") -> Term:
        open_variables = [
            context.variable(r.referent_id)
            for r in context.table
            if r.quantifier is Quantifier.WH and r.kind is ReferentKind.ENTITY
            and r.referent_id in layout.placed
        ]
        closed = self._closed_box(DRS.ROOT, drs, layout, context, exclude={v.name for v in open_variables})
        return abstract(open_variables, closed)

    def _closed_box(
        self,
        drs_id: int,
        drs: DRS,
        layout: "_Layout",
        context: "_Context",
        exclude: set[str] | None = None,
    ) -> Term:
        variables, body = self._box_body(drs_id, drs, layout, context, exclude or set())
        for variable in reversed(variables):
            body = exists(variable, body)
        return body

    def _box_body(
        self,
        drs_id: int,
        drs: DRS,
        layout: "_Layout",
        context: "_Context",
        exclude: set[str],
    ) -> tuple[list[Variable], Term]:
        box = drs.box(drs_id)
        variables = [
            v for v in (context.variable(r) for r in box.referents) if v.name not in exclude
        ]
        conjuncts: list[Term] = list(layout.atoms.get(drs_id, []))
        for event in layout.events.get(drs_id, []):
            conjuncts.append(self._event_formula(event, context))

        for condition in box.conditions:
            if isinstance(condition, Negation):
                conjuncts.append(apply(NOT, self._closed_box(condition.box, drs, layout, context)))
            elif isinstance(condition, Implication):
                antecedent_vars, antecedent = self._box_body(
                    condition.antecedent, drs, layout, context, set()
                )
                term = apply(IMPLIES, antecedent, self._closed_box(condition.consequent, drs, layout, context))
                for variable in reversed(antecedent_vars):
                    term = forall(variable, term)
                conjuncts.append(term)
            elif isinstance(condition, Quantification):
                bound = context.variable(condition.referent)
                restrictor = self._closed_box(
                    condition.restrictor, drs, layout, context, exclude={bound.name}
                )
                body = self._closed_box(condition.body, drs, layout, context)
                conjuncts.append(
                    apply(
                        determiner(DETERMINER_NAMES[condition.quantifier]),
                        Abstraction(bound, restrictor),
                        Abstraction(bound, body),
                    )
                )
        return variables, conjoin(conjuncts)


# =============================================================================
# Internal State
# =============================================================================


@dataclass
class _Layout:
    """Where one reading placed things, for the term translation."""

    main: int = DRS.ROOT
    restrictors: dict[ReferentId, int] = field(default_factory=dict)
    antecedents: dict[EventId, int] = field(default_factory=dict)
    event_boxes: dict[EventId, int] = field(default_factory=dict)
    events: dict[int, list[Event]] = field(default_factory=dict)
    atoms: dict[int, list[Term]] = field(default_factory=dict)
    placed: set[ReferentId] = field(default_factory=set)

    def add_atom(self, builder: DRSBuilder, drs_id: int, condition: Predication | Equality) -> None:
        builder.add_condition(drs_id, condition)
        if isinstance(condition, Equality):
            name = Constant(str(condition.value).lower(), E)
            term = apply(Constant("eq", fn(E, E, T)), Variable(f"x{condition.referent}", E), name)
        else:
            term = apply(Constant(condition.predicate, fn(E, T)), Variable(f"x{condition.arguments[0]}", E))
        self.atoms.setdefault(drs_id, []).append(term)


class _Context:
    """Per-sentence lookups shared by all readings."""

    def __init__(self, sentence: Sentence, composition: EventComposition, frames: Mapping[EventId, Frame]):
        self.sentence = sentence
        self.composition = composition
        self.table = composition.referents
        self.frames = frames
        self.skipped: set[EventId] = set()
        self._events = {e.event_id: e for e in composition.events}
        self._conditional_clauses = {
            m.event_id
            for e in composition.events
            for m in e.modifiers_of(ModifierKind.CONDITIONAL)
            if m.event_id is not None
        }

    def variable(self, referent_id: ReferentId) -> Variable:
        referent = self.table.get(referent_id)
        return Variable(referent.name, S if referent.kind is ReferentKind.EVENT else E)

    def is_described(self, referent_id: ReferentId) -> bool:
        """True when the referent gets a one-place predication of its label."""
        referent = self.table.get(referent_id)
        if referent.kind is ReferentKind.IMPLICIT:
            return True
        if referent.kind is not ReferentKind.ENTITY or referent.word_index is None:
            return False
        return self.sentence.get(referent.word_index).upos is UPos.NOUN

    def depth(self, event: Event) -> int:
        depth = 0
        while event.parent is not None and event.parent in self._events:
            event = self._events[event.parent]
            depth += 1
        return depth

    def is_subordinate(self, event: Event) -> bool:
        while True:
            if event.clause_relation.startswith("acl") or event.event_id in self._conditional_clauses:
                return True
            if event.parent is None or event.parent not in self._events:
                return False
            event = self._events[event.parent]

    def ordered_events(self) -> list[Event]:
        events = [e for e in self.composition.events if e.event_id not in self.skipped]
        return sorted(events, key=lambda e: (self.depth(e), e.event_id))

    def main_quantified(self) -> list[ReferentId]:
        """Quantified referents of main-domain events in canonical order."""
        keys: dict[ReferentId, tuple[int, int]] = {}
        for event in self.composition.events:
            if event.event_id in self.skipped or self.is_subordinate(event):
                continue
            for referent_id in event.participants.values():
                referent = self.table.get(referent_id)
                if not referent.is_quantified:
                    continue
                key = (self.depth(event), referent.word_index or 0)
                keys[referent_id] = min(keys.get(referent_id, key), key)
        return sorted(keys, key=lambda r: keys[r])

    def ue_pairs(self, order: tuple[ReferentId, ...] | list[ReferentId]) -> int:
        depth = {}
        for event in self.composition.events:
            for referent_id in event.participants.values():
                depth.setdefault(referent_id, self.depth(event))
        count = 0
        for i, j in itertools.combinations(range(len(order)), 2):
            upper, lower = self.table.get(order[i]), self.table.get(order[j])
            if (
                upper.quantifier is Quantifier.UNIVERSAL
                and lower.quantifier is Quantifier.EXISTENTIAL
                and depth.get(order[i]) == depth.get(order[j])
            ):
                count += 1
        return count

    def governing_event(self, word_index: int | None) -> EventId | None:
        while word_index:
            event = self.composition.event_for_predicate(word_index)
            if event is not None:
                return event.event_id
            word_index = self.sentence.get(word_index).head
        return None

    def event_conditions(self, event: Event) -> list[Predication]:
        event_ref = self.table.event_referent(event.event_id)
        conditions = [Predication(event.lemma, (event_ref,))]
        for role in event.roles:
            conditions.append(Predication(role.label, (event_ref, event.participants[role])))
        for modifier in event.modifiers:
            if modifier.kind is ModifierKind.NEGATION:
                continue
            if modifier.event_id is None:
                conditions.append(Predication(modifier.lemma, (event_ref,)))
            elif modifier.kind is ModifierKind.OTHER:
                conditions.append(
                    Predication(modifier.lemma, (event_ref, self.table.event_referent(modifier.event_id)))
                )
        if event.caused is not None and event.caused not in self.skipped:
            conditions.append(Predication("CAUSE", (event_ref, self.table.event_referent(event.caused))))
        return conditions
