"""Event composition.

Builds one Neo-Davidsonian event per predicate from the final role
assignments. Participants come from role entries; frame-required roles
with no argument are filled by default insertion rules:

- implicit agent for agentless passives
- addressee for imperatives
- arbitrary or controlled subject for infinitives
- event referent for clausal complements

A required role with no argument and no rule is reported as an
``incomplete_event`` diagnostic and the partial event is kept.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Sequence

from ..config import EventConfig
from ..diagnostics import Diagnostic, DiagnosticKind
from ..exceptions import IncompleteEventError
from ..extraction import TIME_NOUNS
from ..lexicon.types import Frame
from ..models import Sentence
from ..theta.assigner import AssignmentOutcome
from ..types import PredicateSite, SyntacticSlot, ThetaRole
from .aspect import AspectClassifier
from .decomposition import Decomposition, LittleVDecomposer
from .models import (
    AspectualClass,
    Event,
    EventId,
    LittleV,
    Modifier,
    ModifierKind,
    Predicate,
    ReferentId,
    ReferentTable,
)

logger = logging.getLogger(__name__)

STAGE = "events"

NEGATORS = frozenset({"not", "n't", "never", "no"})
TEMPORAL_ADVERBS = frozenset({
    "now", "then", "yesterday", "today", "tomorrow", "soon", "already",
    "still", "always", "often", "sometimes", "usually", "again", "later",
    "once", "recently", "early", "late",
})
DEGREE_ADVERBS = frozenset({"very", "quite", "too", "so", "extremely", "almost", "nearly", "really"})
LOCATIVE_ADVERBS = frozenset({"here", "there", "everywhere", "somewhere", "home", "away", "outside", "inside"})
WH_ADVERBS = frozenset({"where", "when", "why", "how"})

UNDERGOER_ROLES = (ThetaRole.PATIENT, ThetaRole.THEME)


@dataclass
class EventComposition:
    """Events of one sentence with their shared referent table."""

    events: tuple[Event, ...] = ()
    referents: ReferentTable = field(default_factory=ReferentTable)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.events)

    def event(self, event_id: EventId) -> Event:
        for event in self.events:
            if event.event_id == event_id:
                return event
        raise KeyError(event_id)

    def event_for_predicate(self, word_index: int) -> Event | None:
        for event in self.events:
            if not event.is_sub_event and event.predicate.word_index == word_index:
                return event
        return None

    @property
    def main_events(self) -> list[Event]:
        return [e for e in self.events if not e.is_sub_event]

    def sub_event_of(self, event: Event) -> Event | None:
        return self.event(event.caused) if event.caused is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "events": [e.to_dict() for e in self.events],
            "referents": self.referents.to_dict(),
        }


class EventComposer:
    """Composes events from base predicate sites and their role assignments."""

    def __init__(
        self,
        config: EventConfig | None = None,
        aspect: AspectClassifier | None = None,
        decomposer: LittleVDecomposer | None = None,
    ):
        self.config = config or EventConfig()
        self.aspect = aspect or AspectClassifier()
        self.decomposer = decomposer or LittleVDecomposer()

    def compose(
        self,
        sentence: Sentence,
        sites: Sequence[PredicateSite],
        outcomes: Mapping[int, AssignmentOutcome],
    ) -> EventComposition:
        sites = sorted(sites, key=lambda s: s.index)
        if len(sites) > self.config.max_events_per_sentence:
            logger.warning(
                f"Sentence has {len(sites)} predicates; composing the first "
                f"{self.config.max_events_per_sentence}"
            )
            sites = sites[: self.config.max_events_per_sentence]

        composition = EventComposition()
        table = composition.referents
        event_ids = {site.index: i for i, site in enumerate(sites, start=1)}
        for site in sites:
            table.event_referent(event_ids[site.index], site.lemma)

        events: list[Event] = []
        sub_events: list[Event] = []
        next_id = len(sites) + 1

        for site in sites:
            outcome = outcomes[site.index]
            try:
                event = self._build_event(sentence, site, outcome, event_ids, table)
            except IncompleteEventError as e:
                event = e.partial_event
                logger.warning(str(e))
                composition.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.INCOMPLETE_EVENT,
                        message=str(e),
                        stage=STAGE,
                        word_index=site.index,
                        event_id=event.event_id,
                        details={"missing_roles": [r.value for r in e.missing_roles]},
                    )
                )

            decomposition = self._decompose(sentence, site, event)
            event = replace(event, little_v=decomposition.little_v)
            if decomposition.has_result_state and self.config.include_sub_events:
                sub_event = self._result_state(event, decomposition, next_id, table)
                if sub_event is not None:
                    event = replace(event, caused=sub_event.event_id)
                    sub_events.append(sub_event)
                    next_id += 1
            events.append(event)

        composition.events = tuple(events + sub_events)
        logger.debug(
            f"Composed {len(events)} event(s) and {len(sub_events)} sub-event(s) "
            f"for {sentence.sentence_id or 'sentence'}"
        )
        return composition

    # -------------------------------------------------------------------------
    # Event construction
    # -------------------------------------------------------------------------

    def _build_event(
        self,
        sentence: Sentence,
        site: PredicateSite,
        outcome: AssignmentOutcome,
        event_ids: dict[int, EventId],
        table: ReferentTable,
    ) -> Event:
        """Build one event.

        Raises:
            IncompleteEventError: A frame-required role has no filler; the
                error carries the partial event.
        """
        event_id = event_ids[site.index]
        participants: dict[ThetaRole, ReferentId] = {}
        confidences = []
        complement = None

        for entry in outcome.assignment:
            argument = entry.argument
            if argument.is_clausal:
                embedded = event_ids.get(argument.word_index)
                if embedded is None:
                    continue
                participants[entry.role] = table.event_referent(embedded)
                if complement is None:
                    complement = embedded
            else:
                participants[entry.role] = table.entity_for_word(argument.referent_index, sentence)
            confidences.append(entry.confidence)

        missing = self._insert_defaults(site, outcome.reference_frame, participants, table)

        modifiers, polarity = self._modifiers(sentence, site, event_ids)
        parent = event_ids.get(site.parent_index) if site.parent_index is not None else None

        event = Event(
            event_id=event_id,
            predicate=Predicate(
                lemma=site.lemma,
                frame_id=outcome.assignment.frame_id,
                word_index=site.index,
            ),
            participants=participants,
            modifiers=tuple(modifiers),
            aspect=AspectualClass.ACTIVITY,
            complement=complement,
            parent=parent,
            clause_relation=site.clause_relation,
            voice=site.voice,
            polarity=polarity,
            confidence=_geometric_mean(confidences),
        )

        changes_state = self._changes_state(sentence, site, event)
        event = replace(
            event,
            aspect=self.aspect.classify(site, outcome.reference_frame, sentence, changes_state),
        )

        if missing:
            raise IncompleteEventError(
                f"Event {event_id} ('{site.lemma}') lacks required "
                f"{', '.join(r.value for r in missing)}",
                partial_event=event,
                missing_roles=missing,
            )
        return event

    def _insert_defaults(
        self,
        site: PredicateSite,
        frame: Frame | None,
        participants: dict[ThetaRole, ReferentId],
        table: ReferentTable,
    ) -> list[ThetaRole]:
        missing = []
        if frame is None:
            if (
                SyntacticSlot.SUBJECT in site.licensed_implicit
                and ThetaRole.AGENT not in participants
                and self._inserts_subject(site)
            ):
                participants[ThetaRole.AGENT] = table.implicit(self._implicit_label(site))
            return missing

        for slot in frame.required_slots:
            if any(role in participants for role in slot.roles):
                continue
            if any(slot.accepts(a.slot, a.preposition) for a in site.arguments):
                continue
            role = next((r for r in slot.roles if r not in participants), None)
            if role is None:
                continue
            if slot.slot in site.licensed_implicit and (
                slot.slot is not SyntacticSlot.SUBJECT or self._inserts_subject(site)
            ):
                participants[role] = table.implicit(self._implicit_label(site))
            else:
                missing.append(role)
        return missing

    def _inserts_subject(self, site: PredicateSite) -> bool:
        return not site.passive or self.config.implicit_agent_for_passives

    @staticmethod
    def _implicit_label(site: PredicateSite) -> str:
        if site.imperative:
            return "addressee"
        if site.passive:
            return "someone"
        return "arbitrary"

    # -------------------------------------------------------------------------
    # Modifiers
    # -------------------------------------------------------------------------

    @staticmethod
    def _modifiers(
        sentence: Sentence,
        site: PredicateSite,
        event_ids: dict[int, EventId],
    ) -> tuple[list[Modifier], bool]:
        modifiers = []
        polarity = True
        for dep in sentence.dependents(site.index):
            if dep.is_rel("neg") or (
                dep.is_rel("advmod") and (dep.norm in NEGATORS or dep.feature("Polarity") == "Neg")
            ):
                modifiers.append(Modifier(ModifierKind.NEGATION, dep.norm, dep.index))
                polarity = False
            elif dep.is_rel("advmod"):
                modifiers.append(Modifier(_adverb_kind(dep.norm), dep.norm, dep.index))
            elif dep.deprel in ("obl:tmod", "obl:npmod", "nmod:tmod") or (
                dep.is_rel("obl") and dep.norm in TIME_NOUNS
            ):
                modifiers.append(Modifier(ModifierKind.TEMPORAL, dep.norm, dep.index))
            elif dep.is_rel("advcl"):
                marker = sentence.first_dependent(dep.index, "mark")
                kind = ModifierKind.CONDITIONAL if marker and marker.norm == "if" else ModifierKind.OTHER
                modifiers.append(
                    Modifier(
                        kind,
                        marker.norm if marker else dep.norm,
                        dep.index,
                        event_id=event_ids.get(dep.index),
                    )
                )
        return modifiers, polarity

    # -------------------------------------------------------------------------
    # Little v
    # -------------------------------------------------------------------------

    def _changes_state(self, sentence: Sentence, site: PredicateSite, event: Event) -> bool:
        result, _, _ = self.decomposer.change_of_state(site, sentence)
        return result is not None and any(r in event.participants for r in UNDERGOER_ROLES)

    def _decompose(self, sentence: Sentence, site: PredicateSite, event: Event) -> Decomposition:
        return self.decomposer.decompose(site, sentence, set(event.participants), event.aspect)

    @staticmethod
    def _result_state(
        event: Event,
        decomposition: Decomposition,
        event_id: EventId,
        table: ReferentTable,
    ) -> Event | None:
        role = next((r for r in UNDERGOER_ROLES if r in event.participants), None)
        if role is None:
            return None
        table.event_referent(event_id, decomposition.result_lemma)
        return Event(
            event_id=event_id,
            predicate=Predicate(lemma=decomposition.result_lemma, word_index=decomposition.result_word),
            participants={role: event.participants[role]},
            aspect=AspectualClass.STATE,
            little_v=LittleV.BE,
            parent=event.event_id,
            clause_relation="result",
            polarity=event.polarity,
            confidence=event.confidence,
            is_sub_event=True,
        )


def _adverb_kind(lemma: str) -> ModifierKind:
    if lemma in TEMPORAL_ADVERBS:
        return ModifierKind.TEMPORAL
    if lemma in DEGREE_ADVERBS:
        return ModifierKind.DEGREE
    if lemma in LOCATIVE_ADVERBS:
        return ModifierKind.LOCATIVE
    if lemma in WH_ADVERBS:
        return ModifierKind.OTHER
    return ModifierKind.MANNER


def _geometric_mean(values: list[float]) -> float:
    if not values:
        return 1.0
    if any(v <= 0.0 for v in values):
        return 0.0
    return math.exp(sum(math.log(v) for v in values) / len(values))

