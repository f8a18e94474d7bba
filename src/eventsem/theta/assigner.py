"""Theta-role assignment.

Given a predicate's (reconstructed) arguments and its candidate frames,
produce a role for every argument. Frame selection may fail with
NoApplicableFrame or AmbiguousAssignment; ``assign`` degrades from both
instead of raising:

- no frame fits, or none clears the acceptance threshold: fallback
  defaults by syntactic slot, verb class and voice, confidence capped at 0.6
- a tie within epsilon: reported as a diagnostic and resolved by frame
  frequency

Example:
    assigner = ThetaRoleAssigner(ThetaConfig())
    outcome = assigner.assign(site, cache.frames_for(site.lemma), sentence)
    for entry in outcome.assignment.entries:
        print(entry.argument.arg_id, entry.role, entry.confidence)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

from ..config import ThetaConfig
from ..diagnostics import Diagnostic, DiagnosticKind, Severity
from ..exceptions import AmbiguousAssignment, MalformedInputError, NoApplicableFrame
from ..lexicon.types import Frame
from ..models import Sentence
from ..types import CANONICAL_ROLE_ORDER, Argument, PredicateSite, SyntacticSlot, ThetaRole, Voice
from .cues import Animacy, ArgumentCues, cues_for
from .strategies import DEFAULT_STRATEGIES, AssignmentStrategy, SlotMatch, match_frame

logger = logging.getLogger(__name__)

STAGE = "theta"


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class RoleEntry:
    """One argument's role with its confidence and reason."""

    argument: Argument
    role: ThetaRole
    confidence: float
    justification: str


@dataclass(frozen=True)
class RoleAssignment:
    """Roles for every argument of one predicate."""

    predicate_index: int
    lemma: str
    entries: tuple[RoleEntry, ...]
    frame_id: str | None = None
    fallback: bool = False

    def __iter__(self) -> Iterator[RoleEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def entry_for(self, argument: Argument | str) -> RoleEntry | None:
        arg_id = argument if isinstance(argument, str) else argument.arg_id
        for entry in self.entries:
            if entry.argument.arg_id == arg_id:
                return entry
        return None

    def role_of(self, argument: Argument | str) -> ThetaRole | None:
        entry = self.entry_for(argument)
        return entry.role if entry else None

    def entry_for_slot(self, slot: SyntacticSlot) -> RoleEntry | None:
        for entry in self.entries:
            if entry.argument.slot is slot:
                return entry
        return None

    def entry_for_role(self, role: ThetaRole) -> RoleEntry | None:
        for entry in self.entries:
            if entry.role is role:
                return entry
        return None

    @property
    def roles(self) -> tuple[ThetaRole, ...]:
        return tuple(e.role for e in self.entries)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "predicate_index": self.predicate_index,
            "lemma": self.lemma,
            "frame_id": self.frame_id,
            "fallback": self.fallback,
            "entries": [
                {
                    "argument": e.argument.arg_id,
                    "role": e.role.value,
                    "confidence": round(e.confidence, 4),
                    "justification": e.justification,
                }
                for e in self.entries
            ],
        }


@dataclass
class FrameScore:
    """A compatible frame with its combined and per-strategy scores."""

    match: SlotMatch
    total: float
    components: dict[str, float] = field(default_factory=dict)

    @property
    def frame(self) -> Frame:
        return self.match.frame


@dataclass
class AssignmentOutcome:
    """Assignment plus the evidence behind it."""

    assignment: RoleAssignment
    frame: Frame | None = None
    scores: list[FrameScore] = field(default_factory=list)
    candidates: tuple[Frame, ...] = ()
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def reference_frame(self) -> Frame | None:
        """Selected frame, else the most frequent candidate."""
        if self.frame is not None:
            return self.frame
        if self.candidates:
            return max(self.candidates, key=lambda f: (f.frequency, f.frame_id))
        return None


# =============================================================================
# Fallback Tables
# =============================================================================

PSYCH_VERBS = frozenset({
    "like", "love", "hate", "fear", "enjoy", "admire", "prefer", "want",
    "know", "believe", "think", "see", "hear", "feel", "remember", "forget",
    "understand", "doubt", "need", "notice", "realize",
})

UNACCUSATIVE_VERBS = frozenset({
    "arrive", "come", "go", "fall", "die", "happen", "occur", "appear",
    "disappear", "exist", "remain", "emerge", "vanish", "rise", "grow",
    "melt", "freeze", "break", "sink", "collapse",
})

STATIVE_VERBS = frozenset({
    "be", "have", "own", "contain", "include", "resemble", "belong", "cost",
    "weigh", "lack", "seem", "consist",
})

# preposition -> roles, preferred first
PREPOSITION_ROLES: dict[str, tuple[ThetaRole, ...]] = {
    "to": (ThetaRole.GOAL, ThetaRole.RECIPIENT, ThetaRole.DIRECTION),
    "into": (ThetaRole.GOAL, ThetaRole.DIRECTION),
    "onto": (ThetaRole.GOAL, ThetaRole.DIRECTION),
    "toward": (ThetaRole.DIRECTION, ThetaRole.GOAL),
    "towards": (ThetaRole.DIRECTION, ThetaRole.GOAL),
    "from": (ThetaRole.SOURCE,),
    "out of": (ThetaRole.SOURCE,),
    "in": (ThetaRole.LOCATION, ThetaRole.TEMPORAL),
    "on": (ThetaRole.LOCATION, ThetaRole.TEMPORAL),
    "at": (ThetaRole.LOCATION, ThetaRole.TEMPORAL),
    "near": (ThetaRole.LOCATION,),
    "under": (ThetaRole.LOCATION,),
    "over": (ThetaRole.LOCATION, ThetaRole.DIRECTION),
    "inside": (ThetaRole.LOCATION,),
    "behind": (ThetaRole.LOCATION,),
    "through": (ThetaRole.DIRECTION, ThetaRole.LOCATION),
    "across": (ThetaRole.DIRECTION, ThetaRole.LOCATION),
    "along": (ThetaRole.DIRECTION,),
    "with": (ThetaRole.INSTRUMENT, ThetaRole.COMITATIVE, ThetaRole.MANNER),
    "for": (ThetaRole.BENEFACTIVE, ThetaRole.CAUSE, ThetaRole.TEMPORAL),
    "by": (ThetaRole.AGENT, ThetaRole.LOCATION, ThetaRole.MANNER),
    "about": (ThetaRole.THEME,),
    "during": (ThetaRole.TEMPORAL,),
    "before": (ThetaRole.TEMPORAL,),
    "after": (ThetaRole.TEMPORAL,),
    "until": (ThetaRole.TEMPORAL,),
    "since": (ThetaRole.TEMPORAL,),
    "because of": (ThetaRole.CAUSE,),
    "like": (ThetaRole.MANNER,),
    "per": (ThetaRole.FREQUENCY,),
}

DEFAULT_OBLIQUE_ROLES = (ThetaRole.LOCATION, ThetaRole.MANNER, ThetaRole.THEME)

# Roles a middle subject cannot take: the agent is suppressed
AGENTIVE_ROLES = frozenset({ThetaRole.AGENT, ThetaRole.CAUSE})


# =============================================================================
# Assigner
# =============================================================================


class ThetaRoleAssigner:
    """Assigns theta roles by weighted frame scoring with fallback defaults."""

    def __init__(
        self,
        config: ThetaConfig | None = None,
        strategies: Sequence[AssignmentStrategy] | None = None,
    ):
        self.config = config or ThetaConfig()
        self.strategies = tuple(strategies or DEFAULT_STRATEGIES)
        self._weights = self.config.strategy_weights

    # -------------------------------------------------------------------------
    # Frame selection
    # -------------------------------------------------------------------------

    def score_frames(
        self,
        site: PredicateSite,
        frames: Sequence[Frame],
        cues: dict[str, ArgumentCues],
    ) -> list[FrameScore]:
        """Score every arity-compatible frame, best first."""
        scores = []
        for frame in frames:
            match = match_frame(frame, site)
            if not match.compatible:
                continue
            components = {s.name: s.score(match, cues) for s in self.strategies}
            total = sum(self._weights.get(name, 0.0) * value for name, value in components.items())
            scores.append(FrameScore(match=match, total=total, components=components))
        scores.sort(key=lambda s: (-s.total, -s.frame.frequency, s.frame.frame_id))
        return scores

    def select_frame(
        self,
        site: PredicateSite,
        frames: Sequence[Frame],
        cues: dict[str, ArgumentCues],
    ) -> FrameScore:
        """Pick the best frame.

        Raises:
            NoApplicableFrame: No frame's arity fits, or none clears the
                acceptance threshold.
            AmbiguousAssignment: The top frames tie within epsilon and no
                morphosyntactic cue separates them.
        """
        scores = self.score_frames(site, frames, cues)
        if not scores:
            raise NoApplicableFrame(
                f"No frame for '{site.lemma}' fits {len(site.arguments)} argument(s)",
                lemma=site.lemma,
            )
        best = scores[0]
        if best.total < self.config.acceptance_threshold:
            raise NoApplicableFrame(
                f"Best frame {best.frame.frame_id} for '{site.lemma}' scores "
                f"{best.total:.2f} below threshold {self.config.acceptance_threshold}",
                lemma=site.lemma,
            )

        epsilon = self.config.ambiguity_epsilon
        tied = [s for s in scores if best.total - s.total <= epsilon]
        if len(tied) < 2:
            return best

        # Animacy and concreteness fit can still separate near-equal totals
        selectional = [s.components.get("selectional", 0.0) for s in tied]
        top = max(selectional)
        separated = [s for s, v in zip(tied, selectional) if top - v <= epsilon]
        if len(separated) == 1:
            return separated[0]

        raise AmbiguousAssignment(
            f"Frames {[s.frame.frame_id for s in separated]} for '{site.lemma}' "
            f"tie within {epsilon}",
            lemma=site.lemma,
            candidates=separated,
        )

    # -------------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------------

    def assign(
        self,
        site: PredicateSite,
        frames: Sequence[Frame],
        sentence: Sentence,
    ) -> AssignmentOutcome:
        """Assign a role to every argument of ``site``.

        Raises:
            MalformedInputError: The predicate has no arguments although
                every candidate frame requires at least one.
        """
        frames = tuple(frames)
        cues = {arg.arg_id: cues_for(arg, sentence) for arg in site.arguments}
        outcome = AssignmentOutcome(
            assignment=RoleAssignment(site.index, site.lemma, ()),
            candidates=frames,
        )

        if not site.arguments and frames and all(
            not match_frame(f, site).compatible for f in frames
        ):
            raise MalformedInputError(
                f"Predicate '{site.lemma}' at {site.index} has no arguments "
                f"but every frame requires at least one",
                stage=STAGE,
                sentence_id=sentence.sentence_id,
            )

        chosen: FrameScore | None = None
        try:
            chosen = self.select_frame(site, frames, cues)
        except AmbiguousAssignment as e:
            ranked = sorted(
                e.candidates,
                key=lambda s: (-s.frame.frequency, -s.total, s.frame.frame_id),
            )
            chosen = ranked[0]
            logger.warning(f"{e}; using most frequent frame {chosen.frame.frame_id}")
            outcome.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.AMBIGUOUS_ASSIGNMENT,
                    message=str(e),
                    stage=STAGE,
                    word_index=site.index,
                    details={
                        "frames": [s.frame.frame_id for s in ranked],
                        "chosen": chosen.frame.frame_id,
                        "arguments": [a.arg_id for a in site.arguments],
                    },
                )
            )
        except NoApplicableFrame as e:
            if frames:
                logger.debug(f"{e}; using fallback roles")
                outcome.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.NO_APPLICABLE_FRAME,
                        message=str(e),
                        stage=STAGE,
                        severity=Severity.INFO,
                        word_index=site.index,
                        details={"arguments": [a.arg_id for a in site.arguments]},
                    )
                )

        outcome.scores = self.score_frames(site, frames, cues) if frames else []
        if chosen is not None:
            outcome.frame = chosen.frame
            outcome.assignment = self._from_frame(site, chosen, cues)
        else:
            outcome.assignment = self._fallback(site, cues)
        return outcome

    def _from_frame(
        self,
        site: PredicateSite,
        chosen: FrameScore,
        cues: dict[str, ArgumentCues],
    ) -> RoleAssignment:
        weights = self._weights
        pattern = chosen.components.get("pattern", 0.0)
        frequency = chosen.components.get("frequency", 0.0)
        used: set[ThetaRole] = set()
        entries = []

        # Matched arguments claim their frame roles before adjuncts pick defaults
        for argument in site.arguments:
            slot = chosen.match.slot_of(argument)
            if slot is None:
                continue
            fit = cues[argument.arg_id].satisfies(slot.restriction)
            confidence = (
                weights.get("pattern", 0.0) * pattern
                + weights.get("selectional", 0.0) * fit
                + weights.get("frequency", 0.0) * frequency
            )
            roles = slot.roles
            reason = f"frame {chosen.frame.frame_id} {argument.slot.value} slot"
            if site.voice is Voice.MIDDLE and argument.slot is SyntacticSlot.SUBJECT:
                roles = tuple(r for r in roles if r not in AGENTIVE_ROLES) or (ThetaRole.THEME,)
                reason += " (middle)"
            role = self._pick(roles, used)
            if role is None:
                role = self._first_free(self._fallback_roles(site, argument, cues), used)
                confidence = max(0.0, confidence - self.config.conflict_penalty)
                reason += " (preferred role taken)"
            entries.append(RoleEntry(argument, role, min(1.0, confidence), reason))
            used.add(role)

        for argument in chosen.match.unmatched:
            role = self._first_free(self._fallback_roles(site, argument, cues), used)
            entries.append(
                RoleEntry(
                    argument,
                    role,
                    min(self.config.fallback_oblique_confidence, self.config.fallback_ceiling),
                    f"adjunct '{argument.preposition}' outside frame {chosen.frame.frame_id}",
                )
            )
            used.add(role)

        return RoleAssignment(
            predicate_index=site.index,
            lemma=site.lemma,
            entries=self._ordered(site, entries),
            frame_id=chosen.frame.frame_id,
        )

    def _fallback(self, site: PredicateSite, cues: dict[str, ArgumentCues]) -> RoleAssignment:
        used: set[ThetaRole] = set()
        entries = []
        for argument in site.arguments:
            candidates = self._fallback_roles(site, argument, cues)
            role = self._first_free(candidates, used)
            confidence = (
                self.config.fallback_confidence
                if argument.slot.is_core
                else self.config.fallback_oblique_confidence
            )
            if role is not candidates[0]:
                confidence -= self.config.conflict_penalty
            confidence = max(0.0, min(confidence, self.config.fallback_ceiling))
            entries.append(
                RoleEntry(argument, role, confidence, f"fallback default for {argument.slot.value}")
            )
            used.add(role)
        logger.debug(f"Fallback roles for '{site.lemma}': {[e.role.value for e in entries]}")
        return RoleAssignment(
            predicate_index=site.index,
            lemma=site.lemma,
            entries=self._ordered(site, entries),
            fallback=True,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _fallback_roles(
        self,
        site: PredicateSite,
        argument: Argument,
        cues: dict[str, ArgumentCues],
    ) -> tuple[ThetaRole, ...]:
        slot = argument.slot
        lemma = site.lemma
        has_object = site.has(SyntacticSlot.OBJECT)

        if slot is SyntacticSlot.SUBJECT:
            if site.voice is Voice.MIDDLE:
                return (ThetaRole.THEME, ThetaRole.PATIENT, ThetaRole.AGENT)
            if lemma in PSYCH_VERBS:
                return (ThetaRole.EXPERIENCER, ThetaRole.AGENT, ThetaRole.THEME)
            if lemma in UNACCUSATIVE_VERBS and not has_object:
                return (ThetaRole.THEME, ThetaRole.PATIENT, ThetaRole.AGENT)
            if lemma in STATIVE_VERBS:
                return (ThetaRole.THEME, ThetaRole.EXPERIENCER, ThetaRole.AGENT)
            return (ThetaRole.AGENT, ThetaRole.THEME, ThetaRole.CAUSE)
        if slot is SyntacticSlot.OBJECT:
            if lemma in PSYCH_VERBS or lemma in STATIVE_VERBS:
                return (ThetaRole.THEME, ThetaRole.STIMULUS, ThetaRole.PATIENT)
            return (ThetaRole.PATIENT, ThetaRole.THEME)
        if slot is SyntacticSlot.INDIRECT_OBJECT:
            return (ThetaRole.RECIPIENT, ThetaRole.BENEFACTIVE, ThetaRole.GOAL)
        if slot is SyntacticSlot.CLAUSAL_COMPLEMENT:
            return (ThetaRole.THEME, ThetaRole.STIMULUS, ThetaRole.CONTROLLED_SUBJECT)

        preposition = argument.preposition or ""
        if preposition == "to" and has_object:
            return (ThetaRole.RECIPIENT, ThetaRole.GOAL)
        if preposition == "with" and cues[argument.arg_id].animacy is Animacy.ANIMATE:
            return (ThetaRole.COMITATIVE, ThetaRole.INSTRUMENT)
        if preposition == "by" and not site.passive:
            return (ThetaRole.LOCATION, ThetaRole.MANNER)
        return PREPOSITION_ROLES.get(preposition, DEFAULT_OBLIQUE_ROLES)

    @staticmethod
    def _pick(candidates: Sequence[ThetaRole], used: set[ThetaRole]) -> ThetaRole | None:
        for role in candidates:
            if role not in used:
                return role
        return None

    @staticmethod
    def _first_free(candidates: Sequence[ThetaRole], used: set[ThetaRole]) -> ThetaRole | None:
        for role in candidates:
            if role not in used:
                return role
        for role in CANONICAL_ROLE_ORDER:
            if role not in used:
                return role
        return None

    @staticmethod
    def _ordered(site: PredicateSite, entries: list[RoleEntry]) -> tuple[RoleEntry, ...]:
        position = {arg.arg_id: i for i, arg in enumerate(site.arguments)}
        return tuple(sorted(entries, key=lambda e: position[e.argument.arg_id]))
