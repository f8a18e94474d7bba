"""Tests for theta-role assignment."""

import pytest

from eventsem.config import ThetaConfig
from eventsem.diagnostics import DiagnosticKind
from eventsem.exceptions import AmbiguousAssignment, MalformedInputError, NoApplicableFrame
from eventsem.extraction import PredicateExtractor
from eventsem.lexicon import Frame, FrameSlot, SelectionalRestriction
from eventsem.movement import MovementDetector, Reconstructor
from eventsem.theta import Animacy, Definiteness, ThetaRoleAssigner, cues_for, match_frame
from eventsem.types import ArgumentOrigin, PredicateSite, SyntacticSlot, ThetaRole


def base_sites(sentence):
    """Run extraction and reconstruction, keyed by predicate lemma."""
    sites = PredicateExtractor().extract(sentence)
    analysis = MovementDetector().detect(sentence, sites)
    return {s.lemma: s for s in Reconstructor().reconstruct(sentence, sites, analysis)}


def two_place(frame_id, lemma, frequency, subject=SelectionalRestriction.ANY):
    return Frame(
        frame_id=frame_id,
        lemma=lemma,
        slots=(
            FrameSlot(SyntacticSlot.SUBJECT, (ThetaRole.AGENT,), restriction=subject),
            FrameSlot(SyntacticSlot.OBJECT, (ThetaRole.PATIENT,)),
        ),
        frequency=frequency,
    )


@pytest.fixture
def eat_sentence(make_sentence):
    """'John ate the cake'"""
    return make_sentence([
        ("John", "John", "PROPN", 2, "nsubj"),
        ("ate", "eat", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
        ("the", "the", "DET", 4, "det"),
        ("cake", "cake", "NOUN", 2, "obj"),
    ])


# =============================================================================
# Frame Selection
# =============================================================================


class TestFrameSelection:
    """Tests for weighted frame scoring."""

    def test_transitive_frame_scores(self, eat_sentence, builtin_cache):
        """Test the transitive eat frame wins with full pattern and selectional fit."""
        site = base_sites(eat_sentence)["eat"]
        assigner = ThetaRoleAssigner()
        cues = {a.arg_id: cues_for(a, eat_sentence) for a in site.arguments}

        scores = assigner.score_frames(site, builtin_cache.frames_for("eat"), cues)

        # the intransitive frame cannot place the object
        assert [s.frame.frame_id for s in scores] == ["eat-39.1-1"]
        assert scores[0].components == {"pattern": 1.0, "selectional": 1.0, "frequency": 0.9}
        assert scores[0].total == pytest.approx(0.98)

    def test_no_compatible_frame_raises(self, incomplete_sentence, builtin_cache):
        """Test select_frame reports a missing required slot."""
        site = base_sites(incomplete_sentence)["put"]
        with pytest.raises(NoApplicableFrame) as exc_info:
            ThetaRoleAssigner().select_frame(site, builtin_cache.frames_for("put"), {})
        assert exc_info.value.lemma == "put"

    def test_tie_raises_ambiguous(self, eat_sentence):
        """Test frames within epsilon raise AmbiguousAssignment."""
        site = base_sites(eat_sentence)["eat"]
        frames = [two_place("eat-a", "eat", 0.6), two_place("eat-b", "eat", 0.58)]
        cues = {a.arg_id: cues_for(a, eat_sentence) for a in site.arguments}

        with pytest.raises(AmbiguousAssignment) as exc_info:
            ThetaRoleAssigner().select_frame(site, frames, cues)
        assert len(exc_info.value.candidates) == 2

    def test_selectional_fit_breaks_tie(self, eat_sentence):
        """Test animacy separates frames whose totals are close."""
        site = base_sites(eat_sentence)["eat"]
        frames = [
            two_place("eat-inanimate", "eat", 0.9, subject=SelectionalRestriction.INANIMATE),
            two_place("eat-animate", "eat", 0.6, subject=SelectionalRestriction.ANIMATE),
        ]
        cues = {a.arg_id: cues_for(a, eat_sentence) for a in site.arguments}
        config = ThetaConfig(ambiguity_epsilon=0.2)

        chosen = ThetaRoleAssigner(config).select_frame(site, frames, cues)

        assert chosen.frame.frame_id == "eat-animate"

    def test_licensed_implicit_slot_is_compatible(self, builtin_cache):
        """Test a licensed empty subject does not make a frame incompatible."""
        site = PredicateSite(index=1, lemma="eat", licensed_implicit=frozenset({SyntacticSlot.SUBJECT}))
        match = match_frame(builtin_cache.frames_for("eat")[1], site)
        assert match.compatible
        assert [s.slot for s in match.implicit] == [SyntacticSlot.SUBJECT]


# =============================================================================
# Assignment
# =============================================================================


class TestAssignment:
    """Tests for ThetaRoleAssigner.assign."""

    def test_active_transitive(self, eat_sentence, builtin_cache):
        """Test agent and patient for an active clause."""
        site = base_sites(eat_sentence)["eat"]

        outcome = ThetaRoleAssigner().assign(site, builtin_cache.frames_for("eat"), eat_sentence)

        assignment = outcome.assignment
        assert assignment.frame_id == "eat-39.1-1"
        assert assignment.fallback is False
        assert assignment.entry_for_slot(SyntacticSlot.SUBJECT).role is ThetaRole.AGENT
        assert assignment.entry_for_slot(SyntacticSlot.OBJECT).role is ThetaRole.PATIENT
        assert assignment.entry_for_slot(SyntacticSlot.SUBJECT).confidence == pytest.approx(0.98)
        assert outcome.diagnostics == []

    def test_passive_uses_base_positions(self, passive_sentence, builtin_cache):
        """Test the by-phrase is Agent and the surface subject Patient."""
        site = base_sites(passive_sentence)["eat"]

        outcome = ThetaRoleAssigner().assign(site, builtin_cache.frames_for("eat"), passive_sentence)

        subject = outcome.assignment.entry_for_slot(SyntacticSlot.SUBJECT)
        obj = outcome.assignment.entry_for_slot(SyntacticSlot.OBJECT)
        assert (subject.argument.word_index, subject.role) == (6, ThetaRole.AGENT)
        assert subject.argument.origin is ArgumentOrigin.DEMOTED
        assert (obj.argument.word_index, obj.role) == (2, ThetaRole.PATIENT)
        assert obj.argument.origin is ArgumentOrigin.TRACE

    def test_unknown_lemma_fallback(self, unknown_verb_sentence):
        """Test fallback defaults for a lemma without frames."""
        site = base_sites(unknown_verb_sentence)["glorp"]

        outcome = ThetaRoleAssigner().assign(site, [], unknown_verb_sentence)

        assignment = outcome.assignment
        assert assignment.fallback is True
        assert assignment.frame_id is None
        assert assignment.roles == (ThetaRole.AGENT, ThetaRole.PATIENT)
        assert all(e.confidence <= 0.6 for e in assignment)
        assert assignment.entries[0].confidence == pytest.approx(0.55)
        # no candidates means nothing to report
        assert outcome.diagnostics == []

    def test_incompatible_frames_report_diagnostic(self, incomplete_sentence, builtin_cache):
        """Test fallback with a NoApplicableFrame diagnostic when frames exist."""
        site = base_sites(incomplete_sentence)["put"]

        outcome = ThetaRoleAssigner().assign(site, builtin_cache.frames_for("put"), incomplete_sentence)

        assert outcome.assignment.fallback is True
        assert outcome.frame is None
        assert outcome.reference_frame.frame_id == "put-9.1"
        assert [d.kind for d in outcome.diagnostics] == [DiagnosticKind.NO_APPLICABLE_FRAME]
        assert outcome.diagnostics[0].details["arguments"] == ["p2:subject:w1", "p2:object:w4"]

    def test_below_threshold_falls_back(self, eat_sentence, builtin_cache):
        """Test a frame below the acceptance threshold is not used."""
        site = base_sites(eat_sentence)["eat"]
        assigner = ThetaRoleAssigner(ThetaConfig(acceptance_threshold=0.99))

        outcome = assigner.assign(site, builtin_cache.frames_for("eat"), eat_sentence)

        assert outcome.assignment.fallback is True
        assert outcome.diagnostics[0].kind is DiagnosticKind.NO_APPLICABLE_FRAME
        assert outcome.scores[0].frame.frame_id == "eat-39.1-1"

    def test_ambiguity_resolved_by_frequency(self, eat_sentence):
        """Test a tie is reported and resolved to the more frequent frame."""
        site = base_sites(eat_sentence)["eat"]
        frames = [two_place("eat-b", "eat", 0.58), two_place("eat-a", "eat", 0.6)]

        outcome = ThetaRoleAssigner().assign(site, frames, eat_sentence)

        assert outcome.assignment.frame_id == "eat-a"
        diagnostic = outcome.diagnostics[0]
        assert diagnostic.kind is DiagnosticKind.AMBIGUOUS_ASSIGNMENT
        assert diagnostic.details["chosen"] == "eat-a"
        assert diagnostic.details["arguments"] == ["p2:subject:w1", "p2:object:w4"]

    def test_argumentless_predicate_is_malformed(self, make_sentence, builtin_cache):
        """Test a bare predicate whose every frame needs arguments."""
        sentence = make_sentence([("eat", "eat", "VERB", 0, "root", "Tense=Past|VerbForm=Fin")])
        site = PredicateSite(index=1, lemma="eat")

        with pytest.raises(MalformedInputError) as exc_info:
            ThetaRoleAssigner().assign(site, builtin_cache.frames_for("eat"), sentence)
        assert exc_info.value.stage == "theta"

    def test_roles_unique_per_predicate(self, raising_sentence, builtin_cache):
        """Test no role is assigned twice within one predicate."""
        for site in base_sites(raising_sentence).values():
            outcome = ThetaRoleAssigner().assign(site, builtin_cache.frames_for(site.lemma), raising_sentence)
            roles = outcome.assignment.roles
            assert len(roles) == len(set(roles))

    def test_raised_subject_is_experiencer_of_embedded(self, raising_sentence, builtin_cache):
        """Test the raised subject receives its role from the embedded verb."""
        sites = base_sites(raising_sentence)
        assigner = ThetaRoleAssigner()

        seem = assigner.assign(sites["seem"], builtin_cache.frames_for("seem"), raising_sentence)
        like = assigner.assign(sites["like"], builtin_cache.frames_for("like"), raising_sentence)

        assert seem.assignment.roles == (ThetaRole.THEME,)
        assert like.assignment.role_of(like.assignment.entries[0].argument) is ThetaRole.EXPERIENCER
        assert like.assignment.entries[0].argument.word_index == 1
        assert like.assignment.entry_for_role(ThetaRole.STIMULUS).argument.word_index == 5

    def test_middle_subject_is_theme(self, middle_sentence, builtin_cache):
        """Test 'The book reads easily' gives the subject Theme, not Agent."""
        site = base_sites(middle_sentence)["read"]

        outcome = ThetaRoleAssigner().assign(site, builtin_cache.frames_for("read"), middle_sentence)

        assert outcome.assignment.roles == (ThetaRole.THEME,)

    def test_middle_filters_agentive_frame_roles(self, middle_sentence):
        """Test a frame's agentive subject role is suppressed for a middle."""
        site = base_sites(middle_sentence)["read"]
        frame = Frame(
            frame_id="read-middle",
            lemma="read",
            slots=(FrameSlot(SyntacticSlot.SUBJECT, (ThetaRole.AGENT, ThetaRole.PATIENT)),),
            frequency=0.9,
        )

        outcome = ThetaRoleAssigner().assign(site, [frame], middle_sentence)

        entry = outcome.assignment.entries[0]
        assert outcome.assignment.frame_id == "read-middle"
        assert entry.role is ThetaRole.PATIENT
        assert entry.justification.endswith("(middle)")

    def test_middle_fallback_prefers_theme(self, middle_sentence):
        """Test fallback defaults for a middle subject without frames."""
        site = base_sites(middle_sentence)["read"]

        outcome = ThetaRoleAssigner().assign(site, [], middle_sentence)

        assert outcome.assignment.fallback is True
        assert outcome.assignment.roles == (ThetaRole.THEME,)

    def test_to_dict(self, eat_sentence, builtin_cache):
        """Test serialization of an assignment."""
        site = base_sites(eat_sentence)["eat"]
        outcome = ThetaRoleAssigner().assign(site, builtin_cache.frames_for("eat"), eat_sentence)

        data = outcome.assignment.to_dict()

        assert data["frame_id"] == "eat-39.1-1"
        assert data["entries"][0] == {
            "argument": "p2:subject:w1",
            "role": "agent",
            "confidence": 0.98,
            "justification": "frame eat-39.1-1 subject slot",
        }


# =============================================================================
# Cues
# =============================================================================


class TestCues:
    """Tests for morphosyntactic cues."""

    def test_proper_noun_cues(self, eat_sentence):
        """Test proper nouns are animate and definite."""
        site = base_sites(eat_sentence)["eat"]
        cues = cues_for(site.argument(SyntacticSlot.SUBJECT), eat_sentence)
        assert cues.animacy is Animacy.ANIMATE
        assert cues.definiteness is Definiteness.DEFINITE

    def test_common_noun_cues(self, scope_sentence):
        """Test determiners drive definiteness."""
        site = base_sites(scope_sentence)["read"]
        subject = cues_for(site.argument(SyntacticSlot.SUBJECT), scope_sentence)
        obj = cues_for(site.argument(SyntacticSlot.OBJECT), scope_sentence)
        assert subject.animacy is Animacy.ANIMATE
        assert obj.definiteness is Definiteness.INDEFINITE
        assert obj.concrete is True
        assert obj.satisfies(SelectionalRestriction.ANIMATE) == 0.5

    def test_clausal_cues(self, raising_sentence):
        """Test clausal complements satisfy proposition restrictions."""
        site = base_sites(raising_sentence)["seem"]
        cues = cues_for(site.argument(SyntacticSlot.CLAUSAL_COMPLEMENT), raising_sentence)
        assert cues.clausal
        assert cues.satisfies(SelectionalRestriction.PROPOSITION) == 1.0
        assert cues.satisfies(SelectionalRestriction.ANIMATE) == 0.0

    def test_relativizer_uses_antecedent(self, relative_sentence):
        """Test relativizer cues come from the head noun."""
        site = base_sites(relative_sentence)["eat"]
        obj = site.argument(SyntacticSlot.OBJECT)
        assert obj.antecedent_index == 4
        assert cues_for(obj, relative_sentence).lemma == "cake"
