"""Tests for predicate and argument extraction."""

from eventsem.extraction import PredicateExtractor
from eventsem.types import SyntacticSlot, Voice


class TestPredicateDiscovery:
    """Tests for finding predicate sites."""

    def test_passive_site(self, passive_sentence):
        """Test a passive verb with its surface arguments."""
        sites = PredicateExtractor().extract(passive_sentence)

        assert len(sites) == 1
        site = sites[0]
        assert site.lemma == "eat"
        assert site.passive is True
        assert site.finite is True
        assert site.argument(SyntacticSlot.SUBJECT).word_index == 2
        oblique = site.argument(SyntacticSlot.OBLIQUE, "by")
        assert oblique.word_index == 6
        assert oblique.arg_id == "p4:oblique:by:w6"

    def test_raising_sites(self, raising_sentence):
        """Test matrix and embedded predicates with clause properties."""
        sites = {s.lemma: s for s in PredicateExtractor().extract(raising_sentence)}

        assert set(sites) == {"seem", "like"}
        assert sites["seem"].finite is True
        assert sites["like"].finite is False
        assert sites["like"].parent_index == 2
        assert sites["like"].depth == 1
        complement = sites["seem"].argument(SyntacticSlot.CLAUSAL_COMPLEMENT)
        assert complement.word_index == 4
        assert complement.is_clausal

    def test_copular_adjective_is_predicate(self, tough_sentence):
        """Test an adjective with a copula heads a clause."""
        sites = PredicateExtractor().extract(tough_sentence)
        assert [s.lemma for s in sites] == ["easy", "please"]

    def test_auxiliaries_are_not_predicates(self, wh_sentence):
        """Test do-support is not a predicate."""
        sites = PredicateExtractor().extract(wh_sentence)
        assert [s.lemma for s in sites] == ["eat"]
        assert sites[0].finite is True


class TestArguments:
    """Tests for argument slot mapping."""

    def test_arguments_in_slot_order(self, object_control_sentence):
        """Test arguments are sorted subject, object, clausal."""
        site = PredicateExtractor().extract(object_control_sentence)[0]
        assert [a.slot for a in site.arguments] == [
            SyntacticSlot.SUBJECT,
            SyntacticSlot.OBJECT,
            SyntacticSlot.CLAUSAL_COMPLEMENT,
        ]

    def test_time_oblique_is_adjunct(self, make_sentence):
        """Test temporal obliques are not arguments."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("slept", "sleep", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("for", "for", "ADP", 5, "case"),
            ("an", "a", "DET", 5, "det"),
            ("hour", "hour", "NOUN", 2, "obl"),
        ])
        site = PredicateExtractor().extract(sentence)[0]
        assert not site.has(SyntacticSlot.OBLIQUE)

    def test_imperative_detection(self, make_sentence):
        """Test a bare root verb with no subject is imperative."""
        sentence = make_sentence([
            ("Eat", "eat", "VERB", 0, "root", "VerbForm=Inf"),
            ("the", "the", "DET", 3, "det"),
            ("cake", "cake", "NOUN", 1, "obj"),
        ])
        site = PredicateExtractor().extract(sentence)[0]
        assert site.imperative is True
        assert not site.has(SyntacticSlot.SUBJECT)

    def test_relative_clause_site(self, relative_sentence):
        """Test relative clause heads report their relation."""
        sites = {s.lemma: s for s in PredicateExtractor().extract(relative_sentence)}
        assert sites["eat"].is_relative_clause
        assert sites["eat"].argument(SyntacticSlot.OBJECT).word_index == 5


class TestVoice:
    """Tests for voice classification."""

    def test_passive_voice(self, passive_sentence):
        """Test passive marking wins over every other cue."""
        site = PredicateExtractor().extract(passive_sentence)[0]
        assert site.voice is Voice.PASSIVE

    def test_active_voice(self, simple_sentence, scope_sentence):
        """Test agentive subjects and transitive clauses stay active."""
        assert PredicateExtractor().extract(simple_sentence)[0].voice is Voice.ACTIVE
        assert PredicateExtractor().extract(scope_sentence)[0].voice is Voice.ACTIVE

    def test_middle_with_facility_adverb(self, middle_sentence):
        """Test 'The book reads easily' is middle."""
        site = PredicateExtractor().extract(middle_sentence)[0]
        assert site.voice is Voice.MIDDLE

    def test_middle_change_of_state(self, make_sentence):
        """Test an intransitive change-of-state verb with a non-agentive subject."""
        sentence = make_sentence([
            ("The", "the", "DET", 2, "det"),
            ("door", "door", "NOUN", 3, "nsubj"),
            ("opened", "open", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
        ])
        assert PredicateExtractor().extract(sentence)[0].voice is Voice.MIDDLE

    def test_pronoun_subject_is_not_middle(self, make_sentence):
        """Test 'They opened' keeps an agentive reading."""
        sentence = make_sentence([
            ("They", "they", "PRON", 2, "nsubj"),
            ("opened", "open", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
        ])
        assert PredicateExtractor().extract(sentence)[0].voice is Voice.ACTIVE

    def test_reflexive(self, make_sentence):
        """Test a reflexive object marks the clause reflexive."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("washed", "wash", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("himself", "himself", "PRON", 2, "obj", "Case=Acc|Reflex=Yes"),
        ])
        assert PredicateExtractor().extract(sentence)[0].voice is Voice.REFLEXIVE

    def test_reciprocal(self, make_sentence):
        """Test 'each other' marks the clause reciprocal."""
        sentence = make_sentence([
            ("They", "they", "PRON", 2, "nsubj"),
            ("saw", "see", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("each", "each", "DET", 2, "obj"),
            ("other", "other", "ADJ", 3, "fixed"),
        ])
        assert PredicateExtractor().extract(sentence)[0].voice is Voice.RECIPROCAL
