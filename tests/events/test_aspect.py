"""Tests for aspectual classification."""

import pytest

from eventsem.events import AspectClassifier, AspectualClass
from eventsem.extraction import PredicateExtractor


def classify(sentence, cache, changes_state=False):
    site = PredicateExtractor().extract(sentence)[0]
    frames = cache.frames_for(site.lemma)
    frame = frames[0] if frames else None
    return AspectClassifier().classify(site, frame, sentence, changes_state)


class TestVendlerClasses:
    """Tests for base classification."""

    def test_state_verb(self, make_sentence, builtin_cache):
        """Test psych verbs are states."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("knows", "know", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
            ("Mary", "Mary", "PROPN", 2, "obj"),
        ])
        assert classify(sentence, builtin_cache) is AspectualClass.STATE

    def test_activity_verb(self, simple_sentence, builtin_cache):
        """Test an intransitive activity."""
        assert classify(simple_sentence, builtin_cache) is AspectualClass.ACTIVITY

    def test_quantized_object_makes_accomplishment(self, make_sentence, builtin_cache):
        """Test an incremental verb with a bounded object is telic."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("ate", "eat", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("an", "a", "DET", 4, "det"),
            ("apple", "apple", "NOUN", 2, "obj"),
        ])
        assert classify(sentence, builtin_cache) is AspectualClass.ACCOMPLISHMENT

    def test_bare_plural_object_is_activity(self, make_sentence, builtin_cache):
        """Test an incremental verb with a bare object is atelic."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("ate", "eat", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("apples", "apple", "NOUN", 2, "obj", "Number=Plur"),
        ])
        assert classify(sentence, builtin_cache) is AspectualClass.ACTIVITY

    def test_achievement_verb(self, control_sentence, builtin_cache):
        """Test punctual verbs are achievements."""
        site = PredicateExtractor().extract(control_sentence)[1]
        frame = builtin_cache.frames_for("leave")[0]
        aspect = AspectClassifier().classify(site, frame, control_sentence)
        assert aspect is AspectualClass.ACHIEVEMENT

    def test_change_of_state(self, make_sentence, builtin_cache):
        """Test a change of state on a non-achievement verb is an accomplishment."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("flattened", "flatten", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("the", "the", "DET", 4, "det"),
            ("box", "box", "NOUN", 2, "obj"),
        ])
        assert classify(sentence, builtin_cache, changes_state=True) is AspectualClass.ACCOMPLISHMENT

    def test_directed_motion(self, make_sentence, builtin_cache):
        """Test an activity with a goal phrase is an accomplishment."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("ran", "run", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("to", "to", "ADP", 5, "case"),
            ("the", "the", "DET", 5, "det"),
            ("store", "store", "NOUN", 2, "obl"),
        ])
        assert classify(sentence, builtin_cache) is AspectualClass.ACCOMPLISHMENT


class TestAdverbials:
    """Tests for time adverbial adjustment."""

    def test_for_adverbial_detelicizes(self, make_sentence, builtin_cache):
        """Test 'for an hour' turns an accomplishment into an activity."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("read", "read", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("the", "the", "DET", 4, "det"),
            ("book", "book", "NOUN", 2, "obj"),
            ("for", "for", "ADP", 7, "case"),
            ("an", "a", "DET", 7, "det"),
            ("hour", "hour", "NOUN", 2, "obl"),
        ])
        assert classify(sentence, builtin_cache) is AspectualClass.ACTIVITY

    def test_in_adverbial_telicizes(self, make_sentence, builtin_cache):
        """Test 'in an hour' makes an activity telic."""
        sentence = make_sentence([
            ("John", "John", "PROPN", 2, "nsubj"),
            ("slept", "sleep", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
            ("in", "in", "ADP", 5, "case"),
            ("an", "a", "DET", 5, "det"),
            ("hour", "hour", "NOUN", 2, "obl"),
        ])
        assert classify(sentence, builtin_cache) is AspectualClass.ACCOMPLISHMENT

    @pytest.mark.parametrize(
        "aspect,preposition,accepted",
        [
            (AspectualClass.ACTIVITY, "for", True),
            (AspectualClass.ACCOMPLISHMENT, "for", False),
            (AspectualClass.ACCOMPLISHMENT, "in", True),
            (AspectualClass.STATE, "in", False),
            (AspectualClass.ACHIEVEMENT, "at", True),
        ],
    )
    def test_accepts_adverbial(self, aspect, preposition, accepted):
        """Test compatibility of classes with time adverbials."""
        assert aspect.accepts_adverbial(preposition) is accepted

    def test_class_properties(self):
        """Test telicity and dynamicity flags."""
        assert AspectualClass.ACHIEVEMENT.is_telic
        assert not AspectualClass.ACHIEVEMENT.is_durative
        assert not AspectualClass.STATE.is_dynamic
        assert not AspectualClass.STATE.allows_progressive
