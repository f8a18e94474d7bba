"""Pytest configuration for eventsem tests.

Sentences are written as Universal Dependencies rows:
``(text, lemma, upos, head, deprel[, feats])``.
"""

from typing import Any, Callable, Sequence

import pytest

from eventsem.config import EngineConfig
from eventsem.lexicon import FrameCache, builtin_frames
from eventsem.models import Sentence
from eventsem.pipeline import SemanticAnalyzer


# =============================================================================
# Lexicon and Analyzer
# =============================================================================


@pytest.fixture
def builtin_cache() -> FrameCache:
    """Frame cache seeded with the bundled English frames."""
    return FrameCache.seeded(builtin_frames())


@pytest.fixture
def analyzer(builtin_cache: FrameCache) -> SemanticAnalyzer:
    return SemanticAnalyzer(EngineConfig(), frame_cache=builtin_cache)


@pytest.fixture
def make_sentence() -> Callable[..., Sentence]:
    """Factory fixture building a Sentence from UD rows."""

    def _make(rows: Sequence[Sequence[Any]], sentence_id: str | None = None) -> Sentence:
        return Sentence.from_rows(rows, sentence_id=sentence_id)

    return _make


# =============================================================================
# Sentences
# =============================================================================


PASSIVE_ROWS = [
    ("The", "the", "DET", 2, "det"),
    ("cake", "cake", "NOUN", 4, "nsubj:pass"),
    ("was", "be", "AUX", 4, "aux:pass"),
    ("eaten", "eat", "VERB", 0, "root", "VerbForm=Part|Voice=Pass"),
    ("by", "by", "ADP", 6, "case"),
    ("John", "John", "PROPN", 4, "obl"),
    (".", ".", "PUNCT", 4, "punct"),
]

AGENTLESS_PASSIVE_ROWS = [
    ("The", "the", "DET", 2, "det"),
    ("vase", "vase", "NOUN", 4, "nsubj:pass"),
    ("was", "be", "AUX", 4, "aux:pass"),
    ("broken", "break", "VERB", 0, "root", "VerbForm=Part|Voice=Pass"),
]

RAISING_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("seems", "seem", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
    ("to", "to", "PART", 4, "mark"),
    ("like", "like", "VERB", 2, "xcomp", "VerbForm=Inf"),
    ("Mary", "Mary", "PROPN", 4, "obj"),
]

ECM_ROWS = [
    ("Mary", "Mary", "PROPN", 2, "nsubj"),
    ("wants", "want", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
    ("John", "John", "PROPN", 2, "obj"),
    ("to", "to", "PART", 5, "mark"),
    ("leave", "leave", "VERB", 2, "xcomp", "VerbForm=Inf"),
]

TOUGH_ROWS = [
    ("John", "John", "PROPN", 3, "nsubj"),
    ("is", "be", "AUX", 3, "cop"),
    ("easy", "easy", "ADJ", 0, "root"),
    ("to", "to", "PART", 5, "mark"),
    ("please", "please", "VERB", 3, "xcomp", "VerbForm=Inf"),
]

CONTROL_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("tried", "try", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("to", "to", "PART", 4, "mark"),
    ("leave", "leave", "VERB", 2, "xcomp", "VerbForm=Inf"),
]

OBJECT_CONTROL_ROWS = [
    ("Mary", "Mary", "PROPN", 2, "nsubj"),
    ("persuaded", "persuade", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("John", "John", "PROPN", 2, "obj"),
    ("to", "to", "PART", 5, "mark"),
    ("leave", "leave", "VERB", 2, "xcomp", "VerbForm=Inf"),
]

RELATIVE_ROWS = [
    ("Mary", "Mary", "PROPN", 2, "nsubj"),
    ("saw", "see", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("the", "the", "DET", 4, "det"),
    ("cake", "cake", "NOUN", 2, "obj"),
    ("that", "that", "PRON", 7, "obj"),
    ("John", "John", "PROPN", 7, "nsubj"),
    ("ate", "eat", "VERB", 4, "acl:relcl", "Tense=Past|VerbForm=Fin"),
]

WH_ROWS = [
    ("What", "what", "PRON", 4, "obj"),
    ("did", "do", "AUX", 4, "aux"),
    ("John", "John", "PROPN", 4, "nsubj"),
    ("eat", "eat", "VERB", 0, "root", "VerbForm=Inf"),
    ("?", "?", "PUNCT", 4, "punct"),
]

LONG_WH_ROWS = [
    ("What", "what", "PRON", 7, "obj"),
    ("did", "do", "AUX", 4, "aux"),
    ("Mary", "Mary", "PROPN", 4, "nsubj"),
    ("say", "say", "VERB", 0, "root", "VerbForm=Inf"),
    ("that", "that", "SCONJ", 7, "mark"),
    ("John", "John", "PROPN", 7, "nsubj"),
    ("ate", "eat", "VERB", 4, "ccomp", "Tense=Past|VerbForm=Fin"),
    ("?", "?", "PUNCT", 4, "punct"),
]

ISLAND_WH_ROWS = [
    ("What", "what", "PRON", 6, "obj"),
    ("did", "do", "AUX", 4, "aux"),
    ("John", "John", "PROPN", 4, "nsubj"),
    ("leave", "leave", "VERB", 0, "root", "VerbForm=Inf"),
    ("before", "before", "SCONJ", 6, "mark"),
    ("eating", "eat", "VERB", 4, "advcl", "VerbForm=Ger"),
    ("?", "?", "PUNCT", 4, "punct"),
]

SCOPE_ROWS = [
    ("Every", "every", "DET", 2, "det"),
    ("student", "student", "NOUN", 3, "nsubj"),
    ("read", "read", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("a", "a", "DET", 5, "det"),
    ("book", "book", "NOUN", 3, "obj"),
]

NEGATION_ROWS = [
    ("John", "John", "PROPN", 4, "nsubj"),
    ("did", "do", "AUX", 4, "aux"),
    ("not", "not", "PART", 4, "advmod", "Polarity=Neg"),
    ("sleep", "sleep", "VERB", 0, "root", "VerbForm=Inf"),
]

CONDITIONAL_ROWS = [
    ("If", "if", "SCONJ", 3, "mark"),
    ("John", "John", "PROPN", 3, "nsubj"),
    ("leaves", "leave", "VERB", 6, "advcl", "Tense=Pres|VerbForm=Fin"),
    (",", ",", "PUNCT", 3, "punct"),
    ("Mary", "Mary", "PROPN", 6, "nsubj"),
    ("sleeps", "sleep", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
]

UNKNOWN_VERB_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("glorped", "glorp", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("the", "the", "DET", 4, "det"),
    ("widget", "widget", "NOUN", 2, "obj"),
]

INCOMPLETE_PUT_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("put", "put", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("the", "the", "DET", 4, "det"),
    ("book", "book", "NOUN", 2, "obj"),
]

SIMPLE_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("slept", "sleep", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
]

COORDINATION_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("ate", "eat", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ("and", "and", "CCONJ", 4, "cc"),
    ("drank", "drink", "VERB", 2, "conj", "Tense=Past|VerbForm=Fin"),
]

PASSIVE_RAISING_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("seems", "seem", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
    ("to", "to", "PART", 5, "mark"),
    ("be", "be", "AUX", 5, "aux:pass"),
    ("liked", "like", "VERB", 2, "xcomp", "VerbForm=Part|Voice=Pass"),
]

FINITE_RAISING_ROWS = [
    ("John", "John", "PROPN", 2, "nsubj"),
    ("seems", "seem", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
    ("that", "that", "SCONJ", 4, "mark"),
    ("likes", "like", "VERB", 2, "ccomp", "Tense=Pres|VerbForm=Fin"),
    ("Mary", "Mary", "PROPN", 4, "obj"),
]

MIDDLE_ROWS = [
    ("The", "the", "DET", 2, "det"),
    ("book", "book", "NOUN", 3, "nsubj"),
    ("reads", "read", "VERB", 0, "root", "Tense=Pres|VerbForm=Fin"),
    ("easily", "easily", "ADV", 3, "advmod"),
]


@pytest.fixture
def passive_sentence() -> Sentence:
    """'The cake was eaten by John.'"""
    return Sentence.from_rows(PASSIVE_ROWS, sentence_id="passive")


@pytest.fixture
def agentless_passive_sentence() -> Sentence:
    """'The vase was broken'"""
    return Sentence.from_rows(AGENTLESS_PASSIVE_ROWS, sentence_id="agentless")


@pytest.fixture
def raising_sentence() -> Sentence:
    """'John seems to like Mary'"""
    return Sentence.from_rows(RAISING_ROWS, sentence_id="raising")


@pytest.fixture
def ecm_sentence() -> Sentence:
    """'Mary wants John to leave'"""
    return Sentence.from_rows(ECM_ROWS, sentence_id="ecm")


@pytest.fixture
def tough_sentence() -> Sentence:
    """'John is easy to please'"""
    return Sentence.from_rows(TOUGH_ROWS, sentence_id="tough")


@pytest.fixture
def control_sentence() -> Sentence:
    """'John tried to leave'"""
    return Sentence.from_rows(CONTROL_ROWS, sentence_id="control")


@pytest.fixture
def object_control_sentence() -> Sentence:
    """'Mary persuaded John to leave'"""
    return Sentence.from_rows(OBJECT_CONTROL_ROWS, sentence_id="object-control")


@pytest.fixture
def relative_sentence() -> Sentence:
    """'Mary saw the cake that John ate'"""
    return Sentence.from_rows(RELATIVE_ROWS, sentence_id="relative")


@pytest.fixture
def wh_sentence() -> Sentence:
    """'What did John eat?'"""
    return Sentence.from_rows(WH_ROWS, sentence_id="wh")


@pytest.fixture
def long_wh_sentence() -> Sentence:
    """'What did Mary say that John ate?'"""
    return Sentence.from_rows(LONG_WH_ROWS, sentence_id="long-wh")


@pytest.fixture
def island_wh_sentence() -> Sentence:
    """'What did John leave before eating?'"""
    return Sentence.from_rows(ISLAND_WH_ROWS, sentence_id="island")


@pytest.fixture
def scope_sentence() -> Sentence:
    """'Every student read a book'"""
    return Sentence.from_rows(SCOPE_ROWS, sentence_id="scope")


@pytest.fixture
def negation_sentence() -> Sentence:
    """'John did not sleep'"""
    return Sentence.from_rows(NEGATION_ROWS, sentence_id="negation")


@pytest.fixture
def conditional_sentence() -> Sentence:
    """'If John leaves, Mary sleeps'"""
    return Sentence.from_rows(CONDITIONAL_ROWS, sentence_id="conditional")


@pytest.fixture
def unknown_verb_sentence() -> Sentence:
    """'John glorped the widget'"""
    return Sentence.from_rows(UNKNOWN_VERB_ROWS, sentence_id="unknown")


@pytest.fixture
def incomplete_sentence() -> Sentence:
    """'John put the book'"""
    return Sentence.from_rows(INCOMPLETE_PUT_ROWS, sentence_id="incomplete")


@pytest.fixture
def simple_sentence() -> Sentence:
    """'John slept'"""
    return Sentence.from_rows(SIMPLE_ROWS, sentence_id="simple")


@pytest.fixture
def coordination_sentence() -> Sentence:
    """'John ate and drank'"""
    return Sentence.from_rows(COORDINATION_ROWS, sentence_id="coordination")


@pytest.fixture
def passive_raising_sentence() -> Sentence:
    """'John seems to be liked'"""
    return Sentence.from_rows(PASSIVE_RAISING_ROWS, sentence_id="passive-raising")


@pytest.fixture
def finite_raising_sentence() -> Sentence:
    """'John seems that likes Mary'"""
    return Sentence.from_rows(FINITE_RAISING_ROWS, sentence_id="finite-raising")


@pytest.fixture
def middle_sentence() -> Sentence:
    """'The book reads easily'"""
    return Sentence.from_rows(MIDDLE_ROWS, sentence_id="middle")
