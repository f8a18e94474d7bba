"""Read-only dependency graph for one sentence.

The parser is an external collaborator; this module only models its output:
words with lemma, universal part of speech, morphological features,
dependency head and relation. Input can be built from rows or read from
CoNLL-U.

Example:
    sentence = Sentence.from_rows([
        ("John", "John", "PROPN", 2, "nsubj"),
        ("slept", "sleep", "VERB", 0, "root", "Tense=Past|VerbForm=Fin"),
    ])
    sentence.root().lemma  # "sleep"
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Sequence

from .exceptions import MalformedInputError


class UPos(str, Enum):
    """Universal Dependencies coarse part-of-speech tags."""

    ADJ = "ADJ"
    ADP = "ADP"
    ADV = "ADV"
    AUX = "AUX"
    CCONJ = "CCONJ"
    DET = "DET"
    INTJ = "INTJ"
    NOUN = "NOUN"
    NUM = "NUM"
    PART = "PART"
    PRON = "PRON"
    PROPN = "PROPN"
    PUNCT = "PUNCT"
    SCONJ = "SCONJ"
    SYM = "SYM"
    VERB = "VERB"
    X = "X"

    @classmethod
    def parse(cls, value: str) -> "UPos":
        try:
            return cls(value.upper())
        except ValueError:
            return cls.X

    @property
    def is_nominal(self) -> bool:
        return self in (UPos.NOUN, UPos.PROPN, UPos.PRON, UPos.NUM)


def parse_feats(text: str | None) -> dict[str, str]:
    """Parse a UD feature string like ``Tense=Past|VerbForm=Fin``."""
    if not text or text == "_":
        return {}
    feats = {}
    for item in text.split("|"):
        key, sep, value = item.partition("=")
        if sep:
            feats[key] = value
    return feats


@dataclass(frozen=True)
class Word:
    """One token of parser output."""

    index: int
    text: str
    lemma: str
    upos: UPos
    head: int
    deprel: str
    feats: dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def relation(self) -> str:
        """Base relation without subtype (``nsubj:pass`` -> ``nsubj``)."""
        return self.deprel.split(":", 1)[0]

    @property
    def norm(self) -> str:
        return self.lemma.lower()

    def feature(self, name: str) -> str | None:
        return self.feats.get(name)

    def is_rel(self, *deprels: str) -> bool:
        """Match full relations (``nsubj:pass``) or base relations (``obl``)."""
        return self.deprel in deprels or self.relation in deprels


@dataclass(frozen=True)
class Sentence:
    """Ordered words forming a validated dependency tree."""

    words: tuple[Word, ...]
    sentence_id: str | None = None
    text: str | None = None
    _children: dict[int, tuple[Word, ...]] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "words", tuple(self.words))
        for position, word in enumerate(self.words, start=1):
            if word.index != position:
                raise MalformedInputError(
                    f"Word indices must be contiguous from 1; found {word.index} at position {position}",
                    stage="input",
                    sentence_id=self.sentence_id,
                )
        children: dict[int, list[Word]] = defaultdict(list)
        for word in self.words:
            if word.head < 0 or word.head > len(self.words) or word.head == word.index:
                raise MalformedInputError(
                    f"Word {word.index} ({word.text!r}) has invalid head {word.head}",
                    stage="input",
                    sentence_id=self.sentence_id,
                )
            children[word.head].append(word)
        object.__setattr__(self, "_children", {k: tuple(v) for k, v in children.items()})
        if not self._children.get(0):
            raise MalformedInputError(
                "Sentence has no root word", stage="input", sentence_id=self.sentence_id
            )

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Sequence[Any]],
        sentence_id: str | None = None,
    ) -> "Sentence":
        """Build from ``(text, lemma, upos, head, deprel[, feats])`` rows."""
        words = []
        for index, row in enumerate(rows, start=1):
            text, lemma, upos, head, deprel = row[:5]
            feats = row[5] if len(row) > 5 else None
            words.append(
                Word(
                    index=index,
                    text=text,
                    lemma=lemma,
                    upos=UPos.parse(upos),
                    head=int(head),
                    deprel=deprel,
                    feats=dict(feats) if isinstance(feats, dict) else parse_feats(feats),
                )
            )
        text = " ".join(w.text for w in words)
        return cls(tuple(words), sentence_id=sentence_id, text=text)

    @classmethod
    def from_conllu(cls, block: str, sentence_id: str | None = None) -> "Sentence":
        """Read one CoNLL-U sentence block.

        Columns are tab separated; whitespace separation is accepted when a
        line has no tabs. Multiword ranges and empty nodes are skipped.
        """
        words = []
        text = None
        for raw in block.strip().splitlines():
            line = raw.strip()
            if not line:
                continue
            if line.startswith("#"):
                key, _, value = line[1:].partition("=")
                if key.strip() == "sent_id" and sentence_id is None:
                    sentence_id = value.strip()
                elif key.strip() == "text":
                    text = value.strip()
                continue
            columns = line.split("\t") if "\t" in line else line.split()
            if len(columns) < 8:
                raise MalformedInputError(
                    f"CoNLL-U line has {len(columns)} columns, expected at least 8: {line!r}",
                    stage="input",
                    sentence_id=sentence_id,
                )
            if "-" in columns[0] or "." in columns[0]:
                continue
            try:
                index, head = int(columns[0]), int(columns[6])
            except ValueError as e:
                raise MalformedInputError(
                    f"Non-numeric id or head in line {line!r}",
                    stage="input",
                    sentence_id=sentence_id,
                    cause=e,
                ) from e
            words.append(
                Word(
                    index=index,
                    text=columns[1],
                    lemma=columns[2] if columns[2] != "_" else columns[1],
                    upos=UPos.parse(columns[3]),
                    head=head,
                    deprel=columns[7],
                    feats=parse_feats(columns[5]),
                )
            )
        if not words:
            raise MalformedInputError("Empty CoNLL-U block", stage="input", sentence_id=sentence_id)
        return cls(
            tuple(words),
            sentence_id=sentence_id,
            text=text or " ".join(w.text for w in words),
        )

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.words)

    def __iter__(self) -> Iterator[Word]:
        return iter(self.words)

    def get(self, index: int) -> Word:
        return self.words[index - 1]

    def root(self) -> Word:
        return self._children[0][0]

    def dependents(self, index: int, *deprels: str) -> list[Word]:
        """Children of a word, optionally filtered by relation."""
        children = self._children.get(index, ())
        if not deprels:
            return list(children)
        return [w for w in children if w.is_rel(*deprels)]

    def first_dependent(self, index: int, *deprels: str) -> Word | None:
        found = self.dependents(index, *deprels)
        return found[0] if found else None

    def subtree(self, index: int) -> list[int]:
        """Indices of a word and all its descendants, sorted."""
        result = []
        stack = [index]
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(w.index for w in self._children.get(current, ()))
        return sorted(result)

    def subtree_start(self, index: int) -> int:
        return self.subtree(index)[0]

    def preposition_of(self, index: int) -> str | None:
        """Lemma of the ``case`` marker attached to a nominal, joined for multiword cases."""
        markers = self.dependents(index, "case")
        if not markers:
            return None
        return " ".join(w.norm for w in markers)

    def determiner_of(self, index: int) -> str | None:
        det = self.first_dependent(index, "det")
        return det.norm if det else None


def load_conllu(text: str) -> list[Sentence]:
    """Split a CoNLL-U document on blank lines and read every sentence."""
    blocks = [b for b in text.strip().split("\n\n") if b.strip()]
    return [Sentence.from_conllu(block) for block in blocks]
