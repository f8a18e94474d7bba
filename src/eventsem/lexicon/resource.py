"""Lexical resource protocol and an in-memory implementation.

Real deployments plug verb-frame, frame-semantic or synonym databases in
behind ``LexicalResource``. An empty list is a valid answer: the theta
assigner falls back to its default role heuristics.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Iterable, Protocol, runtime_checkable

import yaml

from ..exceptions import LexiconError
from .types import Frame

logger = logging.getLogger(__name__)


@runtime_checkable
class LexicalResource(Protocol):
    """Protocol for lexical resource engines."""

    name: str

    async def lookup(self, lemma: str) -> list[Frame]:
        """Return every frame known for a lemma."""
        ...


class InMemoryLexicon:
    """Lexical resource backed by a dictionary of frames.

    Example:
        lexicon = InMemoryLexicon.from_yaml("frames.yaml")
        frames = await lexicon.lookup("eat")
    """

    def __init__(self, name: str, frames: Iterable[Frame] = ()):
        self.name = name
        self._frames: dict[str, list[Frame]] = defaultdict(list)
        for frame in frames:
            self._frames[frame.lemma].append(frame)

    def __len__(self) -> int:
        return sum(len(frames) for frames in self._frames.values())

    def __contains__(self, lemma: str) -> bool:
        return lemma.lower() in self._frames

    @property
    def lemmas(self) -> list[str]:
        return sorted(self._frames)

    async def lookup(self, lemma: str) -> list[Frame]:
        return list(self._frames.get(lemma.lower(), ()))

    def frames(self) -> list[Frame]:
        return [f for frames in self._frames.values() for f in frames]

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str = "memory") -> "InMemoryLexicon":
        """Build from ``{lemma: [frame, ...]}``."""
        frames = []
        for lemma, entries in data.items():
            for entry in entries or []:
                frames.append(Frame.from_dict(entry, lemma=lemma, source=name))
        return cls(name, frames)

    @classmethod
    def from_yaml(cls, path: Path | str, name: str | None = None) -> "InMemoryLexicon":
        """Load frames from a YAML file with a top-level ``frames`` mapping."""
        path = Path(path)
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise LexiconError(f"Failed to load lexicon {path}", resource=str(path), cause=e) from e

        frames = raw.get("frames", raw) if isinstance(raw, dict) else None
        if not isinstance(frames, dict):
            raise LexiconError(f"Lexicon {path} must map lemmas to frame lists", resource=str(path))

        lexicon = cls.from_dict(frames, name=name or path.stem)
        logger.info(f"Loaded {len(lexicon)} frames for {len(lexicon.lemmas)} lemmas from {path}")
        return lexicon

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """Serialize to dictionary."""
        return {
            lemma: [{k: v for k, v in f.to_dict().items() if k != "lemma"} for f in frames]
            for lemma, frames in sorted(self._frames.items())
        }
