"""Lexical Query Interface.

Frames come from external lexical resources through ``LexicalResource``
and are cached process-wide in a ``FrameCache`` that analyses read
without locking.
"""

from .builtin import BUILTIN_FRAMES, builtin_frames, builtin_lexicon
from .cache import FrameCache, PopulateReport
from .resource import InMemoryLexicon, LexicalResource
from .types import Frame, FrameSlot, SelectionalRestriction

__all__ = [
    "BUILTIN_FRAMES",
    "Frame",
    "FrameCache",
    "FrameSlot",
    "InMemoryLexicon",
    "LexicalResource",
    "PopulateReport",
    "SelectionalRestriction",
    "builtin_frames",
    "builtin_lexicon",
]
