"""Theta-Role Assigner."""

from .assigner import (
    AssignmentOutcome,
    FrameScore,
    RoleAssignment,
    RoleEntry,
    ThetaRoleAssigner,
)
from .cues import Animacy, ArgumentCues, Definiteness, cues_for
from .strategies import (
    AssignmentStrategy,
    FrequencyStrategy,
    PatternMatchStrategy,
    SelectionalStrategy,
    SlotMatch,
    match_frame,
)

__all__ = [
    "Animacy",
    "ArgumentCues",
    "AssignmentOutcome",
    "AssignmentStrategy",
    "Definiteness",
    "FrameScore",
    "FrequencyStrategy",
    "PatternMatchStrategy",
    "RoleAssignment",
    "RoleEntry",
    "SelectionalStrategy",
    "SlotMatch",
    "ThetaRoleAssigner",
    "cues_for",
    "match_frame",
]
