"""Diagnostics reported alongside analysis results.

Reported errors (locality violations, incomplete events, type mismatches)
and degraded paths (ambiguous frames, missing frames, lexicon timeouts)
never stop the pipeline. Each diagnostic names the argument or event it
concerns and the word it came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DiagnosticKind(str, Enum):
    LOCALITY_VIOLATION = "locality_violation"
    INCOMPLETE_EVENT = "incomplete_event"
    AMBIGUOUS_ASSIGNMENT = "ambiguous_assignment"
    TYPE_MISMATCH = "type_mismatch"
    NO_APPLICABLE_FRAME = "no_applicable_frame"
    LEXICON_TIMEOUT = "lexicon_timeout"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding from one stage."""

    kind: DiagnosticKind
    message: str
    stage: str
    severity: Severity = Severity.WARNING
    word_index: int | None = None
    argument_id: str | None = None
    event_id: int | None = None
    details: dict[str, Any] = field(default_factory=dict, hash=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "stage": self.stage,
            "severity": self.severity.value,
            "word_index": self.word_index,
            "argument_id": self.argument_id,
            "event_id": self.event_id,
            "details": dict(self.details),
        }
