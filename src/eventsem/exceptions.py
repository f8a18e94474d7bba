"""Standard exception hierarchy for eventsem.

All eventsem exceptions inherit from EventSemError, making it easy
to catch all library-specific errors.

Exception Hierarchy:
    EventSemError (base)
    ├── ConfigurationError - Invalid configuration
    ├── LexiconError - Lexical resource failures
    ├── FrameSelectionError - Base for frame selection outcomes
    │   ├── NoApplicableFrame - No candidate frame fits the arguments
    │   └── AmbiguousAssignment - Top frames tie within epsilon
    ├── IncompleteEventError - Frame-required role left unfilled
    ├── TypeMismatchError - Lambda application with incompatible types
    └── AnalysisError - Fatal for one sentence
        ├── MalformedInputError - Inconsistent dependency input
        ├── ReductionDepthExceeded - Beta reduction did not terminate
        └── AnalysisCancelled - Analysis abandoned at a stage boundary
"""

from __future__ import annotations

from typing import Any


class EventSemError(Exception):
    """Base exception for all eventsem errors.

    Catch this to handle any library-specific exception:
        try:
            result = analyzer.analyze(sentence)
        except EventSemError as e:
            logger.error(f"eventsem error: {e}")
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{super().__str__()} (caused by: {self.cause})"
        return super().__str__()


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(EventSemError):
    """Invalid configuration.

    Raised when EngineConfig has out-of-range weights or thresholds,
    or when a configuration file cannot be parsed.
    """

    pass


# =============================================================================
# Lexicon Errors
# =============================================================================


class LexiconError(EventSemError):
    """Lexical resource error.

    Raised when:
    - A lexicon file cannot be loaded
    - A frame definition references an unknown role or slot
    """

    def __init__(
        self,
        message: str,
        resource: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.resource = resource


# =============================================================================
# Frame Selection
# =============================================================================


class FrameSelectionError(EventSemError):
    """Base for frame selection outcomes that the assigner degrades from."""

    def __init__(self, message: str, lemma: str, cause: Exception | None = None):
        super().__init__(message, cause)
        self.lemma = lemma


class NoApplicableFrame(FrameSelectionError):
    """No candidate frame's arity matches the predicate's arguments.

    Recoverable: the assigner switches to fallback role defaults.
    """

    pass


class AmbiguousAssignment(FrameSelectionError):
    """Two or more frames score within epsilon of each other.

    Recoverable: surfaced as a diagnostic and resolved by frame frequency.
    """

    def __init__(self, message: str, lemma: str, candidates: list[Any]):
        super().__init__(message, lemma)
        self.candidates = candidates


# =============================================================================
# Composition Errors
# =============================================================================


class IncompleteEventError(EventSemError):
    """A frame-required role has no argument and no default insertion rule.

    Carries the best-effort event built without the missing roles.
    """

    def __init__(
        self,
        message: str,
        partial_event: Any,
        missing_roles: list[Any],
    ):
        super().__init__(message)
        self.partial_event = partial_event
        self.missing_roles = missing_roles


class TypeMismatchError(EventSemError):
    """Application of a term to an argument of the wrong semantic type."""

    def __init__(self, message: str, expected: Any = None, actual: Any = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


# =============================================================================
# Fatal Analysis Errors
# =============================================================================


class AnalysisError(EventSemError):
    """Fatal error for a single sentence's analysis.

    Other sentences in a batch are unaffected.
    """

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        sentence_id: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.stage = stage
        self.sentence_id = sentence_id


class MalformedInputError(AnalysisError):
    """Dependency input that cannot be analyzed.

    Raised when:
    - Word indices are not contiguous from 1
    - A head index references a word that does not exist
    - A predicate whose every frame needs arguments has none
    """

    pass


class ReductionDepthExceeded(AnalysisError):
    """Beta reduction exceeded the configured step bound."""

    def __init__(self, message: str, steps: int, stage: str | None = "composition"):
        super().__init__(message, stage=stage)
        self.steps = steps


class AnalysisCancelled(AnalysisError):
    """Analysis abandoned at a stage boundary."""

    pass
