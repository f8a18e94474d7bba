"""eventsem: compositional event semantics for dependency-parsed English.

Assigns theta roles, reconstructs displaced arguments through movement
chains, builds Neo-Davidsonian events and composes them into ranked DRS
and lambda-term readings.

Example:
    >>> from eventsem import SemanticAnalyzer, Sentence
    >>> analyzer = SemanticAnalyzer()
    >>> result = analyzer.analyze(Sentence.from_conllu(block))
    >>> print(result.default_reading.drs)
"""

__version__ = "0.1.0"

from .config import EngineConfig, load_config
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .exceptions import (
    AmbiguousAssignment,
    AnalysisCancelled,
    AnalysisError,
    ConfigurationError,
    EventSemError,
    IncompleteEventError,
    LexiconError,
    MalformedInputError,
    NoApplicableFrame,
    ReductionDepthExceeded,
    TypeMismatchError,
)
from .models import Sentence, UPos, Word, load_conllu
from .pipeline import (
    AnalysisFailure,
    AnalysisResult,
    PipelineMetrics,
    SemanticAnalyzer,
    StageResult,
    StageStatus,
)
from .types import ArgumentOrigin, SyntacticSlot, ThetaRole, Voice

__all__ = [
    "AmbiguousAssignment",
    "AnalysisCancelled",
    "AnalysisError",
    "AnalysisFailure",
    "AnalysisResult",
    "ArgumentOrigin",
    "ConfigurationError",
    "Diagnostic",
    "DiagnosticKind",
    "EngineConfig",
    "EventSemError",
    "IncompleteEventError",
    "LexiconError",
    "MalformedInputError",
    "NoApplicableFrame",
    "PipelineMetrics",
    "ReductionDepthExceeded",
    "SemanticAnalyzer",
    "Sentence",
    "Severity",
    "StageResult",
    "StageStatus",
    "SyntacticSlot",
    "ThetaRole",
    "TypeMismatchError",
    "UPos",
    "Voice",
    "Word",
    "load_conllu",
    "__version__",
]
