"""Analysis pipeline: one sentence in, events and readings out.

Stages, in order:

1. ``extraction``: predicate sites in surface form
2. ``movement``: chain detection and reconstruction of base arguments
3. ``theta``: role assignment on the base configuration
4. ``rekey``: chain Tail roles copied onto their Heads
5. ``events``: Neo-Davidsonian events
6. ``composition``: DRS and lambda-term readings

Recoverable problems become diagnostics. Fatal ones (malformed input,
runaway reduction, cancellation) turn the sentence's result into an
AnalysisFailure; other sentences of a batch are unaffected.

Example:
    >>> analyzer = SemanticAnalyzer()
    >>> result = analyzer.analyze(Sentence.from_conllu(block))
    >>> result.default_reading.drs.pretty()
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Sequence, TypeVar

from .config import EngineConfig
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .drt import CompositionResult, DRTComposer, Reading
from .events import EventComposer, EventComposition
from .events.models import EventId
from .exceptions import AnalysisCancelled, AnalysisError
from .extraction import PredicateExtractor
from .lexicon import FrameCache, LexicalResource, PopulateReport, builtin_frames
from .lexicon.types import Frame
from .models import Sentence
from .movement import MovementAnalysis, MovementDetector, Reconstructor, SurfaceRole, rekey
from .theta import AssignmentOutcome, ThetaRoleAssigner
from .types import PredicateSite, ThetaRole

logger = logging.getLogger(__name__)

_R = TypeVar("_R")

STAGES = ("extraction", "movement", "theta", "rekey", "events", "composition")


# =============================================================================
# Stage Results
# =============================================================================


class StageStatus(str, Enum):
    """Status of a pipeline stage execution."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class StageResult:
    """Result from a single pipeline stage."""

    stage_name: str
    status: StageStatus
    duration_ms: float = 0.0
    error: str | None = None
    items: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "stage_name": self.stage_name,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "items": self.items,
        }


@dataclass
class PipelineMetrics:
    """Metrics from one sentence's analysis."""

    total_duration_ms: float = 0.0
    stage_results: list[StageResult] = field(default_factory=list)
    word_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "total_duration_ms": self.total_duration_ms,
            "stage_results": [s.to_dict() for s in self.stage_results],
            "word_count": self.word_count,
        }

    def get_stage(self, name: str) -> StageResult | None:
        """Get result for a specific stage."""
        for stage in self.stage_results:
            if stage.stage_name == name:
                return stage
        return None


# =============================================================================
# Analysis Results
# =============================================================================


@dataclass
class AnalysisResult:
    """Everything one successful analysis produced."""

    sentence: Sentence
    surface_sites: list[PredicateSite] = field(default_factory=list)
    sites: list[PredicateSite] = field(default_factory=list)
    movement: MovementAnalysis = field(default_factory=MovementAnalysis)
    outcomes: dict[int, AssignmentOutcome] = field(default_factory=dict)
    surface_roles: list[SurfaceRole] = field(default_factory=list)
    events: EventComposition = field(default_factory=EventComposition)
    composition: CompositionResult = field(default_factory=CompositionResult)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    metrics: PipelineMetrics = field(default_factory=PipelineMetrics)

    ok = True

    @property
    def sentence_id(self) -> str | None:
        return self.sentence.sentence_id

    @property
    def readings(self) -> list[Reading]:
        return self.composition.readings

    @property
    def default_reading(self) -> Reading | None:
        return self.composition.default

    def roles_of(self, word_index: int) -> list[tuple[int, ThetaRole, float]]:
        """``(predicate index, role, confidence)`` for every role the word fills."""
        found = []
        for predicate_index, outcome in sorted(self.outcomes.items()):
            for entry in outcome.assignment:
                if entry.argument.referent_index == word_index:
                    found.append((predicate_index, entry.role, entry.confidence))
        return found

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "ok": True,
            "sentence_id": self.sentence_id,
            "text": self.sentence.text,
            "chains": self.movement.arena.to_dict(),
            "assignments": {str(k): o.assignment.to_dict() for k, o in self.outcomes.items()},
            "surface_roles": [r.to_dict() for r in self.surface_roles],
            "events": self.events.to_dict(),
            "readings": [r.to_dict() for r in self.readings],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class AnalysisFailure:
    """A sentence whose analysis hit a fatal error."""

    sentence_id: str | None
    stage: str | None
    error: AnalysisError
    metrics: PipelineMetrics = field(default_factory=PipelineMetrics)

    ok = False

    @property
    def message(self) -> str:
        return str(self.error)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "ok": False,
            "sentence_id": self.sentence_id,
            "stage": self.stage,
            "error_type": type(self.error).__name__,
            "message": self.message,
            "metrics": self.metrics.to_dict(),
        }


# =============================================================================
# Analyzer
# =============================================================================


class SemanticAnalyzer:
    """Runs the analysis stages for sentences.

    The frame cache is shared and read-only during analysis; populate it
    with ``prepare()`` beforehand so that lexical timeouts degrade to the
    fallback path instead of blocking a sentence.

    Example:
        >>> analyzer = SemanticAnalyzer(resources=[my_lexicon])
        >>> await analyzer.prepare(sentences)
        >>> results = await analyzer.analyze_batch(sentences)
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        frame_cache: FrameCache | None = None,
        resources: Sequence[LexicalResource] = (),
    ):
        self.config = (config or EngineConfig()).validate()
        if frame_cache is None:
            seed = builtin_frames() if self.config.lexicon.use_builtin_lexicon else []
            frame_cache = FrameCache.seeded(seed, resources, self.config.lexicon)
        self.frame_cache = frame_cache

        self.extractor = PredicateExtractor()
        self.detector = MovementDetector(self.config.movement)
        self.reconstructor = Reconstructor()
        self.assigner = ThetaRoleAssigner(self.config.theta)
        self.event_composer = EventComposer(self.config.events)
        self.drt_composer = DRTComposer(self.config.composition)

    async def prepare(self, sentences: Iterable[Sentence]) -> PopulateReport:
        """Populate the frame cache with every predicate lemma of ``sentences``."""
        lemmas = set()
        for sentence in sentences:
            lemmas.update(site.lemma for site in self.extractor.extract(sentence))
        return await self.frame_cache.populate(lemmas)

    def analyze(
        self,
        sentence: Sentence | str,
        cancel: threading.Event | None = None,
    ) -> AnalysisResult | AnalysisFailure:
        """Analyze one sentence. Never raises for fatal sentence errors.

        Args:
            sentence: A Sentence, or a CoNLL-U block
            cancel: Checked at every stage boundary

        Returns:
            AnalysisResult, or AnalysisFailure naming the sentence and stage
        """
        start = time.perf_counter()
        metrics = PipelineMetrics()
        sentence_id = None
        stage = "input"
        try:
            if isinstance(sentence, str):
                sentence = Sentence.from_conllu(sentence)
            sentence_id = sentence.sentence_id
            metrics.word_count = len(sentence)
            result = AnalysisResult(sentence=sentence, metrics=metrics)

            stage = "extraction"
            result.surface_sites = self._run_stage(stage, metrics, cancel, lambda: self.extractor.extract(sentence))

            stage = "movement"
            result.movement, result.sites = self._run_stage(stage, metrics, cancel, lambda: self._movement(result))

            stage = "theta"
            result.outcomes = self._run_stage(stage, metrics, cancel, lambda: self._assign(result))

            stage = "rekey"
            result.surface_roles = self._run_stage(
                stage,
                metrics,
                cancel,
                lambda: rekey(result.movement, {i: o.assignment for i, o in result.outcomes.items()}),
            )

            stage = "events"
            result.events = self._run_stage(
                stage,
                metrics,
                cancel,
                lambda: self.event_composer.compose(sentence, result.sites, result.outcomes),
            )
            result.diagnostics.extend(result.events.diagnostics)

            stage = "composition"
            result.composition = self._run_stage(stage, metrics, cancel, lambda: self._compose(result))
            result.diagnostics.extend(result.composition.diagnostics)

        except AnalysisError as e:
            e.stage = e.stage or stage
            e.sentence_id = e.sentence_id or sentence_id
            if isinstance(e, AnalysisCancelled):
                logger.info(f"Analysis of {sentence_id or 'sentence'} cancelled before {e.stage}")
            else:
                logger.error(f"Analysis of {sentence_id or 'sentence'} failed in {e.stage}: {e}")
            metrics.total_duration_ms = (time.perf_counter() - start) * 1000
            return AnalysisFailure(sentence_id=sentence_id, stage=e.stage, error=e, metrics=metrics)
        except Exception as e:
            logger.error(f"Unexpected error analyzing {sentence_id or 'sentence'} in {stage}: {e}", exc_info=True)
            error = AnalysisError(
                f"Unexpected {type(e).__name__}: {e}",
                stage=stage,
                sentence_id=sentence_id,
                cause=e,
            )
            metrics.total_duration_ms = (time.perf_counter() - start) * 1000
            return AnalysisFailure(sentence_id=sentence_id, stage=stage, error=error, metrics=metrics)

        metrics.total_duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Analyzed {sentence_id or 'sentence'}: {len(result.events)} event(s), "
            f"{len(result.readings)} reading(s), {len(result.diagnostics)} diagnostic(s) "
            f"in {metrics.total_duration_ms:.1f}ms"
        )
        return result

    async def analyze_batch(
        self,
        sentences: Sequence[Sentence | str],
        cancel: threading.Event | None = None,
    ) -> list[AnalysisResult | AnalysisFailure]:
        """Analyze sentences concurrently in worker threads, preserving order."""
        tasks = [asyncio.to_thread(self.analyze, sentence, cancel) for sentence in sentences]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[AnalysisResult | AnalysisFailure] = []
        for sentence, outcome in zip(sentences, outcomes):
            if isinstance(outcome, BaseException):
                sentence_id = sentence.sentence_id if isinstance(sentence, Sentence) else None
                logger.error(f"Unexpected error analyzing {sentence_id or 'sentence'}: {outcome}")
                error = AnalysisError(str(outcome), sentence_id=sentence_id, cause=outcome)
                results.append(AnalysisFailure(sentence_id=sentence_id, stage=None, error=error))
            else:
                results.append(outcome)
        return results

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _run_stage(
        self,
        name: str,
        metrics: PipelineMetrics,
        cancel: threading.Event | None,
        stage_fn: Callable[[], _R],
    ) -> _R:
        """Run one stage, recording its StageResult.

        Raises:
            AnalysisCancelled: ``cancel`` was set before the stage started.
            AnalysisError: The stage failed fatally.
        """
        if cancel is not None and cancel.is_set():
            metrics.stage_results.append(StageResult(stage_name=name, status=StageStatus.CANCELLED))
            raise AnalysisCancelled("Analysis cancelled", stage=name)

        start = time.perf_counter()
        result = StageResult(stage_name=name, status=StageStatus.PENDING)
        metrics.stage_results.append(result)
        try:
            data = stage_fn()
            result.status = StageStatus.COMPLETED
            if isinstance(data, (list, dict, tuple)):
                result.items = len(data)
            elif data is not None:
                result.items = 1
            return data
        except AnalysisError as e:
            result.status = StageStatus.FAILED
            result.error = str(e)
            e.stage = e.stage or name
            raise
        except Exception as e:
            result.status = StageStatus.FAILED
            result.error = str(e)
            raise
        finally:
            result.duration_ms = (time.perf_counter() - start) * 1000

    def _movement(self, result: AnalysisResult) -> tuple[MovementAnalysis, list[PredicateSite]]:
        analysis = self.detector.detect(result.sentence, result.surface_sites)
        result.diagnostics.extend(analysis.diagnostics)
        sites = self.reconstructor.reconstruct(result.sentence, result.surface_sites, analysis)
        return analysis, sites

    def _assign(self, result: AnalysisResult) -> dict[int, AssignmentOutcome]:
        outcomes = {}
        for site in result.sites:
            if self.frame_cache.is_degraded(site.lemma):
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.LEXICON_TIMEOUT,
                        message=f"Lexical resources degraded for '{site.lemma}'",
                        stage="theta",
                        severity=Severity.INFO,
                        word_index=site.index,
                    )
                )
            outcome = self.assigner.assign(site, self.frame_cache.frames_for(site.lemma), result.sentence)
            result.diagnostics.extend(outcome.diagnostics)
            outcomes[site.index] = outcome
        return outcomes

    def _compose(self, result: AnalysisResult) -> CompositionResult:
        frames: dict[EventId, Frame] = {}
        for event in result.events.main_events:
            outcome = result.outcomes.get(event.predicate.word_index)
            if outcome is not None and outcome.frame is not None:
                frames[event.event_id] = outcome.frame
        return self.drt_composer.compose(result.sentence, result.events, frames)
