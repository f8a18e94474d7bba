"""Process-wide, read-mostly frame cache.

Population is a separate phase: lookups for all lemmas fan out
concurrently across every resource, each bounded by a timeout, and the
merged result is swapped in under a lock. Analyses only ever read, from
any thread, through an immutable snapshot.

Example:
    cache = FrameCache([builtin_lexicon(), my_verbnet])
    report = await cache.populate(["eat", "seem", "like"])
    frames = cache.frames_for("eat")
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from ..config import LexiconConfig
from .resource import LexicalResource
from .types import Frame

logger = logging.getLogger(__name__)


@dataclass
class PopulateReport:
    """Outcome of one cache population phase."""

    queried: list[str] = field(default_factory=list)
    timed_out: list[tuple[str, str]] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    frames_added: int = 0
    duration_ms: float = 0.0

    @property
    def degraded(self) -> bool:
        return bool(self.timed_out or self.failed)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "queried": list(self.queried),
            "timed_out": [list(t) for t in self.timed_out],
            "failed": [list(f) for f in self.failed],
            "frames_added": self.frames_added,
            "duration_ms": self.duration_ms,
        }


class FrameCache:
    """Frames per lemma, merged across lexical resources."""

    def __init__(
        self,
        resources: Sequence[LexicalResource] = (),
        config: LexiconConfig | None = None,
    ):
        self.resources = list(resources)
        self.config = config or LexiconConfig()
        self._lock = threading.Lock()
        self._frames: Mapping[str, tuple[Frame, ...]] = MappingProxyType({})
        self._degraded: frozenset[str] = frozenset()

    @classmethod
    def seeded(
        cls,
        frames: Iterable[Frame],
        resources: Sequence[LexicalResource] = (),
        config: LexiconConfig | None = None,
    ) -> "FrameCache":
        """Create a cache pre-filled with known frames."""
        cache = cls(resources, config)
        grouped: dict[str, list[Frame]] = {}
        for frame in frames:
            grouped.setdefault(frame.lemma, []).append(frame)
        cache._swap({lemma: _merge([fs]) for lemma, fs in grouped.items()}, set())
        return cache

    # -------------------------------------------------------------------------
    # Reads (any thread)
    # -------------------------------------------------------------------------

    def frames_for(self, lemma: str) -> tuple[Frame, ...]:
        return self._frames.get(lemma.lower(), ())

    def __contains__(self, lemma: str) -> bool:
        return lemma.lower() in self._frames

    def is_degraded(self, lemma: str) -> bool:
        """True when a resource timed out or failed for this lemma."""
        return lemma.lower() in self._degraded

    def snapshot(self) -> Mapping[str, tuple[Frame, ...]]:
        return self._frames

    # -------------------------------------------------------------------------
    # Population (serialized)
    # -------------------------------------------------------------------------

    async def populate(self, lemmas: Iterable[str], refresh: bool = False) -> PopulateReport:
        """Query every resource for lemmas not yet cached.

        Slow or failing resources degrade to no frames for that lemma; the
        analysis then uses fallback role assignment.
        """
        start = time.perf_counter()
        report = PopulateReport()

        wanted = sorted({l.lower() for l in lemmas if l})
        if not refresh:
            wanted = [l for l in wanted if l not in self._frames]
        report.queried = wanted
        if not wanted or not self.resources:
            if wanted:
                self._swap({lemma: () for lemma in wanted}, set())
            report.duration_ms = (time.perf_counter() - start) * 1000
            return report

        semaphore = asyncio.Semaphore(self.config.max_concurrent_queries)
        pairs = [(lemma, resource) for lemma in wanted for resource in self.resources]
        tasks = [self._query(resource, lemma, semaphore, report) for lemma, resource in pairs]
        results = await asyncio.gather(*tasks)

        collected: dict[str, list[list[Frame]]] = {lemma: [] for lemma in wanted}
        for (lemma, _), frames in zip(pairs, results):
            collected[lemma].append(frames)

        degraded = {lemma for lemma, _ in report.timed_out + report.failed}
        previous = self._frames
        for lemma in degraded:
            # a refresh that lost a resource keeps what that resource gave before
            collected[lemma].append(list(previous.get(lemma, ())))
        merged = {lemma: _merge(groups) for lemma, groups in collected.items()}
        self._swap(merged, degraded)

        report.frames_added = sum(len(f) for f in merged.values())
        report.duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Populated {len(wanted)} lemmas with {report.frames_added} frames "
            f"in {report.duration_ms:.1f}ms"
        )
        return report

    async def _query(
        self,
        resource: LexicalResource,
        lemma: str,
        semaphore: asyncio.Semaphore,
        report: PopulateReport,
    ) -> list[Frame]:
        async with semaphore:
            try:
                return list(
                    await asyncio.wait_for(resource.lookup(lemma), timeout=self.config.query_timeout)
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Lexical resource {resource.name} timed out after "
                    f"{self.config.query_timeout}s for '{lemma}'"
                )
                report.timed_out.append((lemma, resource.name))
                return []
            except Exception as e:
                logger.warning(f"Lexical resource {resource.name} failed for '{lemma}': {e}")
                report.failed.append((lemma, resource.name))
                return []

    def _swap(self, frames: dict[str, tuple[Frame, ...]], degraded: set[str]) -> None:
        with self._lock:
            updated = dict(self._frames)
            updated.update(frames)
            self._frames = MappingProxyType(updated)
            self._degraded = (self._degraded - set(frames)) | frozenset(degraded)


def _merge(groups: Iterable[Iterable[Frame]]) -> tuple[Frame, ...]:
    """Merge frames from several resources, first occurrence of an id wins."""
    seen: dict[str, Frame] = {}
    for frames in groups:
        for frame in frames:
            seen.setdefault(frame.frame_id, frame)
    return tuple(sorted(seen.values(), key=lambda f: (-f.frequency, f.frame_id)))
