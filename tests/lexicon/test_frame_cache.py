"""Tests for lexical resources and the frame cache."""

import asyncio

import pytest

from eventsem.config import LexiconConfig
from eventsem.exceptions import LexiconError
from eventsem.lexicon import (
    Frame,
    FrameCache,
    FrameSlot,
    InMemoryLexicon,
    LexicalResource,
    SelectionalRestriction,
    builtin_lexicon,
)
from eventsem.types import SyntacticSlot, ThetaRole


# =============================================================================
# Test Resources
# =============================================================================


class SlowLexicon:
    """Resource that never answers within the timeout."""

    name = "slow"

    async def lookup(self, lemma: str) -> list[Frame]:
        await asyncio.sleep(5)
        return []


class BrokenLexicon:
    """Resource whose backend raises."""

    name = "broken"

    async def lookup(self, lemma: str) -> list[Frame]:
        raise ConnectionError("backend unavailable")


class CountingLexicon(InMemoryLexicon):
    """In-memory resource that records every lookup."""

    def __init__(self, name, frames=()):
        super().__init__(name, frames)
        self.calls: list[str] = []

    async def lookup(self, lemma: str) -> list[Frame]:
        self.calls.append(lemma)
        return await super().lookup(lemma)


def _frame(frame_id: str, lemma: str, frequency: float = 0.5) -> Frame:
    return Frame(
        frame_id=frame_id,
        lemma=lemma,
        slots=(FrameSlot(SyntacticSlot.SUBJECT, (ThetaRole.AGENT,)),),
        frequency=frequency,
    )


# =============================================================================
# Frame Types
# =============================================================================


class TestFrameTypes:
    """Tests for frame and slot definitions."""

    def test_slot_requires_roles(self):
        """Test a slot without roles is rejected."""
        with pytest.raises(LexiconError):
            FrameSlot(SyntacticSlot.SUBJECT, ())

    def test_slot_accepts_preposition(self):
        """Test oblique slots match on their preposition."""
        slot = FrameSlot(SyntacticSlot.OBLIQUE, (ThetaRole.RECIPIENT,), preposition="to")
        assert slot.accepts(SyntacticSlot.OBLIQUE, "to")
        assert not slot.accepts(SyntacticSlot.OBLIQUE, "with")
        assert not slot.accepts(SyntacticSlot.OBJECT, None)

    def test_frame_from_dict(self):
        """Test parsing a frame definition."""
        frame = Frame.from_dict(
            {
                "id": "give-13.1",
                "frequency": 0.8,
                "slots": [
                    {"slot": "subject", "roles": ["agent"], "restriction": "animate"},
                    {"slot": "object", "role": "Theme"},
                    {"slot": "oblique", "roles": ["recipient"], "preposition": "to", "optional": True},
                ],
            },
            lemma="Give",
        )

        assert frame.lemma == "give"
        assert frame.arity == 3
        assert len(frame.required_slots) == 2
        assert frame.slots[0].restriction is SelectionalRestriction.ANIMATE
        assert frame.slot_for_role(ThetaRole.RECIPIENT).preposition == "to"
        assert frame.slot_for_role(ThetaRole.GOAL) is None

    def test_frame_from_dict_bad_role(self):
        """Test unknown role names raise LexiconError."""
        with pytest.raises(LexiconError):
            Frame.from_dict({"slots": [{"slot": "subject", "roles": ["wizard"]}]}, lemma="x")

    def test_frame_frequency_range(self):
        """Test out-of-range frequencies are rejected."""
        with pytest.raises(LexiconError):
            Frame.from_dict({"frequency": 3, "slots": []}, lemma="x")

    @pytest.mark.parametrize("semantic_type", ["entity", "<e,", "x"])
    def test_slot_semantic_type_validated(self, semantic_type):
        """Test an unparsable semantic type is rejected when the frame loads."""
        with pytest.raises(LexiconError, match="semantic type"):
            Frame.from_dict(
                {"slots": [{"slot": "object", "roles": ["patient"], "semantic_type": semantic_type}]},
                lemma="eat",
            )

    def test_slot_function_type_accepted(self):
        """Test function-typed slots are accepted."""
        slot = FrameSlot(SyntacticSlot.CLAUSAL_COMPLEMENT, (ThetaRole.THEME,), semantic_type="<s,t>")
        assert slot.to_dict()["semantic_type"] == "<s,t>"


# =============================================================================
# In-Memory Lexicon
# =============================================================================


class TestInMemoryLexicon:
    """Tests for InMemoryLexicon."""

    def test_satisfies_protocol(self):
        """Test the in-memory lexicon is a LexicalResource."""
        assert isinstance(builtin_lexicon(), LexicalResource)

    @pytest.mark.asyncio
    async def test_lookup_case_insensitive(self):
        """Test lookups normalize the lemma."""
        lexicon = builtin_lexicon()
        frames = await lexicon.lookup("EAT")
        assert [f.frame_id for f in frames] == ["eat-39.1-1", "eat-39.1-2"]

    @pytest.mark.asyncio
    async def test_unknown_lemma_returns_empty(self):
        """Test unknown lemmas produce an empty list."""
        assert await builtin_lexicon().lookup("glorp") == []

    @pytest.mark.asyncio
    async def test_from_yaml(self, tmp_path):
        """Test loading frames from a YAML file."""
        path = tmp_path / "frames.yaml"
        path.write_text(
            "frames:\n"
            "  glorp:\n"
            "    - id: glorp-1\n"
            "      frequency: 0.7\n"
            "      slots:\n"
            "        - {slot: subject, roles: [agent]}\n"
            "        - {slot: object, roles: [patient]}\n"
        )

        lexicon = InMemoryLexicon.from_yaml(path)

        assert lexicon.name == "frames"
        assert "glorp" in lexicon
        frames = await lexicon.lookup("glorp")
        assert frames[0].frame_id == "glorp-1"
        assert frames[0].source == "frames"

    def test_from_yaml_missing_file(self, tmp_path):
        """Test a missing lexicon file raises LexiconError."""
        with pytest.raises(LexiconError):
            InMemoryLexicon.from_yaml(tmp_path / "nope.yaml")

    def test_from_yaml_wrong_shape(self, tmp_path):
        """Test a lexicon file that is not a mapping is rejected."""
        path = tmp_path / "frames.yaml"
        path.write_text("- eat\n- drink\n")
        with pytest.raises(LexiconError, match="map lemmas"):
            InMemoryLexicon.from_yaml(path)

    def test_to_dict_round_trip(self):
        """Test serialized frames load back identically."""
        lexicon = InMemoryLexicon("test", [_frame("run-1", "run", 0.8)])
        restored = InMemoryLexicon.from_dict(lexicon.to_dict(), name="test")
        assert restored.frames()[0].frame_id == "run-1"
        assert restored.frames()[0].frequency == 0.8


# =============================================================================
# Frame Cache
# =============================================================================


class TestFrameCache:
    """Tests for FrameCache population and reads."""

    def test_seeded_cache(self, builtin_cache):
        """Test seeded frames are readable without population."""
        frames = builtin_cache.frames_for("break")
        assert [f.frame_id for f in frames] == ["break-45.1-1", "break-45.1-2"]
        assert "break" in builtin_cache
        assert "glorp" not in builtin_cache

    @pytest.mark.asyncio
    async def test_populate_merges_resources(self):
        """Test frames from several resources are merged by frequency."""
        first = InMemoryLexicon("a", [_frame("run-1", "run", 0.4)])
        second = InMemoryLexicon("b", [_frame("run-2", "run", 0.9), _frame("run-1", "run", 0.1)])
        cache = FrameCache([first, second])

        report = await cache.populate(["run", "Run"])

        assert report.queried == ["run"]
        assert report.frames_added == 2
        assert not report.degraded
        frames = cache.frames_for("run")
        assert [f.frame_id for f in frames] == ["run-2", "run-1"]
        # first resource wins for a duplicated id
        assert frames[1].frequency == 0.4

    @pytest.mark.asyncio
    async def test_populate_skips_cached_lemmas(self):
        """Test already cached lemmas are not queried again."""
        lexicon = CountingLexicon("count", [_frame("run-1", "run")])
        cache = FrameCache([lexicon])

        await cache.populate(["run"])
        await cache.populate(["run"])
        assert lexicon.calls == ["run"]

        await cache.populate(["run"], refresh=True)
        assert lexicon.calls == ["run", "run"]

    @pytest.mark.asyncio
    async def test_timeout_degrades_lemma(self):
        """Test a slow resource degrades to no frames instead of failing."""
        fast = InMemoryLexicon("fast", [_frame("run-1", "run")])
        cache = FrameCache([fast, SlowLexicon()], LexiconConfig(query_timeout=0.05))

        report = await cache.populate(["run", "walk"])

        assert report.degraded
        assert ("run", "slow") in report.timed_out
        assert ("walk", "slow") in report.timed_out
        assert [f.frame_id for f in cache.frames_for("run")] == ["run-1"]
        assert cache.frames_for("walk") == ()
        assert cache.is_degraded("walk")

    @pytest.mark.asyncio
    async def test_failing_resource(self):
        """Test a raising resource is reported and skipped."""
        cache = FrameCache([BrokenLexicon()])

        report = await cache.populate(["eat"])

        assert report.failed == [("eat", "broken")]
        assert cache.is_degraded("eat")
        assert "eat" in cache

    @pytest.mark.asyncio
    async def test_refresh_clears_degraded(self):
        """Test a successful refresh clears the degraded mark."""
        lexicon = InMemoryLexicon("ok", [_frame("run-1", "run")])
        cache = FrameCache([BrokenLexicon()])
        await cache.populate(["run"])
        assert cache.is_degraded("run")

        cache.resources = [lexicon]
        await cache.populate(["run"], refresh=True)
        assert not cache.is_degraded("run")

    @pytest.mark.asyncio
    async def test_refresh_keeps_frames_on_timeout(self):
        """Test a refresh whose resource times out keeps the cached frames."""
        lexicon = InMemoryLexicon("ok", [_frame("run-1", "run")])
        cache = FrameCache([lexicon], LexiconConfig(query_timeout=0.05))
        await cache.populate(["run"])

        cache.resources = [SlowLexicon()]
        report = await cache.populate(["run"], refresh=True)

        assert report.timed_out == [("run", "slow")]
        assert [f.frame_id for f in cache.frames_for("run")] == ["run-1"]
        assert cache.is_degraded("run")

    @pytest.mark.asyncio
    async def test_no_resources_records_empty(self):
        """Test populating without resources caches empty entries."""
        cache = FrameCache()
        report = await cache.populate(["eat"])
        assert report.queried == ["eat"]
        assert "eat" in cache
        assert cache.frames_for("eat") == ()

    def test_snapshot_is_read_only(self, builtin_cache):
        """Test the snapshot cannot be mutated."""
        snapshot = builtin_cache.snapshot()
        with pytest.raises(TypeError):
            snapshot["eat"] = ()
