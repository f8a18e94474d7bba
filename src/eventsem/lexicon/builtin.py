"""Bundled English argument frames for common predicates.

Frequencies are relative within a lemma; classes feed the fallback
heuristics and the little-v decomposition.
"""

from __future__ import annotations

from ..types import SyntacticSlot as Slot
from ..types import ThetaRole as R
from .resource import InMemoryLexicon
from .types import Frame, FrameSlot
from .types import SelectionalRestriction as Sel


def _s(slot: Slot, *roles: R, restriction: Sel = Sel.ANY, prep: str | None = None,
       optional: bool = False, semantic_type: str = "e") -> FrameSlot:
    return FrameSlot(
        slot=slot,
        roles=roles,
        restriction=restriction,
        preposition=prep,
        optional=optional,
        semantic_type=semantic_type,
    )


def _subj(*roles: R, restriction: Sel = Sel.ANY) -> FrameSlot:
    return _s(Slot.SUBJECT, *roles, restriction=restriction)


def _obj(*roles: R, restriction: Sel = Sel.ANY, optional: bool = False) -> FrameSlot:
    return _s(Slot.OBJECT, *roles, restriction=restriction, optional=optional)


def _comp(*roles: R) -> FrameSlot:
    return _s(Slot.CLAUSAL_COMPLEMENT, *roles, restriction=Sel.PROPOSITION, semantic_type="s")


def _pp(prep: str | None, *roles: R, optional: bool = True, restriction: Sel = Sel.ANY) -> FrameSlot:
    return _s(Slot.OBLIQUE, *roles, prep=prep, optional=optional, restriction=restriction)


ANIMATE_AGENT = _subj(R.AGENT, restriction=Sel.ANIMATE)

# lemma -> [(frame id, frequency, class, slots)]
BUILTIN_FRAMES: dict[str, list[tuple[str, float, str | None, tuple[FrameSlot, ...]]]] = {
    # Consumption / creation
    "eat": [
        ("eat-39.1-1", 0.9, "incremental", (ANIMATE_AGENT, _obj(R.PATIENT, restriction=Sel.CONCRETE))),
        ("eat-39.1-2", 0.4, "activity", (ANIMATE_AGENT,)),
    ],
    "devour": [
        ("devour-39.4", 0.6, "incremental", (ANIMATE_AGENT, _obj(R.PATIENT, restriction=Sel.CONCRETE))),
    ],
    "drink": [
        ("drink-39.1", 0.8, "incremental", (ANIMATE_AGENT, _obj(R.PATIENT, restriction=Sel.CONCRETE))),
        ("drink-39.1-i", 0.3, "activity", (ANIMATE_AGENT,)),
    ],
    "read": [
        ("read-37.1", 0.85, "incremental", (ANIMATE_AGENT, _obj(R.THEME, restriction=Sel.CONCRETE))),
        ("read-37.1-i", 0.3, "activity", (ANIMATE_AGENT,)),
    ],
    "write": [
        ("write-25.2", 0.85, "incremental", (ANIMATE_AGENT, _obj(R.THEME), _pp("to", R.RECIPIENT))),
    ],
    "build": [
        ("build-26.1", 0.8, "incremental", (ANIMATE_AGENT, _obj(R.THEME, restriction=Sel.CONCRETE))),
    ],
    "cook": [
        ("cook-45.3", 0.7, "incremental", (ANIMATE_AGENT, _obj(R.PATIENT, restriction=Sel.CONCRETE))),
    ],
    # Psych / cognition
    "like": [
        ("like-31.2", 0.9, "psych", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.STIMULUS, R.THEME))),
    ],
    "love": [
        ("love-31.2", 0.9, "psych", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.STIMULUS, R.THEME))),
    ],
    "hate": [
        ("hate-31.2", 0.8, "psych", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.STIMULUS, R.THEME))),
    ],
    "see": [
        ("see-30.1", 0.9, "perception", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.STIMULUS))),
    ],
    "know": [
        ("know-29.5-1", 0.7, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.THEME))),
        ("know-29.5-2", 0.5, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _comp(R.THEME))),
    ],
    "believe": [
        ("believe-29.5-1", 0.7, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _comp(R.THEME))),
        ("believe-29.5-2", 0.5, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.THEME))),
    ],
    "consider": [
        ("consider-29.9", 0.6, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _comp(R.THEME))),
    ],
    "expect": [
        ("expect-29.5", 0.6, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _comp(R.THEME))),
    ],
    "think": [
        ("think-29.9", 0.8, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _comp(R.THEME))),
    ],
    "want": [
        ("want-32.1-1", 0.6, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.THEME))),
        ("want-32.1-2", 0.5, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _comp(R.THEME))),
    ],
    # Raising and control
    "seem": [
        ("seem-109", 0.9, "raising", (_comp(R.THEME), _pp("to", R.EXPERIENCER, restriction=Sel.ANIMATE))),
    ],
    "appear": [
        ("appear-109", 0.5, "raising", (_comp(R.THEME), _pp("to", R.EXPERIENCER, restriction=Sel.ANIMATE))),
        ("appear-48.1", 0.5, "unaccusative", (_subj(R.THEME), _pp(None, R.LOCATION))),
    ],
    "tend": [("tend-109", 0.7, "raising", (_comp(R.THEME),))],
    "happen": [("happen-109", 0.6, "raising", (_comp(R.THEME),))],
    "try": [
        ("try-61", 0.8, "control", (ANIMATE_AGENT, _comp(R.THEME))),
    ],
    "persuade": [
        ("persuade-58.1", 0.7, "control", (
            ANIMATE_AGENT,
            _obj(R.PATIENT, restriction=Sel.ANIMATE),
            _comp(R.THEME),
        )),
    ],
    "say": [
        ("say-37.7", 0.9, "communication", (ANIMATE_AGENT, _comp(R.THEME), _pp("to", R.RECIPIENT))),
    ],
    # Transfer
    "give": [
        ("give-13.1-1", 0.9, "transfer", (
            ANIMATE_AGENT,
            _obj(R.THEME),
            _s(Slot.INDIRECT_OBJECT, R.RECIPIENT, restriction=Sel.ANIMATE),
        )),
        ("give-13.1-2", 0.8, "transfer", (ANIMATE_AGENT, _obj(R.THEME), _pp("to", R.RECIPIENT, optional=False))),
    ],
    "send": [
        ("send-11.1-1", 0.8, "transfer", (
            ANIMATE_AGENT,
            _obj(R.THEME),
            _s(Slot.INDIRECT_OBJECT, R.RECIPIENT, restriction=Sel.ANIMATE),
        )),
        ("send-11.1-2", 0.7, "transfer", (ANIMATE_AGENT, _obj(R.THEME), _pp("to", R.GOAL, R.RECIPIENT))),
    ],
    "put": [
        ("put-9.1", 0.9, "placement", (
            ANIMATE_AGENT,
            _obj(R.THEME, restriction=Sel.CONCRETE),
            _pp(None, R.GOAL, R.LOCATION, optional=False),
        )),
    ],
    # Change of state
    "break": [
        ("break-45.1-1", 0.7, "causative", (_subj(R.AGENT, R.CAUSE), _obj(R.PATIENT, restriction=Sel.CONCRETE))),
        ("break-45.1-2", 0.5, "unaccusative", (_subj(R.PATIENT, restriction=Sel.CONCRETE),)),
    ],
    "open": [
        ("open-45.4-1", 0.7, "causative", (_subj(R.AGENT, R.CAUSE), _obj(R.PATIENT))),
        ("open-45.4-2", 0.4, "unaccusative", (_subj(R.PATIENT),)),
    ],
    "melt": [
        ("melt-45.4-1", 0.5, "causative", (_subj(R.AGENT, R.CAUSE), _obj(R.PATIENT))),
        ("melt-45.4-2", 0.6, "unaccusative", (_subj(R.PATIENT),)),
    ],
    "kill": [
        ("kill-42.1", 0.8, "causative", (_subj(R.AGENT, R.CAUSE), _obj(R.PATIENT, restriction=Sel.ANIMATE))),
    ],
    "hammer": [
        ("hammer-18.1", 0.6, "contact", (ANIMATE_AGENT, _obj(R.PATIENT, restriction=Sel.CONCRETE))),
    ],
    "paint": [
        ("paint-24", 0.6, "incremental", (ANIMATE_AGENT, _obj(R.PATIENT, restriction=Sel.CONCRETE))),
    ],
    # Motion and activity
    "run": [("run-51.3.2", 0.8, "activity", (ANIMATE_AGENT, _pp("to", R.GOAL)))],
    "walk": [("walk-51.3.2", 0.8, "activity", (ANIMATE_AGENT, _pp("to", R.GOAL)))],
    "swim": [("swim-51.3.2", 0.7, "activity", (ANIMATE_AGENT, _pp("to", R.GOAL)))],
    "sleep": [("sleep-40.4", 0.8, "activity", (ANIMATE_AGENT,))],
    "leave": [
        ("leave-51.2", 0.8, "achievement", (ANIMATE_AGENT, _obj(R.SOURCE, optional=True))),
    ],
    "arrive": [("arrive-51.1", 0.9, "unaccusative", (_subj(R.THEME), _pp(None, R.GOAL, R.LOCATION)))],
    "die": [("die-48.2", 0.9, "unaccusative", (_subj(R.PATIENT, restriction=Sel.ANIMATE),))],
    "rain": [("rain-57", 0.9, "weather", ())],
    "chase": [("chase-51.6", 0.7, "activity", (ANIMATE_AGENT, _obj(R.THEME)))],
    "meet": [("meet-36.3", 0.7, "social", (ANIMATE_AGENT, _obj(R.COMITATIVE, R.THEME, restriction=Sel.ANIMATE)))],
    "own": [("own-100", 0.8, "stative", (_subj(R.EXPERIENCER, restriction=Sel.ANIMATE), _obj(R.THEME)))],
    "beat": [("beat-18.1", 0.7, "contact", (ANIMATE_AGENT, _obj(R.PATIENT)))],
    # Existential be
    "be": [
        ("be-exist", 0.6, "existential", (_subj(R.THEME), _pp(None, R.LOCATION))),
    ],
    # Adjectival predicates
    "easy": [("easy-tough", 0.8, "tough", (_comp(R.THEME),))],
    "hard": [("hard-tough", 0.8, "tough", (_comp(R.THEME),))],
    "tough": [("tough-tough", 0.7, "tough", (_comp(R.THEME),))],
    "difficult": [("difficult-tough", 0.8, "tough", (_comp(R.THEME),))],
    "happy": [("happy-adj", 0.8, "stative", (_subj(R.EXPERIENCER, R.THEME, restriction=Sel.ANIMATE),))],
    "smart": [("smart-adj", 0.8, "stative", (_subj(R.THEME),))],
}


def builtin_frames() -> list[Frame]:
    frames = []
    for lemma, entries in BUILTIN_FRAMES.items():
        for frame_id, frequency, verb_class, slots in entries:
            frames.append(
                Frame(
                    frame_id=frame_id,
                    lemma=lemma,
                    slots=slots,
                    frequency=frequency,
                    verb_class=verb_class,
                    source="builtin",
                )
            )
    return frames


def builtin_lexicon() -> InMemoryLexicon:
    """The bundled English frames as a lexical resource."""
    return InMemoryLexicon("builtin", builtin_frames())
