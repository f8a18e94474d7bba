"""Event Composer: Neo-Davidsonian events with aspect and little-v decomposition."""

from .aspect import AspectClassifier
from .composer import EventComposer, EventComposition
from .decomposition import Decomposition, LittleVDecomposer
from .models import (
    AspectualClass,
    Event,
    EventId,
    LittleV,
    Modifier,
    ModifierKind,
    Predicate,
    Quantifier,
    Referent,
    ReferentId,
    ReferentKind,
    ReferentTable,
)

__all__ = [
    "AspectClassifier",
    "AspectualClass",
    "Decomposition",
    "Event",
    "EventComposer",
    "EventComposition",
    "EventId",
    "LittleV",
    "LittleVDecomposer",
    "Modifier",
    "ModifierKind",
    "Predicate",
    "Quantifier",
    "Referent",
    "ReferentId",
    "ReferentKind",
    "ReferentTable",
]
