"""Movement Detector & Chain Builder."""

from .chains import (
    ChainArena,
    ChainPosition,
    ChainType,
    LocalityDomain,
    MovementChain,
    MovementKind,
    PositionKind,
)
from .detector import DetectionState, MovementAnalysis, MovementDetector, MovementSignal
from .reconstruction import Reconstructor, SurfaceRole, rekey

__all__ = [
    "ChainArena",
    "ChainPosition",
    "ChainType",
    "DetectionState",
    "LocalityDomain",
    "MovementAnalysis",
    "MovementChain",
    "MovementDetector",
    "MovementKind",
    "MovementSignal",
    "PositionKind",
    "Reconstructor",
    "SurfaceRole",
    "rekey",
]
