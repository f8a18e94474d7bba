"""DRT/Lambda Composer: typed terms, DRS boxes and scope readings."""

from .composer import CompositionResult, DRTComposer, Reading
from .drs import (
    DRS,
    BoxRelation,
    Condition,
    DRSBox,
    DRSBuilder,
    Equality,
    Implication,
    Negation,
    Predication,
    Quantification,
)
from .terms import (
    Abstraction,
    Application,
    Constant,
    DRSTerm,
    Reducer,
    Reduction,
    Term,
    Variable,
    abstract,
    alpha_equivalent,
    apply,
    determiner,
    substitute,
)
from .types import E, S, T, BasicType, FunctionType, SemType, fn, parse_type

__all__ = [
    "Abstraction",
    "Application",
    "BasicType",
    "BoxRelation",
    "CompositionResult",
    "Condition",
    "Constant",
    "DRS",
    "DRSBox",
    "DRSBuilder",
    "DRSTerm",
    "DRTComposer",
    "E",
    "Equality",
    "FunctionType",
    "Implication",
    "Negation",
    "Predication",
    "Quantification",
    "Reading",
    "Reducer",
    "Reduction",
    "S",
    "SemType",
    "T",
    "Term",
    "Variable",
    "abstract",
    "alpha_equivalent",
    "apply",
    "determiner",
    "fn",
    "parse_type",
    "substitute",
]
