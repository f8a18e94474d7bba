"""Discourse Representation Structures.

A DRS is an arena of boxes addressed by integer id; box 0 is the root.
Complex conditions (negation, implication, quantification) point at
their sub-boxes by id. Referents are the ids of the sentence's
ReferentTable.

Accessibility: a box sees its own referents and those of every box that
dominates it; a quantifier's body also sees its restrictor, and an
implication's consequent sees its antecedent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping, Union

from ..events.models import Quantifier, ReferentId


class BoxRelation(str, Enum):
    """How a box hangs off its parent."""

    ROOT = "root"
    RESTRICTOR = "restrictor"
    BODY = "body"
    NEGATED = "negated"
    ANTECEDENT = "antecedent"
    CONSEQUENT = "consequent"


# =============================================================================
# Conditions
# =============================================================================


@dataclass(frozen=True)
class Predication:
    """``predicate(r1, ..., rn)``."""

    predicate: str
    arguments: tuple[ReferentId, ...]

    @property
    def referents(self) -> tuple[ReferentId, ...]:
        return self.arguments


@dataclass(frozen=True)
class Equality:
    """``r = value`` where value is a referent or a name constant."""

    referent: ReferentId
    value: ReferentId | str

    @property
    def referents(self) -> tuple[ReferentId, ...]:
        if isinstance(self.value, int):
            return (self.referent, self.value)
        return (self.referent,)


@dataclass(frozen=True)
class Negation:
    box: int

    @property
    def referents(self) -> tuple[ReferentId, ...]:
        return ()


@dataclass(frozen=True)
class Implication:
    antecedent: int
    consequent: int

    @property
    def referents(self) -> tuple[ReferentId, ...]:
        return ()


@dataclass(frozen=True)
class Quantification:
    quantifier: Quantifier
    referent: ReferentId
    restrictor: int
    body: int

    @property
    def referents(self) -> tuple[ReferentId, ...]:
        return ()


Condition = Union[Predication, Equality, Negation, Implication, Quantification]


@dataclass(frozen=True)
class DRSBox:
    drs_id: int
    parent: int | None
    relation: BoxRelation
    referents: tuple[ReferentId, ...] = ()
    conditions: tuple[Condition, ...] = ()


# =============================================================================
# DRS
# =============================================================================


@dataclass(frozen=True)
class DRS:
    """Immutable DRS arena. Build with DRSBuilder."""

    boxes: tuple[DRSBox, ...]
    names: Mapping[ReferentId, str] = field(default_factory=dict, hash=False, compare=False)

    ROOT = 0

    def __iter__(self) -> Iterator[DRSBox]:
        return iter(self.boxes)

    def __len__(self) -> int:
        return len(self.boxes)

    @property
    def root(self) -> DRSBox:
        return self.boxes[self.ROOT]

    def box(self, drs_id: int) -> DRSBox:
        return self.boxes[drs_id]

    def children(self, drs_id: int) -> list[DRSBox]:
        return [b for b in self.boxes if b.parent == drs_id]

    def ancestors(self, drs_id: int) -> list[int]:
        result = []
        parent = self.boxes[drs_id].parent
        while parent is not None:
            result.append(parent)
            parent = self.boxes[parent].parent
        return result

    def dominates(self, upper: int, lower: int) -> bool:
        return upper == lower or upper in self.ancestors(lower)

    def box_of_referent(self, referent: ReferentId) -> int | None:
        for box in self.boxes:
            if referent in box.referents:
                return box.drs_id
        return None

    @property
    def referents(self) -> list[ReferentId]:
        return [r for box in self.boxes for r in box.referents]

    def conditions(self) -> Iterator[tuple[int, Condition]]:
        for box in self.boxes:
            for condition in box.conditions:
                yield box.drs_id, condition

    def partner(self, drs_id: int) -> int | None:
        """Restrictor of a body box, or antecedent of a consequent box."""
        box = self.boxes[drs_id]
        if box.parent is None:
            return None
        for condition in self.boxes[box.parent].conditions:
            if isinstance(condition, Quantification) and condition.body == drs_id:
                return condition.restrictor
            if isinstance(condition, Implication) and condition.consequent == drs_id:
                return condition.antecedent
        return None

    def accessible_referents(self, drs_id: int) -> frozenset[ReferentId]:
        accessible: set[ReferentId] = set()
        current: int | None = drs_id
        while current is not None:
            box = self.boxes[current]
            accessible.update(box.referents)
            partner = self.partner(current)
            if partner is not None:
                accessible.update(self.boxes[partner].referents)
            current = box.parent
        return frozenset(accessible)

    def violations(self) -> list[str]:
        """Conditions mentioning a referent their box cannot access."""
        problems = []
        for drs_id, condition in self.conditions():
            accessible = self.accessible_referents(drs_id)
            for referent in condition.referents:
                if referent not in accessible:
                    problems.append(
                        f"{self._name(referent)} is not accessible from box {drs_id} in {self.format_condition(condition)}"
                    )
        seen: set[ReferentId] = set()
        for referent in self.referents:
            if referent in seen:
                problems.append(f"{self._name(referent)} is introduced more than once")
            seen.add(referent)
        return problems

    @property
    def is_well_formed(self) -> bool:
        return not self.violations()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _name(self, referent: ReferentId) -> str:
        return self.names.get(referent, f"r{referent}")

    def format_condition(self, condition: Condition) -> str:
        if isinstance(condition, Predication):
            return f"{condition.predicate}({', '.join(self._name(r) for r in condition.arguments)})"
        if isinstance(condition, Equality):
            value = self._name(condition.value) if isinstance(condition.value, int) else condition.value
            return f"{self._name(condition.referent)} = {value}"
        if isinstance(condition, Negation):
            return f"NOT {self.pretty(condition.box)}"
        if isinstance(condition, Implication):
            return f"{self.pretty(condition.antecedent)} => {self.pretty(condition.consequent)}"
        return (
            f"{condition.quantifier.value.upper()} {self._name(condition.referent)}: "
            f"{self.pretty(condition.restrictor)} {self.pretty(condition.body)}"
        )

    def pretty(self, drs_id: int = ROOT) -> str:
        """Linear box notation: ``[x1 e2 | student(x1), read(e2)]``."""
        box = self.boxes[drs_id]
        referents = " ".join(self._name(r) for r in box.referents)
        conditions = ", ".join(self.format_condition(c) for c in box.conditions)
        return f"[{referents} | {conditions}]"

    def __str__(self) -> str:
        return self.pretty()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "boxes": [
                {
                    "id": b.drs_id,
                    "parent": b.parent,
                    "relation": b.relation.value,
                    "referents": [self._name(r) for r in b.referents],
                    "conditions": [self.format_condition(c) for c in b.conditions],
                }
                for b in self.boxes
            ],
            "pretty": self.pretty(),
        }


class DRSBuilder:
    """Mutable scaffold for one DRS; ``build()`` freezes it."""

    def __init__(self) -> None:
        self._parents: list[int | None] = [None]
        self._relations: list[BoxRelation] = [BoxRelation.ROOT]
        self._referents: list[list[ReferentId]] = [[]]
        self._conditions: list[list[Condition]] = [[]]

    def new_box(self, parent: int, relation: BoxRelation) -> int:
        self._parents.append(parent)
        self._relations.append(relation)
        self._referents.append([])
        self._conditions.append([])
        return len(self._parents) - 1

    def parent(self, drs_id: int) -> int | None:
        return self._parents[drs_id]

    def path_to_root(self, drs_id: int) -> list[int]:
        path = [drs_id]
        while self._parents[path[-1]] is not None:
            path.append(self._parents[path[-1]])
        return path

    def common_ancestor(self, boxes: list[int]) -> int:
        """Innermost box dominating every box in ``boxes``."""
        if not boxes:
            return DRS.ROOT
        common = self.path_to_root(boxes[0])
        for drs_id in boxes[1:]:
            path = set(self.path_to_root(drs_id))
            common = [b for b in common if b in path]
        return common[0]

    def add_referent(self, drs_id: int, referent: ReferentId) -> None:
        if referent not in self._referents[drs_id]:
            self._referents[drs_id].append(referent)

    def add_condition(self, drs_id: int, condition: Condition) -> None:
        if condition not in self._conditions[drs_id]:
            self._conditions[drs_id].append(condition)

    def conditions_of(self, drs_id: int) -> list[Condition]:
        return list(self._conditions[drs_id])

    def box_ids(self) -> range:
        return range(len(self._parents))

    def build(self, names: Mapping[ReferentId, str] | None = None) -> DRS:
        boxes = tuple(
            DRSBox(
                drs_id=i,
                parent=self._parents[i],
                relation=self._relations[i],
                referents=tuple(self._referents[i]),
                conditions=tuple(self._conditions[i]),
            )
            for i in range(len(self._parents))
        )
        return DRS(boxes=boxes, names=dict(names or {}))
