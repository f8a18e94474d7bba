"""Movement chains stored in an id-indexed arena.

A chain links the surface position of a displaced argument (Head)
through zero or more clause-edge Intermediate positions to the position
where it receives its theta role (Tail). Positions live in the arena and
chains refer to them by integer id.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from ..types import SyntacticSlot


class ChainType(str, Enum):
    A = "A"          # Argument movement (passive, raising, tough, existential)
    A_BAR = "A-bar"  # Operator movement (wh, relative, topicalization)


class MovementKind(str, Enum):
    PASSIVE = "passive"
    WH = "wh"
    RELATIVE = "relative"
    TOPICALIZATION = "topicalization"
    RAISING = "raising"
    ECM = "ecm"
    TOUGH = "tough"
    EXISTENTIAL = "existential"

    @property
    def chain_type(self) -> ChainType:
        if self in (MovementKind.WH, MovementKind.RELATIVE, MovementKind.TOPICALIZATION):
            return ChainType.A_BAR
        return ChainType.A


class PositionKind(str, Enum):
    HEAD = "head"
    INTERMEDIATE = "intermediate"
    TAIL = "tail"


@dataclass(frozen=True)
class ChainPosition:
    """One link of a chain.

    ``slot`` is None for clause-edge (specifier) positions; ``word_index``
    is None for silent positions (traces and intermediate copies).
    """

    position_id: int
    kind: PositionKind
    predicate_index: int
    slot: SyntacticSlot | None
    word_index: int | None

    @property
    def is_edge(self) -> bool:
        return self.slot is None

    def key(self) -> tuple[int, str | None, int | None]:
        return (self.predicate_index, self.slot.value if self.slot else None, self.word_index)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.position_id,
            "kind": self.kind.value,
            "predicate": self.predicate_index,
            "slot": self.slot.value if self.slot else "edge",
            "word": self.word_index,
        }


@dataclass(frozen=True)
class LocalityDomain:
    """The smallest finite clause containing a Head, with its non-finite complements."""

    clause_head: int
    members: frozenset[int]

    def contains(self, predicate_index: int) -> bool:
        return predicate_index in self.members


@dataclass(frozen=True)
class MovementChain:
    """A Head-to-Tail chain of positions held in a ChainArena."""

    chain_id: int
    kind: MovementKind
    position_ids: tuple[int, ...]
    domain: LocalityDomain
    confidence: float = 1.0
    locality_ok: bool = True

    @property
    def chain_type(self) -> ChainType:
        return self.kind.chain_type

    @property
    def head_id(self) -> int:
        return self.position_ids[0]

    @property
    def tail_id(self) -> int:
        return self.position_ids[-1]


class ChainArena:
    """Owns chain positions and chains for one sentence."""

    def __init__(self) -> None:
        self._positions: dict[int, ChainPosition] = {}
        self._chains: dict[int, MovementChain] = {}
        self._next_position = 1
        self._next_chain = 1

    def __len__(self) -> int:
        return len(self._chains)

    def __iter__(self) -> Iterator[MovementChain]:
        return iter(self._chains.values())

    @property
    def chains(self) -> list[MovementChain]:
        return list(self._chains.values())

    def position(self, position_id: int) -> ChainPosition:
        return self._positions[position_id]

    def add_position(
        self,
        kind: PositionKind,
        predicate_index: int,
        slot: SyntacticSlot | None,
        word_index: int | None,
    ) -> int:
        position_id = self._next_position
        self._next_position += 1
        self._positions[position_id] = ChainPosition(
            position_id=position_id,
            kind=kind,
            predicate_index=predicate_index,
            slot=slot,
            word_index=word_index,
        )
        return position_id

    def build_chain(
        self,
        kind: MovementKind,
        head_id: int,
        tail_id: int,
        domain: LocalityDomain,
        intermediate_ids: tuple[int, ...] = (),
        confidence: float = 1.0,
        locality_ok: bool = True,
    ) -> MovementChain:
        """Register a chain.

        Raises:
            ValueError: Head and Tail are the same position, or another
                chain already uses this Head.
        """
        head, tail = self._positions[head_id], self._positions[tail_id]
        if head.kind is not PositionKind.HEAD or tail.kind is not PositionKind.TAIL:
            raise ValueError("Chain must start at a HEAD position and end at a TAIL position")
        if head.key() == tail.key():
            raise ValueError(f"Chain head and tail coincide at {head.key()}")
        if self.chain_for_head(head.word_index) is not None:
            raise ValueError(f"Head word {head.word_index} already heads a chain")

        chain = MovementChain(
            chain_id=self._next_chain,
            kind=kind,
            position_ids=(head_id, *intermediate_ids, tail_id),
            domain=domain,
            confidence=confidence,
            locality_ok=locality_ok,
        )
        self._chains[chain.chain_id] = chain
        self._next_chain += 1
        return chain

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def head(self, chain: MovementChain) -> ChainPosition:
        return self._positions[chain.head_id]

    def tail(self, chain: MovementChain) -> ChainPosition:
        return self._positions[chain.tail_id]

    def intermediates(self, chain: MovementChain) -> list[ChainPosition]:
        return [self._positions[i] for i in chain.position_ids[1:-1]]

    def positions(self, chain: MovementChain) -> list[ChainPosition]:
        return [self._positions[i] for i in chain.position_ids]

    def chain_for_head(self, word_index: int | None) -> MovementChain | None:
        if word_index is None:
            return None
        for chain in self._chains.values():
            if self.head(chain).word_index == word_index:
                return chain
        return None

    def chain_for_tail(self, predicate_index: int, slot: SyntacticSlot) -> MovementChain | None:
        for chain in self._chains.values():
            tail = self.tail(chain)
            if tail.predicate_index == predicate_index and tail.slot is slot:
                return chain
        return None

    def chains_of_kind(self, kind: MovementKind) -> list[MovementChain]:
        return [c for c in self._chains.values() if c.kind is kind]

    def to_dict(self) -> list[dict[str, Any]]:
        """Serialize to dictionary."""
        return [
            {
                "id": c.chain_id,
                "kind": c.kind.value,
                "type": c.chain_type.value,
                "confidence": round(c.confidence, 4),
                "locality_ok": c.locality_ok,
                "domain": c.domain.clause_head,
                "positions": [p.to_dict() for p in self.positions(c)],
            }
            for c in self._chains.values()
        ]
