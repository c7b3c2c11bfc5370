from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from dilemma.sim.config import SimulationConfig

_NON_NEGATIVE_ENTITY_FIELDS = (
    "injury_turns_left",
    "turns_since_success",
    "total_cooperations",
    "total_defections",
    "times_betrayed",
    "times_betrayed_others",
    "fear",
    "caution",
)


class EntityKind(Enum):
    COOPERATOR = "hobbit"
    ADVERSARY = "orc"

    @property
    def id_prefix(self) -> str:
        return "H" if self is EntityKind.COOPERATOR else "O"


class _EntityTraits:
    kind: EntityKind
    total_cooperations: int

    @property
    def is_cooperator(self) -> bool:
        return self.kind is EntityKind.COOPERATOR

    @property
    def is_adversary(self) -> bool:
        return self.kind is EntityKind.ADVERSARY

    @property
    def reformed(self) -> bool:
        return self.is_adversary and self.total_cooperations > 0


@dataclass(frozen=True)
class Entity(_EntityTraits):
    """Committed per-entity record as published in a snapshot."""

    entity_id: str
    kind: EntityKind
    alive: bool = True
    injured: bool = False
    injury_turns_left: int = 0
    turns_since_success: int = 0
    total_cooperations: int = 0
    total_defections: int = 0
    times_betrayed: int = 0
    times_betrayed_others: int = 0
    fear: int = 0
    caution: int = 0
    reputation: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.entity_id, str) or not self.entity_id:
            raise ValueError("entity_id must be a non-empty string")
        if not isinstance(self.kind, EntityKind):
            raise ValueError(f"entity {self.entity_id} kind must be an EntityKind")
        for name in _NON_NEGATIVE_ENTITY_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"entity {self.entity_id} {name} must be a non-negative integer")
        if self.injured and self.injury_turns_left <= 0:
            raise ValueError(f"entity {self.entity_id} is injured but injury_turns_left is {self.injury_turns_left}")
        if not self.injured and self.injury_turns_left != 0:
            raise ValueError(f"entity {self.entity_id} is healthy but injury_turns_left is {self.injury_turns_left}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "kind": self.kind.value,
            "alive": self.alive,
            "injured": self.injured,
            "injury_turns_left": self.injury_turns_left,
            "turns_since_success": self.turns_since_success,
            "total_cooperations": self.total_cooperations,
            "total_defections": self.total_defections,
            "times_betrayed": self.times_betrayed,
            "times_betrayed_others": self.times_betrayed_others,
            "fear": self.fear,
            "caution": self.caution,
            "reputation": self.reputation,
        }


@dataclass
class EntityDraft(_EntityTraits):
    """Working copy of an ``Entity`` mutated while a turn is in progress."""

    entity_id: str
    kind: EntityKind
    alive: bool
    injured: bool
    injury_turns_left: int
    turns_since_success: int
    total_cooperations: int
    total_defections: int
    times_betrayed: int
    times_betrayed_others: int
    fear: int
    caution: int
    reputation: int

    @classmethod
    def from_entity(cls, entity: Entity) -> "EntityDraft":
        return cls(**{item.name: getattr(entity, item.name) for item in fields(entity)})

    def freeze(self) -> Entity:
        return Entity(**{item.name: getattr(self, item.name) for item in fields(self)})


EntityLike = Entity | EntityDraft


@dataclass(frozen=True)
class CommunityKnowledge:
    """Population-wide memory shared by every entity. Counters and the blacklist only grow."""

    hobbits_betrayed_total: int = 0
    orc_deaths_total: int = 0
    orc_injuries_total: int = 0
    known_defectors: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        for name in ("hobbits_betrayed_total", "orc_deaths_total", "orc_injuries_total"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"knowledge {name} must be a non-negative integer")
        if not isinstance(self.known_defectors, frozenset):
            raise ValueError("knowledge known_defectors must be a frozenset")
        if any(not isinstance(entity_id, str) for entity_id in self.known_defectors):
            raise ValueError("knowledge known_defectors must contain entity id strings")

    def is_blacklisted(self, entity_id: str) -> bool:
        return entity_id in self.known_defectors

    def to_dict(self) -> dict[str, Any]:
        return {
            "hobbits_betrayed_total": self.hobbits_betrayed_total,
            "orc_deaths_total": self.orc_deaths_total,
            "orc_injuries_total": self.orc_injuries_total,
            "known_defectors": sorted(self.known_defectors),
        }


@dataclass
class KnowledgeDraft:
    """Working copy of ``CommunityKnowledge`` used while a turn is in progress."""

    hobbits_betrayed_total: int
    orc_deaths_total: int
    orc_injuries_total: int
    known_defectors: set[str]

    @classmethod
    def from_knowledge(cls, knowledge: CommunityKnowledge) -> "KnowledgeDraft":
        return cls(
            hobbits_betrayed_total=knowledge.hobbits_betrayed_total,
            orc_deaths_total=knowledge.orc_deaths_total,
            orc_injuries_total=knowledge.orc_injuries_total,
            known_defectors=set(knowledge.known_defectors),
        )

    def is_blacklisted(self, entity_id: str) -> bool:
        return entity_id in self.known_defectors

    def blacklist(self, entity_id: str) -> None:
        self.known_defectors.add(entity_id)

    def freeze(self) -> CommunityKnowledge:
        return CommunityKnowledge(
            hobbits_betrayed_total=self.hobbits_betrayed_total,
            orc_deaths_total=self.orc_deaths_total,
            orc_injuries_total=self.orc_injuries_total,
            known_defectors=frozenset(self.known_defectors),
        )


def entity_id_for(kind: EntityKind, index: int) -> str:
    return f"{kind.id_prefix}{index}"


def build_population(config: SimulationConfig) -> tuple[Entity, ...]:
    """Fresh population: all Cooperators first, then all Adversaries."""
    entities = [Entity(entity_id=entity_id_for(EntityKind.COOPERATOR, i), kind=EntityKind.COOPERATOR) for i in range(config.hobbit_count)]
    entities.extend(
        Entity(entity_id=entity_id_for(EntityKind.ADVERSARY, i), kind=EntityKind.ADVERSARY) for i in range(config.orc_count)
    )
    return tuple(entities)
