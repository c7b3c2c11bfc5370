from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from dilemma.sim.config import SimulationConfig
from dilemma.sim.entities import Entity

SURVIVAL_WELFARE_WEIGHT = 100.0
VIOLENCE_WELFARE_PENALTY = 50.0


@dataclass(frozen=True)
class TurnStats:
    turn: int
    alive_hobbits: int
    alive_orcs: int
    hobbit_deaths: int
    orc_deaths: int
    cooperations: int
    defections: int
    reformed_orcs: int
    injured_orcs: int
    survival_fraction: float
    violence_fraction: float
    welfare_score: float

    @property
    def welfare(self) -> int:
        return round(self.welfare_score)

    @property
    def survival_rate(self) -> int:
        return round(self.survival_fraction * 100)

    @property
    def violence_rate(self) -> int:
        return round(self.violence_fraction * 100)

    @property
    def alive_total(self) -> int:
        return self.alive_hobbits + self.alive_orcs

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "welfare": self.welfare,
            "survival_rate": self.survival_rate,
            "violence_rate": self.violence_rate,
            "hobbit_deaths": self.hobbit_deaths,
            "orc_deaths": self.orc_deaths,
            "cooperations": self.cooperations,
            "defections": self.defections,
            "reformed_orcs": self.reformed_orcs,
            "injured_orcs": self.injured_orcs,
            "alive_hobbits": self.alive_hobbits,
            "alive_orcs": self.alive_orcs,
            "survival_fraction": self.survival_fraction,
            "violence_fraction": self.violence_fraction,
            "welfare_score": self.welfare_score,
        }


def welfare_score(survival_fraction: float, violence_fraction: float) -> float:
    return max(0.0, survival_fraction * SURVIVAL_WELFARE_WEIGHT - violence_fraction * VIOLENCE_WELFARE_PENALTY)


def compute_turn_stats(turn: int, entities: Sequence[Entity], config: SimulationConfig) -> TurnStats:
    """Summarise a committed population. Lifetime counters include the dead."""
    alive_hobbits = sum(1 for entity in entities if entity.alive and entity.is_cooperator)
    alive_orcs = [entity for entity in entities if entity.alive and entity.is_adversary]
    orc_deaths = config.orc_count - len(alive_orcs)

    survival_fraction = (alive_hobbits + len(alive_orcs)) / config.total_population
    violence_fraction = orc_deaths / config.orc_count
    return TurnStats(
        turn=turn,
        alive_hobbits=alive_hobbits,
        alive_orcs=len(alive_orcs),
        hobbit_deaths=config.hobbit_count - alive_hobbits,
        orc_deaths=orc_deaths,
        cooperations=sum(entity.total_cooperations for entity in entities),
        defections=sum(entity.total_defections for entity in entities),
        reformed_orcs=sum(1 for entity in alive_orcs if entity.reformed),
        injured_orcs=sum(1 for entity in alive_orcs if entity.injured),
        survival_fraction=survival_fraction,
        violence_fraction=violence_fraction,
        welfare_score=welfare_score(survival_fraction, violence_fraction),
    )


def initial_stats(config: SimulationConfig) -> TurnStats:
    return TurnStats(
        turn=0,
        alive_hobbits=config.hobbit_count,
        alive_orcs=config.orc_count,
        hobbit_deaths=0,
        orc_deaths=0,
        cooperations=0,
        defections=0,
        reformed_orcs=0,
        injured_orcs=0,
        survival_fraction=1.0,
        violence_fraction=0.0,
        welfare_score=SURVIVAL_WELFARE_WEIGHT,
    )
