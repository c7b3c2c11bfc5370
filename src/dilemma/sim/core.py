from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from dilemma.sim.config import ConfigurationError, SimulationConfig
from dilemma.sim.entities import (
    CommunityKnowledge,
    Entity,
    EntityDraft,
    EntityKind,
    EntityLike,
    KnowledgeDraft,
    build_population,
)
from dilemma.sim.events import REFUSED_EVENT_TYPE, TurnEvent, TurnRecorder
from dilemma.sim.lifecycle import apply_starvation, heal_injuries, propagate_fear
from dilemma.sim.observers import SimulationObserver
from dilemma.sim.outcomes import resolve_pair
from dilemma.sim.policy import cross_pair, refusal_reason, select_action, should_refuse
from dilemma.sim.rng import build_stream
from dilemma.sim.stats import TurnStats, compute_turn_stats, initial_stats

MIN_ALIVE_FOR_TURN = 2


@dataclass(frozen=True)
class SimulationState:
    """Committed snapshot: population, community knowledge and the number of turns played."""

    entities: tuple[Entity, ...]
    knowledge: CommunityKnowledge = field(default_factory=CommunityKnowledge)
    turn: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.turn, int) or self.turn < 0:
            raise ValueError("state turn must be a non-negative integer")
        if not isinstance(self.entities, tuple):
            raise ValueError("state entities must be a tuple")
        seen: set[str] = set()
        for entity in self.entities:
            if entity.entity_id in seen:
                raise ValueError(f"duplicate entity id: {entity.entity_id}")
            seen.add(entity.entity_id)

    @classmethod
    def initial(cls, config: SimulationConfig) -> "SimulationState":
        return cls(entities=build_population(config))

    @property
    def alive_count(self) -> int:
        return sum(1 for entity in self.entities if entity.alive)

    @property
    def is_terminal(self) -> bool:
        return self.alive_count < MIN_ALIVE_FOR_TURN

    def entity(self, entity_id: str) -> Entity:
        for entity in self.entities:
            if entity.entity_id == entity_id:
                return entity
        raise KeyError(entity_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "entities": [entity.to_dict() for entity in self.entities],
            "knowledge": self.knowledge.to_dict(),
        }


@dataclass(frozen=True)
class TurnResult:
    state: SimulationState
    events: tuple[TurnEvent, ...] = ()
    stats: TurnStats | None = None
    terminal: bool = False


def pair_entities(
    entities: list[EntityLike], rng: random.Random
) -> tuple[list[tuple[EntityLike, EntityLike]], EntityLike | None]:
    """Shuffle ``entities`` and consume them two at a time. Returns (pairs, unpaired)."""
    order = list(entities)
    rng.shuffle(order)
    pairs = [(order[index], order[index + 1]) for index in range(0, len(order) - 1, 2)]
    unpaired = order[-1] if len(order) % 2 == 1 else None
    return pairs, unpaired


def _interact(
    first: EntityDraft,
    second: EntityDraft,
    knowledge: KnowledgeDraft,
    config: SimulationConfig,
    rng: random.Random,
    recorder: TurnRecorder,
) -> None:
    mixed = cross_pair(first, second)
    if mixed is not None:
        cooperator, adversary = mixed
        if should_refuse(cooperator, adversary, knowledge, config, rng):
            reason = refusal_reason(adversary, knowledge)
            recorder.emit(
                REFUSED_EVENT_TYPE,
                f"{cooperator.entity_id} refused {adversary.entity_id} ({reason})",
                refuser_id=cooperator.entity_id,
                refused_id=adversary.entity_id,
                reason=reason,
            )
            return

    first_action = select_action(first, second, knowledge, config, rng)
    second_action = select_action(second, first, knowledge, config, rng)
    resolve_pair(first, second, first_action, second_action, knowledge, config, rng, recorder)


def _require_population_matches(state: SimulationState, config: SimulationConfig) -> None:
    hobbits = sum(1 for entity in state.entities if entity.kind is EntityKind.COOPERATOR)
    orcs = len(state.entities) - hobbits
    if (hobbits, orcs) != (config.hobbit_count, config.orc_count):
        raise ConfigurationError(
            f"state population ({hobbits} hobbits, {orcs} orcs) does not match config "
            f"({config.hobbit_count} hobbits, {config.orc_count} orcs)"
        )


def advance_turn(state: SimulationState, config: SimulationConfig, rng: random.Random) -> TurnResult:
    """Play one turn on a private copy of ``state`` and return the new committed snapshot.

    ``state`` itself is never modified. When fewer than two entities are alive
    the turn is a no-op and the result is flagged ``terminal``.
    A state whose population does not match ``config`` raises ``ConfigurationError``.
    """
    _require_population_matches(state, config)
    if state.is_terminal:
        return TurnResult(state=state, terminal=True)

    turn = state.turn + 1
    recorder = TurnRecorder(turn=turn)
    working = [EntityDraft.from_entity(entity) for entity in state.entities]
    knowledge = KnowledgeDraft.from_knowledge(state.knowledge)

    heal_injuries(working, recorder)

    pairs, _ = pair_entities([entity for entity in working if entity.alive], rng)
    for first, second in pairs:
        _interact(first, second, knowledge, config, rng, recorder)

    apply_starvation(working, knowledge, recorder)
    propagate_fear(working, config, recorder)

    committed = tuple(entity.freeze() for entity in working)
    new_state = SimulationState(entities=committed, knowledge=knowledge.freeze(), turn=turn)
    stats = compute_turn_stats(turn, committed, config)
    return TurnResult(state=new_state, events=tuple(recorder.events), stats=stats)


class Simulation:
    """Driver that owns one run: configuration, RNG stream, current snapshot and history."""

    def __init__(self, config: SimulationConfig, seed: int) -> None:
        self.config = config
        self.seed = seed
        self.observers: list[SimulationObserver] = []
        self._reset_run()

    def _reset_run(self) -> None:
        self.rng = build_stream(self.seed)
        self.state = SimulationState.initial(self.config)
        self.history: list[TurnStats] = []
        self.last_events: tuple[TurnEvent, ...] = ()
        self.stats = initial_stats(self.config)
        self.finished = False

    def reset(self, config: SimulationConfig | None = None, seed: int | None = None) -> None:
        if config is not None:
            self.config = config
        if seed is not None:
            self.seed = seed
        self._reset_run()
        for observer in self.observers:
            observer.on_simulation_start(self)

    def register_observer(self, observer: SimulationObserver) -> None:
        if any(existing.name == observer.name for existing in self.observers):
            raise ValueError(f"duplicate observer name: {observer.name}")
        self.observers.append(observer)
        observer.on_simulation_start(self)

    def get_observer(self, observer_name: str) -> SimulationObserver | None:
        for observer in self.observers:
            if observer.name == observer_name:
                return observer
        return None

    def advance_turn(self) -> TurnResult:
        result = advance_turn(self.state, self.config, self.rng)
        if result.terminal:
            self.finished = True
            for observer in self.observers:
                observer.on_terminal(self)
            return result

        self.state = result.state
        self.last_events = result.events
        if result.stats is not None:
            self.stats = result.stats
            self.history.append(result.stats)
        for observer in self.observers:
            observer.on_turn_committed(self, result)
        return result

    def advance_turns(self, turns: int) -> int:
        """Advance up to ``turns`` turns; returns how many were actually played."""
        if not isinstance(turns, int) or turns < 0:
            raise ValueError("turns must be a non-negative integer")
        played = 0
        for _ in range(turns):
            if self.advance_turn().terminal:
                break
            played += 1
        return played


def run_turns(config: SimulationConfig, seed: int, turns: int) -> Simulation:
    simulation = Simulation(config=config, seed=seed)
    simulation.advance_turns(turns)
    return simulation
