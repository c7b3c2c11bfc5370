from __future__ import annotations

from collections.abc import Iterable

from dilemma.sim.config import SimulationConfig
from dilemma.sim.entities import EntityDraft, KnowledgeDraft
from dilemma.sim.events import HEALED_EVENT_TYPE, LEARNING_EVENT_TYPE, STARVED_EVENT_TYPE, TurnRecorder

STARVATION_LIMIT_TURNS = 5
DEATH_FEAR_WEIGHT = 2
INJURY_FEAR_WEIGHT = 1


def heal_injuries(entities: Iterable[EntityDraft], recorder: TurnRecorder) -> None:
    for entity in entities:
        if not (entity.alive and entity.injured):
            continue
        entity.injury_turns_left -= 1
        if entity.injury_turns_left <= 0:
            entity.injury_turns_left = 0
            entity.injured = False
            recorder.emit(HEALED_EVENT_TYPE, f"{entity.entity_id} healed from injury", entity_id=entity.entity_id)


def apply_starvation(entities: Iterable[EntityDraft], knowledge: KnowledgeDraft, recorder: TurnRecorder) -> None:
    """Age every living entity by one turn and retire those without a deal for too long."""
    for entity in entities:
        if not entity.alive:
            continue
        entity.turns_since_success += 1
        if entity.turns_since_success <= STARVATION_LIMIT_TURNS:
            continue
        entity.alive = False
        recorder.deaths += 1
        if entity.is_adversary:
            knowledge.orc_deaths_total += 1
        recorder.emit(
            STARVED_EVENT_TYPE,
            f"{entity.entity_id} starved (no deal in {STARVATION_LIMIT_TURNS} turns)",
            entity_id=entity.entity_id,
            turns_since_success=entity.turns_since_success,
        )


def propagate_fear(entities: Iterable[EntityDraft], config: SimulationConfig, recorder: TurnRecorder) -> int:
    """Surviving Adversaries learn from this turn's deaths and injuries. Returns the fear gained each."""
    if not config.orc_school or not recorder.had_casualties:
        return 0
    fear_gain = DEATH_FEAR_WEIGHT * recorder.deaths + INJURY_FEAR_WEIGHT * recorder.injuries
    for entity in entities:
        if entity.alive and entity.is_adversary:
            entity.fear += fear_gain
    recorder.emit(
        LEARNING_EVENT_TYPE,
        f"Orcs witnessed {recorder.deaths} death(s), {recorder.injuries} injury(s) -> +{fear_gain} fear",
        deaths=recorder.deaths,
        injuries=recorder.injuries,
        fear_gain=fear_gain,
    )
    return fear_gain
