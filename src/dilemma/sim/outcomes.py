from __future__ import annotations

import random

from dilemma.sim.config import SimulationConfig
from dilemma.sim.entities import EntityDraft, KnowledgeDraft
from dilemma.sim.events import (
    BETRAYAL_EVENT_TYPE,
    COOPERATE_EVENT_TYPE,
    INJURY_EVENT_TYPE,
    MUTUAL_DEFECT_EVENT_TYPE,
    VIOLENCE_EVENT_TYPE,
    TurnRecorder,
)
from dilemma.sim.policy import Action

INJURY_DURATION_TURNS = 3
INJURY_FEAR_GAIN = 3
STANDOFF_RELIEF_TURNS = 2

COOPERATE_FLAG_REFORMED = "reformed"
COOPERATE_FLAG_HIGHLIGHT = "highlight"


def resolve_pair(
    first: EntityDraft,
    second: EntityDraft,
    first_action: Action,
    second_action: Action,
    knowledge: KnowledgeDraft,
    config: SimulationConfig,
    rng: random.Random,
    recorder: TurnRecorder,
) -> None:
    """Apply the outcome of one resolved pair to both entities and to the knowledge draft."""
    if first_action is Action.COOPERATE and second_action is Action.COOPERATE:
        _resolve_mutual_cooperation(first, second, recorder)
    elif first_action is Action.DEFECT and second_action is Action.DEFECT:
        _resolve_mutual_defection(first, second, knowledge, recorder)
    elif first_action is Action.DEFECT:
        _resolve_betrayal(first, second, knowledge, config, rng, recorder)
    else:
        _resolve_betrayal(second, first, knowledge, config, rng, recorder)


def _resolve_mutual_cooperation(first: EntityDraft, second: EntityDraft, recorder: TurnRecorder) -> None:
    for entity in (first, second):
        entity.turns_since_success = 0
        entity.total_cooperations += 1
        entity.reputation += 1

    flag: str | None = None
    suffix = ""
    if any(entity.is_adversary and entity.injured for entity in (first, second)):
        flag = COOPERATE_FLAG_REFORMED
        suffix = " (injured orc reformed!)"
    elif first.is_adversary or second.is_adversary:
        flag = COOPERATE_FLAG_HIGHLIGHT
        suffix = " *"
    recorder.emit(
        COOPERATE_EVENT_TYPE,
        f"{first.entity_id} & {second.entity_id} cooperated{suffix}",
        first_id=first.entity_id,
        second_id=second.entity_id,
        flag=flag,
    )


def _resolve_mutual_defection(first: EntityDraft, second: EntityDraft, knowledge: KnowledgeDraft, recorder: TurnRecorder) -> None:
    for entity in (first, second):
        entity.total_defections += 1
        entity.reputation -= 1
        knowledge.blacklist(entity.entity_id)

    standoff = first.is_adversary and second.is_adversary
    if standoff:
        for entity in (first, second):
            entity.turns_since_success = max(0, entity.turns_since_success - STANDOFF_RELIEF_TURNS)
        message = f"{first.entity_id} & {second.entity_id} standoff (both scrape by)"
    else:
        message = f"{first.entity_id} & {second.entity_id} mutual defection"
    recorder.emit(
        MUTUAL_DEFECT_EVENT_TYPE,
        message,
        first_id=first.entity_id,
        second_id=second.entity_id,
        standoff=standoff,
    )


def _resolve_betrayal(
    defector: EntityDraft,
    victim: EntityDraft,
    knowledge: KnowledgeDraft,
    config: SimulationConfig,
    rng: random.Random,
    recorder: TurnRecorder,
) -> None:
    defector.turns_since_success = 0
    defector.total_defections += 1
    defector.times_betrayed_others += 1
    defector.reputation -= 2
    knowledge.blacklist(defector.entity_id)

    victim.times_betrayed += 1
    victim.caution += 1
    if victim.is_cooperator:
        knowledge.hobbits_betrayed_total += 1

    recorder.emit(
        BETRAYAL_EVENT_TYPE,
        f"{defector.entity_id} betrayed {victim.entity_id}",
        defector_id=defector.entity_id,
        victim_id=victim.entity_id,
    )

    if not (victim.is_cooperator and defector.is_adversary):
        return
    if not rng.random() < config.violence:
        return

    if defector.injured:
        defector.alive = False
        recorder.deaths += 1
        knowledge.orc_deaths_total += 1
        recorder.emit(
            VIOLENCE_EVENT_TYPE,
            f"{victim.entity_id} killed {defector.entity_id} (was already injured)",
            attacker_id=victim.entity_id,
            target_id=defector.entity_id,
        )
        return

    defector.injured = True
    defector.injury_turns_left = INJURY_DURATION_TURNS
    defector.fear += INJURY_FEAR_GAIN
    recorder.injuries += 1
    knowledge.orc_injuries_total += 1
    recorder.emit(
        INJURY_EVENT_TYPE,
        f"{victim.entity_id} injured {defector.entity_id} (heals in {INJURY_DURATION_TURNS} turns)",
        attacker_id=victim.entity_id,
        target_id=defector.entity_id,
        injury_turns=INJURY_DURATION_TURNS,
    )
