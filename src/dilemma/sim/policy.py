from __future__ import annotations

import random
from enum import Enum

from dilemma.sim.config import SimulationConfig
from dilemma.sim.entities import CommunityKnowledge, EntityLike, KnowledgeDraft

MAX_REFUSAL_PROBABILITY = 0.85

COMMUNITY_BETRAYAL_REFUSAL_STEP = 0.05
COMMUNITY_BETRAYAL_REFUSAL_CAP = 0.40
CAUTION_REFUSAL_STEP = 0.10
CAUTION_REFUSAL_CAP = 0.30
BLACKLIST_REFUSAL_BONUS = 0.40
POSITIVE_REPUTATION_REFUSAL_DISCOUNT = 0.20
INJURED_PARTNER_REFUSAL_DISCOUNT = 0.15

FEAR_COOPERATE_STEP = 0.10
COMMUNITY_DEATH_COOPERATE_STEP = 0.04
COMMUNITY_DEATH_COOPERATE_CAP = 0.40
COMMUNITY_INJURY_COOPERATE_STEP = 0.02
COMMUNITY_INJURY_COOPERATE_CAP = 0.20
HABIT_COOPERATE_STEP = 0.20
FACING_COOPERATOR_BONUS = 0.15
INJURED_SELF_BONUS = 0.60
MUTUAL_FEAR_BONUS = 0.50
MUTUAL_FEAR_THRESHOLD = 1

REFUSAL_REASON_BLACKLISTED = "blacklisted"
REFUSAL_REASON_WARY = "wary"

Knowledge = CommunityKnowledge | KnowledgeDraft


class Action(Enum):
    COOPERATE = "cooperate"
    DEFECT = "defect"


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def refusal_probability(
    cooperator: EntityLike,
    adversary: EntityLike,
    knowledge: Knowledge,
    config: SimulationConfig,
) -> float:
    """Chance that ``cooperator`` walks away from ``adversary`` before any action.

    The value is capped at ``MAX_REFUSAL_PROBABILITY`` but has no floor; a
    negative result never fires when drawn against.
    """
    chance = float(config.street_smarts)
    if config.hobbit_school:
        chance += min(COMMUNITY_BETRAYAL_REFUSAL_CAP, COMMUNITY_BETRAYAL_REFUSAL_STEP * knowledge.hobbits_betrayed_total)
        chance += min(CAUTION_REFUSAL_CAP, CAUTION_REFUSAL_STEP * cooperator.caution)
        if knowledge.is_blacklisted(adversary.entity_id):
            chance += BLACKLIST_REFUSAL_BONUS
        if adversary.reputation > 0:
            chance -= POSITIVE_REPUTATION_REFUSAL_DISCOUNT
        if adversary.injured:
            chance -= INJURED_PARTNER_REFUSAL_DISCOUNT
    return min(MAX_REFUSAL_PROBABILITY, chance)


def refusal_reason(adversary: EntityLike, knowledge: Knowledge) -> str:
    return REFUSAL_REASON_BLACKLISTED if knowledge.is_blacklisted(adversary.entity_id) else REFUSAL_REASON_WARY


def cross_pair(first: EntityLike, second: EntityLike) -> tuple[EntityLike, EntityLike] | None:
    """Return ``(cooperator, adversary)`` for a mixed pair, else None."""
    if first.is_cooperator and second.is_adversary:
        return first, second
    if second.is_cooperator and first.is_adversary:
        return second, first
    return None


def should_refuse(
    cooperator: EntityLike,
    adversary: EntityLike,
    knowledge: Knowledge,
    config: SimulationConfig,
    rng: random.Random,
) -> bool:
    probability = clamp01(refusal_probability(cooperator, adversary, knowledge, config))
    return rng.random() < probability


def adversary_cooperate_probability(
    adversary: EntityLike,
    partner: EntityLike,
    knowledge: Knowledge,
    config: SimulationConfig,
) -> float:
    """Unclamped additive cooperation tendency of an Adversary; exactly 0 without orc school."""
    if not config.orc_school:
        return 0.0
    chance = FEAR_COOPERATE_STEP * adversary.fear
    chance += min(COMMUNITY_DEATH_COOPERATE_CAP, COMMUNITY_DEATH_COOPERATE_STEP * knowledge.orc_deaths_total)
    chance += min(COMMUNITY_INJURY_COOPERATE_CAP, COMMUNITY_INJURY_COOPERATE_STEP * knowledge.orc_injuries_total)
    chance += HABIT_COOPERATE_STEP * adversary.total_cooperations
    if partner.is_cooperator:
        chance += FACING_COOPERATOR_BONUS
    if adversary.injured:
        chance += INJURED_SELF_BONUS
    if partner.is_adversary and adversary.fear > MUTUAL_FEAR_THRESHOLD and partner.fear > MUTUAL_FEAR_THRESHOLD:
        chance += MUTUAL_FEAR_BONUS
    return chance


def select_action(
    entity: EntityLike,
    partner: EntityLike,
    knowledge: Knowledge,
    config: SimulationConfig,
    rng: random.Random,
) -> Action:
    if entity.is_cooperator:
        return Action.COOPERATE
    probability = clamp01(adversary_cooperate_probability(entity, partner, knowledge, config))
    return Action.COOPERATE if rng.random() < probability else Action.DEFECT
