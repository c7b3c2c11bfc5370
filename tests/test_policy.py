import pytest

from dilemma.sim.config import SimulationConfig
from dilemma.sim.entities import CommunityKnowledge, Entity, EntityKind
from dilemma.sim.policy import (
    MAX_REFUSAL_PROBABILITY,
    Action,
    adversary_cooperate_probability,
    cross_pair,
    refusal_probability,
    refusal_reason,
    select_action,
    should_refuse,
)


class _FixedDraws:
    def __init__(self, *values: float) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.values.pop(0)

    def shuffle(self, items: list) -> None:
        return None


def _hobbit(**fields) -> Entity:
    return Entity(entity_id=fields.pop("entity_id", "H0"), kind=EntityKind.COOPERATOR, **fields)


def _orc(**fields) -> Entity:
    return Entity(entity_id=fields.pop("entity_id", "O0"), kind=EntityKind.ADVERSARY, **fields)


def test_fresh_orc_facing_hobbit_cooperates_with_exactly_facing_bonus() -> None:
    config = SimulationConfig(orc_school=True)

    probability = adversary_cooperate_probability(_orc(), _hobbit(), CommunityKnowledge(), config)

    assert probability == 0.15


def test_orc_cooperation_is_exactly_zero_without_orc_school() -> None:
    config = SimulationConfig(orc_school=False)
    scared_injured = _orc(fear=9, total_cooperations=4, injured=True, injury_turns_left=2)
    knowledge = CommunityKnowledge(orc_deaths_total=50, orc_injuries_total=50)

    assert adversary_cooperate_probability(scared_injured, _hobbit(), knowledge, config) == 0.0
    assert select_action(scared_injured, _hobbit(), knowledge, config, _FixedDraws(0.0)) is Action.DEFECT


def test_orc_cooperation_terms_add_up_with_caps() -> None:
    config = SimulationConfig(orc_school=True)
    orc = _orc(fear=2, total_cooperations=1, injured=True, injury_turns_left=1)
    knowledge = CommunityKnowledge(orc_deaths_total=30, orc_injuries_total=3)

    probability = adversary_cooperate_probability(orc, _hobbit(), knowledge, config)

    # fear 0.2 + deaths capped 0.4 + injuries 0.06 + habit 0.2 + facing hobbit 0.15 + injured 0.6
    assert probability == pytest.approx(1.61)


def test_mutual_fear_bonus_needs_both_orcs_above_threshold() -> None:
    config = SimulationConfig(orc_school=True)
    knowledge = CommunityKnowledge()

    both_scared = adversary_cooperate_probability(_orc(fear=2), _orc(entity_id="O1", fear=2), knowledge, config)
    one_scared = adversary_cooperate_probability(_orc(fear=2), _orc(entity_id="O1", fear=1), knowledge, config)

    assert both_scared == pytest.approx(0.2 + 0.5)
    assert one_scared == pytest.approx(0.2)


def test_probability_above_one_is_certain_cooperation() -> None:
    config = SimulationConfig(orc_school=True)
    orc = _orc(fear=20)

    assert select_action(orc, _hobbit(), CommunityKnowledge(), config, _FixedDraws(0.999999)) is Action.COOPERATE


def test_cooperators_always_cooperate_without_drawing() -> None:
    draws = _FixedDraws()

    action = select_action(_hobbit(caution=5), _orc(), CommunityKnowledge(), SimulationConfig(), draws)

    assert action is Action.COOPERATE
    assert draws.calls == 0


def test_refusal_without_hobbit_school_is_exactly_street_smarts() -> None:
    config = SimulationConfig(street_smarts=0.37, hobbit_school=False)
    knowledge = CommunityKnowledge(hobbits_betrayed_total=40, known_defectors=frozenset({"O0"}))
    hobbit = _hobbit(caution=6, times_betrayed=6)
    orc = _orc(reputation=3, injured=True, injury_turns_left=2)

    assert refusal_probability(hobbit, orc, knowledge, config) == 0.37


def test_refusal_terms_with_hobbit_school() -> None:
    config = SimulationConfig(street_smarts=0.1, hobbit_school=True)
    knowledge = CommunityKnowledge(hobbits_betrayed_total=2, known_defectors=frozenset())

    probability = refusal_probability(_hobbit(caution=1), _orc(), knowledge, config)

    assert probability == pytest.approx(0.1 + 0.1 + 0.1)


def test_refusal_is_capped_at_maximum() -> None:
    config = SimulationConfig(street_smarts=0.5, hobbit_school=True)
    knowledge = CommunityKnowledge(hobbits_betrayed_total=100, known_defectors=frozenset({"O0"}))

    probability = refusal_probability(_hobbit(caution=10), _orc(), knowledge, config)

    assert probability == MAX_REFUSAL_PROBABILITY


def test_refusal_floor_is_unconstrained_and_never_fires() -> None:
    config = SimulationConfig(street_smarts=0.0, hobbit_school=True)
    orc = _orc(reputation=2, injured=True, injury_turns_left=3)

    probability = refusal_probability(_hobbit(), orc, CommunityKnowledge(), config)

    assert probability == pytest.approx(-0.35)
    assert should_refuse(_hobbit(), orc, CommunityKnowledge(), config, _FixedDraws(0.0)) is False


def test_refusal_reason_depends_on_blacklist() -> None:
    knowledge = CommunityKnowledge(known_defectors=frozenset({"O0"}))

    assert refusal_reason(_orc(), knowledge) == "blacklisted"
    assert refusal_reason(_orc(entity_id="O9"), knowledge) == "wary"


def test_cross_pair_orders_cooperator_first_and_ignores_same_kind_pairs() -> None:
    hobbit = _hobbit()
    orc = _orc()

    assert cross_pair(orc, hobbit) == (hobbit, orc)
    assert cross_pair(hobbit, orc) == (hobbit, orc)
    assert cross_pair(hobbit, _hobbit(entity_id="H1")) is None
    assert cross_pair(orc, _orc(entity_id="O1")) is None
