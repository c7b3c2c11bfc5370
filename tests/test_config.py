import pytest

from dilemma.sim.config import ConfigurationError, SimulationConfig


def test_default_config_matches_control_panel_defaults() -> None:
    config = SimulationConfig()

    assert config.hobbit_count == 30
    assert config.orc_count == 30
    assert config.street_smarts == 0.1
    assert config.violence == 0.3
    assert config.hobbit_school is True
    assert config.orc_school is True
    assert config.total_population == 60


@pytest.mark.parametrize(
    "changes",
    [
        {"hobbit_count": 0},
        {"orc_count": -3},
        {"hobbit_count": 2.5},
        {"orc_count": True},
        {"street_smarts": 1.01},
        {"street_smarts": -0.1},
        {"violence": 2},
        {"violence": "0.5"},
        {"hobbit_school": 1},
        {"orc_school": None},
    ],
)
def test_invalid_config_raises_configuration_error(changes: dict) -> None:
    with pytest.raises(ConfigurationError):
        SimulationConfig(**changes)


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        SimulationConfig(violence=5.0)


def test_boundary_probabilities_are_accepted() -> None:
    config = SimulationConfig(street_smarts=0, violence=1)

    assert config.street_smarts == 0
    assert config.violence == 1


def test_from_dict_accepts_camel_case_control_panel_payload() -> None:
    config = SimulationConfig.from_dict(
        {
            "hobbitCount": 12,
            "orcCount": 8,
            "streetSmarts": 0.25,
            "violence": 0.5,
            "hobbitSchool": False,
            "orcSchool": True,
        }
    )

    assert config == SimulationConfig(
        hobbit_count=12,
        orc_count=8,
        street_smarts=0.25,
        violence=0.5,
        hobbit_school=False,
        orc_school=True,
    )


def test_from_dict_round_trips_snake_case() -> None:
    config = SimulationConfig(hobbit_count=3, orc_count=4, street_smarts=0.0, violence=0.9, hobbit_school=False)

    assert SimulationConfig.from_dict(config.to_dict()) == config


def test_from_dict_rejects_unknown_and_duplicate_fields() -> None:
    with pytest.raises(ConfigurationError, match="unknown"):
        SimulationConfig.from_dict({"trolls": 3})
    with pytest.raises(ConfigurationError, match="twice"):
        SimulationConfig.from_dict({"orcCount": 3, "orc_count": 4})


def test_replace_validates_the_new_values() -> None:
    config = SimulationConfig()

    assert config.replace(orc_count=5).orc_count == 5
    with pytest.raises(ConfigurationError):
        config.replace(street_smarts=3.0)
