import pytest

from dilemma.cli.pygame_viewer import (
    MAX_INTERVAL_MS,
    MIN_INTERVAL_MS,
    ReplayController,
    _build_parser,
    _build_viewer_simulation,
    clamp_interval,
    entity_color,
    graveyard_text,
    welfare_color,
)
from dilemma.sim.config import SimulationConfig
from dilemma.sim.core import Simulation, SimulationState
from dilemma.sim.entities import Entity, EntityKind
from dilemma.sim.stats import compute_turn_stats


def _build_controller(**config_fields) -> ReplayController:
    sim = Simulation(config=SimulationConfig(**config_fields), seed=7)
    return ReplayController(sim=sim, interval_ms=200)


def test_viewer_parser_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.preset == "default"
    assert args.seed == 7
    assert args.interval_ms == 500
    assert args.headless is False


def test_viewer_simulation_uses_preset_config() -> None:
    sim = _build_viewer_simulation("outnumbered", "content/presets/scenarios.json", seed=3)

    assert sim.config.hobbit_count == 10
    assert sim.config.orc_count == 50
    assert sim.seed == 3


def test_controller_plays_turns_as_time_accumulates() -> None:
    controller = _build_controller()

    assert controller.update(1000) == 0
    controller.toggle_running()
    assert controller.update(150) == 0
    assert controller.update(50) == 1
    assert controller.update(450) == 2
    assert controller.elapsed_ms == 50
    assert controller.sim.state.turn == 3


def test_controller_step_and_reset() -> None:
    controller = _build_controller()

    assert controller.step() is True
    assert controller.sim.state.turn == 1
    controller.running = True
    controller.reset()

    assert controller.running is False
    assert controller.sim.state.turn == 0


def test_controller_stops_running_on_terminal_population() -> None:
    controller = _build_controller(hobbit_count=1, orc_count=1)
    controller.sim.state = SimulationState(
        entities=(
            Entity(entity_id="H0", kind=EntityKind.COOPERATOR),
            Entity(entity_id="O0", kind=EntityKind.ADVERSARY, alive=False),
        )
    )
    controller.toggle_running()

    assert controller.update(1000) == 0
    assert controller.running is False
    assert controller.sim.finished is True
    controller.toggle_running()
    assert controller.running is False


def test_speed_changes_are_clamped() -> None:
    controller = _build_controller()
    controller.interval_ms = MIN_INTERVAL_MS
    controller.faster()
    assert controller.interval_ms == MIN_INTERVAL_MS

    controller.interval_ms = MAX_INTERVAL_MS
    controller.slower()
    assert controller.interval_ms == MAX_INTERVAL_MS
    assert clamp_interval(5) == MIN_INTERVAL_MS
    assert clamp_interval(5000) == 1000


def test_colors_follow_entity_state() -> None:
    injured = Entity(entity_id="O0", kind=EntityKind.ADVERSARY, injured=True, injury_turns_left=2)
    aggressive = Entity(entity_id="O1", kind=EntityKind.ADVERSARY)

    assert entity_color(injured) != entity_color(aggressive)
    assert welfare_color(90) != welfare_color(50) != welfare_color(10)


def test_main_help_prints_usage_without_starting_viewer(capsys: pytest.CaptureFixture[str]) -> None:
    from dilemma.cli.pygame_viewer import main

    with pytest.raises(SystemExit) as result:
        main(["--help"])

    captured = capsys.readouterr()
    assert result.value.code == 0
    assert "usage:" in captured.out
    assert "--headless" in captured.out


def test_main_headless_mode_exits_cleanly_and_warns(capsys: pytest.CaptureFixture[str]) -> None:
    pytest.importorskip("pygame")
    from dilemma.cli.pygame_viewer import main

    with pytest.raises(SystemExit) as result:
        main(["--headless"])

    captured = capsys.readouterr()
    assert result.value.code == 0
    assert "headless mode active" in captured.out
    assert "headless turn=1" in captured.out


def test_graveyard_counts_fallen_hobbits_and_orcs_separately() -> None:
    config = SimulationConfig(hobbit_count=2, orc_count=3)
    entities = (
        Entity(entity_id="H0", kind=EntityKind.COOPERATOR, alive=False),
        Entity(entity_id="H1", kind=EntityKind.COOPERATOR),
        Entity(entity_id="O0", kind=EntityKind.ADVERSARY, alive=False),
        Entity(entity_id="O1", kind=EntityKind.ADVERSARY, alive=False),
        Entity(entity_id="O2", kind=EntityKind.ADVERSARY),
    )

    stats = compute_turn_stats(4, entities, config)

    assert graveyard_text(stats) == "Fallen 1 hobbits / 2 orcs"
