from __future__ import annotations

import argparse
import sys
from typing import Any, Sequence

from dilemma.cli.viewer import AsciiViewer, format_event_line, format_stats_line
from dilemma.content.presets import DEFAULT_PRESET_ID, DEFAULT_PRESETS_PATH, load_presets_json
from dilemma.sim.config import SimulationConfig
from dilemma.sim.core import Simulation, TurnResult
from dilemma.sim.hash import simulation_hash
from dilemma.sim.observers import SimulationObserver

DEFAULT_SEED = 7
DEFAULT_TURNS = 50


def _non_negative_int(value: str) -> int:
    parsed = int(value)
    if parsed < 0:
        raise argparse.ArgumentTypeError("turns must be >= 0")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dilemma-run",
        description="Headless runner: advances a seeded cooperation-dilemma simulation and prints its statistics.",
    )
    parser.add_argument("--preset", default=DEFAULT_PRESET_ID, help="Preset id used as the base configuration.")
    parser.add_argument("--presets-path", default=DEFAULT_PRESETS_PATH, help="Path to the presets JSON file.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Master seed for the engine RNG stream.")
    parser.add_argument("--turns", type=_non_negative_int, default=DEFAULT_TURNS, help="Maximum number of turns to play.")
    parser.add_argument("--hobbits", type=int, help="Override the hobbit population size.")
    parser.add_argument("--orcs", type=int, help="Override the orc population size.")
    parser.add_argument("--street-smarts", type=float, help="Override the base refusal probability (0..1).")
    parser.add_argument("--violence", type=float, help="Override the retaliation probability (0..1).")
    parser.add_argument("--hobbit-school", action=argparse.BooleanOptionalAction, default=None, help="Toggle hobbit learning.")
    parser.add_argument("--orc-school", action=argparse.BooleanOptionalAction, default=None, help="Toggle orc learning.")
    parser.add_argument("--per-turn", action="store_true", help="Print a stats line after every turn.")
    parser.add_argument("--print-events", action="store_true", help="Print every event of every turn.")
    parser.add_argument("--print-population", action="store_true", help="Print the final population grid.")
    return parser


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    candidates = {
        "hobbit_count": args.hobbits,
        "orc_count": args.orcs,
        "street_smarts": args.street_smarts,
        "violence": args.violence,
        "hobbit_school": args.hobbit_school,
        "orc_school": args.orc_school,
    }
    return {key: value for key, value in candidates.items() if value is not None}


def resolve_config(args: argparse.Namespace) -> SimulationConfig:
    registry = load_presets_json(args.presets_path)
    config = registry.config_for(args.preset)
    overrides = _overrides_from_args(args)
    return config.replace(**overrides) if overrides else config


class TurnPrinter(SimulationObserver):
    name = "turn_printer"

    def __init__(self, *, per_turn: bool, print_events: bool) -> None:
        self.per_turn = per_turn
        self.print_events = print_events

    def on_turn_committed(self, sim: Simulation, result: TurnResult) -> None:
        if self.print_events:
            for event in result.events:
                print(format_event_line(event))
        if self.per_turn and result.stats is not None:
            print(format_stats_line(result.stats))

    def on_terminal(self, sim: Simulation) -> None:
        print(f"[dilemma.run] terminal population reached turn={sim.state.turn} alive={sim.state.alive_count}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        config = resolve_config(args)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    simulation = Simulation(config=config, seed=args.seed)
    simulation.register_observer(TurnPrinter(per_turn=args.per_turn, print_events=args.print_events))
    print(
        "[dilemma.run] start "
        f"preset={args.preset} seed={args.seed} turns={args.turns} "
        + " ".join(f"{key}={value}" for key, value in config.to_dict().items())
    )

    played = simulation.advance_turns(args.turns)

    print(f"[dilemma.run] played={played} finished={str(simulation.finished).lower()}")
    print(format_stats_line(simulation.stats))
    if args.print_population:
        print(AsciiViewer().render(simulation.state))
    print(f"simulation_hash={simulation_hash(simulation)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
