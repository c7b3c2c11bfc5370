from __future__ import annotations

import argparse
import importlib.metadata
import os
import platform
import sys
from dataclasses import dataclass
from typing import Any

from dilemma.cli.viewer import entity_status, format_event_line
from dilemma.content.presets import DEFAULT_PRESET_ID, DEFAULT_PRESETS_PATH, load_presets_json
from dilemma.sim.core import Simulation
from dilemma.sim.entities import Entity
from dilemma.sim.stats import TurnStats

WINDOW_SIZE = (1280, 820)
PANEL_MARGIN = 16
CELL_SIZE = 22
CELL_GAP = 4
GRID_COLUMNS = 10
EVENT_LOG_LIMIT = 18

DEFAULT_INTERVAL_MS = 500
MIN_INTERVAL_MS = 100
MAX_INTERVAL_MS = 1000
INTERVAL_STEP_MS = 100
DEFAULT_SEED = 7

BACKGROUND_COLOR = (13, 17, 23)
PANEL_COLOR = (22, 27, 34)
TEXT_COLOR = (201, 209, 217)
STATUS_COLORS: dict[str, tuple[int, int, int]] = {
    "trusting": (35, 134, 54),
    "wary": (61, 139, 64),
    "cautious": (210, 153, 34),
    "aggressive": (218, 54, 51),
    "scared": (137, 87, 229),
    "injured": (255, 166, 87),
    "reformed": (35, 134, 54),
    "dead": (72, 79, 88),
}
WELFARE_GOOD_THRESHOLD = 70
WELFARE_FAIR_THRESHOLD = 40

pygame: Any | None = None


def clamp_interval(interval_ms: int) -> int:
    return max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, interval_ms))


def welfare_color(welfare: int) -> tuple[int, int, int]:
    if welfare > WELFARE_GOOD_THRESHOLD:
        return (126, 231, 135)
    if welfare > WELFARE_FAIR_THRESHOLD:
        return (210, 153, 34)
    return (248, 81, 73)


def entity_color(entity: Entity) -> tuple[int, int, int]:
    return STATUS_COLORS[entity_status(entity)]


def graveyard_text(stats: TurnStats) -> str:
    return f"Fallen {stats.hobbit_deaths} hobbits / {stats.orc_deaths} orcs"


@dataclass
class ReplayController:
    """Timer-driven replay cadence; the simulation remains the source of truth."""

    sim: Simulation
    interval_ms: int = DEFAULT_INTERVAL_MS
    running: bool = False
    elapsed_ms: int = 0

    def toggle_running(self) -> None:
        if self.sim.finished:
            self.running = False
            return
        self.running = not self.running
        self.elapsed_ms = 0

    def step(self) -> bool:
        """Advance one turn; returns False once the population is terminal."""
        result = self.sim.advance_turn()
        if result.terminal:
            self.running = False
            return False
        return True

    def reset(self) -> None:
        self.running = False
        self.elapsed_ms = 0
        self.sim.reset()

    def slower(self) -> None:
        self.interval_ms = clamp_interval(self.interval_ms + INTERVAL_STEP_MS)

    def faster(self) -> None:
        self.interval_ms = clamp_interval(self.interval_ms - INTERVAL_STEP_MS)

    def update(self, dt_ms: int) -> int:
        """Accumulate wall-clock time and play every turn that came due. Returns turns played."""
        if not self.running:
            return 0
        self.elapsed_ms += dt_ms
        played = 0
        while self.running and self.elapsed_ms >= self.interval_ms:
            self.elapsed_ms -= self.interval_ms
            if self.step():
                played += 1
        return played


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dilemma-viewer", description="Interactive replay viewer for the cooperation dilemma.")
    parser.add_argument("--preset", default=DEFAULT_PRESET_ID, help="Preset id used as the configuration.")
    parser.add_argument("--presets-path", default=DEFAULT_PRESETS_PATH, help="Path to the presets JSON file.")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Master seed for the engine RNG stream.")
    parser.add_argument("--interval-ms", type=int, default=DEFAULT_INTERVAL_MS, help="Milliseconds between turns while running.")
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Force SDL dummy video driver for CI/testing, play one turn and exit without opening a real window.",
    )
    return parser


def _env_flag_enabled(var_name: str) -> bool:
    return os.environ.get(var_name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_startup_banner() -> None:
    try:
        pygame_version = importlib.metadata.version("pygame")
    except importlib.metadata.PackageNotFoundError:
        pygame_version = "not-installed"
    print(
        "[dilemma.viewer] startup "
        f"python={platform.python_version()} "
        f"pygame={pygame_version} "
        f"platform={platform.platform()}"
    )


def _ensure_pygame_imported() -> Any:
    global pygame
    if pygame is None:
        import pygame as pygame_module

        pygame = pygame_module
    return pygame


def _build_viewer_simulation(preset_id: str, presets_path: str, seed: int) -> Simulation:
    config = load_presets_json(presets_path).config_for(preset_id)
    return Simulation(config=config, seed=seed)


def _draw_text(screen: Any, font: Any, text: str, pos: tuple[int, int], color: tuple[int, int, int] = TEXT_COLOR) -> None:
    screen.blit(font.render(text, True, color), pos)


def _draw_population(screen: Any, font: Any, title: str, members: list[Entity], origin: tuple[int, int]) -> int:
    x0, y0 = origin
    alive = [entity for entity in members if entity.alive]
    _draw_text(screen, font, f"{title} ({len(alive)} alive)", (x0, y0))
    y0 += 26
    for index, entity in enumerate(alive):
        column = index % GRID_COLUMNS
        row = index // GRID_COLUMNS
        rect = (x0 + column * (CELL_SIZE + CELL_GAP), y0 + row * (CELL_SIZE + CELL_GAP), CELL_SIZE, CELL_SIZE)
        pygame.draw.ellipse(screen, entity_color(entity), rect)
        if entity.reformed:
            pygame.draw.ellipse(screen, (126, 231, 135), rect, 2)
    rows = max(1, (len(alive) + GRID_COLUMNS - 1) // GRID_COLUMNS)
    return y0 + rows * (CELL_SIZE + CELL_GAP) + PANEL_MARGIN


def _draw_stats(screen: Any, font: Any, sim: Simulation, origin: tuple[int, int]) -> int:
    x0, y0 = origin
    stats = sim.stats
    _draw_text(screen, font, f"Welfare {stats.welfare}", (x0, y0), welfare_color(stats.welfare))
    lines = [
        f"Survival {stats.survival_rate}%  ({stats.alive_total} / {sim.config.total_population})",
        f"Violence {stats.violence_rate}%  ({stats.orc_deaths} of {sim.config.orc_count} orcs dead)",
        f"Healing orcs {stats.injured_orcs}   Reformed orcs {stats.reformed_orcs}",
        f"Cooperations {stats.cooperations}   Defections {stats.defections}",
        f"{graveyard_text(stats)}   Blacklist {len(sim.state.knowledge.known_defectors)}",
    ]
    for offset, line in enumerate(lines, start=1):
        _draw_text(screen, font, line, (x0, y0 + offset * 22))
    return y0 + (len(lines) + 1) * 22 + PANEL_MARGIN


def _draw_event_log(screen: Any, font: Any, sim: Simulation, origin: tuple[int, int]) -> None:
    x0, y0 = origin
    _draw_text(screen, font, f"Events (turn {sim.state.turn})", (x0, y0))
    for offset, event in enumerate(sim.last_events[:EVENT_LOG_LIMIT], start=1):
        _draw_text(screen, font, format_event_line(event), (x0, y0 + offset * 20))
    hidden = len(sim.last_events) - EVENT_LOG_LIMIT
    if hidden > 0:
        _draw_text(screen, font, f"... {hidden} more", (x0, y0 + (EVENT_LOG_LIMIT + 1) * 20))


def _draw_frame(screen: Any, font: Any, small_font: Any, controller: ReplayController) -> None:
    sim = controller.sim
    screen.fill(BACKGROUND_COLOR)
    state_label = "finished" if sim.finished else ("running" if controller.running else "paused")
    _draw_text(
        screen,
        font,
        f"turn={sim.state.turn} | {state_label} | every {controller.interval_ms} ms | "
        "SPACE run/pause  N step  R reset  UP/DOWN speed  ESC quit",
        (PANEL_MARGIN, PANEL_MARGIN),
    )
    left_x = PANEL_MARGIN
    y = PANEL_MARGIN + 40
    y = _draw_stats(screen, font, sim, (left_x, y))
    y = _draw_population(screen, font, "Hobbits", [e for e in sim.state.entities if e.is_cooperator], (left_x, y))
    _draw_population(screen, font, "Orcs", [e for e in sim.state.entities if e.is_adversary], (left_x, y))
    _draw_event_log(screen, small_font, sim, (WINDOW_SIZE[0] // 2, PANEL_MARGIN + 40))


def run_pygame_viewer(
    preset_id: str = DEFAULT_PRESET_ID,
    *,
    presets_path: str = DEFAULT_PRESETS_PATH,
    seed: int = DEFAULT_SEED,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    headless: bool = False,
) -> int:
    if headless:
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        print("[dilemma.viewer] warning: headless mode active; no window will open.")

    _print_startup_banner()
    try:
        sim = _build_viewer_simulation(preset_id, presets_path, seed)
    except (ValueError, OSError) as exc:
        print(f"[dilemma.viewer] failed to initialize simulation: {exc}", file=sys.stderr)
        return 1
    controller = ReplayController(sim=sim, interval_ms=clamp_interval(interval_ms))

    pygame_module = _ensure_pygame_imported()
    try:
        pygame_module.init()
        pygame_module.display.set_caption("The Cooperation Dilemma")
        screen = pygame_module.display.set_mode(WINDOW_SIZE)
    except Exception as exc:
        print(
            "[dilemma.viewer] failed to open display: "
            f"{exc}. Hint: use --headless or DILEMMA_HEADLESS=1 without a working SDL video driver.",
            file=sys.stderr,
        )
        pygame_module.quit()
        return 1
    print(f"[dilemma.viewer] display initialized: {pygame_module.display.get_driver()}, window size={WINDOW_SIZE}")

    if headless:
        controller.step()
        print(f"[dilemma.viewer] headless turn={sim.state.turn} welfare={sim.stats.welfare}")
        pygame_module.quit()
        return 0

    clock = pygame_module.time.Clock()
    font = pygame_module.font.SysFont("consolas", 18)
    small_font = pygame_module.font.SysFont("consolas", 14)
    running = True
    while running:
        dt_ms = clock.tick(60)
        for event in pygame_module.event.get():
            if event.type == pygame_module.QUIT:
                running = False
            elif event.type != pygame_module.KEYDOWN:
                continue
            elif event.key == pygame_module.K_ESCAPE:
                running = False
            elif event.key == pygame_module.K_SPACE:
                controller.toggle_running()
            elif event.key == pygame_module.K_n and not controller.running:
                controller.step()
            elif event.key == pygame_module.K_r:
                controller.reset()
            elif event.key == pygame_module.K_UP:
                controller.faster()
            elif event.key == pygame_module.K_DOWN:
                controller.slower()

        controller.update(dt_ms)
        _draw_frame(screen, font, small_font, controller)
        pygame_module.display.flip()

    pygame_module.quit()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    headless = args.headless or _env_flag_enabled("DILEMMA_HEADLESS")
    raise SystemExit(
        run_pygame_viewer(
            args.preset,
            presets_path=args.presets_path,
            seed=args.seed,
            interval_ms=args.interval_ms,
            headless=headless,
        )
    )


if __name__ == "__main__":
    main()
