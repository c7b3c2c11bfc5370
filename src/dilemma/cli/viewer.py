from __future__ import annotations

from dilemma.sim.core import SimulationState
from dilemma.sim.entities import Entity
from dilemma.sim.events import TurnEvent
from dilemma.sim.stats import TurnStats

SCARED_FEAR_THRESHOLD = 2
CAUTIOUS_THRESHOLD = 2

STATUS_GLYPHS = {
    "trusting": "h",
    "wary": "w",
    "cautious": "c",
    "aggressive": "O",
    "scared": "s",
    "injured": "i",
    "reformed": "r",
    "dead": "x",
}
ROW_WIDTH = 20


def cooperator_status(entity: Entity) -> str:
    if entity.caution > CAUTIOUS_THRESHOLD:
        return "cautious"
    if entity.caution > 0:
        return "wary"
    return "trusting"


def adversary_status(entity: Entity) -> str:
    if entity.injured:
        return "injured"
    if entity.reformed:
        return "reformed"
    if entity.fear > SCARED_FEAR_THRESHOLD:
        return "scared"
    return "aggressive"


def entity_status(entity: Entity) -> str:
    if not entity.alive:
        return "dead"
    return cooperator_status(entity) if entity.is_cooperator else adversary_status(entity)


def format_stats_line(stats: TurnStats) -> str:
    return (
        f"turn={stats.turn} welfare={stats.welfare} survival={stats.survival_rate}% "
        f"violence={stats.violence_rate}% alive_hobbits={stats.alive_hobbits} alive_orcs={stats.alive_orcs} "
        f"cooperations={stats.cooperations} defections={stats.defections} "
        f"reformed_orcs={stats.reformed_orcs} injured_orcs={stats.injured_orcs}"
    )


def format_event_line(event: TurnEvent) -> str:
    return f"[{event.turn:>4}] {event.event_type:<13} {event.message}"


class AsciiViewer:
    """Read-only projection of a simulation snapshot for terminal display."""

    def render(self, state: SimulationState) -> str:
        knowledge = state.knowledge
        lines = [
            f"turn={state.turn} alive={state.alive_count}/{len(state.entities)} "
            f"betrayals={knowledge.hobbits_betrayed_total} orc_deaths={knowledge.orc_deaths_total} "
            f"orc_injuries={knowledge.orc_injuries_total} blacklist={len(knowledge.known_defectors)}"
        ]
        for label, members in (
            ("hobbits", [entity for entity in state.entities if entity.is_cooperator]),
            ("orcs", [entity for entity in state.entities if entity.is_adversary]),
        ):
            glyphs = "".join(STATUS_GLYPHS[entity_status(entity)] for entity in members)
            rows = [glyphs[start : start + ROW_WIDTH] for start in range(0, len(glyphs), ROW_WIDTH)] or [""]
            lines.append(f"{label:<8}| {rows[0]}")
            lines.extend(f"{'':<8}| {row}" for row in rows[1:])

        legend = " ".join(f"{glyph}={status}" for status, glyph in STATUS_GLYPHS.items())
        lines.append(f"legend  | {legend}")
        return "\n".join(lines)
