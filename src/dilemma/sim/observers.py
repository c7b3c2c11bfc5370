from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dilemma.sim.core import Simulation, TurnResult


class SimulationObserver:
    """Read-only hook substrate for collaborators that follow a ``Simulation``.

    Observers are registered on a ``Simulation`` instance and are notified in
    stable registration order. They see committed snapshots only.
    """

    name: str

    def on_simulation_start(self, sim: Simulation) -> None:
        """Called once when the observer is registered, and again after every reset."""

    def on_turn_committed(self, sim: Simulation, result: TurnResult) -> None:
        """Called after a turn's snapshot has been published."""

    def on_terminal(self, sim: Simulation) -> None:
        """Called when an advance was refused because fewer than two entities are alive."""
