from __future__ import annotations

import hashlib
import json
from typing import Any

from dilemma.sim.core import Simulation, SimulationState


def _digest(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def state_hash(state: SimulationState) -> str:
    return _digest(state.to_dict())


def simulation_hash(simulation: Simulation) -> str:
    payload = {
        "seed": simulation.seed,
        "config": simulation.config.to_dict(),
        "rng_state": simulation.rng.getstate(),
        "state": simulation.state.to_dict(),
        "history": [stats.to_dict() for stats in simulation.history],
        "last_events": [event.to_dict() for event in simulation.last_events],
        "finished": simulation.finished,
    }
    return _digest(payload)
