from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

HEALED_EVENT_TYPE = "healed"
REFUSED_EVENT_TYPE = "refused"
COOPERATE_EVENT_TYPE = "cooperate"
MUTUAL_DEFECT_EVENT_TYPE = "mutual_defect"
BETRAYAL_EVENT_TYPE = "betrayal"
INJURY_EVENT_TYPE = "injury"
VIOLENCE_EVENT_TYPE = "violence"
STARVED_EVENT_TYPE = "starved"
LEARNING_EVENT_TYPE = "learning"

EVENT_TYPES = frozenset(
    {
        HEALED_EVENT_TYPE,
        REFUSED_EVENT_TYPE,
        COOPERATE_EVENT_TYPE,
        MUTUAL_DEFECT_EVENT_TYPE,
        BETRAYAL_EVENT_TYPE,
        INJURY_EVENT_TYPE,
        VIOLENCE_EVENT_TYPE,
        STARVED_EVENT_TYPE,
        LEARNING_EVENT_TYPE,
    }
)


def _is_json_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


@dataclass(frozen=True)
class TurnEvent:
    turn: int
    event_type: str
    message: str
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.turn, int) or self.turn < 1:
            raise ValueError("event turn must be a positive integer")
        if self.event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event_type: {self.event_type!r}")
        if not isinstance(self.message, str) or not self.message:
            raise ValueError("event message must be a non-empty string")
        if not isinstance(self.params, dict):
            raise ValueError("event params must be a dict")
        for key, value in self.params.items():
            if not isinstance(key, str) or not _is_json_primitive(value):
                raise ValueError("event params must map strings to JSON primitives")

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "event_type": self.event_type,
            "message": self.message,
            "params": copy.deepcopy(self.params),
        }


@dataclass
class TurnRecorder:
    """Collects the events and casualty tallies of the turn being built."""

    turn: int
    events: list[TurnEvent] = field(default_factory=list)
    deaths: int = 0
    injuries: int = 0

    def emit(self, event_type: str, message: str, **params: Any) -> TurnEvent:
        event = TurnEvent(turn=self.turn, event_type=event_type, message=message, params=params)
        self.events.append(event)
        return event

    @property
    def had_casualties(self) -> bool:
        return self.deaths > 0 or self.injuries > 0
