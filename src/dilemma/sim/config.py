from __future__ import annotations

from dataclasses import dataclass
from typing import Any

DEFAULT_HOBBIT_COUNT = 30
DEFAULT_ORC_COUNT = 30
DEFAULT_STREET_SMARTS = 0.1
DEFAULT_VIOLENCE = 0.3

# Accepted spellings per field; camelCase matches the control panel payloads.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "hobbit_count": ("hobbit_count", "hobbitCount"),
    "orc_count": ("orc_count", "orcCount"),
    "street_smarts": ("street_smarts", "streetSmarts"),
    "violence": ("violence",),
    "hobbit_school": ("hobbit_school", "hobbitSchool"),
    "orc_school": ("orc_school", "orcSchool"),
}


class ConfigurationError(ValueError):
    """Raised when a simulation configuration is out of range or malformed."""


def _require_positive_int(value: Any, *, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{field_name} must be a positive integer; got {value!r}")


def _require_fraction(value: Any, *, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field_name} must be a number in [0, 1]; got {value!r}")
    if not 0.0 <= float(value) <= 1.0:
        raise ConfigurationError(f"{field_name} must be within [0, 1]; got {value!r}")


def _require_bool(value: Any, *, field_name: str) -> None:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean; got {value!r}")


@dataclass(frozen=True)
class SimulationConfig:
    hobbit_count: int = DEFAULT_HOBBIT_COUNT
    orc_count: int = DEFAULT_ORC_COUNT
    street_smarts: float = DEFAULT_STREET_SMARTS
    violence: float = DEFAULT_VIOLENCE
    hobbit_school: bool = True
    orc_school: bool = True

    def __post_init__(self) -> None:
        _require_positive_int(self.hobbit_count, field_name="hobbit_count")
        _require_positive_int(self.orc_count, field_name="orc_count")
        _require_fraction(self.street_smarts, field_name="street_smarts")
        _require_fraction(self.violence, field_name="violence")
        _require_bool(self.hobbit_school, field_name="hobbit_school")
        _require_bool(self.orc_school, field_name="orc_school")

    @property
    def total_population(self) -> int:
        return self.hobbit_count + self.orc_count

    def replace(self, **changes: Any) -> "SimulationConfig":
        payload = self.to_dict()
        payload.update(changes)
        return SimulationConfig(**payload)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hobbit_count": self.hobbit_count,
            "orc_count": self.orc_count,
            "street_smarts": self.street_smarts,
            "violence": self.violence,
            "hobbit_school": self.hobbit_school,
            "orc_school": self.orc_school,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "SimulationConfig":
        if not isinstance(payload, dict):
            raise ConfigurationError("simulation config must be an object")
        known = {alias for aliases in _FIELD_ALIASES.values() for alias in aliases}
        unknown = sorted(key for key in payload if key not in known)
        if unknown:
            raise ConfigurationError(f"unknown simulation config fields: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for field_name, aliases in _FIELD_ALIASES.items():
            present = [alias for alias in aliases if alias in payload]
            if len(present) > 1:
                raise ConfigurationError(f"simulation config field given twice: {' / '.join(present)}")
            if present:
                kwargs[field_name] = payload[present[0]]
        return cls(**kwargs)
