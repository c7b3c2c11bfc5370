from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dilemma.sim.config import SimulationConfig

PRESET_SCHEMA_VERSION = 1
DEFAULT_PRESETS_PATH = "content/presets/scenarios.json"
DEFAULT_PRESET_ID = "default"


@dataclass(frozen=True)
class PresetDef:
    preset_id: str
    description: str
    config: SimulationConfig


@dataclass(frozen=True)
class PresetRegistry:
    schema_version: int
    presets: tuple[PresetDef, ...]

    def by_id(self) -> dict[str, PresetDef]:
        return {preset.preset_id: preset for preset in self.presets}

    def config_for(self, preset_id: str) -> SimulationConfig:
        presets = self.by_id()
        if preset_id not in presets:
            known = ", ".join(sorted(presets))
            raise ValueError(f"unknown preset_id: {preset_id} (known: {known})")
        return presets[preset_id].config


def load_presets_json(path: str | Path) -> PresetRegistry:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return _registry_from_payload(payload)


def _registry_from_payload(payload: dict[str, Any]) -> PresetRegistry:
    if not isinstance(payload, dict):
        raise ValueError("preset payload must be an object")

    schema_version = payload.get("schema_version")
    if not isinstance(schema_version, int):
        raise ValueError("preset payload must contain integer field: schema_version")
    if schema_version != PRESET_SCHEMA_VERSION:
        raise ValueError(f"unsupported preset schema_version: {schema_version}")

    rows = payload.get("presets")
    if not isinstance(rows, list) or not rows:
        raise ValueError("preset payload must contain non-empty list field: presets")

    seen_ids: set[str] = set()
    presets: list[PresetDef] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"presets[{index}] must be an object")

        preset_id = row.get("preset_id")
        if not isinstance(preset_id, str) or not preset_id:
            raise ValueError(f"presets[{index}].preset_id must be a non-empty string")
        if preset_id in seen_ids:
            raise ValueError(f"duplicate preset_id: {preset_id}")
        seen_ids.add(preset_id)

        description = row.get("description", "")
        if not isinstance(description, str):
            raise ValueError(f"presets[{index}].description must be a string")

        config_payload = row.get("config")
        if not isinstance(config_payload, dict):
            raise ValueError(f"presets[{index}].config must be an object")

        presets.append(
            PresetDef(
                preset_id=preset_id,
                description=description,
                config=SimulationConfig.from_dict(config_payload),
            )
        )

    presets.sort(key=lambda current: current.preset_id)
    return PresetRegistry(schema_version=schema_version, presets=tuple(presets))
