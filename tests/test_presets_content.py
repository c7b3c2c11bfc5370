import json
from pathlib import Path

import pytest

from dilemma.content.presets import DEFAULT_PRESET_ID, DEFAULT_PRESETS_PATH, load_presets_json
from dilemma.sim.config import ConfigurationError, SimulationConfig


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "presets.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_default_presets_file_loads_and_contains_default() -> None:
    registry = load_presets_json(DEFAULT_PRESETS_PATH)

    assert registry.schema_version == 1
    assert registry.config_for(DEFAULT_PRESET_ID) == SimulationConfig()
    assert [preset.preset_id for preset in registry.presets] == sorted(registry.by_id())
    assert registry.config_for("no_schools").orc_school is False


def test_unknown_preset_lists_known_ids() -> None:
    registry = load_presets_json(DEFAULT_PRESETS_PATH)

    with pytest.raises(ValueError, match="unknown preset_id: nope"):
        registry.config_for("nope")


def test_unsupported_schema_version_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, {"schema_version": 2, "presets": []})

    with pytest.raises(ValueError, match="schema_version"):
        load_presets_json(path)


def test_duplicate_preset_ids_are_rejected(tmp_path: Path) -> None:
    row = {"preset_id": "a", "config": {"hobbitCount": 2, "orcCount": 2}}
    path = _write(tmp_path, {"schema_version": 1, "presets": [row, row]})

    with pytest.raises(ValueError, match="duplicate preset_id: a"):
        load_presets_json(path)


def test_out_of_range_preset_values_raise_configuration_error(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {"schema_version": 1, "presets": [{"preset_id": "bad", "config": {"streetSmarts": 1.5}}]},
    )

    with pytest.raises(ConfigurationError):
        load_presets_json(path)


def test_missing_config_object_is_rejected(tmp_path: Path) -> None:
    path = _write(tmp_path, {"schema_version": 1, "presets": [{"preset_id": "bare"}]})

    with pytest.raises(ValueError, match=r"presets\[0\].config must be an object"):
        load_presets_json(path)
