from __future__ import annotations

import json
import logging
from pathlib import Path

from mental_math_trainer.drill_core import DigitSize, DrillConfig, OperationMode
from mental_math_trainer.settings import SETTINGS_STORE_ENV, SettingsStore, config_from_dict, config_to_dict


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    assert store.config == DrillConfig.default()
    assert not store.path.exists()


def test_every_change_is_saved_and_reloaded(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore(path)
    store.update(operation_mode=OperationMode.ADDITION, problem_count=7, level=3)
    store.set_config(store.config.with_size_toggled(DigitSize.THREE))

    reloaded = SettingsStore(path)
    assert reloaded.config == DrillConfig(
        digit_sizes=frozenset(DigitSize),
        operation_mode=OperationMode.ADDITION,
        problem_count=7,
        operands_per_problem=10,
        level=3,
    )
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["settings"]["digit_types"] == {"1digit": True, "2digit": True, "3digit": True}


def test_updates_are_clamped(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    config = store.update(problem_count=0, operands_per_problem=40, level=0)
    assert (config.problem_count, config.operands_per_problem, config.level) == (1, 20, 1)


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path, caplog) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="mental_math_trainer.settings"):
        store = SettingsStore(path)

    assert store.config == DrillConfig.default()
    assert "could not load settings" in caplog.text


def test_wrong_shape_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert SettingsStore(path).config == DrillConfig.default()


def test_bad_fields_keep_their_defaults() -> None:
    config = config_from_dict(
        {
            "digit_types": {"1digit": False, "2digit": False, "3digit": True},
            "operations": "multiply",
            "num_questions": "lots",
            "numbers_per_question": 99,
            "level": True,
        }
    )
    assert config.digit_sizes == frozenset({DigitSize.THREE})
    assert config.operation_mode is OperationMode.MIXED
    assert config.problem_count == 10
    assert config.operands_per_problem == 20
    assert config.level == 1


def test_dict_round_trip() -> None:
    config = DrillConfig(
        digit_sizes=frozenset({DigitSize.TWO}),
        operation_mode=OperationMode.ADDITION,
        problem_count=50,
        operands_per_problem=2,
        level=5,
    )
    assert config_from_dict(config_to_dict(config)) == config


def test_save_failure_is_not_fatal(tmp_path: Path, caplog) -> None:
    blocked = tmp_path / "settings.json"
    blocked.mkdir()

    with caplog.at_level(logging.WARNING, logger="mental_math_trainer.settings"):
        store = SettingsStore(blocked)
        config = store.update(problem_count=3)

    assert config.problem_count == 3
    assert store.config.problem_count == 3
    assert "could not save settings" in caplog.text


def test_default_path_honours_environment(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "custom.json"
    monkeypatch.setenv(SETTINGS_STORE_ENV, str(target))
    assert SettingsStore.default_path() == target

    monkeypatch.delenv(SETTINGS_STORE_ENV)
    assert SettingsStore.default_path().name == ".mental_math_trainer_settings.json"
