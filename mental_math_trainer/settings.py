from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

from .drill_core import DigitSize, DrillConfig, OperationMode

logger = logging.getLogger(__name__)

SETTINGS_STORE_ENV = "MENTAL_MATH_SETTINGS_PATH"


def config_to_dict(config: DrillConfig) -> dict[str, Any]:
    return {
        "digit_types": {size.value: size in config.digit_sizes for size in DigitSize},
        "operations": config.operation_mode.value,
        "num_questions": int(config.problem_count),
        "numbers_per_question": int(config.operands_per_problem),
        "level": int(config.level),
    }


def config_from_dict(data: object) -> DrillConfig:
    """Build a configuration from stored data, keeping defaults for bad fields."""

    default = DrillConfig.default()
    if not isinstance(data, dict):
        return default

    digit_sizes = default.digit_sizes
    raw_types = data.get("digit_types")
    if isinstance(raw_types, dict):
        digit_sizes = frozenset(size for size in DigitSize if bool(raw_types.get(size.value, False)))

    try:
        operation_mode = OperationMode(str(data.get("operations", default.operation_mode.value)))
    except ValueError:
        operation_mode = default.operation_mode

    config = DrillConfig(
        digit_sizes=digit_sizes,
        operation_mode=operation_mode,
        problem_count=_as_int(data.get("num_questions"), default.problem_count),
        operands_per_problem=_as_int(data.get("numbers_per_question"), default.operands_per_problem),
        level=_as_int(data.get("level"), default.level),
    )
    return config.clamped()


class SettingsStore:
    """Drill configuration round-tripped to a JSON file on every change.

    Load and save failures are logged and otherwise ignored: the store keeps
    serving the last in-memory configuration.
    """

    _version = 1

    def __init__(self, path: Path) -> None:
        self._path = path
        self._config = DrillConfig.default()
        self._load()

    @classmethod
    def default_path(cls) -> Path:
        explicit = os.environ.get(SETTINGS_STORE_ENV)
        if explicit:
            return Path(explicit).expanduser()
        return Path.home() / ".mental_math_trainer_settings.json"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def config(self) -> DrillConfig:
        return self._config

    def set_config(self, config: DrillConfig) -> DrillConfig:
        self._config = config.clamped()
        self.save()
        return self._config

    def update(self, **changes: Any) -> DrillConfig:
        return self.set_config(replace(self._config, **changes))

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("could not load settings from %s; using defaults", self._path, exc_info=True)
            return
        if not isinstance(payload, dict):
            logger.warning("ignoring malformed settings file %s", self._path)
            return
        self._config = config_from_dict(payload.get("settings"))

    def save(self) -> None:
        payload = {
            "version": self._version,
            "settings": config_to_dict(self._config),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError:
            logger.warning("could not save settings to %s", self._path, exc_info=True)


def _as_int(value: object, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return fallback
