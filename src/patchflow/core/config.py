"""Repository configuration stored in pyproject.toml under [tool.patchflow].

Example:
  [tool.patchflow]
  base_branch = "main"
  remote = "origin"
  version_file = "VERSION"
  poll_interval_seconds = 30
  max_wait_minutes = 30
  issue_labels = ["patch"]
  test_commands = ["uv run pytest -x"]
  consolidation_strategy = "compatible"
"""

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import tomlkit

from patchflow.core.workflow_types import ConsolidationStrategy

PYPROJECT = "pyproject.toml"
TOOL_KEY = "patchflow"


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of [tool.patchflow]."""

    base_branch: str = "main"
    remote: str = "origin"
    version_file: str = "VERSION"
    poll_interval_seconds: int = 30
    max_wait_minutes: int = 30
    issue_labels: list[str] = field(default_factory=lambda: ["patch"])
    test_commands: list[str] = field(default_factory=list)
    consolidation_strategy: ConsolidationStrategy = ConsolidationStrategy.COMPATIBLE


CONFIG_KEYS = tuple(f.name for f in fields(LoadedConfig))


class ConfigValueError(ValueError):
    pass


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw TOML or command-line value to the type LoadedConfig expects."""
    if key in ("poll_interval_seconds", "max_wait_minutes"):
        try:
            number = int(value)
        except (TypeError, ValueError) as e:
            msg = f"{key} must be an integer, got {value!r}"
            raise ConfigValueError(msg) from e
        if number <= 0:
            msg = f"{key} must be positive, got {number}"
            raise ConfigValueError(msg)
        return number
    if key in ("issue_labels", "test_commands"):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return [str(item) for item in value]
    if key == "consolidation_strategy":
        try:
            return ConsolidationStrategy(str(value))
        except ValueError as e:
            choices = ", ".join(s.value for s in ConsolidationStrategy)
            msg = f"consolidation_strategy must be one of: {choices}"
            raise ConfigValueError(msg) from e
    return str(value)


def load_config(repo_root: Path) -> LoadedConfig:
    """Load [tool.patchflow] from repo_root/pyproject.toml, or defaults if absent."""
    path = repo_root / PYPROJECT
    if not path.exists():
        return LoadedConfig()

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    table = data.get("tool", {}).get(TOOL_KEY, {})
    values = {key: _coerce(key, raw) for key, raw in table.items() if key in CONFIG_KEYS}
    return LoadedConfig(**values)


def config_value_for_display(config: LoadedConfig, key: str) -> str:
    value = getattr(config, key)
    if isinstance(value, ConsolidationStrategy):
        return value.value
    if isinstance(value, list):
        return ", ".join(value)
    return str(value)


def write_config_value(repo_root: Path, key: str, value: str) -> None:
    """Set one [tool.patchflow] key, preserving formatting and comments with tomlkit.

    Raises:
        ConfigValueError: If the key is unknown or the value does not fit its type
    """
    if key not in CONFIG_KEYS:
        msg = f"Unknown configuration key: {key}"
        raise ConfigValueError(msg)

    coerced = _coerce(key, value)
    if isinstance(coerced, ConsolidationStrategy):
        coerced = coerced.value

    path = repo_root / PYPROJECT
    if path.exists():
        with path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)
    else:
        doc = tomlkit.document()

    if "tool" not in doc:
        doc["tool"] = tomlkit.table()  # type: ignore[index]

    if TOOL_KEY not in doc["tool"]:  # type: ignore[operator]
        doc["tool"][TOOL_KEY] = tomlkit.table()  # type: ignore[index]

    doc["tool"][TOOL_KEY][key] = coerced  # type: ignore[index]

    with path.open("w", encoding="utf-8") as f:
        tomlkit.dump(doc, f)
