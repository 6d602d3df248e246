# rackfeed_core/data/plan.py
from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rackfeed_core.data.loader import dump_model, load_yaml_typed
from rackfeed_core.models.device import Device
from rackfeed_core.models.plan import PlanDocument
from rackfeed_core.models.power import PlannerConfig

DEFAULT_CONFIG_PATH = Path("doctrine/power/planner.yaml")


def load_planner_config(path: str | Path = DEFAULT_CONFIG_PATH) -> PlannerConfig:
    """Strongly-typed planner config loader; missing keys fall back to model defaults."""
    return load_yaml_typed(Path(path), model=PlannerConfig)


def load_planner_config_or_default(path: str | Path | None) -> PlannerConfig:
    if path is None or not Path(path).exists():
        return PlannerConfig()
    return load_planner_config(path)


def update_config(config: PlannerConfig, **changes: Any) -> PlannerConfig:
    """Return a new config with ``changes`` applied.

    Raises ValueError when any resulting field is out of range; ``config`` itself
    is never modified, so callers keep the previous state on failure.
    """
    unknown = set(changes) - set(PlannerConfig.model_fields)
    if unknown:
        raise ValueError(f"Unknown planner settings: {', '.join(sorted(unknown))}")
    try:
        return PlannerConfig.model_validate({**config.model_dump(), **changes})
    except ValidationError as e:
        raise ValueError(f"Invalid planner configuration: {e}") from e


def load_plan_document(path: str | Path) -> PlanDocument:
    """Load a saved plan (YAML or JSON). Accepts both snake_case and the legacy camelCase keys."""
    return load_yaml_typed(Path(path), model=PlanDocument)


def save_plan_document(doc: PlanDocument, path: str | Path) -> Path:
    return dump_model(doc, path)


def save_plan(
    config: PlannerConfig, devices: list[Device], path: str | Path, source_text: str | None = None
) -> Path:
    return save_plan_document(PlanDocument.from_plan(config, devices, source_text), path)
