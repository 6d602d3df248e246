from pathlib import Path
from typing import Any, TypeVar, overload

import yaml
from pydantic import BaseModel, TypeAdapter, ValidationError

T = TypeVar("T")
U = TypeVar("U")

# -------------------------------
# Internal raw reader (single source of truth)
# -------------------------------


def _read_yaml_raw(path: Path | str) -> Any:
    """Read a YAML document. JSON save files go through here too, JSON being a YAML subset."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")

    try:
        text = p.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Unable to decode UTF-8 in {p}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {p}: {e}") from e

    if data is None:
        raise ValueError(f"Empty YAML file: {p}")

    return data


# -------------------------------
# Public typed loader
# -------------------------------


@overload
def load_yaml_typed(path: Path | str, *, adapter: TypeAdapter[T]) -> T: ...


@overload
def load_yaml_typed(path: Path | str, *, model: type[T]) -> T: ...


def load_yaml_typed(
    path: Path | str,
    *,
    adapter: TypeAdapter[T] | None = None,
    model: type[T] | None = None,
) -> T:
    """Read YAML and validate/parse it into a typed object using Pydantic v2.

    Exactly one of {adapter, model} must be supplied.

    Example (single model):
        load_yaml_typed("doctrine/power/planner.yaml", model=PlannerConfig)

    Example (list of items):
        load_yaml_typed("outputs/devices.yaml", adapter=TypeAdapter(list[Device]))
    """
    if (adapter is None) == (model is None):
        raise ValueError("Provide exactly one of 'adapter' or 'model'.")

    data = _read_yaml_raw(path)

    try:
        if adapter is not None:
            return adapter.validate_python(data)
        return TypeAdapter(model).validate_python(data)  # type: ignore[arg-type]
    except ValidationError as e:
        # Normalize error so callers see the file path in the message
        raise ValueError(f"Invalid structure in {path}: {e}") from e


def load_yaml_list(path: Path | str, item_model: type[U]) -> list[U]:
    """Load a YAML list of objects into List[item_model]."""
    return load_yaml_typed(path, adapter=TypeAdapter(list[item_model]))  # type: ignore[index]


# -------------------------------
# Writers
# -------------------------------


def dump_model(obj: BaseModel, path: Path | str) -> Path:
    """Write a model as YAML, or as JSON when the suffix is ``.json``."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix.lower() == ".json":
        p.write_text(obj.model_dump_json(indent=2), encoding="utf-8")
    else:
        p.write_text(yaml.safe_dump(obj.model_dump(mode="json"), sort_keys=False), encoding="utf-8")
    return p
