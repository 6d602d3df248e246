from .devices import export_devices_csv, load_device_csv, parse_device_csv
from .plan import (
    load_plan_document,
    load_planner_config,
    load_planner_config_or_default,
    save_plan,
    save_plan_document,
    update_config,
)

__all__ = [
    "export_devices_csv",
    "load_device_csv",
    "load_plan_document",
    "load_planner_config",
    "load_planner_config_or_default",
    "parse_device_csv",
    "save_plan",
    "save_plan_document",
    "update_config",
]
