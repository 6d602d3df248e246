from .device import Connection, Device, RackGroup
from .plan import CircuitLoad, GroupingResult, PduGroup, PduLoad, PlanDocument, PowerPlan
from .power import PDU_VARIANTS, PduConfig, PlannerConfig, Side, SocketType
from .power_report import Finding, Report

__all__ = [
    "CircuitLoad",
    "Connection",
    "Device",
    "Finding",
    "GroupingResult",
    "PDU_VARIANTS",
    "PduConfig",
    "PduGroup",
    "PduLoad",
    "PlanDocument",
    "PlannerConfig",
    "PowerPlan",
    "RackGroup",
    "Report",
    "Side",
    "SocketType",
]
