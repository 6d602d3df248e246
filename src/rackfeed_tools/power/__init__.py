"""Power tools package."""

from .compaction import compact_wiring
from .grouping import optimize_power_distribution, pack_devices
from .loads import calculate_circuit_loads, calculate_pair_loads, calculate_pdu_loads
from .placement import apply_group_edit, auto_stack, move_device, patch_connection, rack_conflicts
from .sizing import build_pdus, calculate_pdu_pairs, required_pdu_pairs, resolve_pair_count
from .units import effective_capacity, effective_circuit_amps, watts_to_amps, watts_to_va
from .wiring import auto_connect, wire_devices

__all__ = [
    "apply_group_edit",
    "auto_connect",
    "auto_stack",
    "build_pdus",
    "calculate_circuit_loads",
    "calculate_pair_loads",
    "calculate_pdu_loads",
    "calculate_pdu_pairs",
    "compact_wiring",
    "effective_capacity",
    "effective_circuit_amps",
    "move_device",
    "optimize_power_distribution",
    "pack_devices",
    "patch_connection",
    "rack_conflicts",
    "required_pdu_pairs",
    "resolve_pair_count",
    "watts_to_amps",
    "watts_to_va",
    "wire_devices",
]
