from __future__ import annotations

import math
from typing import Sequence

from rackfeed_core.models.device import Device
from rackfeed_core.models.plan import CircuitLoad, PduLoad
from rackfeed_core.models.power import PduConfig, PlannerConfig

from rackfeed_tools.power.units import effective_circuit_amps, watts_to_amps


def calculate_pdu_loads(devices: Sequence[Device], pdus: Sequence[PduConfig]) -> dict[str, PduLoad]:
    """Per-PDU ``{typical, max}`` load.

    Each distinct PDU a device touches carries the device's full max power
    (either feed must survive the other failing) and an even share of its
    typical power. Connections to PDU ids not in ``pdus`` are ignored.
    """
    loads = {p.id: PduLoad() for p in pdus}
    for d in devices:
        touched = d.pdu_ids
        if not touched:
            continue
        share = d.typical_power / len(touched)
        for pid in touched:
            if pid in loads:
                loads[pid].max += d.power_rating
                loads[pid].typical += share
    return loads


def calculate_pair_loads(
    pdus: Sequence[PduConfig], loads: dict[str, PduLoad]
) -> dict[int, dict[str, float]]:
    """Max load per pair index, split by side: ``{0: {"A": w, "B": w}}``."""
    pairs: dict[int, dict[str, float]] = {}
    for p in pdus:
        pairs.setdefault(p.index, {"A": 0.0, "B": 0.0})[p.side] = loads.get(p.id, PduLoad()).max
    return pairs


def calculate_circuit_loads(
    devices: Sequence[Device], pdus: Sequence[PduConfig], config: PlannerConfig
) -> list[CircuitLoad]:
    """Watts and amps per (PDU, circuit); each connected PSU counts the device max power."""
    watts: dict[tuple[str, int], float] = {}
    by_id = {p.id: p for p in pdus}
    for p in pdus:
        for c in range(config.circuit_count):
            watts[(p.id, c)] = 0.0

    for d in devices:
        for conn in d.psu_connections:
            if conn is None or conn.pdu_id not in by_id:
                continue
            per_circuit = max(1, math.ceil(by_id[conn.pdu_id].total_sockets / config.circuit_count))
            key = (conn.pdu_id, conn.socket_index // per_circuit)
            watts[key] = watts.get(key, 0.0) + d.power_rating

    limit = effective_circuit_amps(config.circuit_rated_amps, config.safety_margin)
    return [
        CircuitLoad(
            pdu_id=pdu_id,
            circuit_index=c,
            watts=w,
            amps=watts_to_amps(w, config.power_factor, config.voltage),
            limit_amps=limit,
        )
        for (pdu_id, c), w in watts.items()
    ]
