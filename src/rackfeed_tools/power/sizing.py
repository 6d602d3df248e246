from __future__ import annotations

import logging
import math
from typing import Sequence

from rackfeed_core.codebase.debug import spy_trace
from rackfeed_core.models.device import Device
from rackfeed_core.models.power import PduConfig, PlannerConfig, Side

from rackfeed_tools.power.units import effective_capacity

logger = logging.getLogger("rackfeed.sizing")

SIDES: tuple[Side, Side] = ("A", "B")


def calculate_pdu_pairs(
    total_power: float,
    total_psus: int,
    capacity_va: float,
    power_factor: float,
    safety_margin: float,
    primary_sockets: int,
    secondary_sockets: int = 0,
) -> int:
    """Minimum number of redundant PDU pairs for a load.

    Takes the larger of the power-driven and the socket-driven requirement.
    Each pair carries half of the PSUs on each side, hence ``psus / 2``.
    This is a lower bound under ideal packing; the socket wiring may still
    leave PSUs unconnected when connector zones fragment capacity.
    """
    eff = effective_capacity(capacity_va, power_factor, safety_margin)
    pairs_by_power = math.ceil(total_power / eff)
    pairs_by_sockets = math.ceil((total_psus / 2) / (primary_sockets + secondary_sockets))
    return max(1, pairs_by_power, pairs_by_sockets)


def required_pdu_pairs(devices: Sequence[Device], config: PlannerConfig) -> int:
    total_power = sum(d.power_rating for d in devices)
    total_psus = sum(d.psu_count for d in devices)
    pairs = calculate_pdu_pairs(
        total_power,
        total_psus,
        config.base_pdu_capacity,
        config.power_factor,
        config.safety_margin,
        config.base_sockets_per_pdu,
        config.secondary_sockets_per_pdu,
    )
    logger.debug("%d devices, %.1fW max, %d PSUs -> %d pair(s)", len(devices), total_power, total_psus, pairs)
    return pairs


def resolve_pair_count(devices: Sequence[Device], config: PlannerConfig) -> int:
    """Active pair count: the manual override when set, otherwise the calculated minimum."""
    if config.manual_pdu_pairs is not None:
        return max(1, config.manual_pdu_pairs)
    return required_pdu_pairs(devices, config)


def pdu_id(side: Side, pair_index: int) -> str:
    return f"{side}{pair_index + 1}"


@spy_trace
def build_pdus(config: PlannerConfig, pair_count: int) -> list[PduConfig]:
    """Materialize ``pair_count`` A/B pairs in A1, B1, A2, B2 ... order."""
    pdus: list[PduConfig] = []
    for i in range(max(1, pair_count)):
        for side in SIDES:
            pdus.append(
                PduConfig(
                    id=pdu_id(side, i),
                    side=side,
                    index=i,
                    socket_type=config.socket_type,
                    socket_count=config.base_sockets_per_pdu,
                    secondary_socket_type=config.secondary_socket_type,
                    secondary_socket_count=config.secondary_sockets_per_pdu,
                    power_capacity=config.base_pdu_capacity,
                )
            )
    return pdus
