from __future__ import annotations

import logging
import math
from typing import Sequence

from rackfeed_core.models.device import Device, RackGroup
from rackfeed_core.models.plan import GroupingResult, PduGroup

from rackfeed_tools.power.units import effective_capacity

logger = logging.getLogger("rackfeed.grouping")


def _group_id(n: int) -> str:
    return f"PDU-Pair-{n}"


def pack_devices(devices: Sequence[Device], capacity: float, room_id: str = "") -> GroupingResult:
    """Spread devices over capacity-bounded PDU pairs, least-loaded first.

    Largest devices are placed first. The lower-bound number of pairs is
    pre-created so load spreads instead of filling pairs one at a time. A
    device that fits nowhere opens a new pair of its own, so every device is
    always placed and ``unassigned_devices`` stays empty.
    """
    ordered = sorted(devices, key=lambda d: d.power_rating, reverse=True)
    total_power = sum(d.power_rating for d in ordered)
    min_groups = max(1, math.ceil(total_power / capacity))

    groups = [PduGroup(id=_group_id(i + 1), capacity=capacity) for i in range(min_groups)]

    for device in ordered:
        fits = [g for g in groups if g.current_load + device.power_rating <= capacity]
        if fits:
            target = min(fits, key=lambda g: g.current_load)
            target.devices.append(device)
            target.current_load += device.power_rating
        else:
            logger.debug("%s (%.1fW) opens %s", device.id, device.power_rating, _group_id(len(groups) + 1))
            groups.append(
                PduGroup(
                    id=_group_id(len(groups) + 1),
                    capacity=capacity,
                    current_load=device.power_rating,
                    devices=[device],
                )
            )

    return GroupingResult(room_id=room_id, pdu_pairs=[g for g in groups if g.devices], unassigned_devices=[])


def optimize_power_distribution(
    racks: Sequence[RackGroup],
    pdu_capacity_va: float,
    safety_margin: float,
    power_factor: float,
) -> list[GroupingResult]:
    """Room-level PDU pair summary. ``pdu_capacity_va`` is the nameplate rating (V x A)."""
    capacity = effective_capacity(pdu_capacity_va, power_factor, safety_margin)
    return [pack_devices(rack.devices, capacity, room_id=rack.room_id) for rack in racks]
