"""Rack placement and manual edits.

Every edit is validate-then-apply: the new device list is built first and
checked as a whole; on any conflict the original list object is returned
unchanged, so callers can detect a rejected edit with ``result is devices``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from rackfeed_core.models.device import Connection, Device
from rackfeed_core.models.power import PduConfig

logger = logging.getLogger("rackfeed.placement")


def auto_stack(devices: Sequence[Device], rack_size: int) -> list[Device]:
    """Stack devices top-down from U``rack_size`` in list order.

    Devices that no longer fit are unplaced and lose their connections.
    """
    current_u = rack_size
    placed: list[Device] = []
    for d in devices:
        if current_u - d.u_height + 1 >= 1:
            placed.append(d.model_copy(update={"u_position": current_u}))
            current_u -= d.u_height
        else:
            placed.append(d.model_copy(update={"u_position": None}).disconnected())
    return placed


def rack_conflicts(devices: Sequence[Device], rack_size: int) -> list[tuple[str, Optional[str]]]:
    """Out-of-rack devices as ``(id, None)`` and overlapping pairs as ``(id, other_id)``."""
    conflicts: list[tuple[str, Optional[str]]] = []
    placed = [d for d in devices if d.u_range is not None]
    for i, d1 in enumerate(placed):
        bottom, top = d1.u_range  # type: ignore[misc]
        if top > rack_size or bottom < 1:
            conflicts.append((d1.id, None))
        for d2 in placed[i + 1 :]:
            b2, t2 = d2.u_range  # type: ignore[misc]
            if max(bottom, b2) <= min(top, t2):
                conflicts.append((d1.id, d2.id))
    return conflicts


def move_device(devices: list[Device], device_id: str, target_u: int, rack_size: int) -> list[Device]:
    """Move a device so its top sits at ``target_u``.

    When another device already covers ``target_u`` the two swap positions.
    The edit is rejected if any device would leave the rack or overlap another.
    """
    source = next((d for d in devices if d.id == device_id), None)
    if source is None:
        logger.debug("move rejected: unknown device %s", device_id)
        return devices

    occupant = next(
        (
            d
            for d in devices
            if d.id != device_id and d.u_range is not None and d.u_range[0] <= target_u <= d.u_range[1]
        ),
        None,
    )

    if occupant is not None:
        swapped = {source.id: occupant.u_position, occupant.id: source.u_position}
        moved = [d.model_copy(update={"u_position": swapped[d.id]}) if d.id in swapped else d for d in devices]
    else:
        moved = [d.model_copy(update={"u_position": target_u}) if d.id == device_id else d for d in devices]

    conflicts = rack_conflicts(moved, rack_size)
    if conflicts:
        logger.debug("move of %s to U%d rejected: %s", device_id, target_u, conflicts)
        return devices
    return moved


def patch_connection(
    devices: list[Device],
    device_id: str,
    psu_index: int,
    pdu_id: Optional[str],
    socket_index: Optional[int],
    pdus: Optional[Sequence[PduConfig]] = None,
) -> list[Device]:
    """Plug (or, with ``pdu_id=None``, unplug) one PSU by hand.

    If the target socket is held by another PSU, that PSU takes over the
    mover's previous connection (or becomes unconnected). With ``pdus`` given,
    unknown PDUs, out-of-range sockets and connector mismatches are rejected.
    """
    source = next((d for d in devices if d.id == device_id), None)
    if source is None or not 0 <= psu_index < source.psu_count:
        logger.debug("patch rejected: no PSU %s of %s", psu_index, device_id)
        return devices

    new_conn: Optional[Connection] = None
    if pdu_id is not None:
        if socket_index is None or socket_index < 0:
            return devices
        if pdus is not None:
            pdu = next((p for p in pdus if p.id == pdu_id), None)
            if pdu is None or pdu.zone_type(socket_index) != source.connection_type:
                logger.debug("patch rejected: %s socket %s cannot take %s", pdu_id, socket_index, source.connection_type)
                return devices
        new_conn = Connection(pdu_id=pdu_id, socket_index=socket_index)

    previous = source.psu_connections[psu_index]
    occupant: Optional[tuple[str, int]] = None
    if new_conn is not None:
        for d in devices:
            for idx, conn in enumerate(d.psu_connections):
                if conn == new_conn:
                    if d.id == device_id and idx == psu_index:
                        return devices
                    occupant = (d.id, idx)
                    break
            if occupant:
                break

    result: list[Device] = []
    for d in devices:
        conns = list(d.psu_connections)
        modified = False
        if d.id == device_id:
            conns[psu_index] = new_conn
            modified = True
        if occupant and d.id == occupant[0]:
            conns[occupant[1]] = previous
            modified = True
        result.append(d.with_connections(conns) if modified else d)
    return result


def apply_group_edit(
    devices: list[Device],
    name: str,
    *,
    u_height: int,
    typical_power: float,
    power_rating: float,
    rack_size: int,
) -> list[Device]:
    """Update height and power of every device of model ``name``.

    Rejected when the new heights would overlap a neighbour or leave the rack.
    """
    if u_height < 1 or typical_power < 0 or power_rating < 0:
        return devices
    edited = [
        d.model_copy(update={"u_height": u_height, "typical_power": typical_power, "power_rating": power_rating})
        if d.name == name
        else d
        for d in devices
    ]
    if rack_conflicts(edited, rack_size):
        logger.debug("group edit of %s rejected: rack conflict at %dU", name, u_height)
        return devices
    return edited


def device_types(devices: Sequence[Device]) -> list[str]:
    """Distinct model names in first-seen order."""
    return list(dict.fromkeys(d.name for d in devices))
