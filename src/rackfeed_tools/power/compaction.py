from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from rackfeed_core.codebase.debug import spy_trace
from rackfeed_core.models.device import Connection, Device

logger = logging.getLogger("rackfeed.compaction")


@dataclass
class _Slot:
    device_pos: int
    psu_index: int
    u_position: int
    socket_index: int


def _rank(slots: list[_Slot]) -> dict[tuple[int, int], int]:
    """Hand the used socket indices back out in top-of-rack order."""
    ordered = sorted(slots, key=lambda c: (-c.u_position, c.socket_index))
    used = sorted(c.socket_index for c in slots)
    return {(c.device_pos, c.psu_index): used[i] for i, c in enumerate(ordered)}


@spy_trace
def compact_wiring(
    devices: Sequence[Device], base_sockets: int, sockets_per_circuit: Optional[int] = None
) -> list[Device]:
    """Re-rank the connections on each PDU so higher devices take lower socket indices.

    Slots are ranked within each (zone, circuit) partition. Primary
    (``index < base_sockets``) and secondary zones stay apart so connector types
    stay valid; with ``sockets_per_circuit`` no load moves between circuits.
    The set of occupied indices on each PDU and every device's PDU assignment
    are unchanged. Unplaced devices are left alone.
    """
    by_pdu: dict[str, list[_Slot]] = {}
    for pos, d in enumerate(devices):
        if d.u_position is None:
            continue
        for psu, conn in enumerate(d.psu_connections):
            if conn is not None:
                by_pdu.setdefault(conn.pdu_id, []).append(_Slot(pos, psu, d.u_position, conn.socket_index))

    moved: dict[tuple[int, int], Connection] = {}
    for pdu_id, slots in by_pdu.items():
        partitions: dict[tuple[bool, int], list[_Slot]] = {}
        for s in slots:
            circuit = s.socket_index // sockets_per_circuit if sockets_per_circuit else 0
            partitions.setdefault((s.socket_index >= base_sockets, circuit), []).append(s)
        for part in partitions.values():
            for key, socket in _rank(part).items():
                moved[key] = Connection(pdu_id=pdu_id, socket_index=socket)

    result: list[Device] = []
    changed = 0
    for pos, d in enumerate(devices):
        conns = [moved.get((pos, psu), conn) for psu, conn in enumerate(d.psu_connections)]
        if conns == list(d.psu_connections):
            result.append(d)
            continue
        changed += 1
        result.append(d.with_connections(conns))
    logger.debug("compaction re-ranked sockets on %d device(s)", changed)
    return result
