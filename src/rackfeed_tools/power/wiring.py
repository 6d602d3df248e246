"""Socket-level auto-wiring.

Every PSU of every placed device is mapped to a concrete (PDU, socket) such that

* the socket's connector zone matches the device connector type,
* the PDU stays within ``capacity x PF x margin`` (each PSU reserves the full
  device max power on its PDU, as either feed must carry it alone),
* the socket's circuit stays within ``rated amps x margin``,
* and the chosen socket is the one vertically nearest the device.

Dual-PSU devices are wired first and try to land on the same socket index of
A_k and B_k. PSUs that cannot be placed legally are left as ``None``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from rackfeed_core.codebase.debug import spy_trace
from rackfeed_core.models.device import Connection, Device
from rackfeed_core.models.power import PduConfig, PlannerConfig, Side

from rackfeed_tools.power.compaction import compact_wiring
from rackfeed_tools.power.geometry import device_center_y, socket_y
from rackfeed_tools.power.units import effective_capacity, effective_circuit_amps, watts_to_amps

logger = logging.getLogger("rackfeed.wiring")


@dataclass
class _PduState:
    """Scratch bookkeeping for one PDU during a single wiring run."""

    pdu: PduConfig
    capacity: float
    circuit_count: int
    current_load: float = 0.0
    used_sockets: set[int] = field(default_factory=set)
    circuit_loads: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.circuit_loads:
            self.circuit_loads = [0.0] * self.circuit_count

    @property
    def sockets_per_circuit(self) -> int:
        return max(1, math.ceil(self.pdu.total_sockets / self.circuit_count))

    def circuit_of(self, socket_index: int) -> int:
        return socket_index // self.sockets_per_circuit

    def has_room_for(self, load: float) -> bool:
        return self.current_load + load <= self.capacity

    def reserve(self, socket_index: int, load: float) -> None:
        self.used_sockets.add(socket_index)
        self.current_load += load
        c = self.circuit_of(socket_index)
        if c < self.circuit_count:
            self.circuit_loads[c] += load


@dataclass(frozen=True)
class _Limits:
    num_pairs: int
    rack_size: int
    pdu_cols: int
    voltage: float
    power_factor: float
    circuit_limit_amps: float

    @classmethod
    def from_config(cls, config: PlannerConfig, num_pairs: int) -> "_Limits":
        return cls(
            num_pairs=num_pairs,
            rack_size=config.rack_size,
            pdu_cols=config.pdu_cols,
            voltage=config.voltage,
            power_factor=config.power_factor,
            circuit_limit_amps=effective_circuit_amps(config.circuit_rated_amps, config.safety_margin),
        )


def _circuit_ok(state: _PduState, socket_index: int, load: float, limits: _Limits) -> bool:
    c = state.circuit_of(socket_index)
    if c >= state.circuit_count:
        return False
    amps = watts_to_amps(state.circuit_loads[c] + load, limits.power_factor, limits.voltage)
    return amps <= limits.circuit_limit_amps


def _socket_legal(state: _PduState, socket_index: int, device: Device, limits: _Limits) -> bool:
    if socket_index in state.used_sockets:
        return False
    if state.pdu.zone_type(socket_index) != device.connection_type:
        return False
    return _circuit_ok(state, socket_index, device.power_rating, limits)


def _nearest_socket(states: Sequence[_PduState], device: Device, center_y: float, limits: _Limits) -> Optional[int]:
    """Lowest-distance socket index legal on every PDU in ``states``; ties keep the lowest index."""
    pair_index = states[0].pdu.index
    total = min(s.pdu.total_sockets for s in states)
    best: Optional[int] = None
    shortest = math.inf
    for s in range(total):
        if not all(_socket_legal(st, s, device, limits) for st in states):
            continue
        dist = abs(socket_y(pair_index, s, limits.num_pairs, total, limits.rack_size, limits.pdu_cols) - center_y)
        if dist < shortest:
            shortest = dist
            best = s
    return best


def _center_y(device: Device, limits: _Limits) -> float:
    if device.u_position is None:
        raise ValueError(f"{device.id} has no rack position")
    return device_center_y(device.u_position, device.u_height, limits.rack_size)


def _connect_on_side(
    device: Device, side: Side, states: dict[Side, list[_PduState]], limits: _Limits
) -> Optional[Connection]:
    """First PDU of ``side`` (by pair index) with capacity and a legal socket wins."""
    load = device.power_rating
    center = _center_y(device, limits)
    for state in states[side]:
        if not state.has_room_for(load):
            continue
        socket = _nearest_socket([state], device, center, limits)
        if socket is not None:
            state.reserve(socket, load)
            return Connection(pdu_id=state.pdu.id, socket_index=socket)
    return None


def _wire_dual_psu(device: Device, states: dict[Side, list[_PduState]], limits: _Limits) -> Device:
    if not device.is_placed:
        return device.disconnected()

    load = device.power_rating
    center = _center_y(device, limits)
    b_by_index = {st.pdu.index: st for st in states["B"]}

    for pdu_a in states["A"]:
        pdu_b = b_by_index.get(pdu_a.pdu.index)
        if pdu_b is None or not (pdu_a.has_room_for(load) and pdu_b.has_room_for(load)):
            continue
        socket = _nearest_socket([pdu_a, pdu_b], device, center, limits)
        if socket is None:
            continue
        pdu_a.reserve(socket, load)
        pdu_b.reserve(socket, load)
        return device.with_connections(
            [
                Connection(pdu_id=pdu_a.pdu.id, socket_index=socket),
                Connection(pdu_id=pdu_b.pdu.id, socket_index=socket),
            ]
        )

    # no matched pair: PSU 0 -> any A, PSU 1 -> any B
    logger.debug("%s: no matched A/B socket, wiring PSUs independently", device.id)
    return device.with_connections([_connect_on_side(device, side, states, limits) for side in ("A", "B")])


def _wire_other(
    device: Device, states: dict[Side, list[_PduState]], limits: _Limits, round_robin: int
) -> tuple[Device, int]:
    """Wire a non-dual device; returns the device and the advanced single-PSU round-robin counter."""
    if not device.is_placed:
        return device.disconnected(), round_robin

    conns: list[Optional[Connection]] = []
    for i in range(device.psu_count):
        side: Side
        if device.psu_count == 1:
            side = "A" if round_robin % 2 == 0 else "B"
            round_robin += 1
        else:
            side = "A" if i % 2 == 0 else "B"
        conns.append(_connect_on_side(device, side, states, limits))
    return device.with_connections(conns), round_robin


def _build_states(pdus: Sequence[PduConfig], config: PlannerConfig) -> dict[Side, list[_PduState]]:
    states: dict[Side, list[_PduState]] = {"A": [], "B": []}
    for pdu in pdus:
        states[pdu.side].append(
            _PduState(
                pdu=pdu,
                capacity=effective_capacity(pdu.power_capacity, config.power_factor, config.safety_margin),
                circuit_count=config.circuit_count,
            )
        )
    for side_states in states.values():
        side_states.sort(key=lambda st: st.pdu.index)
    return states


def _placement_order(devices: Sequence[Device]) -> list[int]:
    """Positions of ``devices`` top of rack first; unplaced devices last, input order otherwise."""
    return sorted(
        range(len(devices)),
        key=lambda i: (devices[i].u_position is None, -(devices[i].u_position or 0)),
    )


@spy_trace
def wire_devices(devices: Sequence[Device], pdus: Sequence[PduConfig], config: PlannerConfig) -> list[Device]:
    """Assign every PSU a (PDU, socket), starting from an empty PDU set.

    Existing connections on ``devices`` are discarded. The returned list keeps
    the input order; unconnectable PSUs are ``None``.
    """
    states = _build_states(pdus, config)
    num_pairs = len({p.index for p in pdus}) or 1
    limits = _Limits.from_config(config, num_pairs)

    order = _placement_order(devices)
    wired: list[Optional[Device]] = [None] * len(devices)

    for pos in order:
        if devices[pos].psu_count == 2:
            wired[pos] = _wire_dual_psu(devices[pos], states, limits)

    round_robin = 0
    for pos in order:
        if devices[pos].psu_count != 2:
            wired[pos], round_robin = _wire_other(devices[pos], states, limits, round_robin)

    result = [d for d in wired if d is not None]
    missing = sum(d.psu_count - d.connected_psus for d in result if d.is_placed)
    if missing:
        logger.info("%d PSU(s) left unconnected across %d PDU(s)", missing, len(pdus))
    return result


def auto_connect(devices: Sequence[Device], pdus: Sequence[PduConfig], config: PlannerConfig) -> list[Device]:
    """Wire from scratch, then compact socket indices per PDU and circuit."""
    return compact_wiring(
        wire_devices(devices, pdus, config), config.base_sockets_per_pdu, config.sockets_per_circuit
    )
