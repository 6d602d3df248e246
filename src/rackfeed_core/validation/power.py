"""
Power plan validation for rackfeed.

Audits a wired device list against the electrical and physical rules of a
plan: socket uniqueness, connector compatibility, PDU capacity, circuit
limits and rack placement. Unconnected PSUs, unplaced devices and dangling
connections are reported as warnings, never raised.
"""

from __future__ import annotations

from typing import Sequence

from rackfeed_core.models.device import Device
from rackfeed_core.models.power import PduConfig, PlannerConfig
from rackfeed_core.models.power_report import Finding, Report
from rackfeed_tools.power.loads import calculate_circuit_loads, calculate_pdu_loads

NEAR_LIMIT_FRACTION = 0.90


def validate_sockets(devices: Sequence[Device], pdus: Sequence[PduConfig]) -> list[Finding]:
    """Check socket uniqueness, range, connector type, and dangling PDU references."""
    findings = []
    by_id = {p.id: p for p in pdus}
    holders: dict[tuple[str, int], tuple[str, int]] = {}

    for d in devices:
        for psu, conn in enumerate(d.psu_connections):
            if conn is None:
                continue
            key = (conn.pdu_id, conn.socket_index)
            if key in holders:
                other_dev, other_psu = holders[key]
                findings.append(Finding(
                    severity="FAIL",
                    code="SOCKET_CONFLICT",
                    message=f"{conn.pdu_id} socket {conn.socket_index + 1} used by {other_dev} PSU{other_psu + 1} and {d.id} PSU{psu + 1}",
                    context={"pdu_id": conn.pdu_id, "socket_index": conn.socket_index, "devices": [other_dev, d.id]}
                ))
            else:
                holders[key] = (d.id, psu)

            pdu = by_id.get(conn.pdu_id)
            if pdu is None:
                findings.append(Finding(
                    severity="WARN",
                    code="DANGLING_CONNECTION",
                    message=f"{d.id} PSU{psu + 1} references removed PDU {conn.pdu_id}; rewire required",
                    context={"device_id": d.id, "psu_index": psu, "pdu_id": conn.pdu_id}
                ))
                continue

            zone = pdu.zone_type(conn.socket_index)
            if zone is None:
                findings.append(Finding(
                    severity="FAIL",
                    code="SOCKET_OUT_OF_RANGE",
                    message=f"{d.id} PSU{psu + 1} on {pdu.id} socket {conn.socket_index + 1}, PDU has {pdu.total_sockets}",
                    context={"device_id": d.id, "pdu_id": pdu.id, "socket_index": conn.socket_index}
                ))
            elif zone != d.connection_type:
                findings.append(Finding(
                    severity="FAIL",
                    code="SOCKET_TYPE_MISMATCH",
                    message=f"{d.id} needs {d.connection_type} but {pdu.id} socket {conn.socket_index + 1} is {zone}",
                    context={
                        "device_id": d.id,
                        "pdu_id": pdu.id,
                        "socket_index": conn.socket_index,
                        "required": d.connection_type,
                        "socket_type": zone,
                    }
                ))
    return findings


def validate_capacity(devices: Sequence[Device], pdus: Sequence[PduConfig], config: PlannerConfig) -> list[Finding]:
    """Check each PDU against capacity x PF x margin and each circuit against its breaker."""
    findings = []
    loads = calculate_pdu_loads(devices, pdus)

    for pdu in pdus:
        limit = pdu.power_capacity * config.power_factor * (config.safety_margin / 100)
        load = loads[pdu.id].max
        if load > limit:
            findings.append(Finding(
                severity="FAIL",
                code="PDU_OVERLOAD",
                message=f"{pdu.id} carries {load:.0f}W, safe limit {limit:.0f}W (over by {load - limit:.0f}W)",
                context={"pdu_id": pdu.id, "load_w": load, "limit_w": limit, "excess_w": load - limit}
            ))
        elif limit > 0 and load / limit > NEAR_LIMIT_FRACTION:
            findings.append(Finding(
                severity="WARN",
                code="PDU_NEAR_LIMIT",
                message=f"{pdu.id} at {load / limit:.0%} of safe limit ({load:.0f}W / {limit:.0f}W)",
                context={"pdu_id": pdu.id, "load_w": load, "limit_w": limit, "utilization": round(load / limit, 3)}
            ))

    for circuit in calculate_circuit_loads(devices, pdus, config):
        if circuit.amps > circuit.limit_amps:
            findings.append(Finding(
                severity="FAIL",
                code="CIRCUIT_OVERLOAD",
                message=f"{circuit.pdu_id} circuit {circuit.circuit_index + 1} draws {circuit.amps:.1f}A, limit {circuit.limit_amps:.1f}A",
                context={
                    "pdu_id": circuit.pdu_id,
                    "circuit_index": circuit.circuit_index,
                    "amps": circuit.amps,
                    "limit_amps": circuit.limit_amps,
                }
            ))
    return findings


def validate_rack(devices: Sequence[Device], config: PlannerConfig) -> list[Finding]:
    """Check U ranges stay inside the rack and never overlap; report unplaced devices."""
    findings = []
    placed = [d for d in devices if d.u_range is not None]

    for d in devices:
        if d.u_range is None:
            findings.append(Finding(
                severity="WARN",
                code="DEVICE_UNPLACED",
                message=f"{d.id} ({d.u_height}U) has no rack position",
                context={"device_id": d.id, "u_height": d.u_height}
            ))

    for i, d1 in enumerate(placed):
        bottom, top = d1.u_range
        if bottom < 1 or top > config.rack_size:
            findings.append(Finding(
                severity="FAIL",
                code="RACK_OUT_OF_BOUNDS",
                message=f"{d1.id} spans U{bottom}-U{top}, rack is {config.rack_size}U",
                context={"device_id": d1.id, "bottom": bottom, "top": top, "rack_size": config.rack_size}
            ))
        for d2 in placed[i + 1:]:
            b2, t2 = d2.u_range
            if max(bottom, b2) <= min(top, t2):
                findings.append(Finding(
                    severity="FAIL",
                    code="RACK_OVERLAP",
                    message=f"{d1.id} (U{bottom}-U{top}) overlaps {d2.id} (U{b2}-U{t2})",
                    context={"devices": [d1.id, d2.id]}
                ))
    return findings


def validate_connectivity(devices: Sequence[Device], pdus: Sequence[PduConfig]) -> list[Finding]:
    """Report unconnected PSUs and multi-PSU devices fed from a single side."""
    findings = []
    sides = {p.id: p.side for p in pdus}

    for d in devices:
        if not d.is_placed:
            continue
        for psu, conn in enumerate(d.psu_connections):
            if conn is None:
                findings.append(Finding(
                    severity="WARN",
                    code="PSU_UNCONNECTED",
                    message=f"{d.id} PSU{psu + 1} ({d.connection_type}) has no legal socket",
                    context={"device_id": d.id, "psu_index": psu, "connection_type": d.connection_type}
                ))
        fed = {sides[c.pdu_id] for c in d.psu_connections if c is not None and c.pdu_id in sides}
        if d.psu_count > 1 and d.connected_psus > 1 and len(fed) == 1:
            findings.append(Finding(
                severity="WARN",
                code="REDUNDANCY_SINGLE_FEED",
                message=f"{d.id} has {d.connected_psus} PSUs all on feed {next(iter(fed))}",
                context={"device_id": d.id, "side": next(iter(fed))}
            ))
    return findings


def validate_plan(devices: Sequence[Device], pdus: Sequence[PduConfig], config: PlannerConfig) -> Report:
    """
    Top-level plan validation.

    Runs every check and returns a structured Report.
    """
    all_findings: list[Finding] = []
    all_findings.extend(validate_sockets(devices, pdus))
    all_findings.extend(validate_capacity(devices, pdus, config))
    all_findings.extend(validate_rack(devices, config))
    all_findings.extend(validate_connectivity(devices, pdus))

    total_psus = sum(d.psu_count for d in devices)
    connected = sum(d.connected_psus for d in devices)
    summary = {
        "devices": len(devices),
        "pdus": len(pdus),
        "psus_total": total_psus,
        "psus_connected": connected,
        "warn": len([f for f in all_findings if f.severity == "WARN"]),
        "fail": len([f for f in all_findings if f.severity == "FAIL"]),
        "info": len([f for f in all_findings if f.severity == "INFO"]),
    }
    return Report(summary=summary, findings=all_findings)
