from __future__ import annotations

import logging
from typing import Sequence

from rackfeed_core.codebase.debug import spy_trace
from rackfeed_core.models.device import Device
from rackfeed_core.models.plan import PowerPlan
from rackfeed_core.models.power import PlannerConfig
from rackfeed_core.validation.power import validate_plan
from rich.console import Console
from rich.table import Table

from rackfeed_tools.power.loads import calculate_circuit_loads, calculate_pair_loads, calculate_pdu_loads
from rackfeed_tools.power.placement import auto_stack
from rackfeed_tools.power.sizing import build_pdus, required_pdu_pairs, resolve_pair_count
from rackfeed_tools.power.wiring import auto_connect

console = Console()
logger = logging.getLogger("rackfeed.planner")


@spy_trace
def plan_room(devices: Sequence[Device], config: PlannerConfig, *, restack: bool = False) -> PowerPlan:
    """Size, materialize, wire and audit the PDUs for one room.

    With ``restack`` the devices are first stacked top-down into the rack in
    list order, as done on a fresh import.
    """
    devices = auto_stack(devices, config.rack_size) if restack else list(devices)
    calculated = required_pdu_pairs(devices, config)
    active = resolve_pair_count(devices, config)
    pdus = build_pdus(config, active)

    wired = auto_connect(devices, pdus, config)
    logger.info("planned %d device(s) on %d PDU pair(s) (minimum %d)", len(wired), active, calculated)

    return PowerPlan(
        config=config,
        calculated_pairs=calculated,
        active_pairs=active,
        pdus=pdus,
        devices=wired,
        pdu_loads=calculate_pdu_loads(wired, pdus),
        circuit_loads=calculate_circuit_loads(wired, pdus, config),
        report=validate_plan(wired, pdus, config),
    )


def print_power_plan(plan: PowerPlan) -> None:
    """Console summary: pair loads, circuits, unconnected PSUs, findings."""
    config = plan.config
    safe = config.effective_capacity

    console.print("\n[bold cyan]Rackfeed Power Plan[/bold cyan]\n")
    console.print(
        f"Required PDUs: [bold]{plan.calculated_pairs}[/bold] pair(s) based on capacity & sockets"
        + (f"; using [bold]{plan.active_pairs}[/bold] (manual)" if plan.active_pairs != plan.calculated_pairs else "")
    )
    total_max = sum(d.power_rating for d in plan.devices)
    total_typ = sum(d.typical_power for d in plan.devices)
    console.print(f"Total load: [yellow]{total_typ:,.0f}W typical[/yellow] / [yellow]{total_max:,.0f}W max[/yellow]\n")

    table = Table(title="PDU pair loads (max W)")
    table.add_column("Pair")
    table.add_column("A", justify="right")
    table.add_column("B", justify="right")
    table.add_column("Safe limit", justify="right")
    for idx, loads in sorted(calculate_pair_loads(plan.pdus, plan.pdu_loads).items()):
        cells = []
        for side in ("A", "B"):
            style = "red" if loads[side] > safe else "green"
            cells.append(f"[{style}]{loads[side]:,.0f}[/{style}]")
        table.add_row(str(idx + 1), *cells, f"{safe:,.0f}")
    console.print(table)

    if config.circuit_count > 1 or any(c.amps > c.limit_amps for c in plan.circuit_loads):
        circuits = Table(title=f"Circuits ({config.voltage:.0f}V, {config.circuit_rated_amps:.0f}A)")
        circuits.add_column("PDU")
        circuits.add_column("Circuit", justify="right")
        circuits.add_column("Amps", justify="right")
        circuits.add_column("Limit", justify="right")
        for c in plan.circuit_loads:
            style = "red" if c.amps > c.limit_amps else "green"
            circuits.add_row(c.pdu_id, str(c.circuit_index + 1), f"[{style}]{c.amps:.1f}[/{style}]", f"{c.limit_amps:.1f}")
        console.print(circuits)

    unconnected = plan.unconnected
    if unconnected:
        console.print(f"\n[yellow]{len(unconnected)} PSU(s) unconnected:[/yellow]")
        for device, psu in unconnected:
            console.print(f"  - {device.id} PSU{psu + 1} ({device.connection_type})")

    for f in plan.report.findings:
        if f.code == "PSU_UNCONNECTED":
            continue
        color = {"FAIL": "red", "WARN": "yellow"}.get(f.severity, "dim")
        console.print(f"[{color}]{f.severity}[/{color}] {f.code}: {f.message}")

    s = plan.report.summary
    console.print(
        f"\n[bold]PSUs connected:[/bold] {s['psus_connected']}/{s['psus_total']}  "
        f"[bold]warn:[/bold] {s['warn']}  [bold]fail:[/bold] {s['fail']}\n"
    )
