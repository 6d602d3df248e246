import sys
from pathlib import Path
from typing import Optional

import click
from rackfeed_core.data.devices import load_device_csv
from rackfeed_core.data.plan import (
    load_plan_document,
    load_planner_config_or_default,
    save_plan,
    update_config,
)
from rackfeed_core.models.device import RackGroup
from rackfeed_core.models.power import PDU_VARIANTS, PlannerConfig
from rackfeed_core.validation.power import validate_plan
from rackfeed_tools.power.grouping import optimize_power_distribution
from rackfeed_tools.power.placement import patch_connection
from rackfeed_tools.power.planner import console, plan_room, print_power_plan
from rackfeed_tools.power.sizing import build_pdus, required_pdu_pairs, resolve_pair_count
from rich.table import Table


@click.group()
def cli() -> None:
    """Rackfeed power tools."""
    pass


@cli.group()
def power() -> None:
    """PDU sizing and socket wiring commands."""
    pass


def _select_room(devices_path: str, room: Optional[str]) -> RackGroup:
    groups = load_device_csv(devices_path)
    if not groups:
        raise click.ClickException(f"No devices found in {devices_path}")
    if room is None:
        return groups[0]
    for g in groups:
        if g.room_id == room:
            return g
    raise click.ClickException(f"Room {room!r} not in {devices_path} (have: {', '.join(g.room_id for g in groups)})")


def _variant_power(name: str) -> float:
    matches = [v for v in PDU_VARIANTS if name.lower() in str(v["name"]).lower()]
    if len(matches) != 1:
        known = ", ".join(str(v["name"]) for v in PDU_VARIANTS)
        raise click.ClickException(f"PDU variant {name!r} must match exactly one of: {known}")
    return float(matches[0]["power"])


def _rating(config: PlannerConfig) -> str:
    phase = "3-phase" if config.is_three_phase else "single-phase"
    return f"{config.variant_name or 'custom'} ({config.base_pdu_capacity:,.0f}VA, {phase})"


def _config(config_path: Optional[str], pairs: Optional[int], variant: Optional[str] = None) -> PlannerConfig:
    try:
        config = load_planner_config_or_default(config_path)
        if pairs is not None:
            config = update_config(config, manual_pdu_pairs=pairs)
        if variant is not None:
            config = update_config(config, base_pdu_capacity=_variant_power(variant))
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return config


devices_option = click.option(
    "--devices",
    "devices_path",
    type=click.Path(path_type=str, dir_okay=False, exists=False),
    default="doctrine/power/devices.csv",
    show_default=True,
    help="Device inventory CSV (room, device, U size, quantity, PSUs, power, connector).",
)
config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=str, dir_okay=False, exists=False),
    default="doctrine/power/planner.yaml",
    show_default=True,
    help="Planner settings YAML (PDU capacity, sockets, circuits, rack size). Defaults apply if missing.",
)
room_option = click.option("--room", type=str, default=None, help="Room to plan (default: first in the inventory).")
variant_option = click.option(
    "--variant",
    type=str,
    default=None,
    help="PDU preset by name, e.g. 'Standard 32A' or '3-Phase 16A' (see 'power variants'). Overrides the configured capacity.",
)
plan_option = click.option(
    "--plan",
    "plan_path",
    type=click.Path(path_type=str, dir_okay=False, exists=True),
    default="outputs/power-plan.yaml",
    show_default=True,
    help="Saved plan document (YAML or JSON).",
)


@power.command("size")
@devices_option
@config_option
@room_option
@variant_option
def size(devices_path: str, config_path: Optional[str], room: Optional[str], variant: Optional[str]) -> None:
    """Minimum redundant PDU pairs for a room, by power and by socket count."""
    try:
        group = _select_room(devices_path, room)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    config = _config(config_path, None, variant)
    pairs = required_pdu_pairs(group.devices, config)
    console.print(
        f"[green]{group.room_id}[/green]: {len(group.devices)} devices, "
        f"[yellow]{group.total_power:,.0f}W max[/yellow], "
        f"{sum(d.psu_count for d in group.devices)} PSUs → [bold magenta]{pairs} PDU pair(s)[/bold magenta] "
        f"[dim](effective {config.effective_capacity:,.1f}W per PDU)[/dim]"
    )
    console.print(f"PDU rating: {_rating(config)}")


@power.command("group")
@devices_option
@config_option
def group(devices_path: str, config_path: Optional[str]) -> None:
    """Room-level summary: least-loaded grouping of devices into PDU pairs."""
    try:
        racks = load_device_csv(devices_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    config = _config(config_path, None)
    results = optimize_power_distribution(racks, config.base_pdu_capacity, config.safety_margin, config.power_factor)

    for result in results:
        table = Table(title=f"{result.room_id}")
        table.add_column("Pair")
        table.add_column("Devices", justify="right")
        table.add_column("Load (W)", justify="right")
        table.add_column("Capacity (W)", justify="right")
        table.add_column("Amps", justify="right")
        for g in result.pdu_pairs:
            style = "red" if g.current_load > g.capacity else "green"
            amps = g.current_load / config.power_factor / config.voltage
            table.add_row(
                g.id,
                str(len(g.devices)),
                f"[{style}]{g.current_load:,.0f}[/{style}]",
                f"{g.capacity:,.0f}",
                f"{amps:.1f}A @ {config.voltage:.0f}V",
            )
        console.print(table)


@power.command("variants")
def variants() -> None:
    """List the PDU presets accepted by --variant."""
    table = Table(title="PDU variants")
    table.add_column("Name")
    table.add_column("Rating (VA)", justify="right")
    table.add_column("Phase")
    for v in PDU_VARIANTS:
        table.add_row(str(v["name"]), f"{float(v['power']):,.0f}", "3-phase" if "3-Phase" in str(v["name"]) else "single")
    console.print(table)


@power.command("plan")
@devices_option
@config_option
@room_option
@click.option("--pairs", type=int, default=None, help="Override the PDU pair count (never below 1).")
@variant_option
@click.option(
    "--export",
    type=click.Path(path_type=str, dir_okay=False),
    default="outputs/power-plan.yaml",
    show_default=True,
    help="Write the plan document to this path (.yaml or .json).",
)
def plan(
    devices_path: str,
    config_path: Optional[str],
    room: Optional[str],
    pairs: Optional[int],
    variant: Optional[str],
    export: str,
) -> None:
    """Stack devices into the rack, size PDUs and auto-wire every PSU."""
    try:
        group = _select_room(devices_path, room)
        source_text = Path(devices_path).read_text(encoding="utf-8")
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e
    config = _config(config_path, pairs, variant)

    result = plan_room(group.devices, config, restack=True)
    print_power_plan(result)
    out = save_plan(config, result.devices, export, source_text=source_text)
    console.print(f"[dim]Plan written to {out}[/dim]")


@power.command("rewire")
@plan_option
@click.option("--pairs", type=int, default=None, help="Override the PDU pair count (never below 1).")
@click.option(
    "--export",
    type=click.Path(path_type=str, dir_okay=False),
    default=None,
    help="Write the rewired plan here (default: overwrite --plan).",
)
def rewire(plan_path: str, pairs: Optional[int], export: Optional[str]) -> None:
    """Re-run auto-wiring on a saved plan, keeping device positions."""
    try:
        doc = load_plan_document(plan_path)
        config = doc.config if pairs is None else update_config(doc.config, manual_pdu_pairs=pairs)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    result = plan_room(doc.devices, config)
    print_power_plan(result)
    out = save_plan(config, result.devices, export or plan_path, source_text=doc.source_text)
    console.print(f"[dim]Plan written to {out}[/dim]")


@power.command("validate")
@plan_option
@click.option("--strict", is_flag=True, help="Exit with code 2 when warnings are present.")
def validate(plan_path: str, strict: bool) -> None:
    """Audit a saved plan. Exit codes: 0 ok, 1 failures, 2 warnings under --strict."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    config = doc.config
    pdus = build_pdus(config, resolve_pair_count(doc.devices, config))
    report = validate_plan(doc.devices, pdus, config)

    if report.findings:
        for finding in report.findings:
            severity_color = {"FAIL": "red", "WARN": "yellow", "INFO": "blue"}.get(finding.severity, "white")
            console.print(f"[{severity_color}]{finding.severity}[/{severity_color}] {finding.code}: {finding.message}")
    else:
        console.print("[green]✓ All validation checks passed[/green]")

    fail_count = report.summary.get("fail", 0)
    warn_count = report.summary.get("warn", 0)
    if fail_count > 0:
        console.print(f"\n[red]✗[/red] Validation failed with {fail_count} errors")
        sys.exit(1)
    elif strict and warn_count > 0:
        console.print(f"\n[yellow]⚠[/yellow] Validation completed with {warn_count} warnings (strict mode)")
        sys.exit(2)
    console.print("\n[green]✓[/green] Validation completed successfully")


@power.command("patch")
@plan_option
@click.option("--device", "device_id", type=str, required=True, help="Device id.")
@click.option("--psu", type=int, required=True, help="PSU number, 1-based.")
@click.option("--pdu", "pdu_id", type=str, default=None, help="Target PDU id (e.g. A1). Omit to unplug.")
@click.option("--socket", type=int, default=None, help="Target socket number, 1-based.")
def patch(plan_path: str, device_id: str, psu: int, pdu_id: Optional[str], socket: Optional[int]) -> None:
    """Manually plug or unplug one PSU; an occupied socket swaps with the mover."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    config = doc.config
    pdus = build_pdus(config, resolve_pair_count(doc.devices, config))

    socket_index = None if socket is None else socket - 1
    updated = patch_connection(doc.devices, device_id, psu - 1, pdu_id, socket_index, pdus=pdus)
    if updated is doc.devices:
        raise click.ClickException(f"Patch rejected for {device_id} PSU{psu}")
    save_plan(config, updated, plan_path, source_text=doc.source_text)
    console.print(f"[green]{device_id} PSU{psu}[/green] → {pdu_id or 'unplugged'}" + (f":{socket}" if pdu_id else ""))
