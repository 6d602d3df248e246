from typing import Optional

import click
from rackfeed_core.data.devices import export_devices_csv
from rackfeed_core.data.plan import load_plan_document, save_plan, update_config
from rackfeed_tools.layout import console, render_rack_layout
from rackfeed_tools.power.placement import apply_group_edit, device_types, move_device

plan_option = click.option(
    "--plan",
    "plan_path",
    type=click.Path(path_type=str, dir_okay=False, exists=True),
    default="outputs/power-plan.yaml",
    show_default=True,
    help="Saved plan document (YAML or JSON).",
)


@click.group()
def cli() -> None:
    pass


@cli.group()
def rack() -> None:
    """Rack elevation and device placement commands."""
    pass


@rack.command()
@plan_option
def layout(plan_path: str) -> None:
    """Render a front elevation of a saved plan with each device's feeds."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    room = doc.devices[0].room if doc.devices else "Rack"
    render_rack_layout(doc.devices, rack_u=doc.rack_size, title=room)


@rack.command()
@plan_option
@click.option("--device", "device_id", type=str, required=True, help="Device id.")
@click.option("--to", "target_u", type=int, required=True, help="U the device's top should sit at.")
def move(plan_path: str, device_id: str, target_u: int) -> None:
    """Move a device; a device already at the target swaps places with it."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    updated = move_device(doc.devices, device_id, target_u, doc.rack_size)
    if updated is doc.devices:
        raise click.ClickException(f"Move of {device_id} to U{target_u} rejected (unknown device or rack conflict)")
    save_plan(doc.config, updated, plan_path, source_text=doc.source_text)
    console.print(f"[green]{device_id}[/green] → U{target_u}")


@rack.command()
@plan_option
@click.option("--name", type=str, required=True, help="Device model name, as listed by 'rack types'.")
@click.option("--u-height", type=int, default=None, help="New height in U.")
@click.option("--typical", "typical_power", type=float, default=None, help="New typical power (W).")
@click.option("--max", "power_rating", type=float, default=None, help="New max power (W).")
def edit(
    plan_path: str,
    name: str,
    u_height: Optional[int],
    typical_power: Optional[float],
    power_rating: Optional[float],
) -> None:
    """Change height and power for every device of one model."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    sample = next((d for d in doc.devices if d.name == name), None)
    if sample is None:
        raise click.ClickException(f"No devices named {name!r}")

    updated = apply_group_edit(
        doc.devices,
        name,
        u_height=sample.u_height if u_height is None else u_height,
        typical_power=sample.typical_power if typical_power is None else typical_power,
        power_rating=sample.power_rating if power_rating is None else power_rating,
        rack_size=doc.rack_size,
    )
    if updated is doc.devices:
        raise click.ClickException(f"Edit of {name} rejected (invalid values or rack conflict)")
    save_plan(doc.config, updated, plan_path, source_text=doc.source_text)
    console.print(f"[green]{name}[/green] updated on {sum(1 for d in updated if d.name == name)} device(s)")


@rack.command()
@plan_option
def types(plan_path: str) -> None:
    """List distinct device models in the plan."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    for name in device_types(doc.devices):
        console.print(name)


@rack.command()
@plan_option
@click.option("--rack-size", type=int, required=True, help="New rack height in U (4-52).")
def resize(plan_path: str, rack_size: int) -> None:
    """Change the rack height of a saved plan; devices left outside the rack are reported by validate."""
    try:
        doc = load_plan_document(plan_path)
        config = update_config(doc.config, rack_size=rack_size)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    save_plan(config, doc.devices, plan_path, source_text=doc.source_text)
    console.print(f"Rack size set to {config.rack_size}U")


@rack.command("export")
@plan_option
@click.option(
    "--out",
    type=click.Path(path_type=str, dir_okay=False),
    default="outputs/power-connections.csv",
    show_default=True,
    help="CSV of every PSU with its PDU and socket.",
)
def export(plan_path: str, out: str) -> None:
    """Export the PSU connection schedule as CSV."""
    try:
        doc = load_plan_document(plan_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    path = export_devices_csv(doc.devices, out)
    console.print(f"[dim]Connections written to {path}[/dim]")
