from typing import Sequence

from rackfeed_core.models.device import Device
from rich.console import Console
from rich.table import Table

console = Console()


def render_rack_layout(devices: Sequence[Device], rack_u: int = 48, title: str = "Rack") -> None:
    """Render a vertical rack view with each device's PSU feeds."""
    slots: dict[int, tuple[Device, bool]] = {}
    for d in devices:
        if d.u_range is None:
            continue
        bottom, top = d.u_range
        for u in range(bottom, top + 1):
            slots[u] = (d, u == top)

    table = Table(title=f"Rack Layout: {title} ({rack_u}U)", box=None, show_header=False)
    table.add_column("U")
    table.add_column("Occupied")
    table.add_column("Device")
    table.add_column("Feeds")

    for u in range(rack_u, 0, -1):
        entry = slots.get(u)
        if entry is None:
            table.add_row(f"{u:02}", "[ ]", "", "")
            continue
        d, is_top = entry
        if not is_top:
            table.add_row(f"{u:02}", "[■]", "", "")
            continue
        feeds = ", ".join(
            f"{c.pdu_id}:{c.socket_index + 1}" if c else "[red]--[/red]" for c in d.psu_connections
        )
        table.add_row(f"{u:02}", "[█]", d.name, feeds)

    console.print(table)

    unplaced = [d for d in devices if d.u_range is None]
    if unplaced:
        console.print(f"[yellow]{len(unplaced)} device(s) did not fit in the rack:[/yellow]")
        for d in unplaced:
            console.print(f"  - {d.id} ({d.u_height}U)")
