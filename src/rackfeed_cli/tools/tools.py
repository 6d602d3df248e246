import click

from .power import power
from .rack import rack


@click.group()
def tools() -> None:
    """Utility commands for PDU sizing, wiring, and rack layout."""
    pass


tools.add_command(power)
tools.add_command(rack)
