"""Resources command for listing supported resource types."""

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from terraform_aws.resources import RESOURCE_REFERENCES

console = Console()


def resources_command(
    outputs: bool = typer.Option(True, "--outputs/--no-outputs", help="Show each type's outputs"),
):
    """List supported resource types."""
    table = Table(title="Supported Resources", box=box.ROUNDED)
    table.add_column("Resource Type", style="cyan")
    if outputs:
        table.add_column("Outputs", style="dim")

    for resource_type, reference in sorted(RESOURCE_REFERENCES.items()):
        if outputs:
            table.add_row(resource_type, ", ".join(reference.OUTPUTS))
        else:
            table.add_row(resource_type)

    console.print(table)
