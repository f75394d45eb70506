"""Validate command for checking a stack file without writing output."""

import logging
from typing import Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from terraform_aws.errors import StackFileError, SynthesisError
from terraform_aws.logging import ConsoleLogger, FileLogger, Logger, LogLevel, NullLogger
from terraform_aws.resources import get_builder
from terraform_aws.stack import load_stack
from terraform_aws.synthesis import TerraformSynthesizer

console = Console()


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    location = ".".join(str(part) for part in details[0]["loc"])
    message = details[0]["msg"]
    return f"{location}: {message}" if location else message


def validate_command(
    stack_file: str = typer.Argument(..., help="Path to JSON stack file"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Append validation events to this file as JSON lines"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output")
):
    """Validate every resource in a stack file."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    event_logger: Logger
    if log_file:
        event_logger = FileLogger(log_file, min_level=LogLevel.DEBUG if verbose else LogLevel.INFO)
    elif verbose:
        event_logger = ConsoleLogger(min_level=LogLevel.DEBUG)
    else:
        event_logger = NullLogger()

    try:
        stack = load_stack(stack_file)
    except (FileNotFoundError, StackFileError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    synth = TerraformSynthesizer(event_logger=event_logger)
    table = Table(title="Stack Validation", box=box.ROUNDED)
    table.add_column("Resource", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Error/Info", style="dim")

    failed = 0
    for resource in stack.resources:
        try:
            ref = get_builder(resource.type)(synth, resource.name, resource.attributes)
        except ValidationError as e:
            failed += 1
            table.add_row(resource.address, "[red]✗ INVALID[/red]", escape(_first_error(e)))
            synth.event_logger.warning("validation.failed", resource.address, {"error": _first_error(e)})
        except SynthesisError as e:
            failed += 1
            table.add_row(resource.address, "[red]✗ INVALID[/red]", escape(str(e)))
            synth.event_logger.warning("validation.failed", resource.address, {"error": str(e)})
        else:
            table.add_row(resource.address, "[green]✓ VALID[/green]", f"{len(ref.outputs)} outputs")
            synth.event_logger.info("validation.passed", resource.address)

    console.print(table)
    console.print()

    if failed:
        console.print(f"[red]✗[/red] {failed} of {len(stack.resources)} resource(s) failed validation")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] All {len(stack.resources)} resource(s) are valid")
