"""Synth command for writing Terraform JSON from a stack file."""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from terraform_aws.config import load_config
from terraform_aws.errors import SynthesisError
from terraform_aws.logging import ConsoleLogger, FileLogger, Logger, LogLevel, NullLogger
from terraform_aws.stack import build_stack, load_stack
from terraform_aws.synthesis import TerraformSynthesizer

console = Console()


def synth_command(
    stack_file: str = typer.Argument(..., help="Path to JSON stack file"),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Output file (default: TF_AWS_OUTPUT or main.tf.json)"),
    region: Optional[str] = typer.Option(None, help="AWS region for the provider block"),
    provider: bool = typer.Option(True, "--provider/--no-provider", help="Emit terraform and provider blocks"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Append synthesis events to this file as JSON lines"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output")
):
    """Synthesize a stack file into Terraform JSON."""
    try:
        config = load_config()
    except ValueError as e:
        console.print(f"[red]✗[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=1)

    if region:
        config.region = region
    if output:
        config.output_path = output

    logging.basicConfig(level=logging.DEBUG if verbose else config.log_level)
    event_logger: Logger
    if log_file:
        event_logger = FileLogger(log_file, min_level=LogLevel.DEBUG if verbose else LogLevel.INFO)
    elif verbose:
        event_logger = ConsoleLogger(min_level=LogLevel.DEBUG)
    else:
        event_logger = NullLogger()
    synth = TerraformSynthesizer(event_logger=event_logger)

    try:
        stack = load_stack(stack_file)
        build_stack(stack, synth, config=config, include_provider=provider)
    except FileNotFoundError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except (SynthesisError, ValueError) as e:
        console.print(f"[red]✗[/red] Synthesis failed: {escape(str(e))}")
        raise typer.Exit(code=1)

    path = synth.write(config.output_path)
    console.print(f"[green]✓[/green] Synthesized {synth.resource_count} resource(s)")
    console.print(f"[bold]Written to:[/bold] {path}")
