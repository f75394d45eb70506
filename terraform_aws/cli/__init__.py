"""Command-line interface for terraform-aws."""

import typer

from terraform_aws.cli.synth import synth_command
from terraform_aws.cli.validate import validate_command
from terraform_aws.cli.resources import resources_command

app = typer.Typer(help="terraform-aws - validated Terraform JSON for AWS resources")

app.command(name="synth")(synth_command)
app.command(name="validate")(validate_command)
app.command(name="resources")(resources_command)


def main():
    """Main CLI entry point."""
    app()


__all__ = ["app", "main"]
