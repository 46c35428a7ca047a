import click

from recordguard.cli.schemas import schemas
from recordguard.cli.validate import validate


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """recordguard CLI"""
    # Show help when no subcommand is provided
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(validate)
cli.add_command(schemas)


if __name__ == "__main__":
    cli()
