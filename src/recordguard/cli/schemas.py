from pathlib import Path

import click

from recordguard.config import load_settings
from recordguard.record import describe_schema

from ._common import resolve_registry
from .utils import configure_logging, output_error, output_result


@click.command(name="schemas")
@click.option(
    "--schemas",
    "schema_files",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Schema-definition file (repeatable)",
)
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Settings file")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def schemas(
    schema_files: tuple[Path, ...], config_path: Path | None, json_output: bool, debug: bool
) -> None:
    """List the record types declared in schema files.

    Examples:
        recordguard schemas --schemas game.yml
        recordguard schemas --json-output
    """
    configure_logging(debug)

    try:
        settings = load_settings(config_path)
        registry = resolve_registry(schema_files, settings)

        listing = []
        for name in registry.names():
            description = describe_schema(registry.get(name))
            listing.append(
                {
                    "name": name,
                    "fields": len(description.fields),
                    "extended_fields": len(description.extended_schema),
                    "extendable": description.is_extendable,
                }
            )

        if json_output:
            output_result(listing, json_output)
        elif not listing:
            click.echo("No schemas found")
        else:
            output_result(
                [
                    f"{entry['name']} ({entry['fields']} fields, "
                    f"{entry['extended_fields']} extended)"
                    for entry in listing
                ]
            )
    except Exception as e:
        output_error(e, json_output, debug)
