from pathlib import Path
from typing import Any

import click

from recordguard.config import load_settings
from recordguard.loaders import load_document
from recordguard.record import ValidatedRecord
from recordguard.validator import TypeValidator, ValidationMode

from ._common import resolve_registry
from .utils import configure_logging, output_error, output_result


def validate_records(
    record_type: type[ValidatedRecord],
    documents: list[Any],
    mode: ValidationMode,
    validator: TypeValidator,
    exhaustive: bool = False,
) -> dict[str, Any]:
    """Validate each document against a record type."""
    validated = []
    for index, document in enumerate(documents):
        if not isinstance(document, dict):
            validated.append(
                {
                    "index": index,
                    "status": "error",
                    "issues": [
                        {"kind": "type_mismatch", "message": f"Record {index} is not a mapping"}
                    ],
                }
            )
            continue
        result = record_type.validate_data(
            document, mode, validator=validator, exhaustive=exhaustive
        )
        validated.append(
            {
                "index": index,
                "status": "ok" if result.valid else "error",
                "issues": [issue.model_dump(mode="json") for issue in result.issues],
            }
        )
    return {"schema": record_type.schema_name, "mode": mode.value, "validated": validated}


def format_validation_results(results: dict[str, Any]) -> str:
    """Format validation results for human-readable output"""
    validated = results["validated"]
    if not validated:
        return "No records found to validate"

    valid_count = sum(1 for r in validated if r["status"] == "ok")
    failed_count = len(validated) - valid_count

    output = [
        f"Validated {len(validated)} records against {results['schema']} "
        f"({results['mode']} mode): {valid_count} valid, {failed_count} failed"
    ]

    # Show failed records first
    failed = [r for r in validated if r["status"] != "ok"]
    if failed:
        output.append("")
        output.append("Failed records:")
        for record in failed:
            output.append(f"  ✗ #{record['index']}")
            for issue in record["issues"]:
                output.append(f"    {issue['kind']}: {issue['message']}")

    valid = [r for r in validated if r["status"] == "ok"]
    if valid:
        output.append("")
        output.append("Valid records:")
        for record in valid:
            output.append(f"  ✓ #{record['index']}")

    return "\n".join(output)


@click.command(name="validate")
@click.argument("schema_name")
@click.argument("data_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--schemas",
    "schema_files",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Schema-definition file (repeatable)",
)
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Settings file")
@click.option("--strict/--loose", default=None, help="Validation mode (default from settings)")
@click.option("--exhaustive", is_flag=True, help="Report every failure, not just the first")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
@click.pass_context
def validate(
    ctx: click.Context,
    schema_name: str,
    data_file: Path,
    schema_files: tuple[Path, ...],
    config_path: Path | None,
    strict: bool | None,
    exhaustive: bool,
    json_output: bool,
    debug: bool,
) -> None:
    """Validate records in a YAML or JSON file against a schema.

    DATA_FILE holds a single record or a list of records.

    Examples:
        recordguard validate Player players.yml --schemas game.yml
        recordguard validate Player hero.json --schemas game.yml --strict
        recordguard validate Player players.yml --exhaustive --json-output
    """
    configure_logging(debug)

    try:
        settings = load_settings(config_path)
        registry = resolve_registry(schema_files, settings)
        if not registry.is_schema(schema_name):
            raise ValueError(
                f"Unknown schema '{schema_name}'. Known schemas: {', '.join(registry.names())}"
            )
        record_type = registry.get(schema_name)

        if strict is None:
            mode = settings.default_mode
        else:
            mode = ValidationMode.STRICT if strict else ValidationMode.LOOSE

        validator = TypeValidator.from_settings(settings, registry=registry)
        document = load_document(data_file)
        documents = document if isinstance(document, list) else [document]

        results = validate_records(record_type, documents, mode, validator, exhaustive)

        if json_output:
            output_result(results, json_output)
        else:
            click.echo(format_validation_results(results))
    except Exception as e:
        output_error(e, json_output, debug)
        return

    if any(r["status"] != "ok" for r in results["validated"]):
        ctx.exit(1)
