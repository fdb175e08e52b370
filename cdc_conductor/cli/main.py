"""cdc-conductor command line interface.

Compiles pipeline definitions into deployable resources and validates
destination connections from a shell.
"""

import os
from typing import Any, Dict, List, Optional

import typer
import yaml

from cdc_conductor.cli.display import (
    console,
    display_error,
    display_generic_error,
    display_validation_result,
)
from cdc_conductor.compiler import PipelineDeploymentCompiler
from cdc_conductor.config import load_config
from cdc_conductor.domain import Connection, Pipeline
from cdc_conductor.environment import InMemoryDeploymentTarget
from cdc_conductor.errors import ConductorError, NotFoundError
from cdc_conductor.logging import configure_logging, get_logger
from cdc_conductor.validation import default_registry

logger = get_logger(__name__)

app = typer.Typer(
    name="cdc-conductor",
    help="Compile CDC pipelines and validate destination connections",
    add_completion=False,
)

CONFIG_OPTION_HELP = "Conductor configuration YAML (defaults apply when omitted)"


def _version_callback(value: bool) -> None:
    if value:
        from cdc_conductor import __version__

        console.print(f"cdc-conductor v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show warnings and errors"
    ),
) -> None:
    """cdc-conductor: manage Debezium Server pipelines."""
    configure_logging(verbose=verbose, quiet=quiet)


@app.command("compile")
def compile_pipeline(
    pipeline_file: str = typer.Argument(..., help="Pipeline definition (YAML)"),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help=CONFIG_OPTION_HELP
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the resource to this file"
    ),
) -> None:
    """Compile a pipeline into a DebeziumServer resource and print it as YAML."""
    try:
        pipeline = Pipeline.from_dict(_read_pipeline_file(pipeline_file))
        compiler = PipelineDeploymentCompiler(
            InMemoryDeploymentTarget(), load_config(config)
        )
        resource = compiler.compile(pipeline).to_resource()
    except ConductorError as e:
        display_generic_error(e, "compilation")
        raise typer.Exit(1)

    rendered = yaml.safe_dump(resource, sort_keys=False)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(rendered)
        console.print(f"✅ [bold green]Resource written to {output}[/bold green]")
    else:
        typer.echo(rendered)
    logger.info(f"Compiled pipeline '{pipeline.name}'")


@app.command("validate")
def validate_connection(
    destination_type: str = typer.Argument(
        ..., help="Destination type: REDIS, KINESIS, QDRANT, MILVUS or HTTP"
    ),
    params: List[str] = typer.Option(
        [], "--param", "-p", help="Connection parameter as key=value (repeatable)"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help=CONFIG_OPTION_HELP
    ),
) -> None:
    """Validate a destination connection; exits with 1 when it is invalid."""
    try:
        connection_config = parse_params(params)
        registry = default_registry(load_config(config))
        result = registry.validate(
            Connection(type=destination_type, config=connection_config)
        )
    except NotFoundError as e:
        display_error(e.message)
        raise typer.Exit(1)
    except ConductorError as e:
        display_generic_error(e, "validation")
        raise typer.Exit(1)

    display_validation_result(destination_type.upper(), result)
    if not result.valid:
        raise typer.Exit(1)


def parse_params(params: List[str]) -> Dict[str, str]:
    """Parse ``key=value`` pairs; the value may itself contain ``=``."""
    parsed: Dict[str, str] = {}
    for param in params:
        key, sep, value = param.partition("=")
        if not sep or not key.strip():
            raise ConductorError(f"Invalid parameter '{param}', expected key=value")
        parsed[key.strip()] = value
    return parsed


def _read_pipeline_file(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise ConductorError(f"Pipeline file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConductorError(f"Invalid YAML in {path}: {e}")
    if isinstance(data, dict) and isinstance(data.get("pipeline"), dict):
        return data["pipeline"]
    return data


if __name__ == "__main__":
    app()
