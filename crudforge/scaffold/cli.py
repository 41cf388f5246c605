"""
Resource generator commands.

Usage:
    crudforge-generate model                 # schema + validation + route wiring
    crudforge-generate crud --name Product   # dedicated controller for an existing model
    crudforge-generate --root ../other-service model
"""
import sys
from pathlib import Path
from typing import List

import click
from pydantic import ValidationError

from crudforge.scaffold.descriptors import FieldDescriptor, FieldType, ResourceName
from crudforge.scaffold.generator import ModelNotFoundError, ScaffoldGenerator
from crudforge.scaffold.renderer import DEFAULT_PACKAGE
from crudforge.scaffold.writer import WriteResult
from crudforge.utils.logging import setup_logging

NAME_PROMPT = "Enter model name (e.g., User, Product)"
FIELD_TYPES = ", ".join(field_type.value for field_type in FieldType)


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root the files are written under",
)
@click.option("--package", default=DEFAULT_PACKAGE, show_default=True, help="Import package of the project")
@click.option("--verbose", "-v", is_flag=True, help="Log every file operation")
@click.pass_context
def cli(ctx: click.Context, root: Path, package: str, verbose: bool):
    """Generate resources for the CRUD API."""
    setup_logging(log_level="DEBUG" if verbose else "WARNING", stream=sys.stderr)
    ctx.obj = ScaffoldGenerator(root, package=package)


def prompt_fields() -> List[FieldDescriptor]:
    """Ask for fields until the operator declines to add another."""
    fields: List[FieldDescriptor] = []
    click.echo("\nDefine the fields for your model:")

    while True:
        name = click.prompt("Field name", default="", show_default=False).strip()
        if not name:
            click.echo("Field name is required. Skipping this field.")
            continue

        type_text = click.prompt(f"Field type ({FIELD_TYPES})", default="", show_default=False).strip()
        if not type_text:
            click.echo("Field type is required. Skipping this field.")
            continue

        required = click.confirm("Is required?", default=False)
        unique = click.confirm("Is unique?", default=False)
        default = click.prompt("Default value (leave empty for none)", default="", show_default=False)

        try:
            fields.append(FieldDescriptor(
                name=name,
                type=FieldType.parse(type_text),
                required=required,
                unique=unique,
                default=default,
            ))
        except ValidationError as e:
            messages = "; ".join(error["msg"] for error in e.errors())
            click.echo(f"Invalid field '{name}': {messages}. Skipping this field.")
            continue

        if not click.confirm("Add another field?", default=False):
            return fields


def report(results: List[WriteResult]) -> None:
    for result in results:
        click.echo(f"  {result.describe()}")


@cli.command()
@click.option("--name", prompt=NAME_PROMPT, help="Resource name, e.g. Product")
@click.pass_obj
def model(generator: ScaffoldGenerator, name: str):
    """
    Generate a model, its validation schemas and its route wiring.

    Prompts for each field's name, type, required/unique flags and default.
    Files that already exist are left untouched.
    """
    click.echo("=== Model Generator ===")
    try:
        resource = ResourceName.parse(name)
    except ValueError as e:
        raise click.ClickException(str(e))

    fields = prompt_fields()

    try:
        results = generator.generate_model(resource.pascal, fields)
    except OSError as e:
        raise click.ClickException(f"Generation failed: {e}")

    click.echo("")
    report(results)
    click.echo("\nFiles generated successfully!")

    package = generator.layout.package
    click.echo("\nTo serve the new resource, register it in "
               f"{package}/registry.py default_registry():")
    click.echo(f"    from {package}.api.endpoints import {resource.plural}")
    click.echo(f"    {resource.plural}.resource,")
    click.echo(f"\nIt will be available at /api/{resource.route_segment}")


@cli.command()
@click.option("--name", prompt=NAME_PROMPT, help="Name of an existing model")
@click.pass_obj
def crud(generator: ScaffoldGenerator, name: str):
    """
    Generate a dedicated controller for an existing model.

    Writes an empty validation pair if the model has none and points its
    route wiring at the new controller.
    """
    click.echo("=== CRUD Generator ===")
    try:
        resource = ResourceName.parse(name)
    except ValueError as e:
        raise click.ClickException(str(e))

    try:
        results = generator.generate_crud(resource.pascal)
    except ModelNotFoundError as e:
        click.echo(str(e))
        if click.confirm("Do you want to create a model file?", default=False):
            click.echo("Run 'crudforge-generate model' to create the model first.")
        return
    except OSError as e:
        raise click.ClickException(f"Generation failed: {e}")

    click.echo("")
    report(results)
    click.echo("\nCRUD files generated successfully!")
    click.echo(f"Custom endpoint example: /api/{resource.route_segment}/custom")


def main():
    cli()


if __name__ == "__main__":
    main()
