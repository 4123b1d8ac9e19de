"""
entitykit CLI

Render JSON/YAML input through an entity type from the command line.
"""

import importlib
import json
import sys
from pathlib import Path

import click
import yaml

from . import __version__
from .config import apply_config, load_config_from_file
from .encoders import to_json, to_yaml
from .entity import Entity
from .errors import EntityError


def load_entity(path: str) -> type:
    """Import an entity type given as `package.module:ClassName`"""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected `module:Class`, got `{path}`")
    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import `{module_name}`: {e}")
    for part in attr.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise click.BadParameter(f"`{attr}` not found in `{module_name}`")
    if not isinstance(target, type) or not issubclass(target, Entity):
        raise click.BadParameter(f"`{path}` is not an Entity subclass")
    return target


def load_input(path: str):
    with open(path, "r", encoding="utf-8") as f:
        if Path(path).suffix.lower() in [".yaml", ".yml"]:
            return yaml.safe_load(f)
        return json.load(f)


def parse_option(raw: str):
    """KEY=VALUE, VALUE parsed as JSON when possible"""
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected KEY=VALUE, got `{raw}`")
    try:
        return key, json.loads(value)
    except ValueError:
        return key, value


@click.group()
@click.version_option(version=__version__)
def cli():
    """entitykit - expose data through declarative entities"""
    pass


@cli.command()
@click.argument("entity")
@click.argument("input_file", metavar="INPUT", type=click.Path(exists=True))
@click.option("--only", "only", multiple=True, help="Only output these fields")
@click.option("--except", "excluded", multiple=True, help="Omit these fields")
@click.option("--root", help="Wrap the output under this key")
@click.option("--no-root", is_flag=True, help="Disable the entity's root key")
@click.option(
    "--option", "-O", "extra",
    multiple=True,
    help="Extra render option KEY=VALUE (VALUE parsed as JSON when possible)"
)
@click.option(
    "--format", "fmt",
    type=click.Choice(["json", "yaml"]),
    default="json",
    help="Output format"
)
@click.option("--config", "config_file", type=click.Path(exists=True), help="entitykit config file")
@click.option("--output", "-o", type=click.Path(), help="Write the result to a file")
def render(entity, input_file, only, excluded, root, no_root, extra, fmt, config_file, output):
    """Render INPUT through ENTITY (module:Class)"""
    if root and no_root:
        raise click.UsageError("--root and --no-root are mutually exclusive")

    try:
        if config_file:
            apply_config(load_config_from_file(config_file))

        entity_type = load_entity(entity)
        data = load_input(input_file)

        options = dict(parse_option(raw) for raw in extra)
        options["serializable"] = True
        if only:
            options["only"] = list(only)
        if excluded:
            options["except"] = list(excluded)
        if root:
            options["root"] = root
        elif no_root:
            options["root"] = None

        result = entity_type.represent(data, options)
    except EntityError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        click.echo(f"Error: Invalid input file {input_file}: {e}", err=True)
        sys.exit(1)

    if fmt == "json":
        output_str = to_json(result, indent=2)
    else:
        output_str = to_yaml(result)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(output_str)
        click.echo(f"Result written to: {output}")
    else:
        click.echo(output_str)


@cli.command()
@click.argument("entity")
def docs(entity):
    """Print the documentation of ENTITY (module:Class)"""
    entity_type = load_entity(entity)
    try:
        documentation = entity_type.documentation()
    except EntityError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    click.echo(to_json(documentation, indent=2, default=repr))


def main():
    """CLI entry point"""
    cli()


if __name__ == "__main__":
    main()
