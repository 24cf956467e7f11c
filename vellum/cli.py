"""
Vellum CLI - Inspect and render a template tree from the shell.

Commands:
    list    - Show every registry key
    check   - Build the registry and report problems
    render  - Render one template to stdout
"""

import json
import logging
import sys
from typing import Optional

import click

from . import __version__
from .config import TemplatesConfig
from .engine import TemplateEngine
from .faults import Fault


def _engine(ctx: click.Context) -> TemplateEngine:
    config: TemplatesConfig = ctx.obj["config"]
    return TemplateEngine(config=config)


@click.group()
@click.version_option(version=__version__, prog_name="vellum")
@click.option(
    "--root",
    envvar="VELLUM_TEMPLATES_PATH",
    default=None,
    help="Templates root holding layouts/, pages/ and blocks/",
)
@click.option("--config", "config_file", type=click.Path(exists=True), help="JSON or YAML config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, root: Optional[str], config_file: Optional[str], verbose: bool):
    """Layout/page/block templates on Jinja2."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    overrides = {"templates_path": root} if root else None
    try:
        config = TemplatesConfig.load(
            paths=[config_file] if config_file else None,
            overrides=overrides,
        )
    except Fault as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


@cli.command("list")
@click.pass_context
def list_templates(ctx):
    """List every registry key."""
    engine = _engine(ctx)
    try:
        engine.parse_templates()
    except Fault as exc:
        raise click.ClickException(str(exc)) from exc

    for name in engine.parsed_templates():
        click.echo(name)


@cli.command()
@click.pass_context
def check(ctx):
    """Build the registry and report the result."""
    engine = _engine(ctx)
    try:
        registry = engine.parse_templates()
    except Fault as exc:
        click.echo(click.style(f"✗ {exc}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style(f"✓ {len(registry)} templates OK", fg="green"))


@cli.command()
@click.argument("name")
@click.option("--data", "data_json", default=None, help="Render data as JSON")
@click.option("--layout", default=None, help="Layout for names without one")
@click.pass_context
def render(ctx, name: str, data_json: Optional[str], layout: Optional[str]):
    """
    Render NAME to stdout.

    Examples:
      vellum render home --data '{"name": "Ada"}'
      vellum render home --layout special
      vellum render _header
    """
    try:
        data = json.loads(data_json) if data_json else None
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"invalid JSON: {exc}", param_hint="--data") from exc

    engine = _engine(ctx)
    try:
        engine.parse_templates()
        click.echo(engine.render(name, data, layout=layout), nl=False)
    except Fault as exc:
        raise click.ClickException(str(exc)) from exc


def main():
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
