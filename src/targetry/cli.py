"""Command line entry point."""

import importlib
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from . import __version__
from .engine import Engine
from .errors import ConfigurationError, RunError, TargetryError
from .workspace import Workspace

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="targetry",
    help="Declare build targets and run them in dependency order.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"targetry version {__version__}")
        raise typer.Exit()


def _parse_params(values: list[str]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got '{item}'", param_hint="--param")
        params[key.strip()] = value
    return params


def _fail(exc: Exception) -> NoReturn:
    typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    file: Annotated[
        Path, typer.Option("--file", "-f", help="HCL file or directory of .hcl files.")
    ] = Path("build.hcl"),
    imports: Annotated[
        list[str] | None,
        typer.Option("--import", "-m", help="Python module that registers actions."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log errors.")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    for module in imports or []:
        logger.debug("Importing %s", module)
        importlib.import_module(module)

    ctx.obj = file


def _workspace(ctx: typer.Context) -> Workspace:
    file: Path = ctx.obj
    ws = Workspace()
    try:
        if file.is_dir():
            ws.scan(file)
        else:
            ws.load(file)
    except (ConfigurationError, OSError) as exc:
        _fail(exc)
    return ws


def _requested(ws: Workspace, targets: list[str] | None) -> list[str]:
    if targets:
        return targets
    if ws.default is None:
        _fail(ConfigurationError("no target given and no default target declared"))
    return [ws.default]


@app.command("list")
def list_targets(ctx: typer.Context) -> None:
    """List the declared targets."""
    try:
        registry = _workspace(ctx).registry
    except TargetryError as exc:
        _fail(exc)
    for name, target in registry.items():
        line = name if not target.description else f"{name:<24} {target.description}"
        typer.echo(line)


@app.command()
def plan(
    ctx: typer.Context,
    targets: Annotated[
        list[str] | None, typer.Argument(help="Targets to plan (default target if omitted).")
    ] = None,
) -> None:
    """Print the execution plan for the given targets."""
    ws = _workspace(ctx)
    try:
        order = Engine(ws.registry).plan(_requested(ws, targets))
    except TargetryError as exc:
        _fail(exc)
    seen: set[str] = set()
    for name in order:
        if name not in seen:
            typer.echo(name)
            seen.add(name)


@app.command()
def run(
    ctx: typer.Context,
    targets: Annotated[
        list[str] | None, typer.Argument(help="Targets to run (default target if omitted).")
    ] = None,
    param: Annotated[
        list[str] | None, typer.Option("--param", "-p", help="Parameter as key=value.")
    ] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Do not invoke target bodies.")] = False,
) -> None:
    """Run the given targets and their dependencies."""
    ws = _workspace(ctx)
    try:
        config = ws.parameters.resolve(_parse_params(param or []))
        result = Engine(ws.registry).run(_requested(ws, targets), config, dry_run=dry_run)
    except RunError as exc:
        for entry in exc.result or []:
            typer.echo(f"{entry.outcome:<24} {entry.name}")
        _fail(exc)
    except TargetryError as exc:
        _fail(exc)

    for entry in result:
        typer.echo(f"{entry.outcome:<24} {entry.name}")
