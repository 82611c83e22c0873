"""CLI entrypoint for regenerating package exports."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Sequence

import click
import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .artifacts import BuildDirectoryError
from .config import DEFAULT_PLACEHOLDER, ConfigError, load_config
from .exports import exports_to_json
from .logging import configure_logging
from .manifest import ManifestError
from .pipeline import ExportsResult, generate_exports

logger = logging.getLogger(__name__)

console = Console(soft_wrap=True)
app = typer.Typer(
    help="Regenerate the exports map of a package manifest from compiled build output.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"pkg-exports {__version__}")
        raise typer.Exit()


@app.command()
def generate(  # noqa: PLR0913
    build_dir: Annotated[
        Path,
        typer.Argument(..., help="Directory containing compiled .js and .d.ts files.", show_default=False),
    ],
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-i", help="Comma-separated module basenames to leave out (repeatable)."),
    ] = None,
    pkg: Annotated[
        Path | None,
        typer.Option("--pkg", "-p", help="Manifest to update (default: nearest package.json above the build dir)."),
    ] = None,
    placeholder: Annotated[
        str | None,
        typer.Option(
            "--exclude-placeholder",
            "-e",
            help=f"Skip modules whose files contain this marker [default: {DEFAULT_PLACEHOLDER}].",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="YAML file with generator defaults."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the generated exports instead of writing the manifest."),
    ] = False,
    check: Annotated[
        bool,
        typer.Option("--check", help="Exit with status 1 when the manifest exports are out of date."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Increase log verbosity for troubleshooting."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the installed version and exit.",
        ),
    ] = False,
) -> None:
    """Scan BUILD_DIR and rewrite the manifest's exports field."""
    configure_logging(verbose=verbose)

    if dry_run and check:
        console.print("[bold red]Invalid options[/]: --dry-run and --check cannot be combined.")
        raise typer.Exit(code=1)

    try:
        config = load_config(config_path).with_overrides(
            exclude=_split_names(exclude),
            placeholder=placeholder,
        )
        result = generate_exports(
            build_dir,
            config=config,
            manifest_path=pkg,
            write=not (dry_run or check),
        )
    except ConfigError as exc:
        console.print(f"[bold red]Config error[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except BuildDirectoryError as exc:
        console.print(f"[bold red]Error[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except ManifestError as exc:
        console.print(f"[bold red]Error[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except Exception as exc:
        logger.debug("Export generation failed", exc_info=True)
        console.print(f"[bold red]Unexpected error[/]: {escape(repr(exc))}")
        raise typer.Exit(code=1) from exc

    if dry_run:
        console.print_json(data=exports_to_json(result.exports))
        console.print(f"[bold yellow]Dry run[/]: {escape(str(result.manifest_path))} not modified.")
        return

    if check:
        _report_check(result)
        return

    console.print(f"[bold green]Updated exports[/] in {escape(str(result.manifest_path))}")
    _print_keys(result)


def _split_names(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [name.strip() for value in values for name in value.split(",") if name.strip()]


def _print_keys(result: ExportsResult) -> None:
    if not result.keys:
        console.print("[bold yellow]Keys[/]: none (no modules left after exclusion)")
        return
    console.print(f"[bold blue]Keys[/] ({len(result.keys)}):")
    for key in result.keys:
        console.print(f"- {escape(key)}")


def _report_check(result: ExportsResult) -> None:
    target = escape(str(result.manifest_path))
    if result.changed:
        console.print(f"[bold red]Out of date[/]: exports in {target} differ from {escape(str(result.build_dir))}.")
        console.print("Run without --check to regenerate them.")
        raise typer.Exit(code=1)
    console.print(f"[bold green]Up to date[/]: {target} ({len(result.keys)} export(s)).")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit status.

    Usage errors exit with status 1 rather than click's default of 2.
    """
    command = typer.main.get_command(app)
    try:
        status = command.main(
            args=list(argv) if argv is not None else None,
            prog_name="pkg-exports",
            standalone_mode=False,
        )
    except click.ClickException as exc:
        exc.show()
        return 1
    except click.exceptions.Abort:
        return 1
    return status if isinstance(status, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
