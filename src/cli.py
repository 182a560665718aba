"""CLI interface for topstories."""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from topstories.artifacts import ArtifactStore
from topstories.config import TopStoriesConfig, load_config, merge_cli_overrides
from topstories.pipeline import build_response, render_feed

app = typer.Typer(
    name="topstories",
    help="Fetch Hacker News best stories and illustrate them with Gemini.",
)

console = Console(stderr=True)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to a .topstories.toml file.",
        dir_okay=False,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from topstories import __version__

        console.print(f"topstories {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    """Route log records to stderr so stdout carries only the JSON document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """topstories - Illustrated Hacker News best stories as JSON."""
    _setup_logging(verbose)


@app.command()
def run(
    config_path: ConfigOption = None,
    force: Annotated[
        Optional[bool],
        typer.Option(
            "--force/--no-force",
            help="Bypass cached API responses and fetch fresh data.",
        ),
    ] = None,
    test_mode: Annotated[
        Optional[bool],
        typer.Option(
            "--test-mode/--no-test-mode",
            help="Write placeholder images instead of calling Gemini.",
        ),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the JSON document to this file instead of stdout.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Render the illustrated story feed as a JSON document."""
    config = merge_cli_overrides(
        load_config(config_path),
        force_refresh=force,
        test_mode=test_mode,
    )

    response = build_response(render_feed(config))
    document = response.to_json()

    if output is None:
        typer.echo(document)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document + "\n", encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Error:[/red] Could not write {output}: {exc}")
        raise typer.Exit(1) from exc
    console.print(f"Wrote {response.metadata.total_count} stories to {output}")


@app.command()
def sweep(config_path: ConfigOption = None) -> None:
    """Delete illustrations older than the retention window."""
    config = load_config(config_path)
    removed = ArtifactStore(config.images).sweep()
    console.print(
        f"Removed {removed} artifact(s) older than {config.images.retention_days} days "
        f"from {config.images.directory}"
    )


@app.command()
def clean(
    config_path: ConfigOption = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Remove the response cache and all generated illustrations."""
    config = load_config(config_path)
    targets = _clean_targets(config)

    if not yes:
        listing = ", ".join(str(t) for t in targets)
        typer.confirm(f"Delete {listing}?", abort=True)

    for target in targets:
        if not target.exists():
            continue
        try:
            shutil.rmtree(target)
        except OSError as exc:
            console.print(f"[red]Error:[/red] Could not remove {target}: {exc}")
            raise typer.Exit(1) from exc
        console.print(f"Removed {target}")


def _clean_targets(config: TopStoriesConfig) -> list[Path]:
    return [Path(config.feed.cache_dir), Path(config.images.directory)]


if __name__ == "__main__":
    app()
