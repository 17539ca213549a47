from __future__ import annotations

import json
import logging
import pathlib
import traceback
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table
from watchfiles import watch

from smartmorph._config import config_path, ensure_user_config, load_config
from smartmorph._logging import setup_logging
from smartmorph.io.shapes import ShapeLoadError, dump_samples, load_shapes
from smartmorph.morphing.driver import PlaybackDriver
from smartmorph.morphing.options import MorphConfig
from smartmorph.morphing.runtime import Morph, build_morph
from smartmorph.morphing.shapes import Shape

console = Console()
app = typer.Typer(help="Match two vector scenes and sample the morph between them.")

APPEAR = "-"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log matching and scheduling details."),
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.WARNING, console=console)


def _load_scene(source: str) -> list[Shape] | None:
    if source == APPEAR:
        return None
    path = pathlib.Path(source)
    if not path.exists():
        raise typer.BadParameter(f"Shape file {path} does not exist.")
    try:
        return load_shapes(path)
    except ShapeLoadError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build_config(
    config: pathlib.Path | None,
    duration: float | None,
    easing: str | None,
) -> MorphConfig:
    try:
        return load_config(config, duration_ms=duration, easing=easing)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _build(start: str, end: str, cfg: MorphConfig) -> Morph:
    end_shapes = _load_scene(end)
    if end_shapes is None:
        raise typer.BadParameter("END must be a shape file.")
    return build_morph(_load_scene(start), end_shapes, cfg)


@app.command()
def match(
    start: str = typer.Argument(..., help="Start scene (JSON shape file)."),
    end: str = typer.Argument(..., help="End scene (JSON shape file)."),
    config: Optional[pathlib.Path] = typer.Option(None, "--config", "-c", help="JSON config file (defaults to the user config)."),
) -> None:
    """
    Print the shape correspondence between two scenes.
    """

    result = _build(start, end, _build_config(config, None, None)).match
    if result is None:
        raise typer.BadParameter("match needs two shape files.")

    table = Table(title="Matched shapes")
    table.add_column("start")
    table.add_column("end")
    table.add_column("cost", justify="right")
    for pair in result.pairs:
        table.add_row(pair.start.label, pair.end.label, f"{pair.cost:.3f}")
    console.print(table)
    for shape in result.unmatched_start:
        console.print(f"[red]- {shape.label}[/red] disappears")
    for shape in result.unmatched_end:
        console.print(f"[green]+ {shape.label}[/green] appears")


@app.command()
def sample(
    start: str = typer.Argument(..., help="Start scene, or '-' to animate END in from nothing."),
    end: str = typer.Argument(..., help="End scene (JSON shape file)."),
    progress: float = typer.Option(0.5, "--progress", "-p", min=0.0, max=1.0, help="Global progress to sample."),
    as_json: bool = typer.Option(False, "--json", help="Emit samples as JSON instead of a table."),
    config: Optional[pathlib.Path] = typer.Option(None, "--config", "-c", help="JSON config file (defaults to the user config)."),
    duration: Optional[float] = typer.Option(None, "--duration", min=1, help="Per-track duration in milliseconds."),
    easing: Optional[str] = typer.Option(None, "--easing", help="Easing preset name, e.g. ease-in-out."),
) -> None:
    """
    Sample every track of the morph at one progress value.
    """

    morph = _build(start, end, _build_config(config, duration, easing))
    samples = morph.sample(progress)
    if as_json:
        typer.echo(dump_samples(samples))
        return

    table = Table(title=f"Morph at {progress:.3f} ({morph.total_ms:.0f} ms total)")
    for column in ("key", "kind", "opacity", "fill", "stroke", "outline"):
        table.add_column(column)
    for item in samples:
        table.add_row(
            item.key,
            item.kind,
            f"{item.opacity:.3f}",
            item.fill or "none",
            item.stroke or "none",
            item.outline if len(item.outline) <= 60 else item.outline[:57] + "...",
        )
    console.print(table)


def _play_once(morph: Morph, fps: int) -> None:
    with Progress(
        TextColumn("[cyan]morphing"),
        BarColumn(),
        TextColumn("{task.percentage:>5.1f}%"),
        TimeElapsedColumn(),
        console=console,
    ) as bar:
        task = bar.add_task("morph", total=1.0)
        driver = PlaybackDriver(
            morph,
            render=lambda samples: None,
            on_progress=lambda value: bar.update(task, completed=value),
        )
        driver.run(target_fps=fps)


@app.command()
def play(
    start: str = typer.Argument(..., help="Start scene, or '-' to animate END in from nothing."),
    end: str = typer.Argument(..., help="End scene (JSON shape file)."),
    fps: int = typer.Option(60, min=1, max=240, help="Frame budget for the playback loop."),
    watch_files: bool = typer.Option(False, "--watch/--no-watch", help="Replay whenever a shape file changes."),
    config: Optional[pathlib.Path] = typer.Option(None, "--config", "-c", help="JSON config file (defaults to the user config)."),
    duration: Optional[float] = typer.Option(None, "--duration", min=1, help="Per-track duration in milliseconds."),
    easing: Optional[str] = typer.Option(None, "--easing", help="Easing preset name, e.g. ease-in-out."),
) -> None:
    """
    Drive the morph in wall-clock time, optionally rebuilding it on file changes.
    """

    cfg = _build_config(config, duration, easing)
    morph = _build(start, end, cfg)
    console.rule("smartmorph")
    console.print(f"{len(morph.tracks)} tracks, {morph.total_ms:.0f} ms")
    _play_once(morph, fps)
    if not watch_files:
        return

    sources = [pathlib.Path(p).resolve() for p in (start, end) if p != APPEAR]
    console.print("[cyan]Watching for changes; press Ctrl+C to stop.[/cyan]")
    try:
        for changes in watch(*{p.parent for p in sources}, debounce=300):
            if not any(pathlib.Path(changed).resolve() in sources for _, changed in changes):
                continue
            try:
                morph = _build(start, end, cfg)
            except typer.BadParameter as exc:
                console.print(Panel.fit("".join(traceback.format_exception(exc)), title="Rebuild failed", style="red"))
                continue
            console.print(f"[green]Rebuilt:[/green] {len(morph.tracks)} tracks, {morph.total_ms:.0f} ms")
            _play_once(morph, fps)
    except KeyboardInterrupt:
        console.print("[yellow]Stopped watching.[/yellow]")


@app.command("init-config")
def init_config(
    path: Optional[pathlib.Path] = typer.Option(None, "--path", help="Where to write the config file."),
) -> None:
    """
    Write a default config file if none exists and print its location.
    """

    target = ensure_user_config(path)
    if target is None:
        raise typer.BadParameter(f"Could not write config to {path or config_path()}.")
    console.print(Panel(json.dumps(json.loads(target.read_text()), indent=2), title=str(target), border_style="green"))
