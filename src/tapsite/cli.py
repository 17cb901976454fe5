"""tapsite CLI entry point.

Builds the localized Tap & Build marketing site: pages, sitemap, Open Graph
images and the trailer video.  Every command reads from and writes to the
site directory (``--site-dir`` or ``TAPSITE_SITE_DIR``).
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from tapsite.build import build_pages
from tapsite.capture.recorder import Strategy, record_frames, record_realtime
from tapsite.config import CaptureSettings, default_site_config, default_storyboard, get_site_dir
from tapsite.errors import TapSiteError
from tapsite.images import DEFAULT_OG_IMAGES, DEFAULT_TARGET_KB, optimize_images
from tapsite.sitemap import write_sitemap

app = typer.Typer(
    name="tapsite",
    help="Tap & Build website toolkit: localized pages, sitemap, OG images and trailer capture.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _site_dir(ctx: typer.Context) -> Path:
    return ctx.obj["site_dir"]


def _fail(error: object, title: str = "Build Error") -> None:
    err_console.print(Panel(
        str(error),
        title=f"[red]{title}[/red]",
        border_style="red",
    ))
    raise typer.Exit(1)


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    site_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--site-dir",
            envvar="TAPSITE_SITE_DIR",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help="Website root holding i18n/, trailer.html and the OG images (default: current directory).",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr.")] = False,
) -> None:
    _configure_logging(verbose)
    site = site_dir or get_site_dir()
    if not site.is_dir():
        err_console.print(Panel(
            f"Site directory not found: [bold]{site}[/bold]\n"
            f"Pass --site-dir or set TAPSITE_SITE_DIR.",
            title="[red]Input Error[/red]",
            border_style="red",
        ))
        raise typer.Exit(1)
    ctx.obj = {"site_dir": site}


def _run_pages(site: Path, pages: Optional[list[str]], langs: Optional[list[str]], strict: bool,
               overwrite_home: bool = False) -> list[Path]:
    config = default_site_config()
    with _progress() as progress:
        task = progress.add_task("Generating pages...", total=None)
        written = build_pages(
            site, config, pages=pages, languages=langs, strict=strict, overwrite_hand_maintained=overwrite_home,
            on_page=lambda path: progress.update(task, description=f"Generated {path.relative_to(site)}"),
        )
    return written


@app.command()
def pages(
    ctx: typer.Context,
    page: Annotated[
        Optional[list[str]],
        typer.Option("--page", "-p", help="Page to build (home, press, trailer, privacy, terms). Repeatable."),
    ] = None,
    lang: Annotated[
        Optional[list[str]],
        typer.Option("--lang", "-l", help="Language code to build. Repeatable."),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on a missing translation key instead of rendering a placeholder."),
    ] = False,
    overwrite_home: Annotated[
        bool,
        typer.Option("--overwrite-home", help="Also regenerate the hand-maintained English index.html."),
    ] = False,
) -> None:
    """Generate localized HTML pages from the i18n translation tables."""
    site = _site_dir(ctx)
    try:
        written = _run_pages(site, page, lang, strict, overwrite_home)
    except KeyError as e:
        _fail(e.args[0] if e.args else e, title="Input Error")
    except TapSiteError as e:
        _fail(e)
    console.print(f"[green]Generated {len(written)} localized pages[/green]")


@app.command()
def sitemap(ctx: typer.Context) -> None:
    """Write sitemap.xml with hreflang alternates for every page and language."""
    site = _site_dir(ctx)
    config = default_site_config()
    path = write_sitemap(site, config)
    console.print(
        f"[green]Generated {path.name}[/green] with "
        f"{len(config.pages) * len(config.languages)} URLs"
    )


@app.command()
def build(
    ctx: typer.Context,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on a missing translation key instead of rendering a placeholder."),
    ] = False,
    overwrite_home: Annotated[
        bool,
        typer.Option("--overwrite-home", help="Also regenerate the hand-maintained English index.html."),
    ] = False,
) -> None:
    """Generate all localized pages and the sitemap."""
    site = _site_dir(ctx)
    config = default_site_config()
    try:
        written = _run_pages(site, None, None, strict, overwrite_home)
    except TapSiteError as e:
        _fail(e)
    sitemap_path = write_sitemap(site, config)
    console.print(Panel(
        f"[bold green]Build complete[/bold green]\n\n"
        f"  Pages:    {len(written)}\n"
        f"  Sitemap:  [dim]{sitemap_path.name}[/dim]\n"
        f"  Site dir: [dim]{site}[/dim]",
        title="[green]Site Ready[/green]",
        border_style="green",
    ))


@app.command("optimize-images")
def optimize_images_command(
    ctx: typer.Context,
    aggressive: Annotated[
        bool,
        typer.Option("--aggressive", help="Re-encode as progressive JPEG under --target-kb where possible."),
    ] = False,
    target_kb: Annotated[
        int,
        typer.Option("--target-kb", min=1, help="Size target in KB for --aggressive."),
    ] = DEFAULT_TARGET_KB,
) -> None:
    """Re-encode the Open Graph preview images."""
    site = _site_dir(ctx)
    results = optimize_images(site, DEFAULT_OG_IMAGES, aggressive=aggressive, target_kb=target_kb)
    if not results:
        console.print("[yellow]No OG images found.[/yellow]")
        return
    for result in results:
        line = (
            f"{result.path.name}: {result.original_size // 1024} KB -> {result.new_size // 1024} KB "
            f"({result.savings_pct:.1f}% smaller)"
        )
        if result.under_target is False:
            line += f" [yellow]still above {target_kb} KB[/yellow]"
        console.print(line)
    console.print(f"[green]Optimized {len(results)} image(s)[/green]")


@app.command()
def record(
    ctx: typer.Context,
    strategy: Annotated[
        Strategy,
        typer.Option("--strategy", "-s", case_sensitive=False, help="Capture strategy."),
    ] = Strategy.VIRTUAL,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", dir_okay=False, resolve_path=True,
                     help="Output MP4 (default: <site-dir>/trailer-output.mp4)."),
    ] = None,
) -> None:
    """Capture trailer.html as a 1920x1080 H.264 video."""
    site = _site_dir(ctx)
    settings = CaptureSettings()
    storyboard = default_storyboard()
    trailer_path = site / settings.trailer_name
    output = output or site / settings.output_name

    try:
        with _progress() as progress:
            if strategy == Strategy.REALTIME:
                task = progress.add_task("Recording trailer...", total=storyboard.total_duration_ms)
                result = record_realtime(
                    trailer_path, output, storyboard, settings,
                    on_progress=lambda elapsed, total: progress.update(task, completed=elapsed),
                )
            else:
                task = progress.add_task("Capturing frames...", total=storyboard.total_frames)
                result = record_frames(
                    trailer_path, output, storyboard, settings, clock=strategy,
                    on_frame=lambda step: progress.update(
                        task, completed=step.index + 1, description=f"Scene {step.scene + 1}/{storyboard.scene_count}",
                    ),
                )
    except TapSiteError as e:
        _fail(e, title="Capture Error")

    if result.fallback:
        console.print(f"[yellow]Warning:[/] encode failed, raw recording kept as {result.output.name}")
    console.print(Panel(
        f"[bold green]Trailer captured[/bold green]\n\n"
        f"  Output:   [dim]{result.output}[/dim]\n"
        f"  Strategy: {result.strategy.value}\n"
        + (f"  Frames:   {result.frames}\n" if result.frames else "")
        + f"  Duration: {storyboard.total_duration_ms / 1000:.1f}s @ {storyboard.fps} fps",
        title="[green]Trailer Ready[/green]",
        border_style="green",
    ))
