"""CLI command for inspecting a single storefront URL."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

inspect_app = typer.Typer(help="Run the AI visual check against a storefront page.")
console = Console()


@inspect_app.command("url")
def inspect_url(
    url: str = typer.Argument(..., help="Storefront address, e.g. allbirds.com or https://example.com."),
    screenshot: Optional[Path] = typer.Option(None, "--screenshot", "-s", help="Save the captured PNG here."),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    navigation_timeout_ms: Optional[int] = typer.Option(
        None, "--navigation-timeout", min=1, help="Override the navigation timeout (ms)."
    ),
) -> None:
    """Capture the first screen of URL and print the visual defect report."""
    from visualguard.exceptions import ConfigurationError
    from visualguard.logging_setup import configure_logging
    from visualguard.pipeline import InspectionPipeline
    from visualguard.settings import get_settings

    settings = get_settings()
    if navigation_timeout_ms is not None:
        settings = settings.model_copy(deep=True)
        settings.browser.navigation_timeout_ms = navigation_timeout_ms
    configure_logging(settings.log_level, settings.log_format)

    try:
        pipeline = InspectionPipeline.from_settings(settings)
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)

    if not json_output:
        console.print(Panel(f"[bold]Inspecting:[/bold] {url}", title="VisualGuard", border_style="blue"))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
        disable=json_output,
    ) as progress:
        progress.add_task("Capturing page and running visual check...", total=None)
        result = asyncio.run(_run(pipeline, url))

    if json_output:
        typer.echo(result.to_json())
    elif result.success:
        console.print(Panel(result.report or "", title="AI inspection report", border_style="green"))

    if result.success:
        if screenshot is not None:
            screenshot.parent.mkdir(parents=True, exist_ok=True)
            screenshot.write_bytes(result.artifact.data)  # type: ignore[union-attr]
            if not json_output:
                console.print(f"  Screenshot saved to: {screenshot}")
        return

    if not json_output:
        console.print(f"\n[red]✗[/red] Inspection failed: {result.error}")
        for hint in failure_hints(result.error or "", settings.browser.navigation_timeout_ms):
            console.print(f"  [yellow]→[/yellow] {hint}")
    raise typer.Exit(code=1)


async def _run(pipeline, url: str):  # type: ignore[no-untyped-def]
    try:
        return await pipeline.analyze(url)
    finally:
        await pipeline.aclose()


def failure_hints(error: str, navigation_timeout_ms: int) -> list[str]:
    """Suggest next steps for the common failure reasons."""
    lowered = error.lower()
    if lowered.startswith("page failed to load") and "timeout" in lowered:
        return [
            f"The page did not load within {navigation_timeout_ms}ms; this is usually a network issue "
            "(some sites are slow or blocked from this network).",
            "Verify with a reachable site first, e.g. visualguard inspect url https://example.com",
            "Or raise the limit: VG_BROWSER__NAVIGATION_TIMEOUT_MS=180000 (or --navigation-timeout).",
        ]
    if lowered.startswith("browser failed to start"):
        return [
            "Run `playwright install chromium`, or point VG_BROWSER__EXECUTABLE_PATH at a local Chrome.",
            "In containers, set VG_BROWSER__SANDBOX=false.",
        ]
    if "inference" in lowered and "timeout" in lowered:
        return ["The vision model did not answer in time; check connectivity to the endpoint and retry."]
    return []
