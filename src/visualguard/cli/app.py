"""Unified CLI entry point for VisualGuard.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (VG_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import typer

from visualguard.cli.inspect_cmd import inspect_app
from visualguard.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("visualguard")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "visualguard: AI visual QA for e-commerce storefronts. "
    "Renders a page in headless Chromium and asks a vision model for a defect report. "
    "Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (VG_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.add_typer(inspect_app, name="inspect")
app.add_typer(settings_app, name="settings")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context, version: bool = typer.Option(False, "--version", help="Show version and exit.")) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"visualguard {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
