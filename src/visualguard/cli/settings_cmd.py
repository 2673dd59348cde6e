"""CLI commands for inspecting and validating VisualGuard settings."""

from __future__ import annotations

import json

import typer
from rich.console import Console

settings_app = typer.Typer(help="Inspect and validate VisualGuard configuration.")
console = Console()


def _redact(value: str) -> str:
    return f"{value[:4]}…{value[-2:]}" if len(value) > 8 else ("***" if value else "")


@settings_app.command("show")
def show_settings() -> None:
    """Display the currently resolved settings (API key redacted)."""
    from visualguard.settings import get_settings

    settings = get_settings()
    data = settings.model_dump(mode="json")
    data["llm"]["api_key"] = _redact(settings.llm.api_key)
    console.print_json(json.dumps(data, indent=2, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Validate settings and report any issues."""
    from visualguard.exceptions import ConfigurationError
    from visualguard.settings import get_settings

    try:
        settings = get_settings()
        settings.require_inference_credentials()
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=2)
    except Exception as e:
        console.print(f"[red]✗[/red] Settings validation failed: {e}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Settings are valid.")
    console.print(f"  Environment: {settings.env}")
    console.print(f"  Inference: {settings.llm.model} @ {settings.llm.base_url}")
    console.print(f"  Browser: {settings.browser.executable_path or 'bundled Chromium'} (sandbox={settings.browser.sandbox})")
