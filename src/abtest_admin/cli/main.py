"""Main CLI application for the A/B test admin."""

import asyncio
import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import ConfigManager
from ..core.exceptions import AdminError, ConfigurationError, LaunchBlockedError
from ..observability import setup_logging
from . import commands

# Initialize console for rich output
console = Console()

# Create main Typer app
app = typer.Typer(
    name="abtest-admin",
    help="A/B test admin - validate, launch and preview persona A/B tests",
    add_completion=False,
)

preview_app = typer.Typer(help="Manage admin preview overrides.")
app.add_typer(preview_app, name="preview")


def get_config(ctx: typer.Context) -> ConfigManager:
    """Configuration manager built by the root callback."""
    obj = ctx.find_root().obj or {}
    config = obj.get("config")
    if config is None:
        config = ConfigManager()
    return config


def _fail(message: str, json_output: bool) -> None:
    if json_output:
        console.print_json(data={"error": message})
    else:
        console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def _print_warnings(warnings: List[Dict[str, Any]]) -> None:
    for warning in warnings:
        console.print(f"  [yellow]⚠ {warning['message']}[/yellow]")


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode",
    ),
):
    """A/B test admin CLI."""
    config = ConfigManager()
    if config_file:
        try:
            config.load_from_file(config_file)
        except ConfigurationError as e:
            console.print(f"[red]Error loading configuration: {e}[/red]")
            raise typer.Exit(1)
    if debug:
        config.set("debug", True)

    setup_logging(config, level="DEBUG" if verbose else "WARNING")

    # Store options in context for subcommands
    ctx.obj = {
        "config": config,
        "config_file": config_file,
        "verbose": verbose,
        "debug": debug,
    }


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    console.print(f"[bold cyan]abtest-admin[/bold cyan] v{__version__}")
    console.print("[dim]Persona A/B test configuration validator[/dim]")


@app.command()
def config(
    ctx: typer.Context,
    action: str = typer.Argument(
        ...,
        help="Action to perform: show, validate, create-default",
    ),
    file_path: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Path to configuration file",
    ),
):
    """Manage configuration."""
    config_manager = get_config(ctx)

    try:
        if action == "show":
            if file_path:
                config_manager.load_from_file(file_path)

            console.print(Panel.fit(
                "[bold cyan]Current Configuration[/bold cyan]\n" +
                json.dumps(config_manager.get_all(), indent=2, default=str),
                title="Configuration",
            ))

        elif action == "validate":
            if file_path:
                config_manager.load_from_file(file_path)

            errors = config_manager.validate_config()
            if errors:
                console.print("[red]Configuration validation failed:[/red]")
                for error in errors:
                    console.print(f"  • {error}")
                raise typer.Exit(1)
            console.print("[green]Configuration is valid[/green]")

        elif action == "create-default":
            if not file_path:
                console.print("[red]Error: --file is required for create-default action[/red]")
                raise typer.Exit(1)

            config_manager.create_default_config(file_path)
            console.print(f"[green]Created default configuration file: {file_path}[/green]")

        else:
            console.print(f"[red]Unknown action: {action}[/red]")
            console.print("[cyan]Available actions: show, validate, create-default[/cyan]")
            raise typer.Exit(1)

    except (AdminError, OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def validate(
    ctx: typer.Context,
    file_path: str = typer.Argument(..., help="Test configuration JSON file"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
):
    """Check whether a test configuration is ready to launch."""
    try:
        result = commands.validate_test(file_path, get_config(ctx).settings)
    except (AdminError, OSError, ValueError) as e:
        _fail(str(e), json_output)

    if json_output:
        console.print_json(data=result)
    else:
        if result["ready"]:
            console.print("[green]✓ Ready to launch[/green]")
        else:
            console.print("[red]✗ Not ready to launch[/red]")
            for reason in result["reasons"]:
                console.print(f"  • {reason}")
        _print_warnings(result["warnings"])
        console.print(f"[cyan]Estimated reach:[/cyan] {result['reach']}%")

    if not result["ready"]:
        raise typer.Exit(1)


@app.command()
def reach(
    ctx: typer.Context,
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Target persona"),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Target funnel stage"),
    traffic: int = typer.Option(100, "--traffic", "-t", help="Traffic allocation percentage"),
    combos: Optional[List[str]] = typer.Option(
        None,
        "--combo",
        help="persona:stage combination to target (repeatable)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
):
    """Estimate the audience reach of a targeting selection."""
    try:
        result = commands.estimate_reach(
            get_config(ctx).settings,
            persona=persona,
            stage=stage,
            traffic=traffic,
            combinations=combos,
        )
    except (AdminError, ValueError) as e:
        _fail(str(e), json_output)

    if json_output:
        console.print_json(data=result)
        return

    console.print(f"[cyan]Estimated reach:[/cyan] {result['reach']}% of visitors")
    console.print(f"[cyan]Traffic allocation:[/cyan] {result['trafficAllocation']}%")
    _print_warnings(result["warnings"])


@app.command()
def launch(
    ctx: typer.Context,
    file_path: str = typer.Argument(..., help="Test configuration JSON file"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
):
    """Validate a test configuration and create it on the backend."""
    settings = get_config(ctx).settings

    try:
        created = asyncio.run(commands.launch_test(file_path, settings))
    except LaunchBlockedError as e:
        if json_output:
            console.print_json(data={"error": str(e), "reasons": e.reasons})
        else:
            console.print("[red]Cannot launch test:[/red]")
            for reason in e.reasons:
                console.print(f"  • {reason}")
        raise typer.Exit(1)
    except (AdminError, OSError, ValueError) as e:
        _fail(str(e), json_output)

    if json_output:
        console.print_json(data=created)
    else:
        console.print(f"[green]✅ Launched test: {created['id']}[/green]")
        if created.get("name"):
            console.print(f"   Name: {created['name']}")


@app.command()
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the admin HTTP service."""
    import uvicorn

    from ..api import create_app

    settings = get_config(ctx).settings
    console.print(f"[cyan]Serving admin API on http://{host}:{port}[/cyan]")
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        reload=reload,
        log_level=settings.logging.level.lower(),
    )


@preview_app.command("show")
def preview_show(
    ctx: typer.Context,
    session_id: str = typer.Option("default", "--session", help="Preview session id"),
    options: bool = typer.Option(
        False,
        "--options",
        help="Also list the variants of active tests",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
):
    """Show the stored preview overrides."""
    try:
        result = asyncio.run(commands.preview_show(
            session_id, get_config(ctx).settings, include_options=options
        ))
    except (AdminError, ValueError) as e:
        _fail(str(e), json_output)

    if json_output:
        console.print_json(data=result)
        return

    session = result["session"]
    table = Table(title=f"Preview Session: {session_id}")
    table.add_column("Override", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Active", "yes" if result["active"] else "no")
    table.add_row("Persona", session["persona"] or "-")
    table.add_row("Funnel Stage", session["funnelStage"] or "-")
    for test_id, variant_id in session["variantOverrides"].items():
        table.add_row(f"Variant ({test_id})", variant_id)
    console.print(table)

    if options:
        options_table = Table(title="Available Variants")
        options_table.add_column("Test", style="cyan")
        options_table.add_column("Variant", style="green")
        options_table.add_column("Control", style="yellow")
        options_table.add_column("Reference", style="dim")
        for option in result["options"]:
            options_table.add_row(
                option["testName"],
                option["variant"].get("name", option["variantId"]),
                "✓" if option["isControl"] else "",
                f"{option['testId']}:{option['variantId']}",
            )
        console.print(options_table)


@preview_app.command("apply")
def preview_apply(
    ctx: typer.Context,
    session_id: str = typer.Option("default", "--session", help="Preview session id"),
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Persona to preview as"),
    stage: Optional[str] = typer.Option(None, "--stage", "-s", help="Funnel stage to preview"),
    variant: Optional[str] = typer.Option(
        None,
        "--variant",
        help="Force a variant, as TEST_ID:VARIANT_ID",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
):
    """Store preview overrides for a session."""
    try:
        session = asyncio.run(commands.preview_apply(
            session_id, get_config(ctx).settings, persona=persona, stage=stage, variant=variant
        ))
    except (AdminError, ValueError) as e:
        _fail(str(e), json_output)

    if json_output:
        console.print_json(data=session.model_dump(mode="json", by_alias=True))
    else:
        persona_label = session.persona.value if session.persona else "none"
        console.print(f"[green]Preview applied for session {session_id}[/green] (persona: {persona_label})")


@preview_app.command("reset")
def preview_reset(
    ctx: typer.Context,
    session_id: str = typer.Option("default", "--session", help="Preview session id"),
):
    """Clear every preview override for a session."""
    asyncio.run(commands.preview_reset(session_id, get_config(ctx).settings))
    console.print(f"[green]Preview reset for session {session_id}[/green]")


if __name__ == "__main__":
    app()
