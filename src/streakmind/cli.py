"""
StreakMind CLI

Command-line client for the StreakMind API.

Usage:
    streakmind chat                  - Interactive chat mode
    streakmind run "message"         - Send a single message
    streakmind stats                 - Points, streaks and badges
    streakmind logs                  - Recent log entries
    streakmind activities            - Tracked activities
    streakmind delete-log <id>       - Remove one log entry
    streakmind memory                - What StreakMind remembers about you
    streakmind health                - Check the API is up
    streakmind config                - Show the config file
"""

import asyncio
import os
from typing import List, Optional

import httpx
import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.table import Table

app = typer.Typer(
    name="streakmind",
    help="StreakMind - chat-driven habit tracker CLI",
    add_completion=False
)
console = Console()

DEFAULT_API_URL = "http://localhost:8080/api"


# =============================================================================
# Helper Functions
# =============================================================================

def get_api_url() -> str:
    """Get the API URL from environment or default."""
    return os.getenv("STREAKMIND_API_URL", DEFAULT_API_URL).rstrip("/")


def get_api_headers() -> dict:
    """Get headers for API requests including auth."""
    headers = {"Content-Type": "application/json"}
    api_key = os.getenv("STREAKMIND_API_KEY", "")
    if api_key:
        headers["X-API-Key"] = api_key
    return headers


async def api_request(
    method: str,
    endpoint: str,
    data: Optional[dict] = None,
    timeout: float = 30.0
) -> dict:
    """Make an API request to the StreakMind service."""
    url = f"{get_api_url()}{endpoint}"
    headers = get_api_headers()

    async with httpx.AsyncClient(timeout=timeout) as client:
        method = method.upper()
        if method == "GET":
            response = await client.get(url, headers=headers)
        elif method == "DELETE":
            response = await client.delete(url, headers=headers)
        elif method == "PUT":
            response = await client.put(url, json=data or {}, headers=headers)
        else:
            response = await client.post(url, json=data or {}, headers=headers)

        response.raise_for_status()
        return response.json()


def format_reply_footer(response: dict) -> Optional[str]:
    """One dim line summarizing what a message changed, if anything."""
    action = response.get("action")
    if action == "activity_log" and response.get("log_entry"):
        entry = response["log_entry"]
        footer = f"+{response.get('points_awarded', 0)} pts · {entry['activity']} {entry['amount']:g} {entry['unit']}"
        if response.get("streak_updated"):
            footer += f" · streak {response.get('current_streak')}"
        return footer
    if action == "activity_track" and response.get("activity_created"):
        return f"Now tracking {response['activity_created']}"
    if action == "activity_command" and response.get("command_action"):
        return f"Command: {response['command_action']}"
    return None


# =============================================================================
# Chat Commands
# =============================================================================

@app.command()
def chat():
    """Start an interactive chat session."""
    console.print("[bold green]StreakMind[/bold green]")
    console.print(f"Connected to {get_api_url()}")
    console.print("[dim]Type 'exit' or 'quit' to end the session[/dim]\n")

    while True:
        try:
            user_input = console.input("[bold blue]You > [/bold blue]")

            if user_input.lower() in ("exit", "quit", "q"):
                console.print("[dim]Goodbye![/dim]")
                break

            if not user_input.strip():
                continue

            with console.status("[yellow]Thinking...[/yellow]", spinner="dots"):
                try:
                    response = asyncio.run(api_request("POST", "/messages", {"content": user_input}))
                except httpx.ConnectError:
                    console.print("[red]Error: Cannot connect to StreakMind. Is the server running?[/red]")
                    continue
                except Exception as e:
                    console.print(f"[red]Error: {e}[/red]")
                    continue

            console.print("[bold green]StreakMind > [/bold green]")
            reply = response.get("reply", "")
            if reply:
                console.print(Markdown(reply))
            else:
                console.print("[dim]No response[/dim]")

            footer = format_reply_footer(response)
            if footer:
                console.print(f"[dim]{footer}[/dim]")

            console.print()

        except KeyboardInterrupt:
            console.print("\n[dim]Use 'exit' to quit[/dim]")
        except EOFError:
            break


@app.command()
def run(message: str = typer.Argument(..., help="Message to send, e.g. 'Did 30 minutes of coding'")):
    """Send a single message and print the reply."""
    try:
        response = asyncio.run(api_request("POST", "/messages", {"content": message}))
        print(response.get("reply", ""))
        footer = format_reply_footer(response)
        if footer:
            console.print(f"[dim]{footer}[/dim]")
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to StreakMind. Is the server running?[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Stats Commands
# =============================================================================

@app.command()
def stats():
    """Show total points, streaks and badges."""
    try:
        response = asyncio.run(api_request("GET", "/stats"))
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to StreakMind API[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Total points:[/bold] {response.get('total_points', 0)}\n")

    table = Table(title="Streaks", style="bold white")
    table.add_column("Activity", style="cyan")
    table.add_column("Days", justify="right")
    for activity, days in response.get("streaks", {}).items():
        table.add_row(activity, str(days))
    console.print(table)

    badges = response.get("badges", [])
    if badges:
        console.print("\n[bold]Badges[/bold]")
        for badge in badges:
            console.print(f"  {badge['icon']} {badge['name']} [dim]({badge['description']})[/dim]")


@app.command()
def logs(limit: int = typer.Option(10, "--limit", "-n", help="Number of entries to show")):
    """Show the most recent log entries."""
    try:
        response = asyncio.run(api_request("GET", "/stats"))
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to StreakMind API[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    entries = response.get("logs", [])[:limit]
    if not entries:
        console.print("[dim]Nothing logged yet[/dim]")
        return

    table = Table(title="Recent Logs", style="bold white")
    table.add_column("Date", style="cyan", width=12)
    table.add_column("Activity", style="magenta")
    table.add_column("Amount", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("ID", style="dim")
    for entry in entries:
        table.add_row(
            entry["date"], entry["activity"], f"{entry['amount']:g} {entry['unit']}",
            str(entry["points"]), entry["id"],
        )
    console.print(table)


@app.command()
def activities():
    """List tracked activities."""
    try:
        response = asyncio.run(api_request("GET", "/stats"))
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to StreakMind API[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Activities", style="bold white")
    table.add_column("Name", style="cyan")
    table.add_column("Chart", style="magenta")
    table.add_column("Points/unit", justify="right")
    table.add_column("Streak", justify="right")
    streaks = response.get("streaks", {})
    for name, activity in response.get("activities", {}).items():
        rate = activity.get("custom_points_per_unit")
        table.add_row(
            name, activity.get("visualization_type", ""),
            "-" if rate is None else f"{rate:g}", str(streaks.get(name, 0)),
        )
    console.print(table)


@app.command()
def memory(
    clear: Optional[List[str]] = typer.Option(None, "--clear", help="Section or category to reset (repeatable), or 'all'"),
):
    """Show what StreakMind remembers about you."""
    try:
        if clear:
            response = asyncio.run(api_request("POST", "/memory/clear", {"fields": clear}))
            console.print(f"[green]{response.get('message', 'Cleared')}[/green]")
            return
        response = asyncio.run(api_request("GET", "/memory"))
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to StreakMind API[/red]")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        console.print(f"[red]Error: {e.response.text}[/red]")
        raise typer.Exit(1)

    table = Table(title="Memory", style="bold white")
    table.add_column("Category", style="cyan")
    table.add_column("Remembered")
    if response.get("name"):
        table.add_row("name", response["name"])
    for section in ("preferences", "personal_context", "conversation_context"):
        for key, value in response.get(section, {}).items():
            if isinstance(value, list):
                value = ", ".join(value)
            if value:
                table.add_row(key, str(value))
    console.print(table)


@app.command("delete-log")
def delete_log(entry_id: str = typer.Argument(..., help="Log entry ID (see 'streakmind logs')")):
    """Delete one log entry."""
    try:
        response = asyncio.run(api_request("DELETE", f"/logs/{entry_id}"))
        console.print(f"[green]{response.get('message', 'Deleted')}[/green]")
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            console.print(f"[yellow]No log entry with ID {entry_id}[/yellow]")
        else:
            console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except httpx.ConnectError:
        console.print("[red]Error: Cannot connect to StreakMind API[/red]")
        raise typer.Exit(1)


# =============================================================================
# Service Commands
# =============================================================================

@app.command()
def health():
    """Check that the API is reachable."""
    try:
        response = asyncio.run(api_request("GET", "/health", timeout=15.0))
        console.print(f"[green]API Status:[/green] {response.get('status', 'unknown')}")
        llm_status = response.get("llm_status", "unknown")
        color = "green" if llm_status == "healthy" else "yellow"
        console.print(f"[{color}]LLM Status:[/{color}] {llm_status}")
    except Exception:
        console.print("[yellow]API not reachable[/yellow]")
        raise typer.Exit(1)


@app.command()
def config(
    action: str = typer.Argument("show", help="'show' for effective values, 'file' for config.yml")
):
    """Show effective configuration or the raw config file."""
    from streakmind.core.config import PROJECT_ROOT, get_config_source, settings

    if action == "file":
        config_path = PROJECT_ROOT / "config.yml"
        if not config_path.exists():
            console.print(f"[yellow]No config file at {config_path}[/yellow]")
            console.print("[dim]Copy config.example.yml to config.yml to customize[/dim]")
            return
        syntax = Syntax(config_path.read_text(), "yaml", theme="monokai", line_numbers=True)
        console.print(syntax)
        return

    table = Table(title="StreakMind Configuration", style="bold white")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    rows = [
        ("paths.data", settings.paths.data),
        ("llm.base_url", settings.llm.base_url),
        ("llm.model_name", settings.llm.model_name),
        ("llm.timeout_seconds", settings.llm.timeout_seconds),
        ("tracking.streak_policy", settings.tracking.streak_policy),
        ("tracking.stats_log_limit", settings.tracking.stats_log_limit),
        ("user.timezone_offset_hours", settings.user.timezone_offset_hours),
    ]
    for key, value in rows:
        table.add_row(key, str(value), get_config_source(key))
    console.print(table)


@app.command()
def version():
    """Show StreakMind version."""
    from streakmind import __version__
    console.print(f"[bold]StreakMind {__version__}[/bold]")


# =============================================================================
# Main Entry Point
# =============================================================================

def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
