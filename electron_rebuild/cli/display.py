"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from electron_rebuild.rebuild.abi import RebuildDecisionResult

console = Console()


def show_banner() -> None:
    """Display the electron-rebuild banner."""
    console.print()
    console.print(
        Panel(
            "[bold cyan]electron-rebuild[/bold cyan]\n"
            "[dim]Rebuild native Node modules against Electron[/dim]",
            border_style="cyan",
            padding=(0, 2),
        )
    )


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="green",
        )
    )


def show_error(title: str, message: str) -> None:
    """Display an error message."""
    console.print()
    console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_info(title: str, message: str) -> None:
    """Display an info message."""
    console.print()
    console.print(
        Panel(
            escape(message),
            title=f"[bold]{escape(title)}[/]",
            border_style="blue",
        )
    )


def create_progress() -> Progress:
    """Create a spinner for long-running steps."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )


def show_decision(result: RebuildDecisionResult) -> None:
    """Display a rebuild decision in a formatted table.

    Args:
        result: The decision to show.
    """
    console.print()

    table = Table(title="[bold]Rebuild Check[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    if result.rebuild_needed:
        table.add_row("Status", "[bold yellow]REBUILD NEEDED[/]")
    else:
        table.add_row("Status", "[bold green]UP TO DATE[/]")
    table.add_row("Canary Module", result.canary.value)
    table.add_row("Electron ABI", result.electron_abi or "N/A")
    table.add_row("Node ABI", result.host_abi or "N/A")
    table.add_row("Reason", escape(result.reason))

    console.print(Panel(table, border_style="yellow" if result.rebuild_needed else "green"))
