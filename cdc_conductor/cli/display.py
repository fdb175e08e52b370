"""Rich output helpers for the cdc-conductor CLI."""

from rich.console import Console
from rich.panel import Panel

from cdc_conductor.validation import ConnectionValidationResult

console = Console()


def display_error(message: str) -> None:
    console.print(f"❌ [bold red]{message}[/bold red]")


def display_generic_error(error: Exception, context: str = "") -> None:
    """Display generic error with context.

    Args:
        error: Exception that occurred
        context: Optional context about where the error occurred
    """
    context_text = f" during {context}" if context else ""
    console.print(f"❌ [bold red]Error{context_text}[/bold red]")
    console.print(f"🔍 [dim]{str(error)}[/dim]")


def display_info_panel(title: str, content: str, style: str = "blue") -> None:
    panel = Panel(content, title=title, border_style=style)
    console.print(panel)


def display_validation_result(
    destination_type: str, result: ConnectionValidationResult
) -> None:
    """Display the outcome of a connection validation.

    Args:
        destination_type: Destination type tag that was validated
        result: Validation outcome
    """
    if result.valid:
        console.print(
            f"✅ [bold green]{destination_type} connection is valid[/bold green]"
        )
        if result.message:
            console.print(f"   [dim]{result.message}[/dim]")
        return

    kind = result.kind.value if result.kind else "generic"
    display_info_panel(
        f"{destination_type} connection failed ({kind})", result.message, "red"
    )
