"""
Result panels for CLI workflow runs.
"""

from typing import Any, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models import WorkflowResult
from .console import ServiceConsole, get_console


def print_error(
    error_message: str,
    *,
    error_type: Optional[str] = None,
    console: Optional[ServiceConsole] = None,
) -> None:
    """
    Print an error panel.

    Args:
        error_message: The error message
        error_type: Type/category of error
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    content = Text()
    content.append("Error", style="bold red")
    if error_type:
        content.append(f" ({error_type})", style="dim red")
    content.append("\n\n")
    content.append(error_message)

    console.print(
        Panel(
            content,
            title=console.title("[ERROR]"),
            title_align="left",
            border_style="red",
            padding=(0, 1),
        )
    )


def _data_table(data: dict[str, Any]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    for key, value in data.items():
        str_value = str(value)
        if len(str_value) > 100:
            str_value = str_value[:97] + "..."
        table.add_row(key, str_value)
    return table


def print_workflow_result(
    result: WorkflowResult,
    *,
    title: Optional[str] = None,
    console: Optional[ServiceConsole] = None,
) -> None:
    """
    Print a workflow outcome with its status code and payload.

    Args:
        result: Outcome to display
        title: Custom title (overrides default "[RESULT]")
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    text = Text()
    status_icon = "✓" if result.success else "✗"
    status_style = "green" if result.success else "red"
    text.append(f"{status_icon} ", style=f"bold {status_style}")
    text.append(f"[{int(result.status_code)}] ", style="bold")
    text.append(result.message)

    body: Any = text
    if isinstance(result.data, dict) and result.data:
        grid = Table.grid()
        grid.add_row(text)
        grid.add_row(_data_table(result.data))
        body = grid

    console.print(
        Panel(
            body,
            title=console.title(title or "[RESULT]"),
            title_align="left",
            border_style="result" if result.success else "red",
            padding=(0, 1),
        )
    )
