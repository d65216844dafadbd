"""
Rich TUI Interface Module

Terminal output for the CLI commands that run a workflow once.
"""

from moose_automation.tui.console import (
    ServiceConsole,
    TUIConfig,
    get_console,
)
from moose_automation.tui.result import (
    print_error,
    print_workflow_result,
)

__all__ = [
    "ServiceConsole",
    "TUIConfig",
    "get_console",
    "print_error",
    "print_workflow_result",
]
