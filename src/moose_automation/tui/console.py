"""
Rich Console Setup

Terminal output for the one-shot CLI commands (validate, force-sync).
Configured via environment variables for customizable appearance.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.style import Style
from rich.theme import Theme


@dataclass
class TUIConfig:
    """
    TUI configuration loaded from environment variables.

    Attributes:
        color_result: Color for outcome panels
        show_timestamps: Whether to display timestamps in panel titles
    """

    color_result: str = "yellow"
    show_timestamps: bool = True

    @classmethod
    def from_env(cls) -> "TUIConfig":
        """Load configuration from environment variables."""
        return cls(
            color_result=os.getenv("COLOR_RESULT", "yellow"),
            show_timestamps=os.getenv("SHOW_TIMESTAMPS", "true").lower() == "true",
        )


def create_theme(config: TUIConfig) -> Theme:
    """Create a Rich theme from TUI configuration."""
    return Theme(
        {
            "result": Style(color=config.color_result, bold=True),
        }
    )


class ServiceConsole:
    """
    Themed wrapper around a Rich console.
    """

    def __init__(self, config: Optional[TUIConfig] = None, console: Optional[Console] = None):
        """
        Args:
            config: TUI configuration. If None, loads from environment.
            console: Underlying Rich console (tests pass a recording console)
        """
        self.config = config or TUIConfig.from_env()
        self.console = console or Console()
        self.console.push_theme(create_theme(self.config))

    def timestamp(self) -> str:
        """Formatted timestamp if enabled."""
        if self.config.show_timestamps:
            return datetime.now().strftime("%H:%M:%S")
        return ""

    def title(self, label: str) -> str:
        stamp = self.timestamp()
        return f"{stamp} {label}" if stamp else label

    def print(self, *args, **kwargs) -> None:
        """Passthrough to underlying Rich console."""
        self.console.print(*args, **kwargs)

    def status(self, message: str):
        """Create a status context for progress indication."""
        return self.console.status(message)


# Global console instance
_console: Optional[ServiceConsole] = None


def get_console() -> ServiceConsole:
    """Get or create the global console instance."""
    global _console
    if _console is None:
        _console = ServiceConsole()
    return _console
