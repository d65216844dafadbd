"""
Configuration and Logging Setup

Provides centralized configuration and logging for the Moose automation service.
Settings are read from environment variables (and a local .env file).

Usage:
    from moose_automation.config import ServiceConfig, configure_logging, get_logger

    # Configure at application startup
    configure_logging()
    config = ServiceConfig.from_env()

    # Get logger in any module
    logger = get_logger(__name__)
"""

import logging
import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Default configuration
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s: %(message)s"

DEFAULT_API_PREFIX = "/api/BrowserAutomation"
# Local admin frontend and the portal itself
DEFAULT_CORS_ORIGINS = ("http://localhost:4200", "https://secure.mooseintl.org")
DOWNLOAD_SUBFOLDER = "MBES"

# Chromium flags for restricted hosting environments (containers, services)
DEFAULT_BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-web-security",
    "--allow-running-insecure-content",
)

# Valid log levels
VALID_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_TRUE_VALUES = ("true", "1", "yes")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in _TRUE_VALUES


def default_download_dir() -> Path:
    """
    Per-user application data folder used for roster exports.

    Uses LOCALAPPDATA on Windows, XDG_DATA_HOME elsewhere, and falls back
    to ~/.local/share.
    """
    base = os.getenv("LOCALAPPDATA") or os.getenv("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / DOWNLOAD_SUBFOLDER


@dataclass
class BrowserConfig:
    """
    Launch options for the shared Chromium instance.
    """

    headless: bool = True

    # Optional Playwright channel ("chrome", "msedge"); None uses bundled Chromium
    channel: Optional[str] = None

    args: tuple[str, ...] = DEFAULT_BROWSER_ARGS

    viewport_width: int = 1280
    viewport_height: int = 720

    # Page action / navigation timeout in ms
    page_timeout: int = 30000

    # Bounded wait when closing the browser at shutdown, in seconds
    close_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "BrowserConfig":
        """
        Create BrowserConfig from environment variables.

        Environment variables:
            BROWSER_HEADLESS: true/false (default: true)
            BROWSER_CHANNEL: Playwright channel name (default: bundled chromium)
            PAGE_TIMEOUT: int in ms (default: 30000)
        """
        return cls(
            headless=_env_flag("BROWSER_HEADLESS", "true"),
            channel=os.getenv("BROWSER_CHANNEL") or None,
            page_timeout=int(os.getenv("PAGE_TIMEOUT", "30000")),
        )

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}


@dataclass
class WorkflowTimings:
    """
    Timeouts (ms) and settle delays (s) used by the portal workflows.
    """

    login_field_timeout: int = 15000
    login_idle_timeout: int = 20000
    error_probe_timeout: int = 3000
    success_probe_timeout: int = 5000
    export_error_probe_timeout: int = 5000
    modal_probe_timeout: int = 2000
    modal_attempts: int = 3
    download_timeout: int = 60000

    modal_settle: float = 1.0
    menu_settle: float = 2.0
    fields_settle: float = 2.0

    @classmethod
    def from_env(cls) -> "WorkflowTimings":
        """
        Create WorkflowTimings from environment variables.

        Environment variables:
            SETTLE_DELAY_SCALE: float multiplier for settle delays (default: 1.0)
            DOWNLOAD_TIMEOUT: int in ms (default: 60000)
        """
        scale = float(os.getenv("SETTLE_DELAY_SCALE", "1.0"))
        timings = cls(download_timeout=int(os.getenv("DOWNLOAD_TIMEOUT", "60000")))
        return timings.scaled(scale)

    def scaled(self, factor: float) -> "WorkflowTimings":
        """Return a copy with every settle delay multiplied by factor."""
        return replace(
            self,
            modal_settle=self.modal_settle * factor,
            menu_settle=self.menu_settle * factor,
            fields_settle=self.fields_settle * factor,
        )


@dataclass
class ServiceConfig:
    """
    Top-level service configuration.

    Reads from environment variables with sensible defaults.
    """

    # Default portal login URL, overridable per request
    icl_url: Optional[str] = None

    download_dir: Path = field(default_factory=default_download_dir)

    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    api_prefix: str = DEFAULT_API_PREFIX

    host: str = "127.0.0.1"
    port: int = 5000

    # Run `playwright install chromium` before serving
    install_browsers_on_start: bool = False

    browser: BrowserConfig = field(default_factory=BrowserConfig)
    timings: WorkflowTimings = field(default_factory=WorkflowTimings)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """
        Create ServiceConfig from environment variables.

        Environment variables:
            ICL_URL: default login URL of the portal (default: unset)
            DOWNLOAD_DIR: export directory (default: per-user data dir/MBES)
            CORS_ORIGINS: comma-separated origins (default: localhost:4200 + portal)
            API_PREFIX: route prefix (default: /api/BrowserAutomation)
            HOST / PORT: bind address (default: 127.0.0.1:5000)
            INSTALL_BROWSERS_ON_START: true/false (default: false)
        """
        origins_str = os.getenv("CORS_ORIGINS", "")
        origins = tuple(o.strip() for o in origins_str.split(",") if o.strip())

        download_dir = os.getenv("DOWNLOAD_DIR")

        return cls(
            icl_url=os.getenv("ICL_URL") or None,
            download_dir=Path(download_dir) if download_dir else default_download_dir(),
            cors_origins=origins or DEFAULT_CORS_ORIGINS,
            api_prefix=os.getenv("API_PREFIX", DEFAULT_API_PREFIX).rstrip("/"),
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "5000")),
            install_browsers_on_start=_env_flag("INSTALL_BROWSERS_ON_START", "false"),
            browser=BrowserConfig.from_env(),
            timings=WorkflowTimings.from_env(),
        )


def get_log_level() -> int:
    """
    Get the log level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (e.g., logging.INFO)

    Supported values:
        DEBUG, INFO, WARNING, ERROR, CRITICAL
    """
    level_str = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    if level_str not in VALID_LEVELS:
        print(
            f"Warning: Invalid LOG_LEVEL '{level_str}'. "
            f"Valid values: {', '.join(VALID_LEVELS.keys())}. "
            f"Using {DEFAULT_LOG_LEVEL}.",
            file=sys.stderr,
        )
        return VALID_LEVELS[DEFAULT_LOG_LEVEL]

    return VALID_LEVELS[level_str]


def configure_logging(
    level: Optional[int] = None,
    verbose: bool = False,
) -> None:
    """
    Configure logging for the automation service.

    Should be called once at startup, before the server or a workflow runs.

    Args:
        level: Override log level (default: from LOG_LEVEL env var)
        verbose: Use detailed format with timestamps (default: simple format)
    """
    if level is None:
        level = get_log_level()

    log_format = LOG_FORMAT if verbose else LOG_FORMAT_SIMPLE

    logging.basicConfig(
        level=level,
        format=log_format,
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("moose_automation").setLevel(level)

    # Quiet noisy third-party loggers in non-debug mode
    if level > logging.DEBUG:
        logging.getLogger("playwright").setLevel(logging.WARNING)
        logging.getLogger("asyncio").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
