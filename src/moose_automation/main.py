"""
Moose Automation CLI Entry Point

Runs the HTTP service, or a single workflow from the terminal.

Usage:
    moose-automation serve --port 5000
    moose-automation validate --member-id 123 --lastname Doe --fru-number 42 --passcode secret
    moose-automation force-sync --member-id 123 --lastname Doe --fru-number 42 --passcode secret
    moose-automation install-browsers
"""

import argparse
import asyncio
import logging
import subprocess
import sys
from typing import Optional

import uvicorn

from .config import ServiceConfig, configure_logging
from .gateway import create_gateway
from .models import Credentials, WorkflowResult
from .tui import get_console, print_error, print_workflow_result

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="moose-automation",
        description="Moose portal browser automation service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    moose-automation serve --host 0.0.0.0 --port 5000
    moose-automation validate --member-id 123 --lastname Doe --fru-number 42 --passcode secret
    moose-automation force-sync --member-id 123 --lastname Doe --fru-number 42 --passcode secret --url https://portal/login.aspx
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Detailed log format with timestamps",
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode with debug output",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT or 5000)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    for name, help_text in (
        ("validate", "Validate credentials once"),
        ("force-sync", "Download the roster export once"),
    ):
        workflow = commands.add_parser(name, help=help_text)
        workflow.add_argument("--member-id", required=True)
        workflow.add_argument("--lastname", required=True)
        workflow.add_argument("--fru-number", required=True)
        workflow.add_argument("--passcode", required=True)
        workflow.add_argument("--url", default=None, help="Login URL (default: ICL_URL)")
        workflow.add_argument(
            "--headed",
            action="store_true",
            help="Show the browser window",
        )

    commands.add_parser("install-browsers", help="Install Playwright Chromium")

    return parser.parse_args(argv)


def install_browsers() -> int:
    """Run `playwright install chromium`."""
    logger.info("Installing Playwright Chromium")
    completed = subprocess.run(
        [sys.executable, "-m", "playwright", "install", "chromium"],
        check=False,
    )
    if completed.returncode != 0:
        logger.warning(f"Playwright install exited with code {completed.returncode}")
    return completed.returncode


def serve(config: ServiceConfig, reload: bool = False, verbose: bool = False) -> int:
    """Run the FastAPI app with uvicorn."""
    if config.install_browsers_on_start:
        install_browsers()

    uvicorn.run(
        "moose_automation.api:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=reload,
        log_level="debug" if verbose else "info",
    )
    return 0


async def run_workflow(command: str, credentials: Credentials, config: ServiceConfig) -> WorkflowResult:
    """
    Run one workflow through the gateway, then release the browser.

    Args:
        command: "validate" or "force-sync"
        credentials: Credentials from the command line
        config: Service configuration

    Returns:
        The workflow outcome
    """
    gateway = create_gateway(config)
    console = get_console()
    try:
        with console.status(f"Running {command} for MID {credentials.member_id}..."):
            if command == "validate":
                return await gateway.validate_credentials(credentials)
            return await gateway.force_sync(credentials)
    finally:
        await gateway.shutdown()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.dev else None,
        verbose=args.verbose or args.dev,
    )
    config = ServiceConfig.from_env()

    if args.command == "install-browsers":
        return install_browsers()

    if args.command == "serve":
        if args.host:
            config.host = args.host
        if args.port:
            config.port = args.port
        return serve(config, reload=args.reload, verbose=args.verbose)

    if args.headed:
        config.browser.headless = False

    credentials = Credentials(
        member_id=args.member_id,
        lastname=args.lastname,
        fru_number=args.fru_number,
        fraternal_unit_passcode=args.passcode,
        icl_url=args.url,
    )

    try:
        result = asyncio.run(run_workflow(args.command, credentials, config))
    except KeyboardInterrupt:
        get_console().print("\n[yellow]Interrupted by user[/yellow]")
        return 1
    except Exception as e:
        print_error(str(e), error_type=type(e).__name__)
        return 1

    print_workflow_result(result, title=f"[{args.command.upper()}]")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
