"""
Automation Gateway

Facade between the HTTP layer and the portal workflows. Parses request
bodies, delegates to the workflows and guarantees that every call ends in a
well-formed WorkflowResult, never an exception.
"""

import logging
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from .browser.provider import BrowserSessionProvider, create_provider
from .browser.site import SiteAdapter, create_site
from .config import ServiceConfig
from .models import Credentials, WorkflowResult, WorkflowStatus
from .workflows import CredentialValidationWorkflow, ExportWorkflow

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"
NULL_RESULT_MESSAGE = "Internal service returned null response"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def parse_credentials(body: Any) -> Optional[Credentials]:
    """
    Build Credentials from a decoded JSON body.

    Args:
        body: Decoded JSON value (None when the body was absent or unparseable)

    Returns:
        Credentials, or None if the body is not a valid credentials object
    """
    if not isinstance(body, dict):
        return None
    try:
        return Credentials.model_validate(body)
    except ValidationError as e:
        logger.warning(f"Invalid credentials body: {e.error_count()} validation error(s)")
        return None


class AutomationGateway:
    """
    Entry point used by the HTTP routes and the CLI.

    Provides:
    - validate_credentials(): run the credential validation workflow
    - force_sync(): run the export workflow
    - health(): report whether the browser can be acquired
    - diagnostics(): liveness echo with no browser work
    - shutdown(): release the shared browser
    """

    def __init__(
        self,
        provider: BrowserSessionProvider,
        validation: CredentialValidationWorkflow,
        export: ExportWorkflow,
    ):
        self.provider = provider
        self.validation = validation
        self.export = export

    async def validate_credentials(self, body: Any) -> WorkflowResult:
        """Validate the credentials in a request body."""
        logger.info("=== VALIDATE CREDENTIALS CALLED ===")
        result = await self._dispatch("ValidateCredentials", body, self.validation.run)
        logger.info(
            f"ValidateCredentials completed with status: {result.status_code}, "
            f"Success: {result.success}, Message: {result.message}"
        )
        return result

    async def force_sync(self, body: Any) -> WorkflowResult:
        """Download the roster export for the credentials in a request body."""
        result = await self._dispatch("ForceSync", body, self.export.run)
        logger.info(
            f"ForceSync completed with status: {result.status_code}, Success: {result.success}"
        )
        return result

    async def _dispatch(
        self,
        name: str,
        body: Any,
        workflow: Callable[[Credentials], Awaitable[Optional[WorkflowResult]]],
    ) -> WorkflowResult:
        credentials = body if isinstance(body, Credentials) else parse_credentials(body)
        if credentials is None:
            logger.warning(f"{name}: null or invalid credentials received")
            return WorkflowResult.bad_request(INVALID_BODY_MESSAGE)

        logger.info(f"Processing {name} for MID: {credentials.member_id}")

        try:
            result = await workflow(credentials)
        except Exception:
            logger.error(f"Error in {name}", exc_info=True)
            return WorkflowResult.internal_error(INTERNAL_ERROR_MESSAGE)

        if result is None:
            return WorkflowResult.internal_error(NULL_RESULT_MESSAGE)
        return result

    async def health(self) -> WorkflowResult:
        """
        Check that the shared browser can be acquired.

        No page is opened. Always reports status 200; success carries the
        health flag.
        """
        logger.info("Health check called")
        try:
            await self.provider.acquire()
            healthy = self.provider.is_alive()
        except Exception:
            logger.error("Health check failed", exc_info=True)
            healthy = False

        logger.info(f"Health check completed: Success={healthy}")
        return WorkflowResult(
            status_code=WorkflowStatus.SUCCESS,
            success=healthy,
            message="Service is healthy" if healthy else "Service is not healthy",
        )

    def diagnostics(self) -> dict[str, Any]:
        """Liveness echo for the test endpoint."""
        logger.info("Test endpoint called")
        return {
            "message": "API is working",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "machine": platform.node(),
            "success": True,
        }

    async def shutdown(self) -> None:
        """Release the shared browser."""
        await self.provider.release()


def create_gateway(
    config: Optional[ServiceConfig] = None,
    provider: Optional[BrowserSessionProvider] = None,
    site: Optional[SiteAdapter] = None,
) -> AutomationGateway:
    """
    Factory function wiring provider, site adapter and workflows.

    Args:
        config: Service configuration (uses env if None)
        provider: Browser provider (a new one from config.browser if None)
        site: Portal site adapter (the legacy ICL portal if None)

    Returns:
        Configured AutomationGateway
    """
    config = config or ServiceConfig.from_env()
    provider = provider or create_provider(config.browser)
    site = site or create_site()

    validation = CredentialValidationWorkflow(
        provider,
        site,
        default_url=config.icl_url,
        browser_config=config.browser,
        timings=config.timings,
    )
    export = ExportWorkflow(
        provider,
        site,
        default_url=config.icl_url,
        download_dir=Path(config.download_dir),
        browser_config=config.browser,
        timings=config.timings,
    )
    return AutomationGateway(provider, validation, export)
