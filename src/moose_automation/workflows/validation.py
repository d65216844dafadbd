"""
Credential Validation Workflow

Logs into the portal with the supplied credentials and reports whether the
portal accepted them. The portal's own error banner text is treated as the
authoritative rejection reason.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeout

from ..browser.pages import is_visible_within, open_page
from ..browser.provider import BrowserSessionProvider
from ..browser.site import SiteAdapter
from ..config import BrowserConfig, WorkflowTimings
from ..models import Credentials, WorkflowResult
from .login import check_request, submit_login

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Login page took too long to respond. Please try again."


class CredentialValidationWorkflow:
    """
    Drives one login attempt per call.

    Each call opens its own context and page on the shared browser and
    closes them before returning.
    """

    def __init__(
        self,
        provider: BrowserSessionProvider,
        site: SiteAdapter,
        default_url: Optional[str] = None,
        browser_config: Optional[BrowserConfig] = None,
        timings: Optional[WorkflowTimings] = None,
    ):
        self.provider = provider
        self.site = site
        self.default_url = default_url
        self.browser_config = browser_config or provider.config
        self.timings = timings or WorkflowTimings()

    async def run(self, credentials: Credentials) -> WorkflowResult:
        """
        Validate credentials against the portal.

        Args:
            credentials: Caller-supplied credentials

        Returns:
            WorkflowResult: 200 when logged in, 400 when the input is incomplete
            or the portal rejects the login, 500 on browser errors or timeouts
        """
        logger.info(f"Validating credentials for MID: {credentials.member_id}")

        login_url, rejection = check_request(credentials, self.default_url)
        if rejection is not None:
            return rejection

        try:
            browser = await self.provider.acquire()
            async with open_page(browser, self.browser_config) as page:
                return await self._login(page, credentials, login_url)
        except (PlaywrightTimeout, asyncio.TimeoutError):
            logger.error(
                f"Timeout error validating credentials for MID: {credentials.member_id}",
                exc_info=True,
            )
            return WorkflowResult.internal_error(TIMEOUT_MESSAGE)
        except Exception as e:
            logger.error(
                f"Error validating credentials for MID: {credentials.member_id}",
                exc_info=True,
            )
            return WorkflowResult.internal_error(f"Validation error: {e}")

    async def _login(self, page, credentials: Credentials, login_url: str) -> WorkflowResult:
        timings = self.timings

        await submit_login(
            page,
            self.site,
            credentials,
            login_url,
            field_timeout=timings.login_field_timeout,
        )
        await page.wait_for_load_state("networkidle", timeout=timings.login_idle_timeout)

        error_banner = self.site.locate_error_banner()
        if await is_visible_within(page, error_banner, timings.error_probe_timeout):
            error_text = (await page.locator(error_banner).inner_text()).strip()
            logger.warning(f"Login failed for MID {credentials.member_id}: {error_text}")
            return WorkflowResult.bad_request(f"Wrong Credential: {error_text}")

        marker = self.site.locate_success_marker()
        if not await is_visible_within(page, marker, timings.success_probe_timeout):
            logger.warning(f"Could not confirm login for MID {credentials.member_id}")
            return WorkflowResult.bad_request("Login failed - could not verify successful login")

        logger.info(f"Login successful for MID: {credentials.member_id}")
        return WorkflowResult.ok("Credentials validated successfully")
