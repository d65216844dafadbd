"""
Export Workflow (Force Sync)

Logs into the portal, walks the member export wizard and saves the
resulting CSV roster to the local download directory.

The portal is a server-rendered WebForms application: it may show an
"outstanding applications" modal a few times after login and needs short
settle delays between wizard steps.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from playwright.async_api import Page

from ..browser.pages import is_visible_within, open_page
from ..browser.provider import BrowserSessionProvider
from ..browser.site import SiteAdapter
from ..config import BrowserConfig, WorkflowTimings, default_download_dir
from ..models import Credentials, ExportedFile, WorkflowResult
from .login import check_request, submit_login
from .retry import run_bounded

logger = logging.getLogger(__name__)


def fallback_filename(now: datetime) -> str:
    """Name used when the portal does not suggest one."""
    return f"export_{now:%Y%m%d_%H%M%S}.csv"


class ExportWorkflow:
    """
    Downloads the member roster export for one fraternal unit.
    """

    def __init__(
        self,
        provider: BrowserSessionProvider,
        site: SiteAdapter,
        default_url: Optional[str] = None,
        download_dir: Optional[Path] = None,
        browser_config: Optional[BrowserConfig] = None,
        timings: Optional[WorkflowTimings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.provider = provider
        self.site = site
        self.default_url = default_url
        self.download_dir = Path(download_dir) if download_dir else default_download_dir()
        self.browser_config = browser_config or provider.config
        self.timings = timings or WorkflowTimings()
        self._sleep = sleep
        self._clock = clock

    async def run(self, credentials: Credentials) -> WorkflowResult:
        """
        Log in and download the roster export.

        Args:
            credentials: Caller-supplied credentials

        Returns:
            WorkflowResult with ExportedFile data on success, 400 for incomplete
            input or rejected credentials, 500 for any other failure
        """
        logger.info(f"Starting ForceSync for MID: {credentials.member_id}")

        login_url, rejection = check_request(credentials, self.default_url)
        if rejection is not None:
            return rejection

        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)

            browser = await self.provider.acquire()
            async with open_page(browser, self.browser_config, accept_downloads=True) as page:
                return await self._export(page, credentials, login_url)
        except Exception as e:
            logger.error(f"Error in ForceSync for MID: {credentials.member_id}", exc_info=True)
            return WorkflowResult.internal_error(f"Force sync error: {e}")

    async def _export(self, page: Page, credentials: Credentials, login_url: str) -> WorkflowResult:
        timings = self.timings
        controls = self.site.locate_export_controls()

        await submit_login(page, self.site, credentials, login_url)
        await page.wait_for_load_state("networkidle")

        if await is_visible_within(
            page, self.site.locate_error_banner(), timings.export_error_probe_timeout
        ):
            logger.warning(f"ForceSync login rejected for MID: {credentials.member_id}")
            return WorkflowResult.bad_request("Wrong Credentials")

        await self._dismiss_modals(page, controls.outstanding_apps_modal_ok)

        # Export wizard
        await page.hover(controls.main_menu)
        await page.click(controls.export_menu_item)
        await self._sleep(timings.menu_settle)

        await page.check(controls.select_all_fields)
        await self._sleep(timings.fields_settle)

        if await page.locator(controls.move_right).is_visible():
            await page.click(controls.move_right)

        for status_checkbox in controls.member_statuses:
            await page.check(status_checkbox)

        async with page.expect_download(timeout=timings.download_timeout) as download_info:
            await page.click(controls.export_button)
        download = await download_info.value

        file_name = download.suggested_filename or fallback_filename(self._clock())
        file_path = self.download_dir / file_name
        await download.save_as(file_path)

        logger.info(f"Force sync completed successfully. File saved: {file_path}")
        return WorkflowResult.ok(
            "Force sync completed successfully",
            data=ExportedFile(file_path=str(file_path), file_name=file_name).model_dump(by_alias=True),
        )

    async def _dismiss_modals(self, page: Page, modal_ok: str) -> None:
        timings = self.timings

        async def dismiss(timeout: int) -> None:
            if await is_visible_within(page, modal_ok, timeout):
                await page.click(modal_ok)
                await self._sleep(timings.modal_settle)

        await run_bounded(
            dismiss,
            max_attempts=timings.modal_attempts,
            per_attempt_timeout=timings.modal_probe_timeout,
            name="Modal handling",
        )
