"""
Login steps shared by the validation and export workflows.
"""

import logging
from typing import Optional

from playwright.async_api import Page

from ..browser.site import SiteAdapter
from ..models import Credentials, WorkflowResult

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "All credential fields are required"
MISSING_URL_MESSAGE = "ICL URL is missing in configuration"


def check_request(
    credentials: Credentials,
    default_url: Optional[str],
) -> tuple[Optional[str], Optional[WorkflowResult]]:
    """
    Validate credentials and resolve the login URL before touching the browser.

    Args:
        credentials: Caller-supplied credentials
        default_url: Configured login URL

    Returns:
        (login_url, None) when the request can proceed, otherwise
        (None, bad request result)
    """
    missing = credentials.missing_fields()
    if missing:
        logger.warning(f"Rejected request for MID {credentials.member_id!r}: missing {', '.join(missing)}")
        return None, WorkflowResult.bad_request(MISSING_FIELDS_MESSAGE)

    login_url = credentials.icl_url or default_url
    if not login_url:
        logger.warning("ICL URL is missing in configuration")
        return None, WorkflowResult.bad_request(MISSING_URL_MESSAGE)

    return login_url, None


async def submit_login(
    page: Page,
    site: SiteAdapter,
    credentials: Credentials,
    login_url: str,
    field_timeout: Optional[int] = None,
) -> None:
    """
    Open the login page, fill the form and submit it.

    Args:
        page: Request-scoped page
        site: Portal selectors
        credentials: Member credentials
        login_url: Portal login URL
        field_timeout: Wait bound for the username field in ms
            (page default timeout if None)
    """
    logger.info(f"Navigating to ICL URL: {login_url}")
    await page.goto(login_url, wait_until="networkidle")

    if field_timeout is None:
        await page.wait_for_selector(site.locate_username_field())
    else:
        await page.wait_for_selector(site.locate_username_field(), timeout=field_timeout)

    logger.info(f"Filling login form for MID: {credentials.member_id}")
    for selector, value in site.login_fields(credentials):
        await page.fill(selector, value)

    logger.info(f"Submitting login form for MID: {credentials.member_id}")
    await page.click(site.locate_login_button())
