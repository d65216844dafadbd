"""
Shared fixtures and Playwright test doubles.

The fakes implement only the slice of the Playwright async API the service
uses: chromium.launch, browser.new_context, context.new_page and the page,
locator and download calls made by the workflows. Every call is recorded so
tests can assert on navigation, form filling and resource release.
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeout

from moose_automation.browser.provider import BrowserSessionProvider
from moose_automation.browser.site import LegacyPortalSite
from moose_automation.config import BrowserConfig, ServiceConfig, WorkflowTimings
from moose_automation.models import Credentials

SITE = LegacyPortalSite()
LOGIN_URL = "https://portal.example.org/fruadminlcl/login.aspx"


class FakeDownload:
    def __init__(self, suggested_filename: Optional[str], content: bytes = b"MemberId,LastName\n"):
        self.suggested_filename = suggested_filename
        self.content = content
        self.saved_to: Optional[Path] = None

    async def save_as(self, path) -> None:
        self.saved_to = Path(path)
        self.saved_to.write_bytes(self.content)


class FakeEventInfo:
    def __init__(self, page: "FakePage"):
        self._page = page

    @property
    def value(self):
        return self._resolve()

    async def _resolve(self):
        if self._page.download is None:
            raise PlaywrightTimeout("Timeout 60000ms exceeded while waiting for event \"download\"")
        return self._page.download


class FakeExpectDownload:
    def __init__(self, page: "FakePage", timeout: Optional[int]):
        self._page = page
        self.timeout = timeout

    async def __aenter__(self) -> FakeEventInfo:
        self._page.calls.append(("expect_download", self.timeout))
        return FakeEventInfo(self._page)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self._page = page
        self.selector = selector

    async def wait_for(self, state: str = "visible", timeout: Optional[int] = None) -> None:
        self._page.calls.append(("wait_for", self.selector, timeout))
        self._page.maybe_fail("wait_for", self.selector)
        if self.selector not in self._page.visible:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def is_visible(self) -> bool:
        return self.selector in self._page.visible

    async def inner_text(self) -> str:
        return self._page.texts.get(self.selector, "")


class FakePage:
    """
    Scriptable page.

    Attributes:
        visible: Selectors currently visible
        missing: Selectors wait_for_selector never finds
        texts: inner_text per selector
        on_click: Hooks run when a selector is clicked
        errors: Exceptions raised by (method, selector) or (method, None)
        download: Download produced by expect_download (None times out)
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.visible: set[str] = set()
        self.missing: set[str] = set()
        self.texts: dict[str, str] = {}
        self.on_click: dict[str, Callable[["FakePage"], None]] = {}
        self.errors: dict[tuple, BaseException] = {}
        self.filled: dict[str, str] = {}
        self.checked: list[str] = []
        self.clicked: list[str] = []
        self.download: Optional[FakeDownload] = None
        self.default_timeout: Optional[int] = None
        self.navigation_timeout: Optional[int] = None
        self.close_count = 0

    def maybe_fail(self, method: str, selector: Optional[str] = None) -> None:
        error = self.errors.get((method, selector)) or self.errors.get((method, None))
        if error is not None:
            raise error

    def set_default_timeout(self, timeout: int) -> None:
        self.default_timeout = timeout

    def set_default_navigation_timeout(self, timeout: int) -> None:
        self.navigation_timeout = timeout

    async def goto(self, url: str, wait_until: Optional[str] = None) -> None:
        self.calls.append(("goto", url, wait_until))
        self.maybe_fail("goto")

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None) -> None:
        self.calls.append(("wait_for_selector", selector, timeout))
        self.maybe_fail("wait_for_selector", selector)
        if selector in self.missing:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[int] = None) -> None:
        self.calls.append(("wait_for_load_state", state, timeout))
        self.maybe_fail("wait_for_load_state")

    async def fill(self, selector: str, value: str) -> None:
        self.calls.append(("fill", selector))
        self.filled[selector] = value

    async def click(self, selector: str) -> None:
        self.calls.append(("click", selector))
        self.clicked.append(selector)
        self.maybe_fail("click", selector)
        hook = self.on_click.get(selector)
        if hook is not None:
            hook(self)

    async def hover(self, selector: str) -> None:
        self.calls.append(("hover", selector))
        self.maybe_fail("hover", selector)

    async def check(self, selector: str) -> None:
        self.calls.append(("check", selector))
        self.maybe_fail("check", selector)
        self.checked.append(selector)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def expect_download(self, timeout: Optional[int] = None) -> FakeExpectDownload:
        return FakeExpectDownload(self, timeout)

    async def close(self) -> None:
        self.close_count += 1

    @property
    def navigated(self) -> bool:
        return any(call[0] == "goto" for call in self.calls)


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: dict[str, Any]):
        self.browser = browser
        self.options = options
        self.pages: list[FakePage] = []
        self.close_count = 0

    async def new_page(self) -> FakePage:
        page = FakePage()
        if self.browser.page_setup is not None:
            self.browser.page_setup(page)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_count += 1


class FakeBrowser:
    def __init__(self):
        self.contexts: list[FakeContext] = []
        self.page_setup: Optional[Callable[[FakePage], None]] = None
        self.connected = True
        self.close_count = 0
        self.close_delay: float = 0.0
        self.close_error: Optional[BaseException] = None

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **options) -> FakeContext:
        context = FakeContext(self, options)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_count += 1
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        if self.close_error is not None:
            raise self.close_error
        self.connected = False

    @property
    def last_page(self) -> FakePage:
        return self.contexts[-1].pages[-1]


class FakeChromium:
    def __init__(self, owner: "FakePlaywrightFactory"):
        self._owner = owner

    async def launch(self, **options) -> FakeBrowser:
        self._owner.launch_options.append(options)
        if self._owner.launch_errors:
            raise self._owner.launch_errors.pop(0)
        browser = FakeBrowser()
        browser.page_setup = self._owner.page_setup
        self._owner.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, owner: "FakePlaywrightFactory"):
        self.chromium = FakeChromium(owner)
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class FakePlaywrightFactory:
    """Starter passed to BrowserSessionProvider; records every start and launch."""

    def __init__(self):
        self.started: list[FakePlaywright] = []
        self.launch_options: list[dict[str, Any]] = []
        self.launch_errors: list[BaseException] = []
        self.browsers: list[FakeBrowser] = []
        self.page_setup: Optional[Callable[[FakePage], None]] = None

    async def __call__(self) -> FakePlaywright:
        playwright = FakePlaywright(self)
        self.started.append(playwright)
        return playwright

    @property
    def browser(self) -> FakeBrowser:
        return self.browsers[-1]


# Portal scenarios


def login_succeeds(page: FakePage) -> None:
    page.on_click[SITE.login_button] = lambda p: p.visible.add(SITE.success_marker)


def login_rejected(text: str) -> Callable[[FakePage], None]:
    def setup(page: FakePage) -> None:
        def show_error(p: FakePage) -> None:
            p.visible.add(SITE.error_banner)
            p.texts[SITE.error_banner] = text

        page.on_click[SITE.login_button] = show_error

    return setup


def login_unconfirmed(page: FakePage) -> None:
    """Login submits but neither the error banner nor the menu shows up."""


def export_ready(
    suggested_filename: Optional[str] = "roster_2024.csv",
    modal: bool = False,
    move_right: bool = True,
) -> Callable[[FakePage], None]:
    controls = SITE.export_controls

    def setup(page: FakePage) -> None:
        login_succeeds(page)
        if modal:
            page.visible.add(controls.outstanding_apps_modal_ok)
            page.on_click[controls.outstanding_apps_modal_ok] = (
                lambda p: p.visible.discard(controls.outstanding_apps_modal_ok)
            )
        if move_right:
            page.visible.add(controls.move_right)
        page.download = FakeDownload(suggested_filename)

    return setup


@pytest.fixture
def fast_timings() -> WorkflowTimings:
    """Default timeouts with zero settle delays."""
    return WorkflowTimings().scaled(0)


@pytest.fixture
def playwright_factory() -> FakePlaywrightFactory:
    return FakePlaywrightFactory()


@pytest.fixture
def provider(playwright_factory) -> BrowserSessionProvider:
    return BrowserSessionProvider(config=BrowserConfig(), starter=playwright_factory)


@pytest.fixture
def service_config(tmp_path, fast_timings) -> ServiceConfig:
    return ServiceConfig(
        icl_url=LOGIN_URL,
        download_dir=tmp_path / "MBES",
        timings=fast_timings,
    )


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        p_id=7,
        local_lodge_id=1234,
        member_id="100200300",
        lastname="Doe",
        fraternal_unit_type="Lodge",
        fru_number="0042",
        fraternal_unit_passcode="s3cret",
    )
