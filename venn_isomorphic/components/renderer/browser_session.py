"""
Shared, reference-counted Playwright browser.

This module provides `BrowserSession`, which owns one browser for any number
of concurrent render calls. The browser is launched on first use, reused while
at least one call holds a reference, and torn down once the last reference is
released. Concurrent callers that arrive while a launch is in progress await
that same launch instead of starting another one.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Tuple

from playwright.async_api import Browser, Playwright, async_playwright

from venn_isomorphic.core.exceptions import BrowserLaunchError, RendererError
from venn_isomorphic.core.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_BROWSER_TYPES = ("chromium", "firefox", "webkit")

# A launched browser together with the Playwright engine that started it.
LaunchedBrowser = Tuple[Playwright, Browser]


class BrowserSession:
    """
    Reference-counted owner of a single Playwright browser.

    All state is mutated between awaits on one event loop, so the counter and the
    memoized launch task are enough to decide when to launch and when to close;
    no lock is needed.

    Attributes:
        browser_type (str): The browser engine to launch ('chromium', 'firefox' or 'webkit').
        launch_options (Dict[str, Any]): Keyword arguments for `BrowserType.launch()`.
    """
    DEFAULT_BROWSER_TYPE = 'chromium'

    def __init__(self, browser_type: Optional[str] = None, launch_options: Optional[Dict[str, Any]] = None):
        """
        Args:
            browser_type (Optional[str]): Browser engine name. Defaults to `DEFAULT_BROWSER_TYPE`.
            launch_options (Optional[Dict[str, Any]]): Options forwarded to `launch()`.

        Raises:
            RendererError: If the browser type is not supported.
        """
        self.browser_type = browser_type or self.DEFAULT_BROWSER_TYPE
        if self.browser_type not in SUPPORTED_BROWSER_TYPES:
            logger.error(f"Unsupported browser type configured: {self.browser_type}")
            raise RendererError(
                f"Unsupported browser type: {self.browser_type}. Must be 'chromium', 'firefox', or 'webkit'."
            )
        self.launch_options: Dict[str, Any] = dict(launch_options or {})

        self._count = 0
        self._launch_task: Optional['asyncio.Task[LaunchedBrowser]'] = None
        self._close_task: Optional['asyncio.Task[None]'] = None
        logger.debug(f"BrowserSession configured for {self.browser_type} with launch options {self.launch_options}.")

    @property
    def active(self) -> int:
        """Number of render calls currently holding a reference to the browser."""
        return self._count

    @property
    def is_running(self) -> bool:
        """True while a launch is memoized, i.e. the browser is starting or open."""
        return self._launch_task is not None

    async def acquire(self) -> Browser:
        """
        Takes a reference to the shared browser, launching it if necessary.

        Returns:
            Browser: The ready browser.

        Raises:
            BrowserLaunchError: If the launch this call awaited failed. The reference
                                taken by this call is dropped before raising.
        """
        self._count += 1
        task = self._launch_task
        if task is None:
            logger.debug("No browser running; starting launch.")
            task = asyncio.ensure_future(self._launch())
            self._launch_task = task
        else:
            logger.debug(f"Reusing browser launch; {self._count} active reference(s).")

        try:
            # Shielded: cancelling one waiter must not cancel the launch others share.
            _, browser = await asyncio.shield(task)
        except BaseException:
            launch_failed = task.done() and (task.cancelled() or task.exception() is not None)
            if launch_failed and self._launch_task is task:
                # Forget the failed launch right away so the next call retries.
                self._launch_task = None
            await self.release()
            raise
        return browser

    async def release(self) -> None:
        """
        Drops a reference. When the last reference is dropped, the memoized launch is
        cleared and the browser is closed in the background.
        """
        if self._count <= 0:
            logger.warning("BrowserSession.release() called without a matching acquire().")
            return
        self._count -= 1
        if self._count:
            logger.debug(f"Browser reference released; {self._count} still active.")
            return

        task, self._launch_task = self._launch_task, None
        if task is not None:
            logger.debug("Last browser reference released; scheduling browser teardown.")
            self._close_task = asyncio.ensure_future(self._teardown(task, self._close_task))

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[Browser]:
        """
        Async context manager around `acquire()`/`release()`.

        The reference is released on every exit path, including errors raised
        while the browser is in use.
        """
        browser = await self.acquire()
        try:
            yield browser
        finally:
            await self.release()

    async def wait_closed(self) -> None:
        """Waits until any scheduled browser teardown has finished."""
        if self._close_task is not None:
            await asyncio.shield(self._close_task)

    async def _launch(self) -> LaunchedBrowser:
        # Never run two engines side by side: finish a teardown still in flight first.
        previous_close = self._close_task
        if previous_close is not None and not previous_close.done():
            logger.debug("Waiting for previous browser teardown before relaunching.")
            await asyncio.shield(previous_close)

        logger.debug(f"Starting Playwright and launching {self.browser_type} browser.")
        playwright: Optional[Playwright] = None
        try:
            playwright = await async_playwright().start()
            launcher = getattr(playwright, self.browser_type)
            browser = await launcher.launch(**self.launch_options)
        except Exception as e:
            logger.error(f"Failed to initialize Playwright or launch browser {self.browser_type}: {e}", exc_info=True)
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception as stop_e:
                    logger.error(f"Error stopping Playwright after failed launch: {stop_e}", exc_info=True)
            raise BrowserLaunchError(
                f"Failed to initialize Playwright or launch browser {self.browser_type}: {e}",
                original_exception=e,
            ) from e

        logger.info(f"{self.browser_type} browser launched successfully.")
        return playwright, browser

    async def _teardown(self, task: 'asyncio.Task[LaunchedBrowser]',
                        previous_close: Optional['asyncio.Task[None]']) -> None:
        if previous_close is not None and not previous_close.done():
            await asyncio.shield(previous_close)
        try:
            playwright, browser = await task
        except (Exception, asyncio.CancelledError) as e:
            # Nothing was started, or the launch already cleaned up after itself.
            logger.debug(f"Skipping teardown of a launch that did not succeed: {e!r}")
            return

        try:
            await browser.close()
            logger.info("Browser closed successfully.")
        except Exception as e:
            logger.error(f"Error closing browser: {e}", exc_info=True)
        try:
            await playwright.stop()
            logger.debug("Playwright stopped successfully.")
        except Exception as e:
            logger.error(f"Error stopping Playwright: {e}", exc_info=True)
