"""
Per-call browser pages preloaded with the Venn layout library.

`open_page_session` opens a fresh page on the shared browser, loads the
packaged hosting document and injects `d3`, `venn.js` and an optional
stylesheet. The page is closed when the session ends, whatever happened
inside it.
"""
import asyncio
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Mapping, Optional

from playwright.async_api import Browser, Page

from venn_isomorphic.core.exceptions import ConfigurationError, PageSetupError
from venn_isomorphic.core.logger import get_logger

logger = get_logger(__name__)

ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")
HOST_DOCUMENT_PATH = os.path.join(ASSETS_DIR, "index.html")
HOST_DOCUMENT_URL = Path(HOST_DOCUMENT_PATH).as_uri()

DEFAULT_PAGE_TIMEOUT = 30000  # Milliseconds

DEFAULT_SCRIPT_SOURCES: Dict[str, Dict[str, str]] = {
    "d3": {"url": "https://cdn.jsdelivr.net/npm/d3@7/dist/d3.min.js"},
    "venn": {"url": "https://cdn.jsdelivr.net/npm/@upsetjs/venn.js@1/build/venn.min.js"},
}

# Injection order. venn.js binds to the global `d3` when it loads.
REQUIRED_SCRIPTS = ("d3", "venn")


def resolve_script_sources(scripts: Optional[Mapping[str, Any]] = None) -> Dict[str, Dict[str, str]]:
    """
    Merges configured script sources over the defaults and validates them.

    Each source must be a mapping with exactly one of `url` or `path`. Relative
    paths are resolved against the current working directory.

    Args:
        scripts (Optional[Mapping[str, Any]]): e.g. `{"d3": {"path": "vendor/d3.js"}}`.

    Returns:
        Dict[str, Dict[str, str]]: Keyword arguments for `Page.add_script_tag()`, by script name.

    Raises:
        ConfigurationError: If a source is malformed or a local script file does not exist.
    """
    resolved: Dict[str, Dict[str, str]] = {}
    for name in REQUIRED_SCRIPTS:
        source = (scripts or {}).get(name) or DEFAULT_SCRIPT_SOURCES[name]
        if not isinstance(source, Mapping):
            raise ConfigurationError(f"Script source for '{name}' must be a mapping with 'url' or 'path', got {source!r}.")
        url, path = source.get("url"), source.get("path")
        if bool(url) == bool(path):
            raise ConfigurationError(f"Script source for '{name}' must define exactly one of 'url' or 'path'.")
        if path:
            path = os.path.abspath(str(path))
            if not os.path.isfile(path):
                raise ConfigurationError(f"Script file for '{name}' not found at '{path}'.")
            resolved[name] = {"path": path}
        else:
            resolved[name] = {"url": str(url)}
    return resolved


async def _inject_scripts(page: Page, scripts: Mapping[str, Mapping[str, str]]) -> None:
    # A URL script tag runs as soon as it downloads, so each one is awaited before the next.
    for name in REQUIRED_SCRIPTS:
        await page.add_script_tag(**scripts[name])
        logger.debug(f"Injected script '{name}'.")


@asynccontextmanager
async def open_page_session(
    browser: Browser,
    scripts: Mapping[str, Mapping[str, str]],
    css: Optional[str] = None,
    timeout: Optional[int] = None,
) -> AsyncIterator[Page]:
    """
    Opens a page with the layout library loaded and closes it on exit.

    Args:
        browser (Browser): The shared browser to open the page on.
        scripts (Mapping[str, Mapping[str, str]]): Resolved sources from `resolve_script_sources()`.
        css (Optional[str]): URL of a stylesheet to add to the page.
        timeout (Optional[int]): Navigation timeout in milliseconds.

    Yields:
        Page: The prepared page.

    Raises:
        PageSetupError: If the page cannot be created, navigated or injected into.
    """
    effective_timeout = timeout if timeout is not None else DEFAULT_PAGE_TIMEOUT
    page: Optional[Page] = None
    try:
        try:
            # CSP bypass: scripts are added programmatically, not declared by the document.
            page = await browser.new_page(bypass_csp=True)
            await page.goto(HOST_DOCUMENT_URL, timeout=effective_timeout)

            injections = [_inject_scripts(page, scripts)]
            if css:
                injections.append(page.add_style_tag(url=css))
            # Let every injection settle before the page can be closed underneath them.
            outcomes = await asyncio.gather(*injections, return_exceptions=True)
            failures = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
            if failures:
                raise failures[0]
            # Cancellation is not a setup failure and propagates unwrapped.
            for outcome in outcomes:
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
        except Exception as e:
            logger.error(f"Failed to prepare rendering page: {e}", exc_info=True)
            raise PageSetupError(f"Failed to prepare rendering page: {e}", original_exception=e) from e

        logger.debug(f"Rendering page ready (css={css!r}).")
        yield page
    finally:
        if page is not None:
            try:
                await page.close()
                logger.debug("Rendering page closed.")
            except Exception as e:
                logger.error(f"Error closing rendering page: {e}", exc_info=True)
