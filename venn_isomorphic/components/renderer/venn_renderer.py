"""
Public entry point for rendering Venn diagrams.

`create_venn_renderer()` returns a `VennRenderer`, an async callable that takes
a batch of diagrams and returns one settled outcome per diagram. The renderer
manages a browser instance: concurrent calls share it, and it is closed as soon
as no call is using it.

Example:
    renderer = create_venn_renderer()
    results = await renderer([[{"sets": ["A"], "size": 3}]], screenshot=True)
    for result in results:
        if isinstance(result, Fulfilled):
            print(result.value.svg)
        else:
            print(result.reason)
"""
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from venn_isomorphic.components.renderer.batch_executor import capture_screenshots, run_batch
from venn_isomorphic.components.renderer.browser_session import BrowserSession
from venn_isomorphic.components.renderer.error_marshaller import rehydrate_errors
from venn_isomorphic.components.renderer.page_session import open_page_session, resolve_script_sources
from venn_isomorphic.components.renderer.results import (
    DEFAULT_PREFIX,
    Diagram,
    Fulfilled,
    RenderOptions,
    SettledResult,
)
from venn_isomorphic.core.logger import get_logger

if TYPE_CHECKING:
    from venn_isomorphic.core.config import ConfigurationManager

logger = get_logger(__name__)

CONFIG_SECTION = "components.venn_renderer"


class VennRenderer:
    """
    Renders batches of Venn diagrams in a shared headless browser.

    Attributes:
        session (BrowserSession): The reference-counted browser shared by all calls.
        scripts (Dict[str, Dict[str, str]]): Where `d3` and `venn.js` are loaded from.
        page_timeout (Optional[int]): Navigation timeout for each page, in milliseconds.
        default_prefix (str): DOM id prefix used when a call does not set one.
    """

    def __init__(
        self,
        session: BrowserSession,
        scripts: Dict[str, Dict[str, str]],
        page_timeout: Optional[int] = None,
        default_prefix: str = DEFAULT_PREFIX,
    ):
        self.session = session
        self.scripts = scripts
        self.page_timeout = page_timeout
        self.default_prefix = default_prefix

    def _coerce_options(self, options: Union[RenderOptions, Mapping[str, Any], None], overrides: Dict[str, Any]) -> RenderOptions:
        if isinstance(options, RenderOptions):
            # Only fields the caller set; an unset prefix falls back to the configured default.
            merged = options.model_dump(by_alias=False, exclude_unset=True)
        else:
            merged = dict(options or {})
        merged.update(overrides)
        if "prefix" not in merged or merged["prefix"] is None:
            merged["prefix"] = self.default_prefix
        return RenderOptions.model_validate(merged)

    async def __call__(
        self,
        diagrams: Sequence[Diagram],
        options: Union[RenderOptions, Mapping[str, Any], None] = None,
        **overrides: Any,
    ) -> List[SettledResult]:
        """
        Renders a batch of diagrams.

        Args:
            diagrams (Sequence[Diagram]): The diagrams to render. Each diagram is a list of
                                          set-overlap descriptors understood by venn.js.
            options (Union[RenderOptions, Mapping[str, Any], None]): Render options; a mapping may
                                                                     use `vennConfig` or `venn_config`.
            **overrides: Individual options, applied on top of `options`.

        Returns:
            List[SettledResult]: One `Fulfilled` or `Rejected` per diagram, in input order.
                                 Rejected reasons that came from JavaScript errors are
                                 `DiagramRenderError` instances.

        Raises:
            pydantic.ValidationError: If the options are invalid. No browser work is done.
            BrowserLaunchError: If the browser could not be launched.
            PageSetupError: If the page could not be prepared.
            RendererError: If the batch could not be evaluated in the page.
        """
        render_options = self._coerce_options(options, overrides)
        diagrams = list(diagrams)
        if not diagrams:
            logger.debug("Render call with an empty batch; nothing to do.")
            return []
        logger.info(
            f"Render call: {len(diagrams)} diagram(s), screenshot={render_options.screenshot}, "
            f"prefix='{render_options.prefix}'."
        )

        async with self.session.lease() as browser:
            async with open_page_session(browser, self.scripts, css=render_options.css, timeout=self.page_timeout) as page:
                results = await run_batch(page, diagrams, render_options)
                if render_options.screenshot:
                    await capture_screenshots(page, results)

        rehydrate_errors(results)
        fulfilled = sum(1 for result in results if isinstance(result, Fulfilled))
        logger.info(f"Render call finished: {fulfilled} fulfilled, {len(results) - fulfilled} rejected.")
        return results

    async def aclose(self) -> None:
        """Waits for the browser to finish closing if no call is using it anymore."""
        await self.session.wait_closed()


def create_venn_renderer(
    browser_type: Optional[str] = None,
    launch_options: Optional[Dict[str, Any]] = None,
    config: Optional['ConfigurationManager'] = None,
) -> VennRenderer:
    """
    Creates a Venn renderer.

    Explicit arguments take precedence over the `components.venn_renderer` section
    of `config`, which in turn takes precedence over built-in defaults.

    Args:
        browser_type (Optional[str]): 'chromium' (default), 'firefox' or 'webkit'.
        launch_options (Optional[Dict[str, Any]]): Options for `BrowserType.launch()`.
        config (Optional[ConfigurationManager]): Source of `browser_type`, `launch_options`,
                                                 `page_timeout`, `scripts` and `defaults.prefix`.

    Returns:
        VennRenderer: A renderer whose calls share one browser.

    Raises:
        RendererError: If the browser type is unsupported.
        ConfigurationError: If a configured script source is invalid.
    """
    def setting(key: str, default: Any = None) -> Any:
        if config is None:
            return default
        return config.get(f"{CONFIG_SECTION}.{key}", default)

    session = BrowserSession(
        browser_type=browser_type or setting("browser_type"),
        launch_options=launch_options if launch_options is not None else setting("launch_options", {}),
    )
    renderer = VennRenderer(
        session=session,
        scripts=resolve_script_sources(setting("scripts")),
        page_timeout=setting("page_timeout"),
        default_prefix=setting("defaults.prefix", DEFAULT_PREFIX),
    )
    logger.info(f"Venn renderer created (browser: {session.browser_type}).")
    return renderer
