"""
Runs a batch of Venn diagram layouts inside a prepared page.

The layout itself happens in `assets/render_diagrams.js`, evaluated in the page
against the whole batch in one round-trip. Each diagram settles on its own:
a failing diagram becomes a `Rejected` outcome at its index while the others
still render.
"""
import os
from typing import Any, Dict, List, Sequence

from playwright.async_api import Page

from venn_isomorphic.components.renderer.error_marshaller import flatten_exception
from venn_isomorphic.components.renderer.results import (
    Diagram,
    Fulfilled,
    Rejected,
    RenderOptions,
    RenderResult,
    SettledResult,
)
from venn_isomorphic.core.exceptions import RendererError
from venn_isomorphic.core.logger import get_logger

logger = get_logger(__name__)

RENDER_SCRIPT_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets", "render_diagrams.js")

with open(RENDER_SCRIPT_PATH, "r", encoding="utf-8") as _script_file:
    RENDER_DIAGRAMS_SCRIPT = _script_file.read()


def build_payload(diagrams: Sequence[Diagram], options: RenderOptions) -> Dict[str, Any]:
    """The argument handed to the in-page render function."""
    return {
        "diagrams": list(diagrams),
        "prefix": options.prefix,
        "screenshot": options.screenshot,
        "vennConfig": options.venn_config,
    }


def parse_settled(raw: Any, expected: int) -> List[SettledResult]:
    """
    Converts the `Promise.allSettled` payload returned by the page into outcome models.

    Raises:
        RendererError: If the payload is not one settled entry per diagram.
    """
    if not isinstance(raw, list) or len(raw) != expected:
        got = len(raw) if isinstance(raw, list) else type(raw).__name__
        raise RendererError(f"Page returned a malformed batch result: expected {expected} entries, got {got}.")

    results: List[SettledResult] = []
    for index, entry in enumerate(raw):
        status = entry.get("status") if isinstance(entry, dict) else None
        if status == "fulfilled":
            results.append(Fulfilled(value=RenderResult(**entry["value"])))
        elif status == "rejected":
            results.append(Rejected(reason=entry.get("reason")))
        else:
            raise RendererError(f"Page returned an unknown settled entry at index {index}: {entry!r}")
    return results


async def run_batch(page: Page, diagrams: Sequence[Diagram], options: RenderOptions) -> List[SettledResult]:
    """
    Lays out every diagram in the page and returns one settled outcome per diagram.

    Diagram `i` is rendered into a container with the DOM id `{prefix}-{i}`.
    Without screenshots the chart uses a viewBox and the reported size is the
    viewBox size; with screenshots the size is in pixels.

    Args:
        page (Page): A page prepared by `open_page_session()`.
        diagrams (Sequence[Diagram]): The diagrams to render, in order.
        options (RenderOptions): Render options shared by the whole batch.

    Returns:
        List[SettledResult]: Outcomes in the same order as `diagrams`. Rejected reasons
                             are still flattened error records at this point.

    Raises:
        RendererError: If the evaluation round-trip itself fails.
    """
    if not diagrams:
        return []

    logger.debug(f"Rendering batch of {len(diagrams)} diagram(s) with prefix '{options.prefix}'.")
    try:
        raw = await page.evaluate(RENDER_DIAGRAMS_SCRIPT, build_payload(diagrams, options))
    except Exception as e:
        logger.error(f"Batch evaluation failed: {e}", exc_info=True)
        raise RendererError(f"Batch evaluation failed: {e}") from e

    results = parse_settled(raw, len(diagrams))
    failed = sum(1 for result in results if isinstance(result, Rejected))
    if failed:
        logger.warning(f"{failed} of {len(results)} diagram(s) failed to render.")
    return results


async def capture_screenshots(page: Page, results: List[SettledResult]) -> List[SettledResult]:
    """
    Attaches a PNG screenshot (transparent background) to every fulfilled outcome.

    A diagram whose screenshot fails is settled as rejected at its index; the
    remaining screenshots are still taken.

    Returns:
        List[SettledResult]: `results`, updated in place.
    """
    for index, result in enumerate(results):
        if not isinstance(result, Fulfilled):
            continue
        element_id = result.value.id
        try:
            result.value.screenshot = await page.locator(f"#{element_id}").screenshot(omit_background=True)
        except Exception as e:
            logger.warning(f"Screenshot of '{element_id}' failed: {e}")
            results[index] = Rejected(reason=dict(flatten_exception(e)))
    return results
