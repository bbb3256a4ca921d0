"""
End-to-end rendering with a real browser and venn.js.

These tests need Playwright browser binaries ('playwright install chromium') and
access to the configured script sources. When either is missing they are skipped.
Run them with: pytest -m integration
"""
import asyncio
import xml.etree.ElementTree as ET

import pytest

from venn_isomorphic.components.renderer.results import Fulfilled, Rejected
from venn_isomorphic.components.renderer.venn_renderer import create_venn_renderer
from venn_isomorphic.core.exceptions import BrowserLaunchError, DiagramRenderError, PageSetupError

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

AB = [
    {"sets": ["A"], "size": 12},
    {"sets": ["B"], "size": 12},
    {"sets": ["A", "B"], "size": 2, "label": "A and B"},
]
ABC = [
    {"sets": ["A"], "size": 10},
    {"sets": ["B"], "size": 8},
    {"sets": ["C"], "size": 6},
    {"sets": ["A", "B"], "size": 3},
    {"sets": ["A", "C"], "size": 2},
    {"sets": ["B", "C"], "size": 1},
    {"sets": ["A", "B", "C"], "size": 1},
]
# A negative size alongside an overlap with a set the diagram never declares;
# laying out the undeclared set makes venn.js throw.
MALFORMED = [
    {"sets": ["A"], "size": 10},
    {"sets": ["B"], "size": -4},
    {"sets": ["A", "Z"], "size": 2},
]


async def render_or_skip(renderer, diagrams, **options):
    try:
        return await renderer(diagrams, **options)
    except (BrowserLaunchError, PageSetupError) as e:
        pytest.skip(f"Browser or script sources unavailable: {e}")


async def test_renders_well_formed_svg_with_viewbox_size():
    renderer = create_venn_renderer()

    results = await render_or_skip(renderer, [AB, ABC])
    await renderer.aclose()

    assert len(results) == 2
    for index, result in enumerate(results):
        assert isinstance(result, Fulfilled), result
        assert result.value.id == f"venn-{index}"
        root = ET.fromstring(result.value.svg)
        assert root.tag.endswith("svg")
        view_box = [float(part) for part in root.attrib["viewBox"].split()]
        assert (result.value.width, result.value.height) == pytest.approx((view_box[2], view_box[3]))


async def test_screenshot_mode_reports_pixels_and_png():
    renderer = create_venn_renderer()

    [result] = await render_or_skip(renderer, [AB], screenshot=True, prefix="diagram")
    await renderer.aclose()

    assert isinstance(result, Fulfilled), result
    assert result.value.id == "diagram-0"
    assert result.value.screenshot.startswith(b"\x89PNG")
    root = ET.fromstring(result.value.svg)
    assert result.value.width == pytest.approx(float(root.attrib["width"]))
    assert result.value.height == pytest.approx(float(root.attrib["height"]))


async def test_concurrent_calls_and_failed_diagram():
    renderer = create_venn_renderer()

    try:
        first, second = await asyncio.gather(
            renderer([AB, MALFORMED, ABC]),
            renderer([ABC], prefix="other"),
        )
    except (BrowserLaunchError, PageSetupError) as e:
        pytest.skip(f"Browser or script sources unavailable: {e}")
    await renderer.aclose()

    assert len(first) == 3
    assert isinstance(first[0], Fulfilled)
    assert isinstance(first[1], Rejected)
    assert isinstance(first[2], Fulfilled)
    reason = first[1].reason
    assert isinstance(reason, DiagramRenderError)
    assert reason.name
    assert reason.message
    assert first[2].value.id == "venn-2"
    assert second[0].value.id == "other-0"
    assert renderer.session.active == 0
    assert not renderer.session.is_running
