"""
venn-isomorphic: render Venn diagrams with venn.js in a headless browser.
"""
from venn_isomorphic.components.renderer import (
    Fulfilled,
    Rejected,
    RenderOptions,
    RenderResult,
    VennRenderer,
    create_venn_renderer,
)
from venn_isomorphic.core.exceptions import (
    BrowserLaunchError,
    DiagramRenderError,
    PageSetupError,
    RendererError,
)

__version__ = "0.1.0"

__all__ = [
    "Fulfilled",
    "Rejected",
    "RenderOptions",
    "RenderResult",
    "VennRenderer",
    "create_venn_renderer",
    "BrowserLaunchError",
    "DiagramRenderError",
    "PageSetupError",
    "RendererError",
]
