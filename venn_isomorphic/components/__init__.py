"""
Components of venn-isomorphic.

Currently a single component lives here: the renderer, which drives a headless
browser to lay out Venn diagrams.
"""
from .renderer import VennRenderer, create_venn_renderer

__all__ = [
    "VennRenderer",
    "create_venn_renderer",
]
