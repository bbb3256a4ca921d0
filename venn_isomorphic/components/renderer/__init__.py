"""
Renderer component for venn-isomorphic.

This sub-package lays out Venn diagrams with venn.js inside a headless browser
driven by Playwright, and returns the SVG (and optionally a PNG screenshot)
of every diagram.
"""
from .browser_session import BrowserSession
from .error_marshaller import ErrorRecord, flatten_exception, rehydrate_errors
from .results import Fulfilled, Rejected, RenderOptions, RenderResult, SettledResult
from .venn_renderer import VennRenderer, create_venn_renderer

__all__ = [
    "BrowserSession",
    "ErrorRecord",
    "flatten_exception",
    "rehydrate_errors",
    "Fulfilled",
    "Rejected",
    "RenderOptions",
    "RenderResult",
    "SettledResult",
    "VennRenderer",
    "create_venn_renderer",
]
