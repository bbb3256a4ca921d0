"""
API Routes sub-package for venn-isomorphic.

The router from `venn_routes.py` is re-exported here for inclusion in the
main FastAPI application (`api/main.py`).
"""

from .venn_routes import router as venn_router

__all__ = [
    "venn_router",
]
