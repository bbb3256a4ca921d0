"""
HTTP API for venn-isomorphic, built with FastAPI.

Run it with: `uvicorn venn_isomorphic.api.main:app`
"""
