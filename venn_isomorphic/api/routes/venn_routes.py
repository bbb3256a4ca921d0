"""
API routes for rendering Venn diagrams.

The renderer is created once per application (see `api/main.py`) and shared by
all requests, so concurrent requests reuse a single browser.
"""
from fastapi import APIRouter, HTTPException, Request, status

from venn_isomorphic.api.models import RenderRequest, RenderResponse, to_schema
from venn_isomorphic.components.renderer.venn_renderer import VennRenderer
from venn_isomorphic.core.exceptions import BrowserLaunchError, PageSetupError, RendererError
from venn_isomorphic.core.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def get_renderer(request: Request) -> VennRenderer:
    renderer = getattr(request.app.state, "venn_renderer", None)
    if renderer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Venn renderer is not initialized.",
        )
    return renderer


@router.post(
    "/render",
    response_model=RenderResponse,
    status_code=status.HTTP_200_OK,
    summary="Render a batch of Venn diagrams",
    description="Lays out each diagram with venn.js in a headless browser and returns one "
                "settled result per diagram, in order. A diagram that fails to render is "
                "reported as 'rejected' without failing the request.",
)
async def render_diagrams_endpoint(payload: RenderRequest, request: Request):
    """
    Handles requests to render a batch of diagrams.

    Raises:
        HTTPException:
            - 503 Service Unavailable: If the browser could not be launched or the rendering page
                                       could not be prepared (e.g. missing browser binaries or
                                       unreachable script sources).
            - 500 Internal Server Error: If the batch could not be evaluated.
            - 422 Unprocessable Entity: If the payload is invalid (handled by FastAPI).
    """
    renderer = get_renderer(request)
    try:
        results = await renderer(payload.diagrams, payload.options)
    except (BrowserLaunchError, PageSetupError) as e:
        logger.error(f"Renderer setup failed: {e.message}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Rendering service unavailable. Please ensure browser binaries are installed "
                   f"('playwright install') and script sources are reachable. Original error: {e.message}",
        )
    except RendererError as e:
        logger.error(f"Rendering failed: {e.message}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Rendering failed. Error: {e.message}",
        )

    return RenderResponse(results=[to_schema(result) for result in results])
