"""
Main application file for the venn-isomorphic HTTP API.

This file initializes the FastAPI application, sets up logging, creates the
shared Venn renderer for the lifetime of the application, registers global
exception handlers, and includes API routers.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from venn_isomorphic.api.routes import venn_router
from venn_isomorphic.components.renderer.venn_renderer import create_venn_renderer
from venn_isomorphic.core.config import config_manager
from venn_isomorphic.core.exceptions import VennIsomorphicError
from venn_isomorphic.core.logger import get_logger, setup_logging

# --- Logging Setup ---
setup_logging(config_manager)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the shared renderer on startup and waits for its browser to close on shutdown.

    Creating the renderer does not launch a browser; that happens on the first request.
    """
    app.state.venn_renderer = create_venn_renderer(config=config_manager)
    logger.info("Venn renderer initialized for API.")
    try:
        yield
    finally:
        renderer = app.state.venn_renderer
        if renderer is not None:
            await renderer.aclose()
        logger.info("Venn renderer shut down.")


# --- FastAPI Application Initialization ---
app = FastAPI(
    title=config_manager.get("api.title", "venn-isomorphic"),
    description="Renders Venn diagrams to SVG (and optionally PNG) with venn.js in a headless browser.",
    version=config_manager.get("api.version", "0.1.0"),
    lifespan=lifespan,
)


# --- Global Exception Handlers ---

@app.exception_handler(VennIsomorphicError)
async def venn_isomorphic_exception_handler(request: Request, exc: VennIsomorphicError):
    """
    Handles application exceptions that were not turned into an HTTP error by a route.

    Returns:
        JSONResponse: A standardized JSON error response with HTTP 500.
    """
    logger.error(
        f"VennIsomorphicError caught: {exc.__class__.__name__} - {exc.message} "
        f"for request: {request.method} {request.url}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"An application error occurred: {exc.message}"},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Validator errors carry the raised ValueError in 'ctx', which is not JSON serializable.
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handles request validation failures (bad diagrams payload, invalid prefix, unknown option).

    Returns:
        JSONResponse: HTTP 422 with the validation errors.
    """
    logger.warning(f"RequestValidationError caught for: {request.method} {request.url}. Errors: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Request validation failed", "errors": jsonable_errors(exc)},
    )


# --- API Router Inclusion ---
app.include_router(
    venn_router,
    prefix="/api/v1/venn",
    tags=["Venn Rendering"],
)


# --- Root Endpoint ---
@app.get("/", tags=["General"], summary="API Root Endpoint")
async def read_root():
    """
    Provides basic information about the API.
    """
    return {
        "message": "Welcome to the venn-isomorphic API",
        "version": app.version,
        "documentation_url": app.docs_url,
        "redoc_url": app.redoc_url,
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Uvicorn server directly for local development (not for production)...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
