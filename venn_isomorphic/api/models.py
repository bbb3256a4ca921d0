import base64
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from venn_isomorphic.components.renderer.results import Fulfilled, RenderOptions, SettledResult
from venn_isomorphic.core.exceptions import DiagramRenderError

# --- Request Models ---

class RenderRequest(BaseModel):
    """
    Request model for rendering a batch of Venn diagrams.
    """
    diagrams: List[List[Dict[str, Any]]]
    options: RenderOptions = Field(default_factory=RenderOptions)


# --- Response Models ---

class RenderedDiagramSchema(BaseModel):
    """A rendered diagram; the screenshot, when requested, is base64-encoded PNG."""
    id: str
    svg: str
    width: float
    height: float
    screenshot: Optional[str] = None


class ErrorRecordSchema(BaseModel):
    """A per-diagram error in its flattened `{name, message, stack}` form."""
    name: str
    message: str
    stack: str = ""


class FulfilledSchema(BaseModel):
    status: Literal["fulfilled"] = "fulfilled"
    value: RenderedDiagramSchema


class RejectedSchema(BaseModel):
    status: Literal["rejected"] = "rejected"
    reason: ErrorRecordSchema


class RenderResponse(BaseModel):
    """
    Response model for a render request: one entry per requested diagram, in order.
    """
    results: List[Union[FulfilledSchema, RejectedSchema]]


def to_schema(result: SettledResult) -> Union[FulfilledSchema, RejectedSchema]:
    """Converts a settled outcome from the renderer into its JSON-friendly schema."""
    if isinstance(result, Fulfilled):
        value = result.value
        screenshot = base64.b64encode(value.screenshot).decode("ascii") if value.screenshot else None
        return FulfilledSchema(
            value=RenderedDiagramSchema(
                id=value.id, svg=value.svg, width=value.width, height=value.height, screenshot=screenshot
            )
        )

    reason = result.reason
    if isinstance(reason, DiagramRenderError):
        record = ErrorRecordSchema(**reason.to_record())
    else:
        # Something other than an Error was thrown in the page.
        record = ErrorRecordSchema(name="Error", message=str(reason))
    return RejectedSchema(reason=record)
