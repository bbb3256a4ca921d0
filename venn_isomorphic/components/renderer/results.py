"""
Data models exchanged with callers of the Venn renderer.

A render call returns one settled outcome per input diagram: either
`Fulfilled` (holding a `RenderResult`) or `Rejected` (holding the reason the
diagram failed). Outcomes are index-aligned with the input diagrams.
"""
import re
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# A set-overlap descriptor, e.g. {"sets": ["A", "B"], "size": 2, "label": "A∩B"}.
# The layout library owns the format; it is passed to the page untouched.
Diagram = List[Dict[str, Any]]

DEFAULT_PREFIX = "venn"

# The prefix becomes a DOM id and is used as a CSS id selector to find the diagram.
_PREFIX_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")


class RenderOptions(BaseModel):
    """
    Options for a single render call.

    Attributes:
        css (Optional[str]): URL of a stylesheet to load into the page, e.g. to provide custom fonts.
        screenshot (bool): If True, a PNG screenshot of each diagram is attached to its result,
                           and width/height are reported in pixels instead of viewBox units.
        venn_config (Dict[str, Any]): Options passed to `venn.VennDiagram()`. Accepts the
                                      `vennConfig` alias.
        prefix (str): Prefix of the DOM id of each diagram; diagram `i` gets `{prefix}-{i}`.
    """
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    css: Optional[str] = None
    screenshot: bool = False
    venn_config: Dict[str, Any] = Field(default_factory=dict, alias="vennConfig")
    prefix: str = DEFAULT_PREFIX

    @field_validator("css", mode="before")
    @classmethod
    def _stringify_css(cls, value: Any) -> Any:
        # Accept pathlib/yarl/pydantic URL objects as well as plain strings.
        if value is None or isinstance(value, str):
            return value or None
        return str(value)

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not _PREFIX_PATTERN.match(value):
            raise ValueError(
                f"prefix {value!r} must start with a letter and contain only letters, digits, '_' or '-'"
            )
        return value


class RenderResult(BaseModel):
    """A successfully rendered diagram."""

    id: str
    svg: str
    width: float
    height: float
    screenshot: Optional[bytes] = None


class Fulfilled(BaseModel):
    """Settled outcome of a diagram that rendered."""

    status: Literal["fulfilled"] = "fulfilled"
    value: RenderResult


class Rejected(BaseModel):
    """
    Settled outcome of a diagram that failed.

    `reason` is normally a `DiagramRenderError`; values thrown in the page that
    were not JavaScript errors are passed through as-is.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: Literal["rejected"] = "rejected"
    reason: Any = None


SettledResult = Union[Fulfilled, Rejected]
