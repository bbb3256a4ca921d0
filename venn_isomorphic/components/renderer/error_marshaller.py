"""
Translation of errors across the browser page boundary.

Inside the page, a JavaScript error is reduced to an `ErrorRecord`
(`{name, message, stack}`) because prototypes and custom fields do not survive
serialization. Once the batch is back in Python, `rehydrate_errors` turns
those records into `DiagramRenderError` exceptions.
"""
import traceback
from typing import Any, List, Mapping, TypedDict

from venn_isomorphic.components.renderer.results import Rejected, SettledResult
from venn_isomorphic.core.exceptions import DiagramRenderError
from venn_isomorphic.core.logger import get_logger

logger = get_logger(__name__)

ERROR_RECORD_KEYS = frozenset(("name", "message", "stack"))


class ErrorRecord(TypedDict):
    name: str
    message: str
    stack: str


def is_error_record(value: Any) -> bool:
    """True if `value` is a mapping with exactly the keys `name`, `message` and `stack`."""
    return isinstance(value, Mapping) and set(value.keys()) == ERROR_RECORD_KEYS


def flatten_exception(exc: BaseException) -> ErrorRecord:
    """
    Reduces a Python exception to an `ErrorRecord`.

    Used for per-diagram failures that happen on the Python side of the
    boundary (e.g. a failed screenshot), so they settle exactly like errors
    thrown inside the page.
    """
    if isinstance(exc, DiagramRenderError):
        return ErrorRecord(name=exc.name, message=exc.message, stack=exc.stack)
    return ErrorRecord(
        name=type(exc).__name__,
        message=str(exc),
        stack="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    )


def rehydrate_error(record: Mapping[str, Any]) -> DiagramRenderError:
    """Builds a `DiagramRenderError` from an `ErrorRecord`."""
    return DiagramRenderError(
        name=str(record["name"]),
        message=str(record["message"]),
        stack=str(record["stack"] or ""),
    )


def rehydrate_errors(results: List[SettledResult]) -> List[SettledResult]:
    """
    Replaces the reason of every rejected outcome that is an `ErrorRecord` with a
    `DiagramRenderError`. Other reasons are left untouched.

    The list is updated in place and also returned for convenience.
    """
    for index, result in enumerate(results):
        if not isinstance(result, Rejected):
            continue
        if is_error_record(result.reason):
            result.reason = rehydrate_error(result.reason)
            logger.debug(f"Rehydrated error at index {index}: {result.reason}")
        else:
            logger.debug(f"Rejected outcome at index {index} is not an error record; passed through unchanged.")
    return results
