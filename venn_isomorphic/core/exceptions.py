"""
Custom exception classes for venn-isomorphic.

Setup failures (browser launch, page navigation, script injection) are raised
as `RendererError` subclasses and reject a whole render call. Failures of a
single diagram never raise; they come back as `DiagramRenderError` values
inside the settled results.
"""
from typing import Optional


class VennIsomorphicError(Exception):
    """
    Base class for all custom exceptions in venn-isomorphic.

    Attributes:
        message (str): A human-readable description of the error.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


# --- Configuration Related Exceptions ---
class ConfigurationError(VennIsomorphicError):
    """
    Raised for errors related to application configuration, such as invalid
    renderer settings or script sources that are neither a path nor a URL.
    """
    def __init__(self, message: str):
        super().__init__(message)


# --- Component Related Exceptions ---
class ComponentError(VennIsomorphicError):
    """
    A general base class for errors originating from within a specific component.

    Attributes:
        component_name (str): Name of the component where the error originated.
    """
    def __init__(self, component_name: str, message: str):
        full_message = f"Error in component '{component_name}': {message}"
        super().__init__(full_message)
        self.component_name = component_name


class RendererError(ComponentError):
    """Raised when the renderer cannot be prepared or the page round-trip breaks."""
    def __init__(self, message: str):
        super().__init__(component_name="Renderer", message=message)


class BrowserLaunchError(RendererError):
    """
    Raised when the shared browser could not be launched.

    Every render call awaiting the same launch receives this error.

    Attributes:
        original_exception (Optional[Exception]): The underlying Playwright error, if any.
    """
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.original_exception = original_exception
        super().__init__(message)


class PageSetupError(RendererError):
    """Raised when a page could not be created, navigated or have its scripts injected."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.original_exception = original_exception
        super().__init__(message)


# --- Per-diagram errors ---
class DiagramRenderError(VennIsomorphicError):
    """
    An error raised inside the browser page while rendering a single diagram.

    Only the flattened `{name, message, stack}` record survives the trip out of
    the page. This class turns that record back into a real exception so it can
    be raised, logged or compared with `isinstance`.

    Attributes:
        name (str): The JavaScript error name (e.g. 'TypeError').
        stack (str): The JavaScript stack trace, as reported by the page.
    """
    def __init__(self, name: str, message: str, stack: str = ""):
        self.name = name
        self.stack = stack or ""
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.name}: {self.message}"

    def __repr__(self) -> str:
        return f"DiagramRenderError(name={self.name!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiagramRenderError):
            return NotImplemented
        return (self.name, self.message, self.stack) == (other.name, other.message, other.stack)

    __hash__ = VennIsomorphicError.__hash__

    def to_record(self) -> dict:
        """Returns the flattened `{name, message, stack}` form of this error."""
        return {"name": self.name, "message": self.message, "stack": self.stack}
