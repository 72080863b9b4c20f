"""Tessera exception hierarchy.

Shared across the app, the request handler, and the views middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class TesseraError(Exception):
    """Base for all tessera-specific errors."""


class ConfigurationError(TesseraError):
    """Raised when app or views configuration is invalid.

    Typically raised while building config objects or during
    ``App._freeze()`` at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(TesseraError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware or the views pipeline. The ASGI handler
    catches these and turns them into a response with ``status``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — nothing handled the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class ViewNotFound(NotFound):  # noqa: N818
    """404 — no file on disk resolves for the requested view.

    Raised after the extension retry has also failed. The underlying
    filesystem error is kept as ``__cause__``.
    """

    def __init__(self, view: str) -> None:
        super().__init__(detail=f"View not found: {view}")


class EngineNotFound(TesseraError):  # noqa: N818
    """No rendering engine is registered for a view's extension."""

    def __init__(self, extension: str, engine: str | None = None) -> None:
        self.extension = extension
        self.engine = engine
        msg = f'Engine not found for file ".{extension}" file extension'
        if engine and engine != extension:
            msg = f"{msg} (mapped to {engine!r})"
        super().__init__(msg)


class EngineExecutionError(TesseraError):
    """A template engine failed while rendering a view.

    The engine's own exception is chained as ``__cause__``.
    """

    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        msg = f"Failed to render {path}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
