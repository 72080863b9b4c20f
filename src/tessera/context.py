"""Per-request context and its ContextVar.

Provides:
- ``Context``: the mutable object every middleware receives. It holds the
  immutable ``Request``, a ``state`` dict shared by middleware and views,
  and the response under construction.
- ``context_var`` / ``get_context()``: the current ``Context`` for this task.

The handler sets the ContextVar before running the middleware chain and
resets it afterwards. Accessing it outside a request raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio. A ``Context`` is created per
    request and never shared, so no locks are needed.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from tessera.http.request import Request
from tessera.http.response import Response

# Installed by the views middleware: ``await ctx.render(view, locals)``
type Renderer = Callable[[str, Mapping[str, Any] | None], Awaitable[None]]


@dataclass(slots=True)
class Context:
    """Mutable per-request context.

    Middleware read ``request``, share data through ``state`` (which views
    merge into every render context), and build the response by setting
    ``status``, ``body``, ``content_type`` and ``headers``.
    """

    request: Request
    state: dict[str, Any] = field(default_factory=dict)
    status: int = 200
    body: str | bytes | None = None
    content_type: str = "text/plain; charset=utf-8"
    headers: list[tuple[str, str]] = field(default_factory=list)
    render: Renderer | None = None

    def set_header(self, name: str, value: str) -> None:
        """Set *name*, replacing any previous value."""
        lowered = name.lower()
        self.headers = [(k, v) for k, v in self.headers if k.lower() != lowered]
        self.headers.append((name, value))

    def to_response(self) -> Response:
        """Freeze the response under construction."""
        return Response(
            body=self.body if self.body is not None else "",
            status=self.status,
            content_type=self.content_type,
            headers=tuple(self.headers),
        )


context_var: ContextVar[Context] = ContextVar("tessera_context")
"""The current context. Set by the ASGI handler before dispatch."""


def get_context() -> Context:
    """Return the current request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()
