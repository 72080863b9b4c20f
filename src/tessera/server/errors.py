"""Error handling pipeline for tessera requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain-text defaults.

Error handlers receive the request's ``Context`` (with ``render``
still installed) and the exception, and build the response on the
context, usually by rendering an error view::

    @app.error(404)
    async def not_found(ctx: Context, exc: Exception) -> None:
        await ctx.render("errors/404", {"detail": str(exc)})
"""

import logging
from collections.abc import Callable
from typing import Any

from tessera._internal.invoke import invoke
from tessera.context import Context
from tessera.errors import HTTPError
from tessera.http.response import Response

logger = logging.getLogger("tessera.server")

ErrorHandlers = dict[int | type, Callable[..., Any]]


def _find_handler(error_handlers: ErrorHandlers, exc: Exception, status: int) -> Callable[..., Any] | None:
    """Most specific handler: exception type (walking the MRO), then status."""
    for cls in type(exc).__mro__:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return error_handlers.get(status)


async def _call_error_handler(
    handler: Callable[..., Any],
    ctx: Context,
    exc: Exception,
    status: int,
) -> Response:
    """Run *handler* against a fresh response on *ctx*."""
    ctx.status = status
    ctx.body = None
    ctx.headers = []
    await invoke(handler, ctx, exc)
    return ctx.to_response()


async def handle_http_error(
    exc: HTTPError,
    ctx: Context,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response."""
    request = ctx.request
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    handler = _find_handler(error_handlers, exc, exc.status)
    if handler is not None:
        response = await _call_error_handler(handler, ctx, exc, exc.status)
    else:
        detail = exc.detail or f"Error {exc.status}"
        if debug and exc.detail:
            detail = f"{exc.status}: {exc.detail}"
        response = Response(body=detail, status=exc.status, content_type="text/plain; charset=utf-8")

    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    ctx: Context,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    request = ctx.request
    logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(error_handlers, exc, 500)
    if handler is not None:
        return await _call_error_handler(handler, ctx, exc, 500)

    body = "Internal Server Error"
    if debug:
        body = f"{body}\n\n{type(exc).__name__}: {exc}"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
