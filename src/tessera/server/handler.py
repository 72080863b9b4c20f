"""ASGI handler — translates ASGI scope/messages to tessera types.

The only component that touches raw ASGI directly. Converts the scope
dict to a typed Request, runs the middleware chain against a fresh
Context, and sends the resulting Response back through ASGI send().
"""

from collections.abc import Sequence
from contextvars import Token

from tessera._internal.asgi import Receive, Scope, Send
from tessera.context import Context, context_var
from tessera.errors import HTTPError, NotFound
from tessera.http.request import Request
from tessera.middleware.protocol import Middleware, Next
from tessera.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from tessera.server.sender import send_response


def compose(middleware: Sequence[Middleware], ctx: Context) -> Next:
    """Bind *middleware* into one ``next`` callable for *ctx*.

    Each layer receives a ``next`` that runs the rest of the chain.
    The innermost ``next`` is a no-op.
    """

    async def end() -> None:
        return None

    handler: Next = end
    for mw in reversed(middleware):

        async def make_next(_mw: Middleware = mw, _next: Next = handler) -> None:
            await _mw(ctx, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    middleware: Sequence[Middleware],
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)
    ctx = Context(request=request)
    token: Token[Context] = context_var.set(ctx)

    try:
        await compose(middleware, ctx)()
        if ctx.body is None:
            raise NotFound()
        response = ctx.to_response()
    except HTTPError as exc:
        response = await handle_http_error(exc, ctx, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, ctx, error_handlers, debug)
    finally:
        context_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")
