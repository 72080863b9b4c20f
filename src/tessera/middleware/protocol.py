"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(ctx: Context, next: Next) -> None: ...

No base class required. The framework checks the shape, not the lineage.

Middleware run onion-style: code before ``await next()`` runs on the way
in, code after it runs once every inner layer has finished and the
response on ``ctx`` is complete.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from tessera.context import Context

# The rest of the chain, already bound to the current context
type Next = Callable[[], Awaitable[None]]


class Middleware(Protocol):
    """Protocol for tessera middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(ctx: Context, next: Next) -> None:
            start = time.monotonic()
            await next()
            ctx.set_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class CurrentUser:
            async def __call__(self, ctx: Context, next: Next) -> None:
                ctx.state["user"] = await load_user(ctx.request)
                await next()
    """

    async def __call__(self, ctx: Context, next: Next) -> None: ...
