"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(ctx: Context, next: Next) -> None

The views middleware lives in :mod:`tessera.views`.
"""

from tessera.middleware.protocol import Middleware, Next

__all__ = [
    "Middleware",
    "Next",
]
