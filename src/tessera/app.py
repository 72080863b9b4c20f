"""Tessera application class.

Mutable during setup (middleware, routes, error handlers, hooks).
Frozen at runtime when ``__call__()`` is first invoked.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any

from tessera._internal.asgi import Receive, Scope, Send
from tessera._internal.invoke import invoke
from tessera.config import AppConfig
from tessera.context import Context
from tessera.errors import ConfigurationError, HTTPError
from tessera.middleware.protocol import Middleware, Next
from tessera.server.errors import ErrorHandlers
from tessera.server.handler import handle_request
from tessera.views.middleware import Views

logger = logging.getLogger("tessera.server")

type RouteHandler = Callable[[Context], Any]


class _Routes:
    """Innermost middleware: exact-path dispatch to route handlers.

    A path with no handler falls through to ``next``; a path whose
    handlers do not accept the method raises 405.
    """

    __slots__ = ("_table",)

    def __init__(self, table: dict[str, dict[str, RouteHandler]]) -> None:
        self._table = table

    async def __call__(self, ctx: Context, next: Next) -> None:
        methods = self._table.get(ctx.request.path)
        if methods is None:
            await next()
            return
        method = ctx.request.method
        handler = methods.get(method) or (methods.get("GET") if method == "HEAD" else None)
        if handler is None:
            allow = ", ".join(sorted(methods))
            raise HTTPError(status=405, detail="Method Not Allowed", headers=(("Allow", allow),))
        await invoke(handler, ctx)


class App:
    """The tessera application.

    Usage::

        app = App(AppConfig(views=ViewsConfig(directory="views", map={"html": "kida"})))

        @app.route("/")
        async def index(ctx: Context) -> None:
            await ctx.render("index", {"title": "Home"})

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one caller
        compiles the middleware chain.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_routes",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._middleware_list: list[Middleware] = []
        self._routes: dict[str, dict[str, RouteHandler]] = {}
        self._error_handlers: ErrorHandlers = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._middleware: tuple[Middleware, ...] = ()

    # -- Setup API --

    def use(self, middleware: Middleware) -> Middleware:
        """Append *middleware* to the chain. Returns it, so it works as a decorator."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)
        return middleware

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] = ("GET",),
    ) -> Callable[[RouteHandler], RouteHandler]:
        """Register a handler for an exact *path*.

        Handlers receive the request ``Context`` and build the response
        on it, typically with ``await ctx.render(...)``.
        """
        self._check_not_frozen()

        def decorator(func: RouteHandler) -> RouteHandler:
            table = self._routes.setdefault(path, {})
            for method in methods:
                table[method.upper()] = func
            return func

        return decorator

    def error(
        self, key: int | type[Exception]
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an error handler for a status code or exception type."""
        self._check_not_frozen()

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._error_handlers[key] = func
            return func

        return decorator

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run at ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run at ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs registered startup/shutdown hooks.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the middleware chain. Call only while holding _freeze_lock."""
        chain: list[Middleware] = []
        if self.config.views is not None:
            chain.append(Views.from_config(self.config.views))
        chain.extend(self._middleware_list)
        if self._routes:
            chain.append(_Routes({path: dict(m) for path, m in self._routes.items()}))
        self._middleware = tuple(chain)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after it has started serving requests."
            raise ConfigurationError(msg)
