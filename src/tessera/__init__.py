"""Tessera — view rendering and layout composition for ASGI apps.

Resolves view names to template files, renders them through pluggable
engines (kida built in), and composes rendered views into layouts by
splitting them into script, style, meta and body fragments.

Basic usage::

    from tessera import App, AppConfig, ViewsConfig

    app = App(AppConfig(views=ViewsConfig(directory="views", map={"html": "kida"})))

    @app.route("/")
    async def index(ctx):
        await ctx.render("index", {"title": "Home", "template": "layout"})
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Context",
    "EngineExecutionError",
    "EngineNotFound",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "TesseraError",
    "ViewNotFound",
    "Views",
    "ViewsConfig",
    "compose_fragments",
    "get_context",
]

_ERRORS = (
    "ConfigurationError",
    "EngineExecutionError",
    "EngineNotFound",
    "HTTPError",
    "NotFound",
    "TesseraError",
    "ViewNotFound",
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import tessera`` fast while providing a clean top-level API.
    """
    if name == "App":
        from tessera.app import App

        return App

    if name in ("AppConfig", "ViewsConfig"):
        import tessera.config

        return getattr(tessera.config, name)

    if name in ("Context", "get_context"):
        import tessera.context

        return getattr(tessera.context, name)

    if name in ("Middleware", "Next"):
        import tessera.middleware.protocol

        return getattr(tessera.middleware.protocol, name)

    if name == "Request":
        from tessera.http.request import Request

        return Request

    if name == "Response":
        from tessera.http.response import Response

        return Response

    if name in ("Views", "compose_fragments"):
        import tessera.views

        return getattr(tessera.views, name)

    if name in _ERRORS:
        import tessera.errors

        return getattr(tessera.errors, name)

    raise AttributeError(f"module 'tessera' has no attribute {name!r}")
