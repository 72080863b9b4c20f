"""Views middleware — install ``ctx.render`` on every request.

``await ctx.render(view, locals)`` resolves the view under the views
directory, renders it with the engine for its extension, and writes the
result to the response. Plain ``.html`` views are sent as files unless an
engine ``map`` is configured.

Layouts: when the merged context's ``template`` (or the configured ``template``)
names a layout view, the rendered view is split into ``script``,
``style``, ``meta`` and ``body`` fragments and the layout is rendered
with them. ``is_composed_layout`` is set in the context before that
second pass, so a layout never gets wrapped again.

Usage::

    app = App()
    app.use(Views("views", map={"html": "kida"}, template="layout"))

    async def about(ctx: Context, next: Next) -> None:
        await ctx.render("about", {"title": "About"})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from tessera.config import ViewsConfig
from tessera.context import Context
from tessera.errors import EngineNotFound
from tessera.middleware.protocol import Next
from tessera.views.engines import Engine, default_engines
from tessera.views.fragments import compose_fragments
from tessera.views.resolver import resolve_paths, view_extension
from tessera.views.send import send_file

logger = logging.getLogger("tessera.views")

# Reserved render-context keys
LAYOUT_KEY = "template"
COMPOSED_KEY = "is_composed_layout"

_HTML_EXTENSION = "html"
_HTML_CONTENT_TYPE = "text/html; charset=utf-8"


class ViewRenderer:
    """Renders views into one request's context.

    Created per request by :class:`Views`; its bound :meth:`render` is what
    ``ctx.render`` points to.
    """

    __slots__ = ("_config", "_ctx", "_engines")

    def __init__(self, ctx: Context, config: ViewsConfig, engines: Mapping[str, Engine]) -> None:
        self._ctx = ctx
        self._config = config
        self._engines = engines

    async def render(self, view: str, locals: Mapping[str, Any] | None = None) -> None:
        """Render *view* with *locals* merged with ``ctx.state``.

        ``ctx.state`` wins on key collisions. Raises ``ViewNotFound``
        when no file resolves, ``EngineNotFound`` when the extension has
        no engine; engine errors propagate unchanged.
        """
        ctx = self._ctx
        config = self._config
        context: dict[str, Any] = {**(locals or {}), **ctx.state}

        ext = view_extension(view, config.extension)
        paths = await resolve_paths(config.directory, view, ext)
        logger.debug("render %s with %r", paths.relative_path, context)
        ctx.content_type = _HTML_CONTENT_TYPE

        if ext == _HTML_EXTENSION and not config.map:
            await send_file(
                ctx,
                paths.relative_path,
                root=paths.absolute_dir,
                default_type=_HTML_CONTENT_TYPE,
            )
            return

        engine_name = ext
        if config.map and config.map.get(ext):
            engine_name = config.map[ext]
        engine = self._engines.get(engine_name)
        if engine is None:
            raise EngineNotFound(ext, engine_name)

        html = await engine.render(paths.path, context)

        layout = context.get(LAYOUT_KEY) or config.template
        if layout and not context.get(COMPOSED_KEY):
            context[COMPOSED_KEY] = True
            context.update(compose_fragments(html).as_context())
            logger.debug("compose %s into layout %s", paths.relative_path, layout)
            await self.render(layout, context)
            return

        ctx.body = html


class Views:
    """Middleware that installs ``ctx.render`` for the views directory.

    Installation is idempotent: if an outer layer already set
    ``ctx.render``, this one leaves it alone and just calls ``next``.

    Engines passed in *engines* are added to (and may replace) the
    built-in ``"kida"`` engine.
    """

    __slots__ = ("_config", "_engines")

    def __init__(
        self,
        directory: str | Path = "views",
        *,
        extension: str = "html",
        map: Mapping[str, str] | None = None,
        template: str | None = None,
        engines: Mapping[str, Engine] | None = None,
        autoescape: bool = True,
        auto_reload: bool = False,
    ) -> None:
        config = ViewsConfig(
            directory=directory,
            extension=extension,
            map=dict(map) if map is not None else None,
            template=template,
            autoescape=autoescape,
            auto_reload=auto_reload,
        )
        self._config = config
        self._engines: dict[str, Engine] = {**default_engines(config), **(engines or {})}
        logger.debug("options: %r", config)

    @classmethod
    def from_config(cls, config: ViewsConfig, engines: Mapping[str, Engine] | None = None) -> Views:
        """Build the middleware from a :class:`ViewsConfig`."""
        return cls(
            config.directory,
            extension=config.extension,
            map=config.map,
            template=config.template,
            engines=engines,
            autoescape=config.autoescape,
            auto_reload=config.auto_reload,
        )

    @property
    def config(self) -> ViewsConfig:
        return self._config

    async def __call__(self, ctx: Context, next: Next) -> None:
        """Install ``ctx.render`` unless already present, then continue."""
        if ctx.render is None:
            ctx.render = ViewRenderer(ctx, self._config, self._engines).render
        await next()
