"""End-to-end tests: App + views middleware through the ASGI interface."""

from pathlib import Path

import pytest

from tessera.app import App
from tessera.config import AppConfig, ViewsConfig
from tessera.context import Context, get_context
from tessera.errors import ConfigurationError, HTTPError
from tessera.middleware.protocol import Next
from tessera.testing import TestClient
from tessera.views import Views

LAYOUT = """<html>
<head>{{ meta }}{{ style }}</head>
<body><main>{{ body }}</main>{{ script }}</body>
</html>"""

ARTICLE = """<meta name="description" content="{{ title }}">
<style>.post { margin: 0; }</style>
<article class="post">{{ title }}</article>
<script>highlight();</script>"""


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    site = tmp_path / "site"
    (site / "blog").mkdir(parents=True)
    (site / "layout.html").write_text(LAYOUT)
    (site / "article.html").write_text(ARTICLE)
    (site / "blog" / "index.html").write_text("<h1>Blog {{ user }}</h1>")
    (site / "plain.html").write_text("<p>plain</p>")
    (site / "404.html").write_text("<h1>Lost: {{ detail }}</h1>")
    return site


def _kida_app(site_dir: Path, **views: object) -> App:
    config = ViewsConfig(directory=site_dir, map={"html": "kida"}, autoescape=False, **views)
    return App(AppConfig(views=config))


class TestPlainViews:
    async def test_html_view_served_as_file(self, site_dir: Path) -> None:
        app = App()
        app.use(Views(site_dir))

        @app.route("/")
        async def index(ctx: Context) -> None:
            await ctx.render("plain")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert response.text == "<p>plain</p>"
            assert response.content_type == "text/html; charset=utf-8"
            assert response.header("content-length") == "12"

    async def test_head_has_no_body(self, site_dir: Path) -> None:
        app = App()
        app.use(Views(site_dir))

        @app.route("/")
        async def index(ctx: Context) -> None:
            await ctx.render("plain")

        async with TestClient(app) as client:
            response = await client.head("/")
            assert response.status == 200
            assert response.body == b""
            assert response.header("content-length") == "12"


class TestTemplatedViews:
    async def test_state_reaches_template(self, site_dir: Path) -> None:
        app = _kida_app(site_dir)

        @app.use
        async def current_user(ctx: Context, next: Next) -> None:
            ctx.state["user"] = "ada"
            await next()

        @app.route("/blog")
        async def blog(ctx: Context) -> None:
            await ctx.render("blog", {"user": "ignored"})

        async with TestClient(app) as client:
            response = await client.get("/blog")
            assert response.status == 200
            assert response.text == "<h1>Blog ada</h1>"

    async def test_layout_composition(self, site_dir: Path) -> None:
        app = _kida_app(site_dir)

        @app.route("/post")
        async def post(ctx: Context) -> None:
            await ctx.render("article", {"title": "First", "template": "layout"})

        async with TestClient(app) as client:
            response = await client.get("/post")
            html = response.text
            head = html[html.index("<head>") : html.index("</head>")]
            main = html[html.index("<main>") : html.index("</main>")]
            assert '<meta name="description" content="First">' in head
            assert "<style>.post { margin: 0; }</style>" in head
            assert '<article class="post">First</article>' in main
            assert "<script" not in main
            assert html.index("<script>highlight();</script>") > html.index("</main>")

    async def test_layout_from_config(self, site_dir: Path) -> None:
        app = _kida_app(site_dir, template="layout")

        @app.route("/post")
        async def post(ctx: Context) -> None:
            await ctx.render("article", {"title": "Configured"})

        async with TestClient(app) as client:
            response = await client.get("/post")
            assert "<main><article" in response.text

    async def test_missing_view_is_404(self, site_dir: Path) -> None:
        app = _kida_app(site_dir)

        @app.route("/")
        async def index(ctx: Context) -> None:
            await ctx.render("nope")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 404
            assert "View not found" in response.text

    async def test_unknown_engine_is_500(self, site_dir: Path) -> None:
        (site_dir / "page.ejs").write_text("x")
        app = _kida_app(site_dir)

        @app.route("/")
        async def index(ctx: Context) -> None:
            await ctx.render("page.ejs")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 500
            assert response.text == "Internal Server Error"


class TestErrorHandlers:
    async def test_render_error_view(self, site_dir: Path) -> None:
        app = _kida_app(site_dir)

        @app.error(404)
        async def not_found(ctx: Context, exc: HTTPError) -> None:
            await ctx.render("404", {"detail": ctx.request.path})

        async with TestClient(app) as client:
            response = await client.get("/missing")
            assert response.status == 404
            assert response.text == "<h1>Lost: /missing</h1>"

    async def test_exception_type_handler(self) -> None:
        app = App()

        @app.route("/")
        def index(ctx: Context) -> None:
            raise LookupError("gone")

        @app.error(LookupError)
        def lookup(ctx: Context, exc: Exception) -> None:
            ctx.body = f"handled {exc}"

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 500
            assert response.text == "handled gone"

    async def test_debug_shows_exception(self) -> None:
        app = App(AppConfig(debug=True))

        @app.route("/")
        def index(ctx: Context) -> None:
            raise RuntimeError("kaboom")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 500
            assert "RuntimeError: kaboom" in response.text


class TestApp:
    async def test_unhandled_path_is_404(self) -> None:
        app = App()
        async with TestClient(app) as client:
            response = await client.get("/nothing")
            assert response.status == 404

    async def test_method_not_allowed(self) -> None:
        app = App()

        @app.route("/")
        def index(ctx: Context) -> None:
            ctx.body = "ok"

        async with TestClient(app) as client:
            response = await client.post("/")
            assert response.status == 405
            assert response.header("allow") == "GET"

    async def test_middleware_order(self) -> None:
        app = App()
        order: list[str] = []

        @app.use
        async def outer(ctx: Context, next: Next) -> None:
            order.append("outer in")
            await next()
            order.append("outer out")

        @app.use
        async def inner(ctx: Context, next: Next) -> None:
            order.append("inner in")
            await next()
            order.append("inner out")

        @app.route("/")
        def index(ctx: Context) -> None:
            order.append("handler")
            ctx.body = "ok"

        async with TestClient(app) as client:
            await client.get("/")
        assert order == ["outer in", "inner in", "handler", "inner out", "outer out"]

    async def test_get_context_inside_request(self) -> None:
        app = App()

        @app.route("/")
        def index(ctx: Context) -> None:
            ctx.body = str(get_context() is ctx)

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.text == "True"

    async def test_query_string(self) -> None:
        app = App()

        @app.route("/search")
        def search(ctx: Context) -> None:
            ctx.body = ctx.request.query.get("q", "")

        async with TestClient(app) as client:
            response = await client.get("/search?q=views")
            assert response.text == "views"

    async def test_use_after_freeze(self) -> None:
        app = App()
        async with TestClient(app):
            pass
        with pytest.raises(ConfigurationError):
            app.use(Views())

    async def test_lifecycle_hooks(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def start() -> None:
            events.append("start")

        @app.on_shutdown
        def stop() -> None:
            events.append("stop")

        async with TestClient(app):
            assert events == ["start"]
        assert events == ["start", "stop"]

    async def test_asgi_lifespan(self) -> None:
        app = App()
        started: list[bool] = []
        app.on_startup(lambda: started.append(True))
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive() -> dict:
            return next(messages)

        async def send(message: dict) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert started == [True]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
