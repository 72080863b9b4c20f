"""Template engines for views.

An engine is anything with an async ``render(path, context) -> str``.
The views middleware picks one by name: the view's extension, or the
name the ``map`` option assigns to that extension.

Built-in:
    KidaEngine -- kida templates, registered as ``"kida"``

Any plain function can be plugged in with ``FunctionEngine``::

    def markdown(path: Path, context: Mapping[str, Any]) -> str: ...

    app.use(Views("views", engines={"md": FunctionEngine(markdown)}))
"""

import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol

import anyio
from kida import Environment, FileSystemLoader

from tessera._internal.invoke import invoke
from tessera.config import ViewsConfig
from tessera.errors import EngineExecutionError


class Engine(Protocol):
    """Protocol for view rendering engines."""

    async def render(self, path: Path, context: Mapping[str, Any]) -> str: ...


def _is_kida_error(exc: BaseException) -> bool:
    """Check if an exception originates from the kida template engine."""
    module = type(exc).__module__ or ""
    return "kida" in module


class KidaEngine:
    """Render views with kida.

    The environment loads from the views directory, so a view can
    ``{% extends %}`` or ``{% include %}`` any sibling by its path
    relative to that directory. Views outside it are loaded through a
    per-directory environment created on first use.

    Rendering is synchronous in kida; it runs in a worker thread so the
    event loop keeps serving other requests.
    """

    __slots__ = ("_auto_reload", "_autoescape", "_directory", "_envs", "_lock")

    def __init__(
        self,
        directory: str | Path,
        *,
        autoescape: bool = True,
        auto_reload: bool = False,
    ) -> None:
        self._directory = Path(directory).resolve()
        self._autoescape = autoescape
        self._auto_reload = auto_reload
        self._envs: dict[Path, Environment] = {}
        self._lock = threading.Lock()

    def environment(self, root: Path) -> Environment:
        """The kida environment loading templates from *root*."""
        env = self._envs.get(root)
        if env is not None:
            return env
        with self._lock:
            env = self._envs.get(root)
            if env is None:
                env = Environment(
                    loader=FileSystemLoader(str(root)),
                    autoescape=self._autoescape,
                    auto_reload=self._auto_reload,
                )
                self._envs[root] = env
        return env

    def _template_name(self, path: Path) -> tuple[Path, str]:
        resolved = path.resolve()
        if resolved.is_relative_to(self._directory):
            return self._directory, resolved.relative_to(self._directory).as_posix()
        return resolved.parent, resolved.name

    def _render_sync(self, path: Path, context: dict[str, Any]) -> str:
        root, name = self._template_name(path)
        template = self.environment(root).get_template(name)
        return template.render(context)

    async def render(self, path: Path, context: Mapping[str, Any]) -> str:
        try:
            return await anyio.to_thread.run_sync(self._render_sync, path, dict(context))
        except Exception as exc:
            if _is_kida_error(exc):
                raise EngineExecutionError(str(path), str(exc)) from exc
            raise


class FunctionEngine:
    """Adapt a sync or async ``func(path, context) -> str`` into an engine."""

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[Path, Mapping[str, Any]], Any]) -> None:
        self._func = func

    async def render(self, path: Path, context: Mapping[str, Any]) -> str:
        return await invoke(self._func, path, context)


def default_engines(config: ViewsConfig) -> dict[str, Engine]:
    """The engines every views middleware starts with."""
    return {
        "kida": KidaEngine(
            config.directory,
            autoescape=config.autoescape,
            auto_reload=config.auto_reload,
        ),
    }
