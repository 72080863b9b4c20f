"""Views — resolve view names to files, render them, compose layouts.

Public API:
    Views -- middleware installing ``ctx.render``
    ViewRenderer -- the per-request renderer behind ``ctx.render``
    compose_fragments / Fragments -- split rendered HTML into layout slots
    resolve_paths / ResolvedPaths -- view name to file resolution
    Engine, KidaEngine, FunctionEngine -- rendering engines
    send_file -- send a file as the response
"""

from tessera.views.engines import Engine, FunctionEngine, KidaEngine, default_engines
from tessera.views.fragments import Fragments, compose_fragments
from tessera.views.middleware import COMPOSED_KEY, LAYOUT_KEY, ViewRenderer, Views
from tessera.views.resolver import ResolvedPaths, resolve_paths, view_extension
from tessera.views.send import send_file

__all__ = [
    "COMPOSED_KEY",
    "LAYOUT_KEY",
    "Engine",
    "Fragments",
    "FunctionEngine",
    "KidaEngine",
    "ResolvedPaths",
    "ViewRenderer",
    "Views",
    "compose_fragments",
    "default_engines",
    "resolve_paths",
    "send_file",
    "view_extension",
]
