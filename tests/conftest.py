"""Shared fixtures: a views directory and a recording engine."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest


class RecordingEngine:
    """Engine double that records calls and returns canned output."""

    def __init__(self, outputs: Mapping[str, str] | None = None) -> None:
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[Path, dict[str, Any]]] = []

    async def render(self, path: Path, context: Mapping[str, Any]) -> str:
        self.calls.append((path, dict(context)))
        return self.outputs.get(path.name, f"<p>{path.name}</p>")


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    """A views directory with plain, extension-less and nested views."""
    views = tmp_path / "views"
    views.mkdir()

    (views / "about.html").write_text("<h1>About</h1>")
    (views / "index.html").write_text("<h1>Home</h1>")
    (views / "about.ejs").write_text("ignored by the recording engine")
    (views / "main.ejs").write_text("ignored by the recording engine")

    # Extension-less file shadowing notes.html
    (views / "notes").write_text("literal notes")
    (views / "notes.html").write_text("<p>notes.html</p>")

    docs = views / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<h1>Docs</h1>")
    (docs / "guide.html").write_text("<h1>Guide</h1>")

    nested = docs / "api"
    nested.mkdir()
    (nested / "index.html").write_text("<h1>API</h1>")

    (views / "empty").mkdir()

    return views
