"""View path resolution.

Maps a view name to the file that renders it::

    "about"       -> about.html          (extension appended)
    "docs"        -> docs/index.html     (directory view)
    "about.kida"  -> about.kida          (explicit extension)

Resolution makes at most two filesystem probes: the literal path, then,
only when the view name has no extension, the path with the default
extension appended.
"""

import stat
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import anyio

from tessera.errors import HTTPError, ViewNotFound

# stat() errors that mean "nothing there"
_MISSING = (FileNotFoundError, NotADirectoryError)


@dataclass(frozen=True, slots=True)
class ResolvedPaths:
    """Where a view lives: a directory root plus a path relative to it."""

    absolute_dir: Path
    relative_path: str

    @property
    def path(self) -> Path:
        """Absolute path of the view file."""
        return self.absolute_dir / self.relative_path

    @property
    def extension(self) -> str:
        """File extension without the leading dot ("" if none)."""
        return PurePosixPath(self.relative_path).suffix[1:]


def view_extension(view: str, default: str) -> str:
    """Extension of *view* without the dot, or *default* when it has none."""
    suffix = PurePosixPath(view).suffix
    return suffix[1:] if suffix else default


async def resolve_paths(base_dir: str | Path, rel_path: str, ext: str) -> ResolvedPaths:
    """Find the file that renders *rel_path* under *base_dir*.

    Raises ``ViewNotFound`` when neither the literal path nor (for
    extension-less names) ``rel_path.ext`` exists, and ``HTTPError(403)``
    when the view would resolve outside *base_dir*. Other ``OSError``
    subclasses propagate unchanged.
    """
    base = Path(base_dir)
    # "/about" names the same view as "about"
    candidate = rel_path.lstrip("/")
    try:
        return await _probe(base, candidate, ext)
    except _MISSING as exc:
        if PurePosixPath(candidate).suffix:
            raise ViewNotFound(rel_path) from exc

    try:
        return await _probe(base, f"{candidate}.{ext}", ext)
    except _MISSING as exc:
        raise ViewNotFound(rel_path) from exc


async def _probe(base: Path, rel_path: str, ext: str) -> ResolvedPaths:
    stats = await anyio.Path(base / rel_path).stat()

    if stat.S_ISDIR(stats.st_mode):
        resolved = ResolvedPaths(absolute_dir=base / rel_path, relative_path=f"index.{ext}")
        # A directory without an index is a dead end, not a cue to retry.
        if not await anyio.Path(resolved.path).is_file():
            raise ViewNotFound(f"{rel_path}/{resolved.relative_path}")
    else:
        resolved = ResolvedPaths(absolute_dir=base, relative_path=rel_path)

    await _check_contained(base, resolved.path)
    return resolved


async def _check_contained(base: Path, path: Path) -> None:
    root = Path(await anyio.Path(base).resolve())
    real = Path(await anyio.Path(path).resolve())
    if not real.is_relative_to(root):
        raise HTTPError(status=403, detail="Forbidden")
