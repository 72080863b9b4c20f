"""Send a file from disk as the response body.

Used by the views middleware for plain ``.html`` views that need no
template engine.

Security: resolves symlinks and verifies the final path is within
``root`` to prevent path traversal.
"""

import logging
import mimetypes
from pathlib import Path

import anyio

from tessera.context import Context
from tessera.errors import HTTPError, NotFound

logger = logging.getLogger("tessera.views")


async def send_file(
    ctx: Context,
    relative_path: str,
    *,
    root: str | Path,
    default_type: str | None = None,
) -> None:
    """Write ``root/relative_path`` into *ctx* as the response.

    The content type is guessed from the file name; *default_type* is
    used when the name gives no hint (e.g. an extension-less view).

    Raises ``HTTPError(403)`` if the path escapes *root* and
    ``NotFound`` if it is not a regular file.
    """
    directory = Path(await anyio.Path(root).resolve())
    file_path = Path(await anyio.Path(directory / relative_path.lstrip("/")).resolve())
    if not file_path.is_relative_to(directory):
        raise HTTPError(status=403, detail="Forbidden")
    if not await anyio.Path(file_path).is_file():
        raise NotFound(f"File not found: {relative_path}")

    content_type, _ = mimetypes.guess_type(file_path.name)
    if content_type is None:
        content_type = default_type or "application/octet-stream"
    elif content_type.startswith("text/"):
        content_type = f"{content_type}; charset=utf-8"

    body = await anyio.Path(file_path).read_bytes()
    logger.debug("send %s (%d bytes)", file_path, len(body))

    ctx.body = body
    ctx.content_type = content_type
    ctx.set_header("Content-Length", str(len(body)))
