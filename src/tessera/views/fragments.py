"""Split rendered HTML into layout fragments.

A view rendered for a layout is cut into four slots the layout template
places where it wants them::

    <head>
      {{ meta }}
      {{ style }}
    </head>
    <body>
      {{ body }}
      {{ script }}
    </body>

Each slot is an independent regex scan over the rendered markup, not a
parse. Input is the engine's own output, so tags are assumed well formed;
an unclosed ``<script>`` simply is not extracted and stays in ``body``.
Patterns are case-sensitive.
"""

import re
from dataclasses import asdict, dataclass
from typing import Any

_SCRIPT_RE = re.compile(r"<script.*?>.*?</script>", re.DOTALL)
_STYLE_RE = re.compile(r"<style.*?>.*?</style>|<link.*?>(?:</link>)?", re.DOTALL)
_META_RE = re.compile(r"<meta.*?>", re.DOTALL)


@dataclass(frozen=True, slots=True)
class Fragments:
    """The four layout slots cut from one rendered view."""

    script: str = ""
    style: str = ""
    meta: str = ""
    body: str = ""

    def as_context(self) -> dict[str, Any]:
        """Slots as template context keys."""
        return asdict(self)


def _collect(pattern: re.Pattern[str], html: str) -> str:
    return "\n".join(match.group(0) for match in pattern.finditer(html))


def compose_fragments(html: str) -> Fragments:
    """Partition *html* into script, style, meta and body fragments.

    Never fails: a category with no matches is ``""``. ``body`` is *html*
    with every extracted element removed and surrounding whitespace
    trimmed, so composing ``body`` again extracts nothing.
    """
    body = html
    for pattern in (_SCRIPT_RE, _STYLE_RE, _META_RE):
        body = pattern.sub("", body)

    return Fragments(
        script=_collect(_SCRIPT_RE, html),
        style=_collect(_STYLE_RE, html),
        meta=_collect(_META_RE, html),
        body=body.strip(),
    )
