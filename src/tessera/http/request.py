"""Immutable HTTP request.

Frozen metadata read from the ASGI scope. Views never read the body,
so the request only carries what routing and templates look at.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import parse_qsl

from tessera._internal.asgi import Scope


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Header names are lower-cased; when a header repeats, the first
    value wins.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""
    client: tuple[str, int] | None = None

    @classmethod
    def from_asgi(cls, scope: Scope) -> "Request":
        """Build a Request from a raw ASGI ``http`` scope."""
        headers: dict[str, str] = {}
        for name, value in scope.get("headers", ()):
            headers.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=MappingProxyType(headers),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            client=tuple(client) if client else None,
        )

    @property
    def query(self) -> dict[str, str]:
        """Query parameters; the first value wins for repeated keys."""
        params: dict[str, str] = {}
        for key, value in parse_qsl(self.query_string, keep_blank_values=True):
            params.setdefault(key, value)
        return params

    @property
    def url(self) -> str:
        """Full request URL (path + query string)."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path
