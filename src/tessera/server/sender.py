"""ASGI response sending — translates a tessera Response to ASGI messages."""

from tessera._internal.asgi import Send
from tessera.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a tessera Response into ASGI send() calls.

    ``Content-Length`` is always computed from the body actually sent;
    a value set by middleware is replaced. For ``HEAD`` requests the
    length of the full body is reported but no body is sent.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        if name.lower() == "content-length":
            continue
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )
