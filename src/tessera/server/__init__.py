"""ASGI request handling: middleware composition, errors, response sending."""
