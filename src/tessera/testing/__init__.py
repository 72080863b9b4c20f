"""Test utilities for tessera applications::

    from tessera.testing import TestClient
"""

from tessera.testing.client import TestClient

__all__ = ["TestClient"]
