"""Test utilities for modserver hosts.

::

    from modserver.testing import TestClient
"""

from modserver.testing.client import TestClient

__all__ = ["TestClient"]
