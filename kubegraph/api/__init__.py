"""REST API layer for kubegraph.

Exposes:
    create_app -- FastAPI application factory.
"""

from kubegraph.api.app import create_app

__all__ = ["create_app"]
