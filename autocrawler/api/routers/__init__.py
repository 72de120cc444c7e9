"""API router factory functions."""
from .crawler import create_crawler_router
from .systems import create_systems_router

__all__ = [
    "create_crawler_router",
    "create_systems_router",
]
