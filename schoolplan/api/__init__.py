"""API endpoints package."""

from schoolplan.api.router import create_api_router

__all__ = ["create_api_router"]
