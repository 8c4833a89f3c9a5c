"""FastAPI application exposing the alert trigger and job search."""

from .app import CORS_HEADERS, create_app

__all__ = ["create_app", "CORS_HEADERS"]
