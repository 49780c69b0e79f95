"""
abiquo_client.api - Optional REST API Gateway
==============================================

This module provides an optional FastAPI-based REST gateway
exposing an Abiquo installation via HTTP.

Usage
-----
>>> from abiquo_client.api import create_app
>>> app = create_app()
>>> # Run with: uvicorn abiquo_client.api:app

Or run directly:
>>> python -m abiquo_client.api

"""

from abiquo_client.core.connection import load_env_file

# Load .env before building the default gateway
load_env_file()

from abiquo_client.api.gateway import create_app, AbiquoGateway  # noqa: E402

# Create default app instance for uvicorn
app = create_app()

__all__ = [
    "create_app",
    "AbiquoGateway",
    "app",
]
