"""
asgi.py -- Application assembly for the billboard marketplace API.

The ASGI target for servers. api/main.py builds the app; this module is the
stable import path uvicorn and the CLI point at.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app

__all__ = ["app"]
