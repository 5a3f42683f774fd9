"""
asgi.py -- Application assembly for ShopSession.

This is the import target for ASGI servers. api/main.py owns the FastAPI
instance; keeping the server entry point here means the server command never
changes when the app module is reorganized.

Run with:  uvicorn asgi:app --reload
           python main.py
"""

from api.main import app

__all__ = ["app"]
