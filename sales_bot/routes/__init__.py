"""
Routes Package for Sales Bot
============================

This package contains the API route definitions. Each module defines a
FastAPI APIRouter with related endpoints grouped together.

Architecture Overview:
----------------------
- bot.py: Webhook called by the chat transport for every operator event
- admin.py: Catalog reload and order lookups for back-office staff

Router Registration:
--------------------
Routers are registered in main.py:

    app.include_router(bot_router)
    app.include_router(admin_router)

Error Handling:
---------------
- 404: Not found (unknown order id)
- 422: Validation error (malformed event body)
- 429: Too many requests (rate limited)
- 503: Service unavailable (bot not initialized)
"""

from .bot import bot_router, limiter
from .admin import admin_router

__all__ = [
    "bot_router",
    "admin_router",
    "limiter",
]
