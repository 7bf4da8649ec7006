"""
Services Package for Sales Bot
==============================

This package contains the infrastructure behind the order conversation:
everything that holds state across events or talks to the database or the
network.

Available Services:
-------------------
- **session**: In-memory session store with per-user locks
- **catalog**: SQLAlchemy product and client search
- **order**: Order persistence and read queries
- **notifications**: "Order created" listeners and webhook

Design Philosophy:
------------------
The conversation core (sales_bot.tasks) only knows the collaborator
interfaces in sales_bot.tasks.collaborators. Services implement them and
receive their dependencies (session factories, URLs) rather than creating
them, so tests can swap any of them for an in-memory fake.

Usage:
------
    from sales_bot.services.session import SessionStore
    from sales_bot.services.catalog import SqlCatalogQuery, SqlClientQuery
    from sales_bot.services.order import SqlOrderRepository
    from sales_bot.services.notifications import WebhookOrderNotifier
"""
