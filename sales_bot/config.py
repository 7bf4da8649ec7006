"""
Configuration Module for Sales Bot
==================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the Sales Bot application. Every value is read once
at import time; tests override them with monkeypatch.

Configuration Categories:
-------------------------
- **Database**: SQLAlchemy URL shared by the catalog and the order table.

- **Sessions**: Idle timeout for in-progress order conversations. The default
  of 0 keeps a session alive until it is completed or cancelled.

- **Matching**: Result caps for product candidates and client names.

- **Listings**: Row caps for the stock, products and combined search commands.

- **Notifications**: Optional webhook that receives every new order.

- **Rate Limiting**: slowapi limit applied to the bot webhook, keyed per user.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./sales_bot.db")
- SESSION_IDLE_TIMEOUT_SECONDS: Session expiry, 0 disables (default: 0)
- MATCH_RESULT_LIMIT: Max product candidates per line (default: 6)
- CLIENT_RESULT_LIMIT: Max client names offered (default: 8)
- STOCK_LOOKUP_LIMIT: Rows shown by /stock (default: 15)
- PRODUCT_LIST_LIMIT: Rows shown by /productos (default: 20)
- ORDER_WEBHOOK_URL: Webhook for new orders (default: disabled)
- WEBHOOK_TIMEOUT_SECONDS: Webhook HTTP timeout (default: 5)
- RATE_LIMIT_BOT: Bot webhook rate limit (default: "60 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- MAX_MESSAGE_LENGTH: Max inbound text length (default: 4000)

Usage:
------
    from sales_bot.config import MATCH_RESULT_LIMIT, SESSION_IDLE_TIMEOUT_SECONDS
"""

import os


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./sales_bot.db")


# =============================================================================
# Session Configuration
# =============================================================================
# Sessions live in memory only. A restart drops every in-progress order.

SESSION_IDLE_TIMEOUT_SECONDS: int = int(os.getenv("SESSION_IDLE_TIMEOUT_SECONDS", "0"))


# =============================================================================
# Matching Configuration
# =============================================================================

MATCH_RESULT_LIMIT: int = int(os.getenv("MATCH_RESULT_LIMIT", "6"))
CLIENT_RESULT_LIMIT: int = int(os.getenv("CLIENT_RESULT_LIMIT", "8"))

# Fallback search queries the catalog once per token variant, capped here
FALLBACK_VARIANTS_PER_TOKEN: int = 3


# =============================================================================
# Listing Configuration
# =============================================================================

STOCK_LOOKUP_LIMIT: int = int(os.getenv("STOCK_LOOKUP_LIMIT", "15"))
PRODUCT_LIST_LIMIT: int = int(os.getenv("PRODUCT_LIST_LIMIT", "20"))
COMBINED_SEARCH_LIMIT: int = 10


# =============================================================================
# Notification Configuration
# =============================================================================

ORDER_WEBHOOK_URL: str = os.getenv("ORDER_WEBHOOK_URL", "")
WEBHOOK_TIMEOUT_SECONDS: float = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "5"))


# =============================================================================
# Rate Limiting / Input Validation
# =============================================================================

RATE_LIMIT_BOT: str = os.getenv("RATE_LIMIT_BOT", "60 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "4000"))


def get_rate_limit_bot() -> str:
    """
    Return the current bot webhook rate limit.

    This function allows dynamic override in tests without modifying
    the module-level constant.
    """
    return RATE_LIMIT_BOT
