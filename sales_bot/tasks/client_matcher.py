"""
Client Lookup for the order flow.

Wraps the client query collaborator: trims the search, collapses duplicate
names and caps how many options the operator is shown.
"""

import logging
from typing import Optional

from ..config import CLIENT_RESULT_LIMIT
from .collaborators import ClientQuery

logger = logging.getLogger(__name__)


class ClientMatcher:
    """Finds client names for a typed search."""

    def __init__(self, clients: Optional[ClientQuery], limit: int = CLIENT_RESULT_LIMIT):
        self.clients = clients
        self.limit = limit

    async def search(self, text: str) -> list[str]:
        """
        Return unique client names for text, in collaborator order.

        Collaborator failures are logged and reported as no matches.
        """
        query = (text or "").strip()
        if not query or self.clients is None:
            return []
        try:
            rows = await self.clients.search_clients(query)
        except Exception as e:
            logger.warning("Client search failed: %s", e)
            return []

        names: list[str] = []
        for row in rows:
            if row.name and row.name not in names:
                names.append(row.name)
        return names[:self.limit]
