"""Marketplace bounded context: carts, orders, stock, notifications.

Buyers turn carts into orders, sellers and admins move orders through their
lifecycle, stock is decremented as orders commit, and every dashboard is kept
in sync through the realtime change feed.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
