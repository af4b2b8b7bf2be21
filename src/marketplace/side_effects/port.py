"""Port for work that runs outside the request, next to the data store.

Checkout asks for notifications through this port instead of creating them
itself. The handler behind it verifies the caller and does the writes.
"""

from abc import ABC, abstractmethod

CREATE_ORDER_NOTIFICATIONS = "create-order-notifications"


class SideEffectPort(ABC):
    @abstractmethod
    def invoke(self, function: str, payload: dict) -> dict:
        """Run ``function`` with ``payload`` and return its result.

        Raises ``NotificationDispatchError`` when the call fails.
        """
