"""The authenticated actor as handed over by the session provider."""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
    ADMIN = "admin"


PRIVILEGED_ROLES = {Role.SELLER.value, Role.ADMIN.value}


@dataclass(frozen=True)
class Actor:
    """Identity and role of whoever is issuing a request.

    The core trusts this value for every ownership and authorization check;
    it never authenticates on its own.
    """

    user_id: str
    role: str = Role.CUSTOMER.value

    def __post_init__(self):
        Role(self.role)  # Raises ValueError for unknown roles

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_seller(self) -> bool:
        return self.role == Role.SELLER.value

    @property
    def is_customer(self) -> bool:
        return self.role == Role.CUSTOMER.value
