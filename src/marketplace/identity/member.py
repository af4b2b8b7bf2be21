"""Member directory: who is registered, under which role.

Authentication lives elsewhere. The marketplace only needs to know each
member's display name and role, mainly to find every admin when an order is
placed.
"""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.actor import Role


@marketplace.aggregate
class Member:
    user_id = Identifier(identifier=True, required=True)
    full_name = String(max_length=200)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    registered_at = DateTime()

    @classmethod
    def register(cls, user_id, full_name=None, role=Role.CUSTOMER.value):
        return cls(
            user_id=user_id,
            full_name=full_name,
            role=role,
            registered_at=datetime.now(UTC),
        )


@marketplace.command(part_of="Member")
class RegisterMember:
    user_id = Identifier(required=True)
    full_name = String(max_length=200)
    role = String(choices=Role, default=Role.CUSTOMER.value)


@marketplace.command(part_of="Member")
class ChangeMemberRole:
    user_id = Identifier(required=True)
    role = String(choices=Role, required=True)


@marketplace.command_handler(part_of=Member)
class MemberDirectoryHandler:
    @handle(RegisterMember)
    def register_member(self, command):
        member = Member.register(
            user_id=command.user_id,
            full_name=command.full_name,
            role=command.role,
        )
        current_domain.repository_for(Member).add(member)
        return str(member.user_id)

    @handle(ChangeMemberRole)
    def change_role(self, command):
        repo = current_domain.repository_for(Member)
        member = repo.get(command.user_id)
        member.role = command.role
        repo.add(member)


def admin_ids() -> list[str]:
    """Ids of every member holding the admin role, in a stable order."""
    repo = current_domain.repository_for(Member)
    admins = repo._dao.query.filter(role=Role.ADMIN.value).all().items
    return sorted(str(m.user_id) for m in admins)


def display_name(user_id: str, fallback: str = "A customer") -> str:
    try:
        member = current_domain.repository_for(Member).get(user_id)
    except ObjectNotFoundError:
        return fallback
    return member.full_name or fallback
