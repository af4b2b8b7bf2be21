"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from marketplace.identity.member import RegisterMember
from marketplace.notification.feed import recent_notifications
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for the exception raised by a When step."""
    return {"exc": None}


@given(parsers.cfparse('an admin "{user_id}" is registered'))
def register_admin(user_id):
    current_domain.process(RegisterMember(user_id=user_id, role="admin"), asynchronous=False)


@then(parsers.cfparse('"{user_id}" has a notification titled "{title}"'))
def has_notification(user_id, title):
    assert title in [n.title for n in recent_notifications(user_id)]
