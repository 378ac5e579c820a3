"""Capability-based authorization.

Each operation declares one capability; the roles allowed to exercise it are
listed once here instead of being re-checked inside every service method.
"""

from enum import Enum

from events.domain.errors import ForbiddenError
from events.domain.models import Actor, Role


class Capability(Enum):
    """Operations gated by role."""

    CREATE_EVENT = "create_event"
    MODIFY_EVENT = "modify_event"
    APPROVE_EVENT = "approve_event"
    REJECT_EVENT = "reject_event"
    MANAGE_HALLS = "manage_halls"
    REGISTER = "register"


REQUIRED_ROLES: dict[Capability, frozenset[Role]] = {
    Capability.CREATE_EVENT: frozenset({Role.HOST, Role.ADMIN}),
    Capability.MODIFY_EVENT: frozenset({Role.HOST, Role.ADMIN}),
    Capability.APPROVE_EVENT: frozenset({Role.ADMIN}),
    Capability.REJECT_EVENT: frozenset({Role.ADMIN}),
    Capability.MANAGE_HALLS: frozenset({Role.ADMIN}),
    Capability.REGISTER: frozenset({Role.USER}),
}

# Capabilities where a non-admin may only act on resources they own.
OWNED_CAPABILITIES = frozenset({Capability.MODIFY_EVENT})


def authorize(actor: Actor, capability: Capability, owner_id: int | None = None) -> None:
    """Raise ForbiddenError unless ``actor`` may exercise ``capability``."""
    if actor.role not in REQUIRED_ROLES[capability]:
        raise ForbiddenError(f"Role '{actor.role.value}' may not {capability.value.replace('_', ' ')}")
    if capability in OWNED_CAPABILITIES and not actor.is_admin and owner_id != actor.user_id:
        raise ForbiddenError("Not authorized to modify this event")
