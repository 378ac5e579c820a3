"""Maps the authenticated Django user to a domain Actor.

Authentication itself is external; the role is trusted as given.
"""

from rest_framework.request import Request

from events.domain import Actor, Role

HOST_GROUP = "host"


def actor_from_request(request: Request) -> Actor:
    user = request.user
    if user.is_staff or user.is_superuser:
        role = Role.ADMIN
    elif user.groups.filter(name=HOST_GROUP).exists():
        role = Role.HOST
    else:
        role = Role.USER
    return Actor(user_id=user.pk, role=role)
