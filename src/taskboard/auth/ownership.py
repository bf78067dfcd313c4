"""Ownership guard — the only authorization rule in the system.

A task may be updated or deleted only by the user who owns it. Owners
are compared by email, the same value carried in the token subject.
Listing and creating are never guarded here: listing is scoped by the
query itself and creation always assigns the acting user as owner.
"""

from taskboard.errors import UnauthorizedError


def authorize(acting_email: str, owner_email: str) -> None:
    """Raise UnauthorizedError unless the acting user owns the resource."""
    if acting_email != owner_email:
        raise UnauthorizedError()
