"""Authorization rules for the user resource.

Pure decisions: nothing here touches the database. Whatever live data a rule
depends on (the admin count for self-deletion) is fetched by the caller and
passed in.
"""

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Protocol

Role = Literal["user", "admin"]

ADMIN: Role = "admin"

DenyReason = Literal[
    "forbidden-not-self",
    "forbidden-role-change",
    "forbidden-last-admin",
    "forbidden-not-admin",
]


class Identity(Protocol):
    id: int
    role: str


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None


ALLOW = Decision(allowed=True)


def deny(reason: DenyReason) -> Decision:
    return Decision(allowed=False, reason=reason)


def is_admin(identity: Identity) -> bool:
    return identity.role == ADMIN


def _acts_on_other(identity: Identity, target_id: int) -> bool:
    return not is_admin(identity) and identity.id != target_id


def can_view(identity: Identity, target_id: int) -> bool:
    # any authenticated caller may read any profile
    return True


def can_list_all(identity: Identity) -> bool:
    return is_admin(identity)


def can_update(identity: Identity, target_id: int, requested_fields: Iterable[str]) -> Decision:
    # not-self always wins over field-specific checks
    if _acts_on_other(identity, target_id):
        return deny("forbidden-not-self")
    if "role" in set(requested_fields) and not is_admin(identity):
        return deny("forbidden-role-change")
    return ALLOW


def needs_admin_count(identity: Identity, target_id: int) -> bool:
    """True when can_delete() depends on how many admins currently exist."""
    return is_admin(identity) and identity.id == target_id


def can_delete(identity: Identity, target_id: int, admin_count: Optional[int] = None) -> Decision:
    if _acts_on_other(identity, target_id):
        return deny("forbidden-not-self")
    if needs_admin_count(identity, target_id) and (admin_count is None or admin_count <= 1):
        return deny("forbidden-last-admin")
    return ALLOW
