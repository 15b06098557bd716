"""Authenticated principal and the capabilities resolved for it.

Authentication itself belongs to the managed auth provider. What reaches this
backend is the user id, e-mail and role set the provider vouches for; the
capabilities are derived from that role set once, when the principal is built,
and then passed explicitly to whatever needs them.
"""

from dataclasses import dataclass, field

from fastapi import Header, HTTPException

ADMIN_ROLE = "admin"
DRIVER_ROLE = "driver"


@dataclass(frozen=True)
class Capabilities:
    is_admin: bool = False
    is_driver: bool = False

    @classmethod
    def from_roles(cls, roles) -> "Capabilities":
        normalized = {str(role).strip().lower() for role in roles or [] if str(role).strip()}
        return cls(is_admin=ADMIN_ROLE in normalized, is_driver=DRIVER_ROLE in normalized)


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    capabilities: Capabilities = field(default_factory=Capabilities)

    @classmethod
    def establish(cls, user_id: str, email: str, roles=()) -> "Principal":
        """Build a principal for a freshly authenticated session."""
        return cls(
            user_id=str(user_id),
            email=(email or "").strip(),
            capabilities=Capabilities.from_roles(roles),
        )


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------
def current_principal(
    x_user_id: str = Header(default=""),
    x_user_email: str = Header(default=""),
    x_user_roles: str = Header(default=""),
) -> Principal:
    """Resolve the principal forwarded by the auth provider."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Principal.establish(x_user_id, x_user_email, x_user_roles.split(","))


def require_admin(principal: Principal) -> Principal:
    if not principal.capabilities.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return principal


def require_driver(principal: Principal) -> Principal:
    if not principal.capabilities.is_driver:
        raise HTTPException(status_code=403, detail="Driver access required")
    return principal
