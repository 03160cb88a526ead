# deps/authz.py
from fastapi import Depends

from deps.auth import get_current_claims
from errors import Forbidden


def require_roles(*roles: str):
    """Dependency factory: pass the token claims through when the role matches."""
    def dep(claims: dict = Depends(get_current_claims)) -> dict:
        if claims.get("role") not in roles:
            raise Forbidden("Access denied. Required role: " + " or ".join(roles))
        return claims
    return dep


require_admin = require_roles("admin")
require_engineer = require_roles("engineer")
require_user = require_roles("admin", "engineer")


def caller_id(claims: dict) -> int:
    return int(claims["sub"])
