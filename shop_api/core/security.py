from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import Depends, Header, HTTPException, status

from shop_api.core.config import settings

logger = logging.getLogger(__name__)

_ROLE_ADMIN = settings.ROLE_ADMIN


@dataclass
class AuthContext:
    """Identity forwarded by the auth gateway. Trusted as-is."""

    user_id: int
    email: Optional[str] = None
    roles: List[str] = field(default_factory=list)


def _roles_from_header(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [r.strip() for r in value.split(",") if r.strip()]


def require_user(
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_auth_request_groups: Optional[str] = Header(default=None),
) -> AuthContext:
    """Builds the AuthContext from the gateway headers, 401 when there is none."""
    if not x_auth_request_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    try:
        user_id = int(x_auth_request_user)
    except ValueError:
        logger.warning("gateway user header is not a customer id", extra={"user": x_auth_request_user})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    return AuthContext(
        user_id=user_id,
        email=x_auth_request_email,
        roles=_roles_from_header(x_auth_request_groups),
    )


def require_admin(auth: AuthContext = Depends(require_user)) -> AuthContext:
    if _ROLE_ADMIN not in auth.roles:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return auth
