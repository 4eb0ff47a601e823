"""Role gate layered on top of the session gate."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Depends

from errors import AuthError
from middleware.session import get_principal
from schemas.models.principal import Principal
from shared.logging import get_logger

log = get_logger(__name__)


def require_role(role: str) -> Callable[..., Awaitable[Principal]]:
    """Return a dependency that admits only principals whose role is *role*."""

    async def _role_gate(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role != role:
            log.warning(
                "role_check_failed",
                user_id=principal.user_id,
                role=principal.role,
                required_role=role,
            )
            raise AuthError("UNAUTHORIZED")
        return principal

    return _role_gate
