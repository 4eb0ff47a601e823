"""
Per-request session gate.

Resolves the caller's Principal from the token pair the transport reads:

1. either token missing                 → 401 UNAUTHORIZED
2. access token valid                   → authenticated
3. access invalid, refresh rotates      → new pair written to the response,
                                          authenticated
4. anything else, including exceptions  → 401 UNAUTHORIZED

On rotation the principal is rebuilt from the user record, so role changes
take effect and suspended or deleted users lose their session.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request, Response

from errors import AuthError
from infrastructure.session_transport import TokenTransport
from repositories.user_repository import UserRepository
from schemas.models.base import parse_object_id
from schemas.models.principal import Principal
from services.token_service import TokenService
from shared.logging import get_logger, log_with_context

log = get_logger(__name__)


class SessionGate:
    def __init__(
        self,
        tokens: TokenService,
        users: UserRepository,
        transport: TokenTransport,
    ) -> None:
        self._tokens = tokens
        self._users = users
        self._transport = transport

    async def authenticate(self, request: Request, response: Response) -> Principal:
        try:
            principal = await self._resolve(request, response)
        except Exception as e:
            log.warning(
                "session_verification_error",
                path=request.url.path,
                error_type=type(e).__name__,
            )
            principal = None

        if principal is None:
            raise AuthError("UNAUTHORIZED")
        request.state.principal = principal
        return principal

    async def _resolve(self, request: Request, response: Response) -> Optional[Principal]:
        access, refresh = self._transport.read(request)
        if not access or not refresh:
            return None

        principal = self._tokens.verify_access(access)
        if principal is not None:
            return principal

        user_id = self._tokens.verify_refresh(refresh)
        if user_id is None:
            return None

        session_log = log_with_context(log, user_id=user_id, path=request.url.path)
        user = await self._users.get_by_id(parse_object_id(user_id))
        if user is None or user.is_suspended:
            session_log.warning("session_rotation_refused", reason="user_unavailable")
            return None

        principal = user.to_principal()
        pair = await self._tokens.rotate(refresh, principal)
        if pair is None:
            return None

        self._transport.write(response, pair)
        # Error handlers build their own response and re-apply this pair
        request.state.rotated_pair = pair
        session_log.info("session_rotated")
        return principal


async def get_principal(request: Request, response: Response) -> Principal:
    """FastAPI dependency: authenticate the request via ``app.state.session_gate``."""
    gate: SessionGate = request.app.state.session_gate
    return await gate.authenticate(request, response)
