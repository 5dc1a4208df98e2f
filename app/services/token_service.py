"""
JWT access/refresh token lifecycle
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import uuid4

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.models.user import User
from app.schemas.auth import TokenClaims, TokenPair
from app.services.auth import AuthService

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class TokenService:
    """
    Issues, verifies and rotates the access/refresh token pair.

    Each user record stores exactly one refresh token. Rotation overwrites it,
    so every previously issued refresh token stops being accepted. Concurrent
    refreshes for the same user race and the last write wins.
    """

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    def _secret_for(self, kind: str) -> str:
        if kind == ACCESS:
            return self.settings.access_token_secret
        if kind == REFRESH:
            return self.settings.refresh_token_secret
        raise ValueError(f"Unknown token kind: {kind}")

    def _encode(self, claims: Dict[str, Any], kind: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = claims.copy()
        to_encode.update({
            "type": kind,
            "iat": now,
            "exp": now + expires_delta,
            # Keeps two tokens issued in the same second distinct
            "jti": uuid4().hex
        })
        return jwt.encode(to_encode, self._secret_for(kind), algorithm=self.settings.algorithm)

    def issue_access_token(self, user: User) -> str:
        """
        Create a short-lived access token carrying the public identity.

        Args:
            user: User the token is bound to

        Returns:
            str: Signed JWT
        """
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "fullname": user.fullname,
            "username": user.username
        }
        return self._encode(
            claims,
            ACCESS,
            timedelta(minutes=self.settings.access_token_expire_minutes)
        )

    def issue_refresh_token(self, user: User) -> str:
        """
        Create a long-lived refresh token carrying only the user id.

        Args:
            user: User the token is bound to

        Returns:
            str: Signed JWT
        """
        return self._encode(
            {"sub": str(user.id)},
            REFRESH,
            timedelta(days=self.settings.refresh_token_expire_days)
        )

    def verify(self, token: str, expected_kind: str = ACCESS) -> TokenClaims:
        """
        Verify signature, expiry and kind of a token.

        Args:
            token: JWT string
            expected_kind: "access" or "refresh"

        Returns:
            TokenClaims: Decoded claims

        Raises:
            UnauthorizedError: If the token is invalid, expired or of the wrong kind
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_for(expected_kind),
                algorithms=[self.settings.algorithm]
            )
            claims = TokenClaims.model_validate(payload)
        except (JWTError, PydanticValidationError) as e:
            logger.debug(f"Rejected {expected_kind} token: {e}")
            raise UnauthorizedError(f"Invalid {expected_kind} token")

        if claims.type != expected_kind:
            raise UnauthorizedError(f"Invalid {expected_kind} token")

        return claims

    async def rotate_tokens(self, user: User) -> TokenPair:
        """
        Issue a new token pair and store the refresh token on the user.

        Args:
            user: User to issue tokens for

        Returns:
            TokenPair: New access and refresh token
        """
        access_token = self.issue_access_token(user)
        refresh_token = self.issue_refresh_token(user)

        await self.db.execute(
            update(User)
            .where(User.id == user.id)
            .values(refresh_token=refresh_token)
        )
        await self.db.commit()

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def refresh(self, presented_refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair.

        Args:
            presented_refresh_token: Refresh token sent by the client

        Returns:
            TokenPair: Rotated tokens

        Raises:
            UnauthorizedError: If the token is invalid or its user is gone
            ForbiddenError: If the token is not the one currently stored
        """
        claims = self.verify(presented_refresh_token, REFRESH)

        user = await AuthService.get_user_by_id(self.db, claims.sub)
        if not user:
            raise UnauthorizedError("Invalid refresh token")

        stored = user.refresh_token or ""
        if not secrets.compare_digest(presented_refresh_token.encode(), stored.encode()):
            logger.warning(f"Refresh token reuse or revoked token for user {user.id}")
            raise ForbiddenError("Refresh token is expired or used")

        return await self.rotate_tokens(user)

    async def revoke(self, user: User) -> None:
        """Clear the stored refresh token so no outstanding one is accepted."""
        await self.db.execute(
            update(User)
            .where(User.id == user.id)
            .values(refresh_token=None)
        )
        await self.db.commit()
