"""Bearer token inspection and the active-token holder.

The token is never verified here: the server does that. Claims are only
decoded to decide, before spending a request, whether the token has
already expired.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import jwt

from squashlink.shared.constants import SquashOperationNames
from squashlink.shared.errors import ErrorContext, TokenMalformedError

logger = logging.getLogger(__name__)


def decode_claims(token: str) -> dict[str, Any]:
    """Decode a JWT payload without verifying its signature.

    Args:
        token: Encoded JWT

    Returns:
        The claims dictionary

    Raises:
        TokenMalformedError: If the token is empty or not a decodable JWT
    """
    if not token:
        raise TokenMalformedError(context=ErrorContext(operation="decode_claims"))

    try:
        claims = jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
        )
    except jwt.PyJWTError as e:
        raise TokenMalformedError(
            context=ErrorContext(operation="decode_claims"),
            original_error=e,
        ) from e

    return claims


def _as_epoch(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _to_datetime(value: Any) -> datetime | None:
    epoch = _as_epoch(value)
    if epoch is None:
        return None
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


@dataclass(frozen=True)
class TokenInfo:
    """Diagnostic snapshot of a token's claims.

    Never used for access decisions; those always call
    TokenContext.is_expired() fresh.
    """

    subject: str | None
    permissions: Any
    issued_at: datetime | None
    expires_at: datetime | None
    is_expired: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "permissions": self.permissions,
            "issued_at": self.issued_at.isoformat() if self.issued_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "is_expired": self.is_expired,
        }


class TokenContext:
    """Holder of the single active bearer token.

    Shared by every request of the process. replace() swaps the token
    atomically; a request that already attached the previous token keeps it.

    Args:
        token: Initial token, read from configuration or the environment
        clock: Returns the current epoch time in seconds
    """

    def __init__(
        self,
        token: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._token = token
        self._clock = clock
        self._lock = threading.Lock()

    def current_token(self) -> str:
        with self._lock:
            return self._token

    def replace(self, new_token: str) -> None:
        """Make new_token the active token for all subsequent calls."""
        with self._lock:
            self._token = new_token
        logger.info(
            "SquashTM API token replaced",
            extra={"operation": SquashOperationNames.REPLACE_TOKEN},
        )

    def _now(self) -> int:
        # Whole seconds: a token expiring in the current second is still valid
        return int(self._clock())

    def _expired(self, claims: dict[str, Any]) -> bool:
        exp = _as_epoch(claims.get("exp"))
        if exp is None:
            return True
        return exp < self._now()

    def is_expired(self) -> bool:
        """Return True when the active token's exp claim lies in the past.

        Undecodable tokens and tokens without a numeric exp count as expired.
        """
        try:
            claims = decode_claims(self.current_token())
        except TokenMalformedError:
            logger.warning("Active SquashTM token could not be decoded; treating as expired")
            return True
        return self._expired(claims)

    def describe(self) -> TokenInfo | None:
        """Return the active token's claims, or None if it cannot be decoded."""
        try:
            claims = decode_claims(self.current_token())
        except TokenMalformedError:
            return None

        subject = claims.get("sub")
        return TokenInfo(
            subject=str(subject) if subject is not None else None,
            permissions=claims.get("permissions"),
            issued_at=_to_datetime(claims.get("iat")),
            expires_at=_to_datetime(claims.get("exp")),
            is_expired=self._expired(claims),
        )


__all__ = [
    "TokenContext",
    "TokenInfo",
    "decode_claims",
]
