"""
Session credential issuing and verification.

Tokens are HS256 JWTs carrying the user id and the effective role. They are
verified locally, with no store round trip.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from ..middleware.error_middleware import Unauthenticated
from ..utils.validators import Validators

logger = logging.getLogger(__name__)


class SessionService:
    """Signs and verifies session tokens"""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        if not secret:
            raise ValueError("A JWT secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(seconds=ttl_seconds)

    def sign(self, user_id: str, role: str, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Dict[str, str]:
        """Decode ``token`` into ``{"id", "role"}`` or raise Unauthenticated"""
        if not token:
            raise Unauthenticated("User not authenticated")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except ExpiredSignatureError:
            logger.info("Rejected expired session token")
            raise Unauthenticated("Session expired")
        except InvalidTokenError as e:
            logger.warning(f"Rejected invalid session token: {e}")
            raise Unauthenticated("User not authenticated")

        user_id = payload.get("id")
        role = payload.get("role")
        if not Validators.validate_id(user_id) or not Validators.validate_role(role):
            raise Unauthenticated("User not authenticated")

        return {"id": user_id, "role": role}
