"""JWT Token Issuing and Validation (HS256 bearer tokens)"""
import jwt
from typing import Any, Dict, Optional
from datetime import timedelta

from ..config.settings import settings
from ..domain.enums import Role
from ..domain.errors import AuthenticationError, InvalidTokenError
from ..domain.models import ActorContext, Personnel
from .logger import get_logger
from .time import utc_now

logger = get_logger(__name__)


class TokenService:
    """Signed bearer token issuer and validator"""

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_hours: Optional[int] = None
    ):
        self._secret = secret or settings.jwt_secret
        self._algorithm = algorithm or settings.jwt_algorithm
        self._lifetime = timedelta(hours=expire_hours or settings.access_token_expire_hours)

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds"""
        return int(self._lifetime.total_seconds())

    def issue(self, personnel: Personnel) -> str:
        """
        Issue a token carrying the identity claims of a personnel record

        Args:
            personnel: Authenticated personnel

        Returns:
            Encoded JWT string
        """
        now = utc_now()
        claims = {
            "sub": personnel.personnel_id,
            "nrp": personnel.nrp,
            "email": personnel.email,
            "name": personnel.name,
            "role": personnel.role.value,
            "unit_id": personnel.unit_id,
            "unit_name": personnel.unit_name,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def validate_token(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Validate signature and expiry of a bearer token

        Raises:
            AuthenticationError: If the token is missing
            InvalidTokenError: If the token is malformed, tampered or expired
        """
        if not token:
            raise AuthenticationError("Token is missing")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]}
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token expired")
            raise InvalidTokenError("Token has expired")
        except jwt.PyJWTError as e:
            logger.warning(f"JWT validation error: {e}")
            raise InvalidTokenError("Invalid token")

    def get_actor_context(self, token: Optional[str]) -> ActorContext:
        """Decode a token into the identity it was issued for"""
        claims = self.validate_token(token)

        try:
            role = Role(claims.get("role"))
        except ValueError:
            raise InvalidTokenError("Invalid token role claim")

        if not claims.get("nrp") or not claims.get("name"):
            raise InvalidTokenError("Token is missing identity claims")

        return ActorContext(
            personnel_id=claims["sub"],
            nrp=claims["nrp"],
            name=claims["name"],
            role=role,
            email=claims.get("email"),
            unit_id=claims.get("unit_id"),
            unit_name=claims.get("unit_name"),
        )


# Global token service instance
_token_service: Optional[TokenService] = None


def get_token_service() -> TokenService:
    """Get global token service instance"""
    global _token_service
    if _token_service is None:
        _token_service = TokenService()
    return _token_service
