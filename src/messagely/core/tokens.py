from calendar import timegm
from datetime import datetime, timedelta
from typing import Callable
import logging

from jose import jwt, JWTError
from jose.exceptions import JWTClaimsError

from .database import utcnow
from .dto import TokenClaimsDTO
from .exceptions import InvalidTokenError, ExpiredTokenError, MalformedTokenError


class SessionIssuer:
    """
    Stateless issuer and verifier of signed session tokens (JWT).

    Tokens carry the username in ``sub`` together with ``iat`` and ``exp``
    as integer epoch seconds. Expiry is judged against the issuer's own clock
    rather than the library's, so the TTL boundary is exact and testable.

    Attributes:
        secret_key: Key used to sign and verify tokens
        algorithm: JWS algorithm, HS256 unless configured otherwise
        ttl: Lifetime of a freshly issued token
    """
    def __init__(
            self,
            secret_key: str,
            ttl: timedelta,
            algorithm: str = "HS256",
            clock: Callable[[], datetime] = utcnow,
            logger: logging.Logger | None = None
    ):
        self.secret_key = secret_key
        self.ttl = ttl
        self.algorithm = algorithm
        self._clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def _now_ts(self) -> int:
        return timegm(self._clock().utctimetuple())

    def issue(self, username: str) -> str:
        """
        Create a signed token for an already verified identity.
        Args:
            username: Subject of the token
        Returns:
            str: Encoded JWT
        """
        issued_at = self._now_ts()
        payload = {
            "sub": username,
            "iat": issued_at,
            "exp": issued_at + int(self.ttl.total_seconds()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenClaimsDTO:
        """
        Verify a token and return its claims.
        The signature is checked before any claim is trusted.
        Raises:
            MalformedTokenError: token is not a parseable JWT or lacks required claims
            InvalidTokenError: signature does not verify with the current key
            ExpiredTokenError: current time is at or past ``exp``
        """
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except (JWTError, AttributeError, TypeError) as e:
            raise MalformedTokenError("Token could not be parsed") from e

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTClaimsError as e:
            raise MalformedTokenError(f"Token claims are malformed: {e}") from e
        except JWTError as e:
            self.logger.debug("Token signature rejected: %s", e)
            raise InvalidTokenError("Token signature is invalid") from e

        sub = payload.get("sub")
        exp = payload.get("exp")
        iat = payload.get("iat", 0)
        if not isinstance(sub, str) or not sub:
            raise MalformedTokenError("Token has no subject")
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise MalformedTokenError("Token has no valid expiry")

        if self._now_ts() >= exp:
            raise ExpiredTokenError("Token has expired")

        return TokenClaimsDTO(sub=sub, iat=iat, exp=exp)

    def recover(self, token: str) -> str:
        """
        Recover the username a valid token was issued for.
        """
        return self.decode(token).sub
