# server/core/tokens.py

from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from core.config import Settings
from core.domain import Principal, Role
from core.errors import InvalidOrExpiredToken


ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60


class TokenIssuer:
    """
    Issues and verifies signed bearer tokens carrying ``{username, role}``.
    Verification checks the signature and expiry only; there is no revocation.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = ALGORITHM,
        ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue(self, username: str, role: Role) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "username": username,
            "role": Role(role).value,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise InvalidOrExpiredToken()

        username = payload.get("username")
        role = payload.get("role")
        if not isinstance(username, str) or not username:
            raise InvalidOrExpiredToken()
        try:
            return Principal(username=username, role=Role(role))
        except ValueError:
            raise InvalidOrExpiredToken()
