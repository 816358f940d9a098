# server/api/auth.py

from pydantic import BaseModel
from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.deps import get_token_issuer, get_user_store
from core.domain import Principal, PublicUser
from core.errors import InvalidOrExpiredToken, MissingToken
from core.tokens import TokenIssuer
from core.users import CredentialStore


router = APIRouter(prefix="/api", tags=["Auth"])

bearer_scheme = HTTPBearer(auto_error=False, bearerFormat="JWT")


class RegisterRequest(BaseModel):
    username: str | None = None
    password: str | None = None
    role: str | None = None


class RegisterResponse(BaseModel):
    message: str
    user: PublicUser


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class Token(BaseModel):
    token: str


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Principal:
    if credentials is None:
        # header present but not a bearer credential
        if request.headers.get("Authorization"):
            raise InvalidOrExpiredToken()
        raise MissingToken()
    return issuer.verify(credentials.credentials)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
def register(req: RegisterRequest, users: CredentialStore = Depends(get_user_store)):
    """
    Registers a new user. ``role`` falls back to ``user`` unless it is
    exactly ``admin`` or ``user``.
    """
    user = users.register(req.username, req.password, req.role)
    return {"message": "User registered successfully", "user": user.public()}


@router.post("/login", response_model=Token)
def login(
    req: LoginRequest,
    users: CredentialStore = Depends(get_user_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """
    Exchanges username and password for a bearer token valid for one hour.
    """
    user = users.authenticate(req.username, req.password)
    return {"token": issuer.issue(user.username, user.role)}
