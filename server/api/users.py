# server/api/users.py

from fastapi import APIRouter, Depends

from api.auth import get_current_user
from api.deps import get_user_store
from core.domain import Principal, PublicUser
from core.policy import Action, enforce
from core.users import CredentialStore


router = APIRouter(prefix="/api/users", tags=["Users (Auth Required)"])


@router.get("", response_model=list[PublicUser])
def list_users(
    principal: Principal = Depends(get_current_user),
    users: CredentialStore = Depends(get_user_store),
):
    """
    Admin only. Lists every registered user without passwords.
    """
    enforce(Action.LIST_USERS, principal)
    return users.list_safe()
