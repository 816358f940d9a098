# server/api/deps.py

from fastapi import Request

from core.tasks import TaskStore
from core.tokens import TokenIssuer
from core.users import CredentialStore


# Everything below is wired onto app.state by main.create_app().

def get_user_store(request: Request) -> CredentialStore:
    return request.app.state.user_store


def get_task_store(request: Request) -> TaskStore:
    return request.app.state.task_store


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer
