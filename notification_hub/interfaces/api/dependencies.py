"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from notification_hub.config import get_settings
from notification_hub.infrastructure.notifications import WebPushDispatcher
from notification_hub.infrastructure.notifications.push_backend import PushDispatcher
from notification_hub.infrastructure.security import user_id_from_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def resolve_user_id(token: str) -> str:
    """Return the user id authenticated by ``token``."""

    try:
        return user_id_from_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """Return the authenticated user id from the bearer token."""

    return resolve_user_id(token)


def get_push_dispatcher() -> PushDispatcher:
    """Return the web push dispatcher configured from settings."""

    return WebPushDispatcher(get_settings())
