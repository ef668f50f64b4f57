"""Security helpers for session token generation and validation."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from notification_hub.config import get_settings

ALGORITHM = "HS256"


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({**data, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def user_id_from_token(token: str) -> str:
    """Return the user id carried in the ``sub`` claim of ``token``."""

    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise ValueError("Could not validate credentials")
    return user_id


__all__ = ["create_access_token", "decode_access_token", "user_id_from_token"]
