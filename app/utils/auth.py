"""
Utilitaires d'authentification / Authentication utilities.
Les tokens sont émis par le service d'authentification externe ;
create_access_token ne sert qu'au développement et aux tests.
Tokens are issued by the external auth service; create_access_token is for
development and tests only.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    """Créer un access token JWT / Create a JWT access token."""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "type": ACCESS_TOKEN_TYPE, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int | None:
    """
    Identifiant utilisateur d'un access token valide, sinon None /
    User id of a valid access token, else None (bad signature, expired, wrong type).
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        return None
