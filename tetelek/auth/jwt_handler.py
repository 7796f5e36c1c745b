from datetime import datetime, timedelta, timezone
from typing import TypedDict

import jwt

from tetelek.core import config


class AccessTokenClaims(TypedDict):
    sub: str
    superuser: bool
    iat: int
    exp: int


def create_access_token(subject: str, superuser: bool = False, expires_minutes: int | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    claims: AccessTokenClaims = {
        'sub': subject,
        'superuser': bool(superuser),
        'iat': int(issued_at.timestamp()),
        'exp': int((issued_at + lifetime).timestamp()),
    }
    return jwt.encode(dict(claims), config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> AccessTokenClaims:
    """Verify ``token`` and return its claims; tokens without ``sub`` or ``exp`` are rejected."""
    payload = jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={'require': ['sub', 'exp']},
    )
    return AccessTokenClaims(
        sub=payload['sub'],
        superuser=bool(payload.get('superuser', False)),
        iat=payload.get('iat', 0),
        exp=payload['exp'],
    )
