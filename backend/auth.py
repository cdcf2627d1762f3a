"""Authentication: verify identity-provider session tokens."""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from backend.config import IDENTITY_JWT_ALGORITHM, IDENTITY_JWT_AUDIENCE, IDENTITY_JWT_SECRET

# Security scheme
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Who the identity provider says the caller is. Credentials are never checked here."""
    user_id: str
    email: str
    display_name: Optional[str] = None


def decode_token(token: str) -> Optional[Identity]:
    """Decode a session JWT and return the caller's identity, or None if invalid."""
    options = {"verify_aud": IDENTITY_JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            IDENTITY_JWT_SECRET,
            algorithms=[IDENTITY_JWT_ALGORITHM],
            audience=IDENTITY_JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        return None
    return Identity(
        user_id=user_id,
        email=email,
        display_name=payload.get("first_name") or payload.get("name"),
    )


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Identity:
    """FastAPI dependency: require a valid session token."""
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    identity = decode_token(credentials.credentials)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return identity
