"""
Authentication for the Storefront backend

Sessions belong to Supabase Auth; the backend only verifies the access tokens
it issues and compares the token subject with store owners.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel

from .config import settings

# Supabase signs access tokens with the project secret
JWT_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """Caller identity taken from a Supabase access token"""
    id: str
    email: Optional[str] = None
    role: str = "authenticated"


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def decode_supabase_token(token: str) -> dict:
    """
    Verified claims of a Supabase access token (sub, email, role, aud, exp)

    Raises:
        HTTPException: 401 when the token is expired, malformed or badly signed
    """
    if not settings.SUPABASE_JWT_SECRET:
        raise ValueError("SUPABASE_JWT_SECRET is not set")

    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError:
        raise _unauthorized()


def _user_from_claims(claims: dict) -> Optional[TokenUser]:
    if not claims.get("sub"):
        return None
    return TokenUser(
        id=claims["sub"],
        email=claims.get("email"),
        role=claims.get("role", "authenticated")
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> TokenUser:
    """
    Dependency for endpoints that need a signed-in merchant.

    Usage:
        @router.get("/user/stores")
        async def my_stores(user: TokenUser = Depends(get_current_user)):
            ...
    """
    if not credentials:
        raise _unauthorized()

    user = _user_from_claims(decode_supabase_token(credentials.credentials))
    if user is None:
        raise _unauthorized("Invalid token: missing subject")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[TokenUser]:
    """Like get_current_user, but anonymous or invalid tokens give None"""
    if not credentials:
        return None

    try:
        claims = decode_supabase_token(credentials.credentials)
    except HTTPException:
        return None
    return _user_from_claims(claims)


def ensure_store_owner(owner_id: Optional[str], user: TokenUser, detail: str = "Unauthorized") -> None:
    """403 unless `user` is the store owner"""
    if owner_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
