from datetime import datetime, timedelta
from typing import Optional

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import CONFIG

COOKIE_NAME = "access_token"

# pbkdf2_sha256 keeps hashing free of the native bcrypt backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenError(Exception):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(account_id: str, email: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=CONFIG.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": str(account_id), "email": email, "role": role, "exp": expire}
    return jwt.encode(payload, CONFIG.JWT_SECRET, algorithm=CONFIG.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, CONFIG.JWT_SECRET, algorithms=[CONFIG.JWT_ALGORITHM])
    except JWTError as e:
        raise TokenError(str(e)) from e
    if not payload.get("sub") or payload.get("role") not in ("user", "admin"):
        raise TokenError("Token is missing identity claims")
    return payload


def set_auth_cookie(response: Response, token: str) -> Response:
    """
    Store the access token in an HTTP-only cookie so browser clients
    can authenticate without handling the bearer header themselves.
    """
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=CONFIG.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="none" if CONFIG.is_production else "lax",
        secure=CONFIG.is_production,
        path="/",
    )
    return response


def clear_auth_cookie(response: Response) -> Response:
    response.delete_cookie(key=COOKIE_NAME, path="/")
    return response
