import logging
from dataclasses import dataclass
from typing import Annotated, Optional, Union

from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from starlette.datastructures import FormData

from .models import Admin, User
from .security import COOKIE_NAME, TokenError, decode_access_token

logger = logging.getLogger(__name__)

USER_AUTH_REQUIRED = "Authentication required"
ADMIN_AUTH_REQUIRED = "Admin authentication required"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/signin", auto_error=False)


@dataclass
class Identity:
    id: PydanticObjectId
    role: str
    account: Union[User, Admin]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_identity(
    request: Request,
    bearer: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Optional[Identity]:
    """
    Resolve the caller from the bearer header, falling back to the auth cookie.
    Returns None when no valid identity is present.
    """
    token = bearer or request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    try:
        payload = decode_access_token(token)
        account_id = PydanticObjectId(payload["sub"])
    except (TokenError, InvalidId, TypeError) as e:
        logger.debug("Rejected access token: %s", e)
        return None

    model = Admin if payload["role"] == "admin" else User
    account = await model.get(account_id)
    if account is None:
        return None
    return Identity(id=account.id, role=payload["role"], account=account)


async def require_user(
    identity: Annotated[Optional[Identity], Depends(get_identity)],
) -> Identity:
    if identity is None or identity.role != "user":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=USER_AUTH_REQUIRED)
    return identity


async def require_admin(
    identity: Annotated[Optional[Identity], Depends(get_identity)],
) -> Identity:
    if identity is None or not identity.is_admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=ADMIN_AUTH_REQUIRED)
    return identity


CurrentUser = Annotated[Identity, Depends(require_user)]
CurrentAdmin = Annotated[Identity, Depends(require_admin)]


async def admin_form(request: Request, _: CurrentAdmin):
    """Parse the form body only after the caller is known to be an admin."""
    form = await request.form()
    try:
        yield form
    finally:
        await form.close()


async def user_form(request: Request, _: CurrentUser):
    form = await request.form()
    try:
        yield form
    finally:
        await form.close()


AdminForm = Annotated[FormData, Depends(admin_form)]
UserForm = Annotated[FormData, Depends(user_form)]
