import logging
from typing import Annotated, Callable, Type

from fastapi import APIRouter, Depends, HTTPException, Response
from pymongo.errors import DuplicateKeyError

from ..auth import Identity
from ..config import CONFIG
from ..models import EMAIL_RE, Account
from ..notifications import notify_welcome
from ..schemas import SigninRequest, SignupRequest
from ..security import clear_auth_cookie, create_access_token, hash_password, set_auth_cookie, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _session_payload(account: Account, role: str, response: Response) -> dict:
    token = create_access_token(str(account.id), account.email, role)
    set_auth_cookie(response, token)
    return {
        "success": True,
        "data": {
            role: account.public(),
            "access_token": token,
            "token_type": "bearer",
        },
    }


def build_router(model: Type[Account], role: str, guard: Callable) -> APIRouter:
    """Signup/signin/me/logout for one credential domain (users or admins)."""
    router = APIRouter()
    label = model.__name__

    @router.post("/signup", status_code=201)
    async def signup(body: SignupRequest, response: Response):
        if role == "admin" and not CONFIG.ALLOW_ADMIN_SIGNUP:
            raise HTTPException(status_code=403, detail="Admin signup is disabled")

        full_name = (body.full_name or "").strip()
        email = (body.email or "").strip().lower()
        password = body.password or ""
        if not full_name or not email or not password:
            raise HTTPException(status_code=400, detail="Please provide full name, email, and password")
        if not EMAIL_RE.match(email):
            raise HTTPException(status_code=400, detail="Please enter a valid email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=400,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )

        duplicate = HTTPException(status_code=400, detail=f"{label} with this email already exists")
        if await model.find_one({"email": email}):
            raise duplicate
        account = model(full_name=full_name, email=email, password_hash=hash_password(password))
        try:
            await account.insert()
        except DuplicateKeyError:
            raise duplicate

        logger.info("New %s account %s", role, account.id)
        if role == "user":
            await notify_welcome(account.id, full_name)
        return _session_payload(account, role, response)

    @router.post("/signin")
    async def signin(body: SigninRequest, response: Response):
        email = (body.email or "").strip().lower()
        account = await model.find_one({"email": email}) if email else None
        if account is None or not verify_password(body.password or "", account.password_hash):
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return _session_payload(account, role, response)

    @router.get("/me")
    async def me(identity: Annotated[Identity, Depends(guard)]):
        return {"success": True, "data": {role: identity.account.public()}}

    @router.post("/logout")
    async def logout(response: Response):
        clear_auth_cookie(response)
        return {"success": True, "message": "Logged out successfully"}

    return router
