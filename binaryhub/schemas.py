"""
Request bodies for the JSON endpoints, plus helpers for reading bodies by hand.

Fields are optional on purpose: missing values are reported by the handlers
with the API's own 400 messages instead of FastAPI's generic validation errors.
Guarded routes read their body inside the handler so that authentication is
checked before the body is parsed.
"""

from typing import Optional, Type, TypeVar

from fastapi import HTTPException, Request
from pydantic import BaseModel
from starlette.datastructures import FormData, UploadFile

BodyT = TypeVar("BodyT", bound=BaseModel)


class SignupRequest(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class SigninRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class StatusUpdate(BaseModel):
    status: Optional[str] = None


async def read_json(request: Request, schema: Type[BodyT]) -> BodyT:
    # covers both JSON decode errors and pydantic ValidationError
    try:
        return schema.model_validate(await request.json())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request body")


def form_text(form: FormData, key: str) -> Optional[str]:
    value = form.get(key)
    return value if isinstance(value, str) else None


def form_file(form: FormData, key: str) -> Optional[UploadFile]:
    value = form.get(key)
    return value if isinstance(value, UploadFile) else None
