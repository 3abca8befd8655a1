from typing import Optional

from beanie import PydanticObjectId
from fastapi import APIRouter

from .. import directory
from ..auth import AdminForm, CurrentAdmin
from ..models import Mentor
from ..schemas import form_file, form_text

router = APIRouter()

LABEL = "Mentor"
FOLDER = "mentors"


def _fields(form) -> dict:
    return {key: (form_text(form, key) or "").strip() for key in ("name", "department", "linkedin")}


@router.get("")
async def list_mentors(department: Optional[str] = None):
    mentors = await directory.list_records(Mentor, {"department": department})
    return {"success": True, "data": [m.public() for m in mentors]}


@router.get("/{mentor_id}")
async def get_mentor(mentor_id: PydanticObjectId):
    mentor = await directory.get_or_404(Mentor, mentor_id, LABEL)
    return {"success": True, "data": mentor.public()}


@router.post("", status_code=201)
async def create_mentor(form: AdminForm):
    mentor = await directory.create_record(
        Mentor,
        _fields(form),
        required=("name", "department", "linkedin"),
        image=form_file(form, "image"),
        folder=FOLDER,
    )
    return {"success": True, "data": mentor.public(), "message": "Mentor created successfully"}


@router.put("/{mentor_id}")
async def update_mentor(mentor_id: PydanticObjectId, form: AdminForm):
    mentor = await directory.get_or_404(Mentor, mentor_id, LABEL)
    mentor = await directory.update_record(mentor, _fields(form), form_file(form, "image"), FOLDER)
    return {"success": True, "data": mentor.public(), "message": "Mentor updated successfully"}


@router.delete("/{mentor_id}")
async def delete_mentor(mentor_id: PydanticObjectId, _: CurrentAdmin):
    mentor = await directory.get_or_404(Mentor, mentor_id, LABEL)
    await directory.delete_record(mentor)
    return {"success": True, "message": "Mentor deleted successfully"}
