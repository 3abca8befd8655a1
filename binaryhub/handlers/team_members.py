from typing import Optional

from beanie import PydanticObjectId
from fastapi import APIRouter

from .. import directory
from ..auth import AdminForm, CurrentAdmin
from ..models import TeamMember
from ..schemas import form_file, form_text

router = APIRouter()

LABEL = "Team member"
FOLDER = "team-members"


def _fields(form) -> dict:
    return {key: (form_text(form, key) or "").strip() for key in ("name", "designation", "linkedin", "team")}


@router.get("")
async def list_team_members(team: Optional[str] = None):
    members = await directory.list_records(TeamMember, {"team": team})
    return {"success": True, "data": [m.public() for m in members]}


@router.get("/{member_id}")
async def get_team_member(member_id: PydanticObjectId):
    member = await directory.get_or_404(TeamMember, member_id, LABEL)
    return {"success": True, "data": member.public()}


@router.post("", status_code=201)
async def create_team_member(form: AdminForm):
    member = await directory.create_record(
        TeamMember,
        _fields(form),
        required=("name", "designation", "linkedin", "team"),
        image=form_file(form, "image"),
        folder=FOLDER,
    )
    return {"success": True, "data": member.public(), "message": "Team member created successfully"}


@router.put("/{member_id}")
async def update_team_member(member_id: PydanticObjectId, form: AdminForm):
    member = await directory.get_or_404(TeamMember, member_id, LABEL)
    member = await directory.update_record(member, _fields(form), form_file(form, "image"), FOLDER)
    return {"success": True, "data": member.public(), "message": "Team member updated successfully"}


@router.delete("/{member_id}")
async def delete_team_member(member_id: PydanticObjectId, _: CurrentAdmin):
    member = await directory.get_or_404(TeamMember, member_id, LABEL)
    await directory.delete_record(member)
    return {"success": True, "message": "Team member deleted successfully"}
