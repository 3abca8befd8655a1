import json
from typing import List, Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, HTTPException

from .. import directory
from ..auth import AdminForm, CurrentAdmin
from ..models import Freelancer
from ..schemas import form_file, form_text

router = APIRouter()

LABEL = "Freelancer"
FOLDER = "freelancers"


def parse_skills(raw: Optional[str]) -> List[str]:
    """Accept a JSON array or a comma separated list."""
    raw = (raw or "").strip()
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None
    if isinstance(parsed, str):
        parsed = [parsed]
    elif not isinstance(parsed, list):
        parsed = raw.split(",")
    return [str(s).strip() for s in parsed if str(s).strip()]


def _fields(form) -> dict:
    skills = form_text(form, "skills")
    parsed = parse_skills(skills)
    if skills and skills.strip() and not parsed:
        raise HTTPException(status_code=400, detail="At least one skill is required")
    fields = {key: (form_text(form, key) or "").strip() for key in ("name", "title", "department", "linkedin")}
    fields["skills"] = parsed
    return fields


@router.get("")
async def list_freelancers(department: Optional[str] = None):
    freelancers = await directory.list_records(Freelancer, {"department": department})
    return {"success": True, "data": [f.public() for f in freelancers]}


@router.get("/{freelancer_id}")
async def get_freelancer(freelancer_id: PydanticObjectId):
    freelancer = await directory.get_or_404(Freelancer, freelancer_id, LABEL)
    return {"success": True, "data": freelancer.public()}


@router.post("", status_code=201)
async def create_freelancer(form: AdminForm):
    freelancer = await directory.create_record(
        Freelancer,
        _fields(form),
        required=("name", "title", "skills", "department", "linkedin"),
        image=form_file(form, "image"),
        folder=FOLDER,
    )
    return {"success": True, "data": freelancer.public(), "message": "Freelancer created successfully"}


@router.put("/{freelancer_id}")
async def update_freelancer(freelancer_id: PydanticObjectId, form: AdminForm):
    freelancer = await directory.get_or_404(Freelancer, freelancer_id, LABEL)
    freelancer = await directory.update_record(freelancer, _fields(form), form_file(form, "image"), FOLDER)
    return {"success": True, "data": freelancer.public(), "message": "Freelancer updated successfully"}


@router.delete("/{freelancer_id}")
async def delete_freelancer(freelancer_id: PydanticObjectId, _: CurrentAdmin):
    freelancer = await directory.get_or_404(Freelancer, freelancer_id, LABEL)
    await directory.delete_record(freelancer)
    return {"success": True, "message": "Freelancer deleted successfully"}
