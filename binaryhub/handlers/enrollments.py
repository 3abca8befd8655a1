from typing import Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, HTTPException, Request

from .. import enrollments
from ..auth import CurrentAdmin, CurrentUser, UserForm
from ..models import ENROLLMENT_STATUSES
from ..schemas import StatusUpdate, form_file, form_text, read_json

router = APIRouter()


async def _get_or_404(enrollment_id: PydanticObjectId):
    enrollment = await enrollments.get_enrollment(enrollment_id)
    if enrollment is None:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    return enrollment


def _strip(value: Optional[str]) -> str:
    return (value or "").strip()


@router.post("", status_code=201)
async def create_enrollment(identity: CurrentUser, form: UserForm):
    enrollment = await enrollments.create_enrollment(
        user_id=identity.id,
        course_slug=_strip(form_text(form, "course_slug")),
        course_title=_strip(form_text(form, "course_title")),
        full_name=_strip(form_text(form, "full_name")),
        email=_strip(form_text(form, "email")).lower(),
        phone=_strip(form_text(form, "phone")),
        payment_method=_strip(form_text(form, "payment_method")),
        message=_strip(form_text(form, "message")),
        screenshot=form_file(form, "screenshot"),
    )
    return {"success": True, "data": enrollment.public(), "message": "Enrollment submitted successfully"}


@router.get("")
async def list_enrollments(_: CurrentAdmin, status: Optional[str] = None, course: Optional[str] = None):
    query = {}
    if status:
        query["status"] = status
    if course:
        query["course.slug"] = course
    items = await enrollments.list_enrollments(query)
    return {"success": True, "data": [e.public() for e in items]}


@router.get("/my-courses")
async def my_courses(identity: CurrentUser):
    items = await enrollments.list_enrollments({"user.user_id": identity.id})
    return {"success": True, "data": [e.public() for e in items]}


@router.get("/user/{user_id}")
async def user_enrollments(user_id: PydanticObjectId, _: CurrentAdmin):
    items = await enrollments.list_enrollments({"user.user_id": user_id})
    return {"success": True, "data": [e.public() for e in items]}


@router.get("/{enrollment_id}")
async def get_enrollment(enrollment_id: PydanticObjectId, _: CurrentAdmin):
    enrollment = await _get_or_404(enrollment_id)
    return {"success": True, "data": enrollment.public()}


@router.patch("/{enrollment_id}/status")
async def update_enrollment_status(enrollment_id: PydanticObjectId, request: Request, _: CurrentAdmin):
    body = await read_json(request, StatusUpdate)
    if body.status not in ENROLLMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Status must be one of: pending, approved, rejected")
    enrollment = await _get_or_404(enrollment_id)
    enrollment = await enrollments.update_status(enrollment, body.status)
    return {"success": True, "data": enrollment.public(), "message": f"Enrollment {body.status} successfully"}


@router.delete("/{enrollment_id}")
async def delete_enrollment(enrollment_id: PydanticObjectId, _: CurrentAdmin):
    enrollment = await _get_or_404(enrollment_id)
    await enrollments.delete_enrollment(enrollment)
    return {"success": True, "message": "Enrollment deleted successfully"}
