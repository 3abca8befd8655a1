import logging
from datetime import datetime, timedelta
from typing import List, Optional

from beanie import PydanticObjectId
from fastapi import HTTPException, UploadFile

from .alerts import alert_new_enrollment
from .models import (
    ENROLLMENT_STATUSES,
    PAYMENT_METHODS,
    Applicant,
    CourseRef,
    Enrollment,
    Payment,
)
from .notifications import notify_admission
from .uploads import has_file, remove_image, save_image

logger = logging.getLogger(__name__)

ACCESS_PERIOD = timedelta(days=30)
PROOF_FOLDER = "enrollments"


async def expire_lapsed(scope: Optional[dict] = None, now: Optional[datetime] = None) -> int:
    """Flag approved enrollments whose access period ended. Never clears the flag."""
    now = now or datetime.utcnow()
    query = {"status": "approved", "expired": False, "expiration_date": {"$lt": now}}
    if scope:
        query = {"$and": [query, scope]}
    result = await Enrollment.get_motor_collection().update_many(
        query, {"$set": {"expired": True, "updated_at": now}}
    )
    if result.modified_count:
        logger.info("Marked %d enrollment(s) as expired", result.modified_count)
    return result.modified_count


async def find_open(user_id: PydanticObjectId, course_slug: str) -> Optional[Enrollment]:
    return await Enrollment.find_one(
        {
            "user.user_id": user_id,
            "course.slug": course_slug,
            "$or": [
                {"status": "pending"},
                {"status": "approved", "expired": False},
            ],
        }
    )


async def create_enrollment(
    user_id: PydanticObjectId,
    course_slug: str,
    course_title: str,
    full_name: str,
    email: str,
    phone: Optional[str],
    payment_method: str,
    message: Optional[str],
    screenshot: Optional[UploadFile],
) -> Enrollment:
    if not all([course_slug, course_title, full_name, email, payment_method]):
        raise HTTPException(status_code=400, detail="Course, name, email, and payment method are required")
    if payment_method not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail='Payment method must be either "easypaisa" or "bank"')
    if not has_file(screenshot):
        raise HTTPException(status_code=400, detail="Payment screenshot is required")

    await expire_lapsed({"user.user_id": user_id})
    existing = await find_open(user_id, course_slug)
    if existing is not None:
        if existing.status == "pending":
            detail = "You already have a pending enrollment request for this course."
        else:
            detail = (
                "You already have an active enrollment for this course. "
                "Please wait until it expires before re-enrolling."
            )
        raise HTTPException(status_code=400, detail=detail)

    screenshot_path = await save_image(screenshot, PROOF_FOLDER)
    try:
        enrollment = Enrollment(
            course=CourseRef(slug=course_slug, title=course_title),
            user=Applicant(user_id=user_id, full_name=full_name, email=email, phone=phone or None),
            payment=Payment(method=payment_method, screenshot=screenshot_path),
            message=message or None,
        )
        await enrollment.insert()
    except Exception:
        remove_image(screenshot_path)
        raise

    logger.info("Enrollment %s submitted for course %s", enrollment.id, course_slug)
    await alert_new_enrollment(enrollment)
    return enrollment


async def list_enrollments(query: dict) -> List[Enrollment]:
    await expire_lapsed(query)
    return await Enrollment.find(query).sort("-created_at", "-_id").to_list()


async def get_enrollment(enrollment_id: PydanticObjectId) -> Optional[Enrollment]:
    await expire_lapsed({"_id": enrollment_id})
    return await Enrollment.get(enrollment_id)


def apply_status(enrollment: Enrollment, status: str, now: datetime) -> str:
    """Set the new status in place and return the previous one."""
    old_status = enrollment.status
    enrollment.status = status
    if status == "approved" and old_status != "approved":
        enrollment.purchase_date = now
        enrollment.expiration_date = now + ACCESS_PERIOD
        enrollment.expired = False
        enrollment.renewal_notification_sent = False
    return old_status


async def update_status(enrollment: Enrollment, status: Optional[str], now: Optional[datetime] = None) -> Enrollment:
    if status not in ENROLLMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Status must be one of: pending, approved, rejected")

    old_status = apply_status(enrollment, status, now or datetime.utcnow())
    await enrollment.save()
    logger.info("Enrollment %s: %s -> %s", enrollment.id, old_status, status)

    if status != old_status and status in ("approved", "rejected"):
        await notify_admission(enrollment)
    return enrollment


async def delete_enrollment(enrollment: Enrollment):
    remove_image(enrollment.payment.screenshot)
    await enrollment.delete()
