import logging
from datetime import datetime
from typing import List, Optional

from beanie import PydanticObjectId

from .models import Enrollment, Notification

logger = logging.getLogger(__name__)

FEED_LIMIT = 50


async def notify(
    user_id: PydanticObjectId,
    kind: str,
    title: str,
    message: str,
    enrollment_id: Optional[PydanticObjectId] = None,
) -> Optional[Notification]:
    """Write a notification; failures are logged and never reach the caller."""
    try:
        notification = Notification(
            user_id=user_id,
            type=kind,
            title=title,
            message=message,
            enrollment_id=enrollment_id,
        )
        await notification.insert()
        return notification
    except Exception:
        logger.exception("Error creating %s notification for user %s", kind, user_id)
        return None


async def notify_welcome(user_id: PydanticObjectId, full_name: str) -> Optional[Notification]:
    return await notify(
        user_id,
        "welcome",
        "Welcome to Binary Hub!",
        f"Welcome {full_name}! We're excited to have you join our community. "
        "Explore our courses and services to get started.",
    )


async def notify_admission(enrollment: Enrollment) -> Optional[Notification]:
    title = enrollment.course.title
    if enrollment.status == "approved":
        return await notify(
            enrollment.user.user_id,
            "admission_accepted",
            "Admission Request Accepted",
            f"Congratulations! Your admission request for {title} has been accepted.",
            enrollment_id=enrollment.id,
        )
    return await notify(
        enrollment.user.user_id,
        "admission_rejected",
        "Admission Request Rejected",
        f"Your admission request for {title} has been rejected. Please contact us for more information.",
        enrollment_id=enrollment.id,
    )


async def notify_renewal(enrollment: Enrollment, days_left: int) -> Optional[Notification]:
    unit = "day" if days_left == 1 else "days"
    return await notify(
        enrollment.user.user_id,
        "course_renewal",
        "Course Expiring Soon",
        f'Your course "{enrollment.course.title}" is expiring in {days_left} {unit}. '
        "Please renew to continue access.",
        enrollment_id=enrollment.id,
    )


def _owned(user_id: PydanticObjectId, notification_id: PydanticObjectId) -> dict:
    return {"_id": notification_id, "user_id": user_id}


async def list_for(user_id: PydanticObjectId) -> List[Notification]:
    return await (
        Notification.find({"user_id": user_id})
        .sort("-created_at", "-_id")
        .limit(FEED_LIMIT)
        .to_list()
    )


async def unread_count(user_id: PydanticObjectId) -> int:
    return await Notification.find({"user_id": user_id, "read": False}).count()


async def mark_read(user_id: PydanticObjectId, notification_id: PydanticObjectId) -> Optional[Notification]:
    notification = await Notification.find_one(_owned(user_id, notification_id))
    if notification is None:
        return None
    notification.read = True
    await notification.save()
    return notification


async def mark_all_read(user_id: PydanticObjectId) -> int:
    result = await Notification.get_motor_collection().update_many(
        {"user_id": user_id, "read": False},
        {"$set": {"read": True, "updated_at": datetime.utcnow()}},
    )
    return result.modified_count


async def delete_for(user_id: PydanticObjectId, notification_id: PydanticObjectId) -> bool:
    notification = await Notification.find_one(_owned(user_id, notification_id))
    if notification is None:
        return False
    await notification.delete()
    return True
