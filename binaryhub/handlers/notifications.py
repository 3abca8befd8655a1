from beanie import PydanticObjectId
from fastapi import APIRouter, HTTPException

from .. import notifications
from ..auth import CurrentUser

router = APIRouter()

NOT_FOUND = "Notification not found"


@router.get("")
async def list_notifications(identity: CurrentUser):
    items = await notifications.list_for(identity.id)
    return {"success": True, "data": [n.public() for n in items]}


@router.get("/unread-count")
async def unread_count(identity: CurrentUser):
    return {"success": True, "count": await notifications.unread_count(identity.id)}


@router.patch("/read-all")
async def mark_all_read(identity: CurrentUser):
    await notifications.mark_all_read(identity.id)
    return {"success": True, "message": "All notifications marked as read"}


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: PydanticObjectId, identity: CurrentUser):
    notification = await notifications.mark_read(identity.id, notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "data": notification.public()}


@router.delete("/{notification_id}")
async def delete_notification(notification_id: PydanticObjectId, identity: CurrentUser):
    if not await notifications.delete_for(identity.id, notification_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"success": True, "message": "Notification deleted successfully"}
