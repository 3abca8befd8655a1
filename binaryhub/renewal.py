import asyncio
import logging
import math
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Optional

from .enrollments import expire_lapsed
from .models import Enrollment
from .notifications import notify_renewal

logger = logging.getLogger(__name__)

RENEWAL_WINDOW = timedelta(days=5)


@dataclass
class RenewalReport:
    notified: int = 0
    expired: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def days_left(expiration_date: datetime, now: datetime) -> int:
    return max(1, math.ceil((expiration_date - now).total_seconds() / 86400))


async def check_renewals(now: Optional[datetime] = None) -> RenewalReport:
    """
    Remind owners of enrollments expiring within RENEWAL_WINDOW and flag the
    ones already past their expiration date.

    Each reminder is guarded by claiming ``renewal_notification_sent`` with a
    conditional update, so overlapping runs cannot send it twice.
    """
    now = now or datetime.utcnow()
    report = RenewalReport()
    collection = Enrollment.get_motor_collection()

    expiring = await Enrollment.find(
        {
            "status": "approved",
            "expired": False,
            "renewal_notification_sent": False,
            "expiration_date": {"$gte": now, "$lte": now + RENEWAL_WINDOW},
        }
    ).to_list()

    for enrollment in expiring:
        claimed = await collection.update_one(
            {"_id": enrollment.id, "status": "approved", "expired": False, "renewal_notification_sent": False},
            {"$set": {"renewal_notification_sent": True, "updated_at": now}},
        )
        if not claimed.modified_count:
            continue
        notification = await notify_renewal(enrollment, days_left(enrollment.expiration_date, now))
        if notification is None:
            # release the claim so the next run retries
            await collection.update_one(
                {"_id": enrollment.id},
                {"$set": {"renewal_notification_sent": False}},
            )
            continue
        report.notified += 1

    report.expired = await expire_lapsed(now=now)

    if report.notified or report.expired:
        logger.info(
            "Renewal check completed: %d notifications created, %d courses expired",
            report.notified,
            report.expired,
        )
    return report


async def renewal_loop(interval: float):
    while True:
        try:
            await check_renewals()
        except Exception:
            logger.exception("Error checking course renewals")
        await asyncio.sleep(interval)


def start_renewal_task(interval: float) -> asyncio.Task:
    logger.info("Scheduling renewal check every %s seconds", interval)
    return asyncio.create_task(renewal_loop(interval), name="renewal-sweep")
