import asyncio
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from binaryhub import renewal
from binaryhub.models import Enrollment, Notification
from binaryhub.renewal import check_renewals, days_left, start_renewal_task


async def renewal_notices(user):
    return await Notification.find({"user_id": user.id, "type": "course_renewal"}).to_list()


@pytest.mark.asyncio
async def test_reminder_sent_once(user, make_enrollment):
    """Re-running the sweep never produces a second reminder"""
    enrollment = await make_enrollment(user, expires_in=timedelta(days=3))

    first = await check_renewals()
    second = await check_renewals()

    assert first.notified == 1
    assert second.notified == 0
    notices = await renewal_notices(user)
    assert len(notices) == 1
    assert notices[0].enrollment_id == enrollment.id
    assert "expiring in 3 days" in notices[0].message
    assert (await Enrollment.get(enrollment.id)).renewal_notification_sent is True


@pytest.mark.asyncio
async def test_no_reminder_outside_window(user, make_enrollment):
    await make_enrollment(user, expires_in=timedelta(days=10))
    await make_enrollment(user, slug="amazon-fba", status="pending", expires_in=timedelta(days=2))
    await make_enrollment(user, slug="seo", expires_in=timedelta(days=2), expired=True)

    report = await check_renewals()

    assert report.notified == 0
    assert await renewal_notices(user) == []


@pytest.mark.asyncio
async def test_lapsed_enrollments_expire(user, make_enrollment):
    lapsed = await make_enrollment(user, expires_in=timedelta(days=-1))
    active = await make_enrollment(user, slug="seo", expires_in=timedelta(days=12))

    first = await check_renewals()
    second = await check_renewals()

    assert first.expired == 1
    assert second.expired == 0
    assert (await Enrollment.get(lapsed.id)).expired is True
    assert (await Enrollment.get(active.id)).expired is False
    # expired courses get no reminder
    assert await renewal_notices(user) == []


@pytest.mark.asyncio
async def test_sweep_never_unexpires(user, make_enrollment):
    enrollment = await make_enrollment(user, expires_in=timedelta(days=20), expired=True)

    await check_renewals()

    assert (await Enrollment.get(enrollment.id)).expired is True


@pytest.mark.asyncio
async def test_reminder_window_boundaries(user, make_enrollment):
    now = datetime.utcnow()
    inside = await make_enrollment(user, expires_in=timedelta(days=5) - timedelta(minutes=1))
    await make_enrollment(user, slug="seo", expires_in=timedelta(days=5, minutes=5))

    report = await check_renewals(now=now)

    assert report.notified == 1
    notices = await renewal_notices(user)
    assert [n.enrollment_id for n in notices] == [inside.id]


@pytest.mark.asyncio
async def test_failed_reminder_is_retried(user, make_enrollment, monkeypatch):
    enrollment = await make_enrollment(user, expires_in=timedelta(days=2))
    original_insert = Notification.insert

    async def broken_insert(self, *args, **kwargs):
        raise RuntimeError("write failed")

    monkeypatch.setattr(Notification, "insert", broken_insert)
    failed = await check_renewals()
    assert failed.notified == 0
    assert (await Enrollment.get(enrollment.id)).renewal_notification_sent is False

    monkeypatch.setattr(Notification, "insert", original_insert)
    retried = await check_renewals()
    assert retried.notified == 1


@pytest.mark.asyncio
async def test_days_left_rounds_up():
    now = datetime(2026, 3, 1, 9, 0)

    assert days_left(now + timedelta(days=4, hours=1), now) == 5
    assert days_left(now + timedelta(hours=3), now) == 1
    assert days_left(now + timedelta(days=2), now) == 2


@pytest.mark.asyncio
async def test_check_renewals_endpoint(client: AsyncClient, user, user_headers, admin_headers, make_enrollment):
    await make_enrollment(user, expires_in=timedelta(days=1))
    await make_enrollment(user, slug="seo", expires_in=timedelta(days=-3))

    denied = await client.post("/api/course-renewal/check-renewals", headers=user_headers)
    response = await client.post("/api/course-renewal/check-renewals", headers=admin_headers)

    assert denied.status_code == 401
    assert response.status_code == 200
    assert response.json()["data"] == {"notified": 1, "expired": 1}


@pytest.mark.asyncio
async def test_renewal_task_runs_immediately_and_survives_errors(monkeypatch):
    calls = []

    async def flaky_check():
        calls.append(datetime.utcnow())
        if len(calls) == 1:
            raise RuntimeError("database unavailable")
        return renewal.RenewalReport()

    monkeypatch.setattr(renewal, "check_renewals", flaky_check)
    task = start_renewal_task(0.01)
    try:
        await asyncio.sleep(0.1)
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert len(calls) >= 2
