from fastapi import APIRouter

from ..auth import CurrentAdmin
from ..renewal import check_renewals

router = APIRouter()


@router.post("/check-renewals")
async def run_renewal_check(_: CurrentAdmin):
    report = await check_renewals()
    return {"success": True, "data": report.as_dict(), "message": "Renewal check completed"}
