import asyncio
import logging
import os
from contextlib import suppress

from binaryhub.config import CONFIG, setup_logging
from binaryhub.db import close_db, init_db
from binaryhub.renewal import start_renewal_task
from binaryhub.web import app

logger = logging.getLogger(__name__)

_renewal_task = None


@app.on_event("startup")
async def _startup() -> None:
    setup_logging(CONFIG.DEBUG)

    if not os.getenv("MONGODB_URL"):
        logger.warning("MONGODB_URL is not set, using %s", CONFIG.MONGODB_URL)
    if CONFIG.is_production:
        logger.info("Allowed CORS origins: %s", CONFIG.allowed_origins)

    await init_db(CONFIG.MONGODB_URL, CONFIG.MONGODB_DB_NAME)

    # runs once now, then on every interval
    global _renewal_task
    _renewal_task = start_renewal_task(CONFIG.RENEWAL_CHECK_INTERVAL_SECONDS)


@app.on_event("shutdown")
async def _shutdown() -> None:
    global _renewal_task
    if _renewal_task is not None:
        _renewal_task.cancel()
        with suppress(asyncio.CancelledError):
            await _renewal_task
        _renewal_task = None
    close_db()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=CONFIG.HOST, port=CONFIG.PORT, proxy_headers=True, forwarded_allow_ips="*")
