import asyncio
import logging
from pathlib import Path
from typing import Optional

import requests

from .config import CONFIG
from .models import Enrollment
from .uploads import local_path

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"


def _tg_send_message(token: str, chat_id: int, text: str):
    url = f"{TELEGRAM_API}/bot{token}/sendMessage"
    response = requests.post(url, data={"chat_id": chat_id, "text": text}, timeout=10)
    response.raise_for_status()


def _tg_send_photo(token: str, chat_id: int, file_path: Path, caption: str):
    url = f"{TELEGRAM_API}/bot{token}/sendPhoto"
    with file_path.open("rb") as fp:
        response = requests.post(
            url,
            data={"chat_id": chat_id, "caption": caption},
            files={"photo": fp},
            timeout=10,
        )
    response.raise_for_status()


def enrollment_caption(enrollment: Enrollment) -> str:
    return (
        "New enrollment request\n"
        f"Course: {enrollment.course.title} ({enrollment.course.slug})\n"
        f"Name: {enrollment.user.full_name}\n"
        f"Email: {enrollment.user.email}\n"
        f"Phone: {enrollment.user.phone or '-'}\n"
        f"Method: {enrollment.payment.method}"
    )


async def alert_new_enrollment(enrollment: Enrollment) -> bool:
    """Send the payment proof to the admin chat, if a bot is configured."""
    token = CONFIG.TELEGRAM_BOT_TOKEN
    admin_id = CONFIG.TELEGRAM_ADMIN_ID
    if not token or not admin_id:
        return False

    caption = enrollment_caption(enrollment)
    proof: Optional[Path] = local_path(enrollment.payment.screenshot)
    try:
        if proof is not None and proof.exists():
            await asyncio.to_thread(_tg_send_photo, token, admin_id, proof, caption)
        else:
            await asyncio.to_thread(_tg_send_message, token, admin_id, caption)
    except Exception:
        logger.exception("Telegram alert for enrollment %s failed", enrollment.id)
        return False
    return True
