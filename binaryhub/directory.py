import logging
from typing import Dict, Iterable, List, Optional, Type

from beanie import PydanticObjectId
from fastapi import HTTPException, UploadFile
from pydantic import ValidationError

from .models import Profile
from .uploads import has_file, remove_image, save_image

logger = logging.getLogger(__name__)

SYSTEM_FIELDS = {"id", "revision_id", "created_at", "updated_at"}


def error_message(e: ValidationError) -> str:
    first = e.errors()[0]
    msg = first.get("msg", "Invalid value")
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    field = ".".join(str(p) for p in first.get("loc", ()))
    return f"{field}: {msg}" if field else msg


def build(model: Type[Profile], fields: Dict) -> Profile:
    try:
        return model(**fields)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=error_message(e))


def provided(fields: Dict) -> Dict:
    return {k: v for k, v in fields.items() if v not in (None, "", [])}


async def list_records(model: Type[Profile], filters: Optional[Dict] = None) -> List[Profile]:
    return await model.find(provided(filters or {})).sort("-created_at", "-_id").to_list()


async def get_or_404(model: Type[Profile], record_id: PydanticObjectId, label: str) -> Profile:
    record = await model.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record


async def create_record(
    model: Type[Profile],
    fields: Dict,
    required: Iterable[str],
    image: Optional[UploadFile],
    folder: str,
) -> Profile:
    if any(not fields.get(name) for name in required):
        raise HTTPException(status_code=400, detail="All fields are required")
    record = build(model, provided(fields))

    if has_file(image):
        record.image = await save_image(image, folder)
    try:
        await record.insert()
    except Exception:
        remove_image(record.image)
        raise
    logger.info("Created %s %s", model.__name__, record.id)
    return record


async def update_record(record: Profile, changes: Dict, image: Optional[UploadFile], folder: str) -> Profile:
    changes = provided(changes)
    if changes:
        current = record.model_dump(exclude=SYSTEM_FIELDS)
        checked = build(type(record), {**current, **changes})
        for name in changes:
            setattr(record, name, getattr(checked, name))

    old_image = record.image
    new_image = None
    if has_file(image):
        new_image = await save_image(image, folder)
        record.image = new_image
    try:
        await record.save()
    except Exception:
        remove_image(new_image)
        raise

    if new_image and old_image:
        remove_image(old_image)
    return record


async def delete_record(record: Profile):
    if record.image:
        remove_image(record.image)
    await record.delete()
    logger.info("Deleted %s %s", type(record).__name__, record.id)
