"""Upload API route."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from htmlshelf.database import get_record_service
from htmlshelf.schemas.record import Record
from htmlshelf.services.records import RecordService

router = APIRouter(prefix="/api/upload", tags=["upload"])


async def read_upload(file: Optional[UploadFile]) -> tuple[bytes | None, str]:
    """Return (bytes, original name) for a file field, or (None, "") when none was sent.

    Browsers submit an empty, unnamed part when no file was chosen.
    """
    if file is None:
        return None, ""
    contents = await file.read()
    if not file.filename and not contents:
        return None, ""
    return contents, file.filename or "unnamed"


@router.post("", response_model=Record, status_code=201)
async def upload_record(
    file: Optional[UploadFile] = File(None),
    title: str = Form(""),
    tags: str = Form(""),
    is_folder: str = Form("false", alias="isFolder"),
    entry_point: str = Form("", alias="entryPoint"),
    service: RecordService = Depends(get_record_service),
):
    """Upload an HTML file or a zipped bundle and create its record."""
    contents, original_name = await read_upload(file)
    return await service.upload(
        contents,
        original_name,
        title=title,
        tags=tags,
        is_folder=is_folder.strip().lower() == "true",
        entry_point=entry_point or None,
    )
