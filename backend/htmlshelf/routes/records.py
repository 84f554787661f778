"""Records API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from htmlshelf.database import get_record_service
from htmlshelf.routes.upload import read_upload
from htmlshelf.schemas.record import DeleteResponse, Record
from htmlshelf.services.records import RecordService

router = APIRouter(prefix="/api/records", tags=["records"])


@router.get("", response_model=list[Record])
async def list_records(service: RecordService = Depends(get_record_service)):
    """List every record in upload order."""
    return await service.list_all()


@router.get("/{record_id}", response_model=Record)
async def get_record(record_id: str, service: RecordService = Depends(get_record_service)):
    return await service.get_by_id(record_id)


@router.put("/{record_id}", response_model=Record)
async def update_record(
    record_id: str,
    request: Request,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    service: RecordService = Depends(get_record_service),
):
    """Update a record. Only provided fields are changed; a new file replaces the old one."""
    # An empty tags field is still a value: it clears the tags.
    if tags is None and "tags" in await request.form():
        tags = ""
    contents, original_name = await read_upload(file)
    return await service.update(
        record_id,
        content=contents,
        original_name=original_name or None,
        title=title,
        tags=tags,
    )


@router.delete("/{record_id}", response_model=DeleteResponse)
async def delete_record(record_id: str, service: RecordService = Depends(get_record_service)):
    """Delete a record and its uploaded content."""
    await service.delete(record_id)
    return {"deleted": True, "id": record_id}
