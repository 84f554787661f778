"""The JSON record database and the service dependency built on it.

Usage in routes:
    from htmlshelf.database import get_record_service

    @router.get("/items")
    async def list_items(service: RecordService = Depends(get_record_service)):
        return await service.list_all()
"""
from htmlshelf.config import settings
from htmlshelf.services.file_storage import file_storage
from htmlshelf.services.record_store import JsonRecordStore
from htmlshelf.services.records import RecordService

record_store = JsonRecordStore(settings.RECORDS_DB_PATH)
record_service = RecordService(record_store, file_storage)


def get_record_service() -> RecordService:
    """FastAPI dependency returning the process-wide RecordService."""
    return record_service
