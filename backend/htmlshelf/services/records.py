"""Upload, update, deletion and query pipelines over the two stores.

Each pipeline call is one read-modify-write of the Record Store plus whatever
blob work it needs. Blob writes happen first; when the record write that
follows fails, the fresh blob is removed again before the error surfaces.
Blob deletions of superseded or removed content are best-effort and never
fail the call.
"""
import logging
import uuid

from htmlshelf.errors import ExtractionError, InvalidInput, NotFound, StorageError
from htmlshelf.schemas.record import Record, utc_timestamp
from htmlshelf.services.archive import safe_relative_path
from htmlshelf.services.file_storage import FileStorageService
from htmlshelf.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def parse_tags(text: str | None) -> list[str]:
    """Split comma-separated tag text. ``"a, b ,, c"`` -> ``["a", "b", "c"]``."""
    if not text:
        return []
    return [t.strip() for t in text.split(",") if t.strip()]


class RecordService:
    """Orchestrates the Record Store and the Blob Store."""

    def __init__(self, store: RecordStore, storage: FileStorageService):
        self.store = store
        self.storage = storage

    async def list_all(self) -> list[Record]:
        return await self.store.list_all()

    async def get_by_id(self, record_id: str) -> Record:
        for record in await self.store.list_all():
            if record.id == record_id:
                return record
        raise NotFound(f"Record {record_id} not found")

    async def upload(
        self,
        content: bytes | None,
        original_name: str,
        title: str | None = None,
        tags: str | None = None,
        is_folder: bool = False,
        entry_point: str | None = None,
    ) -> Record:
        """Store new content and append its record."""
        if content is None:
            raise InvalidInput("No file uploaded")
        if is_folder and (not entry_point or safe_relative_path(entry_point) is None):
            raise InvalidInput("A bundle upload needs a relative entry point")

        record_id = str(uuid.uuid4())
        if is_folder:
            try:
                filename = await self.storage.store_bundle(record_id, content, entry_point)
            except ExtractionError:
                await self._discard_blob(record_id, record_id, is_folder=True)
                raise
        else:
            filename = await self.storage.store_single_file(record_id, original_name, content)

        record = Record(
            id=record_id,
            title=title or original_name,
            tags=parse_tags(tags),
            filename=filename,
            original_name=original_name,
            upload_date=utc_timestamp(),
            is_folder=is_folder,
        )
        try:
            await self.store.append(record)
        except StorageError:
            await self._discard_blob(record_id, filename, is_folder)
            raise

        logger.info("Uploaded record %s (%s)", record.id, record.filename)
        return record

    async def update(
        self,
        record_id: str,
        content: bytes | None = None,
        original_name: str | None = None,
        title: str | None = None,
        tags: str | None = None,
    ) -> Record:
        """Replace a record's content and/or metadata.

        Tags are replaced wholesale when ``tags`` is given, even if it parses
        to an empty list. An empty title keeps the current one.
        """
        record = await self.get_by_id(record_id)
        changes = {}

        if content is not None:
            if record.is_folder:
                raise InvalidInput("Bundle content cannot be replaced")
            original_name = original_name or record.original_name
            await self._discard_blob(record.id, record.filename, is_folder=False)
            changes["filename"] = await self.storage.store_single_file(record.id, original_name, content)
            changes["original_name"] = original_name

        if title:
            changes["title"] = title
        if tags is not None:
            changes["tags"] = parse_tags(tags)

        try:
            updated = await self.store.update(record.id, changes)
        except (NotFound, StorageError):
            if "filename" in changes:
                await self._discard_blob(record.id, changes["filename"], is_folder=False)
            raise
        logger.info("Updated record %s", record.id)
        return updated

    async def delete(self, record_id: str) -> None:
        """Remove a record and its content. Content removal failures are only logged."""
        record = await self.get_by_id(record_id)
        await self._discard_blob(record.id, record.filename, record.is_folder)
        await self.store.remove(record.id)
        logger.info("Deleted record %s", record.id)

    async def _discard_blob(self, record_id: str, filename: str, is_folder: bool) -> None:
        try:
            if is_folder:
                await self.storage.delete_bundle(record_id)
            else:
                await self.storage.delete_single_file(filename)
        except (OSError, StorageError) as e:
            logger.warning("Could not delete content %s of record %s: %s", filename, record_id, e)
