"""Record Store: one JSON document holding every Record.

Usage:
    store = JsonRecordStore("./data/db.json")
    await store.append(record)
    records = await store.list_all()

Every mutating call reads the whole document, changes it in memory and writes
it back in full. An ``asyncio.Lock`` per store instance serializes those
read-modify-write cycles, so concurrent requests in one process cannot lose
each other's updates. Partial updates go through ``update``, which merges
the changed fields into the stored record under that lock. Writes go to a
temporary sibling file that is renamed over the document, so readers never
see a half-written file.
"""
import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from htmlshelf.errors import NotFound, StorageError
from htmlshelf.schemas.record import Record

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Interface for the record metadata database."""

    @abstractmethod
    async def list_all(self) -> list[Record]:
        ...

    @abstractmethod
    async def append(self, record: Record) -> None:
        ...

    @abstractmethod
    async def replace(self, record_id: str, record: Record) -> None:
        """Replace the record with ``record_id``. Raises NotFound if absent."""

    @abstractmethod
    async def update(self, record_id: str, changes: dict) -> Record:
        """Apply field ``changes`` to the current stored record and return it.

        The read, merge and write happen as one step, so fields changed by
        another caller in between are kept. Raises NotFound if absent.
        """

    @abstractmethod
    async def remove(self, record_id: str) -> None:
        """Remove the record with ``record_id``. Raises NotFound if absent."""


class JsonRecordStore(RecordStore):
    """File-backed RecordStore writing a pretty-printed JSON array."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = asyncio.Lock()

    async def list_all(self) -> list[Record]:
        return await self._read()

    async def append(self, record: Record) -> None:
        async with self.lock:
            records = await self._read()
            if any(r.id == record.id for r in records):
                raise StorageError(f"Duplicate record id {record.id}")
            records.append(record)
            await self._write(records)

    async def replace(self, record_id: str, record: Record) -> None:
        async with self.lock:
            records = await self._read()
            index = _index_of(records, record_id)
            records[index] = record
            await self._write(records)

    async def update(self, record_id: str, changes: dict) -> Record:
        async with self.lock:
            records = await self._read()
            index = _index_of(records, record_id)
            records[index] = records[index].model_copy(update=changes)
            await self._write(records)
            return records[index]

    async def remove(self, record_id: str) -> None:
        async with self.lock:
            records = await self._read()
            index = _index_of(records, record_id)
            del records[index]
            await self._write(records)

    async def _read(self) -> list[Record]:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.exception("Failed to read record store %s", self.path)
            raise StorageError() from e

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
            return [Record.model_validate(item) for item in data]
        except (ValueError, TypeError, ValidationError) as e:
            logger.exception("Record store %s is corrupt", self.path)
            raise StorageError() from e

    async def _write(self, records: list[Record]) -> None:
        payload = json.dumps(
            [r.model_dump(by_alias=True) for r in records],
            indent=2,
            ensure_ascii=False,
        )
        tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.exception("Failed to write record store %s", self.path)
            raise StorageError() from e


def _index_of(records: list[Record], record_id: str) -> int:
    for i, record in enumerate(records):
        if record.id == record_id:
            return i
    raise NotFound(f"Record {record_id} not found")
