"""Blob Store: uploaded content on the local filesystem.

Storage names are derived from the record id: ``<id><ext>`` for single files
and ``<id>/...`` for extracted bundles. The Record Store is the only index;
nothing here tracks which blobs exist.
"""
import asyncio
import logging
import os
import shutil
from pathlib import Path, PurePosixPath

import aiofiles
import aiofiles.os

from htmlshelf.config import settings
from htmlshelf.errors import ExtractionError, InvalidInput, StorageError
from htmlshelf.services.archive import ArchiveExtractor, safe_relative_path

logger = logging.getLogger(__name__)


class FileStorageService:
    """Handles blob read/write under one root directory."""

    def __init__(self, base_path: str | os.PathLike | None = None, extractor: ArchiveExtractor | None = None):
        self.base_path = Path(base_path or settings.FILE_STORAGE_PATH).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.extractor = extractor or ArchiveExtractor()

    def resolve(self, relative_path: str) -> Path:
        """Absolute path for a storage-relative path. Rejects escapes from the root."""
        rel = safe_relative_path(relative_path)
        if rel is None:
            raise StorageError(f"Suspicious storage path: {relative_path}")
        return self.base_path.joinpath(*rel.parts)

    async def exists(self, relative_path: str) -> bool:
        return await aiofiles.os.path.exists(self.resolve(relative_path))

    async def store_single_file(self, record_id: str, original_name: str, file_bytes: bytes) -> str:
        """Write ``file_bytes`` as ``<id><ext>``. Returns the relative path."""
        # Some clients send Windows paths; the suffix must never add a directory.
        suffix = PurePosixPath(original_name.replace("\\", "/")).suffix
        filename = f"{record_id}{suffix}"
        try:
            async with aiofiles.open(self.resolve(filename), "wb") as f:
                await f.write(file_bytes)
        except OSError as e:
            logger.exception("Failed to write %s", filename)
            raise StorageError() from e
        return filename

    async def store_bundle(self, record_id: str, archive_bytes: bytes, entry_point: str) -> str:
        """Extract ``archive_bytes`` into ``<id>/``. Returns ``<id>/<entry point>``.

        The entry point is interpreted relative to the bundle root; if the
        archive wrapped everything in one folder and the caller's entry point
        still names it, that prefix is dropped.
        """
        entry = safe_relative_path(entry_point)
        if entry is None:
            raise InvalidInput(f"Invalid entry point: {entry_point!r}")

        bundle_dir = self.resolve(record_id)
        try:
            result = await asyncio.to_thread(self.extractor.extract, archive_bytes, bundle_dir)
        except OSError as e:
            logger.exception("Failed to extract bundle %s", record_id)
            raise ExtractionError("Could not write bundle contents") from e

        if result.root and len(entry.parts) > 1 and entry.parts[0] == result.root:
            entry = entry.relative_to(result.root)
        if entry.as_posix() not in result.files:
            logger.warning("Entry point %s not found in bundle %s", entry, record_id)
        return f"{record_id}/{entry.as_posix()}"

    async def delete_single_file(self, relative_path: str) -> None:
        """Remove one file. A missing file is not an error."""
        try:
            await aiofiles.os.remove(self.resolve(relative_path))
        except FileNotFoundError:
            pass

    async def delete_bundle(self, record_id: str) -> None:
        """Recursively remove ``<id>/``. A missing directory is not an error."""
        try:
            await asyncio.to_thread(shutil.rmtree, self.resolve(record_id))
        except FileNotFoundError:
            pass


file_storage = FileStorageService()
