import os
import shutil
import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

# Point configuration at a scratch area before htmlshelf is imported anywhere.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="htmlshelf-tests-"))
os.environ["RECORDS_DB_PATH"] = str(_TEST_ROOT / "data" / "db.json")
os.environ["FILE_STORAGE_PATH"] = str(_TEST_ROOT / "uploads")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from htmlshelf.services.file_storage import FileStorageService  # noqa: E402
from htmlshelf.services.record_store import JsonRecordStore  # noqa: E402
from htmlshelf.services.records import RecordService  # noqa: E402
from tests.helpers import make_zip  # noqa: E402


@pytest.fixture
def bundle_bytes():
    return make_zip({
        "proj/index.html": b"<html><img src='assets/a.png'></html>",
        "proj/assets/a.png": b"\x89PNG fake",
    })


@pytest.fixture
def store(tmp_path):
    return JsonRecordStore(tmp_path / "data" / "db.json")


@pytest.fixture
def storage(tmp_path):
    return FileStorageService(tmp_path / "uploads")


@pytest.fixture
def service(store, storage):
    return RecordService(store, storage)


@pytest_asyncio.fixture
async def client():
    """HTTP client against the app, with the shared record file and uploads emptied."""
    from httpx import ASGITransport, AsyncClient

    from htmlshelf.database import record_store
    from htmlshelf.main import app
    from htmlshelf.services.file_storage import file_storage

    record_store.path.unlink(missing_ok=True)
    for child in file_storage.base_path.iterdir():
        if child.is_dir():
            shutil.rmtree(child)
        else:
            child.unlink()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
