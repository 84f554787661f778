"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from htmlshelf.config import settings
from htmlshelf.database import record_store
from htmlshelf.errors import ShelfError, StorageError
from htmlshelf.services.file_storage import file_storage

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log where records and uploads live."""
    logger.info(
        "Serving records from %s and uploads from %s",
        record_store.path, file_storage.base_path,
    )
    yield


app = FastAPI(
    title="HTML Shelf API",
    version="1.0.0",
    description="Upload, catalog and preview HTML documents and bundles.",
    lifespan=lifespan,
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShelfError)
async def shelf_error_handler(request: Request, exc: ShelfError):
    """Map domain errors to {"error": message} with their HTTP status."""
    if isinstance(exc, StorageError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        message = StorageError.default_message
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
        message = exc.message
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.get("/api/health")
async def health_check():
    """Verify the record database is readable and the upload root exists."""
    try:
        records = await record_store.list_all()
    except StorageError as e:
        return {"status": "error", "database": str(e)}
    if not file_storage.base_path.is_dir():
        return {"status": "error", "storage": f"{file_storage.base_path} missing"}
    return {"status": "ok", "database": "readable", "records": len(records)}


# Register routers
from htmlshelf.routes.records import router as records_router
from htmlshelf.routes.upload import router as upload_router
app.include_router(records_router)
app.include_router(upload_router)

# Uploaded content, addressable as <UPLOADS_URL_PATH>/<record.filename>
app.mount(
    settings.UPLOADS_URL_PATH,
    StaticFiles(directory=file_storage.base_path, html=True),
    name="uploads",
)
