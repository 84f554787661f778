"""Record schemas - the persisted metadata entry for one uploaded HTML artifact."""
from datetime import datetime, timezone

from pydantic import Field, model_validator

from htmlshelf.schemas.base import CamelModel


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Record(CamelModel):
    id: str
    title: str
    tags: list[str] = Field(default_factory=list)
    filename: str
    original_name: str
    upload_date: str = Field(default_factory=utc_timestamp)
    is_folder: bool = False

    @model_validator(mode="after")
    def _check_storage_shape(self):
        # Bundles live at <id>/<entry point>, single files at <id><ext>.
        if self.is_folder != ("/" in self.filename):
            raise ValueError(
                f"filename {self.filename!r} does not match isFolder={self.is_folder}"
            )
        return self


class DeleteResponse(CamelModel):
    deleted: bool = True
    id: str = ""
