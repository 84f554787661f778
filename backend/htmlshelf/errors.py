"""Domain errors raised by the stores and pipelines.

Routes never build HTTP errors for these by hand; the handlers registered in
``htmlshelf.main`` turn them into ``{"error": ...}`` responses.
"""


class ShelfError(Exception):
    """Base class for all HTML Shelf errors."""

    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ShelfError):
    """A required field is missing or malformed."""

    status_code = 400
    default_message = "Invalid input"


class NotFound(ShelfError):
    """No record has the requested id."""

    status_code = 404
    default_message = "Record not found"


class ExtractionError(ShelfError):
    """The uploaded bundle is not a valid archive or has an unsafe entry."""

    status_code = 400
    default_message = "Invalid archive"


class StorageError(ShelfError):
    """Reading or writing one of the stores failed."""

    status_code = 500
    default_message = "Storage operation failed"
