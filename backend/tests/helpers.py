"""Builders shared by the test modules."""
import io
import zipfile

from htmlshelf.schemas.record import Record


def make_zip(entries: dict[str, bytes]) -> bytes:
    """Build an in-memory ZIP archive from {name: content}."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buf.getvalue()


def make_record(record_id: str = "r1", **overrides) -> Record:
    data = {
        "id": record_id,
        "title": "Notes",
        "tags": ["a"],
        "filename": f"{record_id}.html",
        "original_name": "notes.html",
        "upload_date": "2026-10-19T09:30:00.000Z",
    }
    data.update(overrides)
    return Record(**data)


def make_corrupt_zip(name: str = "index.html", content: bytes = b"<p>hello</p>" * 200) -> bytes:
    """A ZIP whose directory is intact but whose deflate stream is garbage."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(name, content)
        compress_size = zf.getinfo(name).compress_size
    data = bytearray(buf.getvalue())
    # Local file header is 30 bytes plus the name; writestr adds no extra field.
    start = 30 + len(name.encode())
    for i in range(start, start + compress_size):
        data[i] ^= 0xFF
    return bytes(data)


def make_unsupported_zip(name: str = "index.html") -> bytes:
    """A stored ZIP entry relabelled with a compression method zipfile cannot read."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr(name, b"<p>hello</p>")
    data = bytearray(buf.getvalue())
    central = data.index(b"PK\x01\x02")
    data[8:10] = (99).to_bytes(2, "little")
    data[central + 10:central + 12] = (99).to_bytes(2, "little")
    return bytes(data)
