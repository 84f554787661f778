"""ZIP bundle extraction with path containment checks.

Every entry is validated before anything is written, so a bundle carrying an
absolute path or a ``..`` segment is rejected as a whole. A failure while
writing (disk full, permissions) leaves whatever was already extracted.
"""
import io
import logging
import os
import shutil
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from htmlshelf.errors import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Outcome of one extraction.

    ``root`` is the top-level directory stripped from every entry (a zipped
    folder like ``proj/``), or ``""`` when the archive had no single root.
    """
    files: list[str] = field(default_factory=list)
    root: str = ""


def safe_relative_path(name: str) -> PurePosixPath | None:
    """Normalize an archive entry or entry-point name to a relative POSIX path.

    Returns None if the name is absolute, carries a drive letter, or contains
    a ``..`` segment.
    """
    name = name.replace("\\", "/")
    if name.startswith("/") or (len(name) > 1 and name[1] == ":"):
        return None
    parts = [p for p in name.split("/") if p not in ("", ".")]
    if not parts or ".." in parts:
        return None
    return PurePosixPath(*parts)


class ArchiveExtractor:
    """Expands ZIP bundles into a destination directory."""

    def extract(self, archive_bytes: bytes, dest_dir: str | os.PathLike) -> ExtractionResult:
        dest = os.path.abspath(dest_dir)
        try:
            zf = zipfile.ZipFile(io.BytesIO(archive_bytes))
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ExtractionError("Uploaded bundle is not a valid ZIP archive") from e

        with zf:
            plan = self._plan(zf, dest)
            root = _common_root([rel for _, rel, is_dir in plan if not is_dir])
            os.makedirs(dest, exist_ok=True)

            result = ExtractionResult(root=root)
            for member, rel, is_dir in plan:
                if root and rel.parts[0] == root:
                    rel = PurePosixPath(*rel.parts[1:])
                    if not rel.parts:
                        continue
                target = os.path.join(dest, *rel.parts)
                if is_dir:
                    os.makedirs(target, exist_ok=True)
                    continue
                os.makedirs(os.path.dirname(target), exist_ok=True)
                try:
                    with zf.open(member) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                except (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError) as e:
                    # Corrupt data, encrypted entries and unsupported compression only surface on read.
                    raise ExtractionError(f"Could not extract {member.filename}") from e
                result.files.append(rel.as_posix())

        logger.info("Extracted %d file(s) into %s", len(result.files), dest)
        return result

    def _plan(self, zf: zipfile.ZipFile, dest: str) -> list[tuple[zipfile.ZipInfo, PurePosixPath, bool]]:
        """Validate every entry and return (member, relative path, is_dir) triples."""
        plan = []
        for member in zf.infolist():
            rel = safe_relative_path(member.filename)
            if rel is None:
                raise ExtractionError(f"Unsafe path in archive: {member.filename}")
            target = os.path.abspath(os.path.join(dest, *rel.parts))
            if not target.startswith(dest + os.sep):
                raise ExtractionError(f"Unsafe path in archive: {member.filename}")
            plan.append((member, rel, member.is_dir()))
        return plan


def _common_root(files: list[PurePosixPath]) -> str:
    """The single top-level directory shared by every file, if there is one."""
    if not files or any(len(f.parts) < 2 for f in files):
        return ""
    roots = {f.parts[0] for f in files}
    return roots.pop() if len(roots) == 1 else ""
