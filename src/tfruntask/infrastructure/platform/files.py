"""Local file operations for the per-run directories."""

from __future__ import annotations

import json
import shutil
import tarfile
import zlib
from pathlib import Path

import structlog
from pydantic import BaseModel

from tfruntask.domain.exceptions import ArchiveExtractionError

logger = structlog.get_logger(__name__)

DEFAULT_FILE_MODE = 0o644


class FileManager:
    """Writes run data to disk and unpacks configuration archives."""

    def save_model(self, directory: Path, filename: str, model: BaseModel) -> Path:
        """Write a model to ``directory/filename`` as indented JSON.

        Raises:
            OSError: If the file cannot be written
        """
        path = directory / filename
        path.write_text(model.model_dump_json(indent=2) + "\n", encoding="utf-8")
        return path

    def save_pretty_json(self, data: bytes, path: Path) -> Path:
        """Re-indent a JSON document and write it to ``path``.

        Raises:
            ValueError: If ``data`` is not valid JSON
            OSError: If the file cannot be written
        """
        try:
            document = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValueError(f"failed to pretty print JSON: {e}") from e
        path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        return path

    def extract_tar_gz(self, archive: Path, target_dir: Path) -> list[Path]:
        """Extract a ``.tar.gz`` archive into ``target_dir``.

        Only directories and regular files are extracted; links and devices are
        skipped. Every member must resolve inside ``target_dir``.

        Args:
            archive: Path of the archive
            target_dir: Directory to extract into, created if missing

        Returns:
            Paths of the extracted files

        Raises:
            ArchiveExtractionError: If the archive is unreadable or a member
                would be written outside ``target_dir``
        """
        target_dir.mkdir(parents=True, exist_ok=True)
        base = target_dir.resolve()
        extracted: list[Path] = []

        try:
            with tarfile.open(archive, "r:gz") as tar:
                for member in tar:
                    destination = (base / member.name).resolve()
                    if not destination.is_relative_to(base):
                        raise ArchiveExtractionError(f"invalid file path: {member.name}")

                    if member.isdir():
                        destination.mkdir(parents=True, exist_ok=True)
                    elif member.isfile():
                        self._extract_file(tar, member, destination)
                        extracted.append(destination)
                    else:
                        logger.debug("Skipping archive member", name=member.name, type=member.type)
        # gzip raises EOFError on a truncated stream and zlib.error on corrupt data.
        except (tarfile.TarError, OSError, EOFError, zlib.error) as e:
            raise ArchiveExtractionError(f"failed to extract {archive.name}: {e}") from e

        logger.debug("Extracted archive", archive=str(archive), files=len(extracted))
        return extracted

    def _extract_file(self, tar: tarfile.TarFile, member: tarfile.TarInfo, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        source = tar.extractfile(member)
        if source is None:
            return
        with source, destination.open("wb") as out:
            shutil.copyfileobj(source, out)
        # Keep the owner able to read and write whatever the archive says.
        destination.chmod((member.mode & 0o777) | 0o600 if member.mode else DEFAULT_FILE_MODE)
