"""Ingester for ZIP archives of chapters."""

import zipfile
from pathlib import Path
from typing import Iterator

from docfence.models import SourceFile
from docfence.utils.binary import is_asset_path, is_document_path


class ZipIngester:
    """Ingester for ZIP archive files."""

    source_type = "zip"

    def can_handle(self, source: Path) -> bool:
        """Check if this is a zip file."""
        return source.suffix.lower() == ".zip" and source.is_file()

    def ingest(self, source: Path) -> Iterator[SourceFile]:
        """Yield documents and assets from a ZIP archive.

        Args:
            source: Path to the ZIP file

        Yields:
            SourceFile objects, in sorted member order
        """
        with zipfile.ZipFile(source, "r") as zf:
            for info in sorted(zf.infolist(), key=lambda i: i.filename):
                if info.is_dir():
                    continue

                name = info.filename
                if any(part.startswith(".") for part in Path(name).parts):
                    continue

                is_document = is_document_path(name)
                if not is_document and not is_asset_path(name):
                    continue

                try:
                    raw_content = zf.read(info)
                except (zipfile.BadZipFile, OSError) as e:
                    if is_document:
                        yield SourceFile(path=name, error=str(e))
                    continue

                yield SourceFile(path=name, content=raw_content, is_asset=not is_document)
