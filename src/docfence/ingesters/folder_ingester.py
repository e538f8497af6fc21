"""Ingester for local folders."""

import logging
import os
from pathlib import Path
from typing import Iterator

from docfence.models import SourceFile
from docfence.utils.binary import is_asset_path, is_document_path

logger = logging.getLogger(__name__)


class FolderIngester:
    """Ingester for a local tree of chapters and their assets."""

    source_type = "folder"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing directory."""
        return source.is_dir()

    def ingest(self, source: Path) -> Iterator[SourceFile]:
        """Yield documents and assets from a folder recursively.

        Args:
            source: Path to the folder

        Yields:
            SourceFile objects, in sorted path order
        """
        for root, dirs, files in os.walk(source):
            dirs.sort()
            for filename in sorted(files):
                full_path = Path(root) / filename
                rel_path = full_path.relative_to(source).as_posix()

                if self._should_skip(Path(rel_path)):
                    logger.debug(f"Skipping {rel_path}")
                    continue

                is_document = is_document_path(rel_path)
                if not is_document and not is_asset_path(rel_path):
                    logger.debug(f"Ignoring {rel_path}")
                    continue

                try:
                    raw_content = full_path.read_bytes()
                except OSError as e:
                    if not is_document:
                        logger.warning(f"Cannot read asset {rel_path}: {e}")
                        continue
                    yield SourceFile(path=rel_path, error=e.strerror or str(e))
                    continue

                yield SourceFile(
                    path=rel_path,
                    content=raw_content,
                    is_asset=not is_document,
                )

    def _should_skip(self, path: Path) -> bool:
        """Check if a file should be skipped.

        Skips hidden files and folders (version control included) and
        vendored package trees. Chapter folders may use any other name.
        """
        parts = path.parts

        # Skip hidden files/folders
        if any(part.startswith(".") for part in parts):
            return True

        skip_patterns = {"__pycache__", "node_modules"}

        return any(part in skip_patterns for part in parts)
