"""Filesystem output for rendered pages, assets and the manifest."""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

from docfence.storage.manifest import MANIFEST_NAME, Manifest


class OutputTree:
    """Writes build output below a root directory.

    Every write goes through a temporary file that is renamed into place,
    so readers never see a partially written page.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def initialize(self) -> None:
        """Create the output root if not exists."""
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, relative: str) -> Path:
        """Map a build-relative path into the output tree."""
        target = (self.root / relative).resolve()
        if not target.is_relative_to(self.root.resolve()):
            raise ValueError(f"{relative} escapes the output directory")
        return target

    @contextmanager
    def staged(self, relative: str) -> Iterator[IO[bytes]]:
        """Context manager for an atomic write of one output file."""
        target = self.resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                yield handle
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def write_page(self, relative: str, page: str) -> Path:
        """Store a rendered page and return its path."""
        with self.staged(relative) as handle:
            handle.write(page.encode("utf-8"))
        return self.resolve(relative)

    def write_asset(self, relative: str, content: bytes) -> Path:
        with self.staged(relative) as handle:
            handle.write(content)
        return self.resolve(relative)

    def write_manifest(self, manifest: Manifest) -> Path:
        with self.staged(MANIFEST_NAME) as handle:
            handle.write(manifest.dumps().encode("utf-8"))
        return self.resolve(MANIFEST_NAME)
