"""Protocol for input source handlers."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from docfence.models import SourceFile


@runtime_checkable
class Ingester(Protocol):
    """Protocol for input source handlers.

    Implementations walk a source (a folder of chapters, a zip of one)
    and yield every document and asset it contains.
    Uses structural subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this source type (e.g., 'zip', 'folder')."""
        ...

    def can_handle(self, source: Path) -> bool:
        """Check if this ingester can process the given source."""
        ...

    def ingest(self, source: Path) -> Iterator[SourceFile]:
        """Yield source files from the source.

        Assets are yielded with is_asset=True; documents are left
        undecoded so the pipeline can report IOFailure per document.
        """
        ...
