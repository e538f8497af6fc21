"""Build configuration."""

import os
from dataclasses import dataclass
from pathlib import Path


def default_jobs() -> int:
    """Worker count for the document pool: CPU count, capped at 8."""
    return max(1, min(os.cpu_count() or 1, 8))


@dataclass(frozen=True)
class BuildConfig:
    """Settings for one build run.

    Attributes:
        input_dir: Folder (or .zip) holding the chapters and their assets
        output_dir: Where pages, assets and the manifest are written;
                    None runs the pipeline without writing anything
        strict: Whether recorded warnings should fail the run
        jobs: Documents processed concurrently
        copy_assets: Copy referenced assets into the output tree
    """

    input_dir: Path
    output_dir: Path | None = None
    strict: bool = False
    jobs: int = 0
    copy_assets: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_dir", Path(self.input_dir))
        if self.output_dir is not None:
            object.__setattr__(self, "output_dir", Path(self.output_dir))
        if self.jobs <= 0:
            object.__setattr__(self, "jobs", default_jobs())

    @property
    def writes_output(self) -> bool:
        return self.output_dir is not None
