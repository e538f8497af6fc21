"""Block extraction for docfence."""

from docfence.extractors.fence_extractor import Extraction, FenceExtractor

__all__ = ["Extraction", "FenceExtractor"]
