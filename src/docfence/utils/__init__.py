"""Utility functions for docfence."""

from docfence.utils.binary import decode_document, is_asset_path, is_document_path
from docfence.utils.slug import AnchorAllocator, slugify

__all__ = [
    "AnchorAllocator",
    "decode_document",
    "is_asset_path",
    "is_document_path",
    "slugify",
]
