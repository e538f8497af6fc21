"""Build output storage for docfence."""

from docfence.storage.manifest import MANIFEST_NAME, Manifest, ManifestEntry
from docfence.storage.output_tree import OutputTree

__all__ = ["MANIFEST_NAME", "Manifest", "ManifestEntry", "OutputTree"]
