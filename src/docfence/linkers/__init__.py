"""Link resolution for docfence."""

from docfence.linkers.cross_reference_linker import CrossReferenceLinker

__all__ = ["CrossReferenceLinker"]
