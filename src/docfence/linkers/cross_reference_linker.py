"""Cross-reference resolution for links and images."""

import posixpath
import re
from typing import Mapping, Optional, Union
from urllib.parse import unquote

from docfence.models import Document, Image, Link, LinkKind, LinkStatus, LinkTarget
from docfence.utils.binary import is_document_path

SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


class CrossReferenceLinker:
    """Resolves every link and image reference in a document.

    In-document anchors resolve against the document's heading anchors.
    Relative references resolve against immutable snapshots of the build's
    document paths (with their anchors, when known) and asset paths.
    External URLs are never fetched.
    """

    def __init__(
        self,
        documents: Optional[Mapping[str, Optional[frozenset[str]]]] = None,
        assets: frozenset[str] = frozenset(),
    ):
        """Initialize the linker.

        Args:
            documents: Relative document path -> its heading anchors, or None
                       when the anchors are not known yet
            assets: Relative paths of every asset in the build
        """
        self._documents = dict(documents or {})
        self._assets = frozenset(assets)

    def link(self, document: Document) -> dict[Union[Link, Image], LinkTarget]:
        """Resolve every Link and Image block of a document."""
        anchors = document.anchors
        resolved: dict[Union[Link, Image], LinkTarget] = {}
        for block in document.blocks:
            if isinstance(block, (Link, Image)):
                resolved[block] = self.resolve(block.target, document.path, anchors)
        return resolved

    def resolve(self, reference: str, source_path: str, anchors: frozenset[str]) -> LinkTarget:
        """Resolve one reference as written in the document at source_path."""
        if SCHEME_RE.match(reference) or reference.startswith("//"):
            return LinkTarget(reference, LinkStatus.EXTERNAL_UNCHECKED, LinkKind.EXTERNAL)

        path_part, _, fragment = reference.partition("#")
        fragment = unquote(fragment)

        if not path_part:
            # A bare "#" is the top of the page
            resolved = not fragment or fragment in anchors
            status = LinkStatus.RESOLVED if resolved else LinkStatus.DANGLING
            return LinkTarget(reference, status, LinkKind.ANCHOR)

        target_path = self.normalize(path_part, source_path)
        if target_path is None:
            kind = LinkKind.DOCUMENT if is_document_path(path_part) else LinkKind.ASSET
            return LinkTarget(reference, LinkStatus.DANGLING, kind)

        if is_document_path(target_path):
            if target_path not in self._documents:
                return LinkTarget(reference, LinkStatus.DANGLING, LinkKind.DOCUMENT)
            target_anchors = self._documents[target_path]
            if target_path == source_path:
                target_anchors = anchors
            if fragment and target_anchors is not None and fragment not in target_anchors:
                return LinkTarget(reference, LinkStatus.DANGLING, LinkKind.DOCUMENT)
            return LinkTarget(reference, LinkStatus.RESOLVED, LinkKind.DOCUMENT)

        status = LinkStatus.RESOLVED if target_path in self._assets else LinkStatus.DANGLING
        return LinkTarget(reference, status, LinkKind.ASSET)

    @staticmethod
    def normalize(reference: str, source_path: str) -> Optional[str]:
        """Resolve a relative reference to a build-root-relative path.

        Returns None for references that climb above the build root.
        """
        reference = unquote(reference.split("?", 1)[0])
        if reference.startswith("/"):
            joined = reference.lstrip("/")
        else:
            joined = posixpath.join(posixpath.dirname(source_path), reference)
        normalized = posixpath.normpath(joined)
        if normalized == ".." or normalized.startswith("../"):
            return None
        return normalized
