"""Protocol for page renderers."""

from typing import Mapping, Protocol, Union, runtime_checkable

from docfence.models import CodeFragment, Document, Image, Link, LinkTarget, ValidationResult


@runtime_checkable
class PageRenderer(Protocol):
    """Turns a linked, validated document into a serialized page."""

    @property
    def page_suffix(self) -> str:
        """File suffix for rendered pages (e.g., '.html')."""
        ...

    def render(
        self,
        document: Document,
        validations: Mapping[CodeFragment, ValidationResult],
        links: Mapping[Union[Link, Image], LinkTarget],
    ) -> str:
        """Render the page. Raises RenderError only on structural corruption."""
        ...
