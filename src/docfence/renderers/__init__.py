"""Page renderers for docfence."""

from docfence.renderers.html_renderer import HtmlRenderer, page_path

__all__ = ["HtmlRenderer", "page_path"]
