"""Static HTML page renderer."""

import html
import posixpath
import re
from typing import Mapping, Optional, Union

from docfence.errors import RenderError
from docfence.extractors.fence_extractor import CODE_SPAN_RE, INLINE_LINK_RE, mask_code_spans
from docfence.models import (
    CodeFragment,
    Document,
    Heading,
    Image,
    Link,
    LinkKind,
    LinkStatus,
    LinkTarget,
    Paragraph,
    SourceSpan,
    ValidationResult,
    ValidationStatus,
)
from docfence.utils.binary import is_document_path

STRONG_RE = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
EM_RE = re.compile(r"(?<![\*\w])\*(?=\S)(.+?)(?<=\S)\*(?![\*\w])|(?<!\w)_(?=\S)(.+?)(?<=\S)_(?!\w)")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="generator" content="docfence">
<title>{title}</title>
<style>
.fragment-error, .link-warning {{ color: #a40000; font-weight: bold; }}
.fragment-failed {{ border-left: 4px solid #a40000; }}
.fragment-skipped {{ border-left: 4px solid #888; }}
.link-dangling {{ text-decoration: line-through wavy #a40000; }}
</style>
</head>
<body>
<main data-source="{source}">
{body}
</main>
</body>
</html>
"""

LinkMap = Mapping[Union[Link, Image], LinkTarget]


def page_path(source_path: str, suffix: str = ".html") -> str:
    """Map a document's source path to its rendered page path."""
    root, _ = posixpath.splitext(source_path)
    return root + suffix


class HtmlRenderer:
    """Renders a document as a standalone HTML5 page.

    Validation and link problems are annotated inline and never stop the
    render; only a structurally corrupt document raises RenderError.
    """

    page_suffix = ".html"

    def render(
        self,
        document: Document,
        validations: Mapping[CodeFragment, ValidationResult],
        links: LinkMap,
    ) -> str:
        """Render the page.

        Args:
            document: The extracted document
            validations: One result per code fragment
            links: Resolution of each Link and Image block

        Returns:
            The serialized HTML page

        Raises:
            RenderError: on an unknown block variant or a fragment with no
                validation result
        """
        parts: list[str] = []
        blocks = document.blocks
        i = 0
        while i < len(blocks):
            block = blocks[i]
            i += 1

            if isinstance(block, Heading):
                inline_blocks, i = self._inline_blocks(blocks, i, block.span)
                tag = f"h{min(max(block.level, 1), 6)}"
                parts.append(
                    f'<{tag} id="{html.escape(block.anchor)}">'
                    f"{self._inline(block.text, inline_blocks, links)}</{tag}>"
                )
            elif isinstance(block, Paragraph):
                inline_blocks, i = self._inline_blocks(blocks, i, block.span)
                body = self._inline(block.text, inline_blocks, links)
                parts.append(f"<p>{body}</p>")
            elif isinstance(block, CodeFragment):
                if block not in validations:
                    raise RenderError(
                        f"{document.path}: fragment at {block.span} has no validation result"
                    )
                parts.append(self._fragment(block, validations[block]))
            elif isinstance(block, Image):
                parts.append(f"<figure>{self._image(block.alt, block.target, links.get(block))}</figure>")
            elif isinstance(block, Link):
                parts.append(f"<p>{self._anchor(block.text, block.target, links.get(block))}</p>")
            else:
                raise RenderError(f"{document.path}: unknown block {type(block).__name__}")

        return PAGE_TEMPLATE.format(
            title=html.escape(document.title),
            source=html.escape(document.path),
            body="\n".join(parts),
        )

    @staticmethod
    def _inline_blocks(
        blocks: tuple, i: int, span: SourceSpan
    ) -> tuple[list[Union[Link, Image]], int]:
        """Collect the links and images the extractor emitted right after a block."""
        found: list[Union[Link, Image]] = []
        while (
            i < len(blocks)
            and isinstance(blocks[i], (Link, Image))
            and span.start_line <= blocks[i].span.start_line <= span.end_line
        ):
            found.append(blocks[i])
            i += 1
        return found, i

    def _fragment(self, fragment: CodeFragment, result: ValidationResult) -> str:
        language = fragment.raw_language or fragment.language.value
        code = (
            f'<pre class="fragment fragment-{result.status.value}" '
            f'data-language="{html.escape(fragment.language.value)}" '
            f'data-lines="{fragment.span.start_line}-{fragment.span.end_line}">'
            f'<code class="language-{html.escape(language)}">{html.escape(fragment.text)}</code></pre>'
        )
        if result.status is not ValidationStatus.FAILED:
            return code

        where = ""
        if result.line is not None:
            where = f" (source line {fragment.span.start_line + result.line})"
        marker = (
            f'<div class="fragment-error" role="note">&#9888; ParseError{where}: '
            f"{html.escape(result.reason or 'invalid syntax')}</div>"
        )
        return f"{marker}\n{code}"

    def _inline(
        self,
        text: str,
        inline_blocks: list[Union[Link, Image]],
        links: LinkMap,
    ) -> str:
        queue = list(inline_blocks)
        out: list[str] = []
        pos = 0
        for match in INLINE_LINK_RE.finditer(mask_code_spans(text)):
            out.append(self._format(text[pos : match.start()]))
            label = text[match.start("text") : match.end("text")]
            target = match.group("target")

            block = queue.pop(0) if queue else None
            resolution = links.get(block) if block is not None else None
            if match.group("bang"):
                out.append(self._image(label, target, resolution))
            else:
                out.append(self._anchor(label, target, resolution))
            pos = match.end()
        out.append(self._format(text[pos:]))
        return "".join(out)

    @staticmethod
    def _format(text: str) -> str:
        """Escape text and apply code spans and emphasis."""
        out: list[str] = []
        pos = 0
        for match in CODE_SPAN_RE.finditer(text):
            out.append(_emphasis(html.escape(text[pos : match.start()])))
            out.append(f"<code>{html.escape(match.group('code').strip())}</code>")
            pos = match.end()
        out.append(_emphasis(html.escape(text[pos:])))
        return "".join(out)

    def _anchor(self, label: str, reference: str, target: Optional[LinkTarget]) -> str:
        href = html.escape(self._href(reference, target), quote=True)
        body = self._format(label)
        if target is None:
            return f'<a href="{href}">{body}</a>'
        if target.status is LinkStatus.EXTERNAL_UNCHECKED:
            return f'<a href="{href}" class="external" rel="noopener">{body}</a>'
        if target.status is LinkStatus.DANGLING:
            return (
                f'<a href="{href}" class="link-dangling">{body}</a>'
                f'<span class="link-warning" title="dangling reference">&#9888;</span>'
            )
        return f'<a href="{href}">{body}</a>'

    def _image(self, alt: str, src: str, target: Optional[LinkTarget]) -> str:
        src = html.escape(src, quote=True)
        alt = html.escape(alt, quote=True)
        tag = f'<img src="{src}" alt="{alt}">'
        if target is not None and target.status is LinkStatus.DANGLING:
            tag = (
                f'<img src="{src}" alt="{alt}" class="link-dangling">'
                f'<span class="link-warning" title="missing image">&#9888;</span>'
            )
        return tag

    def _href(self, reference: str, target: Optional[LinkTarget]) -> str:
        """Point links to other documents at their rendered pages."""
        if target is None or target.kind is not LinkKind.DOCUMENT:
            return reference
        path_part, sep, fragment = reference.partition("#")
        if not is_document_path(path_part):
            return reference
        return page_path(path_part, self.page_suffix) + sep + fragment


def _emphasis(escaped: str) -> str:
    escaped = STRONG_RE.sub(r"<strong>\1</strong>", escaped)
    return EM_RE.sub(lambda m: f"<em>{m.group(1) or m.group(2)}</em>", escaped)
