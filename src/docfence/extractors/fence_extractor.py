"""Block extraction with fenced code fragment detection."""

import re
from dataclasses import dataclass, field
from typing import Optional

from docfence.errors import MalformedFragment
from docfence.models import (
    Block,
    CodeFragment,
    Diagnostic,
    DiagnosticKind,
    Document,
    Heading,
    Image,
    Language,
    Link,
    Paragraph,
    SourceSpan,
)
from docfence.utils.slug import AnchorAllocator

FENCE_OPEN_RE = re.compile(r"^(?P<indent> *)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
FENCE_CLOSE_RE = re.compile(r"^(?P<indent> *)(?P<fence>`{3,}|~{3,})[ \t]*$")
HEADING_RE = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?(?:[ \t]+#+)?[ \t]*$")
IMAGE_LINE_RE = re.compile(r"^\s*!\[(?P<alt>[^\]]*)\]\((?P<target>[^)\s]+)(?:\s+\"[^\"]*\")?\)\s*$")
INLINE_LINK_RE = re.compile(
    r"(?P<bang>!?)\[(?P<text>[^\]]*)\]\(\s*<?(?P<target>[^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)"
)
CODE_SPAN_RE = re.compile(r"(?P<ticks>`+)(?P<code>.+?)(?P=ticks)", re.DOTALL)
LIST_ITEM_RE = re.compile(r"^ *(?:[-*+]|\d{1,9}[.)])(?P<gap>[ \t]+)\S")


def mask_code_spans(text: str) -> str:
    """Blank out inline code spans, keeping every other offset in place."""
    return CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), text)


@dataclass
class Extraction:
    """Result of extracting one document."""

    document: Document
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class _Counters:
    fragments: int = 0
    links: int = 0
    images: int = 0


class FenceExtractor:
    """Splits Markdown text into an ordered block sequence.

    Fenced regions open with three or more backticks or tildes and close
    with a run of the same character that is at least as long. The first
    word of the info string is the language tag.
    """

    def extract(self, text: str, path: str) -> Extraction:
        """Extract blocks from raw document text.

        An unterminated fence is recorded as a MalformedFragment diagnostic;
        every block before it is kept.

        Args:
            text: Decoded document text
            path: Source path, used as the document identity

        Returns:
            Extraction holding the immutable document and any diagnostics
        """
        lines = text.split("\n")
        blocks: list[Block] = []
        diagnostics: list[Diagnostic] = []
        counters = _Counters()
        anchors = AnchorAllocator()

        paragraph: list[str] = []
        paragraph_start = 0
        # Content column of the innermost open list item, if any
        list_indent: Optional[int] = None

        def flush() -> None:
            if paragraph:
                blocks.extend(
                    self._paragraph_blocks(paragraph, paragraph_start, counters)
                )
                paragraph.clear()

        i = 0
        while i < len(lines):
            line = lines[i]
            lineno = i + 1

            fence_limit = 3 if list_indent is None else list_indent + 3
            opening = self._match_fence_open(line, fence_limit)
            if opening is not None:
                flush()
                if not opening.group("indent"):
                    list_indent = None
                try:
                    fragment, i = self._read_fence(lines, i, opening, path, counters)
                except MalformedFragment as e:
                    diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.MALFORMED_FRAGMENT,
                            message=str(e),
                            path=path,
                            line=e.line,
                        )
                    )
                    break
                blocks.append(fragment)
                continue

            item = LIST_ITEM_RE.match(line)
            if item is not None:
                list_indent = item.end("gap")
            elif line.strip() and not line[0].isspace():
                list_indent = None

            heading = HEADING_RE.match(line)
            if heading is not None:
                flush()
                title = (heading.group("text") or "").strip()
                blocks.append(
                    Heading(
                        level=len(heading.group("hashes")),
                        text=title,
                        anchor=anchors.allocate(title),
                        span=SourceSpan(lineno, lineno),
                    )
                )
                blocks.extend(self._inline_blocks(title, lineno, counters))
            elif not line.strip():
                flush()
            elif not paragraph and IMAGE_LINE_RE.match(line):
                match = IMAGE_LINE_RE.match(line)
                blocks.append(
                    Image(
                        alt=match.group("alt"),
                        target=match.group("target"),
                        span=SourceSpan(lineno, lineno),
                        ordinal=counters.images,
                    )
                )
                counters.images += 1
            else:
                if not paragraph:
                    paragraph_start = lineno
                paragraph.append(line.strip())
            i += 1

        flush()
        return Extraction(Document(path=path, blocks=tuple(blocks)), diagnostics)

    @staticmethod
    def _match_fence_open(line: str, max_indent: int) -> Optional[re.Match]:
        match = FENCE_OPEN_RE.match(line)
        if match is None or len(match.group("indent")) > max_indent:
            return None
        # A backtick fence's info string cannot itself contain backticks
        if match.group("fence")[0] == "`" and "`" in match.group("info"):
            return None
        return match

    @staticmethod
    def _read_fence(
        lines: list[str],
        start: int,
        opening: re.Match,
        path: str,
        counters: _Counters,
    ) -> tuple[CodeFragment, int]:
        """Consume a fenced region starting at lines[start].

        Returns:
            The fragment and the index of the first line after the fence

        Raises:
            MalformedFragment: if no closing fence is found
        """
        fence = opening.group("fence")
        indent = len(opening.group("indent"))
        info = opening.group("info").strip()
        tag = info.split()[0] if info else ""
        # Pandoc-style attribute tags: ```{.python}
        tag = tag.strip("{}").lstrip(".")

        body: list[str] = []
        for j in range(start + 1, len(lines)):
            closing = FENCE_CLOSE_RE.match(lines[j])
            if (
                closing is not None
                and len(closing.group("indent")) <= indent + 3
                and closing.group("fence")[0] == fence[0]
                and len(closing.group("fence")) >= len(fence)
            ):
                fragment = CodeFragment(
                    language=Language.from_tag(tag),
                    raw_language=tag,
                    text="\n".join(body),
                    span=SourceSpan(start + 1, j + 1),
                    ordinal=counters.fragments,
                )
                counters.fragments += 1
                return fragment, j + 1
            line = lines[j]
            strip = min(indent, len(line) - len(line.lstrip(" ")))
            body.append(line[strip:])

        raise MalformedFragment(path, start + 1)

    @staticmethod
    def _paragraph_blocks(
        lines: list[str], start: int, counters: _Counters
    ) -> list[Block]:
        """Build a paragraph plus the inline links and images it holds."""
        text = "\n".join(lines)
        paragraph = Paragraph(text, SourceSpan(start, start + len(lines) - 1))
        return [paragraph, *FenceExtractor._inline_blocks(text, start, counters)]

    @staticmethod
    def _inline_blocks(text: str, start: int, counters: _Counters) -> list[Block]:
        """Links and images written inline, outside code spans."""
        blocks: list[Block] = []
        masked = mask_code_spans(text)
        for match in INLINE_LINK_RE.finditer(masked):
            lineno = start + masked.count("\n", 0, match.start())
            span = SourceSpan(lineno, lineno)
            label = text[match.start("text") : match.end("text")]
            if match.group("bang"):
                blocks.append(
                    Image(label, match.group("target"), span, counters.images)
                )
                counters.images += 1
            else:
                blocks.append(
                    Link(label, match.group("target"), span, counters.links)
                )
                counters.links += 1
        return blocks
