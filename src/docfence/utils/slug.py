"""Heading anchor generation."""

import re
import unicodedata

_LINK_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
_PUNCT_RE = re.compile(r"[^\w\s-]")
_SPACE_RE = re.compile(r"\s")


def slugify(text: str) -> str:
    """Turn heading text into an anchor, GitHub style.

    >>> slugify("Re-Entrancy & `call()`")
    're-entrancy--call'
    """
    text = _LINK_RE.sub(r"\1", text)
    text = unicodedata.normalize("NFKC", text).strip().lower()
    text = _PUNCT_RE.sub("", text)
    return _SPACE_RE.sub("-", text)


class AnchorAllocator:
    """Hands out unique anchors in document order: foo, foo-1, foo-2."""

    def __init__(self) -> None:
        self._seen: dict[str, int] = {}

    def allocate(self, text: str) -> str:
        base = slugify(text)
        count = self._seen.get(base)
        if count is None:
            self._seen[base] = 0
            return base
        count += 1
        self._seen[base] = count
        candidate = f"{base}-{count}"
        # "Foo 1" followed by two "Foo" headings must not collide
        while candidate in self._seen:
            count += 1
            candidate = f"{base}-{count}"
        self._seen[base] = count
        self._seen[candidate] = 0
        return candidate
