"""Classifying source files and decoding document text."""

from pathlib import Path

from docfence.errors import IOFailure

DOCUMENT_EXTENSIONS = {".md", ".markdown"}

# Files a chapter may reference by relative path
ASSET_EXTENSIONS = {
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp", ".svg", ".tiff",
    # Documents
    ".pdf",
    # Media
    ".mp3", ".mp4", ".mov", ".wav", ".webm",
    # Sources shipped next to chapters
    ".sol", ".js", ".ts", ".py", ".json", ".yaml", ".yml", ".toml", ".txt", ".csv",
}


def is_document_path(path: str | Path) -> bool:
    """Check if the file extension marks a document to build."""
    return Path(path).suffix.lower() in DOCUMENT_EXTENSIONS


def is_asset_path(path: str | Path) -> bool:
    """Check if the file extension marks an auxiliary asset."""
    return Path(path).suffix.lower() in ASSET_EXTENSIONS


def is_binary_content(content: bytes, sample_size: int = 8192) -> bool:
    """Detect if content is binary by checking for null bytes and non-text chars.

    Args:
        content: Raw file content
        sample_size: Number of bytes to sample from the start

    Returns:
        True if content appears to be binary
    """
    if not content:
        return False

    sample = content[:sample_size]

    if b"\x00" in sample:
        return True

    # Bytes >= 0x80 are allowed: chapters are UTF-8 and often carry
    # typographic punctuation.
    control = set(range(0, 32)) - {9, 10, 12, 13}
    non_text = sum(1 for byte in sample if byte in control)
    return (non_text / len(sample)) > 0.10


def decode_document(path: str, content: bytes) -> str:
    """Decode a document's bytes as UTF-8 text.

    Raises:
        IOFailure: if the content is binary or not valid UTF-8
    """
    if is_binary_content(content):
        raise IOFailure(path, "document looks like binary data")
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise IOFailure(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
    return text.replace("\r\n", "\n").replace("\r", "\n")
