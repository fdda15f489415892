"""
Download naming and share text for rendered verse images.
"""

import re

from versecard.models import RenderedImage

DEFAULT_BASE_NAME = "untitled"
FILE_SUFFIX = "-verse"
EXTENSION = "jpg"

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_RE = re.compile(r'[\\/:*?"<>|\x00-\x08\x0e-\x1f]')  # \t-\r are left for the whitespace pass


def slugify(base_name: str) -> str:
    """Lowercase, whitespace runs to hyphens, filesystem-hostile characters dropped."""
    slug = _UNSAFE_RE.sub("", (base_name or "").strip().lower())
    slug = _WHITESPACE_RE.sub("-", slug).strip("-.")
    return slug or DEFAULT_BASE_NAME


def suggest_file_name(base_name: str, extension: str = EXTENSION) -> str:
    return f"{slugify(base_name)}{FILE_SUFFIX}.{extension}"


def to_download(image: RenderedImage, base_name: str) -> tuple[str, bytes]:
    """Filename + bytes pair for the browser's save-file action."""
    return suggest_file_name(base_name), image.encoded_bytes


def share_text(verse_text: str, author: str) -> str:
    """Clipboard text for sharing a verse without the image."""
    text = f"\"{verse_text.strip()}\""
    if author and author.strip():
        text += f" — {author.strip()}"
    return text
