"""
Verse segmentation - turns a poem's lines into selectable two-line verses.
"""

from typing import Any, Iterable, Mapping, Union

from versecard.design_templates import script_for_language
from versecard.models import Script, VerseUnit

LINES_PER_VERSE = 2

Content = Union[str, Iterable[Union[str, Mapping[str, Any]]], None]


def extract_lines(content: Content) -> list[str]:
    """
    Flatten stored poem content into non-empty lines.

    Accepts a newline-joined string, a list of strings, or a list of
    stanza items shaped like {"couplet": "line one\\nline two"}.
    """
    if not content:
        return []
    if isinstance(content, str):
        content = [content]

    lines = []
    for item in content:
        if isinstance(item, Mapping):
            item = item.get("couplet") or ""
        for line in str(item).split("\n"):
            line = line.strip()
            if line:
                lines.append(line)
    return lines


def segment(lines: list[str], language: Union[Script, str] = Script.LATIN) -> list[VerseUnit]:
    """Group lines pairwise, in order, into verse units."""
    script = Script(language)
    units = []
    for i in range(0, len(lines), LINES_PER_VERSE):
        chunk = lines[i:i + LINES_PER_VERSE]
        units.append(VerseUnit(text="\n".join(chunk), language=script))
    return units


def segment_poem(poem: Mapping[str, Any], language: str) -> list[VerseUnit]:
    """Segment one language track of a poem record (content keyed by en/hi/ur)."""
    script = script_for_language(language)
    content = (poem.get("content") or {}).get(language)
    return segment(extract_lines(content), script)
