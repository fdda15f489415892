"""
Value types passed through a single render call.

Nothing here is persisted or shared between renders: a request comes in,
a RenderedImage (or an error) goes out.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Union

from PIL import Image

from versecard.errors import VerseImageError


class Script(str, Enum):
    LATIN = "latin"
    DEVANAGARI = "devanagari"
    NASTALIQ = "nastaliq"


Direction = Literal["ltr", "rtl"]


@dataclass(frozen=True)
class ScriptProfile:
    """Font family + direction + line-height bundle for one writing system."""
    script: Script
    font_family: str
    font_dir: str
    regular_file: str
    italic_file: Optional[str]
    direction: Direction
    line_height_multiplier: float
    language_tag: str  # BCP 47, handed to libraqm when available


@dataclass(frozen=True)
class VerseUnit:
    text: str
    language: Script

    @property
    def couplet(self) -> tuple[str, str]:
        """Both lines of the unit; the second is empty for a trailing single line."""
        first, _, second = self.text.partition("\n")
        return first, second


# Background variants

@dataclass(frozen=True)
class RemoteUrl:
    url: str


@dataclass(frozen=True)
class UserBytes:
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class Procedural:
    seed: Optional[str] = None
    width: int = 1080
    height: int = 1080


BackgroundSpec = Union[RemoteUrl, UserBytes, Procedural]


@dataclass
class PixelSurface:
    width: int
    height: int
    pixels: Image.Image = field(repr=False)

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelSurface":
        return cls(width=img.width, height=img.height, pixels=img)


@dataclass(frozen=True)
class LayoutResult:
    lines: tuple[str, ...]
    line_height: float
    font_size_px: float
    direction: Direction


@dataclass(frozen=True)
class RenderRequest:
    verse: VerseUnit
    background: BackgroundSpec
    attribution: str
    title: Optional[str] = None


@dataclass
class RenderedImage:
    surface: PixelSurface
    encoded_bytes: bytes = field(repr=False)
    suggested_file_name: str
    mime_type: str = "image/jpeg"


@dataclass
class RenderResult:
    """Outcome of a compose call: exactly one of image / error is set."""
    image: Optional[RenderedImage] = None
    error: Optional[VerseImageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.image is not None

    def unwrap(self) -> RenderedImage:
        if self.error is not None:
            raise self.error
        return self.image
