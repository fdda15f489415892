"""
Background resolution for verse images.

Three sources:
- Remote URL fetched with httpx
- Raw bytes from a user upload
- A procedural night-sky scene, drawn deterministically so the feature
  works with no network and no upload
"""

import asyncio
import logging
from io import BytesIO
from typing import Optional

import httpx
from PIL import Image, ImageDraw, ImageOps

from versecard.config import Settings, get_settings
from versecard.design_templates import get_theme
from versecard.errors import ImageDecodeError, RenderContextError
from versecard.models import BackgroundSpec, PixelSurface, Procedural, RemoteUrl, UserBytes

logger = logging.getLogger(__name__)

# Constellation - (x, y, radius) relative to surface width/height, plus alpha
STARS = [
    (0.10, 0.09, 0.004, 150),
    (0.88, 0.30, 0.005, 180),
    (0.14, 0.86, 0.004, 130),
    (0.58, 0.08, 0.003, 160),
    (0.06, 0.42, 0.003, 120),
    (0.93, 0.71, 0.004, 140),
]

# Moon - centre and radius relative to width
MOON_CENTER = (0.80, 0.17)
MOON_RADIUS = 0.045
MOON_COLOR = (245, 240, 225, 205)

# Ornamental corners, fixed pixel sizes
CORNER_INSET = 30
CORNER_ARM = 60
CORNER_STROKE = 2
CORNER_COLOR = (255, 255, 255, 77)


class BackgroundGenerator:
    """Draws the procedural background scenes."""

    @staticmethod
    def _gradient_lut(stops: list) -> list:
        """Build a 768-entry RGB lookup table from (position, color) stops."""
        channels = [[], [], []]
        for v in range(256):
            t = v / 255
            for (p0, c0), (p1, c1) in zip(stops, stops[1:]):
                if t <= p1:
                    f = 0.0 if p1 == p0 else (t - p0) / (p1 - p0)
                    break
            else:
                (p0, c0), (p1, c1), f = stops[-2], stops[-1], 1.0
            for ch in range(3):
                channels[ch].append(int(round(c0[ch] + (c1[ch] - c0[ch]) * f)))
        return channels[0] + channels[1] + channels[2]

    @staticmethod
    def create_gradient(width: int, height: int, theme: dict) -> Image.Image:
        """Create the gradient base - radial from centre or linear top to bottom."""
        if theme["gradient"] == "radial":
            # 256px source spans the full diameter; radius = half the width
            disc = Image.radial_gradient("L").resize((width, width), Image.Resampling.BICUBIC)
            ramp = Image.new("L", (width, height), 255)
            ramp.paste(disc, (0, (height - width) // 2))
        else:
            ramp = Image.linear_gradient("L").resize((width, height), Image.Resampling.BICUBIC)
        lut = BackgroundGenerator._gradient_lut(theme["stops"])
        return ramp.convert("RGB").point(lut).convert("RGBA")

    @staticmethod
    def add_stars(layer: Image.Image):
        """Add the fixed constellation."""
        width, height = layer.size
        draw = ImageDraw.Draw(layer)
        for rx, ry, rr, alpha in STARS:
            x, y = rx * width, ry * height
            r = max(1.0, rr * width)
            draw.ellipse([(x - r, y - r), (x + r, y + r)], fill=(255, 255, 255, alpha))

    @staticmethod
    def add_moon(layer: Image.Image):
        width, height = layer.size
        draw = ImageDraw.Draw(layer)
        x, y = MOON_CENTER[0] * width, MOON_CENTER[1] * height
        r = MOON_RADIUS * width
        draw.ellipse([(x - r, y - r), (x + r, y + r)], fill=MOON_COLOR)

    @staticmethod
    def add_corners(layer: Image.Image):
        """Add four L-shaped brackets inset from the corners."""
        width, height = layer.size
        draw = ImageDraw.Draw(layer)
        left, top = CORNER_INSET, CORNER_INSET
        right, bottom = width - CORNER_INSET, height - CORNER_INSET
        brackets = [
            [(left, top + CORNER_ARM), (left, top), (left + CORNER_ARM, top)],
            [(right - CORNER_ARM, top), (right, top), (right, top + CORNER_ARM)],
            [(left, bottom - CORNER_ARM), (left, bottom), (left + CORNER_ARM, bottom)],
            [(right - CORNER_ARM, bottom), (right, bottom), (right, bottom - CORNER_ARM)],
        ]
        for points in brackets:
            draw.line(points, fill=CORNER_COLOR, width=CORNER_STROKE, joint="curve")

    @classmethod
    def create_background(cls, width: int, height: int, theme: dict) -> Image.Image:
        """Create the complete scene for a theme."""
        if width <= 0 or height <= 0:
            raise RenderContextError(f"Invalid background size: {width}x{height}")

        img = cls.create_gradient(width, height, theme)

        # Decorations go on their own layer so their alpha blends over the gradient
        layer = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        if theme.get("has_sky"):
            cls.add_stars(layer)
            cls.add_moon(layer)
        cls.add_corners(layer)

        return Image.alpha_composite(img, layer).convert("RGB")


def _too_large(size: int, max_bytes: int) -> ImageDecodeError:
    return ImageDecodeError(
        f"Background image is {size} bytes, limit is {max_bytes}",
        user_message="The background image is too large.",
    )


def decode_image(data: bytes, max_bytes: Optional[int] = None) -> Image.Image:
    """Decode image bytes to an RGB Pillow image."""
    if not data:
        raise ImageDecodeError("Background image is empty")
    if max_bytes and len(data) > max_bytes:
        raise _too_large(len(data), max_bytes)
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            return img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Could not decode background image: {e}") from e


class BackgroundResolver:
    """Turns a BackgroundSpec into pixels."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    async def resolve(self, spec: BackgroundSpec) -> PixelSurface:
        if isinstance(spec, Procedural):
            return self.generate(spec)
        if isinstance(spec, UserBytes):
            data = spec.data
        elif isinstance(spec, RemoteUrl):
            data = await self.fetch(spec.url)
        else:
            raise TypeError(f"Unknown background spec: {spec!r}")

        img = await asyncio.to_thread(decode_image, data, self.settings.max_background_bytes)
        logger.info(f"Decoded background {img.width}x{img.height}")
        return PixelSurface.from_image(img)

    def generate(self, spec: Procedural) -> PixelSurface:
        """Render the procedural scene (synchronous, deterministic)."""
        seed = spec.seed if spec.seed is not None else self.settings.default_theme
        theme = get_theme(seed)
        img = BackgroundGenerator.create_background(spec.width, spec.height, theme)
        return PixelSurface.from_image(img)

    async def fetch(self, url: str) -> bytes:
        """Download a remote background. No timeout unless one is configured."""
        try:
            if self.client is not None:
                return await self._download(self.client, url)
            async with httpx.AsyncClient(timeout=self.settings.fetch_timeout_seconds) as client:
                return await self._download(client, url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Background fetch failed for {url}: {e}")
            raise ImageDecodeError(f"Could not fetch background {url}: {e}") from e

    async def _download(self, client: httpx.AsyncClient, url: str) -> bytes:
        """Stream the body, stopping as soon as it passes the size limit."""
        max_bytes = self.settings.max_background_bytes
        async with client.stream("GET", url, follow_redirects=True) as response:
            response.raise_for_status()

            declared = response.headers.get("content-length", "")
            if max_bytes and declared.isdigit() and int(declared) > max_bytes:
                raise _too_large(int(declared), max_bytes)

            data = bytearray()
            async for chunk in response.aiter_bytes():
                data.extend(chunk)
                if max_bytes and len(data) > max_bytes:
                    logger.warning(f"Background {url} passed {max_bytes} bytes, aborting download")
                    raise _too_large(len(data), max_bytes)
        return bytes(data)
