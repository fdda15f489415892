"""
Shared fixtures. No fonts, network, or .env are needed: fonts fall back to
Pillow's bundled face, and remote fetches go through httpx.MockTransport.
"""

from io import BytesIO

import httpx
import pytest
from PIL import Image

from versecard.config import Settings


def make_png(width=320, height=240, color=(200, 120, 60)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def char_measure(text, font_size, profile):
    """Monospace stand-in: every character is half an em wide."""
    return len(text) * font_size * 0.5


@pytest.fixture
def settings(tmp_path):
    return Settings(fonts_dir=str(tmp_path / "fonts"), min_font_px=24, jpeg_quality=90)
