"""
API routes for the verse image generator.
"""

from functools import lru_cache
from typing import List, Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from versecard.config import get_settings
from versecard.design_templates import list_scripts, list_themes, script_for_language
from versecard.errors import EmptyInputError, ImageDecodeError, VerseImageError
from versecard.models import Procedural, RemoteUrl, RenderRequest, UserBytes, VerseUnit
from versecard.services.compositor import VerseCompositor
from versecard.services.export import to_download
from versecard.services.segmenter import extract_lines, segment

router = APIRouter()
settings = get_settings()


# Request/Response Models

class SegmentRequest(BaseModel):
    language: str = "en"
    lines: Optional[List[str]] = None  # Flat line array
    content: Optional[Union[str, List[Union[str, dict]]]] = None  # Stored stanza items


class VerseResponse(BaseModel):
    index: int
    text: str
    language: str


class SegmentResponse(BaseModel):
    verses: List[VerseResponse]


@lru_cache()
def get_compositor() -> VerseCompositor:
    return VerseCompositor()


def error_status(error: VerseImageError) -> int:
    if isinstance(error, EmptyInputError):
        return 422
    if isinstance(error, ImageDecodeError):
        return 400
    return 500


@router.get("/scripts")
def get_scripts():
    """List supported languages and their script profiles."""
    return list_scripts()


@router.get("/backgrounds")
def get_backgrounds():
    """List procedural background themes."""
    return list_themes()


@router.post("/verses/segment", response_model=SegmentResponse)
def segment_verses(request: SegmentRequest):
    """Split a poem's lines into selectable two-line verses."""
    try:
        script = script_for_language(request.language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    lines = extract_lines(request.lines if request.lines is not None else request.content)
    units = segment(lines, script)
    return SegmentResponse(
        verses=[
            VerseResponse(index=i, text=unit.text, language=request.language)
            for i, unit in enumerate(units)
        ]
    )


@router.post("/verses/render")
async def render_verse(
    text: str = Form(""),
    language: str = Form("en"),
    attribution: str = Form(""),
    title: str = Form(""),
    theme: Optional[str] = Form(None),
    background_url: Optional[str] = Form(None),
    background_file: Optional[UploadFile] = File(None),
    compositor: VerseCompositor = Depends(get_compositor),
):
    """
    Render a verse image and return it as a download.

    Background priority: uploaded file, then URL, then procedural theme.
    """
    try:
        script = script_for_language(language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if background_file is not None:
        background = UserBytes(await background_file.read())
    elif background_url:
        background = RemoteUrl(background_url)
    else:
        background = Procedural(seed=theme or None, width=settings.canvas_size, height=settings.canvas_size)

    request = RenderRequest(
        verse=VerseUnit(text=text, language=script),
        background=background,
        attribution=attribution,
        title=title or None,
    )
    result = await compositor.compose(request)
    if not result.ok:
        raise HTTPException(status_code=error_status(result.error), detail=result.error.user_message)

    filename, data = to_download(result.image, title)
    return Response(
        content=data,
        media_type=result.image.mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
