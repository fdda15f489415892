"""
Text layout tests - wrap budget, centering constants, and script profiles.
"""

import arabic_reshaper
import pytest
from bidi.algorithm import get_display
from PIL import ImageFont

from conftest import char_measure
from versecard.design_templates import get_script_profile
from versecard.errors import EmptyInputError
from versecard.models import Script
from versecard.services.compositor import line_positions, vertical_start
from versecard.services.text_layout import FontBook, layout, pillow_measure, visual_text, wrap_budget

LONG_SENTENCE = (
    "When the evening settles softly over the quiet river and the lamps along "
    "the old stone bridge begin to glow, the poet walks alone and counts the "
    "stars that rise above the sleeping town tonight, one by one"
)

URDU = "دل ہی تو ہے نہ سنگ و خشت درد سے بھر نہ آئے کیوں روئیں گے ہم ہزار بار کوئی ہمیں ستائے کیوں"
HINDI = "मन की बात कहने को आज फिर से शाम ढली है और नदी के किनारे दीप जलते हैं धीरे धीरे"


class _Face:
    def __init__(self, engine):
        self.layout_engine = engine


def test_long_sentence_is_at_least_200_chars():
    assert len(LONG_SENTENCE) >= 200
    assert "\n" not in LONG_SENTENCE


def test_centering_scenario_constants():
    result = layout("Roses are red\nViolets are blue", 1080, Script.LATIN, measure=char_measure, min_font_px=24)

    assert result.lines == ("Roses are red", "Violets are blue")
    assert result.font_size_px == pytest.approx(37.8)
    assert result.line_height == pytest.approx(56.7)
    assert result.direction == "ltr"
    assert wrap_budget(1080) == pytest.approx(864)

    assert vertical_start(1080, len(result.lines), result.line_height) == pytest.approx(511.65)
    assert line_positions(1080, result) == pytest.approx([511.65, 568.35])


def test_wrapping_scenario_respects_budget_and_word_order():
    result = layout(LONG_SENTENCE, 1080, Script.LATIN, measure=char_measure, min_font_px=24)

    assert len(result.lines) > 1
    for line in result.lines:
        assert char_measure(line, result.font_size_px, None) <= 864
    assert " ".join(result.lines).split() == LONG_SENTENCE.split()
    words = set(LONG_SENTENCE.split())
    for line in result.lines:
        assert all(word in words for word in line.split())


def test_wrapping_with_pillow_measurement(tmp_path):
    measure = pillow_measure(FontBook(str(tmp_path)))
    profile = get_script_profile(Script.LATIN)
    result = layout(LONG_SENTENCE, 1080, Script.LATIN, measure=measure, min_font_px=24)

    assert len(result.lines) > 1
    for line in result.lines:
        assert measure(line, result.font_size_px, profile) <= wrap_budget(1080)
    assert " ".join(result.lines).split() == LONG_SENTENCE.split()


@pytest.mark.parametrize("text", ["a", "one two", "x\ny\nz", LONG_SENTENCE, "  padded  "])
def test_non_empty_text_always_yields_lines(text):
    result = layout(text, 1080, Script.LATIN, measure=char_measure, min_font_px=24)
    assert len(result.lines) >= 1


@pytest.mark.parametrize("text", ["", "   ", "\n \n"])
def test_empty_text_raises(text):
    with pytest.raises(EmptyInputError):
        layout(text, 1080, Script.LATIN, measure=char_measure, min_font_px=24)


def test_small_surface_uses_minimum_font_size():
    result = layout("short", 400, Script.LATIN, measure=char_measure, min_font_px=24)
    assert result.font_size_px == 24
    assert result.line_height == pytest.approx(36)


def test_nastaliq_uses_taller_lines_and_rtl():
    urdu = layout("دل ہی تو ہے", 1080, Script.NASTALIQ, measure=char_measure, min_font_px=24)
    latin = layout("dil hi to hai", 1080, Script.LATIN, measure=char_measure, min_font_px=24)

    assert urdu.direction == "rtl"
    assert urdu.line_height > latin.line_height
    assert urdu.line_height == pytest.approx(37.8 * 1.8)


def test_oversized_word_shrinks_font_instead_of_splitting():
    word = "x" * 100
    result = layout(f"tiny {word}", 1080, Script.LATIN, measure=char_measure, min_font_px=24)

    assert word in result.lines
    assert result.font_size_px < 37.8
    for line in result.lines:
        assert char_measure(line, result.font_size_px, None) <= 864


@pytest.mark.parametrize("script, text", [(Script.NASTALIQ, URDU), (Script.DEVANAGARI, HINDI)])
def test_non_latin_wrapping_with_pillow_measurement(tmp_path, script, text):
    measure = pillow_measure(FontBook(str(tmp_path)))
    profile = get_script_profile(script)
    paragraph = f"{text} {text}"
    result = layout(paragraph, 1080, script, measure=measure, min_font_px=24)

    for line in result.lines:
        assert measure(line, result.font_size_px, profile) <= wrap_budget(1080)
    assert " ".join(result.lines).split() == paragraph.split()


def test_rtl_text_is_reordered_for_basic_layout():
    profile = get_script_profile(Script.NASTALIQ)
    shown = visual_text("دل ہی تو ہے", profile, _Face(ImageFont.Layout.BASIC))
    assert shown == get_display(arabic_reshaper.reshape("دل ہی تو ہے"))
    assert shown != "دل ہی تو ہے"


def test_visual_text_leaves_ltr_and_raqm_text_alone():
    urdu = get_script_profile(Script.NASTALIQ)
    hindi = get_script_profile(Script.DEVANAGARI)
    assert visual_text("دل ہی تو ہے", urdu, _Face(ImageFont.Layout.RAQM)) == "دل ہی تو ہے"
    assert visual_text("मन की बात", hindi, _Face(ImageFont.Layout.BASIC)) == "मन की बात"
