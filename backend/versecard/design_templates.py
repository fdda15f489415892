"""
Static design tables for verse images.

Two independent lookups:
1. SCRIPT PROFILES - font family, direction and line spacing per writing system
2. BACKGROUND THEMES - gradient palettes for the procedural background
"""

import hashlib

from versecard.models import Script, ScriptProfile

# Default output size
WIDTH = 1080
HEIGHT = 1080


# ============================================
# SCRIPT PROFILES
# ============================================
SCRIPT_PROFILES = {
    Script.LATIN: ScriptProfile(
        script=Script.LATIN,
        font_family="Noto Serif",
        font_dir="NotoSerif",
        regular_file="NotoSerif-Regular.ttf",
        italic_file="NotoSerif-Italic.ttf",
        direction="ltr",
        line_height_multiplier=1.5,
        language_tag="en",
    ),
    Script.DEVANAGARI: ScriptProfile(
        script=Script.DEVANAGARI,
        font_family="Noto Sans Devanagari",
        font_dir="NotoSansDevanagari",
        regular_file="NotoSansDevanagari-Regular.ttf",
        italic_file=None,
        direction="ltr",
        line_height_multiplier=1.5,
        language_tag="hi",
    ),
    Script.NASTALIQ: ScriptProfile(
        script=Script.NASTALIQ,
        font_family="Noto Nastaliq Urdu",
        font_dir="NotoNastaliqUrdu",
        regular_file="NotoNastaliqUrdu-Regular.ttf",
        italic_file=None,
        direction="rtl",
        line_height_multiplier=1.8,  # Tall ascenders/descenders
        language_tag="ur",
    ),
}

# Platform language codes
LANGUAGE_SCRIPTS = {
    "en": Script.LATIN,
    "hi": Script.DEVANAGARI,
    "ur": Script.NASTALIQ,
}


# ============================================
# BACKGROUND THEMES
# ============================================
# Gradient stops are (position 0..1, RGB). Radial gradients run from the
# centre out to half the width; linear ones run top to bottom.
BACKGROUND_THEMES = {
    "starry": {
        "id": "starry",
        "name": "Starry Night",
        "gradient": "radial",
        "stops": [(0.0, (26, 26, 26)), (0.7, (13, 13, 13)), (1.0, (0, 0, 0))],
        "has_sky": True,
    },
    "sunset": {
        "id": "sunset",
        "name": "Sunset",
        "gradient": "linear",
        "stops": [(0.0, (45, 27, 27)), (0.5, (26, 15, 15)), (1.0, (0, 0, 0))],
        "has_sky": False,
    },
    "ocean": {
        "id": "ocean",
        "name": "Ocean",
        "gradient": "linear",
        "stops": [(0.0, (26, 29, 46)), (0.5, (15, 17, 26)), (1.0, (0, 0, 0))],
        "has_sky": False,
    },
    "forest": {
        "id": "forest",
        "name": "Forest",
        "gradient": "linear",
        "stops": [(0.0, (26, 46, 26)), (0.5, (15, 26, 15)), (1.0, (0, 0, 0))],
        "has_sky": False,
    },
    "gradient": {
        "id": "gradient",
        "name": "Gradient",
        "gradient": "radial",
        "stops": [(0.0, (46, 26, 46)), (0.7, (26, 15, 26)), (1.0, (0, 0, 0))],
        "has_sky": False,
    },
}


def get_script_profile(script: Script) -> ScriptProfile:
    """Get the profile for a script."""
    return SCRIPT_PROFILES[Script(script)]


def script_for_language(code: str) -> Script:
    """Map a platform language code (en/hi/ur) to its script."""
    try:
        return LANGUAGE_SCRIPTS[code.lower()]
    except KeyError:
        raise ValueError(f"Unsupported language: {code!r}") from None


def get_theme(seed: str) -> dict:
    """
    Pick a background theme from a procedural seed.

    A theme id gives that theme; any other string maps to a theme through a
    stable digest so the same seed always draws the same scene. Callers
    substitute the configured default theme when there is no seed.
    """
    if seed in BACKGROUND_THEMES:
        return BACKGROUND_THEMES[seed]
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    theme_ids = sorted(BACKGROUND_THEMES)
    return BACKGROUND_THEMES[theme_ids[digest[0] % len(theme_ids)]]


def list_scripts():
    """List language codes with their script profiles."""
    return [
        {
            "language": code,
            "script": script.value,
            "font_family": SCRIPT_PROFILES[script].font_family,
            "direction": SCRIPT_PROFILES[script].direction,
        }
        for code, script in LANGUAGE_SCRIPTS.items()
    ]


def list_themes():
    """List all procedural background themes."""
    return [{"id": t["id"], "name": t["name"]} for t in BACKGROUND_THEMES.values()]
