#!/usr/bin/env python3
"""
Setup script to download the Noto fonts each script profile needs.
Run this before starting the server.
"""

import os
import urllib.parse
import urllib.request
import zipfile
from pathlib import Path

from versecard.config import get_settings
from versecard.design_templates import SCRIPT_PROFILES

FONT_URL = "https://fonts.google.com/download?family={family}"
FONTS_DIR = Path(get_settings().fonts_dir)


def wanted_files(profile) -> list:
    files = [profile.regular_file]
    if profile.italic_file:
        files.append(profile.italic_file)
    return files


def setup_directories():
    """Create one font directory per family."""
    print("Creating directories...")
    for profile in SCRIPT_PROFILES.values():
        (FONTS_DIR / profile.font_dir).mkdir(parents=True, exist_ok=True)
    print("✓ Directories created")


def download_family(profile):
    """Download a font family archive and extract the faces we use."""
    family_dir = FONTS_DIR / profile.font_dir
    needed = wanted_files(profile)

    if all((family_dir / name).exists() for name in needed):
        print(f"✓ {profile.font_family} already present, skipping download")
        return

    zip_path = family_dir / "family.zip"
    url = FONT_URL.format(family=urllib.parse.quote(profile.font_family))
    print(f"Downloading {profile.font_family}...")
    try:
        urllib.request.urlretrieve(url, zip_path)

        with zipfile.ZipFile(zip_path, 'r') as zip_ref:
            for file in zip_ref.namelist():
                font_name = os.path.basename(file)
                if font_name in needed:
                    (family_dir / font_name).write_bytes(zip_ref.read(file))
                    print(f"  Extracted: {font_name}")

        zip_path.unlink()
    except Exception as e:
        print(f"✗ Failed to download {profile.font_family}: {e}")
        print(f"  Please download it from https://fonts.google.com and place {', '.join(needed)}")
        print(f"  in: {family_dir}")


def check_assets() -> bool:
    """Check every required font face."""
    print("\nAsset Status:")
    missing = []
    for profile in SCRIPT_PROFILES.values():
        for name in wanted_files(profile):
            path = FONTS_DIR / profile.font_dir / name
            if path.exists():
                print(f"✓ {name} found")
            else:
                missing.append(name)
                print(f"✗ {name} MISSING")
    return not missing


def main():
    print("=" * 50)
    print("Verse Card - Asset Setup")
    print("=" * 50)
    print()

    setup_directories()
    for profile in SCRIPT_PROFILES.values():
        download_family(profile)

    all_ready = check_assets()

    print()
    print("=" * 50)
    if all_ready:
        print("✓ All fonts ready! You can start the server.")
    else:
        print("⚠ Some fonts are missing.")
        print("  The server will still work but falls back to Pillow's default face,")
        print("  which cannot draw Devanagari or Urdu.")
    print("=" * 50)


if __name__ == "__main__":
    main()
