"""
Web font registration for the charts.

Families are requested by name from the Google Fonts CSS API, the font
files referenced by the returned stylesheet are downloaded (and cached on
disk), then registered with matplotlib's font manager.

Any failure (network, HTTP status, unparsable CSS, unreadable font file)
is non-fatal: the alias falls back to the theme's default face and a
`[fonts]` message is printed.
"""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List

import requests
from matplotlib import font_manager

from common.retry import http_get_with_retries
from env_loader import env_path, load_dotenv_if_present
from .theme import ChartTheme

load_dotenv_if_present()

FONTS_API_URL = os.getenv("FONTS_API_URL", "https://fonts.googleapis.com/css2")
FONTS_CACHE_DIR = env_path("FONTS_CACHE_DIR", Path(".cache") / "fonts")

# Regular + bold; labels of highlighted countries are drawn bold
FONT_WEIGHTS = "wght@400;700"

_FONT_URL_RE = re.compile(r"url\((['\"]?)(https?://[^)'\"]+)\1\)")


class FontUnavailableError(RuntimeError):
    """A web font family could not be fetched or registered."""


def _slug(family: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", family.lower()).strip("_")


def font_css_urls(css: str) -> List[str]:
    """Font file URLs referenced by a Google Fonts stylesheet, in order, deduplicated."""
    return list(dict.fromkeys(m.group(2) for m in _FONT_URL_RE.finditer(css)))


def fetch_font_css(
    family: str,
    *,
    api_url: str = FONTS_API_URL,
    timeout: int = 20,
) -> str:
    resp = http_get_with_retries(
        api_url,
        params={"family": f"{family}:{FONT_WEIGHTS}"},
        timeout=timeout,
    )
    resp.raise_for_status()
    return resp.text


def family_cache_dir(family: str, cache_dir: Path | str = FONTS_CACHE_DIR) -> Path:
    """Directory holding the complete file set of `family`; present only once fully downloaded."""
    return Path(cache_dir) / _slug(family)


def download_font_files(
    family: str,
    *,
    cache_dir: Path | str = FONTS_CACHE_DIR,
    api_url: str = FONTS_API_URL,
    timeout: int = 20,
) -> List[Path]:
    """
    Download (or reuse from cache) every font file of `family`.

    Files are fetched into a scratch directory that is renamed into place
    once the whole set is on disk; an interrupted download leaves no cache.

    Raises FontUnavailableError when the stylesheet references no files.
    """
    target = family_cache_dir(family, cache_dir)
    cached = sorted(target.glob("*.ttf"))
    if cached:
        return cached

    urls = font_css_urls(fetch_font_css(family, api_url=api_url, timeout=timeout))
    if not urls:
        raise FontUnavailableError(f"No font files listed for family {family!r}")

    target.parent.mkdir(parents=True, exist_ok=True)
    scratch = Path(tempfile.mkdtemp(prefix=f".{target.name}_", dir=target.parent))
    try:
        for i, url in enumerate(urls):
            resp = http_get_with_retries(url, timeout=timeout)
            resp.raise_for_status()
            (scratch / f"{target.name}_{i}.ttf").write_bytes(resp.content)
        if target.exists():
            shutil.rmtree(target)
        scratch.rename(target)
    finally:
        if scratch.exists():
            shutil.rmtree(scratch)
    return sorted(target.glob("*.ttf"))


def register_font_files(paths: List[Path]) -> str:
    """Add font files to matplotlib and return the family name they declare."""
    if not paths:
        raise FontUnavailableError("No font files to register")
    for path in paths:
        font_manager.fontManager.addfont(str(path))
    return font_manager.FontProperties(fname=str(paths[0])).get_name()


def register_web_font(
    alias: str,
    family: str,
    *,
    fallback: str,
    cache_dir: Path | str = FONTS_CACHE_DIR,
    api_url: str = FONTS_API_URL,
) -> str:
    """
    Register `family` for `alias`; return the family name to draw with.

    Returns `fallback` instead of raising when the font cannot be obtained.
    """
    try:
        paths = download_font_files(family, cache_dir=cache_dir, api_url=api_url)
        registered = register_font_files(paths)
    except (requests.exceptions.RequestException, OSError, RuntimeError, ValueError) as exc:
        print(f"[fonts] '{family}' unavailable for alias '{alias}' ({exc}); using {fallback}")
        return fallback
    print(f"[fonts] registered '{registered}' as '{alias}' ({len(paths)} files)")
    return registered


def register_theme_fonts(
    theme: ChartTheme,
    *,
    enabled: bool = True,
    cache_dir: Path | str = FONTS_CACHE_DIR,
    api_url: str = FONTS_API_URL,
) -> ChartTheme:
    """
    Return a copy of `theme` whose font aliases point at usable families.

    With `enabled=False` every alias maps straight to the fallback face.
    """
    resolved: Dict[str, str] = {}
    for alias, family in theme.fonts.items():
        if not enabled:
            resolved[alias] = theme.fallback_font
            continue
        resolved[alias] = register_web_font(
            alias,
            family,
            fallback=theme.fallback_font,
            cache_dir=cache_dir,
            api_url=api_url,
        )
    return theme.with_fonts(resolved)


__all__ = [
    "FONTS_API_URL",
    "FONTS_CACHE_DIR",
    "FontUnavailableError",
    "download_font_files",
    "family_cache_dir",
    "fetch_font_css",
    "font_css_urls",
    "register_font_files",
    "register_theme_fonts",
    "register_web_font",
]
