"""Geometry and style utilities: width classification, clamping, code stripping.

Pure functions with no state.  Width measurement works on grapheme clusters
so that combining marks stay attached to their base character.
"""

from __future__ import annotations

import math
import re
import unicodedata
from collections.abc import Iterator

import grapheme
import wcwidth as _wcwidth

# SGR sequences: ESC[ <params> m
_STYLE_CODE_RE = re.compile(r"\x1b\[[0-9;]*m")


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def _cluster_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    cp = ord(g[0])

    if len(g) == 1:
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    # Multi-codepoint emoji sequences render two columns wide
    for ch in g:
        o = ord(ch)
        if o in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= o <= 0x1F3FF or 0x1F1E6 <= o <= 0x1F1FF:
            return 2

    if unicodedata.category(g[0]) in ("Mn", "Me", "Cf"):
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


def characters(text: str) -> Iterator[str]:
    """Iterate *text* one user-perceived character at a time."""
    return grapheme.graphemes(text)


def is_full_width(char: str) -> bool:
    """Return ``True`` if *char* occupies two terminal columns.

    *char* must be exactly one character (one grapheme cluster).
    """
    if not char or grapheme.length(char) != 1:
        raise ValueError(
            f"is_full_width() takes exactly one character, got {char!r}"
        )
    return _cluster_width(char) == 2


def text_width(text: str) -> int:
    """Return the width of *text* expressed in terminal columns."""
    total = 0
    for g in characters(remove_style_codes(text)):
        total += _cluster_width(g)
    return total


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def clamp(number: float, lo: float, hi: float) -> float:
    """Clamp *number* between *lo* and *hi*."""
    return min(max(number, lo), hi)


def clamp_and_round(number: float, lo: float, hi: float) -> int:
    """Round *number* half-up, then clamp it between *lo* and *hi*."""
    return int(clamp(math.floor(number + 0.5), lo, hi))


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def capitalize(text: str) -> str:
    """``"sesquipedalian"`` -> ``"Sesquipedalian"``."""
    return text[:1].upper() + text[1:]


def remove_style_codes(text: str) -> str:
    """``"\\x1b[32mHello!\\x1b[0m"`` -> ``"Hello!"``."""
    return _STYLE_CODE_RE.sub("", text)
