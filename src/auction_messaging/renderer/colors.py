"""Colour code translation for chat text."""

from __future__ import annotations

import re

from auction_messaging.config import COLOR_CODE_CHAR

COLOR_CODES = "0123456789abcdef"
FORMAT_CODES = "klmno"
RESET_CODE = "r"
ALL_CODES = COLOR_CODES + FORMAT_CODES + RESET_CODE

_STRIP_PATTERN = re.compile(f"{COLOR_CODE_CHAR}[{ALL_CODES}]", re.IGNORECASE)


def translate_color_codes(text: str, alt_char: str = "&") -> str:
    """Translate alternate colour codes (``&a``) into section-sign codes (``§a``).

    Only an ``alt_char`` directly followed by a known code is translated;
    the code is lower-cased. Everything else is left untouched.
    """
    chars = list(text)
    for i in range(len(chars) - 1):
        if chars[i] == alt_char and chars[i + 1].lower() in ALL_CODES:
            chars[i] = COLOR_CODE_CHAR
            chars[i + 1] = chars[i + 1].lower()
    return "".join(chars)


def strip_color_codes(text: str) -> str:
    """Remove all section-sign colour and format codes from text."""
    return _STRIP_PATTERN.sub("", text)
