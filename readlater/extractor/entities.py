from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

NAMED_ENTITIES: dict[str, str] = {
    "nbsp": "\u00a0",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "mdash": "—",
    "ndash": "–",
    "hellip": "…",
    "ldquo": "“",
    "rdquo": "”",
    "lsquo": "‘",
    "rsquo": "’",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "bull": "•",
    "middot": "·",
    "times": "×",
    "divide": "÷",
    "euro": "€",
    "pound": "£",
    "yen": "¥",
    "cent": "¢",
}

_ENTITY_PATTERN = re.compile(
    r"&(?:#[xX](?P<hex>[0-9A-Fa-f]+)|#(?P<dec>[0-9]+)|(?P<name>[A-Za-z]+));"
)

_MAX_CODE_POINT = 0x10FFFF


def _code_point_to_char(digits: str, base: int) -> str | None:
    digits = digits.lstrip("0") or "0"
    if len(digits) > 8:
        return None
    value = int(digits, base)
    if value > _MAX_CODE_POINT or 0xD800 <= value <= 0xDFFF:
        return None
    return chr(value)


def _replace(match: re.Match) -> str:
    name = match.group("name")
    if name is not None:
        return NAMED_ENTITIES.get(name, match.group(0))

    hex_digits = match.group("hex")
    if hex_digits is not None:
        char = _code_point_to_char(hex_digits, 16)
    else:
        char = _code_point_to_char(match.group("dec"), 10)

    if char is None:
        # Leave only this reference undecoded; the scan carries on.
        logger.debug("Leaving invalid character reference %r", match.group(0))
        return match.group(0)
    return char


def decode_entities(text: str) -> str:
    """Replace named, decimal and hexadecimal character references.

    Every reference is resolved independently in a single left-to-right
    pass, so text produced by a substitution (``&amp;lt;`` -> ``&lt;``) is
    never decoded a second time.  Unknown names and numeric references
    outside the Unicode range are kept verbatim.
    """
    if "&" not in text:
        return text
    return _ENTITY_PATTERN.sub(_replace, text)
