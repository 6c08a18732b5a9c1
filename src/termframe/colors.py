"""Default keyword table: symbolic style names to SGR escape codes.

Names follow the camel-case convention ``red`` / ``bgRed`` /
``brightRed`` / ``bgBrightRed``.  Any callable with the signature of
:func:`keyword` can be used in its place.
"""

from __future__ import annotations

_COLORS = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
}

_ATTRIBUTES = {
    "reset": 0,
    "bold": 1,
    "dim": 2,
    "italic": 3,
    "underline": 4,
    "blink": 5,
    "inverse": 7,
    "hidden": 8,
    "strikethrough": 9,
    "doubleUnderline": 21,
    "overline": 53,
}


def _build_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for name, code in _COLORS.items():
        cap = name.capitalize()
        table[name] = f"\x1b[{code}m"
        table[f"bg{cap}"] = f"\x1b[{code + 10}m"
        table[f"bright{cap}"] = f"\x1b[{code + 60}m"
        table[f"bgBright{cap}"] = f"\x1b[{code + 70}m"
    table["gray"] = table["grey"] = table["brightBlack"]
    table["bgGray"] = table["bgGrey"] = table["bgBrightBlack"]
    table["default"] = "\x1b[39m"
    table["bgDefault"] = "\x1b[49m"
    for name, code in _ATTRIBUTES.items():
        table[name] = f"\x1b[{code}m"
    return table


KEYWORDS: dict[str, str] = _build_table()


class UnknownStyleKeywordError(KeyError):
    """Raised when a style keyword is not in the table."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown style keyword: {self.name!r}"


def keyword(name: str) -> str:
    """Resolve a style keyword such as ``"bgBlue"`` to its escape code."""
    try:
        return KEYWORDS[name]
    except KeyError:
        raise UnknownStyleKeywordError(name) from None
