"""Style compilation: symbolic style descriptors to raw escape codes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, TypedDict

from termframe.colors import keyword
from termframe.utils import capitalize

__all__ = [
    "RESET",
    "Styler",
    "StylerError",
    "compile_styler",
    "compile_styler_value",
    "style_string_from_styler",
    "style_text",
]

RESET = "\x1b[0m"

_ESC = "\x1b"

KeywordTable = Callable[[str], str]


class Styler(TypedDict, total=False):
    """Describes how drawn characters look.

    Each value is either a keyword (``"red"``, ``"bold"``) or an escape
    code that has already been resolved.
    """

    foreground: str
    background: str
    attributes: list[str]


class StylerError(ValueError):
    """A styler field holds something that is neither a keyword nor a code."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(
            f"cannot compile styler field {field!r}: {value!r} "
            "is not a style keyword or escape code"
        )
        self.field = field
        self.value = value


def style_text(text: str, style: str) -> str:
    """Wrap *text* in *style* and a reset.

    ``("Hi", "\\x1b[32m")`` -> ``"\\x1b[32mHi\\x1b[0m"``
    """
    return f"{style}{text}{RESET}"


def compile_styler_value(
    value: object, field: str, table: KeywordTable = keyword
) -> str:
    """Compile one styler leaf found under *field* to an escape code.

    Keywords under a background field get a ``bg`` prefix unless they
    already carry one, so ``{"background": "red"}`` resolves ``bgRed``.
    """
    if not isinstance(value, str):
        raise StylerError(field, value)
    if _ESC in value:
        return value
    if "background" in field and "bg" not in value:
        value = f"bg{capitalize(value)}"
    return table(value)


def compile_styler(
    styler: Mapping[str, Any], table: KeywordTable = keyword
) -> dict[str, Any]:
    """Compile every field of *styler*, recursing into nested stylers.

    Numeric fields are not style data and are left out of the result.
    """
    compiled: dict[str, Any] = {}

    for field, value in styler.items():
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            continue

        if isinstance(value, (list, tuple)):
            compiled[field] = [
                compile_styler_value(v, field, table) for v in value
            ]
        elif isinstance(value, Mapping):
            compiled[field] = compile_styler(value, table)
        else:
            compiled[field] = compile_styler_value(value, field, table)

    return compiled


def style_string_from_styler(text: str, styler: Mapping[str, Any]) -> str:
    """Apply a compiled *styler* to *text*."""
    style = ""
    if styler.get("foreground"):
        style += styler["foreground"]
    if styler.get("background"):
        style += styler["background"]
    for attribute in styler.get("attributes") or ():
        style += attribute
    return style_text(text, style)
