"""termframe: terminal frame buffer with differential rendering and an update/render loop."""

from termframe.canvas import (
    HIDE_CURSOR,
    SHOW_CURSOR,
    Canvas,
    copy_buffer,
    move_cursor,
)
from termframe.colors import UnknownStyleKeywordError, keyword
from termframe.config import TuiConfig
from termframe.event_emitter import WILDCARD, EventEmitter, Listener
from termframe.merge import combine
from termframe.signals import ProcessSignals, SignalSource
from termframe.styler import (
    RESET,
    Styler,
    StylerError,
    compile_styler,
    compile_styler_value,
    style_string_from_styler,
    style_text,
)
from termframe.terminal import ProcessTerminal
from termframe.tui import Tick, Tui, create_tui
from termframe.types import (
    Component,
    ConsoleSize,
    FixedSize,
    KeyPress,
    QueriedSize,
    SizeProvider,
    Timing,
    Writer,
    as_size_provider,
)
from termframe.utils import (
    capitalize,
    characters,
    clamp,
    clamp_and_round,
    is_full_width,
    remove_style_codes,
    text_width,
)

__all__ = [
    # Canvas
    "HIDE_CURSOR",
    "SHOW_CURSOR",
    "Canvas",
    "copy_buffer",
    "move_cursor",
    # Keyword table
    "UnknownStyleKeywordError",
    "keyword",
    # Config
    "TuiConfig",
    # Events
    "WILDCARD",
    "EventEmitter",
    "Listener",
    "combine",
    # Signals
    "ProcessSignals",
    "SignalSource",
    # Styler
    "RESET",
    "Styler",
    "StylerError",
    "compile_styler",
    "compile_styler_value",
    "style_string_from_styler",
    "style_text",
    # Terminal
    "ProcessTerminal",
    # Loop
    "Tick",
    "Tui",
    "create_tui",
    # Types
    "Component",
    "ConsoleSize",
    "FixedSize",
    "KeyPress",
    "QueriedSize",
    "SizeProvider",
    "Timing",
    "Writer",
    "as_size_provider",
    # Utilities
    "capitalize",
    "characters",
    "clamp",
    "clamp_and_round",
    "is_full_width",
    "remove_style_codes",
    "text_width",
]
