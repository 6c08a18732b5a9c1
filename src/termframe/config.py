"""Engine configuration, with overrides from ``TERMFRAME_*`` variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class TuiConfig:
    """Settings for the canvas and the update/render loop."""

    # Milliseconds between rendered frames
    refresh_rate: float = 16
    # Milliseconds between update ticks; None follows refresh_rate
    update_rate: float | None = None
    smart_render: bool = True
    filler: str = " "
    # File every terminal write is mirrored to, for debugging
    write_log: str = ""

    @classmethod
    def from_env(cls) -> TuiConfig:
        config = cls()

        refresh_rate = _float_env("TERMFRAME_REFRESH_RATE")
        if refresh_rate is not None:
            config.refresh_rate = refresh_rate

        config.update_rate = _float_env("TERMFRAME_UPDATE_RATE")

        smart = os.environ.get("TERMFRAME_SMART_RENDER")
        if smart is not None:
            config.smart_render = smart != "0"

        config.filler = os.environ.get("TERMFRAME_FILLER", config.filler)
        config.write_log = os.environ.get("TERMFRAME_WRITE_LOG", "")
        return config


def _float_env(name: str) -> float | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
