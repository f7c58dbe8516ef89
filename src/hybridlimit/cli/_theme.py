"""Centralized color palette, Rich Theme, and shared constants."""

from __future__ import annotations

from dataclasses import dataclass

from rich.theme import Theme


@dataclass(frozen=True)
class ColorPalette:
    """Immutable color palette for the hybridlimit CLI.

    Designed for dark terminal backgrounds.
    """

    primary: str = "#7AA2F7"
    accent: str = "#89B4FA"
    success: str = "#A6E3A1"
    warning: str = "#F9E2AF"
    error: str = "#F38BA8"
    info: str = "#89DCEB"
    text: str = "#CDD6F4"
    text_muted: str = "#9399B2"
    border: str = "#585B70"


PALETTE = ColorPalette()

HL_THEME = Theme(
    {
        "hl.header": f"bold {PALETTE.primary}",
        "hl.label": f"bold {PALETTE.text}",
        "hl.muted": f"{PALETTE.text_muted}",
        "hl.pass": f"bold {PALETTE.success}",
        "hl.fail": f"bold {PALETTE.error}",
        "hl.warn": f"bold {PALETTE.warning}",
        "hl.info": f"{PALETTE.info}",
        "hl.accent": f"bold {PALETTE.accent}",
        "hl.border": f"{PALETTE.border}",
        "hl.border.success": f"{PALETTE.success}",
        "hl.border.error": f"{PALETTE.error}",
    }
)

STATUS_ICONS: dict[str, str] = {
    "pass": "✓",
    "fail": "✗",
    "info": "•",
}

PANEL_PADDING: tuple[int, int] = (1, 2)
