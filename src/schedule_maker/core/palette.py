# src/schedule_maker/core/palette.py

from __future__ import annotations

from dataclasses import dataclass

from .models import PaletteMode


@dataclass(slots=True, frozen=True)
class ColorOption:
    name: str
    pastel: str
    bold: str
    pastel_text: str
    bold_text: str
    dark_pastel: str
    dark_pastel_text: str
    dark_bold: str
    dark_bold_text: str


@dataclass(slots=True, frozen=True)
class TaskColors:
    background: str
    text: str


COLOR_PALETTE: tuple[ColorOption, ...] = (
    ColorOption("Blue", "#DBEAFE", "#3B82F6", "#1E40AF", "#FFFFFF", "#1E3A5F", "#93C5FD", "#2563EB", "#DBEAFE"),
    ColorOption("Purple", "#EDE9FE", "#8B5CF6", "#5B21B6", "#FFFFFF", "#2E1065", "#C4B5FD", "#7C3AED", "#EDE9FE"),
    ColorOption("Rose", "#FFE4E6", "#F43F5E", "#9F1239", "#FFFFFF", "#4C0519", "#FDA4AF", "#E11D48", "#FFE4E6"),
    ColorOption("Orange", "#FFEDD5", "#F97316", "#9A3412", "#FFFFFF", "#431407", "#FDBA74", "#EA580C", "#FFEDD5"),
    ColorOption("Amber", "#FEF3C7", "#F59E0B", "#92400E", "#FFFFFF", "#451A03", "#FCD34D", "#D97706", "#FEF3C7"),
    ColorOption("Green", "#DCFCE7", "#22C55E", "#166534", "#FFFFFF", "#052E16", "#86EFAC", "#16A34A", "#DCFCE7"),
    ColorOption("Teal", "#CCFBF1", "#14B8A6", "#115E59", "#FFFFFF", "#042F2E", "#5EEAD4", "#0D9488", "#CCFBF1"),
    ColorOption("Cyan", "#CFFAFE", "#06B6D4", "#155E75", "#FFFFFF", "#083344", "#67E8F9", "#0891B2", "#CFFAFE"),
    ColorOption("Indigo", "#E0E7FF", "#6366F1", "#3730A3", "#FFFFFF", "#1E1B4B", "#A5B4FC", "#4F46E5", "#E0E7FF"),
    ColorOption("Pink", "#FCE7F3", "#EC4899", "#9D174D", "#FFFFFF", "#500724", "#F9A8D4", "#DB2777", "#FCE7F3"),
)

DEFAULT_TASK_COLOR = COLOR_PALETTE[0].pastel


def get_color_option(value: str) -> ColorOption | None:
    """Look a task color up by palette name or by either of its light-mode hex values."""
    key = (value or "").strip().lower()
    for opt in COLOR_PALETTE:
        if key in (opt.name.lower(), opt.pastel.lower(), opt.bold.lower()):
            return opt
    return None


def task_colors(color: str, mode: PaletteMode = PaletteMode.PASTEL, dark: bool = False) -> TaskColors:
    """
    Resolve a stored task color into display colors.

    Raw colors that are not in the palette are used as-is with a dark text color.
    """
    opt = get_color_option(color)
    if opt is None:
        return TaskColors(background=color, text="#111827")

    if mode == PaletteMode.BOLD:
        if dark:
            return TaskColors(opt.dark_bold, opt.dark_bold_text)
        return TaskColors(opt.bold, opt.bold_text)
    if dark:
        return TaskColors(opt.dark_pastel, opt.dark_pastel_text)
    return TaskColors(opt.pastel, opt.pastel_text)
