"""Shared colour palette for the Flet views."""

BG = "#0F172A"
BG_CARD = "#1E293B"
BG_INPUT = "#273449"
BORDER = "#334155"
FG = "#F1F5F9"
FG_DIM = "#94A3B8"
FG_LINK = "#7DD3FC"
ACCENT = "#E11D74"
SUCCESS = "#22C55E"
WARNING = "#F59E0B"
DANGER = "#EF4444"
