"""Theme, color definitions and QSS stylesheet."""

from __future__ import annotations

# ── Color palette: purple gradient accents ──

COLORS = {
    "primary": "#764BA2",
    "primary_light": "#F3ECFA",
    "accent": "#F093FB",
    "accent_blue": "#667EEA",
    "bg": "#FFFFFF",
    "panel_bg": "#FAF8FC",
    "border": "#E4DDEB",
    "text": "#1A1A1A",
    "text_muted": "#8A8494",
    "success": "#27AE60",
    "success_bg": "#E9F7EF",
    "error": "#E74C3C",
    "error_bg": "#FDEDEC",
    "warning": "#F39C12",
}

FONT_FAMILY = "-apple-system, 'SF Pro Text', 'Helvetica Neue', 'Segoe UI', Roboto, sans-serif"


def build_stylesheet() -> str:
    """Build the application-wide QSS stylesheet."""
    c = COLORS
    return f"""
/* ── Global ── */
QWidget {{
    font-family: {FONT_FAMILY};
    font-size: 13px;
    color: {c["text"]};
    background-color: {c["bg"]};
}}

QMainWindow {{
    background-color: {c["bg"]};
}}

QStatusBar {{
    background-color: {c["panel_bg"]};
    border-top: 1px solid {c["border"]};
    font-size: 12px;
    color: {c["text_muted"]};
    padding: 4px 12px;
}}

/* ── Inputs ── */
QLineEdit, QPlainTextEdit {{
    border: 1px solid {c["border"]};
    border-radius: 8px;
    padding: 8px 10px;
    background-color: {c["panel_bg"]};
}}

QLineEdit:focus, QPlainTextEdit:focus {{
    border: 1px solid {c["primary"]};
}}

/* ── Buttons ── */
QPushButton {{
    border: 1px solid {c["border"]};
    border-radius: 10px;
    padding: 8px 16px;
    background-color: {c["bg"]};
}}

QPushButton:hover {{
    background-color: {c["primary_light"]};
}}

QPushButton:disabled {{
    color: {c["text_muted"]};
}}

QPushButton#primary {{
    color: #FFFFFF;
    font-weight: 600;
    border: none;
    background-color: qlineargradient(x1:0, y1:0, x2:1, y2:0,
        stop:0 {c["accent"]}, stop:1 {c["primary"]});
}}

QPushButton#link {{
    border: none;
    color: {c["primary"]};
    background: transparent;
}}

QLabel#title {{
    font-size: 32px;
    font-weight: 800;
    color: {c["primary"]};
}}

QLabel#subtitle {{
    color: {c["text_muted"]};
}}

QListWidget {{
    border: 1px solid {c["border"]};
    border-radius: 10px;
    background-color: {c["panel_bg"]};
}}
"""


def banner_style(kind: str) -> str:
    """Inline style for success/error banners."""
    if kind == "error":
        fg, bg = COLORS["error"], COLORS["error_bg"]
    elif kind == "warning":
        fg, bg = COLORS["warning"], COLORS["panel_bg"]
    else:
        fg, bg = COLORS["success"], COLORS["success_bg"]
    return (
        f"color: {fg}; background-color: {bg}; border: 1px solid {fg}; "
        "border-radius: 10px; padding: 10px; font-weight: 500;"
    )
