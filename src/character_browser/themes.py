"""Color palette used for rendered markup and CSS."""

from __future__ import annotations

# Monokai-inspired palette
DEFAULT_THEME = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "border": "#75715e",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "yellow": "#e6db74",
    "orange": "#fd971f",
    "pink": "#f92672",
    "purple": "#ae81ff",
    "highlight": "#49483e",
}

THEME_COLORS = DEFAULT_THEME.copy()

# Status badge colors keyed by the endpoint's status values
STATUS_COLOR_KEYS = {
    "Alive": "green",
    "Dead": "pink",
    "unknown": "muted",
}


def get_status_color(status: str) -> str:
    """Return the badge color for a character status."""
    return THEME_COLORS[STATUS_COLOR_KEYS.get(status, "muted")]


__all__ = [
    "DEFAULT_THEME",
    "STATUS_COLOR_KEYS",
    "THEME_COLORS",
    "get_status_color",
]
