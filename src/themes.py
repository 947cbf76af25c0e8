"""
themes.py
Swappable visual themes and color scales for the chart sequence.

A theme is a seaborn style plus rcParams overrides, or a matplotlib style
sheet. `theme_context()` applies one for the duration of a `with` block and
restores the previous rcParams on exit, so charts can be re-rendered under
several looks in the same session.
"""

from contextlib import contextmanager

import matplotlib.pyplot as plt
import seaborn as sns

BG_GRAY = "#F7F7F7"

_BASE_RC = {
    "axes.labelsize":   11,
    "axes.titlesize":   13,
    "axes.titleweight": "bold",
    "xtick.labelsize":  9,
    "ytick.labelsize":  9,
    "font.family":      "sans-serif",
}

THEMES = {
    # house style: light grey panels, no top/right spines
    "default": {
        "seaborn_style": "ticks",
        "rc": {
            **_BASE_RC,
            "figure.facecolor":  BG_GRAY,
            "axes.facecolor":    BG_GRAY,
            "axes.spines.top":   False,
            "axes.spines.right": False,
        },
    },
    "minimal": {
        "seaborn_style": "white",
        "rc": {
            **_BASE_RC,
            "axes.spines.top":    False,
            "axes.spines.right":  False,
            "axes.spines.left":   False,
            "axes.spines.bottom": False,
            "axes.grid":          True,
            "grid.color":         "#E5E5E5",
        },
    },
    "dark": {
        "seaborn_style": "darkgrid",
        "rc": _BASE_RC,
    },
    "fivethirtyeight": {
        "mpl_style": "fivethirtyeight",
        "rc": {"axes.titleweight": "bold"},
    },
    "ggplot": {
        "mpl_style": "ggplot",
        "rc": {},
    },
}

# name → palette/colormap name understood by seaborn
COLOR_SCALES = {
    "viridis": "viridis",
    "magma":   "magma",
    "inferno": "inferno",
    "plasma":  "plasma",
    "set1":    "Set1",
    "dark2":   "Dark2",
    "ylorrd":  "YlOrRd",
    "reds":    "Reds",
    "mako":    "mako",
}


def _lookup(registry: dict, name: str, kind: str):
    if name not in registry:
        raise ValueError(f"Unknown {kind} {name!r}; choose from {sorted(registry)}")
    return registry[name]


@contextmanager
def theme_context(name: str = "default"):
    theme = _lookup(THEMES, name, "theme")
    with plt.rc_context():
        if "mpl_style" in theme:
            plt.style.use(theme["mpl_style"])
        else:
            sns.set_theme(style=theme["seaborn_style"])
        plt.rcParams.update(theme["rc"])
        yield theme


def get_palette(scale: str, n: int) -> list:
    """`n` discrete colors. Sequential maps are sampled away from the pale end."""
    cmap_name = _lookup(COLOR_SCALES, scale, "color scale")
    if cmap_name in ("YlOrRd", "Reds"):
        return sns.color_palette(cmap_name, n + 1)[1:]
    return sns.color_palette(cmap_name, n)


def get_cmap(scale: str):
    return sns.color_palette(_lookup(COLOR_SCALES, scale, "color scale"), as_cmap=True)
