"""Syntax highlighting themes.

A theme is a Pygments ``Style`` subclass. It is either one of the styles that
ship with Pygments, selected by name, or built from a TOML file such as::

    background_color = "#1d1f21"
    highlight_color = "#373b41"

    [styles]
    Comment = "italic #969896"
    Keyword = "bold #b294bb"
    "Name.Function" = "#81a2be"
    String = "#b5bd68"
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from pygments.style import Style
from pygments.styles import get_style_by_name
from pygments.token import STANDARD_TYPES, string_to_tokentype
from pygments.util import ClassNotFound

from .errors import ThemeLoadError

# Used when the configuration names no theme.
DEFAULT_SYNTAX_THEME = "monokai"


def load_theme(value: Optional[str], base_dir: Path) -> type[Style]:
    if not value:
        return get_style_by_name(DEFAULT_SYNTAX_THEME)
    path = base_dir / value
    if path.suffix.lower() == ".toml" or path.is_file():
        return load_theme_file(path)
    try:
        return get_style_by_name(value)
    except ClassNotFound as exc:
        raise ThemeLoadError(path, exc) from exc


def load_theme_file(path: Path) -> type[Style]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ThemeLoadError(path, exc) from exc

    table = data.get("styles", {})
    if not isinstance(table, dict):
        raise ThemeLoadError(path, "[styles] must be a table")

    styles = {}
    for name, definition in table.items():
        token = string_to_tokentype(name)
        if token not in STANDARD_TYPES:
            raise ThemeLoadError(path, f"unknown token type {name!r}")
        if not isinstance(definition, str):
            raise ThemeLoadError(path, f"style for {name!r} must be a string")
        styles[token] = definition

    attrs = {
        "name": path.stem,
        "background_color": str(data.get("background_color", "#ffffff")),
        "styles": styles,
    }
    if "highlight_color" in data:
        attrs["highlight_color"] = str(data["highlight_color"])
    # Pygments rejects malformed colours with ValueError or AssertionError.
    try:
        return type("ThemeFileStyle", (Style,), attrs)
    except (ValueError, AssertionError) as exc:
        raise ThemeLoadError(path, exc) from exc
