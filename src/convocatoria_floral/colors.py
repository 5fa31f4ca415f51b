"""Color resolution for the exported document and the list-colors command."""

from __future__ import annotations

import webcolors

type RGB = tuple[int, int, int]


def get_all_css3_colors() -> list[str]:
    """All CSS3 color names accepted in the settings palette, alphabetical."""
    return webcolors.names("css3")


def hex_to_rgb(value: str) -> RGB:
    value = value.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid color value '{value}'. Use 6-character hex (e.g. #FFC107).")
    return tuple(int(value[i : i + 2], 16) for i in range(0, 6, 2))  # type: ignore[return-value]


def resolve_color(value: str | RGB) -> RGB:
    """Resolve a CSS3 color name, a hex string or an RGB tuple to an RGB tuple."""
    if isinstance(value, tuple):
        return value
    try:
        rgb = webcolors.name_to_rgb(value.strip().lower())
        return (rgb.red, rgb.green, rgb.blue)
    except ValueError:
        return hex_to_rgb(value)


def luminance(rgb: RGB) -> float:
    r, g, b = rgb
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def text_color_for(background: RGB) -> RGB:
    """Black text on light backgrounds, white on dark ones."""
    return (0, 0, 0) if luminance(background) > 0.5 else (255, 255, 255)


def display_color_terminal(name: str, rgb: RGB) -> str:
    r, g, b = rgb
    bg_color = f"\033[48;2;{r};{g};{b}m"
    text_color = "\033[30m" if luminance(rgb) > 0.5 else "\033[97m"
    reset = "\033[0m"
    return f"{bg_color}{text_color}  {name:20s}  {reset}  RGB({r:3d}, {g:3d}, {b:3d})"


def list_all_colors() -> None:
    """Print every CSS3 color with a terminal swatch."""
    colors = get_all_css3_colors()
    print(f"\nCSS3 colors usable in the settings palette ({len(colors)} total)\n")
    for name in colors:
        print(display_color_terminal(name, resolve_color(name)))
    print("\nExample settings.yaml:")
    print("  palette:")
    print("    month_header: gold")
    print('    border: "#333333"')
    print()
