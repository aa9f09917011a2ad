"""Pluggable theming for the printable document.

Themes define colors and fonts. The document builder receives a ``Theme``
instance and passes it to the page renderer and the text measurers, so
what is measured is drawn in the same face and size.

Fonts must be ReportLab standard fonts (Helvetica, Times-Roman, Courier
families) or fonts the caller registered with ``pdfmetrics``.

Usage::

    from openexport.generators.themes import get_theme, list_themes

    theme = get_theme("ocean")
    builder = DocumentBuilder(theme=theme)
"""

from __future__ import annotations

from dataclasses import dataclass, field


RGB = tuple[int, int, int]


# ---------------------------------------------------------------------------
# Theme dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ThemeColors:
    """All color slots used by the page renderer. Values are RGB tuples."""

    # Header band
    header_bg: RGB = (248, 250, 252)
    header_text: RGB = (17, 24, 39)
    subtitle: RGB = (75, 85, 99)
    muted: RGB = (107, 114, 128)
    rule: RGB = (229, 231, 235)

    # Table
    table_header_bg: RGB = (59, 130, 246)
    table_header_border: RGB = (37, 99, 235)
    table_header_text: RGB = (255, 255, 255)
    table_alt_row: RGB = (249, 250, 251)
    table_border: RGB = (229, 231, 235)
    cell_text: RGB = (55, 65, 81)

    # Summary / no-data blocks
    summary_bg: RGB = (239, 246, 255)
    summary_border: RGB = (59, 130, 246)
    summary_text: RGB = (30, 64, 175)

    white: RGB = (255, 255, 255)


@dataclass(frozen=True)
class ThemeFonts:
    """Font faces and sizes (points)."""

    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"

    header_first_size_pt: float = 11
    header_middle_size_pt: float = 10
    header_last_size_pt: float = 9
    header_title_size_pt: float = 14
    subtitle_size_pt: float = 10
    timestamp_size_pt: float = 8
    title_size_pt: float = 13
    table_header_size_pt: float = 8
    cell_size_pt: float = 7
    record_size_pt: float = 9
    chart_title_size_pt: float = 10
    summary_size_pt: float = 12
    footer_size_pt: float = 7


@dataclass(frozen=True)
class Theme:
    """Complete theme definition."""

    name: str = "corporate"
    display_name: str = "Corporate Blue"
    description: str = "Professional blue theme suitable for office reports."
    colors: ThemeColors = field(default_factory=ThemeColors)
    fonts: ThemeFonts = field(default_factory=ThemeFonts)


# ---------------------------------------------------------------------------
# Built-in themes
# ---------------------------------------------------------------------------

CORPORATE_THEME = Theme()

OCEAN_THEME = Theme(
    name="ocean",
    display_name="Ocean Teal",
    description="Calm teal and seafoam theme for a modern, approachable look.",
    colors=ThemeColors(
        header_bg=(236, 246, 245),
        header_text=(0, 77, 64),
        subtitle=(55, 71, 79),
        muted=(120, 144, 156),
        rule=(178, 223, 219),
        table_header_bg=(0, 121, 107),
        table_header_border=(0, 105, 92),
        table_alt_row=(232, 245, 233),
        table_border=(178, 223, 219),
        cell_text=(38, 50, 56),
        summary_bg=(224, 242, 241),
        summary_border=(0, 150, 136),
        summary_text=(0, 77, 64),
    ),
)

SUNSET_THEME = Theme(
    name="sunset",
    display_name="Sunset Warm",
    description="Warm amber, coral and earth tones for a bold, creative look.",
    colors=ThemeColors(
        header_bg=(255, 248, 241),
        header_text=(121, 44, 0),
        subtitle=(109, 76, 65),
        muted=(141, 110, 99),
        rule=(215, 189, 167),
        table_header_bg=(191, 54, 12),
        table_header_border=(150, 40, 8),
        table_alt_row=(255, 243, 224),
        table_border=(215, 189, 167),
        cell_text=(40, 26, 22),
        summary_bg=(255, 236, 210),
        summary_border=(230, 74, 25),
        summary_text=(121, 44, 0),
    ),
    fonts=ThemeFonts(regular="Times-Roman", bold="Times-Bold"),
)

EMERALD_THEME = Theme(
    name="emerald",
    display_name="Emerald Forest",
    description="Rich green tones inspired by nature.",
    colors=ThemeColors(
        header_bg=(241, 248, 233),
        header_text=(27, 94, 32),
        subtitle=(85, 95, 85),
        muted=(108, 117, 125),
        rule=(165, 214, 167),
        table_header_bg=(27, 94, 32),
        table_header_border=(20, 70, 24),
        table_alt_row=(232, 245, 233),
        table_border=(165, 214, 167),
        cell_text=(33, 37, 41),
        summary_bg=(220, 237, 200),
        summary_border=(46, 125, 50),
        summary_text=(27, 94, 32),
    ),
)

MONOCHROME_THEME = Theme(
    name="monochrome",
    display_name="High Contrast",
    description="Pure black and white with zero color, for print-friendliness.",
    colors=ThemeColors(
        header_bg=(255, 255, 255),
        header_text=(0, 0, 0),
        subtitle=(40, 40, 40),
        muted=(100, 100, 100),
        rule=(180, 180, 180),
        table_header_bg=(0, 0, 0),
        table_header_border=(0, 0, 0),
        table_alt_row=(245, 245, 245),
        table_border=(180, 180, 180),
        cell_text=(0, 0, 0),
        summary_bg=(240, 240, 240),
        summary_border=(0, 0, 0),
        summary_text=(0, 0, 0),
    ),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_THEME_REGISTRY: dict[str, Theme] = {
    t.name: t
    for t in [
        CORPORATE_THEME,
        OCEAN_THEME,
        SUNSET_THEME,
        EMERALD_THEME,
        MONOCHROME_THEME,
    ]
}


def get_theme(name: str) -> Theme:
    """Get a theme by name. Raises ``KeyError`` if not found."""
    key = name.lower().strip()
    if key not in _THEME_REGISTRY:
        available = ", ".join(sorted(_THEME_REGISTRY.keys()))
        raise KeyError(f"Unknown theme '{name}'. Available: {available}")
    return _THEME_REGISTRY[key]


def list_themes() -> list[Theme]:
    """Return all registered themes."""
    return list(_THEME_REGISTRY.values())


def register_theme(theme: Theme) -> None:
    """Register a custom theme at runtime."""
    _THEME_REGISTRY[theme.name.lower().strip()] = theme


# Convenience: default theme
DEFAULT_THEME = CORPORATE_THEME
