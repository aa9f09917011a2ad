"""Text measurement and greedy line wrapping.

Widths come from ReportLab's font metrics, so what is measured here is
exactly what :class:`~reportlab.pdfgen.canvas.Canvas` draws later.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from reportlab.pdfbase.pdfmetrics import stringWidth

# (spaces before the word, word)
_WORD_RE = re.compile(r"( *)([^ ]+)")


@dataclass(frozen=True)
class WrappedText:
    """Result of wrapping one string: its lines and their measured widths."""

    lines: tuple[str, ...]
    widths: tuple[float, ...]

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def max_width(self) -> float:
        return max(self.widths, default=0.0)


class TextMeasurer:
    """Measures and wraps text for one font face and size."""

    def __init__(self, font_name: str = "Helvetica", font_size: float = 7.0) -> None:
        self.font_name = font_name
        self.font_size = font_size

    def with_font(self, font_name: str, font_size: float) -> TextMeasurer:
        return TextMeasurer(font_name, font_size)

    def width(self, text: str) -> float:
        return stringWidth(text, self.font_name, self.font_size)

    def wrap(self, text: str, max_width: float) -> WrappedText:
        """Greedy word wrap of *text* into lines no wider than *max_width*.

        Explicit newlines always break. A single word wider than
        *max_width* is kept whole on its own line (it overflows; words are
        never hyphenated). Lines break only at spaces; runs of spaces between
        words on the same line are kept as written, the run at a break is
        dropped. Empty text yields one empty line.
        """
        lines: list[str] = []
        for paragraph in text.split("\n"):
            lines.extend(self._wrap_paragraph(paragraph, max_width))
        return WrappedText(
            lines=tuple(lines),
            widths=tuple(self.width(line) for line in lines),
        )

    def _wrap_paragraph(self, paragraph: str, max_width: float) -> list[str]:
        pairs = _WORD_RE.findall(paragraph)
        if not pairs:
            return [""]
        lines: list[str] = []
        gap, word = pairs[0]
        current = gap + word
        for gap, word in pairs[1:]:
            candidate = current + gap + word
            if self.width(candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)
        return lines
