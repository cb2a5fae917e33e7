"""
Text layout.

Wraps text shapes into lines and computes their anchored bounding box.
Glyph measurement is delegated to a TextMeasurer, which callers pass in
explicitly; the Qt implementation lives in views.text_measurer.
"""

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Protocol, Tuple

from models import BoundingBox, FontSlant, FontWeight, Point, TextAnchor, TextJustify, TextShape


# Extra space between lines, as a fraction of the font size
LEADING_FACTOR = 0.2

_CENTERED_X = (TextAnchor.N, TextAnchor.S, TextAnchor.CENTER)
_RIGHT_X = (TextAnchor.NE, TextAnchor.E, TextAnchor.SE)
_CENTERED_Y = (TextAnchor.W, TextAnchor.E, TextAnchor.CENTER)
_BOTTOM_Y = (TextAnchor.SW, TextAnchor.S, TextAnchor.SE)


class FontSpec(NamedTuple):
    """Font description shared by measurement, rendering and export."""
    family: str
    size: float
    weight: FontWeight = FontWeight.NORMAL
    slant: FontSlant = FontSlant.ROMAN
    underline: bool = False
    overstrike: bool = False

    @classmethod
    def from_shape(cls, shape: TextShape) -> 'FontSpec':
        return cls(shape.font, shape.font_size, shape.weight, shape.slant,
                   shape.underline, shape.overstrike)

    def css(self) -> str:
        """CSS-style font string, e.g. ``italic bold 12px Arial``."""
        style = "italic" if self.slant == FontSlant.ITALIC else "normal"
        return f"{style} {self.weight.value} {self.size:g}px {self.family}"


class TextMeasurer(Protocol):
    """Measures rendered text for a font."""

    def text_width(self, text: str, font: FontSpec) -> float:
        ...

    def font_metrics(self, font: FontSpec) -> Tuple[float, float]:
        """Return (ascent, descent) of the font."""
        ...


class ApproximateTextMeasurer:
    """
    Measurer for contexts without a font engine.

    Estimates every glyph at 0.6 em wide, with an 0.8/0.2 em ascent/descent
    split.
    """

    CHAR_WIDTH = 0.6
    ASCENT = 0.8
    DESCENT = 0.2

    def text_width(self, text: str, font: FontSpec) -> float:
        return len(text) * font.size * self.CHAR_WIDTH

    def font_metrics(self, font: FontSpec) -> Tuple[float, float]:
        return font.size * self.ASCENT, font.size * self.DESCENT


@dataclass(frozen=True)
class TextLayout:
    """
    Result of laying out a text shape (unrotated).

    Attributes:
        lines: Wrapped lines in display order
        baselines: Left end of each line's baseline, justification applied
        bbox: Anchored block bounding box
        line_height: Ascent + descent of one line
    """
    lines: Tuple[str, ...]
    baselines: Tuple[Point, ...]
    bbox: BoundingBox
    line_height: float


def _resolve(measurer: Optional[TextMeasurer]) -> TextMeasurer:
    return measurer if measurer is not None else ApproximateTextMeasurer()


def wrap_text_lines(text: str, wrap_width: float, font: FontSpec,
                    measurer: Optional[TextMeasurer] = None) -> List[str]:
    """
    Split text into display lines.

    Explicit newlines always break. With a positive wrap width each
    paragraph is greedily word-wrapped; a single word wider than the wrap
    width stays on its own line.
    """
    measurer = _resolve(measurer)
    lines: List[str] = []
    for paragraph in text.split("\n"):
        if wrap_width <= 0:
            lines.append(paragraph)
            continue

        current = ""
        for i, word in enumerate(paragraph.split(" ")):
            candidate = f"{current} {word}" if current else word
            if i > 0 and measurer.text_width(candidate, font) > wrap_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


def layout_text(shape: TextShape, measurer: Optional[TextMeasurer] = None) -> TextLayout:
    """Wrap, measure and anchor a text shape."""
    measurer = _resolve(measurer)
    font = FontSpec.from_shape(shape)
    lines = wrap_text_lines(shape.text, shape.width, font, measurer)

    ascent, descent = measurer.font_metrics(font)
    line_height = ascent + descent
    leading = shape.font_size * LEADING_FACTOR
    block_height = line_height + (len(lines) - 1) * (line_height + leading)
    widths = [measurer.text_width(line, font) for line in lines]
    block_width = max(widths)

    x, y = shape.x, shape.y
    if shape.anchor in _CENTERED_X:
        x -= block_width / 2
    elif shape.anchor in _RIGHT_X:
        x -= block_width
    if shape.anchor in _CENTERED_Y:
        y -= block_height / 2
    elif shape.anchor in _BOTTOM_Y:
        y -= block_height

    baselines = []
    for i, line_width in enumerate(widths):
        if shape.justify == TextJustify.CENTER:
            line_x = x + (block_width - line_width) / 2
        elif shape.justify == TextJustify.RIGHT:
            line_x = x + block_width - line_width
        else:
            line_x = x
        baselines.append(Point(line_x, y + ascent + i * (line_height + leading)))

    return TextLayout(
        lines=tuple(lines),
        baselines=tuple(baselines),
        bbox=BoundingBox(x, y, block_width, block_height),
        line_height=line_height,
    )


def text_bounding_box(shape: TextShape, measurer: Optional[TextMeasurer] = None) -> BoundingBox:
    """Unrotated bounding box of a text shape's wrapped block."""
    return layout_text(shape, measurer).bbox


__all__ = [
    'LEADING_FACTOR',
    'FontSpec',
    'TextMeasurer',
    'ApproximateTextMeasurer',
    'TextLayout',
    'wrap_text_lines',
    'layout_text',
    'text_bounding_box',
]
