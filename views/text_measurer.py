"""
Qt text measurement.

QFontMetricsF-backed implementation of the TextMeasurer protocol, so text
bounding boxes match what the canvas paints.
"""

from typing import Dict, Tuple

from PyQt6.QtGui import QFont, QFontMetricsF

from models import FontSlant, FontWeight
from services.text_layout import FontSpec


def qfont_for(font: FontSpec) -> QFont:
    """Build the QFont matching a font spec (size in pixels)."""
    qfont = QFont(font.family)
    qfont.setPixelSize(max(1, int(round(font.size))))
    qfont.setBold(font.weight == FontWeight.BOLD)
    qfont.setItalic(font.slant == FontSlant.ITALIC)
    qfont.setUnderline(font.underline)
    qfont.setStrikeOut(font.overstrike)
    return qfont


class QtTextMeasurer:
    """Measures text with QFontMetricsF, caching metrics per font."""

    def __init__(self):
        self._metrics: Dict[FontSpec, QFontMetricsF] = {}

    def _metrics_for(self, font: FontSpec) -> QFontMetricsF:
        metrics = self._metrics.get(font)
        if metrics is None:
            metrics = QFontMetricsF(qfont_for(font))
            self._metrics[font] = metrics
        return metrics

    def text_width(self, text: str, font: FontSpec) -> float:
        return self._metrics_for(font).horizontalAdvance(text)

    def font_metrics(self, font: FontSpec) -> Tuple[float, float]:
        metrics = self._metrics_for(font)
        return metrics.ascent(), metrics.descent()
