"""
Catalogue of chart patterns the detector is asked to look for.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChartPattern:
    id: str
    name: str
    type: str
    description: str


CHART_PATTERNS: tuple[ChartPattern, ...] = (
    ChartPattern(
        "double_top",
        "Double Top",
        "bearish",
        "Reversal after an uptrend: price reaches a high, retraces, then fails at a similar high.",
    ),
    ChartPattern(
        "double_bottom",
        "Double Bottom",
        "bullish",
        "Reversal after a downtrend: price reaches a low, rebounds, then holds at a similar low.",
    ),
    ChartPattern(
        "head_and_shoulders",
        "Head and Shoulders",
        "bearish",
        "Three peaks with the middle one highest and the outer two roughly equal.",
    ),
    ChartPattern(
        "inverse_head_and_shoulders",
        "Inverse Head and Shoulders",
        "bullish",
        "Three troughs with the middle one lowest and the outer two roughly equal.",
    ),
    ChartPattern(
        "bull_flag",
        "Bull Flag",
        "bullish",
        "Strong advance followed by a tight consolidation between downward-sloping parallel lines.",
    ),
    ChartPattern(
        "bear_flag",
        "Bear Flag",
        "bearish",
        "Strong decline followed by a tight consolidation between upward-sloping parallel lines.",
    ),
    ChartPattern(
        "ascending_triangle",
        "Ascending Triangle",
        "bullish",
        "Flat upper resistance with an upward-sloping lower support line.",
    ),
    ChartPattern(
        "descending_triangle",
        "Descending Triangle",
        "bearish",
        "Flat lower support with a downward-sloping upper resistance line.",
    ),
    ChartPattern(
        "cup_and_handle",
        "Cup and Handle",
        "bullish",
        "U-shaped base followed by a shallow, slightly downward-drifting handle.",
    ),
    ChartPattern(
        "rounding_bottom",
        "Rounding Bottom",
        "bullish",
        "Saucer-shaped base showing a gradual shift from selling to buying pressure.",
    ),
)


def pattern_names() -> list[str]:
    return [pattern.name for pattern in CHART_PATTERNS]
