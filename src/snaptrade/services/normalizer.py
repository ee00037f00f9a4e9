"""
Validate and repair JSON returned by the chart, sentiment and prediction model calls.

Pattern lists are strict: one malformed entry rejects the whole batch, because
fabricating a chart pattern is worse than surfacing the upstream error.
Sentiment and prediction payloads are lenient: every field has a repair, and
only a non-object top-level value is rejected.

None of these functions mutate their input. Repairs are reported through the
optional ``log`` argument (defaults to this module's logger).
"""

from __future__ import annotations

import logging
import math
import re
from fractions import Fraction
from typing import Any, Iterable

from snaptrade.schemas.analysis import DetectedPattern, PredictionResult, SentimentResult

logger = logging.getLogger(__name__)

DIRECTIONS = ("bullish", "bearish", "neutral")

DEFAULT_CONFIDENCE = 50
DEFAULT_EXPLANATION = "No explanation provided."
DEFAULT_WEIGHTS = {"technical": 70, "news": 30}
DEFAULT_TIMEFRAME = "Medium-term"
QUICK_TRADE_TIMEFRAME = "Intraday to 3 days"
SWING_TRADE_TIMEFRAME = "1-2 weeks"
UNTITLED_ARTICLE = "Untitled Article"

HEDGE_WORD = "might"
DISCLAIMER_PHRASE = "educational purposes"
DISCLAIMER = "This analysis is for educational purposes only and does not constitute financial advice."
DEFAULT_ENTRY_CONDITION = (
    "A trader might consider entering a position if price action confirms the predicted direction. "
    + DISCLAIMER
)

_PRICE_FIELDS = ("entryPrice", "stopLoss", "takeProfit")
_ARTICLE_METADATA = ("source", "time", "url", "summary")
_HEDGE_RE = re.compile(rf"\b{HEDGE_WORD}\b", re.IGNORECASE)
_TRADER_RE = re.compile(r"\btrader", re.IGNORECASE)


class NormalizationError(ValueError):
    """Raised when a model payload cannot be repaired into a usable shape."""


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # JSON integers are unbounded and may not fit in a float.
    return isinstance(value, int) or math.isfinite(value)


def _fits_float(value: Any) -> bool:
    """True for numbers that can be stored as-is in a float field."""
    if not _is_number(value):
        return False
    try:
        float(value)
    except OverflowError:
        return False
    return True


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# --------------------------------------------------------------------------- patterns


def normalize_patterns(data: Any, *, log: logging.Logger | None = None) -> list[DetectedPattern]:
    """
    Coerce a decoded chart-pattern payload into a list of patterns.

    Accepts a list of pattern objects, an object wrapping such a list under
    ``patterns``, or a single pattern object. Raises ``NormalizationError`` for
    any other shape and for any entry with a bad name, type or confidence.
    """
    log = log or logger

    if isinstance(data, dict) and isinstance(data.get("patterns"), list):
        data = data["patterns"]
    elif isinstance(data, dict) and {"name", "type", "confidence"} <= data.keys():
        log.debug("Wrapping single pattern object in a list")
        data = [data]

    if not isinstance(data, list):
        raise NormalizationError(f"Pattern payload must be a list, got {type(data).__name__}")

    patterns: list[DetectedPattern] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise NormalizationError(f"Pattern {index} is not an object")
        if not isinstance(entry.get("name"), str):
            raise NormalizationError(f"Pattern {index} has a non-string name")
        if entry.get("type") not in DIRECTIONS:
            raise NormalizationError(f"Pattern {index} has invalid type {entry.get('type')!r}")
        confidence = entry.get("confidence")
        if not _is_number(confidence) or not 0 <= confidence <= 100:
            raise NormalizationError(f"Pattern {index} has invalid confidence {confidence!r}")
        patterns.append(DetectedPattern(name=entry["name"], type=entry["type"], confidence=confidence))

    return patterns


def top_patterns(patterns: Iterable[DetectedPattern], limit: int = 3) -> list[DetectedPattern]:
    """Keep the ``limit`` most confident patterns, highest first."""
    return sorted(patterns, key=lambda p: p.confidence, reverse=True)[:limit]


# --------------------------------------------------------------------------- sentiment


def normalize_sentiment(data: Any, *, log: logging.Logger | None = None) -> SentimentResult:
    """
    Repair a decoded ``{score, articles}`` payload.

    Out-of-range scores are clamped to [-1, 1]; articles are repaired rather
    than dropped, except non-object entries which are skipped. A non-object
    payload or a non-numeric score raises ``NormalizationError``.
    """
    log = log or logger

    if not isinstance(data, dict):
        raise NormalizationError(f"Sentiment payload must be an object, got {type(data).__name__}")

    score = data.get("score")
    if not _is_number(score):
        raise NormalizationError(f"Sentiment score must be a number, got {score!r}")
    if not -1 <= score <= 1:
        log.warning("Clamping sentiment score %s into [-1, 1]", score)
        score = _clamp(score, -1, 1)

    raw_articles = data.get("articles")
    if not isinstance(raw_articles, list):
        log.warning("Sentiment articles missing or not a list (%s); using []", type(raw_articles).__name__)
        raw_articles = []

    articles: list[dict[str, Any]] = []
    for index, raw in enumerate(raw_articles):
        if not isinstance(raw, dict):
            log.warning("Skipping sentiment article %s: not an object", index)
            continue
        articles.append(_repair_article(index, raw, log))

    return SentimentResult.model_validate({"score": score, "articles": articles})


def _repair_article(index: int, raw: dict[str, Any], log: logging.Logger) -> dict[str, Any]:
    article = dict(raw)

    if not isinstance(article.get("title"), str):
        log.warning("Article %s has no usable title; using placeholder", index)
        article["title"] = UNTITLED_ARTICLE

    sentiment = article.get("sentiment")
    if not _is_number(sentiment):
        log.warning("Article %s sentiment %r is not a number; using 0", index, sentiment)
        article["sentiment"] = 0
    elif not -1 <= sentiment <= 1:
        log.warning("Clamping article %s sentiment %s into [-1, 1]", index, sentiment)
        article["sentiment"] = _clamp(sentiment, -1, 1)

    for key in _ARTICLE_METADATA:
        value = article.get(key)
        if value is not None and not isinstance(value, str):
            log.warning("Dropping non-string %s on article %s", key, index)
            del article[key]

    return article


# --------------------------------------------------------------------------- prediction


def normalize_prediction(data: Any, *, log: logging.Logger | None = None) -> PredictionResult:
    """
    Repair a decoded prediction payload so that it always renders.

    Every field has a default. Weights are rescaled to sum to 100, prices that
    are not numbers become null, and the entry condition always carries the
    hedge word and the educational-purposes disclaimer. Only a non-object
    payload raises ``NormalizationError``.
    """
    log = log or logger

    if not isinstance(data, dict):
        raise NormalizationError(f"Prediction payload must be an object, got {type(data).__name__}")

    direction = data.get("direction")
    if direction not in DIRECTIONS:
        log.warning("Unknown prediction direction %r; using neutral", direction)
        direction = "neutral"

    confidence = data.get("confidence")
    if not _is_number(confidence):
        log.warning("Prediction confidence %r is not a number; using %s", confidence, DEFAULT_CONFIDENCE)
        confidence = DEFAULT_CONFIDENCE
    elif not 0 <= confidence <= 100:
        log.warning("Clamping prediction confidence %s into [0, 100]", confidence)
        confidence = _clamp(confidence, 0, 100)

    explanation = data.get("explanation")
    if not isinstance(explanation, str):
        log.warning("Prediction explanation missing; using placeholder")
        explanation = DEFAULT_EXPLANATION

    return PredictionResult.model_validate(
        {
            "direction": direction,
            "confidence": confidence,
            "explanation": explanation,
            "weights": normalize_weights(data.get("weights"), log=log),
            "tradingRecommendation": _normalize_recommendation(data.get("tradingRecommendation"), log),
        }
    )


def normalize_weights(raw: Any, *, log: logging.Logger | None = None) -> dict[str, float]:
    """
    Return ``{technical, news}`` summing to 100.

    Non-numeric components fall back to 70/30, negatives count as 0, and a
    total other than 100 is rescaled proportionally (technical rounded, news
    takes the remainder). A zero total resets to 70/30.
    """
    log = log or logger

    if not isinstance(raw, dict):
        log.warning("Prediction weights missing; using %s", DEFAULT_WEIGHTS)
        return dict(DEFAULT_WEIGHTS)

    technical = raw.get("technical")
    news = raw.get("news")
    if not _is_number(technical):
        log.warning("Technical weight %r is not a number; using default", technical)
        technical = DEFAULT_WEIGHTS["technical"]
    if not _is_number(news):
        log.warning("News weight %r is not a number; using default", news)
        news = DEFAULT_WEIGHTS["news"]
    technical, news = max(technical, 0), max(news, 0)

    # Exact arithmetic: JSON numbers may be too large to add or divide as floats.
    total = Fraction(technical) + Fraction(news)
    if total == 100:
        return {"technical": technical, "news": news}
    if total == 0:
        log.warning("Prediction weights total 0; using %s", DEFAULT_WEIGHTS)
        return dict(DEFAULT_WEIGHTS)

    log.warning("Rescaling prediction weights %s/%s to 100", technical, news)
    technical = round(Fraction(technical) / total * 100)
    return {"technical": technical, "news": 100 - technical}


def _normalize_recommendation(raw: Any, log: logging.Logger) -> dict[str, Any]:
    if not isinstance(raw, dict):
        log.warning("Trading recommendation missing; synthesizing defaults")
        raw = {}

    prices = {field: _price(raw.get(field), field, log) for field in _PRICE_FIELDS}

    timeframe = raw.get("timeframe")
    if not isinstance(timeframe, str):
        timeframe = DEFAULT_TIMEFRAME

    ratio = raw.get("riskRewardRatio")
    if ratio is not None and (not _fits_float(ratio) or ratio < 0):
        log.warning("Discarding invalid risk/reward ratio %r", ratio)
        ratio = None

    quick = raw.get("quickTrade")
    if isinstance(quick, dict):
        quick = _normalize_leg(quick, QUICK_TRADE_TIMEFRAME, log)
    else:
        quick = {
            **prices,
            "takeProfit": _midpoint(prices["entryPrice"], prices["takeProfit"]),
            "timeframe": QUICK_TRADE_TIMEFRAME,
        }

    swing = raw.get("swingTrade")
    if isinstance(swing, dict):
        swing = _normalize_leg(swing, SWING_TRADE_TIMEFRAME, log)
    else:
        swing = {**prices, "timeframe": SWING_TRADE_TIMEFRAME}

    return {
        **prices,
        "entryCondition": normalize_entry_condition(raw.get("entryCondition"), log=log),
        "timeframe": timeframe,
        "riskRewardRatio": ratio,
        "quickTrade": quick,
        "swingTrade": swing,
    }


def _normalize_leg(raw: dict[str, Any], default_timeframe: str, log: logging.Logger) -> dict[str, Any]:
    leg: dict[str, Any] = {field: _price(raw.get(field), field, log) for field in _PRICE_FIELDS}
    timeframe = raw.get("timeframe")
    leg["timeframe"] = timeframe if isinstance(timeframe, str) else default_timeframe
    return leg


def _price(value: Any, field: str, log: logging.Logger) -> float | None:
    if value is None or _fits_float(value):
        return value
    log.warning("Discarding non-numeric %s %r", field, value)
    return None


def _midpoint(entry: float | None, target: float | None) -> float | None:
    if entry is None or target is None:
        return target
    return entry + (target - entry) / 2


def normalize_entry_condition(value: Any, *, log: logging.Logger | None = None) -> str:
    """
    Ensure the entry condition is hedged and carries the disclaimer.

    "might" (as a whole word) is spliced in before the first "trader" when
    missing, capitalized if the text opens with it (or a hedged
    lead-in is prepended when the text never mentions a trader), and the
    disclaimer sentence is appended unless "educational purposes" is present.
    """
    log = log or logger

    if not isinstance(value, str) or not value.strip():
        log.warning("Entry condition missing; using default disclaimer text")
        return DEFAULT_ENTRY_CONDITION

    condition = value.strip()

    if not _HEDGE_RE.search(condition):
        match = _TRADER_RE.search(condition)
        if match is None:
            condition = f"Traders {HEDGE_WORD} consider the following: {condition}"
        elif match.start() == 0:
            condition = f"{HEDGE_WORD.capitalize()} {condition[0].lower()}{condition[1:]}"
        else:
            position = match.start()
            condition = f"{condition[:position]}{HEDGE_WORD} {condition[position:]}"
        log.warning("Added hedge word to entry condition")

    if DISCLAIMER_PHRASE not in condition.lower():
        condition = f"{condition} {DISCLAIMER}"
        log.warning("Appended disclaimer to entry condition")

    return condition
