"""
Shared helpers for the Flask JSON API.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from flask import jsonify

from snaptrade.database.models import Analysis, NamedAnalysis
from snaptrade.schemas.analysis import AnalysisRecord, NamedAnalysisRecord


def error(message: str, status: int):
    """Return the ``{"message": ...}`` error envelope with a status code."""
    return jsonify({"message": message}), status


def parse_limit(value: str | None, *, maximum: int = 100) -> int | None:
    """
    Parse an optional positive ``limit`` query argument, capped at ``maximum``.
    Invalid or non-positive values mean "no limit".
    """
    if not value:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    if parsed <= 0:
        return None
    return min(parsed, maximum)


def start_of_day(now: datetime | None = None) -> datetime:
    """Midnight UTC of the given (or current) day."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def analysis_to_dict(row: Analysis) -> dict[str, Any]:
    record = AnalysisRecord.model_validate(
        {
            "id": row.id,
            "asset": row.asset,
            "imageUrl": row.image_url,
            "patterns": row.patterns or [],
            "newsSentiment": row.news_sentiment,
            "prediction": row.prediction,
            "timestamp": row.timestamp,
        }
    )
    return record.model_dump(mode="json", by_alias=True)


def named_analysis_to_dict(row: NamedAnalysis) -> dict[str, Any]:
    record = NamedAnalysisRecord(
        id=row.id,
        name=row.name,
        notes=row.notes or "",
        result=row.result or {},
        timestamp=row.timestamp,
    )
    return record.model_dump(mode="json", by_alias=True)
