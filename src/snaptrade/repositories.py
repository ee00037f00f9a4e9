"""
Async data access for analyses and saved (named) analyses.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from snaptrade.database.models import Analysis, NamedAnalysis
from snaptrade.schemas.analysis import AnalysisRecord

logger = logging.getLogger(__name__)


async def create_analysis(session: AsyncSession, record: AnalysisRecord) -> Analysis:
    data = record.model_dump(mode="json", by_alias=True)
    row = Analysis(
        asset=record.asset,
        image_url=record.image_url,
        patterns=data["patterns"],
        news_sentiment=data["newsSentiment"],
        prediction=data["prediction"],
    )
    if record.timestamp is not None:
        row.timestamp = record.timestamp
    session.add(row)
    await session.commit()
    await session.refresh(row)
    logger.info("Stored analysis %s for %s", row.id, row.asset)
    return row


async def get_analysis(session: AsyncSession, analysis_id: int) -> Analysis | None:
    return await session.get(Analysis, analysis_id)


async def list_analyses(session: AsyncSession, limit: int | None = None) -> list[Analysis]:
    """Most recent first."""
    stmt = select(Analysis).order_by(Analysis.timestamp.desc(), Analysis.id.desc())
    if limit:
        stmt = stmt.limit(limit)
    return list(await session.scalars(stmt))


async def count_analyses_since(session: AsyncSession, since: datetime) -> int:
    total = await session.scalar(
        select(func.count()).select_from(Analysis).where(Analysis.timestamp >= since)
    )
    return total or 0


async def save_named_analysis(
    session: AsyncSession, *, name: str, notes: str, result: dict[str, Any]
) -> NamedAnalysis:
    row = NamedAnalysis(name=name, notes=notes, result=result)
    session.add(row)
    await session.commit()
    await session.refresh(row)
    logger.info("Saved analysis %r as %s", name, row.id)
    return row


async def get_named_analysis(session: AsyncSession, named_id: int) -> NamedAnalysis | None:
    return await session.get(NamedAnalysis, named_id)


async def list_named_analyses(session: AsyncSession) -> list[NamedAnalysis]:
    """Most recent first."""
    stmt = select(NamedAnalysis).order_by(NamedAnalysis.timestamp.desc(), NamedAnalysis.id.desc())
    return list(await session.scalars(stmt))
