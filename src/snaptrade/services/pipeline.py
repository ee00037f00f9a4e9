"""
End-to-end chart analysis: patterns, news sentiment, then the combined prediction.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from snaptrade.schemas.analysis import AnalysisRecord
from snaptrade.services.analyzers import ChartAnalyzer
from snaptrade.services.news_api import NewsApiClient
from snaptrade.services.normalizer import top_patterns

logger = logging.getLogger(__name__)


async def run_analysis(
    *,
    image_b64: str,
    asset: str,
    analyzer: ChartAnalyzer,
    news_client: NewsApiClient,
    max_patterns: int = 3,
    news_page_size: int = 10,
) -> AnalysisRecord:
    """
    Run the three model calls in order and return an unsaved analysis record.

    Errors from the analyzer or the news client propagate unchanged; nothing is
    retried here.
    """
    patterns = top_patterns(await analyzer.detect_patterns(image_b64), limit=max_patterns)
    logger.info("Detected %s patterns for %s", len(patterns), asset)

    articles = await news_client.fetch_for_asset(asset, page_size=news_page_size)
    sentiment = await analyzer.analyze_sentiment(asset, articles)
    prediction = await analyzer.predict(patterns, sentiment, asset)

    return AnalysisRecord(
        asset=asset,
        image_url=f"data:image/jpeg;base64,{image_b64}",
        patterns=patterns,
        news_sentiment=sentiment,
        prediction=prediction,
        timestamp=datetime.now(timezone.utc),
    )
