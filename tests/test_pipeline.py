import asyncio

import pytest

from snaptrade.schemas.analysis import DetectedPattern, SentimentResult
from snaptrade.services.analyzers import AnalysisError
from snaptrade.services.news_api import NewsApiArticle
from snaptrade.services.normalizer import normalize_prediction
from snaptrade.services.pipeline import run_analysis


class _FakeAnalyzer:
    def __init__(self, patterns, fail_on=None):
        self._patterns = patterns
        self._fail_on = fail_on
        self.calls = []

    async def detect_patterns(self, image_b64):
        self.calls.append("patterns")
        return self._patterns

    async def analyze_sentiment(self, asset, articles):
        self.calls.append("sentiment")
        if self._fail_on == "sentiment":
            raise AnalysisError("Failed to analyze news sentiment: boom")
        return SentimentResult(score=0.2, articles=[{"title": a.title, "sentiment": 0.2} for a in articles])

    async def predict(self, patterns, sentiment, asset):
        self.calls.append(("predict", [p.name for p in patterns]))
        return normalize_prediction({"direction": "bullish", "confidence": 70, "explanation": "ok"})


class _FakeNews:
    def __init__(self):
        self.calls = []

    async def fetch_for_asset(self, asset, *, page_size=10):
        self.calls.append((asset, page_size))
        return [NewsApiArticle(title="Headline")]


def _patterns():
    return [
        DetectedPattern(name="Low", type="neutral", confidence=20),
        DetectedPattern(name="High", type="bullish", confidence=90),
        DetectedPattern(name="Mid", type="bearish", confidence=50),
        DetectedPattern(name="Top", type="bullish", confidence=95),
    ]


def test_run_analysis_builds_record_in_order():
    analyzer = _FakeAnalyzer(_patterns())
    news = _FakeNews()

    record = asyncio.run(
        run_analysis(
            image_b64="aGVsbG8=",
            asset="ETH/USD",
            analyzer=analyzer,
            news_client=news,
            max_patterns=3,
            news_page_size=7,
        )
    )

    assert analyzer.calls == ["patterns", "sentiment", ("predict", ["Top", "High", "Mid"])]
    assert news.calls == [("ETH/USD", 7)]
    assert record.id is None
    assert record.image_url == "data:image/jpeg;base64,aGVsbG8="
    assert [p.name for p in record.patterns] == ["Top", "High", "Mid"]
    assert record.news_sentiment.articles[0].title == "Headline"
    assert record.prediction.direction == "bullish"
    assert record.timestamp is not None and record.timestamp.tzinfo is not None


def test_run_analysis_propagates_failures_without_retry():
    analyzer = _FakeAnalyzer(_patterns(), fail_on="sentiment")

    with pytest.raises(AnalysisError):
        asyncio.run(
            run_analysis(image_b64="x", asset="AAPL", analyzer=analyzer, news_client=_FakeNews())
        )

    assert analyzer.calls == ["patterns", "sentiment"]
