import json
from types import SimpleNamespace

import pytest

from snaptrade.schemas.analysis import DetectedPattern, SentimentResult
from snaptrade.services.analyzers import AnalysisError, ChartAnalyzer, _strip_code_fences
from snaptrade.services.news_api import NewsApiArticle


class _FakeCompletions:
    def __init__(self, contents):
        self._contents = list(contents)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        content = self._contents.pop(0)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class _FakeOpenAI:
    def __init__(self, *contents):
        self.completions = _FakeCompletions(contents)
        self.chat = SimpleNamespace(completions=self.completions)


def _analyzer(*contents):
    client = _FakeOpenAI(*contents)
    return ChartAnalyzer("sk-test", _client=client), client.completions


def test_strip_code_fences():
    assert _strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert _strip_code_fences('  {"a": 1} ') == '{"a": 1}'


@pytest.mark.asyncio
async def test_detect_patterns_sends_image_and_unwraps_payload():
    payload = {"patterns": [{"name": "Double Top", "type": "bearish", "confidence": 87}]}
    analyzer, completions = _analyzer(json.dumps(payload))

    patterns = await analyzer.detect_patterns("aGVsbG8=")

    assert [p.name for p in patterns] == ["Double Top"]
    call = completions.calls[0]
    assert call["model"] == "gpt-4o"
    assert call["response_format"] == {"type": "json_object"}
    assert "Head and Shoulders" in call["messages"][0]["content"]
    image_part = call["messages"][1]["content"][1]
    assert image_part["image_url"]["url"] == "data:image/jpeg;base64,aGVsbG8="


@pytest.mark.asyncio
async def test_detect_patterns_rejects_malformed_entries():
    payload = {"patterns": [{"name": 123, "type": "bullish", "confidence": 50}]}
    analyzer, _ = _analyzer(json.dumps(payload))

    with pytest.raises(AnalysisError, match="Failed to analyze chart image"):
        await analyzer.detect_patterns("aGVsbG8=")


@pytest.mark.asyncio
async def test_empty_model_content_is_an_analysis_error():
    analyzer, _ = _analyzer(None)

    with pytest.raises(AnalysisError, match="No content in response"):
        await analyzer.detect_patterns("aGVsbG8=")


@pytest.mark.asyncio
async def test_invalid_json_is_an_analysis_error():
    analyzer, _ = _analyzer("definitely not json")

    with pytest.raises(AnalysisError, match="Failed to generate prediction"):
        await analyzer.predict([], SentimentResult(score=0), "BTC/USD")


@pytest.mark.asyncio
async def test_sentiment_without_articles_skips_model_call():
    analyzer, completions = _analyzer()

    result = await analyzer.analyze_sentiment("EUR/USD", [])

    assert result.score == 0
    assert result.articles == []
    assert completions.calls == []


@pytest.mark.asyncio
async def test_sentiment_merges_fetched_article_metadata():
    fetched = [
        NewsApiArticle(
            title="Euro rallies",
            description="ECB surprises markets",
            url="https://example.com/euro",
            source={"id": None, "name": "Reuters"},
            publishedAt="2025-03-01T10:00:00Z",
        ),
        NewsApiArticle(title="Dollar slips", source="Bloomberg"),
    ]
    response = {
        "score": 1.4,
        "articles": [
            {"title": "Euro rallies", "sentiment": 0.8},
            {"title": "Dollar slips", "sentiment": "n/a"},
        ],
    }
    analyzer, completions = _analyzer(json.dumps(response))

    result = await analyzer.analyze_sentiment("EUR/USD", fetched)

    assert result.score == 1
    first, second = result.articles
    assert (first.title, first.source, first.url, first.summary) == (
        "Euro rallies",
        "Reuters",
        "https://example.com/euro",
        "ECB surprises markets",
    )
    assert first.time == "2025-03-01T10:00:00Z"
    assert second.source == "Bloomberg"
    assert second.time == "Recently"
    assert second.sentiment == 0
    prompt = completions.calls[0]["messages"][1]["content"]
    assert "Title: Euro rallies" in prompt
    assert "Source: Reuters" in prompt


@pytest.mark.asyncio
async def test_predict_repairs_payload_and_embeds_inputs_in_prompt():
    analyzer, completions = _analyzer(
        '```json\n{"direction": "up", "confidence": 150, "weights": {"technical": 200, "news": 100}}\n```'
    )
    patterns = [DetectedPattern(name="Bull Flag", type="bullish", confidence=70)]

    prediction = await analyzer.predict(patterns, SentimentResult(score=0.3), "AAPL")

    assert prediction.direction == "neutral"
    assert prediction.confidence == 100
    assert (prediction.weights.technical, prediction.weights.news) == (67, 33)
    assert "educational purposes" in prediction.trading_recommendation.entry_condition
    prompt = completions.calls[0]["messages"][0]["content"]
    assert "Bull Flag" in prompt
    assert "Asset: AAPL" in prompt
