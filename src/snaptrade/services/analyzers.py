"""
OpenAI-backed chart pattern, news sentiment and prediction analyzers.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from openai import AsyncOpenAI

from snaptrade.patterns import pattern_names
from snaptrade.schemas.analysis import DetectedPattern, PredictionResult, SentimentResult
from snaptrade.services.news_api import NewsApiArticle
from snaptrade.services.normalizer import (
    normalize_patterns,
    normalize_prediction,
    normalize_sentiment,
)

logger = logging.getLogger(__name__)

PATTERN_PROMPT_TEMPLATE = """You are a financial chart pattern recognition expert. Analyze the provided chart image and identify common trading patterns.
Focus on these patterns: {patterns}.

For each detected pattern, provide:
1. The pattern name
2. The type ("bullish", "bearish" or "neutral")
3. A confidence score (0-100)

Respond with a JSON object of the form:
{{
  "patterns": [
    {{"name": "Head and Shoulders", "type": "bearish", "confidence": 87}}
  ]
}}

Sort patterns by confidence (highest first) and include at most the 3 most confident detections.
If no patterns are detected with reasonable confidence, return an empty "patterns" list.
"""

SENTIMENT_PROMPT = """You are a financial news sentiment analyst. Analyze the following news headlines and summaries related to a specific financial asset.

For each article, determine a sentiment score between -1.0 (extremely negative) and 1.0 (extremely positive).
Then provide an overall sentiment score for all articles combined.

Keep the articles in the order they were given.

Format your response as JSON:
{
  "score": 0.25,
  "articles": [
    {"title": "Article title", "sentiment": 0.75}
  ]
}
"""

PREDICTION_PROMPT_TEMPLATE = """You are a financial market analyst. Based on the provided technical pattern analysis and news sentiment analysis for a specific asset, predict the likely market direction.

Technical patterns detected:
{patterns}

News sentiment:
{sentiment}

Asset: {asset}

Provide your analysis as JSON with the following structure:
{{
  "direction": "bullish" | "bearish" | "neutral",
  "confidence": <number from 0 to 100>,
  "explanation": "A brief explanation of your prediction",
  "weights": {{"technical": <percent>, "news": <percent>}},
  "tradingRecommendation": {{
    "entryPrice": <number or null>,
    "stopLoss": <number or null>,
    "takeProfit": <number or null>,
    "entryCondition": "Hedged description of when a trader might enter, noting this is for educational purposes only",
    "timeframe": "Short-term" | "Medium-term" | "Long-term",
    "riskRewardRatio": <number or null>,
    "quickTrade": {{"entryPrice": <number or null>, "stopLoss": <number or null>, "takeProfit": <number or null>, "timeframe": "Intraday to 3 days"}},
    "swingTrade": {{"entryPrice": <number or null>, "stopLoss": <number or null>, "takeProfit": <number or null>, "timeframe": "1-2 weeks"}}
  }}
}}

The weights must sum to 100. Technical analysis should typically be weighted higher (70-80) unless news sentiment is extremely strong.
Only give price levels you can read from the chart; otherwise use null.
"""


class AnalysisError(RuntimeError):
    """Raised when an upstream model call fails or returns an unusable payload."""


def _strip_code_fences(raw: str) -> str:
    """Strip markdown code fences from LLM responses."""
    text = raw.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        if first_newline != -1:
            text = text[first_newline + 1:]
        if text.endswith("```"):
            text = text[:-3].strip()
    return text


def _decode(raw: str | None) -> Any:
    if not raw:
        raise ValueError("No content in response")
    return json.loads(_strip_code_fences(raw))


def build_prediction_prompt(
    patterns: Sequence[DetectedPattern], sentiment: SentimentResult, asset: str
) -> str:
    return PREDICTION_PROMPT_TEMPLATE.format(
        patterns=json.dumps([p.model_dump(by_alias=True) for p in patterns], indent=2),
        sentiment=json.dumps(sentiment.model_dump(by_alias=True), indent=2),
        asset=asset,
    )


def enrich_articles(sentiment: SentimentResult, fetched: Sequence[NewsApiArticle]) -> SentimentResult:
    """
    Attach the fetched article metadata to the scored article at the same index.
    """
    articles = []
    for index, scored in enumerate(sentiment.articles):
        data = scored.model_dump(by_alias=True)
        if index < len(fetched):
            source = fetched[index]
            data.update(
                title=source.title or scored.title,
                source=source.source_name(),
                time=source.publishedAt or "Recently",
                url=source.url,
                summary=source.summary_text(),
            )
        articles.append(data)
    return SentimentResult.model_validate({"score": sentiment.score, "articles": articles})


@dataclass
class ChartAnalyzer:
    api_key: str
    model: str = "gpt-4o"
    _client: Optional[AsyncOpenAI] = field(default=None, repr=False)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def _complete_json(self, messages: list[dict[str, Any]]) -> Any:
        resp = await self._get_client().chat.completions.create(
            model=self.model,
            messages=messages,
            response_format={"type": "json_object"},
        )
        return _decode(resp.choices[0].message.content)

    async def detect_patterns(self, image_b64: str) -> list[DetectedPattern]:
        """Ask the vision model for chart patterns in a base64 JPEG."""
        messages = [
            {"role": "system", "content": PATTERN_PROMPT_TEMPLATE.format(patterns=", ".join(pattern_names()))},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Analyze this financial chart and identify trading patterns."},
                    {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"}},
                ],
            },
        ]
        try:
            data = await self._complete_json(messages)
            return normalize_patterns(data, log=logger)
        except Exception as exc:
            logger.exception("Error analyzing chart image")
            raise AnalysisError(f"Failed to analyze chart image: {exc}") from exc

    async def analyze_sentiment(self, asset: str, articles: Sequence[NewsApiArticle]) -> SentimentResult:
        """Score news sentiment for an asset; neutral without calling the model when there is no news."""
        if not articles:
            logger.info("No news articles available for %s, returning neutral sentiment", asset)
            return SentimentResult(score=0, articles=[])

        articles_text = "\n---\n".join(article.prompt_block() for article in articles)
        messages = [
            {"role": "system", "content": SENTIMENT_PROMPT},
            {"role": "user", "content": f"Analyze the sentiment of these news articles about {asset}:\n\n{articles_text}"},
        ]
        try:
            data = await self._complete_json(messages)
            return enrich_articles(normalize_sentiment(data, log=logger), articles)
        except Exception as exc:
            logger.exception("Error analyzing news sentiment")
            raise AnalysisError(f"Failed to analyze news sentiment: {exc}") from exc

    async def predict(
        self, patterns: Sequence[DetectedPattern], sentiment: SentimentResult, asset: str
    ) -> PredictionResult:
        """Combine patterns and sentiment into a direction and trading recommendation."""
        messages = [{"role": "user", "content": build_prediction_prompt(patterns, sentiment, asset)}]
        try:
            data = await self._complete_json(messages)
            return normalize_prediction(data, log=logger)
        except Exception as exc:
            logger.exception("Error generating combined prediction")
            raise AnalysisError(f"Failed to generate prediction: {exc}") from exc
