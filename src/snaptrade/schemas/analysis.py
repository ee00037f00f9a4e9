"""
Schemas for chart analysis results.

Field names are snake_case in Python and camelCase on the wire; dump with
``by_alias=True`` when serializing for clients or JSON columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Direction = Literal["bullish", "bearish", "neutral"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DetectedPattern(_CamelModel):
    name: str
    type: Direction
    confidence: float = Field(..., ge=0.0, le=100.0)


class NewsArticle(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    title: str
    sentiment: float = Field(..., ge=-1.0, le=1.0)
    source: str | None = None
    time: str | None = None
    url: str | None = None
    summary: str | None = None


class SentimentResult(_CamelModel):
    score: float = Field(..., ge=-1.0, le=1.0)
    articles: List[NewsArticle] = Field(default_factory=list)


class TradeLeg(_CamelModel):
    entry_price: float | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    timeframe: str


class TradingRecommendation(_CamelModel):
    entry_price: float | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    entry_condition: str
    timeframe: str
    risk_reward_ratio: float | None = Field(None, ge=0.0)
    quick_trade: TradeLeg
    swing_trade: TradeLeg


class PredictionWeights(_CamelModel):
    technical: float = Field(..., ge=0.0)
    news: float = Field(..., ge=0.0)

    @model_validator(mode="after")
    def _check_total(self) -> "PredictionWeights":
        if self.technical + self.news != 100:
            raise ValueError("weights must sum to 100")
        return self


class PredictionResult(_CamelModel):
    direction: Direction
    confidence: float = Field(..., ge=0.0, le=100.0)
    explanation: str
    weights: PredictionWeights
    trading_recommendation: TradingRecommendation


class UsageInfo(_CamelModel):
    tier: str
    count: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)


class AnalysisRecord(_CamelModel):
    id: int | None = None
    asset: str
    image_url: str
    patterns: List[DetectedPattern] = Field(default_factory=list)
    news_sentiment: SentimentResult
    prediction: PredictionResult
    timestamp: datetime | None = None


class AnalyzeRequest(_CamelModel):
    image: str = Field(..., min_length=1)
    asset: str = Field(..., min_length=1)

    @field_validator("image")
    @classmethod
    def _strip_data_uri(cls, value: str) -> str:
        # Clients may send the full FileReader result instead of the bare payload.
        value = value.strip()
        if value.startswith("data:") and "," in value:
            value = value.split(",", 1)[1]
        return value

    @field_validator("asset")
    @classmethod
    def _clean_asset(cls, value: str) -> str:
        return value.strip()


class SaveAnalysisRequest(_CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    notes: str = ""
    result: dict[str, Any]

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value):
        if value is None:
            return ""
        return value


class NamedAnalysisRecord(_CamelModel):
    id: int
    name: str
    notes: str = ""
    result: dict[str, Any]
    timestamp: datetime | None = None
