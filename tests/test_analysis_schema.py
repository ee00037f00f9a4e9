import pytest
from pydantic import ValidationError

from snaptrade.schemas.analysis import (
    AnalyzeRequest,
    DetectedPattern,
    PredictionWeights,
    SaveAnalysisRequest,
    SentimentResult,
    UsageInfo,
)


def test_detected_pattern_validation():
    pattern = DetectedPattern(name="Double Top", type="bearish", confidence=87)

    data = pattern.model_dump(by_alias=True)
    assert data == {"name": "Double Top", "type": "bearish", "confidence": 87}

    with pytest.raises(ValidationError):
        DetectedPattern(name="Double Top", type="sideways", confidence=87)


def test_sentiment_result_serializes_camel_case_metadata():
    result = SentimentResult.model_validate(
        {"score": -0.4, "articles": [{"title": "T", "sentiment": -0.4, "source": "AP", "time": "Recently"}]}
    )

    article = result.model_dump(by_alias=True)["articles"][0]
    assert article["source"] == "AP"
    assert article["time"] == "Recently"


def test_prediction_weights_must_sum_to_100():
    assert PredictionWeights(technical=60, news=40).technical == 60

    with pytest.raises(ValidationError):
        PredictionWeights(technical=60, news=30)

    with pytest.raises(ValidationError):
        PredictionWeights(technical=70.0000001, news=30)


def test_usage_info_dump():
    assert UsageInfo(tier="standard", count=3, limit=10).model_dump(by_alias=True) == {
        "tier": "standard",
        "count": 3,
        "limit": 10,
    }


def test_analyze_request_strips_data_uri_prefix():
    req = AnalyzeRequest(image="data:image/png;base64,aGVsbG8=", asset=" EUR/USD ")

    assert req.image == "aGVsbG8="
    assert req.asset == "EUR/USD"


def test_save_request_defaults_notes():
    req = SaveAnalysisRequest.model_validate({"name": "Gold setup", "notes": None, "result": {"asset": "XAU/USD"}})

    assert req.notes == ""
