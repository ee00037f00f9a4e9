from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from snaptrade import repositories
from snaptrade.config import Settings
from snaptrade.schemas.analysis import AnalyzeRequest, SaveAnalysisRequest, UsageInfo
from snaptrade.services.analyzers import ChartAnalyzer
from snaptrade.services.news_api import NewsApiClient
from snaptrade.services.pipeline import run_analysis
from webapp.utils import (
    analysis_to_dict,
    error,
    named_analysis_to_dict,
    parse_limit,
    start_of_day,
)

logger = logging.getLogger(__name__)

bp = Blueprint("analyses", __name__, url_prefix="/api")


@bp.post("/analyze")
async def analyze():
    """Analyze an uploaded chart, store the result and report daily usage."""
    payload = _json_body()
    if not payload.get("image"):
        return error("No image provided", 400)
    if not payload.get("asset"):
        return error("No asset provided", 400)

    try:
        req = AnalyzeRequest.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Rejected analysis request: %s", exc)
        return error("Image and asset must be non-empty strings", 400)

    settings: Settings = current_app.config["SETTINGS"]
    if not settings.OPENAI_API_KEY:
        return error("OpenAI API key not configured", 500)
    if not settings.NEWS_API_KEY:
        return error("News API key not configured", 500)

    try:
        async with current_app.config["SESSION_MAKER"]() as session:
            used = await repositories.count_analyses_since(session, start_of_day())
            if used >= settings.DAILY_ANALYSIS_LIMIT:
                return error("Daily analysis limit reached", 429)

            record = await run_analysis(
                image_b64=req.image,
                asset=req.asset,
                analyzer=ChartAnalyzer(settings.OPENAI_API_KEY, model=settings.OPENAI_MODEL),
                news_client=NewsApiClient(settings.NEWS_API_KEY),
                max_patterns=settings.MAX_PATTERNS,
                news_page_size=settings.NEWS_API_PAGE_SIZE,
            )
            row = await repositories.create_analysis(session, record)
    except Exception as exc:
        logger.exception("Error in /api/analyze")
        return error(str(exc) or "An unknown error occurred", 500)

    body = analysis_to_dict(row)
    body["usageInfo"] = UsageInfo(
        tier=settings.USAGE_TIER, count=used + 1, limit=settings.DAILY_ANALYSIS_LIMIT
    ).model_dump(by_alias=True)
    return jsonify(body), 200


@bp.post("/analysis/save")
async def save_analysis():
    """Save an analysis result under a name with optional notes."""
    payload = _json_body()
    if not payload.get("name"):
        return error("Analysis name is required", 400)
    if not payload.get("result"):
        return error("Analysis result is required", 400)

    try:
        req = SaveAnalysisRequest.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Rejected save request: %s", exc)
        return error("Invalid analysis save request", 400)

    try:
        async with current_app.config["SESSION_MAKER"]() as session:
            row = await repositories.save_named_analysis(
                session, name=req.name, notes=req.notes, result=req.result
            )
    except Exception as exc:
        logger.exception("Error in /api/analysis/save")
        return error(str(exc) or "An unknown error occurred", 500)

    return jsonify(named_analysis_to_dict(row)), 200


@bp.get("/analyses")
async def list_analyses():
    """Stored analyses, newest first."""
    limit = parse_limit(request.args.get("limit"))
    try:
        async with current_app.config["SESSION_MAKER"]() as session:
            rows = await repositories.list_analyses(session, limit=limit)
    except Exception as exc:
        logger.exception("Error in /api/analyses")
        return error(str(exc) or "An unknown error occurred", 500)

    return jsonify([analysis_to_dict(row) for row in rows]), 200


@bp.get("/analysis/<int:analysis_id>")
async def analysis_detail(analysis_id: int):
    try:
        async with current_app.config["SESSION_MAKER"]() as session:
            row = await repositories.get_analysis(session, analysis_id)
    except Exception as exc:
        logger.exception("Error in /api/analysis/%s", analysis_id)
        return error(str(exc) or "An unknown error occurred", 500)

    if row is None:
        return error("Analysis not found", 404)
    return jsonify(analysis_to_dict(row)), 200


@bp.get("/named-analyses")
async def list_named_analyses():
    try:
        async with current_app.config["SESSION_MAKER"]() as session:
            rows = await repositories.list_named_analyses(session)
    except Exception as exc:
        logger.exception("Error in /api/named-analyses")
        return error(str(exc) or "An unknown error occurred", 500)

    return jsonify([named_analysis_to_dict(row) for row in rows]), 200


@bp.get("/named-analysis/<int:named_id>")
async def named_analysis_detail(named_id: int):
    try:
        async with current_app.config["SESSION_MAKER"]() as session:
            row = await repositories.get_named_analysis(session, named_id)
    except Exception as exc:
        logger.exception("Error in /api/named-analysis/%s", named_id)
        return error(str(exc) or "An unknown error occurred", 500)

    if row is None:
        return error("Saved analysis not found", 404)
    return jsonify(named_analysis_to_dict(row)), 200


def _json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
