"""Lambda handler for retrieval-backed research questions — API Gateway.

Thin wrapper around ResearchPipeline. All business logic lives in src/callbrief/.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from callbrief.config import load_settings
from callbrief.errors import InvalidRequestError, OracleConfigurationError, OracleError
from callbrief.pipeline.research import ResearchPipeline
from callbrief.pipeline.schemas import ChatQuery

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

_pipeline: ResearchPipeline | None = None


def _get_pipeline() -> ResearchPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = ResearchPipeline.from_settings(load_settings())
    return _pipeline


def _response(status: int, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle API Gateway request — retrieve, generate, return JSON."""
    try:
        body = json.loads(event.get("body") or "{}")
    except (json.JSONDecodeError, TypeError):
        return _response(400, {"error": "Invalid JSON body"})

    try:
        query = ChatQuery.from_body(body, require_tickers=False)
    except InvalidRequestError as exc:
        return _response(400, {"error": str(exc)})

    try:
        response = _get_pipeline().answer(query)
    except OracleConfigurationError as exc:
        return _response(500, {"error": str(exc)})
    except OracleError as exc:
        logger.error("Research query failed: %s", exc)
        return _response(500, {"error": f"RAG query failed: {exc}"})

    payload: dict[str, Any] = {"answer": response.answer}
    if response.matches:
        payload["metadata"] = response.metadata()
    return _response(200, payload)
