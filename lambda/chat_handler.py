"""Lambda handler for earnings chat — triggered by API Gateway.

Thin wrapper around ChatPipeline. All business logic lives in src/callbrief/.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from callbrief.config import load_settings
from callbrief.errors import InvalidRequestError
from callbrief.pipeline.chat import ChatPipeline
from callbrief.pipeline.schemas import ChatQuery

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

# Initialize outside handler for Lambda warm-start reuse
_pipeline: ChatPipeline | None = None


def _get_pipeline() -> ChatPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = ChatPipeline.from_settings(load_settings())
    return _pipeline


def _response(status: int, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle API Gateway request — validate, summarize, return JSON."""
    try:
        body = json.loads(event.get("body") or "{}")
    except (json.JSONDecodeError, TypeError):
        return _response(400, {"error": "Invalid JSON body"})

    try:
        query = ChatQuery.from_body(body)
    except InvalidRequestError as exc:
        return _response(400, {"error": str(exc)})

    response = _get_pipeline().answer(query)
    logger.info("Chat answered for %s via %s", response.tickers, response.mode)
    return _response(200, {"answer": response.answer})
