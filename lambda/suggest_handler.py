"""Lambda handler for suggested questions — triggered by API Gateway.

Thin wrapper around SuggestionPipeline. All business logic lives in src/callbrief/.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from callbrief.config import load_settings
from callbrief.errors import InvalidRequestError, OracleConfigurationError
from callbrief.pipeline.suggest import SuggestionPipeline

logger = logging.getLogger(__name__)
logger.setLevel(os.getenv("LOG_LEVEL", "INFO"))

_pipeline: SuggestionPipeline | None = None


def _get_pipeline() -> SuggestionPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = SuggestionPipeline.from_settings(load_settings())
    return _pipeline


def _response(status: int, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle API Gateway request — sample selected companies, suggest questions."""
    try:
        body = json.loads(event.get("body") or "{}")
    except (json.JSONDecodeError, TypeError):
        return _response(400, {"error": "Invalid JSON body"})

    selected = body.get("selectedSources") if isinstance(body, dict) else None
    if not isinstance(selected, list) or not selected:
        return _response(400, {"error": "No sources selected"})

    try:
        response = _get_pipeline().suggest([str(s) for s in selected])
    except InvalidRequestError as exc:
        return _response(400, {"error": str(exc)})
    except OracleConfigurationError as exc:
        return _response(500, {"error": str(exc)})

    payload: dict[str, Any] = {"suggestions": response.suggestions}
    if response.context_chunks:
        payload["metadata"] = response.metadata()
    return _response(200, payload)
